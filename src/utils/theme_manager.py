# -*- coding: utf-8 -*-
"""
theme_manager.py

Purpose
-------
Load the project configuration (config/settings.yaml) and provide a decorator
that renders any matplotlib chart of the pronoun-skew report in both light and
dark themes with the configured palettes, DPI and file naming.

Creates
-------
- Figures saved as <save_path>_light.png and <save_path>_dark.png (and PDFs
  if `viz.save_pdf` is enabled).

Config lookup
-------------
`PRONOUN_SKEW_CONFIG` (env var) overrides the default
<repo>/config/settings.yaml. A null/absent `project.root` resolves to the
repository root, so relative checkouts work without editing the YAML.
"""

import os
import functools
import time
import yaml
import matplotlib.pyplot as plt
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "settings.yaml"
ROOT_PLACEHOLDER = "${project.root}"


# --- 1. Configuration Loading ---

def _expand_root(value, root: str):
    """
    Recursively expand ${project.root} inside strings, dicts and lists.

    Parameters
    ----------
    value : Any
        A nested value (str/dict/list/other) from the parsed YAML.
    root : str
        Absolute project root used as the replacement.

    Returns
    -------
    Any
        The same structure with every placeholder expanded.
    """
    if isinstance(value, str) and ROOT_PLACEHOLDER in value:
        return value.replace(ROOT_PLACEHOLDER, root)
    if isinstance(value, dict):
        return {k: _expand_root(v, root) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_root(v, root) for v in value]
    return value


def config_path() -> Path:
    """Return the active config file (env override first)."""
    override = os.environ.get("PRONOUN_SKEW_CONFIG")
    return Path(override).resolve() if override else DEFAULT_CONFIG_PATH


def load_config(path=None):
    """
    Load the master YAML config and expand ${project.root} placeholders.

    Parameters
    ----------
    path : str | Path | None
        Explicit config file; defaults to `config_path()`.

    Returns
    -------
    dict | None
        Resolved configuration dict, or None if load/parse fails.

    Notes
    -----
    Prints elapsed time for reproducibility reporting.
    """
    t0 = time.perf_counter()
    cfg_file = Path(path) if path else config_path()
    try:
        with open(cfg_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
        project = config.setdefault('project', {})
        root = project.get('root') or str(PROJECT_ROOT)
        project['root'] = str(Path(root).resolve())
        resolved = _expand_root(config, project['root'])
        dt = time.perf_counter() - t0
        print(f"[TIME] theme_manager.load_config: {dt:.2f}s")
        return resolved
    except (OSError, yaml.YAMLError) as e:
        print(f"ERROR: Failed to load or parse configuration file {cfg_file}: {e}")
        return None


CONFIG = load_config()


def section_palette(section: str, theme: str) -> list:
    """Palette colours for a section/theme, falling back to the 'pronouns' section."""
    sections = CONFIG['viz']['palettes']['sections']
    return sections.get(section, sections['pronouns'])[theme]


# --- 2. Core Plotting Wrapper ---

def plot_dual_theme(section: str):
    """
    Decorator factory to render a plotting function in both light and dark themes.

    Parameters
    ----------
    section : str
        Palette section to use from settings.yaml (e.g. 'pronouns', 'corpus').

    Returns
    -------
    Callable
        A decorator that wraps a function with signature like
        `func(data, ax=None, palette=None, **kwargs)` and expects `save_path`
        in kwargs. The wrapped call returns the list of files written.

    Notes
    -----
    - Prints per-theme runtime and total runtime.
    - Requires CONFIG loaded successfully.
    """
    def decorator(plot_func):
        @functools.wraps(plot_func)
        def wrapper(*args, **kwargs):
            written = []
            if CONFIG is None:
                print("Aborting plot generation due to missing configuration.")
                return written

            save_path_base = kwargs.get("save_path")
            if not save_path_base:
                raise ValueError("Plotting function must be called with 'save_path'.")

            figsize = kwargs.get("figsize", (10, 8))
            Path(save_path_base).parent.mkdir(parents=True, exist_ok=True)
            viz = CONFIG['viz']

            t_all = time.perf_counter()
            for theme in ['light', 'dark']:
                t0 = time.perf_counter()
                print(f"Generating '{theme}' theme plot for section '{section}'...")

                theme_config = viz['themes'][theme]
                plt.style.use('seaborn-v0_8-whitegrid' if theme == 'light' else 'seaborn-v0_8-darkgrid')
                plt.rcParams.update({
                    'figure.facecolor': theme_config['facecolor'],
                    'axes.facecolor': theme_config['facecolor'],
                    'axes.labelcolor': theme_config['textcolor'],
                    'axes.edgecolor': theme_config['gridcolor'],
                    'xtick.color': theme_config['textcolor'],
                    'ytick.color': theme_config['textcolor'],
                    'text.color': theme_config['textcolor'],
                    'grid.color': theme_config['gridcolor'],
                    'legend.facecolor': theme_config['facecolor'],
                    'legend.edgecolor': theme_config['gridcolor']
                })

                fig, ax = plt.subplots(figsize=figsize)
                palette = section_palette(section, theme)

                try:
                    plot_func(*args, ax=ax, palette=palette, **kwargs)
                except Exception as e:
                    print(f"ERROR executing plotting function '{plot_func.__name__}': {e}")
                    plt.close(fig)
                    continue

                ax.title.set_color(theme_config['textcolor'])
                fig.tight_layout()

                if viz.get('save_png', True):
                    png = f"{save_path_base}_{theme}.png"
                    fig.savefig(png, dpi=viz['dpi'], bbox_inches='tight')
                    written.append(png)
                    print(f"✓ Artefact saved: {Path(png).resolve()}")

                if viz.get('save_pdf', False):
                    pdf = f"{save_path_base}_{theme}.pdf"
                    fig.savefig(pdf, bbox_inches='tight')
                    written.append(pdf)
                    print(f"✓ Artefact saved: {Path(pdf).resolve()}")

                plt.close(fig)
                print(f"[TIME] plot_dual_theme[{theme}] {plot_func.__name__}: {time.perf_counter() - t0:.2f}s")

            print(f"[TIME] plot_dual_theme[total] {plot_func.__name__}: {time.perf_counter() - t_all:.2f}s")
            return written
        return wrapper
    return decorator
