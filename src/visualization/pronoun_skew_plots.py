# -*- coding: utf-8 -*-
"""
pronoun_skew_plots.py
=====================

Dual-theme figures for the pronoun-skew report. Each function takes a scored
table (see src/text/pronoun_skew.py) and must be called with `save_path`;
`plot_dual_theme` writes <save_path>_light.png / _dark.png.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import seaborn as sns
import matplotlib.ticker as mticker

from src.utils.theme_manager import plot_dual_theme
from src.text.pronoun_skew import EVEN, lean_direction


def _pronoun_names(data: pd.DataFrame, pronouns=None):
    if pronouns is not None:
        return tuple(pronouns)
    firsts = [c[:-len('_count')] for c in data.columns if c.endswith('_count')]
    return tuple(firsts[:2]) if len(firsts) >= 2 else ("he", "she")


def _log2_ratio_formatter(first: str, second: str) -> mticker.FuncFormatter:
    """Tick labels like '4x she' / '4x he' instead of raw log2 values."""
    def fmt(v, _pos):
        if np.isclose(v, 0):
            return "even"
        times = 2 ** abs(v)
        return f"{times:.0f}x {second if v > 0 else first}" if times >= 2 else f"{times:.1f}x {second if v > 0 else first}"
    return mticker.FuncFormatter(fmt)


@plot_dual_theme(section='pronouns')
def plot_top_skewed_words(data: pd.DataFrame, pronouns=None, ax=None, palette=None, **kwargs):
    """Diverging bar chart: the most he-/she-leaning following words."""
    first, second = _pronoun_names(data, pronouns)
    d = data.sort_values('log_ratio')
    colors = {first: palette[0], second: palette[1]}
    sns.barplot(x='log_ratio', y='word2', hue='direction', data=d, palette=colors,
                dodge=False, ax=ax, orient='h')
    ax.axvline(0, color=palette[2], lw=1)
    ax.xaxis.set_major_formatter(_log2_ratio_formatter(first, second))
    ax.set_title(f'Words most skewed toward "{first}" vs "{second}"')
    ax.set_xlabel(f'Relative appearance after "{second}" compared to "{first}"')
    ax.set_ylabel(None)
    ax.legend(title='Leans toward', loc='lower center', bbox_to_anchor=(0.5, 1.06), ncol=2, frameon=False)


@plot_dual_theme(section='pronouns')
def plot_skew_vs_frequency(data: pd.DataFrame, pronouns=None, label_n: int = 12, ax=None, palette=None, **kwargs):
    """Scatter of total occurrences (log x) against log_ratio, extremes labelled."""
    first, second = _pronoun_names(data, pronouns)
    d = data.copy()
    d['Leans'] = lean_direction(d['log_ratio'], (first, second))
    sns.scatterplot(x='total', y='log_ratio', hue='Leans', data=d,
                    palette={first: palette[0], second: palette[1], EVEN: palette[2]},
                    hue_order=[first, second, EVEN], alpha=0.6, s=25, edgecolor=None, ax=ax)
    ax.set_xscale('log')
    ax.axhline(0, color=palette[2], lw=1, ls='--')
    for _, row in d.nlargest(label_n, 'abs_ratio').iterrows():
        ax.annotate(row['word2'], (row['total'], row['log_ratio']),
                    xytext=(3, 3), textcoords='offset points', fontsize=9)
    ax.yaxis.set_major_formatter(_log2_ratio_formatter(first, second))
    ax.set_title(f'Skew vs frequency of words after "{first}"/"{second}"')
    ax.set_xlabel(f'Total occurrences after "{first}" or "{second}" (log scale)')
    ax.set_ylabel('Skew')


@plot_dual_theme(section='pronouns')
def plot_share_comparison(data: pd.DataFrame, pronouns=None, label_n: int = 12, ax=None, palette=None, **kwargs):
    """Log-log scatter of smoothed shares with the equal-share diagonal."""
    first, second = _pronoun_names(data, pronouns)
    x, y = f'{first}_share', f'{second}_share'
    ax.scatter(data[x], data[y], s=18, alpha=0.5, color=palette[3 % len(palette)])
    lo = float(min(data[x].min(), data[y].min()))
    hi = float(max(data[x].max(), data[y].max()))
    ax.plot([lo, hi], [lo, hi], color=palette[2], lw=1, ls='--', label='equal share')
    ax.set_xscale('log'); ax.set_yscale('log')
    for _, row in data.nlargest(label_n, 'total').iterrows():
        ax.annotate(row['word2'], (row[x], row[y]), xytext=(3, -8), textcoords='offset points', fontsize=8)
    ax.set_title(f'Smoothed share after "{first}" vs after "{second}"')
    ax.set_xlabel(f'Share after "{first}"'); ax.set_ylabel(f'Share after "{second}"')
    ax.legend(loc='upper left', frameon=False)


@plot_dual_theme(section='corpus')
def plot_words_per_story(data: pd.Series, ax=None, palette=None, **kwargs):
    """Histogram of words per story (log-spaced bins)."""
    counts = data[data > 0]
    if counts.empty:
        ax.set_visible(False); return
    bins = np.logspace(0, np.log10(max(int(counts.max()), 2)), 40)
    ax.hist(counts, bins=bins, color=palette[0])
    ax.set_xscale('log')
    ax.set_title('Story length'); ax.set_xlabel('Words per story (log scale)'); ax.set_ylabel('Stories')
