# -*- coding: utf-8 -*-
"""
02_pronoun_skew.py
==================

Purpose
-------
Which words follow "he" and which follow "she" in ~100k plot summaries?
Tokenizes every story into adjacent word pairs, keeps pairs that start with
one of the two pronouns, and scores each following word by the log2 ratio of
its Laplace-smoothed shares after the two pronouns.

What it does
------------
1) Loads config and the Step-01 story corpus (01_story_corpus.parquet).
2) Tokenizes per story (lowercase, punctuation stripped; pairs never cross
   stories) and keeps pairs with word1 in the pronoun set.
3) Counts word2 per pronoun, applies add-one smoothing per word *before*
   normalizing, computes log_ratio = log2(share_she / share_he).
4) Saves the full scored table and the display table (total >= --min-total),
   three dual-theme figures, a LaTeX table and a narrative.

Reading the numbers
-------------------
log_ratio = +1 means the word is twice as likely (relative to each pronoun's
own vocabulary) to follow the second pronoun; -1 means twice as likely after
the first. Counts are raw; only shares are smoothed.

CLI
---
# Full run (defaults from config: he/she, min_total=100, top_n=15)
python -m src.analysis.02_pronoun_skew

# Stricter display threshold
python -m src.analysis.02_pronoun_skew --min-total 200

# Another pronoun pair
python -m src.analysis.02_pronoun_skew --pronouns him her

# Self-check (random stories; writes *_selfcheck outputs only)
python -m src.analysis.02_pronoun_skew --selfcheck --sample 5000
"""
from __future__ import annotations

# --- Imports (keep at top) ---------------------------------------------------
import sys
import json
import time
import argparse
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

sys.path.append(str(Path(__file__).resolve().parents[2]))
from src.utils.theme_manager import load_config  # noqa: E402
from src.utils.academic_tables import skew_table_to_latex  # noqa: E402
from src.text.pronoun_skew import (  # noqa: E402
    compute_pronoun_skew,
    filter_by_total,
    normalize_pronouns,
    pronoun_pair_totals,
    top_skewed,
)
from src.visualization.pronoun_skew_plots import (  # noqa: E402
    plot_share_comparison,
    plot_skew_vs_frequency,
    plot_top_skewed_words,
)


# --- 1) Config & Paths -------------------------------------------------------
CONFIG = load_config()
SEED = int(CONFIG.get("reproducibility", {}).get("seed", 95))

DATA_DIR = Path(CONFIG["paths"]["data"])
FIGURES_DIR = Path(CONFIG["paths"]["figures"]) / "pronouns"
TABLES_DIR = Path(CONFIG["paths"]["tables"])
NARR_DIR = Path(CONFIG["paths"]["narratives"]) / "automated"

CORPUS_PATH = DATA_DIR / "01_story_corpus.parquet"

SKEW_CFG = CONFIG.get("skew", {})
PRONOUNS = tuple(SKEW_CFG.get("pronouns", ["he", "she"]))
MIN_TOTAL = int(SKEW_CFG.get("min_total", 100))
TOP_N = int(SKEW_CFG.get("top_n", 15))
LABEL_N = int(SKEW_CFG.get("label_n", 12))
EXCLUDE_WORDS = list(SKEW_CFG.get("exclude_words", []) or [])


# --- 2) Timers ---------------------------------------------------------------
def _t0(msg: str) -> float:
    print(msg)
    return time.perf_counter()

def _tend(label: str, t0: float) -> None:
    print(f"[TIME] {label}: {time.perf_counter() - t0:.2f}s")


# --- 3) Helpers --------------------------------------------------------------
def _read_corpus(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(
            f"Story corpus not found: {path}. Run Step 01 (src.analysis.01_story_corpus) first, "
            "or pass --corpus-path."
        )
    t0 = _t0(f"[READ] Parquet: {path}")
    df = pd.read_parquet(path)
    _tend("step02.load_corpus", t0)
    if "text" not in df.columns:
        raise KeyError(f"Required column 'text' missing in story corpus {path.name}.")
    return df


def _fmt_words(df: pd.DataFrame, k: int = 8) -> str:
    return ", ".join(f"“{w}”" for w in df["word2"].head(k)) or "none"


def _narrative(
    table: pd.DataFrame,
    shown: pd.DataFrame,
    totals: pd.Series,
    n_stories: int,
    pronouns: Sequence[str],
    min_total: int,
    selfcheck: bool,
) -> str:
    """Markdown commentary for the report (numbers only from this run)."""
    first, second = pronouns
    n_first, n_second = int(totals[first]), int(totals[second])
    md = [
        f"# 02 — Words after “{first}” vs “{second}”",
        f"- Stories analysed: **{n_stories:,}**" + (" (self-check sample)." if selfcheck else "."),
        f"- Pairs starting with “{first}”: **{n_first:,}**; with “{second}”: **{n_second:,}**.",
    ]
    if n_first + n_second == 0:
        md.append(f"\nNo pair in this corpus starts with “{first}” or “{second}”; nothing to score.")
        return "\n".join(md) + "\n"

    ratio = (n_first / n_second) if n_second else float("inf")
    md += [
        f"- Distinct following words: **{len(table):,}**; shown in charts (total ≥ {min_total}): **{len(shown):,}**.",
        f"- “{first}” opens {ratio:.2f}× as many pairs as “{second}”. Shares are normalized per "
        "pronoun, so the skew below is about *which* words follow, not how often each pronoun appears.",
        "",
        "## Quick readout",
    ]
    if shown.empty:
        md.append(f"- No word reaches the display threshold of {min_total} occurrences.")
    else:
        lean_second = shown[shown["log_ratio"] > 0]
        lean_first = shown[shown["log_ratio"] < 0].sort_values("log_ratio", kind="mergesort")
        md.append(f"- Most “{second}”-leaning: {_fmt_words(lean_second)}.")
        md.append(f"- Most “{first}”-leaning: {_fmt_words(lean_first)}.")
        top = shown.iloc[shown["abs_ratio"].to_numpy().argmax()]
        md.append(
            f"- Strongest skew: “{top['word2']}” ({int(top[f'{first}_count']):,} after “{first}”, "
            f"{int(top[f'{second}_count']):,} after “{second}”; log2 ratio {top['log_ratio']:+.2f}, "
            f"i.e. {2 ** top['abs_ratio']:.1f}× toward “{second if top['log_ratio'] > 0 else first}”)."
        )
    md.append("\n*Method:* add-one smoothing per word before normalizing; log_ratio = "
              f"log2(share after “{second}” / share after “{first}”).")
    return "\n".join(md) + "\n"


# --- 4) Main -----------------------------------------------------------------
def main(argv: Optional[List[str]] = None) -> None:
    """
    Run Step-02 pronoun skew analysis.

    Options
    -------
    --corpus-path STR   Story table parquet (default: Step-01 output).
    --pronouns A B      Pronoun pair; ratio is B over A (default from config).
    --min-total INT     Display threshold on total occurrences.
    --top-n INT         Words per side in the bar chart/LaTeX table.
    --exclude WORD ...  Extra word2 values to drop before counting.
    --selfcheck         Random story sample; writes *_selfcheck artefacts.
    --sample INT        Sample size for self-check (default: min(5000, N)).
    """
    p = argparse.ArgumentParser()
    p.add_argument("--corpus-path", type=str, default=None)
    p.add_argument("--pronouns", nargs=2, default=list(PRONOUNS), metavar=("FIRST", "SECOND"))
    p.add_argument("--min-total", type=int, default=MIN_TOTAL)
    p.add_argument("--top-n", type=int, default=TOP_N)
    p.add_argument("--exclude", nargs="*", default=[])
    p.add_argument("--selfcheck", action="store_true")
    p.add_argument("--sample", type=int, default=None)
    args = p.parse_args(argv)

    if args.min_total < 0:
        p.error("--min-total must be >= 0")
    if args.top_n <= 0:
        p.error("--top-n must be > 0")
    pronouns = normalize_pronouns(args.pronouns)
    first, second = pronouns

    t_all = time.perf_counter()
    print("--- Starting Step 02: Pronoun Skew ---")

    stories = _read_corpus(Path(args.corpus_path) if args.corpus_path else CORPUS_PATH)
    if args.selfcheck:
        n = min(args.sample or 5000, len(stories))
        stories = stories.sample(n=n, random_state=SEED, replace=False).reset_index(drop=True)
        print(f"[SELF-CHECK] Random sample drawn: {len(stories):,} stories (seed={SEED}).")
        suffix = "_selfcheck"
    else:
        suffix = ""
    print(f"\n[STATS] Stories considered: {len(stories):,}")

    # Core computation
    pronoun_pairs, table = compute_pronoun_skew(stories, pronouns, exclude_words=[*EXCLUDE_WORDS, *args.exclude])
    totals = pronoun_pair_totals(pronoun_pairs, pronouns)
    shown = filter_by_total(table, args.min_total)
    extremes = top_skewed(shown, n=args.top_n, pronouns=pronouns) if not shown.empty else shown.assign(direction=[])

    if table.empty:
        print(f"[WARN] No pairs start with '{first}' or '{second}'; the skew table is empty.")

    # Console summary
    print(f"\nPairs per pronoun: {first}={int(totals[first]):,}, {second}={int(totals[second]):,}")
    if not extremes.empty:
        print(f"\n=== Most skewed words (total >= {args.min_total}) ===")
        print(extremes[["word2", f"{first}_count", f"{second}_count", "total", "log_ratio"]]
              .to_string(index=False, float_format=lambda v: f"{v:+.3f}"))

    # Data artefacts
    print("\nSaving data artefacts...")
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    tag = f"{first}_{second}"

    def save_df(df_, name: str) -> Path:
        path = DATA_DIR / f"02_{name}{suffix}.csv"
        df_.to_csv(path, index=False)
        print(f"✓ Artefact saved: {path}")
        return path

    save_df(table, f"pronoun_skew_{tag}_full")
    save_df(shown, f"pronoun_skew_{tag}_min{args.min_total}")
    save_df(extremes, f"pronoun_skew_{tag}_top{args.top_n}")

    summary_path = DATA_DIR / f"02_pronoun_skew_{tag}_summary{suffix}.json"
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump({
            "pronouns": list(pronouns),
            "n_stories": int(len(stories)),
            "pairs_per_pronoun": {k: int(v) for k, v in totals.items()},
            "distinct_word2": int(len(table)),
            "min_total": int(args.min_total),
            "shown_word2": int(len(shown)),
        }, f, indent=2)
    print(f"✓ Artefact saved: {summary_path}")

    # Figures
    if not shown.empty:
        print("\nGenerating visualizations...")
        FIGURES_DIR.mkdir(parents=True, exist_ok=True)
        plot_top_skewed_words(data=extremes, pronouns=pronouns,
                              save_path=str(FIGURES_DIR / f"02_{tag}_top_skewed_bar{suffix}"),
                              figsize=(9, max(6, 0.32 * len(extremes))))
        plot_skew_vs_frequency(data=shown, pronouns=pronouns, label_n=LABEL_N,
                               save_path=str(FIGURES_DIR / f"02_{tag}_skew_vs_frequency{suffix}"),
                               figsize=(10, 7))
        plot_share_comparison(data=shown, pronouns=pronouns, label_n=LABEL_N,
                              save_path=str(FIGURES_DIR / f"02_{tag}_share_comparison{suffix}"),
                              figsize=(8, 8))
    else:
        print(f"[INFO] No word reaches total >= {args.min_total}; figures suppressed.")

    # Narrative + LaTeX
    print("\nGenerating narrative & LaTeX table...")
    NARR_DIR.mkdir(parents=True, exist_ok=True)
    md_path = NARR_DIR / f"02_pronoun_skew_{tag}_summary{suffix}.md"
    with open(md_path, "w", encoding="utf-8") as f:
        f.write(_narrative(table, shown, totals, len(stories), pronouns, args.min_total, args.selfcheck))
    print(f"✓ Narrative saved: {md_path}")

    if not extremes.empty:
        skew_table_to_latex(
            extremes,
            str(TABLES_DIR / f"02_pronoun_skew_{tag}{suffix}.tex"),
            caption=f"Words most skewed toward ``{first}'' or ``{second}'' (total $\\geq$ {args.min_total}).",
            label=f"tab:pronoun-skew-{tag}",
            pronouns=pronouns,
            note="Shares use add-one smoothing per word; log2 ratio = log2(share after "
                 f"{second} / share after {first}).",
        )

    _tend("step02.total_runtime", t_all)
    print("\n--- Step 02: Pronoun Skew Completed Successfully ---")


if __name__ == "__main__":
    main()
