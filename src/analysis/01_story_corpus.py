# -*- coding: utf-8 -*-
"""
01_story_corpus.py
==================

Purpose
-------
Build the canonical story table from the raw plots/titles files and save it as
parquet for the later steps, together with headline corpus statistics.

What it does
------------
1) Loads config (seed=95 by default).
2) Reads `plots` (sentences, stories closed by "<EOS>") and `titles`
   (one per line) from paths.raw, or from --plots-path / --titles-path.
3) Verifies one title per story (aborts on misalignment).
4) Saves 01_story_corpus.parquet, 01_corpus_stats.json, a words-per-story
   histogram and a short narrative.

Self-check
----------
--selfcheck draws a random sample of stories (config seed); artefacts are
suffixed *_selfcheck and never overwrite full-run files.

CLI
---
# Full run
python -m src.analysis.01_story_corpus

# Explicit raw files
python -m src.analysis.01_story_corpus --plots-path data/raw/plots --titles-path data/raw/titles

# Self-check
python -m src.analysis.01_story_corpus --selfcheck --sample 2000
"""
from __future__ import annotations

# --- Imports (keep at top) ---------------------------------------------------
import sys
import json
import time
import argparse
from pathlib import Path
from typing import List, Optional

sys.path.append(str(Path(__file__).resolve().parents[2]))
from src.utils.theme_manager import load_config  # noqa: E402
from src.data.story_corpus import load_story_corpus, corpus_stats  # noqa: E402
from src.visualization.pronoun_skew_plots import plot_words_per_story  # noqa: E402
from src.text.tokenization import WORD_PATTERN  # noqa: E402


# --- 1) Config & Paths -------------------------------------------------------
CONFIG = load_config()
SEED = int(CONFIG.get("reproducibility", {}).get("seed", 95))

RAW_DIR = Path(CONFIG["paths"]["raw"])
DATA_DIR = Path(CONFIG["paths"]["data"])
FIGURES_DIR = Path(CONFIG["paths"]["figures"]) / "corpus"
NARR_DIR = Path(CONFIG["paths"]["narratives"]) / "automated"

CORPUS_CFG = CONFIG.get("corpus", {})
PLOTS_PATH = RAW_DIR / CORPUS_CFG.get("plots_file", "plots")
TITLES_PATH = RAW_DIR / CORPUS_CFG.get("titles_file", "titles")
SEPARATOR = CORPUS_CFG.get("story_separator", "<EOS>")


# --- 2) Timers ---------------------------------------------------------------
def _t0(msg: str) -> float:
    print(msg)
    return time.perf_counter()

def _tend(label: str, t0: float) -> None:
    print(f"[TIME] {label}: {time.perf_counter() - t0:.2f}s")


# --- 3) Narrative ------------------------------------------------------------
def _narrative(stats: dict, plots_path: Path, titles_path: Path, selfcheck: bool) -> str:
    lines = [
        "# 01 — Story Corpus",
        f"- Sources: `{plots_path.name}` (plots), `{titles_path.name}` (titles).",
        f"- Stories: **{stats['n_stories']:,}**"
        + (" (random self-check sample)." if selfcheck else "."),
        f"- Words (after lowercasing and punctuation stripping): **{stats['n_words']:,}**.",
        f"- Words per story: median **{stats['median_words_per_story']:.0f}**, "
        f"mean **{stats['mean_words_per_story']:.1f}**, max **{stats['max_words_per_story']:,}**.",
    ]
    if stats['n_empty_stories']:
        lines.append(f"- Stories with no words: **{stats['n_empty_stories']:,}** "
                     "(kept so titles stay aligned; they contribute no word pairs).")
    return "\n".join(lines) + "\n"


# --- 4) Main -----------------------------------------------------------------
def main(argv: Optional[List[str]] = None) -> None:
    """
    Run Step-01 story corpus assembly.

    Options
    -------
    --plots-path STR   Raw plots file (default: paths.raw/corpus.plots_file).
    --titles-path STR  Raw titles file (default: paths.raw/corpus.titles_file).
    --selfcheck        Random story sample; writes *_selfcheck artefacts.
    --sample INT       Sample size for self-check (default: min(2000, N)).
    """
    p = argparse.ArgumentParser()
    p.add_argument("--plots-path", type=str, default=None)
    p.add_argument("--titles-path", type=str, default=None)
    p.add_argument("--selfcheck", action="store_true")
    p.add_argument("--sample", type=int, default=None)
    args = p.parse_args(argv)

    t_all = time.perf_counter()
    print("--- Starting Step 01: Story Corpus ---")

    plots_path = Path(args.plots_path) if args.plots_path else PLOTS_PATH
    titles_path = Path(args.titles_path) if args.titles_path else TITLES_PATH
    stories = load_story_corpus(plots_path, titles_path, separator=SEPARATOR)

    if args.selfcheck:
        n = min(args.sample or 2000, len(stories))
        stories = stories.sample(n=n, random_state=SEED, replace=False).sort_values("story_id").reset_index(drop=True)
        print(f"[SELF-CHECK] Random sample drawn: {len(stories):,} stories (seed={SEED}).")
        suffix = "_selfcheck"
    else:
        suffix = ""

    t0 = _t0("Computing corpus statistics ...")
    stats = corpus_stats(stories)
    _tend("step01.corpus_stats", t0)
    print(f"\n[STATS] Stories: {stats['n_stories']:,} | words: {stats['n_words']:,}")

    DATA_DIR.mkdir(parents=True, exist_ok=True)
    NARR_DIR.mkdir(parents=True, exist_ok=True)

    out_parquet = DATA_DIR / f"01_story_corpus{suffix}.parquet"
    stories.to_parquet(out_parquet, index=False)
    print(f"✓ Artefact saved: {out_parquet}")

    out_json = DATA_DIR / f"01_corpus_stats{suffix}.json"
    with open(out_json, "w", encoding="utf-8") as f:
        json.dump(stats, f, indent=2)
    print(f"✓ Artefact saved: {out_json}")

    words_per_story = stories["text"].fillna("").astype(str).str.lower().str.count(WORD_PATTERN)
    plot_words_per_story(data=words_per_story, save_path=str(FIGURES_DIR / f"01_words_per_story{suffix}"), figsize=(9, 6))

    md_path = NARR_DIR / f"01_story_corpus_summary{suffix}.md"
    with open(md_path, "w", encoding="utf-8") as f:
        f.write(_narrative(stats, plots_path, titles_path, args.selfcheck))
    print(f"✓ Narrative saved: {md_path}")

    _tend("step01.total_runtime", t_all)
    print("\n--- Step 01: Story Corpus Completed Successfully ---")


if __name__ == "__main__":
    main()
