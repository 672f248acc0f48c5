# -*- coding: utf-8 -*-
"""
story_corpus.py

Purpose
-------
Assemble the story table from the two raw WikiPlots-style text files:

- plots  : one sentence per line; a line equal to the separator (default
           "<EOS>") closes a story.
- titles : one title per line, index-aligned with the stories.

The result has one row per story: story_id (0-based position), title, text
(the story's lines joined by single spaces), n_lines.

Alignment is strict: a different number of stories and titles aborts the run,
because titles would silently attach to the wrong plots.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import List, Sequence, Union

import numpy as np
import pandas as pd

from src.text.tokenization import WORD_PATTERN

DEFAULT_SEPARATOR = "<EOS>"
STORY_COLUMNS = ["story_id", "title", "text", "n_lines"]

PathLike = Union[str, Path]


def _require_file(path: PathLike, what: str) -> Path:
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"{what} file not found: {p}")
    return p


def split_stories(lines: Sequence[str], separator: str = DEFAULT_SEPARATOR) -> List[List[str]]:
    """
    Group plot lines into stories at each separator line.

    A trailing chunk after the last separator is kept only when it holds text,
    so both "...<EOS>" and "...<EOS>\\nlast story" layouts work. Stories between
    two consecutive separators are kept (empty) to preserve title alignment.
    """
    stories: List[List[str]] = []
    current: List[str] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        if line.strip() == separator:
            stories.append(current)
            current = []
        else:
            current.append(line)
    if any(s.strip() for s in current):
        stories.append(current)
    return stories


def read_story_lines(plots_path: PathLike, separator: str = DEFAULT_SEPARATOR) -> List[List[str]]:
    """Read the plots file and split it into per-story line lists."""
    p = _require_file(plots_path, "Plots")
    with open(p, 'r', encoding='utf-8') as f:
        return split_stories(f, separator)


def read_titles(titles_path: PathLike) -> List[str]:
    """One title per line; a trailing blank line at EOF is ignored."""
    p = _require_file(titles_path, "Titles")
    with open(p, 'r', encoding='utf-8') as f:
        titles = [line.rstrip("\r\n") for line in f]
    while titles and not titles[-1].strip():
        titles.pop()
    return titles


def assemble_stories(story_lines: Sequence[Sequence[str]], titles: Sequence[str]) -> pd.DataFrame:
    """
    Zip stories with their titles into the story table.

    Raises
    ------
    ValueError
        If the number of stories and titles differ.
    """
    if len(story_lines) != len(titles):
        raise ValueError(
            f"Story/title misalignment: {len(story_lines):,} stories in plots "
            f"but {len(titles):,} titles. Check that both files come from the same release."
        )
    texts = [" ".join(l.strip() for l in lines if l.strip()) for lines in story_lines]
    return pd.DataFrame({
        'story_id': np.arange(len(texts), dtype='int64'),
        'title': pd.Series(list(titles), dtype=object),
        'text': pd.Series(texts, dtype=object),
        'n_lines': np.array([sum(1 for l in lines if l.strip()) for lines in story_lines], dtype='int64'),
    }, columns=STORY_COLUMNS)


def load_story_corpus(
    plots_path: PathLike,
    titles_path: PathLike,
    separator: str = DEFAULT_SEPARATOR,
) -> pd.DataFrame:
    """Read both raw files and return the aligned story table."""
    t0 = time.perf_counter()
    print(f"[READ] Plots: {plots_path}")
    story_lines = read_story_lines(plots_path, separator)
    print(f"[READ] Titles: {titles_path}")
    titles = read_titles(titles_path)
    stories = assemble_stories(story_lines, titles)
    print(f"[TIME] story_corpus.load_story_corpus: {time.perf_counter() - t0:.2f}s "
          f"(stories: {len(stories):,})")
    return stories


def corpus_stats(stories: pd.DataFrame) -> dict:
    """Headline numbers for the corpus narrative (stories, words, words/story)."""
    n_words = stories['text'].fillna('').astype(str).str.lower().str.count(WORD_PATTERN)
    return {
        'n_stories': int(len(stories)),
        'n_words': int(n_words.sum()),
        'n_empty_stories': int((n_words == 0).sum()),
        'median_words_per_story': float(n_words.median()) if len(n_words) else 0.0,
        'mean_words_per_story': round(float(n_words.mean()), 1) if len(n_words) else 0.0,
        'max_words_per_story': int(n_words.max()) if len(n_words) else 0,
    }
