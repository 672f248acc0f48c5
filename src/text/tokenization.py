# -*- coding: utf-8 -*-
"""
tokenization.py

Purpose
-------
Turn story text into lowercase word tokens and adjacent word pairs (bigrams).

Rules
-----
- Lowercase first, then keep runs of word characters; an apostrophe between
  two word runs stays inside the token ("don't", "o'brien").
- Everything else (punctuation, quotes, dashes) is a separator, so "He." and
  "he" both become "he".
- Pairs are built per story; a story with fewer than two words has no pairs
  and no pair ever spans two stories.
"""

from __future__ import annotations

import re
import time
import itertools
from typing import Iterator, List, Tuple

import numpy as np
import pandas as pd

WORD_PATTERN = re.compile(r"\w+(?:['’]\w+)*")

PAIR_COLUMNS = ["story_id", "title", "word1", "word2"]


def tokenize_words(text: str) -> List[str]:
    """Lowercased word tokens of `text` in reading order."""
    if not isinstance(text, str) or not text:
        return []
    return WORD_PATTERN.findall(text.lower())


def iter_word_pairs(text: str) -> Iterator[Tuple[str, str]]:
    """Lazily yield (word_i, word_i+1) windows of one story's text."""
    words = tokenize_words(text)
    return zip(words, itertools.islice(words, 1, None))


def unnest_word_pairs(stories: pd.DataFrame, text_col: str = "text") -> pd.DataFrame:
    """
    Explode a story table into one row per adjacent word pair.

    Parameters
    ----------
    stories : pd.DataFrame
        One row per story. `story_id` and `title` are carried through when
        present; otherwise the positional row number and '' are used.
    text_col : str
        Column holding the story text.

    Returns
    -------
    pd.DataFrame
        Columns ['story_id', 'title', 'word1', 'word2'] in story order, then
        reading order within each story.

    Notes
    -----
    - One pass over all tokens: explode, then pair each token with its
      successor and keep the pairs whose two tokens share a story row.
    - Complexity ~ O(total tokens).
    """
    if text_col not in stories.columns:
        raise KeyError(f"Story table has no '{text_col}' column.")
    t0 = time.perf_counter()

    d = stories.reset_index(drop=True)
    story_ids = d['story_id'].to_numpy() if 'story_id' in d.columns else np.arange(len(d))
    titles = d['title'].fillna('').astype(str).to_numpy() if 'title' in d.columns else np.full(len(d), '', dtype=object)

    tokens = d[text_col].fillna('').astype(str).str.lower().str.findall(WORD_PATTERN)
    words = tokens.explode().dropna()
    if words.empty:
        print("[INFO] No tokens found in story table.")
        return pd.DataFrame(columns=PAIR_COLUMNS)

    row = words.index.to_numpy()
    w = words.to_numpy(dtype=object)
    same_story = row[:-1] == row[1:]
    row_pair = row[:-1][same_story]

    pairs = pd.DataFrame({
        'story_id': story_ids[row_pair],
        'title': titles[row_pair],
        'word1': w[:-1][same_story],
        'word2': w[1:][same_story],
    })
    print(f"[TIME] tokenization.unnest_word_pairs: {time.perf_counter() - t0:.2f}s "
          f"(stories: {len(d):,}; tokens: {len(w):,}; pairs: {len(pairs):,})")
    return pairs
