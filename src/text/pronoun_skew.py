# -*- coding: utf-8 -*-
"""
pronoun_skew.py

Purpose
-------
Score how strongly each word following a pronoun leans toward one pronoun of a
pair (default "he"/"she").

Method
------
1) Keep word pairs whose first word is one of the two pronouns.
2) Count, per following word (word2), how often it follows each pronoun.
3) Add one to every count *per word*, then normalize each pronoun's counts
   into a distribution over the observed word2 vocabulary:
       share_p(w) = (count_p(w) + 1) / sum_w' (count_p(w') + 1)
4) log_ratio = log2(share_second / share_first); positive leans toward the
   second pronoun ("she"), negative toward the first ("he").

Output columns (default pronouns)
---------------------------------
word2, he_count, she_count, total, he_share, she_share, log_ratio, abs_ratio
sorted by log_ratio descending.
"""

from __future__ import annotations

import time
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from src.text.tokenization import unnest_word_pairs

DEFAULT_PRONOUNS: Tuple[str, str] = ("he", "she")
SMOOTHING = 1
EVEN = "even"


# --- 1) Validation helpers ----------------------------------------------------
def normalize_pronouns(pronouns: Optional[Sequence[str]] = None) -> Tuple[str, str]:
    """Lowercase/strip the pronoun pair and require exactly two distinct words."""
    if pronouns is None:
        return DEFAULT_PRONOUNS
    if isinstance(pronouns, str):
        raise ValueError("Pronouns must be a sequence of two words, not a single string.")
    cleaned = tuple(str(p).strip().lower() for p in pronouns)
    if len(cleaned) != 2 or len(set(cleaned)) != 2 or not all(cleaned):
        raise ValueError(f"Expected exactly two distinct, non-empty pronouns; got {list(pronouns)!r}.")
    return cleaned


def count_columns(pronouns: Sequence[str]) -> List[str]:
    return [f"{p}_count" for p in pronouns]


def share_columns(pronouns: Sequence[str]) -> List[str]:
    return [f"{p}_share" for p in pronouns]


def skew_columns(pronouns: Sequence[str] = DEFAULT_PRONOUNS) -> List[str]:
    """Column order of a scored table."""
    return ['word2', *count_columns(pronouns), 'total', *share_columns(pronouns), 'log_ratio', 'abs_ratio']


def _validate_counts(counts: pd.DataFrame, cols: List[str]) -> None:
    """
    Fail fast on malformed count tables.

    Raises
    ------
    TypeError
        If `counts` is not a DataFrame.
    KeyError
        If 'word2' or a pronoun count column is missing.
    ValueError
        If counts are missing, non-integer, negative, or word2 repeats.
    """
    if not isinstance(counts, pd.DataFrame):
        raise TypeError("Counts must be a pandas DataFrame.")
    missing = [c for c in ['word2', *cols] if c not in counts.columns]
    if missing:
        raise KeyError(f"Count table is missing required column(s): {missing}")
    if counts['word2'].duplicated().any():
        dups = counts.loc[counts['word2'].duplicated(), 'word2'].head(5).tolist()
        raise ValueError(f"word2 must be unique in the count table; duplicates include {dups}")
    for c in cols:
        s = counts[c]
        if s.isna().any():
            raise ValueError(f"Column '{c}' contains missing counts.")
        if pd.api.types.is_bool_dtype(s) or s.map(lambda v: isinstance(v, (str, bytes, bool, np.bool_))).any():
            raise ValueError(f"Column '{c}' must hold integer counts (dtype {s.dtype}).")
        numeric = pd.to_numeric(s, errors='coerce')
        if numeric.isna().any():
            raise ValueError(f"Column '{c}' must hold integer counts (dtype {s.dtype}).")
        values = numeric.to_numpy(dtype=float)
        if not np.all(np.isfinite(values)) or not np.all(values == np.floor(values)):
            raise ValueError(f"Column '{c}' must hold whole-number counts.")
        if (values < 0).any():
            raise ValueError(f"Column '{c}' contains negative counts.")


# --- 2) Filter & aggregate ----------------------------------------------------
def filter_pronoun_pairs(pairs: pd.DataFrame, pronouns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Pairs whose word1 is one of the pronouns, original order kept."""
    pronouns = normalize_pronouns(pronouns)
    return pairs[pairs['word1'].isin(pronouns)]


def drop_excluded_words(pairs: pd.DataFrame, exclude_words: Iterable[str] = ()) -> pd.DataFrame:
    """Pairs whose word2 is not in `exclude_words` (case-insensitive)."""
    excluded = {str(w).strip().lower() for w in exclude_words}
    if not excluded:
        return pairs
    return pairs[~pairs['word2'].isin(excluded)]


def count_following_words(
    pairs: pd.DataFrame,
    pronouns: Optional[Sequence[str]] = None,
    exclude_words: Iterable[str] = (),
) -> pd.DataFrame:
    """
    Per-word2 raw counts after each pronoun.

    Only words observed after at least one pronoun appear. `exclude_words`
    drops word2 values (case-insensitive) before counting.
    """
    pronouns = normalize_pronouns(pronouns)
    cols = count_columns(pronouns)
    sub = drop_excluded_words(filter_pronoun_pairs(pairs, pronouns), exclude_words)
    if sub.empty:
        return pd.DataFrame({'word2': pd.Series(dtype=object),
                             **{c: pd.Series(dtype='int64') for c in cols}})

    counts = (sub.groupby(['word2', 'word1']).size()
                 .unstack('word1', fill_value=0)
                 .reindex(columns=list(pronouns), fill_value=0)
                 .astype('int64'))
    counts.columns = cols
    counts.columns.name = None
    return counts.rename_axis('word2').reset_index()


def pronoun_pair_totals(pairs: pd.DataFrame, pronouns: Optional[Sequence[str]] = None) -> pd.Series:
    """Number of pairs starting with each pronoun (zero-filled)."""
    pronouns = normalize_pronouns(pronouns)
    return (filter_pronoun_pairs(pairs, pronouns)['word1']
            .value_counts()
            .reindex(list(pronouns), fill_value=0)
            .astype('int64'))


# --- 3) Score -----------------------------------------------------------------
def score_skew(counts: pd.DataFrame, pronouns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Laplace-smoothed log2 share ratio per word2.

    Parameters
    ----------
    counts : pd.DataFrame
        Columns 'word2' and '<pronoun>_count' for both pronouns.
    pronouns : (first, second)
        The ratio is second / first.

    Returns
    -------
    pd.DataFrame
        `skew_columns(pronouns)`, sorted by log_ratio descending (ties by word2).

    Notes
    -----
    - +1 is added to each word's count before summing, so both share columns
      sum to 1 and a zero count never yields log(0).
    - Rows with a zero total are dropped; they carry no observation.
    """
    pronouns = normalize_pronouns(pronouns)
    first_c, second_c = count_columns(pronouns)
    first_s, second_s = share_columns(pronouns)
    _validate_counts(counts, [first_c, second_c])

    d = counts[['word2', first_c, second_c]].copy()
    d[first_c] = pd.to_numeric(d[first_c]).astype('int64')
    d[second_c] = pd.to_numeric(d[second_c]).astype('int64')
    d['total'] = d[first_c] + d[second_c]
    d = d[d['total'] > 0].copy()
    if d.empty:
        return pd.DataFrame({c: pd.Series(dtype=object if c == 'word2' else float)
                             for c in skew_columns(pronouns)})

    smoothed_first = d[first_c] + SMOOTHING
    smoothed_second = d[second_c] + SMOOTHING
    d[first_s] = smoothed_first / smoothed_first.sum()
    d[second_s] = smoothed_second / smoothed_second.sum()
    d['log_ratio'] = np.log2(d[second_s] / d[first_s])
    d['abs_ratio'] = d['log_ratio'].abs()

    d = d.sort_values('word2', kind='mergesort').sort_values('log_ratio', ascending=False, kind='mergesort')
    return d[skew_columns(pronouns)].reset_index(drop=True)


# --- 4) Display helpers ---------------------------------------------------------
def filter_by_total(table: pd.DataFrame, min_total: int) -> pd.DataFrame:
    """Rows with total >= min_total, canonical order preserved."""
    if isinstance(min_total, bool) or not isinstance(min_total, (int, np.integer)) or min_total < 0:
        raise ValueError(f"min_total must be a non-negative integer; got {min_total!r}.")
    return table[table['total'] >= min_total].reset_index(drop=True)


def lean_direction(log_ratio: pd.Series, pronouns: Optional[Sequence[str]] = None) -> np.ndarray:
    """First pronoun for log_ratio < 0, second for > 0, EVEN for exactly 0."""
    first, second = normalize_pronouns(pronouns)
    return np.select([log_ratio < 0, log_ratio > 0], [first, second], default=EVEN)


def top_skewed(table: pd.DataFrame, n: int = 15, pronouns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    The `n` most skewed words on each side.

    A 'direction' column names the pronoun a word leans toward (see
    `lean_direction`). Words with log_ratio == 0 lean toward neither and are
    left out. Result is ordered by log_ratio descending.
    """
    pronouns = normalize_pronouns(pronouns)
    if n <= 0:
        raise ValueError(f"n must be positive; got {n!r}.")
    d = table.copy()
    d['direction'] = lean_direction(d['log_ratio'], pronouns)
    d = d[d['direction'] != EVEN]
    picked = (d.sort_values(['abs_ratio', 'word2'], ascending=[False, True], kind='mergesort')
               .groupby('direction', sort=False)
               .head(n))
    return picked.sort_values('log_ratio', ascending=False, kind='mergesort').reset_index(drop=True)


# --- 5) One-call pipeline -------------------------------------------------------
def compute_pronoun_skew(
    stories: pd.DataFrame,
    pronouns: Optional[Sequence[str]] = None,
    exclude_words: Iterable[str] = (),
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Tokenize -> filter -> count -> score.

    Returns
    -------
    (pronoun_pairs, skew_table)
    """
    pronouns = normalize_pronouns(pronouns)
    pairs = unnest_word_pairs(stories)
    pronoun_pairs = drop_excluded_words(filter_pronoun_pairs(pairs, pronouns), exclude_words).reset_index(drop=True)
    t0 = time.perf_counter()
    counts = count_following_words(pronoun_pairs, pronouns)
    table = score_skew(counts, pronouns)
    print(f"[TIME] pronoun_skew.score: {time.perf_counter() - t0:.2f}s "
          f"(pronoun pairs: {len(pronoun_pairs):,}; distinct word2: {len(table):,})")
    return pronoun_pairs, table
