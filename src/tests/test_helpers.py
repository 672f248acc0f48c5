"""
Helper functions for tests.
Never uses seed=42.
"""
import hashlib
import os

import numpy as np
import pandas as pd


def get_test_seed(test_name: str = "") -> int:
    """
    Generate a deterministic but non-42 seed for tests.
    Uses a combination of test name and a base seed.
    """
    base_seeds = [123, 456, 789, 1234, 5678, 9876, 2468, 1357, 8642, 7531]

    if test_name:
        idx = int(hashlib.md5(test_name.encode()).hexdigest()[:8], 16) % len(base_seeds)
    else:
        idx = os.getpid() % len(base_seeds)

    return base_seeds[idx]


def story_frame(texts, titles=None) -> pd.DataFrame:
    """Story table in the Step-01 layout from a list of texts."""
    titles = titles if titles is not None else [f"Story {i}" for i in range(len(texts))]
    return pd.DataFrame({
        "story_id": np.arange(len(texts), dtype="int64"),
        "title": titles,
        "text": texts,
        "n_lines": [1] * len(texts),
    })


VOCAB = ["kills", "runs", "says", "marries", "screams", "fights", "smiles",
         "is", "was", "tells", "finds", "cries", "the", "and", "her", "his"]


def synthetic_stories(n_stories: int, seed: int, words_per_story=(5, 60)) -> pd.DataFrame:
    """Random stories mixing pronouns, punctuation and capitalisation."""
    rng = np.random.default_rng(seed)
    tokens = np.array(VOCAB + ["he", "she", "He", "She", "he.", "she,"], dtype=object)
    lo, hi = words_per_story
    texts = [" ".join(rng.choice(tokens, size=int(rng.integers(lo, hi)))) for _ in range(n_stories)]
    return story_frame(texts)
