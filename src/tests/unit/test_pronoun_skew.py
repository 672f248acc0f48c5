"""
Unit tests for the pronoun filter, word2 counting and skew scoring.
"""
import math

import pytest
import numpy as np
import pandas as pd
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(__file__)))))

from src.text.tokenization import unnest_word_pairs
from src.text.pronoun_skew import (
    compute_pronoun_skew,
    count_following_words,
    filter_by_total,
    filter_pronoun_pairs,
    lean_direction,
    normalize_pronouns,
    pronoun_pair_totals,
    score_skew,
    skew_columns,
    top_skewed,
)
from src.tests.test_helpers import story_frame


def _counts(rows):
    return pd.DataFrame(rows, columns=["word2", "he_count", "she_count"])


class TestPronounFilter:
    """Pure predicate on word1"""

    def test_keeps_only_pronoun_pairs_in_order(self):
        pairs = pd.DataFrame({"word1": ["he", "the", "she", "he", "him"],
                              "word2": ["a", "b", "c", "d", "e"]})
        out = filter_pronoun_pairs(pairs)
        assert out["word2"].tolist() == ["a", "c", "d"]
        assert len(pairs) == 5, "Input must not be modified"

    def test_case_and_punctuation_normalized_before_matching(self):
        pairs = unnest_word_pairs(story_frame(["He runs. she. Cries"]))
        out = filter_pronoun_pairs(pairs)
        assert list(zip(out["word1"], out["word2"])) == [("he", "runs"), ("she", "cries")]

    @pytest.mark.parametrize("bad", [["he"], ["he", "he"], ["he", ""], "he she", ["a", "b", "c"]])
    def test_invalid_pronoun_sets(self, bad):
        with pytest.raises(ValueError):
            normalize_pronouns(bad)

    def test_pronouns_are_normalized(self):
        assert normalize_pronouns([" He", "SHE "]) == ("he", "she")


class TestCountFollowingWords:
    """Aggregation per word2"""

    def test_worked_example(self):
        pairs = unnest_word_pairs(story_frame(["he kills she kills he kills"]))
        counts = count_following_words(pairs).set_index("word2")
        assert counts.loc["kills", "he_count"] == 2
        assert counts.loc["kills", "she_count"] == 1
        assert set(counts.index) == {"kills"}, "Only words seen after a pronoun are counted"

    def test_counts_sum_to_pronoun_pairs(self):
        pairs = unnest_word_pairs(story_frame(["he runs and she runs", "she cries he laughs he runs"]))
        counts = count_following_words(pairs)
        n_pronoun_pairs = len(filter_pronoun_pairs(pairs))
        assert int((counts["he_count"] + counts["she_count"]).sum()) == n_pronoun_pairs

    def test_zero_fill_for_missing_pronoun(self):
        pairs = unnest_word_pairs(story_frame(["he runs he cries"]))
        counts = count_following_words(pairs)
        assert (counts["she_count"] == 0).all()
        assert counts["she_count"].dtype == np.int64

    def test_exclude_words(self):
        pairs = unnest_word_pairs(story_frame(["he himself runs she herself runs she runs"]))
        counts = count_following_words(pairs, exclude_words=["Himself", "herself"])
        assert counts["word2"].tolist() == ["runs"]

    def test_no_pronoun_pairs(self):
        pairs = unnest_word_pairs(story_frame(["the dog runs"]))
        counts = count_following_words(pairs)
        assert counts.empty
        assert list(counts.columns) == ["word2", "he_count", "she_count"]

    def test_pronoun_pair_totals(self):
        pairs = unnest_word_pairs(story_frame(["he runs he cries she smiles"]))
        totals = pronoun_pair_totals(pairs)
        assert totals.to_dict() == {"he": 2, "she": 1}


class TestScoreSkew:
    """Smoothed shares and log ratio"""

    def test_columns_and_raw_counts(self):
        table = score_skew(_counts([("kills", 2, 1)]))
        assert list(table.columns) == skew_columns()
        row = table.iloc[0]
        assert (row["he_count"], row["she_count"], row["total"]) == (2, 1, 3)

    def test_smoothing_before_summation(self):
        # S_he = (3+1) + (0+1) = 5 ; S_she = (1+1) + (2+1) = 5
        table = score_skew(_counts([("a", 3, 1), ("b", 0, 2)])).set_index("word2")
        assert table.loc["a", "he_share"] == pytest.approx(4 / 5)
        assert table.loc["a", "she_share"] == pytest.approx(2 / 5)
        assert table.loc["b", "he_share"] == pytest.approx(1 / 5)
        assert table.loc["b", "she_share"] == pytest.approx(3 / 5)
        assert table.loc["a", "log_ratio"] == pytest.approx(math.log2(0.5))
        assert table.loc["b", "log_ratio"] == pytest.approx(math.log2(3.0))
        assert table.loc["a", "abs_ratio"] == pytest.approx(1.0)

    def test_zero_she_count_is_finite_and_negative(self):
        table = score_skew(_counts([("runs", 5, 0), ("cries", 0, 5)])).set_index("word2")
        value = table.loc["runs", "log_ratio"]
        assert np.isfinite(value), "Smoothing must prevent log(0)"
        assert value < 0

    def test_canonical_order_is_descending(self):
        table = score_skew(_counts([("a", 9, 1), ("b", 1, 9), ("c", 4, 4), ("d", 4, 4)]))
        assert table["word2"].tolist() == ["b", "c", "d", "a"], "Ties are broken by word2"
        assert table["log_ratio"].is_monotonic_decreasing

    def test_zero_total_rows_dropped(self):
        table = score_skew(_counts([("a", 1, 0), ("ghost", 0, 0)]))
        assert table["word2"].tolist() == ["a"]
        assert table["he_share"].sum() == pytest.approx(1.0)

    def test_empty_counts(self):
        table = score_skew(_counts([]).astype({"he_count": "int64", "she_count": "int64"}))
        assert table.empty
        assert list(table.columns) == skew_columns()

    @pytest.mark.parametrize("rows", [
        [("a", -1, 2)],
        [("a", 1.5, 2)],
        [("a", np.nan, 2)],
    ])
    def test_malformed_counts_fail_fast(self, rows):
        with pytest.raises(ValueError):
            score_skew(_counts(rows))

    def test_non_numeric_counts_fail_fast(self):
        with pytest.raises(ValueError):
            score_skew(_counts([("a", "3", "1")]))

    def test_duplicate_word2_rejected(self):
        with pytest.raises(ValueError):
            score_skew(_counts([("a", 1, 2), ("a", 3, 4)]))

    def test_missing_column(self):
        with pytest.raises(KeyError):
            score_skew(pd.DataFrame({"word2": ["a"], "he_count": [1]}))

    def test_not_a_dataframe(self):
        with pytest.raises(TypeError):
            score_skew([("a", 1, 2)])

    def test_whole_number_floats_accepted(self):
        table = score_skew(_counts([("a", 2.0, 1.0)]))
        assert table["he_count"].dtype == np.int64

    def test_object_dtype_integer_counts_accepted(self):
        counts = pd.DataFrame({"word2": ["a", "b"],
                               "he_count": pd.Series([3, 0], dtype=object),
                               "she_count": pd.Series([1, 2], dtype=object)})
        table = score_skew(counts).set_index("word2")
        assert table["he_count"].dtype == np.int64
        assert table.loc["a", "total"] == 4
        assert table["he_share"].sum() == pytest.approx(1.0)

    def test_object_dtype_fractional_counts_rejected(self):
        counts = pd.DataFrame({"word2": ["a"],
                               "he_count": pd.Series([2.5], dtype=object),
                               "she_count": pd.Series([1], dtype=object)})
        with pytest.raises(ValueError):
            score_skew(counts)

    def test_custom_pronouns(self):
        counts = pd.DataFrame({"word2": ["x", "y"], "him_count": [3, 0], "her_count": [0, 3]})
        table = score_skew(counts, pronouns=("him", "her"))
        assert list(table.columns) == skew_columns(("him", "her"))
        assert table.iloc[0]["word2"] == "y"


class TestDisplayHelpers:
    """Threshold and top-N selection"""

    @pytest.fixture
    def table(self):
        return score_skew(_counts([
            ("a", 300, 10), ("b", 10, 300), ("c", 150, 150),
            ("d", 5, 1), ("e", 120, 40), ("f", 40, 160),
        ]))

    def test_filter_by_total(self, table):
        shown = filter_by_total(table, 200)
        assert set(shown["word2"]) == {"a", "b", "c", "f"}
        assert shown["log_ratio"].is_monotonic_decreasing

    def test_filter_by_total_zero_keeps_all(self, table):
        assert len(filter_by_total(table, 0)) == len(table)

    @pytest.mark.parametrize("bad", [-1, 2.5, "100", True])
    def test_filter_by_total_rejects_bad_threshold(self, table, bad):
        with pytest.raises(ValueError):
            filter_by_total(table, bad)

    def test_top_skewed_per_side(self, table):
        top = top_skewed(filter_by_total(table, 100), n=2)
        assert top.loc[top["direction"] == "she", "word2"].tolist() == ["b", "f"]
        assert top.loc[top["direction"] == "he", "word2"].tolist() == ["e", "a"]
        assert top["log_ratio"].is_monotonic_decreasing

    def test_even_words_lean_toward_neither_side(self):
        # both smoothed sums are 9, so "c" has identical shares
        table = score_skew(_counts([("a", 3, 1), ("b", 1, 3), ("c", 2, 2)])).set_index("word2")
        assert table.loc["c", "log_ratio"] == 0
        assert list(lean_direction(table["log_ratio"])) == ["she", "even", "he"]
        top = top_skewed(table.reset_index(), n=5)
        assert "c" not in set(top["word2"]), "An even word must not take a slot on either side"
        assert set(top["direction"]) == {"he", "she"}

    def test_top_skewed_rejects_non_positive_n(self, table):
        with pytest.raises(ValueError):
            top_skewed(table, n=0)


class TestComputePronounSkew:
    """One-call pipeline"""

    def test_end_to_end_example(self):
        stories = story_frame(["he kills she kills he kills", "She smiles. He runs"])
        pairs, table = compute_pronoun_skew(stories)
        assert len(pairs) == 5
        assert int(table["total"].sum()) == len(pairs)
        kills = table.set_index("word2").loc["kills"]
        assert (kills["he_count"], kills["she_count"], kills["total"]) == (2, 1, 3)

    def test_excluded_words_removed_from_returned_pairs(self):
        stories = story_frame(["he himself runs she herself runs she runs"])
        pairs, table = compute_pronoun_skew(stories, exclude_words=["himself", "herself"])
        assert "himself" not in set(pairs["word2"]) and "herself" not in set(pairs["word2"])
        assert int(table["total"].sum()) == len(pairs) == 1
        assert pronoun_pair_totals(pairs).to_dict() == {"he": 0, "she": 1}
