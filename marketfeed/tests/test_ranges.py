"""Tests for the range translator table.

Covers:
- Every label maps to a non-empty chain ending in a daily-bar entry
- Specific chain contents and primary selection
- Day-count mapping
- Label normalization and rejection of unknown labels
- RangeSpec vocabulary validation
"""

from __future__ import annotations

import pytest

from marketfeed.models import VALID_PROVIDER_INTERVALS, VALID_PROVIDER_RANGES, RangeSpec
from marketfeed.services.ranges import (
    FALLBACK_CHAINS,
    VALID_LABELS,
    fallback_chain,
    label_for_days,
    normalize_label,
    primary,
)


class TestChainTable:
    def test_labels(self):
        assert VALID_LABELS == {"1d", "5d", "30d", "60d", "1y"}

    @pytest.mark.parametrize("label", sorted(FALLBACK_CHAINS))
    def test_chain_non_empty_and_ends_daily(self, label):
        chain = fallback_chain(label)
        assert chain
        assert chain[-1].interval == "1d"

    @pytest.mark.parametrize("label", sorted(FALLBACK_CHAINS))
    def test_chain_entries_in_provider_vocabulary(self, label):
        for spec in fallback_chain(label):
            assert spec.range in VALID_PROVIDER_RANGES
            assert spec.interval in VALID_PROVIDER_INTERVALS

    @pytest.mark.parametrize("label", sorted(FALLBACK_CHAINS))
    def test_no_duplicate_entries(self, label):
        chain = fallback_chain(label)
        assert len(set(chain)) == len(chain)

    def test_intraday_chain(self):
        assert fallback_chain("1d") == [
            RangeSpec("1d", "15m"),
            RangeSpec("1d", "5m"),
            RangeSpec("5d", "1d"),
        ]

    def test_intraday_fallback_matches_5d_daily(self):
        assert RangeSpec("5d", "1d") in fallback_chain("5d")
        assert fallback_chain("1d")[-1] == RangeSpec("5d", "1d")

    def test_primary_is_chain_head(self):
        for label in VALID_LABELS:
            assert primary(label) == fallback_chain(label)[0]
        assert primary("1y") == RangeSpec("1y", "1d")

    def test_returned_chain_is_a_copy(self):
        chain = fallback_chain("30d")
        chain.clear()
        assert fallback_chain("30d")


class TestLabelForDays:
    @pytest.mark.parametrize(
        "days, label",
        [(1, "1d"), (2, "5d"), (5, "5d"), (6, "30d"), (30, "30d"),
         (45, "60d"), (60, "60d"), (61, "1y"), (3650, "1y")],
    )
    def test_mapping(self, days, label):
        assert label_for_days(days) == label

    @pytest.mark.parametrize("days", [0, -3])
    def test_non_positive_rejected(self, days):
        with pytest.raises(ValueError):
            label_for_days(days)

    def test_chain_accepts_day_count(self):
        assert fallback_chain(7) == fallback_chain("30d")
        assert primary(1) == RangeSpec("1d", "15m")


class TestNormalizeLabel:
    def test_case_and_whitespace(self):
        assert normalize_label(" 1Y ") == "1y"

    @pytest.mark.parametrize("bad", ["1w", "ytd", "", "max"])
    def test_unknown_rejected(self, bad):
        with pytest.raises(ValueError, match="Invalid range"):
            normalize_label(bad)


class TestRangeSpec:
    def test_invalid_range(self):
        with pytest.raises(ValueError):
            RangeSpec("30d", "1d")

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            RangeSpec("1d", "1m")

    def test_is_intraday(self):
        assert RangeSpec("1d", "5m").is_intraday is True
        assert RangeSpec("1mo", "1d").is_intraday is False
