"""Translate UI-level history windows into brapi range/interval pairs.

brapi only understands a fixed vocabulary of ranges and intervals, and
many B3 symbols have no intraday bars on a given day.  Each label maps to
an ordered chain of RangeSpecs: earlier entries are closest to what the
caller asked for, later entries trade granularity for the likelihood of
actually getting data.  Every chain ends in a daily-bar entry.
"""

from __future__ import annotations

from marketfeed.models import RangeSpec

FALLBACK_CHAINS: dict[str, tuple[RangeSpec, ...]] = {
    "1d": (
        RangeSpec("1d", "15m"),
        RangeSpec("1d", "5m"),
        RangeSpec("5d", "1d"),
    ),
    "5d": (
        RangeSpec("5d", "30m"),
        RangeSpec("5d", "15m"),
        RangeSpec("5d", "1d"),
        RangeSpec("1mo", "1d"),
    ),
    "30d": (
        RangeSpec("1mo", "1d"),
        RangeSpec("3mo", "1d"),
    ),
    "60d": (
        RangeSpec("3mo", "1d"),
        RangeSpec("6mo", "1d"),
    ),
    "1y": (
        RangeSpec("1y", "1d"),
        RangeSpec("2y", "1d"),
        RangeSpec("max", "1d"),
    ),
}

VALID_LABELS = frozenset(FALLBACK_CHAINS)

# Upper bound in days covered by each label, smallest first.
_LABEL_DAYS: tuple[tuple[int, str], ...] = (
    (1, "1d"),
    (5, "5d"),
    (30, "30d"),
    (60, "60d"),
)


def label_for_days(days: int) -> str:
    """Smallest label whose window covers *days* calendar days."""
    if days <= 0:
        raise ValueError(f"Day count must be positive, got {days}")
    for limit, label in _LABEL_DAYS:
        if days <= limit:
            return label
    return "1y"


def normalize_label(requested: str | int) -> str:
    """Accept a label (any case) or a day count; return a canonical label."""
    if isinstance(requested, int):
        return label_for_days(requested)
    label = str(requested).strip().lower()
    if label not in FALLBACK_CHAINS:
        raise ValueError(
            f"Invalid range: {requested!r}. "
            f"Must be one of: {', '.join(sorted(VALID_LABELS))}"
        )
    return label


def fallback_chain(requested: str | int) -> list[RangeSpec]:
    """Ordered RangeSpecs to try for *requested*, most preferred first."""
    return list(FALLBACK_CHAINS[normalize_label(requested)])


def primary(requested: str | int) -> RangeSpec:
    """The preferred RangeSpec for *requested*."""
    return FALLBACK_CHAINS[normalize_label(requested)][0]
