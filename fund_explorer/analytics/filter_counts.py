"""
Filter-panel counts over a profile's unfiltered snapshot.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict

import pandas as pd

from fund_explorer.config import COUNT_EXCLUSIONS
from fund_explorer.data.schemas import DatasetProfile, FilterCounts, Fund, TriState

_COUNTED_COLUMNS = [
    "category", "currency", "risk_level", "focus_list",
    "available_for_implicit_advisory", "available_for_explicit_advisory",
    "hedge", "dividend_policy", "replication_type", "reported_flags",
]


def funds_to_frame(funds: Sequence[Fund]) -> pd.DataFrame:
    """One row per fund, only the columns the filter panel counts."""
    if not funds:
        return pd.DataFrame(columns=_COUNTED_COLUMNS)
    df = pd.DataFrame([asdict(f) for f in funds], columns=_COUNTED_COLUMNS)
    df["risk_level"] = df["risk_level"].map(lambda r: r.value)
    return df


def _tally(series: pd.Series) -> dict[str, int]:
    """Counts of present, non-empty values, most frequent first."""
    values = series.dropna().astype(str).str.strip()
    values = values[values != ""]
    counts = values.value_counts(sort=True)
    return {str(k): int(v) for k, v in counts.items()}


def _yes_no(df: pd.DataFrame, column: str, is_yes) -> dict[str, int]:
    """Yes/No tally over the funds whose export actually carried the flag."""
    reported = df["reported_flags"].map(lambda flags: column in flags).astype(bool)
    flags = df.loc[reported, column].map(is_yes).astype(bool)
    yes = int(flags.sum())
    return {TriState.YES.value: yes, TriState.NO.value: int(len(flags) - yes)}


def _is_y(value) -> bool:
    return value == "Y"


def aggregate_counts(funds: Sequence[Fund], profile: DatasetProfile) -> FilterCounts:
    """Build the immutable count structure for one profile.

    Groups the profile's panel does not show come back as ``None``.
    """
    profile = DatasetProfile(profile)
    excluded = COUNT_EXCLUSIONS.get(profile.value, frozenset())
    df = funds_to_frame(funds)

    def group(name, compute):
        return None if name in excluded else compute()

    return FilterCounts(
        categories=_tally(df["category"]),
        risk_levels=_tally(df["risk_level"]),
        focus_list=_yes_no(df, "focus_list", _is_y),
        dividend_policy=_tally(df["dividend_policy"]),
        currencies=group("currencies", lambda: _tally(df["currency"])),
        implicit_advisory=group(
            "implicit_advisory", lambda: _yes_no(df, "available_for_implicit_advisory", bool)
        ),
        explicit_advisory=group(
            "explicit_advisory", lambda: _yes_no(df, "available_for_explicit_advisory", bool)
        ),
        hedge=group("hedge", lambda: _yes_no(df, "hedge", _is_y)),
        replication_type=group("replication_type", lambda: _tally(df["replication_type"])),
    )
