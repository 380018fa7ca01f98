"""Fund builders for query-engine tests."""
from __future__ import annotations

from fund_explorer.data.schemas import Fund, RiskLevel

# As if every Y/N flag column was present in the export
ALL_FLAGS = frozenset({
    "focus_list", "hedge", "available_for_implicit_advisory", "available_for_explicit_advisory",
})


def make_fund(**overrides) -> Fund:
    base = dict(
        isin="ES0000000000",
        name="Fund",
        currency="EUR",
        category="Renta Fija",
        risk_level=RiskLevel.LOW,
        reported_flags=ALL_FLAGS,
    )
    base.update(overrides)
    return Fund(**base)
