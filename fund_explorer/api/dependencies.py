"""
FastAPI dependencies — FundStore singleton, query parsing.
"""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Query as Param

from fund_explorer.data.schemas import DatasetProfile, Query
from fund_explorer.data.store import FundStore
from fund_explorer.errors import QueryValidationError

# ---------------------------------------------------------------------------
# Global store singleton (set during startup)
# ---------------------------------------------------------------------------
_store: FundStore | None = None


def set_store(store: FundStore) -> None:
    global _store
    _store = store


def get_store() -> FundStore:
    if _store is None or not _store.is_loaded:
        raise HTTPException(503, "Data not loaded yet")
    return _store


def get_store_or_empty() -> FundStore:
    """Return the store even before the first load (for upload/reload endpoints)."""
    if _store is None:
        raise HTTPException(503, "Server not initialized yet")
    return _store


# ---------------------------------------------------------------------------
# Query parsing from query params
# ---------------------------------------------------------------------------

def parse_data_source(
    dataSource: Optional[str] = Param(None, description="fondos-gestion-activa|fondos-indexados|etf-y-etc"),
) -> DatasetProfile:
    try:
        return DatasetProfile.parse(dataSource)
    except QueryValidationError as e:
        raise HTTPException(400, str(e))


def parse_query(
    page: Optional[str] = Param(None),
    limit: Optional[str] = Param(None, description="Page size, default 10, capped at 500"),
    search: Optional[str] = Param(None, description="Exact ISIN"),
    category: Optional[str] = Param(None, description="Comma-separated category prefixes"),
    currency: Optional[str] = Param(None),
    sortBy: Optional[str] = Param(None, description="ytd_return|one_year_return|three_year_return|management_fee"),
    riskLevels: Optional[str] = Param(None, description="Comma-separated risk levels"),
    dataSource: Optional[str] = Param(None),
    focusListFilter: Optional[str] = Param(None, description="Todos|Sí|No"),
    implicitAdvisoryFilter: Optional[str] = Param(None, description="Todos|Sí|No"),
    explicitAdvisoryFilter: Optional[str] = Param(None, description="Todos|Sí|No"),
    hedgeFilter: Optional[str] = Param(None, description="Todos|Sí|No"),
    dividendPolicyFilter: Optional[str] = Param(None),
    replicationTypeFilter: Optional[str] = Param(None),
    includeCounts: bool = Param(False),
) -> Query:
    """Parse request parameters into a Query; page/limit are clamped."""
    try:
        return Query.from_params(
            page=page,
            limit=limit,
            search=search,
            category=category,
            currency=currency,
            sort_by=sortBy,
            risk_levels=riskLevels,
            data_source=dataSource,
            focus_list=focusListFilter,
            implicit_advisory=implicitAdvisoryFilter,
            explicit_advisory=explicitAdvisoryFilter,
            hedge=hedgeFilter,
            dividend_policy=dividendPolicyFilter,
            replication_type=replicationTypeFilter,
            include_counts=includeCounts,
        )
    except QueryValidationError as e:
        raise HTTPException(400, str(e))
