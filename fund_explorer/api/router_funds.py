"""
Fund endpoints — paginated query, filter-panel counts, ISIN lookup.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from fund_explorer.analytics.filter_counts import aggregate_counts
from fund_explorer.api.dependencies import get_store, parse_data_source, parse_query
from fund_explorer.api.response_models import FilterCountsModel, FundModel, FundsResponse
from fund_explorer.data.schemas import DatasetProfile, Query
from fund_explorer.data.store import FundStore
from fund_explorer.errors import IngestionError

router = APIRouter(prefix="/api/funds", tags=["funds"])


def _unavailable(exc: IngestionError) -> HTTPException:
    return HTTPException(503, str(exc))


@router.get("", response_model=FundsResponse)
def list_funds(
    store: FundStore = Depends(get_store),
    query: Query = Depends(parse_query),
):
    """Filtered, sorted (descending), paginated funds for one data source."""
    try:
        result = store.query(query)
    except IngestionError as e:
        raise _unavailable(e)
    return result.to_dict()


@router.get("/filters", response_model=FilterCountsModel)
def filter_counts(
    store: FundStore = Depends(get_store),
    profile: DatasetProfile = Depends(parse_data_source),
):
    """Per-value counts over the unfiltered data source, for the filter panel."""
    try:
        funds = store.funds(profile)
    except IngestionError as e:
        raise _unavailable(e)
    return aggregate_counts(funds, profile).to_dict()


@router.get("/{isin}", response_model=list[FundModel])
def fund_by_isin(
    isin: str,
    store: FundStore = Depends(get_store),
    profile: DatasetProfile = Depends(parse_data_source),
):
    """All records carrying this ISIN (duplicates are not merged)."""
    try:
        funds = store.find_isin(isin, profile)
    except IngestionError as e:
        raise _unavailable(e)
    if not funds:
        raise HTTPException(404, f"No fund with ISIN '{isin}' in {profile.value}")
    return [f.to_dict() for f in funds]
