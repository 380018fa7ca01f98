"""
Meta endpoints: health, profiles, categories, reload.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from fund_explorer.api.dependencies import get_store, get_store_or_empty, parse_data_source
from fund_explorer.api.response_models import (
    CategoriesResponse, HealthResponse, ProfileInfo, ProfilesResponse,
)
from fund_explorer.data.schemas import DatasetProfile
from fund_explorer.data.store import FundStore
from fund_explorer.errors import IngestionError

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health", response_model=HealthResponse)
def health(store: FundStore = Depends(get_store_or_empty)):
    return HealthResponse(
        status="ok" if store.profiles_loaded() else "degraded",
        rows=store.row_count(),
        profiles={p.value: store.row_count(p) for p in store.profiles_loaded()},
        errors=store.load_errors(),
    )


@router.get("/profiles", response_model=ProfilesResponse)
def list_profiles(store: FundStore = Depends(get_store_or_empty)):
    loaded = set(store.profiles_loaded())
    return ProfilesResponse(profiles=[
        ProfileInfo(value=p.value, label=p.label, loaded=p in loaded, rows=store.row_count(p))
        for p in DatasetProfile
    ])


@router.get("/categories", response_model=CategoriesResponse)
def list_categories(
    store: FundStore = Depends(get_store),
    profile: DatasetProfile = Depends(parse_data_source),
):
    try:
        categories = store.categories(profile)
    except IngestionError as e:
        raise HTTPException(503, str(e))
    return CategoriesResponse(dataSource=profile.value, categories=categories)


@router.post("/reload")
def reload_data(store: FundStore = Depends(get_store_or_empty)):
    """Re-read every source file and publish fresh snapshots."""
    store.load()
    return {
        "status": "reloaded",
        "profiles": {p.value: store.row_count(p) for p in store.profiles_loaded()},
        "errors": store.load_errors(),
    }
