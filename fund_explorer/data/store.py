"""
FundStore — in-memory Fund snapshots, one per dataset profile.

Loaded once at startup, queried on every request. A reload builds the new
snapshot completely before publishing it, so a query sees either the old
tuple or the new one, never a partial dataset.
"""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

from fund_explorer.config import DATA_FOLDER, MAX_PAGE_SIZE
from fund_explorer.data.loader import discover_sources, load_profile
from fund_explorer.data.query import execute
from fund_explorer.data.schemas import DatasetProfile, Fund, Query, QueryResult
from fund_explorer.errors import IngestionError
from fund_explorer.logging_setup import get_logger

logger = get_logger(__name__)


class FundStore:
    """Immutable per-profile snapshots with a query front door."""

    def __init__(self, data_dir: Path = DATA_FOLDER) -> None:
        self.data_dir = data_dir
        self._snapshots: dict[DatasetProfile, tuple[Fund, ...]] = {}
        self._errors: dict[DatasetProfile, str] = {}
        self._lock = threading.Lock()
        self._loaded = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> "FundStore":
        """Normalize every profile; failures are recorded, not fatal to the others."""
        available = discover_sources(self.data_dir)
        for profile in DatasetProfile:
            if profile not in available:
                self._record_error(profile, f"no source file in {self.data_dir}")
                continue
            try:
                self.reload(profile)
            except IngestionError as exc:
                logger.warning("%s", exc)
        self._loaded = True
        return self

    def reload(self, profile: DatasetProfile) -> int:
        """Re-read one profile and publish the new snapshot. Returns its size."""
        profile = DatasetProfile(profile)
        try:
            funds = tuple(load_profile(profile, self.data_dir))
        except IngestionError as exc:
            self._record_error(profile, exc.reason)
            raise
        self.publish(profile, funds)
        logger.info("Loaded %d funds for %s", len(funds), profile.value)
        return len(funds)

    def publish(self, profile: DatasetProfile, funds: tuple[Fund, ...]) -> None:
        """Swap in a fully built snapshot."""
        profile = DatasetProfile(profile)
        with self._lock:
            snapshots = dict(self._snapshots)
            snapshots[profile] = tuple(funds)
            self._snapshots = snapshots
            self._errors.pop(profile, None)
            self._loaded = True

    def _record_error(self, profile: DatasetProfile, reason: str) -> None:
        with self._lock:
            self._errors[profile] = reason

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def funds(self, profile: DatasetProfile) -> tuple[Fund, ...]:
        """The current snapshot. Raises IngestionError if the profile never loaded."""
        profile = DatasetProfile(profile)
        snapshot = self._snapshots.get(profile)
        if snapshot is None:
            reason = self._errors.get(profile, "not loaded")
            raise IngestionError(profile.value, reason)
        return snapshot

    def query(self, query: Query) -> QueryResult:
        return execute(self.funds(query.data_source), query)

    def find_isin(self, isin: str, profile: DatasetProfile) -> list[Fund]:
        """Every record with this ISIN; duplicates are kept."""
        return self.query(Query(isin=isin, data_source=profile, limit=MAX_PAGE_SIZE)).funds

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def profiles_loaded(self) -> list[DatasetProfile]:
        return [p for p in DatasetProfile if p in self._snapshots]

    def load_errors(self) -> dict[str, str]:
        return {p.value: reason for p, reason in self._errors.items()}

    def row_count(self, profile: Optional[DatasetProfile] = None) -> int:
        if profile is None:
            return sum(len(s) for s in self._snapshots.values())
        return len(self._snapshots.get(DatasetProfile(profile), ()))

    def categories(self, profile: DatasetProfile) -> list[str]:
        """Distinct non-empty categories, alphabetical."""
        return sorted({f.category for f in self.funds(profile) if f.category})

    def currencies(self, profile: DatasetProfile) -> list[str]:
        return sorted({f.currency for f in self.funds(profile) if f.currency})
