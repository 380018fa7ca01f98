"""
Error types raised at the ingestion and query-parameter boundaries.

Field-level malformation never shows up here: the normalizer absorbs it.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class FundExplorerError(Exception):
    """Base class for all explicit failures."""


class IngestionError(FundExplorerError):
    """A raw source could not be read, so no Fund set was produced."""

    def __init__(self, profile: str, reason: str, path: Optional[Path] = None) -> None:
        self.profile = profile
        self.reason = reason
        self.path = path
        where = f" ({path})" if path is not None else ""
        super().__init__(f"Could not load '{profile}'{where}: {reason}")


class QueryValidationError(FundExplorerError, ValueError):
    """A query parameter could not be interpreted."""

    def __init__(self, param: str, value: object) -> None:
        self.param = param
        self.value = value
        super().__init__(f"Invalid {param}: {value!r}")
