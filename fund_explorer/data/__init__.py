"""Data loading, normalization, and in-memory query engine."""
from .loader import discover_sources, load_profile, read_raw_rows
from .normalize import normalize, normalize_row, parse_numeric_value, map_risk_level
from .query import execute
from .schemas import DatasetProfile, Fund, Query, QueryResult, RiskLevel, SortKey, TriState
from .store import FundStore
