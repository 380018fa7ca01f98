"""
Canonical fund record, query and result schemas.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional

from fund_explorer.config import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from fund_explorer.errors import QueryValidationError


class DatasetProfile(str, Enum):
    ACTIVE_MANAGEMENT = "fondos-gestion-activa"
    INDEX_TRACKER = "fondos-indexados"
    ETF_AND_ETC = "etf-y-etc"

    @classmethod
    def parse(cls, value: "str | DatasetProfile | None") -> "DatasetProfile":
        """Accept a data-source slug or a member name; empty means the default."""
        if isinstance(value, DatasetProfile):
            return value
        if value is None or not str(value).strip():
            return cls.ACTIVE_MANAGEMENT
        token = str(value).strip()
        try:
            return cls(token.lower())
        except ValueError:
            pass
        member = cls.__members__.get(token.upper().replace("-", "_"))
        if member is None:
            raise QueryValidationError("dataSource", value)
        return member

    @property
    def label(self) -> str:
        return {
            DatasetProfile.ACTIVE_MANAGEMENT: "Fondos gestión activa",
            DatasetProfile.INDEX_TRACKER: "Fondos indexados",
            DatasetProfile.ETF_AND_ETC: "ETF y ETC",
        }[self]


class RiskLevel(str, Enum):
    """Risk buckets in ascending order; values are the display labels."""
    UNRATED = "Sin valorar"
    LOW = "Riesgo bajo"
    MODERATE = "Riesgo moderado"
    MEDIUM_HIGH = "Riesgo medio-alto"
    HIGH = "Riesgo alto"
    VERY_HIGH = "Riesgo muy alto"

    @classmethod
    def parse(cls, value: "str | RiskLevel") -> "RiskLevel":
        if isinstance(value, RiskLevel):
            return value
        token = _compact(str(value))
        for member in cls:
            if token in (_compact(member.value), _compact(member.name)):
                return member
        raise QueryValidationError("riskLevels", value)


def _compact(text: str) -> str:
    return "".join(ch for ch in text.lower() if ch not in " _-")


class TriState(str, Enum):
    ANY = "Todos"
    YES = "Sí"
    NO = "No"

    @classmethod
    def parse(cls, value: "str | TriState | None") -> "TriState":
        """Unrecognised tokens clamp to ANY, like the rest of the query params."""
        if isinstance(value, TriState):
            return value
        if value is None:
            return cls.ANY
        token = str(value).strip().upper()
        if token in _YES_TOKENS:
            return cls.YES
        if token in _NO_TOKENS:
            return cls.NO
        return cls.ANY

    def accepts(self, flag: bool) -> bool:
        if self is TriState.ANY:
            return True
        return flag == (self is TriState.YES)


_YES_TOKENS = {"SÍ", "SI", "S", "Y", "YES", "TRUE", "1"}
_NO_TOKENS = {"NO", "N", "FALSE", "0"}


class SortKey(str, Enum):
    YTD_RETURN = "ytd_return"
    ONE_YEAR_RETURN = "one_year_return"
    THREE_YEAR_RETURN = "three_year_return"
    MANAGEMENT_FEE = "management_fee"

    @classmethod
    def parse(cls, value: "str | SortKey | None") -> "SortKey":
        """Unknown or empty sort keys fall back to YTD return."""
        if isinstance(value, SortKey):
            return value
        try:
            return cls(str(value or "").strip())
        except ValueError:
            return cls.YTD_RETURN


@dataclass(frozen=True)
class Fund:
    """One canonical fund record. Never mutated after normalization."""
    isin: str = ""
    name: str = ""
    currency: str = ""
    category: str = ""
    subcategory: str = ""
    management_company: str = ""
    compartment_code: str = ""
    aum: str = ""
    available_for_implicit_advisory: bool = False
    available_for_explicit_advisory: bool = False
    hedge: str = "N"
    management_fee: float = 0.0
    success_fee: float = 0.0
    min_investment: float = 0.0
    min_investment_currency: str = ""
    ytd_return: float = 0.0
    one_year_return: float = 0.0
    three_year_return: float = 0.0
    five_year_return: float = 0.0
    factsheet_url: str = ""
    kiid_url: str = ""
    risk_level: RiskLevel = RiskLevel.UNRATED
    morningstar_rating: int = 0
    focus_list: str = "N"
    rating: str = ""
    maturity_range: str = ""
    dividend_policy: str = ""
    replication_type: str = ""
    req: str = ""
    # Y/N flag fields whose value came from the export rather than a default
    reported_flags: frozenset[str] = frozenset()

    def to_dict(self) -> dict:
        data = asdict(self)
        data["risk_level"] = self.risk_level.value
        del data["reported_flags"]
        return data


@dataclass
class Query:
    """Structured fund query.

    Out-of-range page/limit are clamped, not rejected: page < 1 becomes 1,
    limit < 1 becomes DEFAULT_PAGE_SIZE and limit is capped at MAX_PAGE_SIZE
    (500). Results report the effective limit.
    """
    isin: str = ""
    categories: list[str] = field(default_factory=list)
    currency: str = ""
    risk_levels: list[RiskLevel] = field(default_factory=list)
    focus_list: TriState = TriState.ANY
    implicit_advisory: TriState = TriState.ANY
    explicit_advisory: TriState = TriState.ANY
    hedge: TriState = TriState.ANY
    dividend_policy: str = ""
    replication_type: str = ""
    sort_by: SortKey = SortKey.YTD_RETURN
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_SIZE
    data_source: DatasetProfile = DatasetProfile.ACTIVE_MANAGEMENT
    include_counts: bool = False

    def __post_init__(self) -> None:
        self.isin = (self.isin or "").strip()
        self.currency = (self.currency or "").strip()
        self.categories = [c.strip() for c in self.categories if c and c.strip()]
        self.risk_levels = [RiskLevel.parse(r) for r in self.risk_levels]
        self.focus_list = TriState.parse(self.focus_list)
        self.implicit_advisory = TriState.parse(self.implicit_advisory)
        self.explicit_advisory = TriState.parse(self.explicit_advisory)
        self.hedge = TriState.parse(self.hedge)
        self.dividend_policy = _any_to_empty(self.dividend_policy)
        self.replication_type = _any_to_empty(self.replication_type)
        self.sort_by = SortKey.parse(self.sort_by)
        self.data_source = DatasetProfile.parse(self.data_source)
        self.page, self.limit = clamp_pagination(self.page, self.limit)

    @classmethod
    def from_params(
        cls,
        *,
        page: "int | str | None" = None,
        limit: "int | str | None" = None,
        search: Optional[str] = None,
        category: Optional[str] = None,
        currency: Optional[str] = None,
        sort_by: Optional[str] = None,
        risk_levels: Optional[str] = None,
        data_source: Optional[str] = None,
        focus_list: Optional[str] = None,
        implicit_advisory: Optional[str] = None,
        explicit_advisory: Optional[str] = None,
        hedge: Optional[str] = None,
        dividend_policy: Optional[str] = None,
        replication_type: Optional[str] = None,
        include_counts: bool = False,
    ) -> "Query":
        """Build a Query from raw request parameters (comma-separated multi-selects)."""
        return cls(
            isin=search or "",
            categories=_split_csv(category),
            currency=currency or "",
            risk_levels=_split_csv(risk_levels),
            focus_list=focus_list,
            implicit_advisory=implicit_advisory,
            explicit_advisory=explicit_advisory,
            hedge=hedge,
            dividend_policy=dividend_policy or "",
            replication_type=replication_type or "",
            sort_by=sort_by,
            page=_to_int(page, DEFAULT_PAGE),
            limit=_to_int(limit, DEFAULT_PAGE_SIZE),
            data_source=data_source,
            include_counts=include_counts,
        )


@dataclass(frozen=True)
class FilterCounts:
    """Per-filter-value tallies over one profile's unfiltered snapshot.

    ``None`` marks a group the profile's filter panel does not show.
    """
    categories: dict[str, int]
    risk_levels: dict[str, int]
    focus_list: dict[str, int]
    dividend_policy: dict[str, int]
    currencies: Optional[dict[str, int]] = None
    implicit_advisory: Optional[dict[str, int]] = None
    explicit_advisory: Optional[dict[str, int]] = None
    hedge: Optional[dict[str, int]] = None
    replication_type: Optional[dict[str, int]] = None

    def to_dict(self) -> dict:
        return {
            "categories": self.categories,
            "riskLevels": self.risk_levels,
            "currencies": self.currencies,
            "focusList": self.focus_list,
            "implicitAdvisory": self.implicit_advisory,
            "explicitAdvisory": self.explicit_advisory,
            "hedge": self.hedge,
            "dividendPolicy": self.dividend_policy,
            "replicationType": self.replication_type,
        }


@dataclass(frozen=True)
class QueryResult:
    funds: list[Fund]
    total: int
    page: int
    total_pages: int
    limit: int
    counts: Optional[FilterCounts] = None

    def to_dict(self) -> dict:
        data = {
            "funds": [f.to_dict() for f in self.funds],
            "total": self.total,
            "page": self.page,
            "totalPages": self.total_pages,
            "limit": self.limit,
        }
        if self.counts is not None:
            data["counts"] = self.counts.to_dict()
        return data


# ---------------------------------------------------------------------------
# Parameter helpers
# ---------------------------------------------------------------------------

def clamp_pagination(page: int, limit: int) -> tuple[int, int]:
    """page < 1 -> 1; limit < 1 -> default; limit above the cap -> cap."""
    if page is None or page < 1:
        page = DEFAULT_PAGE
    if limit is None or limit < 1:
        limit = DEFAULT_PAGE_SIZE
    return page, min(limit, MAX_PAGE_SIZE)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit)


def _split_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [part for part in (p.strip() for p in value.split(",")) if part]


def _to_int(value: "int | str | None", default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _any_to_empty(value: Optional[str]) -> str:
    token = (value or "").strip()
    return "" if token.upper() in ("TODOS", "ANY") else token
