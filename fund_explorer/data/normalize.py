"""
Raw row -> canonical Fund mapping, value coercion, per-profile heuristics.

Nothing in here raises on malformed input: every field degrades to its
default and the row is still emitted.
"""
from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Mapping
from typing import Optional

from fund_explorer.config import (
    ALWAYS_ADVISORY_PROFILES,
    FIELD_CANDIDATES,
    FIELD_DEFAULTS,
    FOCUS_AFFIRMATIVE_TOKENS,
    RISK_BUCKETS,
)
from fund_explorer.data.schemas import DatasetProfile, Fund, RiskLevel
from fund_explorer.logging_setup import get_logger

logger = get_logger(__name__)

_MISSING = object()

_TEXT_FIELDS = (
    "isin", "name", "currency", "category", "subcategory", "management_company",
    "compartment_code", "aum", "rating", "maturity_range", "dividend_policy",
    "replication_type",
)
_AMOUNT_FIELDS = ("management_fee", "success_fee", "min_investment")
_RETURN_FIELDS = ("ytd_return", "one_year_return", "three_year_return", "five_year_return")
_FLAG_FIELDS = ("focus_list", "hedge", "available_for_implicit_advisory", "available_for_explicit_advisory")


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------

_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]+")
_FLOAT_PREFIX_RE = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)")
_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_numeric_value(value: Optional[str]) -> float:
    """Coerce free text like "1,25 %" or "€ 3.000" to a float, 0.0 on failure.

    The first comma becomes the decimal point, then everything but digits,
    dots and minus signs is dropped and the longest leading number is parsed
    ("1.234.56" -> 1.234).
    """
    if not value:
        return 0.0
    clean = _NON_NUMERIC_RE.sub("", str(value).replace(",", ".", 1))
    m = _FLOAT_PREFIX_RE.match(clean)
    if not m:
        return 0.0
    result = float(m.group(0))
    return result if result != 0 else 0.0


def parse_int_value(value: Optional[str]) -> int:
    """Leading integer of the text, 0 when there is none."""
    if not value:
        return 0
    m = _INT_PREFIX_RE.match(str(value))
    return int(m.group(1)) if m else 0


def map_risk_level(value: Optional[str]) -> RiskLevel:
    """Bucket a 0-99 risk indicator; out-of-range and unparsable are UNRATED."""
    number = parse_int_value(value)
    for low, high, name in RISK_BUCKETS:
        if low <= number <= high:
            return RiskLevel[name]
    return RiskLevel.UNRATED


def _is_noise(ch: str) -> bool:
    # Cc covers C0 and C1 control characters
    return ch.isspace() or unicodedata.category(ch) == "Cc"


def normalize_focus_flag(value: Optional[str]) -> str:
    """Map the many spellings of "yes" in the focus-list column to "Y"/"N"."""
    if value is None:
        return "N"
    token = "".join(ch for ch in str(value) if not _is_noise(ch)).upper()
    token = unicodedata.normalize("NFC", token)
    return "Y" if token in FOCUS_AFFIRMATIVE_TOKENS else "N"


def strip_verify_marker(url: Optional[str]) -> str:
    """Drop the leading "@" exports use to flag links as to-be-verified."""
    if not url:
        return ""
    url = str(url)
    return url[1:] if url.startswith("@") else url


def _yes_flag(value: Optional[str]) -> bool:
    return str(value or "").strip().upper() == "Y"


# ---------------------------------------------------------------------------
# Header handling
# ---------------------------------------------------------------------------

def clean_header(header: object) -> str:
    return unicodedata.normalize("NFC", str(header)).strip()


def trim_headers(row: Mapping[str, str]) -> dict[str, str]:
    """Trim every header once per row; the first of any colliding headers wins."""
    trimmed: dict[str, str] = {}
    for header, value in row.items():
        key = clean_header(header)
        if key in trimmed:
            continue
        trimmed[key] = "" if value is None else str(value)
    return trimmed


def resolve_field(row: Mapping[str, str], candidates: Iterable[str], default=_MISSING):
    """Value of the first candidate header present in the row."""
    for header in candidates:
        if header in row:
            return row[header]
    return default


def find_url_by_content_sniff(row: Mapping[str, str]) -> str:
    """Scan every column for a fundinfo PDF link, whatever its header."""
    for value in row.values():
        if isinstance(value, str) and "api.fundinfo.com" in value and ".pdf" in value:
            return strip_verify_marker(value)
    return ""


def _first_column_focus_flag(row: Mapping[str, str]) -> Optional[str]:
    """Legacy ETF exports carry an unlabeled Y/N focus flag in column one."""
    first = next(iter(row.values()), None)
    if isinstance(first, str) and first.upper() in ("Y", "N"):
        return first
    return None


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------

class _RowMapper:
    """Resolves the canonical fields of one trimmed row for one profile."""

    def __init__(self, row: Mapping[str, str], profile: DatasetProfile) -> None:
        self.row = row
        self.profile = profile
        self.candidates = FIELD_CANDIDATES[profile.value]

    def raw(self, field_name: str, default: str = "") -> str:
        value = resolve_field(self.row, self.candidates.get(field_name, ()))
        if value is _MISSING:
            return FIELD_DEFAULTS.get(field_name, default)
        return value

    def present(self, field_name: str) -> bool:
        return resolve_field(self.row, self.candidates.get(field_name, ())) is not _MISSING

    # -- derived fields ---------------------------------------------------

    def currency(self) -> str:
        return self.raw("currency")

    def min_investment_currency(self) -> str:
        if self.present("min_investment_currency"):
            return self.raw("min_investment_currency")
        return self.currency()

    def hedge(self) -> str:
        return "Y" if _yes_flag(self.raw("hedge")) else "N"

    def implicit_advisory(self) -> bool:
        if self.profile.value in ALWAYS_ADVISORY_PROFILES:
            return True
        return _yes_flag(self.raw("available_for_implicit_advisory"))

    def explicit_advisory(self) -> bool:
        if self.profile.value in ALWAYS_ADVISORY_PROFILES:
            return True
        return _yes_flag(self.raw("available_for_explicit_advisory"))

    def kiid_url(self) -> str:
        if self.profile is DatasetProfile.ETF_AND_ETC:
            sniffed = find_url_by_content_sniff(self.row)
            if sniffed:
                return sniffed
            for header in self.candidates["kiid_url"]:
                url = strip_verify_marker(self.row.get(header))
                if url:
                    return url
            return ""
        return strip_verify_marker(self.raw("kiid_url"))

    def focus_list(self) -> str:
        if self.present("focus_list"):
            return normalize_focus_flag(self.raw("focus_list"))
        if self.profile is DatasetProfile.ETF_AND_ETC:
            flag = _first_column_focus_flag(self.row)
            if flag is not None:
                return normalize_focus_flag(flag)
        return FIELD_DEFAULTS["focus_list"]

    def reported_flags(self) -> frozenset[str]:
        reported = {name for name in _FLAG_FIELDS if self.present(name)}
        if self.profile.value in ALWAYS_ADVISORY_PROFILES:
            reported |= {"available_for_implicit_advisory", "available_for_explicit_advisory"}
        if self.profile is DatasetProfile.ETF_AND_ETC and _first_column_focus_flag(self.row) is not None:
            reported.add("focus_list")
        return frozenset(reported)

    def morningstar_rating(self) -> int:
        rating = parse_int_value(self.raw("morningstar_rating"))
        return rating if 0 <= rating <= 5 else 0


_FUND_DEFAULTS = {name: f.default for name, f in Fund.__dataclass_fields__.items()}


def _derive(field_name: str, compute):
    try:
        return compute()
    except Exception as exc:  # noqa: BLE001 - field-level failures degrade to the default
        logger.debug("Field %s fell back to default: %s", field_name, exc)
        return _FUND_DEFAULTS[field_name]


def normalize_row(row: Mapping[str, str], profile: DatasetProfile) -> Fund:
    """Map one raw row to a Fund. Never raises on malformed field values."""
    profile = DatasetProfile(profile)
    m = _RowMapper(trim_headers(row), profile)

    values: dict[str, object] = {}
    for name in _TEXT_FIELDS:
        values[name] = _derive(name, lambda name=name: m.raw(name))
    for name in _AMOUNT_FIELDS:
        values[name] = _derive(name, lambda name=name: max(parse_numeric_value(m.raw(name)), 0.0))
    for name in _RETURN_FIELDS:
        values[name] = _derive(name, lambda name=name: parse_numeric_value(m.raw(name)))

    values["min_investment_currency"] = _derive("min_investment_currency", m.min_investment_currency)
    values["hedge"] = _derive("hedge", m.hedge)
    values["available_for_implicit_advisory"] = _derive("available_for_implicit_advisory", m.implicit_advisory)
    values["available_for_explicit_advisory"] = _derive("available_for_explicit_advisory", m.explicit_advisory)
    values["factsheet_url"] = _derive("factsheet_url", lambda: strip_verify_marker(m.raw("factsheet_url")))
    values["kiid_url"] = _derive("kiid_url", m.kiid_url)
    values["req"] = _derive("req", lambda: m.raw("risk_indicator"))
    values["risk_level"] = _derive("risk_level", lambda: map_risk_level(values["req"]))
    values["morningstar_rating"] = _derive("morningstar_rating", m.morningstar_rating)
    values["focus_list"] = _derive("focus_list", m.focus_list)
    values["reported_flags"] = _derive("reported_flags", m.reported_flags)

    return Fund(**values)


def normalize(rows: Iterable[Mapping[str, str]], profile: DatasetProfile) -> list[Fund]:
    """Normalize a whole raw dataset for one profile."""
    profile = DatasetProfile(profile)
    funds = [normalize_row(row, profile) for row in rows]
    logger.info("Normalized %d %s rows", len(funds), profile.value)
    return funds
