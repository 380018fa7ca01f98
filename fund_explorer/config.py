"""
Fund Explorer — Configuration: paths, constants, header-candidate tables.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths — override with FUND_EXPLORER_DATA_DIR env var for deployment
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("FUND_EXPLORER_DATA_DIR", str(Path.cwd() / "data")))
DATA_FOLDER = _data_dir / "sources"

# ---------------------------------------------------------------------------
# Source file format
# ---------------------------------------------------------------------------
CSV_DELIMITER = ";"
# Tried in order; exports come from both Excel-for-Windows and web tooling
CSV_ENCODINGS = ("utf-8-sig", "cp1252")

SOURCE_FILE_TEMPLATE = "datos-{slug}.csv"

# ---------------------------------------------------------------------------
# Query defaults
# ---------------------------------------------------------------------------
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 500

# ---------------------------------------------------------------------------
# Risk indicator buckets (inclusive ranges, value -> RiskLevel member name)
# Anything outside these ranges is UNRATED.
# ---------------------------------------------------------------------------
RISK_BUCKETS = [
    (0, 0, "UNRATED"),
    (1, 20, "LOW"),
    (21, 40, "MODERATE"),
    (41, 60, "MEDIUM_HIGH"),
    (61, 80, "HIGH"),
    (81, 99, "VERY_HIGH"),
]

# ---------------------------------------------------------------------------
# Focus-list flag tokens (compared after whitespace/control-char removal
# and uppercasing)
# ---------------------------------------------------------------------------
FOCUS_AFFIRMATIVE_TOKENS = frozenset({"Y", "S", "SI", "SÍ", "YES", "TRUE", "1"})

# ---------------------------------------------------------------------------
# Header candidates per canonical field.
# First header present in the row wins. Headers are trimmed on ingestion,
# so trailing-space variants ("URL Ficha Comercial ") need no entry.
# ---------------------------------------------------------------------------
_BASE_CANDIDATES = {
    "isin": ("ISIN",),
    "name": ("Nombre",),
    "currency": ("Divisa",),
    "category": ("Categoria Singular Bank", "Categoría Singular Bank", "Categoria SB"),
    "subcategory": ("Categoría Morningstar", "Categoria Morningstar"),
    "management_company": ("Gestora / Emisor", "Gestora"),
    "compartment_code": ("Código de compartimento", "Codigo de compartimento"),
    "aum": ("Patrimonio",),
    "available_for_implicit_advisory": (
        "Disponible para asesoramiento con cobro implícito",
        "Disponible para asesoramiento con cobro implicito",
    ),
    "available_for_explicit_advisory": (
        "Disponible para asesoramiento con cobro explícito",
        "Disponible para asesoramiento con cobro explicito",
    ),
    "hedge": ("Hedge",),
    "management_fee": ("Comisión Gestión", "Comision Gestion"),
    "success_fee": ("Comisión Exito", "Comisión Éxito", "Comision Exito"),
    "min_investment": ("Mínimo Inicial", "Minimo Inicial"),
    "min_investment_currency": ("Divisa Mínimo Inicial", "Divisa Minimo Inicial"),
    "ytd_return": ("Rent YTD",),
    "one_year_return": ("Rent 12M",),
    "three_year_return": ("Rent 36M",),
    "five_year_return": ("Rent 60M",),
    "factsheet_url": ("URL Ficha Comercial",),
    "kiid_url": ("URL KID PRIIPS",),
    "risk_indicator": ("REQ",),
    "morningstar_rating": ("Morningstar Rating",),
    "focus_list": ("Focus List",),
    "rating": ("Calificación", "Calificacion"),
    "maturity_range": ("Rango de vencimientos",),
    "dividend_policy": ("Politica de dividendos", "Política de dividendos"),
    "replication_type": ("Tipo de Réplica", "Tipo de Replica"),
}

# ETF exports use shorter headers and moved columns around between vintages
_ETF_OVERRIDES = {
    "category": ("Categoria", "Categoría", "Categoria Singular Bank", "Categoría Singular Bank"),
    "subcategory": ("Subcategoria", "Subcategoría", "Categoría Morningstar", "Categoria Morningstar"),
    "management_fee": ("Comisión Gestión", "Comision Gestion", "TER"),
    "one_year_return": ("Rent 12M", "Rent 1Y"),
    "three_year_return": ("Rent 36M", "Rent 3Y"),
    "five_year_return": ("Rent 60M", "Rent 5Y"),
    "management_company": ("Gestora / Emisor", "Emisor"),
    "kiid_url": ("URL KID PRIIPS", "KID URL", "KIID URL", "URL KIID", "URL Documento KIID"),
    "risk_indicator": ("REQ", "Riesgo"),
    "focus_list": ("Focus list", "Focus List", "FOCUS LIST"),
}

FIELD_CANDIDATES = {
    "fondos-gestion-activa": dict(_BASE_CANDIDATES),
    "fondos-indexados": dict(_BASE_CANDIDATES),
    "etf-y-etc": {**_BASE_CANDIDATES, **_ETF_OVERRIDES},
}

# Defaults when none of a field's candidates is present.
# Fields not listed default to "" (text) or 0 (numbers).
FIELD_DEFAULTS = {
    "hedge": "N",
    "focus_list": "N",
    "risk_indicator": "",
}

# Profiles where advisory eligibility is not read from the export
ALWAYS_ADVISORY_PROFILES = frozenset({"etf-y-etc"})

# ---------------------------------------------------------------------------
# Filter-panel count exclusions (profile value -> excluded count groups)
# ---------------------------------------------------------------------------
COUNT_EXCLUSIONS = {
    "fondos-gestion-activa": frozenset({"hedge", "replication_type"}),
    "fondos-indexados": frozenset({"replication_type"}),
    "etf-y-etc": frozenset({"currencies", "implicit_advisory", "explicit_advisory"}),
}

# ---------------------------------------------------------------------------
# Upload limits
# ---------------------------------------------------------------------------
UPLOAD_EXTENSIONS = (".csv", ".xlsx")
