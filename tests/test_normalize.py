from fund_explorer.data.normalize import (
    find_url_by_content_sniff,
    map_risk_level,
    normalize,
    normalize_focus_flag,
    normalize_row,
    parse_numeric_value,
    strip_verify_marker,
    trim_headers,
)
from fund_explorer.data.schemas import DatasetProfile, RiskLevel

ACTIVE = DatasetProfile.ACTIVE_MANAGEMENT
INDEX = DatasetProfile.INDEX_TRACKER
ETF = DatasetProfile.ETF_AND_ETC


# ---------------------------------------------------------------------------
# Numeric coercion
# ---------------------------------------------------------------------------

def test_numeric_coercion_handles_decimal_comma_and_symbols():
    assert parse_numeric_value("1,25") == 1.25
    assert parse_numeric_value("-3,5 %") == -3.5
    assert parse_numeric_value("€ 12.5") == 12.5
    assert parse_numeric_value("12abc") == 12.0


def test_numeric_coercion_thousands_separator_keeps_leading_number():
    # First comma becomes the decimal point, the rest of the text is ignored
    assert parse_numeric_value("1.234,56") == 1.234


def test_numeric_coercion_without_digits_is_zero():
    for raw in ["", "N/A", "-", "--", ".", None, "abc"]:
        assert parse_numeric_value(raw) == 0.0


# ---------------------------------------------------------------------------
# Risk buckets
# ---------------------------------------------------------------------------

def test_risk_bucket_boundaries():
    expected = {
        "0": RiskLevel.UNRATED,
        "1": RiskLevel.LOW,
        "20": RiskLevel.LOW,
        "21": RiskLevel.MODERATE,
        "40": RiskLevel.MODERATE,
        "41": RiskLevel.MEDIUM_HIGH,
        "60": RiskLevel.MEDIUM_HIGH,
        "61": RiskLevel.HIGH,
        "80": RiskLevel.HIGH,
        "81": RiskLevel.VERY_HIGH,
        "99": RiskLevel.VERY_HIGH,
        "100": RiskLevel.UNRATED,
        "-1": RiskLevel.UNRATED,
    }
    for raw, level in expected.items():
        assert map_risk_level(raw) is level, raw


def test_risk_bucket_is_total_over_valid_range():
    for n in range(0, 100):
        assert isinstance(map_risk_level(str(n)), RiskLevel)


def test_unparsable_risk_is_unrated():
    assert map_risk_level("alto") is RiskLevel.UNRATED
    assert map_risk_level("") is RiskLevel.UNRATED
    assert map_risk_level(None) is RiskLevel.UNRATED


# ---------------------------------------------------------------------------
# Focus list & URLs
# ---------------------------------------------------------------------------

def test_focus_flag_affirmative_spellings():
    for raw in ["y", " Y ", "SÍ", "si", "sí", "TRUE", "1", "S", "yes", "\x00Y\x85"]:
        assert normalize_focus_flag(raw) == "Y", repr(raw)


def test_focus_flag_everything_else_is_no():
    for raw in ["n", "", "0", "maybe", None, "NO"]:
        assert normalize_focus_flag(raw) == "N", repr(raw)


def test_verify_marker_is_stripped():
    assert strip_verify_marker("@https://api.fundinfo.com/x.pdf") == "https://api.fundinfo.com/x.pdf"
    assert strip_verify_marker("https://api.fundinfo.com/x.pdf") == "https://api.fundinfo.com/x.pdf"
    assert strip_verify_marker("") == ""


# ---------------------------------------------------------------------------
# Header lookup
# ---------------------------------------------------------------------------

def test_headers_trimmed_once_first_duplicate_wins():
    row = trim_headers({" ISIN ": "LU1", "URL Ficha Comercial": "a", "URL Ficha Comercial ": "b"})
    assert row == {"ISIN": "LU1", "URL Ficha Comercial": "a"}


def test_untrimmed_headers_still_resolve():
    fund = normalize_row({" ISIN": "LU1", "Nombre ": "Fondo", "URL Ficha Comercial ": "@https://f"}, ACTIVE)
    assert fund.isin == "LU1"
    assert fund.name == "Fondo"
    assert fund.factsheet_url == "https://f"


def test_first_present_candidate_wins_even_when_empty():
    fund = normalize_row({"Categoria Singular Bank": "", "Categoria SB": "Renta Fija"}, ACTIVE)
    assert fund.category == ""

    fund = normalize_row({"Categoria SB": "Renta Fija"}, ACTIVE)
    assert fund.category == "Renta Fija"


def test_missing_columns_take_defaults():
    fund = normalize_row({}, ACTIVE)
    assert fund.isin == ""
    assert fund.hedge == "N"
    assert fund.focus_list == "N"
    assert fund.management_fee == 0.0
    assert fund.risk_level is RiskLevel.UNRATED
    assert fund.morningstar_rating == 0
    assert fund.available_for_implicit_advisory is False
    assert fund.reported_flags == frozenset()


def test_reported_flags_follow_present_columns(raw_active_rows, raw_etf_rows):
    active = normalize(raw_active_rows, ACTIVE)[0]
    assert active.reported_flags == {
        "focus_list", "hedge", "available_for_implicit_advisory", "available_for_explicit_advisory",
    }
    assert "reported_flags" not in active.to_dict()

    etf = normalize(raw_etf_rows, ETF)[0]
    assert "hedge" not in etf.reported_flags
    assert "focus_list" in etf.reported_flags

    # First-column focus fallback counts as reported
    assert "focus_list" in normalize_row({"": "Y", "ISIN": "IE1"}, ETF).reported_flags


# ---------------------------------------------------------------------------
# Active management / index profiles
# ---------------------------------------------------------------------------

def test_active_rows_map_to_canonical_funds(raw_active_rows):
    funds = normalize(raw_active_rows, ACTIVE)
    assert len(funds) == 3

    first = funds[0]
    assert first.isin == "ES0000000001"
    assert first.category == "Renta Fija Euro"
    assert first.subcategory == "RF EUR Corto"
    assert first.management_fee == 0.45
    assert first.ytd_return == 1.2
    assert first.risk_level is RiskLevel.LOW
    assert first.focus_list == "Y"
    assert first.kiid_url == "https://kid/a.pdf"
    assert first.available_for_implicit_advisory is True
    assert first.available_for_explicit_advisory is False
    assert first.min_investment_currency == "EUR"
    assert first.dividend_policy == "Acumulación"

    assert funds[1].hedge == "Y"
    assert funds[2].ytd_return == -2.3
    assert funds[2].focus_list == "Y"


def test_fees_are_never_negative_but_returns_are():
    fund = normalize_row({"Comisión Gestión": "-1,5", "Rent YTD": "-1,5"}, INDEX)
    assert fund.management_fee == 0.0
    assert fund.ytd_return == -1.5


def test_min_investment_currency_override():
    fund = normalize_row({"Divisa": "EUR", "Divisa Mínimo Inicial": "USD", "Mínimo Inicial": "1.000"}, ACTIVE)
    assert fund.currency == "EUR"
    assert fund.min_investment_currency == "USD"


def test_morningstar_rating_out_of_range_is_zero():
    assert normalize_row({"Morningstar Rating": "4"}, ACTIVE).morningstar_rating == 4
    assert normalize_row({"Morningstar Rating": "3 estrellas"}, ACTIVE).morningstar_rating == 3
    assert normalize_row({"Morningstar Rating": "7"}, ACTIVE).morningstar_rating == 0
    assert normalize_row({"Morningstar Rating": "-"}, ACTIVE).morningstar_rating == 0


def test_first_column_fallback_is_etf_only():
    fund = normalize_row({"": "Y", "ISIN": "ES1"}, ACTIVE)
    assert fund.focus_list == "N"


def test_malformed_values_never_raise():
    row = {"ISIN": None, "Comisión Gestión": None, 7: "x", "REQ": "∞", "Rent YTD": "1e5"}
    fund = normalize_row(row, ACTIVE)
    assert fund.isin == ""
    assert fund.management_fee == 0.0
    assert fund.risk_level is RiskLevel.UNRATED


def test_normalization_is_idempotent(raw_active_rows, raw_etf_rows):
    assert normalize(raw_active_rows, ACTIVE) == normalize(raw_active_rows, ACTIVE)
    assert normalize(raw_etf_rows, ETF) == normalize(raw_etf_rows, ETF)


# ---------------------------------------------------------------------------
# ETF profile
# ---------------------------------------------------------------------------

def test_etf_rows_use_etf_headers(raw_etf_rows):
    world, gold = normalize(raw_etf_rows, ETF)
    assert world.category == "Renta Variable"
    assert world.management_fee == 0.20
    assert world.risk_level is RiskLevel.HIGH
    assert world.replication_type == "Física"
    assert gold.risk_level is RiskLevel.VERY_HIGH


def test_etf_advisory_is_always_available():
    fund = normalize_row({
        "Disponible para asesoramiento con cobro implícito": "N",
        "Disponible para asesoramiento con cobro explícito": "N",
    }, ETF)
    assert fund.available_for_implicit_advisory is True
    assert fund.available_for_explicit_advisory is True


def test_content_sniff_finds_fundinfo_pdf_under_any_header():
    row = {"ISIN": "IE1", "Otra columna": "@https://api.fundinfo.com/doc/x.pdf"}
    assert find_url_by_content_sniff(row) == "https://api.fundinfo.com/doc/x.pdf"
    assert find_url_by_content_sniff({"URL": "https://api.fundinfo.com/doc/x.html"}) == ""


def test_etf_sniffed_kiid_beats_named_column():
    fund = normalize_row({
        "URL KID PRIIPS": "https://example.com/kid.pdf",
        "Documentos": "@https://api.fundinfo.com/doc/kid.pdf",
    }, ETF)
    assert fund.kiid_url == "https://api.fundinfo.com/doc/kid.pdf"


def test_etf_named_kiid_columns_when_nothing_sniffed():
    fund = normalize_row({"URL KID PRIIPS": "", "KIID URL": "@https://example.com/kid.pdf"}, ETF)
    assert fund.kiid_url == "https://example.com/kid.pdf"


def test_active_kiid_ignores_content_sniff():
    fund = normalize_row({"Documentos": "https://api.fundinfo.com/doc/kid.pdf"}, ACTIVE)
    assert fund.kiid_url == ""


def test_etf_prefers_lowercase_focus_list_header():
    fund = normalize_row({"Focus List": "N", "Focus list": "Y"}, ETF)
    assert fund.focus_list == "Y"
    fund = normalize_row({"Focus List": "Sí"}, ETF)
    assert fund.focus_list == "Y"


def test_etf_first_column_focus_fallback():
    assert normalize_row({"": "y", "ISIN": "IE1"}, ETF).focus_list == "Y"
    assert normalize_row({"": "N", "ISIN": "IE1"}, ETF).focus_list == "N"
    # Only an exact Y/N counts; anything else falls back to the default
    assert normalize_row({"Flag": "SI", "ISIN": "IE1"}, ETF).focus_list == "N"
