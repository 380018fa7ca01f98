"""
Raw source discovery, semicolon-CSV reading, and workbook conversion.
"""
from __future__ import annotations

import io
import re
import unicodedata
from pathlib import Path
from typing import Union

import pandas as pd

from fund_explorer.config import CSV_DELIMITER, CSV_ENCODINGS, DATA_FOLDER, SOURCE_FILE_TEMPLATE
from fund_explorer.data.normalize import clean_header, normalize
from fund_explorer.data.schemas import DatasetProfile, Fund
from fund_explorer.errors import IngestionError
from fund_explorer.logging_setup import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Source discovery
# ---------------------------------------------------------------------------

def source_path(profile: DatasetProfile, data_dir: Path = DATA_FOLDER) -> Path:
    """Where the raw export for a profile lives, e.g. datos-etf-y-etc.csv."""
    return data_dir / SOURCE_FILE_TEMPLATE.format(slug=DatasetProfile(profile).value)


def discover_sources(data_dir: Path = DATA_FOLDER) -> dict[DatasetProfile, Path]:
    """Profiles whose source file is present in data_dir."""
    found: dict[DatasetProfile, Path] = {}
    for profile in DatasetProfile:
        path = source_path(profile, data_dir)
        if path.is_file():
            found[profile] = path
    return found


# ---------------------------------------------------------------------------
# CSV reading
# ---------------------------------------------------------------------------

def _read_frame(source: Union[Path, bytes], encoding: str) -> pd.DataFrame:
    """Read every line, header included, as a row of strings.

    The header row is read as data, so pandas never infers an index column
    from data rows that are wider than the header (trailing ';'). Rows with
    extra fields keep their first fields up to the header width.
    """
    def _open():
        return io.BytesIO(source) if isinstance(source, bytes) else source

    options = dict(
        sep=CSV_DELIMITER,
        header=None,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        encoding=encoding,
        engine="python",
    )
    width = pd.read_csv(_open(), nrows=1, **options).shape[1]

    def _trim_overlong(fields: list[str]) -> list[str]:
        extra = fields[width:]
        if any(f.strip() for f in extra):
            logger.warning("Dropping %d extra field(s) %r from row starting %r", len(extra), extra, fields[:1])
        return fields[:width]

    return pd.read_csv(_open(), on_bad_lines=_trim_overlong, **options)


def read_raw_rows(source: Union[Path, bytes], profile: str = "") -> list[dict[str, str]]:
    """Parse a semicolon-delimited export into raw rows with trimmed headers.

    Encodings are tried in CSV_ENCODINGS order. Raises IngestionError when
    the source is missing or no encoding yields a table.
    """
    path = source if isinstance(source, Path) else None
    if path is not None and not path.is_file():
        raise IngestionError(profile, "source file not found", path)

    last_error: Exception | None = None
    for encoding in CSV_ENCODINGS:
        try:
            df = _read_frame(source, encoding)
            break
        except UnicodeDecodeError as exc:
            last_error = exc
            logger.debug("Decoding %s as %s failed, trying next encoding", path or "upload", encoding)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, OSError) as exc:
            raise IngestionError(profile, str(exc), path) from exc
    else:
        raise IngestionError(profile, f"unsupported encoding ({last_error})", path)

    # Short rows are padded with NaN
    df = df.fillna("")
    headers = [clean_header(c) for c in df.iloc[0]]
    df = df.iloc[1:]

    # Duplicate headers after trimming: keep the first, as the normalizer does
    keep = [i for i, h in enumerate(headers) if h not in headers[:i]]
    df = df.iloc[:, keep]
    df.columns = [headers[i] for i in keep]

    return df.to_dict(orient="records")


def load_profile(profile: DatasetProfile, data_dir: Path = DATA_FOLDER) -> list[Fund]:
    """Read and normalize one profile's export."""
    profile = DatasetProfile(profile)
    path = source_path(profile, data_dir)
    rows = read_raw_rows(path, profile.value)
    logger.info("Read %d raw rows from %s", len(rows), path.name)
    return normalize(rows, profile)


# ---------------------------------------------------------------------------
# Workbook conversion (upload tooling)
# ---------------------------------------------------------------------------

def sheet_slug(sheet_name: str) -> str:
    """'Fondos Gestión Activa' -> 'fondos-gestion-activa'."""
    text = unicodedata.normalize("NFD", sheet_name.lower())
    text = "".join(ch for ch in text if unicodedata.category(ch) != "Mn")
    return re.sub(r"\s+", "-", text.strip())


def convert_workbook(source: Union[Path, bytes], data_dir: Path = DATA_FOLDER) -> list[dict]:
    """Write every sheet of an Excel workbook as a datos-<slug>.csv export.

    Returns one entry per sheet with the written file name, row count, and
    the dataset profile it feeds (None for sheets no profile reads).
    """
    handle = io.BytesIO(source) if isinstance(source, bytes) else source
    try:
        sheets = pd.read_excel(handle, sheet_name=None, dtype=str, engine="openpyxl")
    except (ValueError, OSError) as exc:
        raise IngestionError("workbook", str(exc)) from exc

    data_dir.mkdir(parents=True, exist_ok=True)
    results = []
    for sheet_name, df in sheets.items():
        df = df.dropna(how="all").fillna("")
        slug = sheet_slug(str(sheet_name))
        out = data_dir / SOURCE_FILE_TEMPLATE.format(slug=slug)
        df.to_csv(out, sep=CSV_DELIMITER, index=False, encoding="utf-8")
        try:
            profile = DatasetProfile(slug)
        except ValueError:
            profile = None
        results.append({
            "sheet": str(sheet_name),
            "file": out.name,
            "rows": len(df),
            "profile": profile.value if profile else None,
        })
        logger.info("Converted sheet '%s' -> %s (%d rows)", sheet_name, out.name, len(df))
    return results
