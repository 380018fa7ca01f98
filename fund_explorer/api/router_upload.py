"""
Upload endpoint: replace source exports and re-normalize the affected profiles.

Accepts either an Excel workbook (one sheet per profile, converted to
semicolon CSVs) or a single semicolon CSV for an explicit data source.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from fund_explorer.api.dependencies import get_store_or_empty
from fund_explorer.api.response_models import UploadResponse, UploadResult
from fund_explorer.config import UPLOAD_EXTENSIONS
from fund_explorer.data.loader import convert_workbook, read_raw_rows, source_path
from fund_explorer.data.schemas import DatasetProfile
from fund_explorer.data.store import FundStore
from fund_explorer.errors import IngestionError, QueryValidationError
from fund_explorer.logging_setup import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["upload"])


def _profile_from_filename(filename: str) -> Optional[DatasetProfile]:
    stem = filename.rsplit(".", 1)[0].lower()
    if stem.startswith("datos-"):
        stem = stem[len("datos-"):]
    try:
        return DatasetProfile(stem)
    except ValueError:
        return None


@router.post("/upload", response_model=UploadResponse)
async def upload_source(
    file: UploadFile = File(...),
    dataSource: Optional[str] = Form(None),
    store: FundStore = Depends(get_store_or_empty),
):
    """Store an uploaded export and reload the profiles it feeds."""
    if not file.filename:
        raise HTTPException(400, "Missing filename")
    filename = file.filename
    if not filename.lower().endswith(UPLOAD_EXTENSIONS):
        raise HTTPException(400, f"Only {', '.join(UPLOAD_EXTENSIONS)} files are accepted (got '{filename}')")

    content = await file.read()
    store.data_dir.mkdir(parents=True, exist_ok=True)

    if filename.lower().endswith(".xlsx"):
        try:
            written = convert_workbook(content, store.data_dir)
        except IngestionError as e:
            raise HTTPException(400, str(e))
        results = [UploadResult(**w) for w in written]
        affected = [DatasetProfile(w["profile"]) for w in written if w["profile"]]
    else:
        try:
            profile = DatasetProfile.parse(dataSource) if dataSource else _profile_from_filename(filename)
        except QueryValidationError as e:
            raise HTTPException(400, str(e))
        if profile is None:
            raise HTTPException(400, "dataSource is required when the filename does not name a profile")
        try:
            rows = read_raw_rows(content, profile.value)
        except IngestionError as e:
            raise HTTPException(400, str(e))
        dest = source_path(profile, store.data_dir)
        tmp = dest.with_suffix(".csv.tmp")
        tmp.write_bytes(content)
        tmp.replace(dest)
        results = [UploadResult(file=dest.name, rows=len(rows), profile=profile.value)]
        affected = [profile]

    reloaded: dict[str, int] = {}
    errors: dict[str, str] = {}
    for profile in affected:
        try:
            reloaded[profile.value] = store.reload(profile)
        except IngestionError as e:
            logger.warning("Reload after upload failed: %s", e)
            errors[profile.value] = e.reason

    return UploadResponse(
        status="uploaded" if not errors else "partial",
        files=results,
        reloaded=reloaded,
        errors=errors,
    )
