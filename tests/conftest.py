"""Shared fixtures: raw export rows and on-disk source folders.

Every test that touches the filesystem gets its own ``sources`` directory
under ``tmp_path`` so snapshots never leak between tests.
"""
from __future__ import annotations

from pathlib import Path

import pytest

from fund_explorer.data.loader import source_path
from fund_explorer.data.schemas import DatasetProfile

ACTIVE_HEADER = [
    "ISIN", "Nombre", "Divisa", "Categoria Singular Bank", "Categoría Morningstar",
    "Gestora / Emisor", "Disponible para asesoramiento con cobro implícito",
    "Disponible para asesoramiento con cobro explícito", "Hedge", "Comisión Gestión",
    "Rent YTD", "Rent 12M", "REQ", "Focus List", "URL KID PRIIPS", "Politica de dividendos",
]

ACTIVE_ROWS = [
    ["ES0000000001", "Renta Fija Corto", "EUR", "Renta Fija Euro", "RF EUR Corto",
     "Gestora A", "Y", "N", "N", "0,45", "1,2", "3,4", "15", "Y", "@https://kid/a.pdf", "Acumulación"],
    ["LU0000000002", "Global Equity", "USD", "Renta Variable Global", "RV Global",
     "Gestora B", "Y", "Y", "Y", "1,50", "8,75", "12,1", "65", "N", "https://kid/b.pdf", "Distribución"],
    ["IE0000000003", "Mixto Flexible", "EUR", "Mixtos Flexible", "Mixto",
     "Gestora C", "N", "N", "N", "1,10", "-2,3", "0,5", "35", "SI", "", ""],
]

ETF_HEADER = ["Focus list", "ISIN", "Nombre", "Divisa", "Categoria", "TER", "Rent YTD",
              "Riesgo", "Tipo de Réplica", "Documentos"]

ETF_ROWS = [
    ["Y", "IE00BNTVVR89", "World ETF", "USD", "Renta Variable", "0,20", "10,5",
     "70", "Física", "@https://api.fundinfo.com/document/kid_es.pdf"],
    ["N", "LU0000000010", "Gold ETC", "USD", "Materias Primas", "0,15", "4,0",
     "85", "Sintética", ""],
]


def _to_csv(header: list[str], rows: list[list[str]]) -> str:
    lines = [";".join(header)] + [";".join(r) for r in rows]
    return "\n".join(lines) + "\n"


@pytest.fixture
def raw_active_rows() -> list[dict[str, str]]:
    return [dict(zip(ACTIVE_HEADER, r)) for r in ACTIVE_ROWS]


@pytest.fixture
def raw_etf_rows() -> list[dict[str, str]]:
    return [dict(zip(ETF_HEADER, r)) for r in ETF_ROWS]


@pytest.fixture
def sources_dir(tmp_path: Path) -> Path:
    d = tmp_path / "sources"
    d.mkdir()
    return d


@pytest.fixture
def write_source(sources_dir: Path):
    """Write a semicolon export for a profile; returns the file path."""

    def _write(profile: DatasetProfile, header: list[str], rows: list[list[str]],
               encoding: str = "utf-8") -> Path:
        path = source_path(profile, sources_dir)
        path.write_bytes(_to_csv(header, rows).encode(encoding))
        return path

    return _write


@pytest.fixture
def populated_sources(write_source, sources_dir: Path) -> Path:
    write_source(DatasetProfile.ACTIVE_MANAGEMENT, ACTIVE_HEADER, ACTIVE_ROWS)
    write_source(DatasetProfile.ETF_AND_ETC, ETF_HEADER, ETF_ROWS)
    return sources_dir
