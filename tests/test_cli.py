from pathlib import Path

from fund_explorer.cli import main


def test_query_prints_sorted_page(populated_sources: Path, capsys):
    code = main(["--data-dir", str(populated_sources), "query", "--source", "etf-y-etc"])
    out = capsys.readouterr().out
    assert code == 0
    assert out.index("IE00BNTVVR89") < out.index("LU0000000010")
    assert "2 matching funds" in out


def test_query_with_filters(populated_sources: Path, capsys):
    code = main(["--data-dir", str(populated_sources), "query", "--hedge", "Sí"])
    out = capsys.readouterr().out
    assert code == 0
    assert "LU0000000002" in out
    assert "ES0000000001" not in out


def test_filters_prints_counts(populated_sources: Path, capsys):
    assert main(["--data-dir", str(populated_sources), "filters"]) == 0
    out = capsys.readouterr().out
    assert "Renta Fija Euro" in out
    assert "hedge" not in out


def test_missing_source_returns_error_code(populated_sources: Path, capsys):
    code = main(["--data-dir", str(populated_sources), "query", "--source", "fondos-indexados"])
    assert code == 1
    assert "fondos-indexados" in capsys.readouterr().err
