"""CLI wiring: config directory option and export command."""

from typer.testing import CliRunner

from edgewatch.cli.app import app

runner = CliRunner()


def test_export_empty_mirror(tmp_path):
    db_path = tmp_path / "data" / "edges.duckdb"
    (tmp_path / "default.toml").write_text(f'[storage]\ndb_path = "{db_path.as_posix()}"\n')
    out = tmp_path / "edges.parquet"
    result = runner.invoke(app, ["--config-dir", str(tmp_path), "export", "--output", str(out)])
    assert result.exit_code == 0, result.output
    assert "Exported 0 edges" in result.output
    assert out.exists()


def test_sync_snapshots_without_credentials_exits_nonzero(tmp_path, monkeypatch):
    for var in ("GOOGLE_SHEET_ID", "GOOGLE_SERVICE_ACCOUNT_EMAIL", "GOOGLE_PRIVATE_KEY"):
        monkeypatch.delenv(var, raising=False)
    (tmp_path / "default.toml").write_text('[sync]\nsink = "sheets"\n')
    result = runner.invoke(app, ["--config-dir", str(tmp_path), "sync", "snapshots"])
    assert result.exit_code == 1
