"""Tests for the Typer CLI."""

import json

import pytest
from rich.console import Console
from typer.testing import CliRunner

from cli import doctor
from cli import main as cli_main

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch, settings, tmp_path):
    """Wide consoles keep table cells on one line; config goes to a temp dir."""
    monkeypatch.setattr(cli_main, "_console", Console(width=200))
    monkeypatch.setattr(doctor, "_console", Console(width=200))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.chdir(tmp_path)


class TestWindowCommands:
    """Tests for read-only commands."""

    def test_ventanas(self):
        result = runner.invoke(cli_main.app, ["ventanas", "--hoy", "2026-01-19"])
        assert result.exit_code == 0, result.output
        assert "2026-01-24" in result.output
        assert "2026-01-21" in result.output

    def test_invalid_hoy(self):
        result = runner.invoke(cli_main.app, ["ventanas", "--hoy", "2026-02-30"])
        assert result.exit_code == 2

    def test_urgentes(self, snapshot_path):
        """Test two pending orders fall before Saturday 24."""
        result = runner.invoke(
            cli_main.app, ["urgentes", "--hoy", "2026-01-19", "--store", str(snapshot_path)]
        )
        assert result.exit_code == 0, result.output
        assert "EG20260119001" in result.output
        assert "2 pedidos" in result.output

    def test_envios(self, snapshot_path):
        result = runner.invoke(cli_main.app, ["envios", "--hoy", "2026-01-17", "--store", str(snapshot_path)])
        assert result.exit_code == 0, result.output
        assert "2 pedidos" in result.output

    def test_remunerar(self, snapshot_path):
        result = runner.invoke(
            cli_main.app, ["remunerar", "--hoy", "2026-01-19", "--store", str(snapshot_path)]
        )
        assert result.exit_code == 0, result.output
        assert "EG20260119003" in result.output

    def test_retiros(self, snapshot_path):
        result = runner.invoke(
            cli_main.app,
            ["retiros", "--hoy", "2026-01-19", "--dias", "2", "--store", str(snapshot_path)],
        )
        assert result.exit_code == 0, result.output
        assert "1 pedidos" in result.output

    def test_ciclos(self, snapshot_path):
        result = runner.invoke(cli_main.app, ["ciclos", "--store", str(snapshot_path)])
        assert result.exit_code == 0, result.output
        assert "SEMANA 1 - SÁBADO" in result.output

    def test_missing_store(self):
        result = runner.invoke(cli_main.app, ["urgentes", "--hoy", "2026-01-19"])
        assert result.exit_code == 2


class TestBatchCommands:
    """Tests for reconciliar / migrar."""

    def test_migrar_dry_run_leaves_file(self, snapshot_path):
        before = snapshot_path.read_text(encoding="utf-8")
        result = runner.invoke(cli_main.app, ["migrar", "--store", str(snapshot_path)])
        assert result.exit_code == 0, result.output
        assert "SIMULACIÓN" in result.output
        assert snapshot_path.read_text(encoding="utf-8") == before

    def test_reconciliar_apply_with_report(self, snapshot_path, tmp_path):
        report_path = tmp_path / "out" / "reporte.json"
        result = runner.invoke(
            cli_main.app,
            ["reconciliar", "--store", str(snapshot_path), "--aplicar", "--reporte", str(report_path)],
        )
        assert result.exit_code == 0, result.output

        report = json.loads(report_path.read_text(encoding="utf-8"))
        assert report["corrected"] == 1
        assert report["dry_run"] is False
        payload = json.loads(snapshot_path.read_text(encoding="utf-8"))
        assert payload["pedidos"][1]["fecha_entrega_programada"] == "2026-01-20"


class TestConfigCommands:
    """Tests for configurar and doctor."""

    def test_configurar_writes_user_env(self, tmp_path):
        result = runner.invoke(
            cli_main.app, ["configurar", "--offset=-5", "--store-path", "pedidos.json"]
        )
        assert result.exit_code == 0, result.output
        env_text = (tmp_path / "config" / "ciclo-envios" / ".env").read_text(encoding="utf-8")
        assert "CICLO_ENVIOS_UTC_OFFSET_HOURS=-5" in env_text
        assert "CICLO_ENVIOS_STORE_PATH=pedidos.json" in env_text

    def test_doctor(self, snapshot_path):
        result = runner.invoke(cli_main.app, ["doctor", "run", "--store", str(snapshot_path)])
        assert result.exit_code == 0, result.output
        assert "4 pedidos" in result.output
        assert "Lotes" in result.output
        assert "1 migrado, 1 corregido, 2 correctos" in result.output

    def test_doctor_batch_check(self, settings):
        """Test the in-memory batch check passes whatever offset is configured."""
        shifted = settings.model_copy(update={"utc_offset_hours": 3})
        ok, detail = doctor._check_batches(shifted)
        assert ok, detail
