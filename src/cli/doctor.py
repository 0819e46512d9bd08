"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from adapters.json_store import JsonFileOrderStore
from adapters.memory_store import InMemoryOrderStore
from core.config import AppSettings, get_user_env_file
from core.services.calendar_kernel import weekday
from core.services.canonicalizer import canonicalize
from core.services.cycle_windows import packing_deadline, shipment_window
from core.services.reconciliation import migrate_timestamps, reconcile_weekday_labels

app = typer.Typer(no_args_is_help=True, help="Diagnóstico del entorno y la configuración.")

_console = Console()


def _check_kernel(settings: AppSettings) -> tuple[bool, str]:
    """Fechas conocidas: si alguna falla, ningún cálculo de ventanas es confiable."""

    checks = {
        "2026-01-19 es lunes": weekday("2026-01-19") == 1,
        "epoch 1768867200 a UTC-6": canonicalize(1768867200, -6) == "2026-01-19",
        "límite de empaque": packing_deadline("2026-01-19", 7) == "2026-01-24",
        "ventana de envío": shipment_window("2026-01-21").end == "2026-01-23",
    }
    failed = [name for name, ok in checks.items() if not ok]
    if failed:
        return False, "Falla: " + ", ".join(failed)
    return True, f"{len(checks)} comprobaciones; offset configurado UTC{settings.utc_offset_hours:+d}"


_SAMPLE_DOCS = (
    {"id": "ts", "dia_entrega": "Lunes", "fecha_entrega_programada": {"_seconds": 1768867200, "_nanoseconds": 0}},
    {"id": "desfasado", "dia_entrega": "Martes", "fecha_entrega_programada": "2026-01-19"},
    {"id": "monto", "dia_entrega": "Lunes", "fecha_entrega_programada": "2026-01-19", "total": "$25"},
)


def _check_batches(settings: AppSettings) -> tuple[bool, str]:
    """Migración + reconciliación sobre un store en memoria con datos de muestra."""

    sample_settings = settings.model_copy(update={"utc_offset_hours": -6})

    async def _run() -> tuple[int, int, int]:
        store = InMemoryOrderStore(_SAMPLE_DOCS)
        migrated = await migrate_timestamps(store, settings=sample_settings, apply=True)
        reconciled = await reconcile_weekday_labels(store, settings=sample_settings)
        return migrated.corrected, reconciled.corrected, reconciled.already_correct

    try:
        counts = asyncio.run(_run())
    except Exception as exc:
        return False, str(exc)
    if counts != (1, 1, 2):
        return False, f"Conteos inesperados (migrados, corregidos, correctos) = {counts}"
    return True, "migrar + reconciliar en memoria: 1 migrado, 1 corregido, 2 correctos"


def _check_store(path: Path | None) -> tuple[bool, str]:
    if path is None:
        return False, "Sin CICLO_ENVIOS_STORE_PATH (usa --store en cada comando)"
    try:
        orders = asyncio.run(JsonFileOrderStore(path).list_orders())
    except Exception as exc:
        return False, str(exc)
    return True, f"{len(orders)} pedidos en {path}"


@app.command()
def run(
    store: Path | None = typer.Option(None, "--store", help="Snapshot JSON a verificar."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    table = Table(title="CICLO-ENVIOS Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    try:
        settings = AppSettings()
    except ValidationError as exc:
        table.add_row("Config", "FAIL", str(exc))
        _console.print(table)
        raise typer.Exit(code=1) from exc

    env_file = get_user_env_file()
    table.add_row("Config", "OK", f"{env_file} ({'existe' if env_file.exists() else 'no creado'})")
    table.add_row("Offset", "OK", f"UTC{settings.utc_offset_hours:+d}")
    table.add_row("Meses", "OK", ", ".join(settings.month_names[:3]) + ", ...")

    ok_kernel, detail_kernel = _check_kernel(settings)
    table.add_row("Calendario", "OK" if ok_kernel else "FAIL", detail_kernel)

    ok_batches, detail_batches = _check_batches(settings)
    table.add_row("Lotes", "OK" if ok_batches else "FAIL", detail_batches)

    ok_store, detail_store = _check_store(store or settings.store_path)
    table.add_row("Store JSON", "OK" if ok_store else "WARN", detail_store)

    _console.print(table)

    if not (ok_kernel and ok_batches):
        raise typer.Exit(code=1)
    if not ok_store:
        _console.print(
            "\n[yellow]Note:[/yellow] Ejecuta `ciclo-envios configurar --store-path ...` para fijar el snapshot."
        )
