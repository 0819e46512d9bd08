"""CLI principal (Typer + Rich).

Por qué una CLI delgada:
- Toda la lógica de fechas vive en `core.services`; aquí solo se resuelve
  `hoy`, se abre el store y se pintan tablas.
- Es el único lugar donde se lee el reloj del sistema.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path

import typer
from rich.console import Console

from adapters.json_exporter import export_report_json
from adapters.json_store import JsonFileOrderStore
from cli import doctor
from cli.ui_components import (
    build_cycles_table,
    build_orders_table,
    build_report_panel,
    build_report_table,
    build_windows_table,
    print_banner,
)
from core.config import AppSettings, write_user_env_vars
from core.domain.models import BatchReport, OrderRecord
from core.logging_setup import configure_logging
from core.services.calendar_kernel import format_long_date, is_canonical_date
from core.services.canonicalizer import canonicalize
from core.services.cycle_grouping import group_by_cycle, select_cycles_in_range
from core.services.cycle_windows import (
    InvalidDateError,
    orders_in_shipment_window,
    packing_deadline,
    payout_review,
    payout_windows,
    pending_pickup,
    shipment_window,
    urgent_to_pack,
)
from core.services.reconciliation import migrate_timestamps, reconcile_weekday_labels

app = typer.Typer(
    no_args_is_help=True,
    help="Ventanas de envío miércoles/sábado, remuneraciones y reconciliación de fechas.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()

HOY_OPTION_HELP = "Fecha de referencia YYYY-MM-DD (por defecto: hoy en el offset configurado)."
STORE_OPTION_HELP = "Snapshot JSON de pedidos (por defecto: CICLO_ENVIOS_STORE_PATH)."


def _settings() -> AppSettings:
    return AppSettings()


def _resolve_today(hoy: str | None, settings: AppSettings) -> str:
    if hoy is None:
        return canonicalize(int(time.time()), settings.utc_offset_hours, month_names=settings.month_names)
    if not is_canonical_date(hoy):
        raise typer.BadParameter(f"Fecha inválida: {hoy!r} (se espera YYYY-MM-DD)", param_hint="--hoy")
    return hoy


def _resolve_day(value: str | None, name: str) -> str | None:
    if value is not None and not is_canonical_date(value):
        raise typer.BadParameter(f"Fecha inválida: {value!r}", param_hint=name)
    return value


def _open_store(store: Path | None, settings: AppSettings) -> JsonFileOrderStore:
    path = store or settings.store_path
    if path is None:
        raise typer.BadParameter(
            "Indica --store o configura CICLO_ENVIOS_STORE_PATH", param_hint="--store"
        )
    return JsonFileOrderStore(Path(path))


def _load_orders(store: JsonFileOrderStore) -> list[OrderRecord]:
    try:
        return asyncio.run(store.list_orders())
    except (OSError, ValueError) as exc:
        _console.print(f"[red]No se pudo leer el store:[/red] {exc}")
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    banner: bool = typer.Option(False, "--banner", help="Muestra el banner de bienvenida."),
) -> None:
    """Configura logging antes de cualquier comando."""

    settings = _settings()
    configure_logging(settings.log_level)
    if banner:
        print_banner(_console)


@app.command()
def ventanas(hoy: str | None = typer.Option(None, "--hoy", help=HOY_OPTION_HELP)) -> None:
    """Muestra el límite de empaque y las ventanas de envío y remuneración."""

    settings = _settings()
    today = _resolve_today(hoy, settings)
    try:
        table = build_windows_table(
            today=today,
            deadline=packing_deadline(today, settings.urgent_horizon_days),
            shipment=shipment_window(today),
            payouts=payout_windows(today),
        )
    except InvalidDateError as exc:
        raise typer.BadParameter(str(exc), param_hint="--hoy") from exc
    _console.print(table)


@app.command()
def urgentes(
    hoy: str | None = typer.Option(None, "--hoy", help=HOY_OPTION_HELP),
    store: Path | None = typer.Option(None, "--store", help=STORE_OPTION_HELP),
) -> None:
    """Pedidos pendientes cuya fecha vence antes del límite de empaque."""

    settings = _settings()
    today = _resolve_today(hoy, settings)
    orders = _load_orders(_open_store(store, settings))
    try:
        deadline = packing_deadline(today, settings.urgent_horizon_days)
        result = urgent_to_pack(
            orders,
            today,
            horizon_days=settings.urgent_horizon_days,
            utc_offset_hours=settings.utc_offset_hours,
            month_names=settings.month_names,
        )
    except InvalidDateError as exc:
        raise typer.BadParameter(str(exc), param_hint="--hoy") from exc
    _console.print(build_orders_table(f"Urgentes por empacar (antes de {deadline})", result))
    _console.print(f"[bold]{len(result)}[/bold] pedidos")


@app.command()
def envios(
    hoy: str | None = typer.Option(None, "--hoy", help=HOY_OPTION_HELP),
    store: Path | None = typer.Option(None, "--store", help=STORE_OPTION_HELP),
) -> None:
    """Pedidos que salen en el próximo envío por encomienda."""

    settings = _settings()
    today = _resolve_today(hoy, settings)
    orders = _load_orders(_open_store(store, settings))
    try:
        window = shipment_window(today)
        result = orders_in_shipment_window(
            orders,
            today,
            utc_offset_hours=settings.utc_offset_hours,
            month_names=settings.month_names,
        )
    except InvalidDateError as exc:
        raise typer.BadParameter(str(exc), param_hint="--hoy") from exc
    title = f"Envío {format_long_date(window.start)} ({window.start} a {window.end})"
    _console.print(build_orders_table(title, result))
    _console.print(f"[bold]{len(result)}[/bold] pedidos")


@app.command()
def remunerar(
    hoy: str | None = typer.Option(None, "--hoy", help=HOY_OPTION_HELP),
    store: Path | None = typer.Option(None, "--store", help=STORE_OPTION_HELP),
) -> None:
    """Pedidos por remunerar en cada ventana (actual y recién cerrada)."""

    settings = _settings()
    today = _resolve_today(hoy, settings)
    orders = _load_orders(_open_store(store, settings))
    try:
        review = payout_review(
            orders,
            today,
            utc_offset_hours=settings.utc_offset_hours,
            month_names=settings.month_names,
        )
    except InvalidDateError as exc:
        raise typer.BadParameter(str(exc), param_hint="--hoy") from exc
    for window, result in review:
        suffix = "" if window.actual else " (anterior)"
        title = f"Remunerar {window.tipo.label()} {window.payday}: {window.start} a {window.end}{suffix}"
        _console.print(build_orders_table(title, result))


@app.command()
def retiros(
    hoy: str | None = typer.Option(None, "--hoy", help=HOY_OPTION_HELP),
    store: Path | None = typer.Option(None, "--store", help=STORE_OPTION_HELP),
    dias: int = typer.Option(0, "--dias", min=0, help="Días hacia atrás desde hoy."),
) -> None:
    """Pedidos enviados que siguen por retirar."""

    settings = _settings()
    today = _resolve_today(hoy, settings)
    orders = _load_orders(_open_store(store, settings))
    try:
        result = pending_pickup(
            orders,
            today,
            days_back=dias,
            utc_offset_hours=settings.utc_offset_hours,
            month_names=settings.month_names,
        )
    except InvalidDateError as exc:
        raise typer.BadParameter(str(exc), param_hint="--hoy") from exc
    _console.print(build_orders_table("Por retirar", result))
    _console.print(f"[bold]{len(result)}[/bold] pedidos")


@app.command()
def ciclos(
    store: Path | None = typer.Option(None, "--store", help=STORE_OPTION_HELP),
    estado: list[str] | None = typer.Option(None, "--estado", help="Filtra por estado (repetible)."),
    desde: str | None = typer.Option(None, "--desde", help="Inicio del rango YYYY-MM-DD."),
    hasta: str | None = typer.Option(None, "--hasta", help="Fin del rango YYYY-MM-DD."),
) -> None:
    """Agrupa pedidos por ciclo (SEMANA n - MIÉRCOLES / SÁBADO) con totales."""

    settings = _settings()
    desde = _resolve_day(desde, "--desde")
    hasta = _resolve_day(hasta, "--hasta")
    orders = _load_orders(_open_store(store, settings))
    groups = group_by_cycle(
        orders,
        estados=estado or None,
        utc_offset_hours=settings.utc_offset_hours,
        month_names=settings.month_names,
    )
    if desde is not None or hasta is not None:
        groups = select_cycles_in_range(groups, desde or hasta, hasta or desde)  # type: ignore[arg-type]
    _console.print(build_cycles_table(groups))


def _finish_batch(report: BatchReport, reporte: Path | None, detalle: bool) -> None:
    _console.print(build_report_panel(report))
    if detalle or report.errors or report.unresolved:
        _console.print(build_report_table(report, include_unchanged=detalle))
    if reporte is not None:
        path = export_report_json(report=report, output_path=reporte)
        _console.print(f"[green]Reporte guardado en:[/green] {path}")
    if report.dry_run and report.corrected:
        _console.print("\n[yellow]Note:[/yellow] Simulación: usa --aplicar para escribir los cambios.")
    if report.errors:
        raise typer.Exit(code=1)


@app.command()
def reconciliar(
    store: Path | None = typer.Option(None, "--store", help=STORE_OPTION_HELP),
    aplicar: bool = typer.Option(False, "--aplicar", help="Escribe las correcciones (por defecto simula)."),
    reporte: Path | None = typer.Option(None, "--reporte", help="Guarda el reporte JSON en esta ruta."),
    detalle: bool = typer.Option(False, "--detalle", help="Incluye registros sin cambios en la tabla."),
) -> None:
    """Alinea `fecha_entrega_programada` con `dia_entrega` (±3 días)."""

    settings = _settings()
    target = _open_store(store, settings)
    try:
        report = asyncio.run(reconcile_weekday_labels(target, settings=settings, apply=aplicar))
    except (OSError, ValueError) as exc:
        _console.print(f"[red]No se pudo leer el store:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    _finish_batch(report, reporte, detalle)


@app.command()
def migrar(
    store: Path | None = typer.Option(None, "--store", help=STORE_OPTION_HELP),
    aplicar: bool = typer.Option(False, "--aplicar", help="Escribe las conversiones (por defecto simula)."),
    reporte: Path | None = typer.Option(None, "--reporte", help="Guarda el reporte JSON en esta ruta."),
    detalle: bool = typer.Option(False, "--detalle", help="Incluye registros sin cambios en la tabla."),
) -> None:
    """Convierte fechas legadas (Timestamp, epoch, ISO, texto) a YYYY-MM-DD."""

    settings = _settings()
    target = _open_store(store, settings)
    try:
        report = asyncio.run(migrate_timestamps(target, settings=settings, apply=aplicar))
    except (OSError, ValueError) as exc:
        _console.print(f"[red]No se pudo leer el store:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    _finish_batch(report, reporte, detalle)


@app.command()
def configurar(
    offset: int | None = typer.Option(None, "--offset", min=-12, max=14, help="Offset UTC fijo en horas."),
    store_path: Path | None = typer.Option(None, "--store-path", help="Snapshot JSON por defecto."),
    horizonte: int | None = typer.Option(None, "--horizonte", min=1, max=28, help="Días del límite de empaque."),
    log_level: str | None = typer.Option(None, "--log-level", help="Nivel de logging."),
) -> None:
    """Guarda la configuración en el .env del usuario.

    Sin opciones pregunta de forma interactiva (pensado para usuarios sin Python).
    """

    if offset is None and store_path is None and horizonte is None and log_level is None:
        current = _settings()
        offset = typer.prompt("Offset UTC (horas)", default=current.utc_offset_hours, type=int)
        raw_path = typer.prompt(
            "Snapshot JSON de pedidos",
            default=str(current.store_path or ""),
            show_default=True,
        ).strip()
        store_path = Path(raw_path) if raw_path else None

    values: dict[str, str] = {}
    if offset is not None:
        if not -12 <= offset <= 14:
            raise typer.BadParameter("El offset debe estar entre -12 y 14", param_hint="--offset")
        values["CICLO_ENVIOS_UTC_OFFSET_HOURS"] = str(offset)
    if store_path is not None:
        values["CICLO_ENVIOS_STORE_PATH"] = str(store_path)
    if horizonte is not None:
        values["CICLO_ENVIOS_URGENT_HORIZON_DAYS"] = str(horizonte)
    if log_level is not None:
        values["CICLO_ENVIOS_LOG_LEVEL"] = log_level.strip().upper()

    env_path = write_user_env_vars(values)
    _console.print(f"[green]Configuración guardada en:[/green] {env_path}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
