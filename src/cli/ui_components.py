"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import BatchReport, CycleGroup, DateWindow, Outcome, PayoutWindow, QualifiedOrder
from core.services.calendar_kernel import format_long_date, format_short_date


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Permite desactivar banner en modos no interactivos (JSON/pipelines).
    """

    title = Text("CICLO-ENVIOS", style="bold cyan")
    subtitle = Text("Envíos miércoles/sábado • Remuneraciones • Reconciliación", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_windows_table(
    *,
    today: str,
    deadline: str,
    shipment: DateWindow,
    payouts: Iterable[PayoutWindow],
) -> Table:
    """Resumen de todas las ventanas calculadas para `today`."""

    table = Table(title=f"Ventanas para {format_long_date(today)}")
    table.add_column("Ventana", style="cyan", no_wrap=True)
    table.add_column("Desde", style="white")
    table.add_column("Hasta", style="white")
    table.add_column("Notas", style="dim")

    table.add_row("Empaque urgente", "", deadline, "fecha < límite, estado pendiente")
    table.add_row("Envío", shipment.start, shipment.end, "pendiente / empacada")
    for window in payouts:
        label = f"Remunerar {window.tipo.label()}"
        note = f"paga {format_short_date(window.payday)}"
        if not window.actual:
            note += " (anterior)"
        table.add_row(label, window.start, window.end, note)
    return table


def build_orders_table(title: str, orders: Iterable[QualifiedOrder]) -> Table:
    table = Table(title=title)
    table.add_column("Fecha", style="cyan", no_wrap=True)
    table.add_column("Código", style="white")
    table.add_column("Estado", style="green")
    table.add_column("Día entrega", style="magenta")
    table.add_column("Total", justify="right")
    table.add_column("Envío", justify="right", style="dim")

    for item in orders:
        record = item.record
        table.add_row(
            format_short_date(item.fecha_canonica),
            record.codigo_pedido or record.id,
            record.estado,
            record.dia_entrega or "",
            f"{record.total:.2f}",
            f"{record.monto_envio:.2f}",
        )
    return table


def build_cycles_table(groups: Iterable[CycleGroup]) -> Table:
    """Una fila por ciclo con sus totales ("pedidos por fecha")."""

    table = Table(title="Pedidos por ciclo")
    table.add_column("Ciclo", style="cyan", no_wrap=True)
    table.add_column("Ancla", style="white")
    table.add_column("Días", style="dim")
    table.add_column("Fechas con pedidos", style="white")
    table.add_column("Pedidos", justify="right")
    table.add_column("Ingresos", justify="right", style="green")
    table.add_column("Envíos", justify="right", style="dim")

    for group in groups:
        table.add_row(
            group.etiqueta,
            format_long_date(group.anchor),
            group.dias_incluidos,
            ", ".join(format_short_date(f.fecha) for f in group.fechas),
            str(group.cantidad),
            f"{group.total_ingresos:.2f}",
            f"{group.total_envios:.2f}",
        )
    return table


_OUTCOME_STYLES = {
    Outcome.CORRECTED: "green",
    Outcome.ALREADY_CORRECT: "dim",
    Outcome.UNRESOLVED: "yellow",
    Outcome.SKIPPED: "dim",
    Outcome.ERROR: "red",
}


def build_report_panel(report: BatchReport) -> Panel:
    """Panel con los contadores del lote."""

    mode = "SIMULACIÓN" if report.dry_run else "APLICADO"
    body = Text()
    body.append(f"Registros: {report.total}\n", style="bold")
    body.append(f"Corregidos: {report.corrected}\n", style="green")
    body.append(f"Ya correctos: {report.already_correct}\n")
    body.append(f"Sin resolver: {report.unresolved}\n", style="yellow")
    body.append(f"Omitidos: {report.skipped}\n", style="dim")
    body.append(f"Errores: {report.errors}", style="red" if report.errors else "")
    title = Text(f"{report.operation} [{mode}]", style="bold yellow")
    return Panel(body, title=title, border_style="yellow")


def build_report_table(report: BatchReport, *, include_unchanged: bool = False) -> Table:
    table = Table(title="Detalle")
    table.add_column("Pedido", style="cyan", no_wrap=True)
    table.add_column("Resultado")
    table.add_column("Antes", style="dim")
    table.add_column("Después", style="white")
    table.add_column("Motivo", style="dim")

    for detail in report.details:
        if not include_unchanged and detail.outcome in (Outcome.ALREADY_CORRECT, Outcome.SKIPPED):
            continue
        table.add_row(
            detail.codigo_pedido or detail.record_id,
            Text(detail.outcome.value, style=_OUTCOME_STYLES[detail.outcome]),
            detail.before or "",
            detail.after or "",
            detail.reason or "",
        )
    return table
