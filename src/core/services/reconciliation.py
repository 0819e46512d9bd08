"""Reconciliación de fechas contra su día de entrega y migración de timestamps.

Este módulo reúne los dos lotes que corrigen `fecha_entrega_programada` en el
store. Ambos son idempotentes: una segunda corrida sobre los mismos datos no
propone escrituras nuevas.

Separación:
- `plan_*`: decisión pura por registro (sin I/O), fácil de testear.
- `reconcile_weekday_labels` / `migrate_timestamps`: recorren el store con
  concurrencia acotada y escriben solo si `apply=True`.

Un fallo de escritura en un registro se cuenta como error y el lote sigue.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from core.config import AppSettings
from core.domain.cycles import MONTH_NAMES
from core.domain.models import (
    DATE_FIELD,
    NOT_AVAILABLE,
    BatchReport,
    OrderRecord,
    Outcome,
    RecordOutcome,
    WriteRequest,
)
from core.interfaces.store import OrderStore
from core.services.calendar_kernel import add_days, is_canonical_date, weekday, weekday_from_label
from core.services.canonicalizer import DEFAULT_UTC_OFFSET_HOURS, canonicalize

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_DAYS = 3

RECONCILE_OPERATION = "reconciliar-dia-entrega"
MIGRATE_OPERATION = "migrar-timestamps"


@dataclass(frozen=True)
class CorrectionPlan:
    """Decisión para un registro: qué pasa y con qué valor."""

    outcome: Outcome
    after: str | None = None
    reason: str | None = None


def describe_raw(raw: Any) -> str | None:
    """Representación estable del valor original, para el reporte de auditoría."""

    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    if isinstance(raw, Mapping):
        return json.dumps(dict(raw), default=str, sort_keys=True, ensure_ascii=False)
    return repr(raw)


def _nearest_offsets(search_days: int) -> list[int]:
    offsets: list[int] = []
    for k in range(1, search_days + 1):
        offsets.extend((k, -k))
    return offsets


def plan_label_correction(record: OrderRecord, *, search_days: int = DEFAULT_SEARCH_DAYS) -> CorrectionPlan:
    """Compara la fecha guardada con `dia_entrega` y propone la fecha más cercana.

    Nunca busca más allá de ±`search_days`: una deriva mayor es otro tipo de
    error de datos y queda para revisión humana.
    """

    label = record.dia_entrega
    fecha = record.fecha_entrega_programada

    if not label or not label.strip():
        return CorrectionPlan(Outcome.SKIPPED, reason="sin dia_entrega")
    if fecha is None or fecha == "":
        return CorrectionPlan(Outcome.SKIPPED, reason="sin fecha_entrega_programada")
    if not is_canonical_date(fecha):
        return CorrectionPlan(Outcome.UNRESOLVED, reason="fecha no canónica (migrar primero)")

    target = weekday_from_label(label)
    if target is None:
        return CorrectionPlan(Outcome.UNRESOLVED, reason=f"dia_entrega desconocido: {label!r}")

    if weekday(fecha) == target:
        return CorrectionPlan(Outcome.ALREADY_CORRECT, after=fecha)

    for k in _nearest_offsets(search_days):
        candidate = add_days(fecha, k)
        if candidate is not None and weekday(candidate) == target:
            return CorrectionPlan(Outcome.CORRECTED, after=candidate)

    return CorrectionPlan(
        Outcome.UNRESOLVED,
        reason=f"sin {label} a ±{search_days} días de {fecha}",
    )


def plan_timestamp_migration(
    record: OrderRecord,
    *,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
    month_names: Sequence[str] = MONTH_NAMES,
) -> CorrectionPlan:
    """Convierte la fecha guardada a `YYYY-MM-DD` si aún no lo es."""

    fecha = record.fecha_entrega_programada
    if is_canonical_date(fecha):
        return CorrectionPlan(Outcome.ALREADY_CORRECT, after=fecha)

    canonical = canonicalize(fecha, utc_offset_hours, month_names=month_names)
    if canonical == NOT_AVAILABLE:
        return CorrectionPlan(Outcome.UNRESOLVED, reason="formato de fecha no reconocido")
    return CorrectionPlan(Outcome.CORRECTED, after=canonical)


async def run_correction_batch(
    *,
    operation: str,
    store: OrderStore,
    planner: Callable[[OrderRecord], CorrectionPlan],
    apply: bool = False,
    max_concurrency: int = 10,
) -> BatchReport:
    """Aplica `planner` a cada pedido del store y (opcionalmente) escribe.

    Cada registro es independiente: lectura del snapshot, decisión y escritura
    de un único campo. Las escrituras comparten un semáforo.
    """

    orders = await store.list_orders()
    report = BatchReport(operation=operation, dry_run=not apply)
    sem = asyncio.Semaphore(max(1, max_concurrency))

    async def process_one(order: OrderRecord) -> tuple[RecordOutcome, WriteRequest | None]:
        plan = planner(order)
        outcome = RecordOutcome(
            record_id=order.id,
            codigo_pedido=order.codigo_pedido,
            outcome=plan.outcome,
            before=describe_raw(order.fecha_entrega_programada),
            after=plan.after,
            reason=plan.reason,
        )
        if plan.outcome is not Outcome.CORRECTED or plan.after is None:
            return outcome, None

        request = WriteRequest(record_id=order.id, field=DATE_FIELD, new_value=plan.after)
        if not apply:
            return outcome, request

        async with sem:
            try:
                await store.update_field(order.id, DATE_FIELD, plan.after)
            except Exception as exc:
                logger.error("%s: no se pudo escribir %s (%s)", operation, order.id, exc)
                failed = outcome.model_copy(
                    update={"outcome": Outcome.ERROR, "reason": f"error al escribir: {exc}"}
                )
                return failed, None
        return outcome, request

    results = await asyncio.gather(*(process_one(order) for order in orders))
    for outcome, request in results:
        report.record(outcome)
        if request is not None:
            report.write_requests.append(request)

    logger.info(
        "%s%s: %d corregidos, %d ya correctos, %d sin resolver, %d omitidos, %d errores",
        operation,
        " (simulación)" if report.dry_run else "",
        report.corrected,
        report.already_correct,
        report.unresolved,
        report.skipped,
        report.errors,
    )
    return report


async def reconcile_weekday_labels(
    store: OrderStore,
    *,
    settings: AppSettings | None = None,
    apply: bool = False,
) -> BatchReport:
    """Corrige fechas que no coinciden con su `dia_entrega` (±3 días)."""

    settings = settings or AppSettings()
    return await run_correction_batch(
        operation=RECONCILE_OPERATION,
        store=store,
        planner=lambda record: plan_label_correction(
            record, search_days=settings.reconcile_search_days
        ),
        apply=apply,
        max_concurrency=settings.store_max_concurrency,
    )


async def migrate_timestamps(
    store: OrderStore,
    *,
    settings: AppSettings | None = None,
    apply: bool = False,
) -> BatchReport:
    """Convierte fechas legadas (Timestamp, epoch, ISO, texto) a `YYYY-MM-DD`."""

    settings = settings or AppSettings()
    return await run_correction_batch(
        operation=MIGRATE_OPERATION,
        store=store,
        planner=lambda record: plan_timestamp_migration(
            record,
            utc_offset_hours=settings.utc_offset_hours,
            month_names=settings.month_names,
        ),
        apply=apply,
        max_concurrency=settings.store_max_concurrency,
    )
