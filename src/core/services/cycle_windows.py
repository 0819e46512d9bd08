"""Ventanas del ciclo de envíos (miércoles / sábado).

Este módulo consolida la lógica que antes vivía copiada en cada pantalla
(urgentes por empacar, envíos por encomienda, por remunerar). Todo trabaja
sobre strings `YYYY-MM-DD`: `today` lo entrega el llamador ya canonizado y las
comparaciones son lexicográficas, que para ese formato equivalen a las
cronológicas.

Convenciones de intervalos:
- Envío y remuneración: cerrado-cerrado `[start, end]`.
- Empaque urgente: estricto `fecha < límite`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from core.domain.cycles import (
    MONTH_NAMES,
    PAYOUT_STATUSES,
    SATURDAY,
    SHIPMENT_STATUSES,
    WEDNESDAY,
    CycleType,
    OrderStatus,
)
from core.domain.models import (
    NOT_AVAILABLE,
    CycleInstance,
    DateWindow,
    OrderRecord,
    PayoutWindow,
    QualifiedOrder,
)
from core.services.calendar_kernel import add_days, weekday
from core.services.canonicalizer import DEFAULT_UTC_OFFSET_HOURS, canonicalize

logger = logging.getLogger(__name__)

ANCHOR_WEEKDAYS: tuple[int, ...] = (WEDNESDAY, SATURDAY)
MAX_ANCHOR_STEPS = 7
DEFAULT_URGENT_HORIZON_DAYS = 7
SHIPMENT_WINDOW_EXTRA_DAYS = 2


class InvalidDateError(ValueError):
    """`today` (u otra fecha de control) no es una fecha canónica."""


class CalendarKernelError(RuntimeError):
    """La búsqueda de ancla superó una semana: defecto del kernel, no de datos."""


def _require_weekday(fecha: str) -> int:
    dow = weekday(fecha)
    if dow is None:
        raise InvalidDateError(f"Fecha no canónica: {fecha!r}")
    return dow


def _step(fecha: str, n: int) -> str:
    moved = add_days(fecha, n)
    if moved is None:
        raise InvalidDateError(f"Fecha fuera de rango al desplazar {fecha!r} {n} días")
    return moved


def find_anchor(
    today: str,
    direction: int = -1,
    *,
    weekdays: Sequence[int] = ANCHOR_WEEKDAYS,
) -> str:
    """Fecha más cercana (hacia atrás o adelante) cuyo día está en `weekdays`.

    Si `today` ya es un día ancla se devuelve sin recorrer.
    """

    if direction not in (-1, 1):
        raise ValueError("direction debe ser -1 o 1")
    if _require_weekday(today) in weekdays:
        return today

    fecha = today
    for _ in range(MAX_ANCHOR_STEPS):
        fecha = _step(fecha, direction)
        if weekday(fecha) in weekdays:
            return fecha
    raise CalendarKernelError(f"Sin día ancla en 7 pasos desde {today}")


def most_recent_anchor(today: str) -> str:
    return find_anchor(today, -1)


def next_anchor(today: str) -> str:
    return find_anchor(today, 1)


def next_anchor_of(today: str, tipo: CycleType) -> str:
    """Próximo ancla (hoy incluido) de un tipo de ciclo concreto."""

    return find_anchor(today, 1, weekdays=(tipo.anchor_weekday,))


def packing_deadline(today: str, horizon_days: int = DEFAULT_URGENT_HORIZON_DAYS) -> str:
    """Límite de empaque: último envío + `horizon_days` (7 por defecto)."""

    return _step(most_recent_anchor(today), horizon_days)


def is_urgent_to_pack(fecha: str, estado: str, deadline: str) -> bool:
    if estado != OrderStatus.PENDIENTE.value or fecha == NOT_AVAILABLE:
        return False
    return fecha < deadline


def shipment_window(today: str) -> DateWindow:
    """Días que salen en el próximo envío (o el de hoy, si hoy es día de envío)."""

    start = next_anchor(today)
    return DateWindow(start=start, end=_step(start, SHIPMENT_WINDOW_EXTRA_DAYS))


def payout_window_for(tipo: CycleType, payday: str, *, actual: bool = True) -> PayoutWindow:
    """Miércoles liquida Sáb..Mar previos; sábado liquida Mié..Vie previos."""

    return PayoutWindow(
        tipo=tipo,
        payday=payday,
        start=_step(payday, -tipo.payout_span),
        end=_step(payday, -1),
        actual=actual,
    )


def payout_windows(today: str) -> list[PayoutWindow]:
    """Instancia actual y la inmediatamente anterior de cada tipo de ciclo.

    Orden: por `start` ascendente.
    """

    windows: list[PayoutWindow] = []
    for tipo in CycleType:
        payday = next_anchor_of(today, tipo)
        windows.append(payout_window_for(tipo, payday, actual=True))
        windows.append(payout_window_for(tipo, _step(payday, -7), actual=False))
    return sorted(windows, key=lambda w: w.start)


def cycle_for_date(fecha: str) -> CycleInstance | None:
    """Ciclo de envío que contiene `fecha` (None si no es canónica)."""

    dow = weekday(fecha)
    if dow is None:
        return None
    tipo = CycleType.from_weekday(dow)
    back = (dow - tipo.anchor_weekday) % 7
    anchor = add_days(fecha, -back)
    if anchor is None:
        return None
    dates = tuple(d for d in (add_days(anchor, k) for k in range(tipo.length)) if d is not None)
    return CycleInstance(tipo=tipo, anchor=anchor, dates=dates)


def qualify_orders(
    orders: Iterable[OrderRecord],
    predicate: Callable[[OrderRecord, str], bool],
    *,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
    month_names: Sequence[str] = MONTH_NAMES,
) -> list[QualifiedOrder]:
    """Canoniza cada pedido, descarta los "N/A" y filtra con `predicate`.

    El resultado queda ordenado por fecha canónica ascendente (orden estable).
    """

    qualified: list[QualifiedOrder] = []
    for order in orders:
        fecha = canonicalize(
            order.fecha_entrega_programada,
            utc_offset_hours,
            month_names=month_names,
        )
        if fecha == NOT_AVAILABLE:
            logger.warning(
                "Pedido %s excluido: fecha_entrega_programada no reconocida (%r)",
                order.codigo_pedido or order.id,
                order.fecha_entrega_programada,
            )
            continue
        if predicate(order, fecha):
            qualified.append(QualifiedOrder(record=order, fecha_canonica=fecha))
    qualified.sort(key=lambda q: q.fecha_canonica)
    return qualified


def urgent_to_pack(
    orders: Iterable[OrderRecord],
    today: str,
    *,
    horizon_days: int = DEFAULT_URGENT_HORIZON_DAYS,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
    month_names: Sequence[str] = MONTH_NAMES,
) -> list[QualifiedOrder]:
    deadline = packing_deadline(today, horizon_days)
    return qualify_orders(
        orders,
        lambda order, fecha: is_urgent_to_pack(fecha, order.estado, deadline),
        utc_offset_hours=utc_offset_hours,
        month_names=month_names,
    )


def orders_in_shipment_window(
    orders: Iterable[OrderRecord],
    today: str,
    *,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
    month_names: Sequence[str] = MONTH_NAMES,
) -> list[QualifiedOrder]:
    window = shipment_window(today)
    return qualify_orders(
        orders,
        lambda order, fecha: order.estado in SHIPMENT_STATUSES and window.contains(fecha),
        utc_offset_hours=utc_offset_hours,
        month_names=month_names,
    )


def orders_in_payout_window(
    orders: Iterable[OrderRecord],
    window: PayoutWindow,
    *,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
    month_names: Sequence[str] = MONTH_NAMES,
) -> list[QualifiedOrder]:
    return qualify_orders(
        orders,
        lambda order, fecha: order.estado in PAYOUT_STATUSES and window.contains(fecha),
        utc_offset_hours=utc_offset_hours,
        month_names=month_names,
    )


def payout_review(
    orders: Iterable[OrderRecord],
    today: str,
    *,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
    month_names: Sequence[str] = MONTH_NAMES,
) -> list[tuple[PayoutWindow, list[QualifiedOrder]]]:
    """Pedidos por cada ventana de remuneración (actual y recién cerrada)."""

    snapshot = list(orders)
    return [
        (
            window,
            orders_in_payout_window(
                snapshot,
                window,
                utc_offset_hours=utc_offset_hours,
                month_names=month_names,
            ),
        )
        for window in payout_windows(today)
    ]


def pending_pickup(
    orders: Iterable[OrderRecord],
    today: str,
    *,
    days_back: int = 0,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
    month_names: Sequence[str] = MONTH_NAMES,
) -> list[QualifiedOrder]:
    """Pedidos enviados cuya entrega fue hace `days_back` días y siguen sin retirar."""

    target = _step(today, -days_back)
    return qualify_orders(
        orders,
        lambda order, fecha: order.estado == OrderStatus.ENVIADO.value and fecha == target,
        utc_offset_hours=utc_offset_hours,
        month_names=month_names,
    )
