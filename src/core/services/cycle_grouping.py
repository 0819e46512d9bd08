"""Agrupación de pedidos por ciclo semanal (vista "pedidos por fecha").

Miércoles: Mié, Jue, Vie. Sábado: Sáb, Dom, Lun, Mar.
La clave de cada ciclo es `(tipo, ancla)` con el ancla como string, nunca un
objeto fecha.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from core.domain.cycles import MONTH_NAMES, CycleType
from core.domain.models import NOT_AVAILABLE, CycleGroup, DateGroup, OrderRecord
from core.services.calendar_kernel import add_days
from core.services.canonicalizer import DEFAULT_UTC_OFFSET_HOURS, canonicalize
from core.services.cycle_windows import cycle_for_date

logger = logging.getLogger(__name__)


def _date_group(fecha: str, pedidos: list[OrderRecord]) -> DateGroup:
    return DateGroup(
        fecha=fecha,
        pedidos=pedidos,
        cantidad=len(pedidos),
        # El envío se paga aparte y regresa: no cuenta como ingreso.
        total_ingresos=sum(p.total - p.monto_envio for p in pedidos),
        total_envios=sum(p.monto_envio for p in pedidos),
    )


def group_by_cycle(
    orders: Iterable[OrderRecord],
    *,
    estados: Iterable[str] | None = None,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
    month_names: Sequence[str] = MONTH_NAMES,
) -> list[CycleGroup]:
    """Agrupa por día y luego por ciclo, ordenado por ancla ascendente.

    La numeración ("SEMANA n") es independiente para cada tipo de ciclo.
    `estados` filtra pedidos; los ciclos que quedan vacíos se descartan.
    """

    allowed = set(estados) if estados is not None else None

    by_date: dict[str, list[OrderRecord]] = {}
    for order in orders:
        if allowed is not None and order.estado not in allowed:
            continue
        fecha = canonicalize(order.fecha_entrega_programada, utc_offset_hours, month_names=month_names)
        if fecha == NOT_AVAILABLE:
            logger.warning("Pedido %s sin fecha utilizable; fuera de ciclos", order.codigo_pedido or order.id)
            continue
        by_date.setdefault(fecha, []).append(order)

    by_cycle: dict[tuple[CycleType, str], list[DateGroup]] = {}
    for fecha in sorted(by_date):
        cycle = cycle_for_date(fecha)
        if cycle is None:
            continue
        by_cycle.setdefault((cycle.tipo, cycle.anchor), []).append(_date_group(fecha, by_date[fecha]))

    groups: list[CycleGroup] = []
    counters: dict[CycleType, int] = {tipo: 0 for tipo in CycleType}
    for (tipo, anchor), fechas in sorted(by_cycle.items(), key=lambda item: item[0][1]):
        counters[tipo] += 1
        groups.append(
            CycleGroup(
                tipo=tipo,
                anchor=anchor,
                numero=counters[tipo],
                etiqueta=f"SEMANA {counters[tipo]} - {tipo.label()}",
                dias_incluidos=tipo.days_label(),
                fechas=fechas,
                cantidad=sum(f.cantidad for f in fechas),
                total_ingresos=sum(f.total_ingresos for f in fechas),
                total_envios=sum(f.total_envios for f in fechas),
            )
        )
    return groups


def _cycle_span(group: CycleGroup) -> tuple[str, str]:
    end = add_days(group.anchor, group.tipo.length - 1) or group.anchor
    return group.anchor, end


def _index_of(groups: Sequence[CycleGroup], fecha: str) -> int | None:
    for i, group in enumerate(groups):
        start, end = _cycle_span(group)
        if start <= fecha <= end:
            return i
    return None


def select_cycles_in_range(groups: Sequence[CycleGroup], start: str, end: str) -> list[CycleGroup]:
    """Ciclos COMPLETOS desde el que contiene `start` hasta el que contiene `end`.

    Ejemplo: filtrar Sáb 10 a Mar 13 devuelve el ciclo de sábado entero.
    Si alguno de los extremos no cae en un ciclo conocido, no se filtra.
    """

    first = _index_of(groups, start)
    last = _index_of(groups, end)
    if first is None or last is None:
        return list(groups)
    return list(groups[first : last + 1])
