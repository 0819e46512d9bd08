"""Vocabulario del calendario de envíos.

Este módulo centraliza los enums y tablas de nombres que comparten el motor,
los adaptadores y la CLI. Vive en el dominio para que todos lean una única
fuente sin crear imports circulares con los servicios.
"""

from __future__ import annotations

from enum import Enum

WEDNESDAY = 3
SATURDAY = 6

WEEKDAY_NAMES: tuple[str, ...] = (
    "Domingo",
    "Lunes",
    "Martes",
    "Miércoles",
    "Jueves",
    "Viernes",
    "Sábado",
)

WEEKDAY_SHORT_NAMES: tuple[str, ...] = ("Dom", "Lun", "Mar", "Mié", "Jue", "Vie", "Sáb")

MONTH_NAMES: tuple[str, ...] = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)


class CycleType(str, Enum):
    """Los dos ciclos semanales de envío."""

    MIERCOLES = "miercoles"
    SABADO = "sabado"

    @property
    def anchor_weekday(self) -> int:
        return WEDNESDAY if self is CycleType.MIERCOLES else SATURDAY

    @property
    def length(self) -> int:
        """Días que pertenecen al ciclo, contando el ancla."""

        return 3 if self is CycleType.MIERCOLES else 4

    @property
    def payout_span(self) -> int:
        """Días previos al ancla que liquida su remuneración."""

        return 4 if self is CycleType.MIERCOLES else 3

    @classmethod
    def from_weekday(cls, weekday: int) -> "CycleType":
        """Ciclo de envío al que pertenece un día de la semana (0 = domingo)."""

        return cls.MIERCOLES if weekday in (3, 4, 5) else cls.SABADO

    def label(self) -> str:
        return "MIÉRCOLES" if self is CycleType.MIERCOLES else "SÁBADO"

    def days_label(self) -> str:
        if self is CycleType.MIERCOLES:
            return "Miércoles, Jueves, Viernes"
        return "Sábado, Domingo, Lunes, Martes"


class OrderStatus(str, Enum):
    """Estados de un pedido tal como se guardan en el store."""

    PENDIENTE = "pendiente"
    EMPACADA = "empacada"
    ENVIADO = "enviado"
    RETIRADO = "retirado"
    NO_RETIRADO = "no-retirado"
    RETIRADO_LOCAL = "retirado-local"
    CANCELADO = "cancelado"
    LIBERADO = "liberado"
    RESERVADO = "reservado"
    REMUNERO = "remunero"


SHIPMENT_STATUSES: frozenset[str] = frozenset(
    {OrderStatus.PENDIENTE.value, OrderStatus.EMPACADA.value}
)

PAYOUT_STATUSES: frozenset[str] = frozenset(
    {
        OrderStatus.REMUNERO.value,
        OrderStatus.CANCELADO.value,
        OrderStatus.ENVIADO.value,
        OrderStatus.RETIRADO.value,
        OrderStatus.RETIRADO_LOCAL.value,
    }
)
