"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los reportes de lotes se serializan tal cual para auditoría.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
- Las fechas que participan en la lógica de ciclos son siempre strings
  `YYYY-MM-DD`; nunca se guardan instantes con zona horaria.
"""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from core.domain.cycles import CycleType
from core.services.calendar_kernel import add_days, to_julian_day

NOT_AVAILABLE = "N/A"
DATE_FIELD = "fecha_entrega_programada"

# Todo lo que no sea dígito, punto, coma o signo ("$", "USD", espacios).
_AMOUNT_NOISE_RE = re.compile(r"[^\d.,\-]")


class OrderRecord(BaseModel):
    """Snapshot inmutable de un pedido leído del store.

    Por qué `extra="allow"`:
    - El store guarda muchos más campos (cliente, productos, fotos...). El motor
      solo lee los que necesita y conserva el resto sin tocarlos.
    """

    model_config = ConfigDict(extra="allow", frozen=True, arbitrary_types_allowed=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Identificador del documento en el store.",
    )
    estado: str = Field(
        default="",
        description="Estado del pedido (ver `OrderStatus`).",
    )
    fecha_entrega_programada: Any = Field(
        default=None,
        description="Fecha de entrega tal como la guarda el store (RawTimestamp).",
    )
    dia_entrega: str | None = Field(
        default=None,
        description="Etiqueta libre del día de entrega (p.ej. 'Martes').",
    )
    codigo_pedido: str | None = Field(
        default=None,
        description="Código legible del pedido (p.ej. 'EG20260109001').",
    )
    total: float = Field(
        default=0.0,
        description="Total cobrado, incluyendo envío.",
    )
    monto_envio: float = Field(
        default=0.0,
        description="Monto del envío (se paga aparte y regresa).",
    )

    @field_validator("id", "estado", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("dia_entrega", "codigo_pedido", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("total", "monto_envio", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> float:
        """Montos tolerantes: "$25" -> 25.0; lo ilegible cuenta como 0.0.

        Los montos solo alimentan totales; un valor importado de Excel con
        formato raro no debe impedir leer la fecha del pedido.
        """

        if value is None or isinstance(value, bool):
            return 0.0
        if isinstance(value, str):
            value = _AMOUNT_NOISE_RE.sub("", value).replace(",", "")
        try:
            amount = float(value)
        except (TypeError, ValueError):
            return 0.0
        return amount if math.isfinite(amount) else 0.0


class DateWindow(BaseModel):
    """Intervalo cerrado `[start, end]` de fechas canónicas."""

    model_config = ConfigDict(frozen=True)

    start: str
    end: str

    def contains(self, fecha: str) -> bool:
        # Comparación de strings: válida porque ambos lados son YYYY-MM-DD.
        return self.start <= fecha <= self.end

    def dates(self) -> list[str]:
        span = to_julian_day(self.end) - to_julian_day(self.start)
        return [add_days(self.start, k) for k in range(span + 1)]  # type: ignore[misc]


class CycleInstance(BaseModel):
    """Una ocurrencia concreta de un ciclo de envío."""

    model_config = ConfigDict(frozen=True)

    tipo: CycleType
    anchor: str = Field(..., description="Miércoles o sábado que abre el ciclo.")
    dates: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def window(self) -> DateWindow:
        return DateWindow(start=self.dates[0], end=self.dates[-1])

    def contains(self, fecha: str) -> bool:
        return fecha in self.dates


class PayoutWindow(BaseModel):
    """Ventana de remuneración: días cuyos pedidos se liquidan en `payday`."""

    model_config = ConfigDict(frozen=True)

    tipo: CycleType
    payday: str
    start: str
    end: str
    actual: bool = Field(
        default=True,
        description="True para la instancia actual/próxima, False para la recién cerrada.",
    )

    def contains(self, fecha: str) -> bool:
        return self.start <= fecha <= self.end


class QualifiedOrder(BaseModel):
    """Pedido que califica para una ventana, con su fecha ya canonizada."""

    model_config = ConfigDict(frozen=True)

    record: OrderRecord
    fecha_canonica: str


class WriteRequest(BaseModel):
    """Escritura propuesta al store para un único campo de un registro."""

    record_id: str
    field: str = DATE_FIELD
    new_value: str


class Outcome(str, Enum):
    CORRECTED = "corrected"
    ALREADY_CORRECT = "already_correct"
    UNRESOLVED = "unresolved"
    SKIPPED = "skipped"
    ERROR = "error"


class RecordOutcome(BaseModel):
    """Resultado por registro, con valores antes/después para auditoría."""

    record_id: str
    codigo_pedido: str | None = None
    outcome: Outcome
    before: str | None = None
    after: str | None = None
    reason: str | None = None


class BatchReport(BaseModel):
    """Reporte estructurado de una corrida de reconciliación o migración."""

    operation: str = Field(..., min_length=1)
    dry_run: bool = True
    corrected: int = 0
    already_correct: int = 0
    unresolved: int = 0
    skipped: int = 0
    errors: int = 0
    details: list[RecordOutcome] = Field(default_factory=list)
    write_requests: list[WriteRequest] = Field(default_factory=list)

    def record(self, outcome: RecordOutcome) -> None:
        self.details.append(outcome)
        if outcome.outcome is Outcome.CORRECTED:
            self.corrected += 1
        elif outcome.outcome is Outcome.ALREADY_CORRECT:
            self.already_correct += 1
        elif outcome.outcome is Outcome.UNRESOLVED:
            self.unresolved += 1
        elif outcome.outcome is Outcome.SKIPPED:
            self.skipped += 1
        else:
            self.errors += 1

    @property
    def total(self) -> int:
        return len(self.details)


class DateGroup(BaseModel):
    """Pedidos de un mismo día con sus totales."""

    fecha: str
    pedidos: list[OrderRecord] = Field(default_factory=list)
    cantidad: int = 0
    total_ingresos: float = 0.0
    total_envios: float = 0.0


class CycleGroup(BaseModel):
    """Un ciclo con los días que efectivamente tienen pedidos."""

    tipo: CycleType
    anchor: str
    numero: int = Field(default=1, ge=1)
    etiqueta: str
    dias_incluidos: str
    fechas: list[DateGroup] = Field(default_factory=list)
    cantidad: int = 0
    total_ingresos: float = 0.0
    total_envios: float = 0.0
