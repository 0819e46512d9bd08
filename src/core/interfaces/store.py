"""Contrato del store de pedidos.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite que adaptadores (memoria, snapshot JSON, Firestore) sean
  intercambiables y testeables sin acoplar el Core a una tecnología concreta.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from core.domain.models import OrderRecord


class RecordNotFoundError(KeyError):
    """El store no tiene un registro con ese id."""


@runtime_checkable
class OrderStore(Protocol):
    """Contrato mínimo: consultar, leer uno y escribir un campo.

    Reglas de diseño:
    - Es asíncrono porque típicamente hará I/O (red/disco).
    - `update_field` escribe UN campo; cada escritura es atómica por registro.
    """

    async def list_orders(self, estados: Iterable[str] | None = None) -> list[OrderRecord]:
        """Snapshot de pedidos, opcionalmente filtrado por estado."""

        ...

    async def get_order(self, record_id: str) -> OrderRecord:
        """Lee un pedido; lanza `RecordNotFoundError` si no existe."""

        ...

    async def update_field(self, record_id: str, field: str, value: Any) -> None:
        """Reemplaza el valor de `field` en el registro indicado."""

        ...
