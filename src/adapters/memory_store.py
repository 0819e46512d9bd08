"""Store de pedidos en memoria.

Guarda documentos planos (como los devolvería Firestore) y registra cada
escritura recibida. Lo usan los tests y el autodiagnóstico de `doctor`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from core.domain.models import OrderRecord, WriteRequest
from core.interfaces.store import OrderStore, RecordNotFoundError

logger = logging.getLogger(__name__)


def order_from_document(doc: Mapping[str, Any], record_id: str) -> OrderRecord | None:
    """Construye el snapshot de un documento, o None si no es utilizable.

    Un documento roto se registra y se omite: nunca aborta la lectura del
    resto de la colección.
    """

    try:
        return OrderRecord.model_validate({**doc, "id": record_id})
    except ValidationError as exc:
        logger.warning("Documento %s omitido: %d campos inválidos (%s)", record_id, exc.error_count(), exc)
        return None


class InMemoryOrderStore(OrderStore):
    """Implementación de `OrderStore` sobre un dict `id -> documento`."""

    def __init__(self, documents: Iterable[Mapping[str, Any]] = ()) -> None:
        self._docs: dict[str, dict[str, Any]] = {}
        for doc in documents:
            data = dict(doc)
            self._docs[str(data["id"])] = data
        self.writes: list[WriteRequest] = []

    async def list_orders(self, estados: Iterable[str] | None = None) -> list[OrderRecord]:
        allowed = set(estados) if estados is not None else None
        records: list[OrderRecord] = []
        for record_id, doc in self._docs.items():
            if allowed is not None and doc.get("estado") not in allowed:
                continue
            record = order_from_document(doc, record_id)
            if record is not None:
                records.append(record)
        return records

    async def get_order(self, record_id: str) -> OrderRecord:
        try:
            doc = self._docs[record_id]
        except KeyError:
            raise RecordNotFoundError(record_id) from None
        return OrderRecord.model_validate({**doc, "id": record_id})

    async def update_field(self, record_id: str, field: str, value: Any) -> None:
        if record_id not in self._docs:
            raise RecordNotFoundError(record_id)
        self._docs[record_id][field] = value
        self.writes.append(WriteRequest(record_id=record_id, field=field, new_value=str(value)))

    def document(self, record_id: str) -> dict[str, Any]:
        """Copia del documento crudo."""

        return dict(self._docs[record_id])
