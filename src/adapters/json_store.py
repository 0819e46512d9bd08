"""Store de pedidos sobre un snapshot JSON.

Soporta formatos tipo:
- {"pedidos": [...]} (export de la colección)
- [...] (lista de documentos)

Los Timestamps exportados de Firestore llegan como
{"_seconds": ..., "_nanoseconds": ...}; el canonizador ya los entiende.

Las escrituras reescriben el archivo completo de forma atómica
(archivo temporal + `os.replace`), serializadas con un lock. El I/O de disco
corre en un hilo (`asyncio.to_thread`) para no bloquear el event loop.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from adapters.memory_store import order_from_document
from core.domain.models import OrderRecord
from core.interfaces.store import OrderStore, RecordNotFoundError

logger = logging.getLogger(__name__)

COLLECTION_KEY = "pedidos"


def _documents(payload: Any) -> list[dict[str, Any]]:
    if isinstance(payload, dict):
        docs = payload.get(COLLECTION_KEY)
    else:
        docs = payload
    if not isinstance(docs, list):
        raise ValueError(f"Snapshot sin lista de '{COLLECTION_KEY}'")
    return [doc for doc in docs if isinstance(doc, dict)]


def _doc_id(doc: dict[str, Any], index: int) -> str:
    for key in ("id", "codigo_pedido"):
        value = doc.get(key)
        if value not in (None, ""):
            return str(value)
    return str(index)


def write_json_atomic(path: Path, payload: Any) -> None:
    """Escribe JSON de forma atómica para no corromper el snapshot."""

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    os.replace(tmp, path)


class JsonFileOrderStore(OrderStore):
    """`OrderStore` respaldado por un archivo JSON local."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> tuple[Any, list[dict[str, Any]]]:
        if not self._path.exists():
            raise FileNotFoundError(f"Snapshot no encontrado: {self._path}")
        payload = json.loads(self._path.read_text(encoding="utf-8"))
        return payload, _documents(payload)

    async def list_orders(self, estados: Iterable[str] | None = None) -> list[OrderRecord]:
        allowed = set(estados) if estados is not None else None
        _, docs = await asyncio.to_thread(self._load)
        records: list[OrderRecord] = []
        for index, doc in enumerate(docs):
            if allowed is not None and doc.get("estado") not in allowed:
                continue
            record = order_from_document(doc, _doc_id(doc, index))
            if record is not None:
                records.append(record)
        logger.debug("Snapshot %s: %d pedidos leídos", self._path, len(records))
        return records

    async def get_order(self, record_id: str) -> OrderRecord:
        _, docs = await asyncio.to_thread(self._load)
        for index, doc in enumerate(docs):
            if _doc_id(doc, index) == record_id:
                return OrderRecord.model_validate({**doc, "id": record_id})
        raise RecordNotFoundError(record_id)

    def _update_sync(self, record_id: str, field: str, value: Any) -> None:
        payload, docs = self._load()
        for index, doc in enumerate(docs):
            if _doc_id(doc, index) == record_id:
                doc[field] = value
                break
        else:
            raise RecordNotFoundError(record_id)
        write_json_atomic(self._path, payload)

    async def update_field(self, record_id: str, field: str, value: Any) -> None:
        # Leer-modificar-escribir del archivo completo: un escritor a la vez.
        async with self._lock:
            await asyncio.to_thread(self._update_sync, record_id, field, value)
