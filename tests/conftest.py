"""Fixtures compartidas para los tests."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from core.config import AppSettings

# Enero 2026: 17 sáb, 18 dom, 19 lun, 20 mar, 21 mié, 22 jue, 23 vie, 24 sáb.
MONDAY_19_EPOCH = 1768867200  # 2026-01-20T00:00:00Z, lunes 19 a las 18:00 en UTC-6


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> AppSettings:
    """Configuración por defecto, sin leer .env del proyecto ni del usuario."""

    for key in list(os.environ):
        if key.upper().startswith("CICLO_ENVIOS_"):
            monkeypatch.delenv(key, raising=False)
    return AppSettings(_env_file=None)


@pytest.fixture
def order_docs() -> list[dict]:
    return [
        {
            "id": "p1",
            "codigo_pedido": "EG20260119001",
            "estado": "pendiente",
            "dia_entrega": "Lunes",
            "fecha_entrega_programada": {"_seconds": MONDAY_19_EPOCH, "_nanoseconds": 0},
            "total": 120.0,
            "monto_envio": 20.0,
            "cliente": "Ana",
        },
        {
            "id": "p2",
            "codigo_pedido": "EG20260119002",
            "estado": "pendiente",
            "dia_entrega": "Martes",
            "fecha_entrega_programada": "2026-01-19",
            "total": 80.0,
            "monto_envio": 10.0,
        },
        {
            "id": "p3",
            "codigo_pedido": "EG20260119003",
            "estado": "enviado",
            "dia_entrega": "Sábado",
            "fecha_entrega_programada": "2026-01-17",
            "total": 45.5,
            "monto_envio": 0,
        },
        {
            "id": "p4",
            "codigo_pedido": "EG20260119004",
            "estado": "pendiente",
            "dia_entrega": "Jueves",
            "fecha_entrega_programada": "sin fecha todavía",
            "total": 10,
        },
    ]


@pytest.fixture
def snapshot_path(tmp_path: Path, order_docs: list[dict]) -> Path:
    path = tmp_path / "pedidos.json"
    path.write_text(json.dumps({"pedidos": order_docs}, ensure_ascii=False), encoding="utf-8")
    return path
