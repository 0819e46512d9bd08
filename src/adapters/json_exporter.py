"""Exportación JSON de reportes de lote.

Por qué JSON:
- Deja evidencia auditable (antes/después por registro) de cada corrida.
- Los registros sin resolver se pueden revisar a mano o reintentar después.
"""

from __future__ import annotations

from pathlib import Path

from adapters.json_store import write_json_atomic
from core.domain.models import BatchReport


def export_report_json(*, report: BatchReport, output_path: Path) -> Path:
    """Guarda `BatchReport` (más el total de registros) en UTF-8."""

    payload = report.model_dump(mode="json")
    payload["total"] = report.total
    write_json_atomic(output_path, payload)
    return output_path
