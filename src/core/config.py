"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- El motor de fechas recibe el offset fijo y la tabla de meses desde un único
  contrato, en vez de leer la zona horaria del host.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.cycles import MONTH_NAMES


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "ciclo-envios"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "ciclo-envios"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "ciclo-envios"
    return Path.home() / ".config" / "ciclo-envios"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# ciclo-envios user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters/servicios.
    """

    model_config = SettingsConfigDict(
        env_prefix="CICLO_ENVIOS_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    utc_offset_hours: int = Field(
        default=-6,
        ge=-12,
        le=14,
        description="Offset fijo (horas) de la zona operativa del negocio.",
    )
    month_names: tuple[str, ...] = Field(
        default=MONTH_NAMES,
        description="Tabla de 12 nombres de mes para fechas en texto largo.",
    )
    urgent_horizon_days: int = Field(
        default=7,
        ge=1,
        le=28,
        description="Días desde el último envío hasta el límite de empaque urgente.",
    )
    reconcile_search_days: int = Field(
        default=3,
        ge=0,
        le=3,
        description="Ventana ±k días para corregir fechas contra su día de entrega.",
    )
    store_max_concurrency: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Concurrencia máxima de escrituras contra el store.",
    )
    store_path: Path | None = Field(
        default=None,
        description="Ruta al snapshot JSON de pedidos usado por la CLI.",
    )
    log_level: str = Field(
        default="INFO",
        min_length=1,
        description="Nivel de logging (DEBUG, INFO, WARNING, ...).",
    )

    @field_validator("month_names")
    @classmethod
    def _twelve_months(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if len(value) != 12:
            raise ValueError("month_names debe tener exactamente 12 entradas")
        if any(not name.strip() for name in value):
            raise ValueError("month_names no admite nombres vacíos")
        return value
