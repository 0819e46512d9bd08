"""Normalización de fechas crudas del store a `YYYY-MM-DD`.

Por qué existe:
- El mismo campo `fecha_entrega_programada` llega con formas distintas según
  quién lo escribió (Timestamp de Firestore, epoch, ISO, texto en español,
  `Date.toString()` de JavaScript o ya canónico).
- Dos representaciones del mismo instante deben producir el mismo string; por
  eso el offset es una constante fija del negocio y nunca la zona del host.

Reglas de diseño:
- Función pura: no loguea ni lanza. Lo que no se reconoce devuelve `"N/A"` y
  el llamador decide si excluye el registro.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime, timezone
from typing import Any

from core.domain.cycles import MONTH_NAMES
from core.domain.models import NOT_AVAILABLE
from core.services.calendar_kernel import (
    INVALID_JULIAN_DAY,
    MAX_JULIAN_DAY,
    MIN_JULIAN_DAY,
    from_julian_day,
    is_canonical_date,
    normalize_text,
    to_julian_day,
)

DEFAULT_UTC_OFFSET_HOURS = -6

# Día juliano de 1970-01-01.
UNIX_EPOCH_JULIAN_DAY = 2440588
SECONDS_PER_DAY = 86_400

_ISO_WITH_TIME_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ]\d{2}:\d{2}")
_LONG_FORM_RE = re.compile(
    r"(\d{1,2})\s+de\s+([^\W\d_]+)\s+(?:del?\s+)?(\d{4})",
    re.IGNORECASE,
)
_JS_DATE_RE = re.compile(
    r"^[A-Za-z]{3}\s+([A-Za-z]{3})\s+(\d{1,2})\s+(\d{4})\s+"
    r"(\d{2}):(\d{2}):(\d{2})\s+GMT([+-])(\d{2})(\d{2})"
)
_JS_MONTHS = {
    name: i
    for i, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}

_SECONDS_KEYS = ("seconds", "_seconds")
_MILLIS_ACCESSORS = ("toMillis", "to_millis")
_DATE_ACCESSORS = ("toDate", "to_date", "to_datetime")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def instant_to_date(seconds: int, utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS) -> str:
    """Fecha canónica de un instante (epoch segundos) en el offset fijo dado."""

    local = seconds + utc_offset_hours * 3600
    jd = UNIX_EPOCH_JULIAN_DAY + local // SECONDS_PER_DAY
    if not MIN_JULIAN_DAY <= jd <= MAX_JULIAN_DAY:
        return NOT_AVAILABLE
    return from_julian_day(jd)


def _whole_seconds(value: float) -> int | None:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return math.floor(value)


def parse_long_form(text: str, month_names: Sequence[str] = MONTH_NAMES) -> str | None:
    """Parsea "12 de enero de 2026" (o "Lunes 12 de Enero 2026").

    Devuelve None si no hay patrón o si el mes no está en la tabla.
    """

    match = _LONG_FORM_RE.search(text)
    if not match:
        return None

    day_raw, month_raw, year_raw = match.groups()
    lookup = {normalize_text(name): i for i, name in enumerate(month_names, start=1)}
    month = lookup.get(normalize_text(month_raw))
    if month is None:
        return None

    candidate = f"{int(year_raw):04d}-{month:02d}-{int(day_raw):02d}"
    return candidate if is_canonical_date(candidate) else None


def _parse_js_date_string(text: str) -> int | None:
    """Epoch segundos de "Tue Jan 20 2026 23:33:34 GMT-0600 (...)"."""

    match = _JS_DATE_RE.match(text)
    if not match:
        return None

    mon, day, year, hh, mi, ss, sign, off_h, off_m = match.groups()
    month = _JS_MONTHS.get(mon.lower())
    if month is None:
        return None
    jd = to_julian_day(f"{int(year):04d}-{month:02d}-{int(day):02d}")
    if jd == INVALID_JULIAN_DAY:
        return None

    local_seconds = (jd - UNIX_EPOCH_JULIAN_DAY) * SECONDS_PER_DAY
    local_seconds += int(hh) * 3600 + int(mi) * 60 + int(ss)
    offset_seconds = int(off_h) * 3600 + int(off_m) * 60
    if sign == "-":
        offset_seconds = -offset_seconds
    return local_seconds - offset_seconds


def _canonicalize_text(
    text: str,
    utc_offset_hours: int,
    month_names: Sequence[str],
) -> str:
    value = text.strip()
    if not value:
        return NOT_AVAILABLE

    if is_canonical_date(value):
        return value

    iso = _ISO_WITH_TIME_RE.match(value)
    if iso:
        head = iso.group(1)
        return head if is_canonical_date(head) else NOT_AVAILABLE

    long_form = parse_long_form(value, month_names)
    if long_form:
        return long_form

    js_seconds = _parse_js_date_string(value)
    if js_seconds is not None:
        return instant_to_date(js_seconds, utc_offset_hours)

    return NOT_AVAILABLE


def _extract_seconds(raw: Any) -> int | None:
    """Segundos enteros desde epoch, para las formas numéricas del paso 4."""

    if _is_number(raw):
        return _whole_seconds(raw)

    for key in _SECONDS_KEYS:
        if isinstance(raw, Mapping):
            candidate = raw.get(key)
        else:
            candidate = getattr(raw, key, None)
        if _is_number(candidate):
            return _whole_seconds(candidate)

    for name in _MILLIS_ACCESSORS:
        accessor = getattr(raw, name, None)
        if callable(accessor):
            millis = accessor()
            if _is_number(millis):
                seconds = _whole_seconds(millis / 1000)
                if seconds is not None:
                    return seconds
    return None


def _datetime_seconds(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return math.floor(value.timestamp())


def _canonicalize_date_like(
    value: Any,
    utc_offset_hours: int,
    month_names: Sequence[str],
) -> str:
    if isinstance(value, datetime):
        return instant_to_date(_datetime_seconds(value), utc_offset_hours)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        return _canonicalize_text(value, utc_offset_hours, month_names)
    return NOT_AVAILABLE


def canonicalize(
    raw: Any,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
    *,
    month_names: Sequence[str] = MONTH_NAMES,
) -> str:
    """Convierte cualquier RawTimestamp a `YYYY-MM-DD`, o `"N/A"`.

    Orden de resolución (gana el primero):
    1. Texto ya canónico, ISO con hora, español largo, `Date.toString()`.
    2. Epoch segundos, objeto/mapping con `seconds`/`_seconds`, accessor de millis.
    3. Accessor que devuelve una fecha (`toDate()`), o un `datetime`/`date`.
    4. Cualquier otra cosa → `"N/A"`.
    """

    if raw is None:
        return NOT_AVAILABLE
    if isinstance(raw, str):
        return _canonicalize_text(raw, utc_offset_hours, month_names)

    try:
        seconds = _extract_seconds(raw)
        if seconds is not None:
            return instant_to_date(seconds, utc_offset_hours)

        if isinstance(raw, (datetime, date)):
            return _canonicalize_date_like(raw, utc_offset_hours, month_names)

        for name in _DATE_ACCESSORS:
            accessor = getattr(raw, name, None)
            if callable(accessor):
                return _canonicalize_date_like(accessor(), utc_offset_hours, month_names)
    except Exception:  # accessors de terceros: cualquier fallo es "sin fecha"
        return NOT_AVAILABLE

    return NOT_AVAILABLE
