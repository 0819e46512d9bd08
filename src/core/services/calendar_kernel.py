"""Aritmética de calendario sobre números de día juliano.

Por qué días julianos:
- Sumar/restar días y derivar el día de la semana se reduce a enteros, sin
  casos especiales de largo de mes ni años bisiestos.
- No hay objetos `datetime` en este módulo: solo enteros y strings
  `YYYY-MM-DD`, así que ninguna zona horaria puede colarse en el resultado.

Entradas mal formadas nunca lanzan excepción: `to_julian_day` devuelve el
centinela `0` y el resto de funciones devuelve `None`.
"""

from __future__ import annotations

import re
import unicodedata

from core.domain.cycles import MONTH_NAMES, WEEKDAY_NAMES, WEEKDAY_SHORT_NAMES

INVALID_JULIAN_DAY = 0

# Día juliano de 0001-01-01 y 9999-12-31 (proleptico gregoriano).
MIN_JULIAN_DAY = 1721426
MAX_JULIAN_DAY = 5373484

_CANONICAL_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def _is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def _days_in_month(year: int, month: int) -> int:
    if month == 2 and _is_leap(year):
        return 29
    return _DAYS_IN_MONTH[month - 1]


def _gregorian_to_jd(year: int, month: int, day: int) -> int:
    a = (14 - month) // 12
    y = year + 4800 - a
    m = month + 12 * a - 3
    return day + (153 * m + 2) // 5 + 365 * y + y // 4 - y // 100 + y // 400 - 32045


def to_julian_day(date: str) -> int:
    """Convierte `YYYY-MM-DD` a número de día juliano.

    Devuelve `INVALID_JULIAN_DAY` (0) si el texto no tiene el formato o no
    nombra un día real (mes 13, 30 de febrero, año 0000).
    """

    if not isinstance(date, str):
        return INVALID_JULIAN_DAY
    match = _CANONICAL_RE.match(date)
    if not match:
        return INVALID_JULIAN_DAY

    year, month, day = (int(part) for part in match.groups())
    if year < 1 or not 1 <= month <= 12:
        return INVALID_JULIAN_DAY
    if not 1 <= day <= _days_in_month(year, month):
        return INVALID_JULIAN_DAY
    return _gregorian_to_jd(year, month, day)


def from_julian_day(jd: int) -> str:
    """Inverso exacto de `to_julian_day` para 0001-01-01..9999-12-31."""

    a = jd + 32044
    b = (4 * a + 3) // 146097
    c = a - (146097 * b) // 4
    d = (4 * c + 3) // 1461
    e = c - (1461 * d) // 4
    m = (5 * e + 2) // 153

    day = e - (153 * m + 2) // 5 + 1
    month = m + 3 - 12 * (m // 10)
    year = 100 * b + d - 4800 + m // 10
    return f"{year:04d}-{month:02d}-{day:02d}"


def is_canonical_date(value: object) -> bool:
    return isinstance(value, str) and to_julian_day(value) != INVALID_JULIAN_DAY


def add_days(date: str, n: int) -> str | None:
    """Suma `n` días (puede ser negativo) a una fecha canónica."""

    jd = to_julian_day(date)
    if jd == INVALID_JULIAN_DAY:
        return None
    target = jd + n
    if not MIN_JULIAN_DAY <= target <= MAX_JULIAN_DAY:
        return None
    return from_julian_day(target)


def weekday(date: str) -> int | None:
    """Día de la semana, 0 = domingo … 6 = sábado."""

    jd = to_julian_day(date)
    if jd == INVALID_JULIAN_DAY:
        return None
    return (jd + 1) % 7


def days_between(start: str, end: str) -> int | None:
    """`end - start` en días, o None si alguna fecha no es canónica."""

    a = to_julian_day(start)
    b = to_julian_day(end)
    if a == INVALID_JULIAN_DAY or b == INVALID_JULIAN_DAY:
        return None
    return b - a


def normalize_text(text: str) -> str:
    """Minúsculas y sin acentos: "Miércoles" → "miercoles"."""

    decomposed = unicodedata.normalize("NFD", text.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


_WEEKDAY_LOOKUP: dict[str, int] = {normalize_text(name): i for i, name in enumerate(WEEKDAY_NAMES)}


def weekday_from_label(label: str | None) -> int | None:
    """Día de la semana implicado por una etiqueta libre ("Martes", "SABADO")."""

    if not label or not isinstance(label, str):
        return None
    return _WEEKDAY_LOOKUP.get(normalize_text(label))


def format_long_date(date: str) -> str:
    """Formatea como "Viernes 24 de Enero 2025"."""

    jd = to_julian_day(date)
    if jd == INVALID_JULIAN_DAY:
        return "Sin fecha"
    year, month, day = (int(part) for part in date.split("-"))
    dia_semana = WEEKDAY_NAMES[(jd + 1) % 7]
    mes = MONTH_NAMES[month - 1].capitalize()
    return f"{dia_semana} {day} de {mes} {year}"


def format_short_date(date: str) -> str:
    """Formatea como "Vie 24/1" (vista compacta)."""

    jd = to_julian_day(date)
    if jd == INVALID_JULIAN_DAY:
        return "Sin fecha"
    _, month, day = (int(part) for part in date.split("-"))
    return f"{WEEKDAY_SHORT_NAMES[(jd + 1) % 7]} {day}/{month}"


def upcoming_weekday_dates(
    label: str,
    today: str,
    *,
    count: int = 4,
    offset_weeks: int = 0,
) -> list[str]:
    """Próximas `count` fechas del día `label`, estrictamente después de `today`.

    Si hoy ya es ese día, la primera ocurrencia es la de la semana siguiente.
    `offset_weeks` desplaza toda la serie en semanas completas.
    """

    target = weekday_from_label(label)
    current = weekday(today)
    if target is None or current is None or count <= 0:
        return []

    ahead = target - current
    if ahead <= 0:
        ahead += 7
    first = add_days(today, ahead + offset_weeks * 7)
    if first is None:
        return []

    fechas: list[str] = []
    for i in range(count):
        fecha = add_days(first, i * 7)
        if fecha is None:
            break
        fechas.append(fecha)
    return fechas
