"""
=============================================================================
DATES.PY — Utilidades de fechas
=============================================================================
Regla de oro del proyecto: todas las fechas con hora se guardan en UTC
y SIN zona horaria (naive), igual que datetime.utcnow().

Las tareas semanales se agrupan por semana. Una semana empieza el DOMINGO
a las 00:00:00.000 UTC. Cualquier fecha que se use para filtrar o guardar
una tarea semanal tiene que pasar antes por get_week_start().
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union

DateLike = Union[date, datetime, str]


def to_naive_utc(value: datetime) -> datetime:
    """Convierte un datetime con zona horaria a UTC naive. Los naive se asumen UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def get_week_start(value: Union[date, datetime]) -> datetime:
    """
    Devuelve el domingo (00:00:00.000 UTC) de la semana que contiene `value`.

    Ejemplos:
      miércoles 2025-11-12 15:30 → domingo 2025-11-09 00:00
      domingo   2025-11-09 23:59 → domingo 2025-11-09 00:00
    """
    if isinstance(value, datetime):
        value = to_naive_utc(value)
        day = value.date()
    else:
        day = value

    # weekday(): lunes=0 ... domingo=6 → días a restar para llegar al domingo
    days_since_sunday = (day.weekday() + 1) % 7
    sunday = day - timedelta(days=days_since_sunday)
    return datetime.combine(sunday, time.min)


def get_week_end(week_start: datetime) -> datetime:
    """Sábado de esa semana (a las 00:00, para mostrar rangos)"""
    return get_week_start(week_start) + timedelta(days=6)


def format_date(value: Union[date, datetime, str]) -> str:
    """Formato europeo dd.MM.yyyy (ej: "01.12.2025")"""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value.strftime("%d.%m.%Y")


def format_week_range(week_start: datetime) -> str:
    """Ej: "09.11.2025 - 15.11.2025" """
    return f"{format_date(week_start)} - {format_date(get_week_end(week_start))}"


def parse_datetime_value(value) -> Optional[datetime]:
    """
    Intenta convertir lo que venga de un formulario en un datetime UTC naive.
    Acepta datetime, date o texto ISO ("2025-11-09", "2025-11-09T10:00:00Z").
    Si no se puede, devuelve None (quien llama decide el error).
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return to_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def parse_date_value(value) -> Optional[date]:
    """Como parse_datetime_value pero se queda solo con el día."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    parsed = parse_datetime_value(value)
    return parsed.date() if parsed else None
