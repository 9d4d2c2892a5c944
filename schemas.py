"""
=============================================================================
SCHEMAS.PY — Esquemas de Validación (Pydantic)
=============================================================================
¿Por qué separar Models y Schemas?
  - Models (SQLAlchemy) → definen las TABLAS de la BD
  - Schemas (Pydantic) → definen qué DATOS acepta/devuelve la API

Los esquemas de entrada validan lo que llega de los formularios de la
interfaz (strings o None; por JSON también números, booleanos o listas,
ver validation.extract_form_data) y dejan los datos limpios y tipados:
  - títulos: sin HTML, recortados, obligatorios, máx. 255
  - IDs: tienen que ser UUID
  - fechas: tienen que poder leerse; las semanas se normalizan a domingo
  - prioridad: 1, 2 o 3 (no se "redondea" nada, fuera de rango = error)
  - enums: solo los valores permitidos

Convención de nombres:
  XxxCreate → para crear algo nuevo
  XxxUpdate → para actualizar algo (lleva el id dentro)
  XxxResponse → lo que devuelve la API
"""

import uuid
from datetime import date, datetime
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, EmailStr, Field
from pydantic_core import PydanticCustomError

from dates import get_week_start, parse_date_value, parse_datetime_value
from models import Language, TaskStatus, Theme, WeeklyTaskStatus
from validation import sanitize_optional_string, sanitize_string

TITLE_MAX_LENGTH = 255
NAME_MAX_LENGTH = 100
DEFAULT_PRIORITY = 1


# =============================================================================
# ===================== VALIDADORES REUTILIZABLES =============================
# =============================================================================

def _clean_title(value):
    if value is None:
        value = ""
    if not isinstance(value, str):
        raise PydanticCustomError("string_type", "Title must be text")
    # El límite se mide sobre lo que escribió el usuario, antes de limpiar el HTML
    value = value.strip()
    if len(value) > TITLE_MAX_LENGTH:
        raise PydanticCustomError(
            "title_too_long", f"Title must be {TITLE_MAX_LENGTH} characters or less"
        )
    value = sanitize_string(value)
    if not value:
        raise PydanticCustomError("title_required", "Title is required")
    return value


def _clean_description(value):
    if value is None:
        return None
    if not isinstance(value, str):
        raise PydanticCustomError("string_type", "Description must be text")
    return sanitize_optional_string(value)


def _clean_name(value):
    # "" o solo espacios → sin nombre (None), nunca un string vacío
    if value is None:
        return None
    if not isinstance(value, str):
        raise PydanticCustomError("string_type", "Name must be text")
    value = sanitize_string(value)
    if not value:
        return None
    if len(value) > NAME_MAX_LENGTH:
        raise PydanticCustomError(
            "name_too_long", f"Name must be {NAME_MAX_LENGTH} characters or less"
        )
    return value


def _uuid(message: str):
    def check(value):
        try:
            return str(uuid.UUID(str(value)))
        except (TypeError, ValueError, AttributeError):
            raise PydanticCustomError("invalid_id", message)
    return BeforeValidator(check)


def _parse_deadline(value):
    parsed = parse_date_value(value)
    if parsed is None:
        raise PydanticCustomError("invalid_date", "Invalid deadline date")
    return parsed


def _week_start(required: bool):
    def check(value):
        if value is None and not required:
            return None
        parsed = parse_datetime_value(value)
        if parsed is None:
            raise PydanticCustomError("invalid_date", "Invalid week start date")
        return get_week_start(parsed)
    return BeforeValidator(check)


def _priority(default: Optional[int]):
    def check(value):
        if value is None:
            return default
        if isinstance(value, bool):
            raise PydanticCustomError("invalid_priority", "Priority must be 1, 2, or 3")
        try:
            number = value if isinstance(value, int) else int(str(value).strip())
        except ValueError:
            raise PydanticCustomError("invalid_priority", "Priority must be 1, 2, or 3")
        if number not in (1, 2, 3):
            raise PydanticCustomError("invalid_priority", "Priority must be 1, 2, or 3")
        return number
    return BeforeValidator(check)


def _choice(enum_cls, message: str, default=None, required: bool = True):
    """Solo deja pasar los valores del enum. Devuelve el valor (str), no el miembro."""
    def check(value):
        if value is None:
            if default is not None:
                return default
            if not required:
                return None
            raise PydanticCustomError("invalid_choice", message)
        try:
            return enum_cls(value).value
        except (TypeError, ValueError):
            raise PydanticCustomError("invalid_choice", message)
    return BeforeValidator(check)


Title = Annotated[str, BeforeValidator(_clean_title)]
Description = Annotated[Optional[str], BeforeValidator(_clean_description)]

_TASK_STATUS_MSG = "Status must be active, incomplete, or completed"
_WEEKLY_STATUS_MSG = "Status must be pending, in_progress, or completed"
_LANGUAGE_MSG = "Language must be one of: en, de"
_THEME_MSG = "Theme must be one of: light, dark, system"


# =============================================================================
# ===================== AUTH ==================================================
# =============================================================================

class SignInRequest(BaseModel):
    """Pedir un magic link"""
    email: EmailStr
    callback_url: Optional[str] = None

class VerifyRequest(BaseModel):
    """Datos del link que llega por email"""
    email: EmailStr
    token: str = Field(min_length=1)
    callback_url: Optional[str] = None


# =============================================================================
# ===================== GOALS =================================================
# =============================================================================

class GoalCreate(BaseModel):
    title: Title = Field(default=None, validate_default=True)
    description: Description = None

class GoalUpdate(BaseModel):
    id: Annotated[str, _uuid("Invalid goal ID")] = Field(default=None, validate_default=True)
    title: Title = Field(default=None, validate_default=True)
    description: Description = None

class GoalResponse(BaseModel):
    id: str
    user_id: str
    title: str
    description: Optional[str]
    created_at: datetime
    updated_at: datetime
    model_config = {"from_attributes": True}


# =============================================================================
# ===================== REGIONS ===============================================
# =============================================================================

class RegionCreate(BaseModel):
    goal_id: Annotated[str, _uuid("Invalid goal ID")] = Field(default=None, validate_default=True)
    title: Title = Field(default=None, validate_default=True)
    description: Description = None

class RegionUpdate(BaseModel):
    id: Annotated[str, _uuid("Invalid region ID")] = Field(default=None, validate_default=True)
    title: Title = Field(default=None, validate_default=True)
    description: Description = None

class RegionResponse(BaseModel):
    id: str
    goal_id: str
    title: str
    description: Optional[str]
    created_at: datetime
    updated_at: datetime
    model_config = {"from_attributes": True}


# =============================================================================
# ===================== TASKS =================================================
# =============================================================================

class TaskCreate(BaseModel):
    region_id: Annotated[str, _uuid("Invalid region ID")] = Field(default=None, validate_default=True)
    title: Title = Field(default=None, validate_default=True)
    description: Description = None
    deadline: Annotated[date, BeforeValidator(_parse_deadline)] = Field(
        default=None, validate_default=True
    )
    status: Annotated[
        str, _choice(TaskStatus, _TASK_STATUS_MSG, default=TaskStatus.active.value)
    ] = Field(default=None, validate_default=True)

class TaskUpdate(BaseModel):
    id: Annotated[str, _uuid("Invalid task ID")] = Field(default=None, validate_default=True)
    title: Title = Field(default=None, validate_default=True)
    description: Description = None
    deadline: Annotated[date, BeforeValidator(_parse_deadline)] = Field(
        default=None, validate_default=True
    )
    status: Annotated[str, _choice(TaskStatus, _TASK_STATUS_MSG)] = Field(
        default=None, validate_default=True
    )

class TaskResponse(BaseModel):
    id: str
    region_id: str
    title: str
    description: Optional[str]
    deadline: date
    status: str
    created_at: datetime
    updated_at: datetime
    model_config = {"from_attributes": True}


# =============================================================================
# ===================== WEEKLY TASKS ==========================================
# =============================================================================

class WeeklyTaskCreate(BaseModel):
    task_id: Annotated[str, _uuid("Invalid task ID")] = Field(default=None, validate_default=True)
    title: Title = Field(default=None, validate_default=True)
    description: Description = None
    priority: Annotated[int, _priority(DEFAULT_PRIORITY)] = Field(
        default=None, validate_default=True
    )
    week_start_date: Annotated[datetime, _week_start(required=True)] = Field(
        default=None, validate_default=True
    )

class WeeklyTaskUpdate(BaseModel):
    """priority, week_start_date y status son opcionales: None = no se toca"""
    id: Annotated[str, _uuid("Invalid weekly task ID")] = Field(default=None, validate_default=True)
    title: Title = Field(default=None, validate_default=True)
    description: Description = None
    priority: Annotated[Optional[int], _priority(None)] = None
    week_start_date: Annotated[Optional[datetime], _week_start(required=False)] = None
    status: Annotated[
        Optional[str], _choice(WeeklyTaskStatus, _WEEKLY_STATUS_MSG, required=False)
    ] = None

class WeeklyTaskResponse(BaseModel):
    id: str
    task_id: str
    title: str
    description: Optional[str]
    priority: int
    week_start_date: datetime
    status: str
    created_at: datetime
    updated_at: datetime
    model_config = {"from_attributes": True}


# =============================================================================
# ===================== USER ==================================================
# =============================================================================

class UserNameUpdate(BaseModel):
    name: Annotated[Optional[str], BeforeValidator(_clean_name)] = None

class UserResponse(BaseModel):
    id: str
    name: Optional[str]
    email: Optional[str]
    email_verified: Optional[datetime]
    image: Optional[str]
    model_config = {"from_attributes": True}


# =============================================================================
# ===================== PREFERENCES ===========================================
# =============================================================================

class UserPreferencesUpdate(BaseModel):
    language: Annotated[
        Optional[str], _choice(Language, _LANGUAGE_MSG, required=False)
    ] = None
    theme: Annotated[
        Optional[str], _choice(Theme, _THEME_MSG, required=False)
    ] = None

class UserPreferencesResponse(BaseModel):
    id: str
    user_id: str
    language: str
    theme: str
    created_at: datetime
    updated_at: datetime
    model_config = {"from_attributes": True}

class LocaleUpdate(BaseModel):
    locale: Annotated[str, _choice(Language, "Invalid locale")] = Field(
        default=None, validate_default=True
    )


# =============================================================================
# ===================== PROGRESS ==============================================
# =============================================================================

class ProgressSummary(BaseModel):
    """Resumen para la página de progreso"""
    total_goals: int
    total_regions: int
    total_tasks: int
    tasks_by_status: dict[str, int]
    week_start_date: datetime
    week_range: str
    # week_range → "09.11.2025 - 15.11.2025", listo para pintar
    weekly_tasks_by_status: dict[str, int]
    overdue_tasks: int
    completion_rate: float
    # completion_rate → % de tareas completadas (0.0 - 100.0)
