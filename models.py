"""
=============================================================================
MODELS.PY — Todos los Modelos (Tablas) de la Base de Datos
=============================================================================
Cada clase aquí = una tabla en la base de datos.
Cada atributo de la clase = una columna en esa tabla.

RELACIONES (cadena de propiedad):
  USER
  ├── preferences (1 a 1)
  └── goals[] ──→ regions[] ──→ tasks[] ──→ weekly_tasks[]

Todo lo que cuelga de un Goal pertenece al usuario del Goal. Por eso
Region, Task y WeeklyTask NO guardan user_id: la propiedad se comprueba
subiendo por la cadena (weekly_task.task.region.goal.user_id).

Los IDs son UUID en texto y las fechas se guardan en UTC sin zona horaria.
"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, Date, DateTime, ForeignKey
)
from sqlalchemy.orm import relationship
from database import Base


def generate_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# ===================== ENUMS (Tipos predefinidos) ============================
# =============================================================================

class Language(str, enum.Enum):
    """Idiomas soportados por la interfaz"""
    en = "en"
    de = "de"

class Theme(str, enum.Enum):
    """Tema visual"""
    light = "light"
    dark = "dark"
    system = "system"   # sigue al sistema operativo

class TaskStatus(str, enum.Enum):
    """Estado de una tarea. Se puede pasar de cualquiera a cualquiera."""
    active = "active"
    incomplete = "incomplete"
    completed = "completed"

class WeeklyTaskStatus(str, enum.Enum):
    """Estado de una tarea semanal"""
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"


DEFAULT_LANGUAGE = Language.en.value
DEFAULT_THEME = Theme.system.value


# =============================================================================
# ===================== TABLA 1: USERS ========================================
# =============================================================================
# Los crea el flujo de login por email (magic link) la primera vez que
# alguien entra. No hay contraseña.

class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)

    name = Column(String(100), nullable=True)
    # name → NULL si el usuario no ha puesto nombre (nunca "")
    email = Column(String(255), unique=True, nullable=True, index=True)
    email_verified = Column(DateTime, nullable=True)
    # email_verified → cuándo hizo click en su primer magic link
    image = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    preferences = relationship(
        "UserPreferences", back_populates="user", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True
    )
    goals = relationship(
        "Goal", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True
    )


# =============================================================================
# ===================== TABLA 2: USER_PREFERENCES =============================
# =============================================================================
# Una fila por usuario. Se crea sola con valores por defecto la primera vez
# que se lee (ver services/user_preferences.py).

class UserPreferences(Base):
    __tablename__ = "user_preferences"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"),
        unique=True, nullable=False
    )

    language = Column(String(5), default=DEFAULT_LANGUAGE, nullable=False)
    theme = Column(String(10), default=DEFAULT_THEME, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="preferences")


# =============================================================================
# ===================== TABLA 3: VERIFICATION_TOKENS ==========================
# =============================================================================
# Tokens de un solo uso para el login por email. Solo se guarda el hash
# (bcrypt): quien lea la BD no puede entrar como nadie.

class VerificationToken(Base):
    __tablename__ = "verification_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    identifier = Column(String(255), nullable=False, index=True)
    # identifier → el email al que se mandó el link
    token_hash = Column(String(255), nullable=False)
    expires = Column(DateTime, nullable=False)


# =============================================================================
# ===================== TABLA 4: GOALS ========================================
# =============================================================================
# Arriba del todo de la jerarquía. Lo único que guarda user_id.

class Goal(Base):
    __tablename__ = "goals"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="goals")
    regions = relationship(
        "Region", back_populates="goal",
        cascade="all, delete-orphan", passive_deletes=True
    )


# =============================================================================
# ===================== TABLA 5: REGIONS ======================================
# =============================================================================
# Una "zona" dentro de un objetivo. Ej: Goal "Aprender alemán" →
# Regions "Gramática", "Vocabulario", "Conversación"

class Region(Base):
    __tablename__ = "regions"

    id = Column(String(36), primary_key=True, default=generate_id)
    goal_id = Column(
        String(36), ForeignKey("goals.id", ondelete="CASCADE"),
        nullable=False, index=True
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    goal = relationship("Goal", back_populates="regions")
    tasks = relationship(
        "Task", back_populates="region",
        cascade="all, delete-orphan", passive_deletes=True
    )


# =============================================================================
# ===================== TABLA 6: TASKS ========================================
# =============================================================================

class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=generate_id)
    region_id = Column(
        String(36), ForeignKey("regions.id", ondelete="CASCADE"),
        nullable=False, index=True
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    deadline = Column(Date, nullable=False)
    status = Column(String(20), default=TaskStatus.active.value, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    region = relationship("Region", back_populates="tasks")
    weekly_tasks = relationship(
        "WeeklyTask", back_populates="task",
        cascade="all, delete-orphan", passive_deletes=True
    )


# =============================================================================
# ===================== TABLA 7: WEEKLY_TASKS =================================
# =============================================================================
# Trabajo planificado para una semana concreta dentro de una Task.
# week_start_date SIEMPRE es un domingo a las 00:00:00 UTC (ver dates.py).

class WeeklyTask(Base):
    __tablename__ = "weekly_tasks"

    id = Column(String(36), primary_key=True, default=generate_id)
    task_id = Column(
        String(36), ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False, index=True
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(Integer, default=1, nullable=False)
    # priority → 1 (alta), 2 (media), 3 (baja)
    week_start_date = Column(DateTime, nullable=False, index=True)
    status = Column(String(20), default=WeeklyTaskStatus.pending.value, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    task = relationship("Task", back_populates="weekly_tasks")
