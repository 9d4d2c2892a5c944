"""
Objetivos (Goals). Son lo único de la jerarquía que guarda user_id
directamente, así que la comprobación de propiedad es un simple filtro.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from models import Goal
from schemas import GoalCreate, GoalUpdate
from services import apply_changes, update_fields

logger = logging.getLogger("goaltracker.services.goals")


def _owned_goal(db: Session, goal_id: str, user_id: str) -> Optional[Goal]:
    return db.query(Goal).filter(Goal.id == goal_id, Goal.user_id == user_id).first()


def get_goals_for_user(db: Session, user_id: str) -> list[Goal]:
    """Todos los objetivos del usuario, los más nuevos primero"""
    return (
        db.query(Goal)
        .filter(Goal.user_id == user_id)
        .order_by(Goal.created_at.desc())
        .all()
    )


def get_goal_by_id(db: Session, goal_id: str, user_id: str) -> Optional[Goal]:
    """El objetivo si existe y es del usuario; si no, None"""
    return _owned_goal(db, goal_id, user_id)


def create_goal(db: Session, user_id: str, data: GoalCreate) -> Goal:
    goal = Goal(
        user_id=user_id,
        title=data.title,
        description=data.description,
    )
    db.add(goal)
    db.commit()
    db.refresh(goal)
    logger.info(f"🎯 Objetivo creado: {goal.id} (user: {user_id})")
    return goal


def update_goal(
    db: Session, goal_id: str, user_id: str, data: GoalUpdate
) -> Optional[Goal]:
    """
    Actualiza un objetivo.
    Devuelve None si no existe o no es del usuario (sin tocar nada).
    """
    goal = _owned_goal(db, goal_id, user_id)
    if not goal:
        return None

    apply_changes(goal, update_fields(data))
    db.commit()
    db.refresh(goal)
    return goal


def delete_goal(db: Session, goal_id: str, user_id: str) -> bool:
    """
    Borra un objetivo (y en cascada sus regiones, tareas y tareas semanales).
    True si se borró, False si no existía o no era del usuario.
    """
    goal = _owned_goal(db, goal_id, user_id)
    if not goal:
        return False

    db.delete(goal)
    db.commit()
    logger.info(f"🗑️ Objetivo borrado: {goal_id} (user: {user_id})")
    return True
