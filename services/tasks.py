"""
Tareas (con fecha límite) dentro de una región.
Propiedad: task.region.goal.user_id
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from models import Goal, Region, Task, TaskStatus
from schemas import TaskCreate, TaskUpdate
from services import apply_changes, update_fields

logger = logging.getLogger("goaltracker.services.tasks")


def _owned_tasks(db: Session, user_id: str):
    return (
        db.query(Task)
        .join(Region, Task.region_id == Region.id)
        .join(Goal, Region.goal_id == Goal.id)
        .filter(Goal.user_id == user_id)
    )


def _owned_task(db: Session, task_id: str, user_id: str) -> Optional[Task]:
    return _owned_tasks(db, user_id).filter(Task.id == task_id).first()


def get_tasks_for_region(
    db: Session, region_id: Optional[str], user_id: str
) -> list[Task]:
    """
    Tareas de una región del usuario.
    Sin region_id → todas las tareas del usuario.
    """
    query = _owned_tasks(db, user_id)
    if region_id:
        query = query.filter(Task.region_id == region_id)
    return query.order_by(Task.created_at.desc()).all()


def get_task_by_id(db: Session, task_id: str, user_id: str) -> Optional[Task]:
    return _owned_task(db, task_id, user_id)


def create_task(db: Session, user_id: str, data: TaskCreate) -> Optional[Task]:
    """None si la región no existe o su objetivo no es del usuario"""
    region = (
        db.query(Region)
        .join(Goal, Region.goal_id == Goal.id)
        .filter(Region.id == data.region_id, Goal.user_id == user_id)
        .first()
    )
    if not region:
        return None

    task = Task(
        region_id=region.id,
        title=data.title,
        description=data.description,
        deadline=data.deadline,
        status=data.status or TaskStatus.active.value,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def update_task(
    db: Session, task_id: str, user_id: str, data: TaskUpdate
) -> Optional[Task]:
    """
    El estado puede pasar de cualquier valor a cualquier otro
    (active ↔ incomplete ↔ completed), no hay reglas de transición.
    """
    task = _owned_task(db, task_id, user_id)
    if not task:
        return None

    apply_changes(task, update_fields(data))
    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, task_id: str, user_id: str) -> bool:
    task = _owned_task(db, task_id, user_id)
    if not task:
        return False

    db.delete(task)
    db.commit()
    logger.info(f"🗑️ Tarea borrada: {task_id} (user: {user_id})")
    return True
