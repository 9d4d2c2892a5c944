"""
Regiones: subdivisiones de un objetivo. La propiedad se comprueba
haciendo join con Goal (region.goal.user_id).
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from models import Goal, Region
from schemas import RegionCreate, RegionUpdate
from services import apply_changes, update_fields

logger = logging.getLogger("goaltracker.services.regions")


def _owned_regions(db: Session, user_id: str):
    return db.query(Region).join(Goal, Region.goal_id == Goal.id).filter(Goal.user_id == user_id)


def _owned_region(db: Session, region_id: str, user_id: str) -> Optional[Region]:
    return _owned_regions(db, user_id).filter(Region.id == region_id).first()


def get_regions_for_goal(
    db: Session, goal_id: Optional[str], user_id: str
) -> list[Region]:
    """
    Regiones de un objetivo del usuario.
    Sin goal_id → todas las regiones del usuario (de todos sus objetivos).
    """
    query = _owned_regions(db, user_id)
    if goal_id:
        query = query.filter(Region.goal_id == goal_id)
    return query.order_by(Region.created_at.desc()).all()


def get_region_by_id(db: Session, region_id: str, user_id: str) -> Optional[Region]:
    return _owned_region(db, region_id, user_id)


def create_region(db: Session, user_id: str, data: RegionCreate) -> Optional[Region]:
    """
    Crea una región dentro de un objetivo.
    Devuelve None si el objetivo no existe o no es del usuario.
    """
    goal = db.query(Goal).filter(Goal.id == data.goal_id, Goal.user_id == user_id).first()
    if not goal:
        return None

    region = Region(
        goal_id=goal.id,
        title=data.title,
        description=data.description,
    )
    db.add(region)
    db.commit()
    db.refresh(region)
    return region


def update_region(
    db: Session, region_id: str, user_id: str, data: RegionUpdate
) -> Optional[Region]:
    region = _owned_region(db, region_id, user_id)
    if not region:
        return None

    apply_changes(region, update_fields(data))
    db.commit()
    db.refresh(region)
    return region


def delete_region(db: Session, region_id: str, user_id: str) -> bool:
    region = _owned_region(db, region_id, user_id)
    if not region:
        return False

    db.delete(region)
    db.commit()
    logger.info(f"🗑️ Región borrada: {region_id} (user: {user_id})")
    return True
