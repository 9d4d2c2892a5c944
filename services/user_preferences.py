"""
Preferencias del usuario (idioma y tema). Una fila por usuario.

No hay paso de "alta": la primera vez que se leen se crean con los
valores por defecto (en / system).
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from models import DEFAULT_LANGUAGE, DEFAULT_THEME, UserPreferences
from schemas import UserPreferencesUpdate

logger = logging.getLogger("goaltracker.services.preferences")


def get_user_preferences(db: Session, user_id: str) -> UserPreferences:
    """Devuelve las preferencias del usuario, creándolas si no existen"""
    preferences = db.query(UserPreferences).filter(UserPreferences.user_id == user_id).first()

    if not preferences:
        preferences = UserPreferences(
            user_id=user_id,
            language=DEFAULT_LANGUAGE,
            theme=DEFAULT_THEME,
        )
        db.add(preferences)
        db.commit()
        db.refresh(preferences)
        logger.info(f"⚙️ Preferencias por defecto creadas (user: {user_id})")

    return preferences


def update_user_preferences(
    db: Session, user_id: str, data: UserPreferencesUpdate
) -> Optional[UserPreferences]:
    """
    Cambia idioma y/o tema. Los campos a None no se tocan.
    Devuelve None si el usuario todavía no tiene fila de preferencias.
    """
    existing = db.query(UserPreferences).filter(UserPreferences.user_id == user_id).first()

    # Segunda comprobación de propiedad sobre la fila ya leída
    if not existing or existing.user_id != user_id:
        return None

    for key, value in data.model_dump(exclude_none=True).items():
        setattr(existing, key, value)

    db.commit()
    db.refresh(existing)
    return existing
