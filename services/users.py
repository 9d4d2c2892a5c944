"""
Usuarios. Los crea el login por email; aquí solo se leen y se les cambia
el nombre.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from models import User

logger = logging.getLogger("goaltracker.services.users")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_or_create_user_by_email(db: Session, email: str) -> User:
    """
    Usado al completar el login: si es la primera vez, crea el usuario.
    En ambos casos marca el email como verificado (ha hecho click en el link).
    """
    user = get_user_by_email(db, email)
    if not user:
        user = User(email=normalize_email(email))
        db.add(user)
        logger.info(f"👤 Nuevo usuario: {user.email}")

    if user.email_verified is None:
        user.email_verified = datetime.utcnow()

    db.commit()
    db.refresh(user)
    return user


def update_user_name(db: Session, user_id: str, name: Optional[str]) -> Optional[User]:
    """
    Cambia el nombre del usuario.
    Se recorta y un nombre vacío o solo de espacios se guarda como None.
    Devuelve None si el usuario no existe.
    """
    user = get_user_by_id(db, user_id)
    if not user:
        return None

    if isinstance(name, str):
        name = name.strip() or None

    user.name = name
    db.commit()
    db.refresh(user)
    return user
