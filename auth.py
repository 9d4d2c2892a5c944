"""
=============================================================================
AUTH.PY — Sistema de Autenticación (login por email + JWT)
=============================================================================
No hay contraseñas. El flujo es un "magic link":

  1. El usuario escribe su email en /auth/signin
  2. Generamos un token aleatorio de un solo uso, guardamos su HASH
     (bcrypt) y le mandamos un link por email
  3. Al abrir el link (/auth/callback) comprobamos el token, lo borramos,
     creamos el usuario si es nuevo y le damos un JWT de sesión
  4. El JWT viaja en cada petición (header "Authorization: Bearer ..."
     o cookie "session_token")

get_session() NUNCA lanza 401: devuelve la sesión o None. Son las
acciones (actions/) las que responden UNAUTHORIZED con el sobre estándar.
"""

import logging
import os
import secrets
import smtplib
from datetime import datetime, timedelta, timezone
from email.message import EmailMessage
from typing import Optional
from urllib.parse import urlencode

import bcrypt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import get_db
from models import User, VerificationToken
from services.users import get_or_create_user_by_email, get_user_by_id, normalize_email

logger = logging.getLogger("goaltracker.auth")

# ─────────────────────────────────────────────────────────────────────────────
# CONFIGURACIÓN
# ─────────────────────────────────────────────────────────────────────────────

SECRET_KEY = os.getenv("SECRET_KEY", "goaltracker-dev-secret-key-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = 30
VERIFICATION_TOKEN_MAX_AGE_HOURS = 24

APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:8000").rstrip("/")
SESSION_COOKIE_NAME = "session_token"

EMAIL_SERVER_HOST = os.getenv("EMAIL_SERVER_HOST", "")
EMAIL_SERVER_PORT = int(os.getenv("EMAIL_SERVER_PORT", "587"))
EMAIL_SERVER_USER = os.getenv("EMAIL_SERVER_USER", "")
EMAIL_SERVER_PASSWORD = os.getenv("EMAIL_SERVER_PASSWORD", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", "Goal Tracker <no-reply@localhost>")


# ─────────────────────────────────────────────────────────────────────────────
# SESIÓN
# ─────────────────────────────────────────────────────────────────────────────

class SessionUser(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


class AuthSession(BaseModel):
    """Lo que saben las acciones de quién está llamando"""
    user: SessionUser
    expires: datetime


# ─────────────────────────────────────────────────────────────────────────────
# TOKENS JWT
# ─────────────────────────────────────────────────────────────────────────────

def create_access_token(user: User) -> str:
    """JWT con el id del usuario (sub), su email y nombre, válido 30 días"""
    expire = datetime.utcnow() + timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS)
    to_encode = {
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "exp": expire,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Datos del JWT, o None si es inválido o ha caducado"""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def session_from_token(db: Session, token: Optional[str]) -> Optional[AuthSession]:
    """
    Convierte un JWT en una sesión.
    Nombre y email se leen frescos de la BD (pueden haber cambiado desde
    el login). Si el usuario ya no existe → None.
    """
    if not token:
        return None

    payload = decode_token(token)
    if payload is None or not payload.get("sub"):
        return None

    user = get_user_by_id(db, payload["sub"])
    if user is None:
        return None

    return AuthSession(
        user=SessionUser(id=user.id, email=user.email, name=user.name),
        expires=datetime.fromtimestamp(payload["exp"], timezone.utc).replace(tzinfo=None),
    )


# ─────────────────────────────────────────────────────────────────────────────
# DEPENDENCIA: OBTENER LA SESIÓN ACTUAL
# ─────────────────────────────────────────────────────────────────────────────

security = HTTPBearer(auto_error=False)


def get_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[AuthSession]:
    """
    Busca el JWT en el header Authorization y, si no está, en la cookie.
    Devuelve la sesión o None (nunca lanza error).
    """
    token = credentials.credentials if credentials else request.cookies.get(SESSION_COOKIE_NAME)
    return session_from_token(db, token)


# ─────────────────────────────────────────────────────────────────────────────
# MAGIC LINK
# ─────────────────────────────────────────────────────────────────────────────

def hash_token(token: str) -> str:
    return bcrypt.hashpw(token.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_token_hash(token: str, token_hash: str) -> bool:
    return bcrypt.checkpw(token.encode("utf-8"), token_hash.encode("utf-8"))


def resolve_redirect(url: Optional[str], base_url: str = APP_BASE_URL) -> str:
    """
    Adónde mandar al usuario después de entrar.
    Solo se permiten rutas de esta misma web; lo demás va a /goals.
    """
    if url:
        if url.startswith("/") and not url.startswith("//"):
            return f"{base_url}{url}"
        if url == base_url or url.startswith(f"{base_url}/"):
            return url
    return f"{base_url}/goals"


def build_magic_link(email: str, token: str, callback_url: Optional[str] = None) -> str:
    params = {"email": email, "token": token}
    if callback_url:
        params["callback_url"] = callback_url
    return f"{APP_BASE_URL}/auth/callback?{urlencode(params)}"


def send_verification_request(email: str, url: str) -> None:
    """
    Manda el email con el link.
    Sin servidor SMTP configurado (desarrollo) solo se escribe en el log.
    """
    if not EMAIL_SERVER_HOST:
        logger.warning(f"⚠️ SMTP no configurado. Link de acceso para {email}: {url}")
        return

    message = EmailMessage()
    message["Subject"] = "Sign in to Goal Tracker"
    message["From"] = EMAIL_FROM
    message["To"] = email
    message.set_content(
        f"Sign in to Goal Tracker:\n\n{url}\n\n"
        f"This link expires in {VERIFICATION_TOKEN_MAX_AGE_HOURS} hours. "
        "If you did not request this email you can safely ignore it."
    )

    if EMAIL_SERVER_PORT == 465:
        smtp = smtplib.SMTP_SSL(EMAIL_SERVER_HOST, EMAIL_SERVER_PORT)
    else:
        smtp = smtplib.SMTP(EMAIL_SERVER_HOST, EMAIL_SERVER_PORT)
    with smtp:
        if EMAIL_SERVER_PORT != 465:
            smtp.starttls()
        if EMAIL_SERVER_USER:
            smtp.login(EMAIL_SERVER_USER, EMAIL_SERVER_PASSWORD)
        smtp.send_message(message)
    logger.info(f"📧 Link de acceso enviado a {email}")


def request_magic_link(db: Session, email: str, callback_url: Optional[str] = None) -> str:
    """
    Crea un token de un solo uso para `email`, lo guarda hasheado y manda
    el link. Devuelve el link (útil en tests y desarrollo).
    """
    email = normalize_email(email)
    token = secrets.token_urlsafe(32)

    db.add(VerificationToken(
        identifier=email,
        token_hash=hash_token(token),
        expires=datetime.utcnow() + timedelta(hours=VERIFICATION_TOKEN_MAX_AGE_HOURS),
    ))
    db.commit()

    url = build_magic_link(email, token, callback_url)
    send_verification_request(email, url)
    return url


def consume_verification_token(db: Session, email: str, token: str) -> bool:
    """
    Comprueba el token y lo borra (un solo uso).
    De paso limpia los tokens caducados de ese email.
    """
    email = normalize_email(email)
    now = datetime.utcnow()
    matched = False

    candidates = db.query(VerificationToken).filter(VerificationToken.identifier == email).all()
    for row in candidates:
        if row.expires < now:
            db.delete(row)
            continue
        if not matched and verify_token_hash(token, row.token_hash):
            db.delete(row)
            matched = True

    db.commit()
    return matched


def sign_in_with_token(db: Session, email: str, token: str) -> Optional[tuple[User, str]]:
    """
    Completa el login. Devuelve (usuario, jwt) o None si el link no vale.
    """
    if not consume_verification_token(db, email, token):
        logger.warning(f"⚠️ Link de acceso inválido o caducado para {email}")
        return None

    user = get_or_create_user_by_email(db, email)
    logger.info(f"🔑 Login: {user.email}")
    return user, create_access_token(user)
