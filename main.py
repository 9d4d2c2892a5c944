"""
=============================================================================
MAIN.PY — La API de Goal Tracker
=============================================================================
Este archivo define los endpoints HTTP. Son una capa fina: cada uno
lee la sesión y el formulario y llama a la acción correspondiente
(actions/). La acción devuelve el sobre estándar y aquí solo se traduce
el código de error a un status HTTP.

Organización por secciones:
  1. AUTH         → Magic link, sesión, logout
  2. GOALS        → CRUD de objetivos
  3. REGIONS      → CRUD de regiones
  4. TASKS        → CRUD de tareas
  5. WEEKLY TASKS → CRUD de tareas semanales
  6. USER         → Perfil, nombre, preferencias, idioma
  7. PROGRESS     → Resumen de progreso

Los cuerpos de las peticiones pueden ser formularios o JSON.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from action_types import (
    ActionErrorCode, ActionResponse, create_error, create_success, is_action_error
)
from actions import goals as goal_actions
from actions import locale as locale_actions
from actions import progress as progress_actions
from actions import regions as region_actions
from actions import tasks as task_actions
from actions import user_preferences as preference_actions
from actions import users as user_actions
from actions import weekly_tasks as weekly_task_actions
from auth import (
    ACCESS_TOKEN_EXPIRE_DAYS, SESSION_COOKIE_NAME, AuthSession,
    get_session, request_magic_link, resolve_redirect, sign_in_with_token
)
from database import get_db, init_db
from schemas import SignInRequest, VerifyRequest
from validation import extract_form_data, validate_form_data

# ─────────────────────────────────────────────────────────────────────────────
# LOGGING
# ─────────────────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s"
)
logger = logging.getLogger("goaltracker.api")

APP_VERSION = "1.0.0"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
COOKIE_SECURE = os.getenv("ENVIRONMENT", "development") == "production"
VERIFICATION_ERROR_URL = "/auth/signin?error=Verification"


# ─────────────────────────────────────────────────────────────────────────────
# LIFESPAN (Arranque y apagado)
# ─────────────────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Arrancando Goal Tracker...")
    init_db()
    logger.info("✅ Base de datos inicializada")

    yield

    logger.info("👋 Apagado completo")


# ─────────────────────────────────────────────────────────────────────────────
# APLICACIÓN FASTAPI
# ─────────────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Goal Tracker API",
    description="Objetivos → Regiones → Tareas → Tareas semanales, por usuario",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─────────────────────────────────────────────────────────────────────────────
# GLOBAL ERROR HANDLER
# ─────────────────────────────────────────────────────────────────────────────
# Las acciones ya capturan sus errores. Esto es para lo que se escape
# (ej: un fallo abriendo la sesión de BD). El detalle va al log, nunca
# al cliente.

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"❌ Error no manejado en {request.url.path}: {exc}")
    error = create_error("Something went wrong. Please try again.", ActionErrorCode.UNKNOWN_ERROR)
    return JSONResponse(status_code=500, content=error.to_dict())


# ─────────────────────────────────────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────────────────────────────────────

STATUS_BY_CODE = {
    ActionErrorCode.UNAUTHORIZED: 401,
    ActionErrorCode.VALIDATION_ERROR: 422,
    ActionErrorCode.NOT_FOUND: 404,
    ActionErrorCode.DATABASE_ERROR: 500,
    ActionErrorCode.UNKNOWN_ERROR: 500,
}


def envelope(result: ActionResponse, success_status: int = 200) -> JSONResponse:
    """Convierte el sobre de una acción en respuesta HTTP"""
    if is_action_error(result):
        return JSONResponse(status_code=STATUS_BY_CODE[result.code], content=result.to_dict())
    return JSONResponse(status_code=success_status, content=result.to_dict())


async def submission(request: Request) -> dict:
    """
    Lee el cuerpo de la petición como diccionario, venga como JSON o
    como formulario. Un cuerpo vacío o que no es un objeto → {}.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
    form = await request.form()
    return dict(form)


def with_id(form: dict, entity_id: str) -> dict:
    """El id de la URL manda sobre cualquier "id" que venga en el formulario"""
    return {**form, "id": entity_id}


# =============================================================================
# ===================== HEALTH CHECK ==========================================
# =============================================================================

@app.get("/", tags=["Health"])
def health_check():
    return {
        "status": "ok",
        "app": "Goal Tracker",
        "version": APP_VERSION,
        "timestamp": datetime.utcnow().isoformat()
    }


# =============================================================================
# ===================== SECCIÓN 1: AUTH =======================================
# =============================================================================

@app.post("/auth/signin", tags=["Auth"])
def sign_in(form: dict = Depends(submission), db: Session = Depends(get_db)):
    """
    Pide un magic link. La respuesta es la misma exista o no la cuenta
    (las cuentas nuevas se crean al hacer click en el link).
    """
    validated = validate_form_data(SignInRequest, extract_form_data(form))
    if is_action_error(validated):
        return envelope(validated)

    request_magic_link(db, validated.email, validated.callback_url)
    return envelope(create_success({"email": validated.email, "sent": True}))


@app.get("/auth/callback", tags=["Auth"])
def auth_callback(request: Request, db: Session = Depends(get_db)):
    """
    Destino del link del email. Guarda la sesión en cookie y redirige.
    Un link incompleto o con un email mal formado cuenta como link inválido.
    """
    validated = validate_form_data(VerifyRequest, extract_form_data(request.query_params))
    if is_action_error(validated):
        return RedirectResponse(url=VERIFICATION_ERROR_URL, status_code=303)

    result = sign_in_with_token(db, validated.email, validated.token)
    if result is None:
        return RedirectResponse(url=VERIFICATION_ERROR_URL, status_code=303)

    _, access_token = result
    response = RedirectResponse(url=resolve_redirect(validated.callback_url), status_code=303)
    response.set_cookie(
        SESSION_COOKIE_NAME,
        access_token,
        max_age=ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        secure=COOKIE_SECURE,
    )
    return response


@app.get("/auth/session", tags=["Auth"])
def read_session(request: Request, session: Optional[AuthSession] = Depends(get_session)):
    """La sesión actual (o null) y el idioma activo"""
    locale = locale_actions.resolve_locale(request.cookies.get(locale_actions.LOCALE_COOKIE_NAME))
    return {
        "session": session.model_dump(mode="json") if session else None,
        "locale": locale,
    }


@app.post("/auth/signout", tags=["Auth"])
def sign_out():
    response = JSONResponse(content=create_success({"signed_out": True}).to_dict())
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response


# =============================================================================
# ===================== SECCIÓN 2: GOALS ======================================
# =============================================================================

@app.get("/goals", tags=["Goals"])
def list_goals(
    session: Optional[AuthSession] = Depends(get_session), db: Session = Depends(get_db)
):
    return envelope(goal_actions.get_goals_action(db, session))


@app.post("/goals", tags=["Goals"])
def create_goal(
    form: dict = Depends(submission),
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(goal_actions.create_goal_action(db, session, form), success_status=201)


@app.get("/goals/{goal_id}", tags=["Goals"])
def read_goal(
    goal_id: str,
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(goal_actions.get_goal_action(db, session, goal_id))


@app.put("/goals/{goal_id}", tags=["Goals"])
def update_goal(
    goal_id: str,
    form: dict = Depends(submission),
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(goal_actions.update_goal_action(db, session, with_id(form, goal_id)))


@app.delete("/goals/{goal_id}", tags=["Goals"])
def delete_goal(
    goal_id: str,
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    """Borra el objetivo y, en cascada, todo lo que cuelga de él"""
    return envelope(goal_actions.delete_goal_action(db, session, goal_id))


# =============================================================================
# ===================== SECCIÓN 3: REGIONS ====================================
# =============================================================================

@app.get("/regions", tags=["Regions"])
def list_regions(
    goal_id: Optional[str] = Query(default=None),
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(region_actions.get_regions_action(db, session, goal_id))


@app.post("/regions", tags=["Regions"])
def create_region(
    form: dict = Depends(submission),
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(region_actions.create_region_action(db, session, form), success_status=201)


@app.get("/regions/{region_id}", tags=["Regions"])
def read_region(
    region_id: str,
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(region_actions.get_region_action(db, session, region_id))


@app.put("/regions/{region_id}", tags=["Regions"])
def update_region(
    region_id: str,
    form: dict = Depends(submission),
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(region_actions.update_region_action(db, session, with_id(form, region_id)))


@app.delete("/regions/{region_id}", tags=["Regions"])
def delete_region(
    region_id: str,
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(region_actions.delete_region_action(db, session, region_id))


# =============================================================================
# ===================== SECCIÓN 4: TASKS ======================================
# =============================================================================

@app.get("/tasks", tags=["Tasks"])
def list_tasks(
    region_id: Optional[str] = Query(default=None),
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(task_actions.get_tasks_action(db, session, region_id))


@app.post("/tasks", tags=["Tasks"])
def create_task(
    form: dict = Depends(submission),
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(task_actions.create_task_action(db, session, form), success_status=201)


@app.get("/tasks/{task_id}", tags=["Tasks"])
def read_task(
    task_id: str,
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(task_actions.get_task_action(db, session, task_id))


@app.put("/tasks/{task_id}", tags=["Tasks"])
def update_task(
    task_id: str,
    form: dict = Depends(submission),
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(task_actions.update_task_action(db, session, with_id(form, task_id)))


@app.delete("/tasks/{task_id}", tags=["Tasks"])
def delete_task(
    task_id: str,
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(task_actions.delete_task_action(db, session, task_id))


# =============================================================================
# ===================== SECCIÓN 5: WEEKLY TASKS ===============================
# =============================================================================

@app.get("/weekly-tasks", tags=["Weekly Tasks"])
def list_weekly_tasks(
    task_id: Optional[str] = Query(default=None),
    week_start_date: Optional[str] = Query(default=None),
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    """week_start_date puede ser cualquier día de la semana (ej: 2025-11-12)"""
    return envelope(
        weekly_task_actions.get_weekly_tasks_action(db, session, task_id, week_start_date)
    )


@app.post("/weekly-tasks", tags=["Weekly Tasks"])
def create_weekly_task(
    form: dict = Depends(submission),
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(
        weekly_task_actions.create_weekly_task_action(db, session, form), success_status=201
    )


@app.get("/weekly-tasks/{weekly_task_id}", tags=["Weekly Tasks"])
def read_weekly_task(
    weekly_task_id: str,
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(weekly_task_actions.get_weekly_task_action(db, session, weekly_task_id))


@app.put("/weekly-tasks/{weekly_task_id}", tags=["Weekly Tasks"])
def update_weekly_task(
    weekly_task_id: str,
    form: dict = Depends(submission),
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(
        weekly_task_actions.update_weekly_task_action(db, session, with_id(form, weekly_task_id))
    )


@app.delete("/weekly-tasks/{weekly_task_id}", tags=["Weekly Tasks"])
def delete_weekly_task(
    weekly_task_id: str,
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(weekly_task_actions.delete_weekly_task_action(db, session, weekly_task_id))


# =============================================================================
# ===================== SECCIÓN 6: USER =======================================
# =============================================================================

@app.get("/user", tags=["User"])
def read_user(
    session: Optional[AuthSession] = Depends(get_session), db: Session = Depends(get_db)
):
    return envelope(user_actions.get_current_user_action(db, session))


@app.patch("/user/name", tags=["User"])
def update_user_name(
    form: dict = Depends(submission),
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(user_actions.update_user_name_action(db, session, form))


@app.get("/user/preferences", tags=["User"])
def read_preferences(
    session: Optional[AuthSession] = Depends(get_session), db: Session = Depends(get_db)
):
    return envelope(preference_actions.get_user_preferences_action(db, session))


@app.patch("/user/preferences", tags=["User"])
def update_preferences(
    form: dict = Depends(submission),
    session: Optional[AuthSession] = Depends(get_session),
    db: Session = Depends(get_db),
):
    return envelope(preference_actions.update_user_preferences_action(db, session, form))


@app.post("/locale", tags=["User"])
def set_locale(form: dict = Depends(submission)):
    result = locale_actions.set_locale_action(form)
    response = envelope(result)
    if not is_action_error(result):
        response.set_cookie(
            locale_actions.LOCALE_COOKIE_NAME,
            result.data["locale"],
            max_age=locale_actions.LOCALE_COOKIE_MAX_AGE,
            path="/",
            samesite="lax",
            secure=COOKIE_SECURE,
        )
    return response


# =============================================================================
# ===================== SECCIÓN 7: PROGRESS ===================================
# =============================================================================

@app.get("/progress", tags=["Progress"])
def read_progress(
    session: Optional[AuthSession] = Depends(get_session), db: Session = Depends(get_db)
):
    return envelope(progress_actions.get_progress_action(db, session))
