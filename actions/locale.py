"""
Idioma de la interfaz. La acción solo valida; la capa HTTP (main.py)
es la que escribe la cookie LOCALE_COOKIE_NAME durante un año.
"""

from typing import Any, Mapping, Optional

from action_types import ActionResponse, create_success, is_action_error
from schemas import LocaleUpdate
from validation import extract_form_data, validate_form_data

LOCALE_COOKIE_NAME = "LOCALE"
LOCALE_COOKIE_MAX_AGE = 60 * 60 * 24 * 365  # 1 año en segundos
DEFAULT_LOCALE = "en"


def set_locale_action(form_data: Mapping[str, Any]) -> ActionResponse:
    """No necesita sesión: también se puede cambiar el idioma en la página de login"""
    validated = validate_form_data(LocaleUpdate, extract_form_data(form_data))
    if is_action_error(validated):
        return validated
    return create_success({"locale": validated.locale})


def resolve_locale(cookie_value: Optional[str] = None) -> str:
    """Idioma a usar según la cookie; si no vale, el de por defecto"""
    validated = validate_form_data(LocaleUpdate, {"locale": cookie_value})
    if is_action_error(validated):
        return DEFAULT_LOCALE
    return validated.locale
