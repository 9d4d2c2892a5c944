"""
=============================================================================
CACHE.PY — Avisos de invalidación de páginas
=============================================================================
Después de cada cambio que sale bien, la acción avisa de qué páginas
han quedado desactualizadas (ej: "/goals", "/goals/<id>") para que la
capa que pinta las páginas las regenere.

Es un aviso "dispara y olvida": si un hook falla se registra en el log
pero la acción sigue adelante y responde con éxito igualmente.
"""

import logging
from typing import Callable

logger = logging.getLogger("goaltracker.cache")

RevalidationHook = Callable[[str], None]

_hooks: list[RevalidationHook] = []


def register_revalidation_hook(hook: RevalidationHook) -> None:
    """Añade una función que recibirá cada ruta invalidada"""
    if hook not in _hooks:
        _hooks.append(hook)


def clear_revalidation_hooks() -> None:
    _hooks.clear()


def revalidate_path(path: str) -> None:
    """Avisa a todos los hooks de que `path` tiene que regenerarse"""
    logger.debug(f"♻️ Revalidando {path}")
    for hook in list(_hooks):
        try:
            hook(path)
        except Exception:
            logger.exception(f"❌ Hook de revalidación falló para {path}")
