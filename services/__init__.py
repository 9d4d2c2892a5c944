"""
=============================================================================
SERVICES — Capa de acceso a datos
=============================================================================
Un módulo por entidad. Reglas comunes a TODAS las funciones:

  - Reciben la sesión de BD y el user_id del usuario autenticado.
  - Cada consulta sube por la cadena de propiedad hasta el usuario
    (ej: WeeklyTask → Task → Region → Goal.user_id). Nunca se confía
    en una clave primaria sola.
  - "No existe" y "no es tuyo" NO lanzan excepciones: devuelven None
    (lecturas, crear, actualizar) o False (borrar). Las excepciones
    quedan para fallos de verdad (la BD no responde, etc.).
  - Actualizar y borrar primero comprueban (find-first con propietario)
    y después modifican.
"""

from typing import Any, Iterable


def apply_changes(instance, changes: dict[str, Any]) -> None:
    """Copia los cambios validados sobre la fila de la BD"""
    for key, value in changes.items():
        setattr(instance, key, value)


def update_fields(data, clearable: Iterable[str] = ("description",)) -> dict[str, Any]:
    """
    Saca de un esquema XxxUpdate los campos a cambiar.
    None = "no tocar", salvo los campos de `clearable`, donde None = vaciar.
    """
    clearable = set(clearable)
    return {
        key: value
        for key, value in data.model_dump(exclude={"id"}).items()
        if value is not None or key in clearable
    }
