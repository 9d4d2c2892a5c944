"""
=============================================================================
DATABASE.PY — Configuración de la Base de Datos
=============================================================================
Este archivo configura la conexión a la base de datos.

En DESARROLLO: usa SQLite (un archivo .db)
En PRODUCCIÓN: usa PostgreSQL

¿Cómo sabe cuál usar?
→ Si existe la variable de entorno DATABASE_URL, la usa.
→ Si no existe, usa SQLite local.

Las relaciones Goal → Region → Task → WeeklyTask tienen borrado en
cascada, así que en SQLite hay que activar las foreign keys a mano.
"""

import os
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

# ─────────────────────────────────────────────────────────────────────────────
# CONEXIÓN
# ─────────────────────────────────────────────────────────────────────────────

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./goaltracker.db")

# Algunos proveedores dan la URL con "postgres://" pero SQLAlchemy necesita
# "postgresql+psycopg://" (usamos psycopg v3 como driver)
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql+psycopg://", 1)
elif DATABASE_URL.startswith("postgresql://"):
    DATABASE_URL = DATABASE_URL.replace("postgresql://", "postgresql+psycopg://", 1)

# ─────────────────────────────────────────────────────────────────────────────
# ENGINE
# ─────────────────────────────────────────────────────────────────────────────
# connect_args={"check_same_thread": False} → solo necesario para SQLite

engine_args = {}
if DATABASE_URL.startswith("sqlite"):
    engine_args["connect_args"] = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, echo=False, **engine_args)


def enable_sqlite_foreign_keys(target_engine):
    """
    SQLite ignora ON DELETE CASCADE salvo que se active PRAGMA foreign_keys.
    Se registra en cada conexión nueva del engine.
    """
    if target_engine.dialect.name != "sqlite":
        return

    @event.listens_for(target_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


enable_sqlite_foreign_keys(engine)

# ─────────────────────────────────────────────────────────────────────────────
# SESSION
# ─────────────────────────────────────────────────────────────────────────────

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ─────────────────────────────────────────────────────────────────────────────
# BASE (Clase base para los modelos)
# ─────────────────────────────────────────────────────────────────────────────

Base = declarative_base()


def get_db():
    """
    Generador que crea una sesión de BD y la cierra al terminar.

    Se usa como "dependencia" en FastAPI:
      @app.get("/algo")
      def mi_endpoint(db: Session = Depends(get_db)):
          ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """
    Crea todas las tablas en la BD si no existen.
    Se llama una vez al arrancar la aplicación.
    """
    import models  # noqa: F401  (registra las tablas en Base.metadata)

    Base.metadata.create_all(bind=engine)
