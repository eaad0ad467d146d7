from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as PoolTimeoutError, DisconnectionError
from contextlib import contextmanager
from pdv_api.core.exceptions import PDVError, ConflictError, TransientStoreError
from pdv_api.core.config import settings
import logging

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    """Opciones del engine con timeouts acotados según el backend"""
    timeout = settings.STORE_TIMEOUT_SECONDS
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        options = {
            "connect_args": {"check_same_thread": False, "timeout": timeout},
            "echo": False,
        }
        if make_url(url).database in (None, "", ":memory:"):
            # Una sola conexión compartida para que la base en memoria sobreviva
            options["poolclass"] = StaticPool
        return options

    timeout_ms = timeout * 1000
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": timeout,
        "echo": settings.DEBUG,
        "connect_args": {
            "connect_timeout": timeout,
            "options": f"-c statement_timeout={timeout_ms} -c lock_timeout={timeout_ms}",
        },
    }


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if engine.dialect.name == "sqlite":
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Fallos de I/O o timeouts: el caller puede reintentar
TRANSIENT_DB_ERRORS = (OperationalError, PoolTimeoutError, DisconnectionError)


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base = declarative_base()


def get_db():
    """Genera una sesión de base de datos por request."""
    db = SessionLocal()
    try:
        yield db
    except PDVError:
        db.rollback()
        raise
    except Exception as e:
        logger.error(f"Database error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def atomic(db: Session, conflict_message: str = "Conflicto de integridad en la base de datos"):
    """
    Unidad de trabajo: commit al salir, rollback ante cualquier error.

    - IntegrityError -> ConflictError (p. ej. carrera perdida contra UNIQUE)
    - Timeouts / errores de I/O -> TransientStoreError (reintentable por el caller)
    """
    try:
        yield db
        db.commit()
    except PDVError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error, rolled back: {e.orig}")
        raise ConflictError(conflict_message) from e
    except TRANSIENT_DB_ERRORS as e:
        db.rollback()
        logger.error(f"Transient store error, rolled back: {e}")
        raise TransientStoreError("Base de datos no disponible, intente nuevamente") from e
    except Exception:
        db.rollback()
        raise
