#!/usr/bin/env python3
"""
Script para gestionar migraciones de base de datos con Alembic.

La URL de la base se toma de pdv_api.core.config (POSTGRES_* o DATABASE_URL).
"""
import sys
from pathlib import Path

# Agregar el directorio raíz al path
root_dir = Path(__file__).parent
sys.path.insert(0, str(root_dir))

from alembic.config import Config
from alembic import command
from pdv_api.core.config import settings

def get_alembic_config():
    """Obtener configuración de Alembic."""
    alembic_cfg = Config(str(root_dir / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(root_dir / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    return alembic_cfg

def create_migration(message: str):
    """Crear nueva migración comparando los modelos con la base."""
    command.revision(get_alembic_config(), autogenerate=True, message=message)
    print(f"Migración creada: {message}")

def run_migrations(target: str = "head"):
    command.upgrade(get_alembic_config(), target)
    print(f"Base actualizada hasta {target}")

def rollback_migration(target: str = "-1"):
    command.downgrade(get_alembic_config(), target)
    print(f"Rollback ejecutado hasta {target}")

def stamp(target: str = "head"):
    """Marcar la base (creada con create_all) como migrada sin ejecutar nada."""
    command.stamp(get_alembic_config(), target)
    print(f"Base marcada en {target}")

def show_history():
    command.history(get_alembic_config())

def show_current():
    command.current(get_alembic_config(), verbose=True)

USAGE = """Uso:
  python migrate.py create 'message'      # Crear migración
  python migrate.py upgrade [revision]    # Ejecutar migraciones (por defecto head)
  python migrate.py downgrade [revision]  # Rollback (por defecto -1)
  python migrate.py stamp [revision]      # Marcar revisión sin migrar
  python migrate.py history               # Ver historial
  python migrate.py current               # Ver actual"""

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    action, args = sys.argv[1], sys.argv[2:]

    if action == "create":
        if not args:
            print("Error: Se requiere un mensaje para la migración")
            sys.exit(1)
        create_migration(args[0])
    elif action == "upgrade":
        run_migrations(*args[:1])
    elif action == "downgrade":
        rollback_migration(*args[:1])
    elif action == "stamp":
        stamp(*args[:1])
    elif action == "history":
        show_history()
    elif action == "current":
        show_current()
    else:
        print(f"Acción desconocida: {action}")
        print(USAGE)
        sys.exit(1)
