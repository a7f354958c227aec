"""Case database: connection/migrations and the SQLite evidence store."""

from .connection import init_db, migrate, MIGRATIONS_DIR  # noqa: F401
from .blackboard_store import SqliteBlackboard  # noqa: F401
