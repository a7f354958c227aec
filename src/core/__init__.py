"""Core layer: configuration, logging, evidence store, locators and correlation."""

from .config import AppConfig, load_app_config  # noqa: F401
from .database import (  # noqa: F401
    init_db,
    migrate,
    SqliteBlackboard,
)
from .blackboard import InMemoryBlackboard  # noqa: F401
# NOTE: extraction_orchestrator not exported from package to avoid circular import
# Import directly: from core.extraction_orchestrator import run_extraction_pipeline
