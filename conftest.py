import os
import sqlite3
from pathlib import Path

import pytest

from core.database import SqliteBlackboard, init_db


@pytest.fixture(scope="session")
def e01_path() -> Path:
    """Provide the E01 path for tests that need real evidence."""
    env_path = os.environ.get("E01_PATH")
    if not env_path:
        pytest.skip("E01_PATH not set")
    path = Path(env_path)
    if not path.exists():
        pytest.skip(f"E01 evidence not found at {path}")
    return path


@pytest.fixture()
def case_db_path(tmp_path: Path) -> Path:
    """Path of a freshly migrated case database."""
    path = tmp_path / "case_workspace" / "case.sqlite"
    conn = init_db(path)
    conn.close()
    return path


@pytest.fixture()
def case_conn(case_db_path: Path) -> sqlite3.Connection:
    conn = init_db(case_db_path)
    yield conn
    conn.close()


@pytest.fixture()
def sqlite_blackboard(case_conn: sqlite3.Connection) -> SqliteBlackboard:
    return SqliteBlackboard(case_conn)
