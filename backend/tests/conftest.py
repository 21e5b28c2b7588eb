import os
import tempfile
from pathlib import Path

import pytest

# Point the app at a throwaway database before `school_api` is imported.
_DB_DIR = Path(tempfile.mkdtemp(prefix="school_api_tests_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"
os.environ.setdefault("ENV", "dev")
os.environ.setdefault("LOG_LEVEL", "WARNING")


@pytest.fixture(autouse=True)
def reset_db():
    """Ensure every test starts from empty tables."""
    from school_api.database import create_db_and_tables, drop_db_and_tables

    drop_db_and_tables()
    create_db_and_tables()
    yield


@pytest.fixture
def db_session():
    from sqlmodel import Session
    from school_api.database import engine

    with Session(engine) as session:
        yield session
