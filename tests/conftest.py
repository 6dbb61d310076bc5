# tests/conftest.py
import sys
from pathlib import Path

import pytest

# Add project root to sys.path so "app", "database" and "puzzles" can be imported in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app import app as flask_app
from database import init_db, get_db


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "test_sudoku.db")
    init_db(path, database_url="")
    return path


@pytest.fixture
def conn(db_path):
    connection = get_db(db_path, database_url="")
    yield connection
    connection.close()


@pytest.fixture
def client(db_path):
    flask_app.config.update(
        TESTING=True,
        SECRET_KEY="test-secret",
        DB_PATH=db_path,
        DATABASE_URL="",
    )
    with flask_app.test_client() as client:
        yield client
