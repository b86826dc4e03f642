import os
from decimal import Decimal

import pytest

from budget_meals.db.database import Database

TEST_CATALOG = [
    ("Soup", Decimal("5.00"), "Soup", 200),
    ("Salad", Decimal("7.25"), "Salad", 150),
    ("Water", Decimal("0"), None, None),
]


@pytest.fixture(scope="session", autouse=True)
def set_test_env(tmp_path_factory):
    db_file = tmp_path_factory.mktemp("data") / "test.db"
    os.environ["DB_PATH"] = str(db_file)
    os.environ["APP_PASSWORD"] = "testpass"
    os.environ["SECRET_KEY"] = "test-secret-key-for-testing"


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "planner.db"


@pytest.fixture
def db(db_path):
    """A fresh database whose catalog is Soup (id 1), Salad (id 2), Water (id 3)."""
    database = Database(db_path, seed=TEST_CATALOG).open()
    yield database
    database.close()


@pytest.fixture(scope="session")
def client(set_test_env):
    from fastapi.testclient import TestClient
    from app.main import app
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture(scope="session")
def authed_client(client):
    client.post("/login", data={"password": "testpass"}, follow_redirects=False)
    return client


@pytest.fixture
def test_catalog():
    return list(TEST_CATALOG)


@pytest.fixture
def count_lines(db):
    """Number of stored line_items rows, for one plan or overall."""
    def _count(plan_id=None):
        if plan_id is None:
            return db.connection.execute("SELECT COUNT(*) FROM line_items").fetchone()[0]
        return db.connection.execute(
            "SELECT COUNT(*) FROM line_items WHERE plan_id = ?", (plan_id,)
        ).fetchone()[0]
    return _count
