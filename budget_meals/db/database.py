"""SQLite storage handle, schema initialization and destructive migration.

A Database is constructed once by the caller, opened, passed to every consumer
and closed by the same caller:

    with Database(get_db_path()) as db:
        plans.replace_plan_for_date(db, "2024-01-01", Decimal("20"), items)

The schema version lives in PRAGMA user_version. Any older version is upgraded
by dropping all tables and recreating them (the catalog is reseeded); no data
survives a version change.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Optional

from budget_meals.db.models import money_param
from budget_meals.db.seed import SEED_CATALOG
from budget_meals.errors import StorageUnavailable

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

MEMORY = ":memory:"

# Drop order: children before parents.
TABLES = ("line_items", "plans", "catalog_items")

SCHEMA = (
    """CREATE TABLE catalog_items (
        id       INTEGER PRIMARY KEY AUTOINCREMENT,
        name     TEXT NOT NULL,
        cost     REAL NOT NULL,
        category TEXT,
        calories INTEGER
    )""",
    """CREATE TABLE plans (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        date        TEXT NOT NULL,
        target_cost REAL NOT NULL
    )""",
    """CREATE TABLE line_items (
        id              INTEGER PRIMARY KEY AUTOINCREMENT,
        plan_id         INTEGER NOT NULL REFERENCES plans(id),
        catalog_item_id INTEGER REFERENCES catalog_items(id),
        custom_name     TEXT,
        custom_cost     REAL
    )""",
)


class Database:
    """Owner of the single SQLite connection used by the catalog and plan stores.

    seed is the catalog content written when the schema is first created;
    it defaults to the static SEED_CATALOG reference data.  timeout is how long
    a statement waits on a lock held by another connection.
    """

    def __init__(self, path, seed: Optional[Iterable[tuple]] = None, timeout: float = 5.0):
        self.path = path if str(path) == MEMORY else Path(path)
        self.seed = list(SEED_CATALOG if seed is None else seed)
        self.timeout = timeout
        self._conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageUnavailable(f"Database {self.path} is not open")
        return self._conn

    def open(self) -> "Database":
        """Connect and make sure the schema is current. Opening twice is a no-op."""
        if self._conn is not None:
            return self
        try:
            if self.path != MEMORY:
                self.path.parent.mkdir(parents=True, exist_ok=True)
            # The web app opens this in its lifespan and serves it from async routes.
            conn = sqlite3.connect(str(self.path), isolation_level=None, check_same_thread=False,
                                   timeout=self.timeout)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
        except (OSError, sqlite3.Error) as exc:
            raise StorageUnavailable(f"Cannot open database {self.path}: {exc}") from exc

        self._conn = conn
        try:
            init_db(self)
        except sqlite3.Error as exc:
            self.close()
            raise StorageUnavailable(f"Cannot initialize database {self.path}: {exc}") from exc
        except Exception:
            self.close()
            raise
        return self

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @contextmanager
    def transaction(self):
        """Run the enclosed statements as one unit: COMMIT on success, ROLLBACK on any error.

        A failed COMMIT is rolled back too, so the connection is never left inside
        a half-finished transaction.  Lock and I/O failures surface as
        StorageUnavailable.
        """
        conn = self.connection
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.OperationalError as exc:
            raise StorageUnavailable(f"Cannot start a transaction on {self.path}: {exc}") from exc
        try:
            yield conn
            conn.execute("COMMIT")
        except BaseException as exc:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            logger.debug("Rolled back transaction on %s", self.path)
            if isinstance(exc, sqlite3.OperationalError):
                raise StorageUnavailable(f"Write to {self.path} failed: {exc}") from exc
            raise


def get_schema_version(db: Database) -> int:
    return db.connection.execute("PRAGMA user_version").fetchone()[0]


def init_db(db: Database) -> bool:
    """Create the schema when missing or outdated. Returns True if it (re)created tables.

    Seeding happens only here, so an up-to-date database is never reseeded.
    """
    version = get_schema_version(db)
    if version == SCHEMA_VERSION:
        return False
    if version > SCHEMA_VERSION:
        raise StorageUnavailable(
            f"Database {db.path} has schema version {version}, newer than supported {SCHEMA_VERSION}"
        )

    with db.transaction() as conn:
        if version:
            logger.info("Upgrading %s from schema %d to %d; existing data is discarded",
                        db.path, version, SCHEMA_VERSION)
        for table in TABLES:
            conn.execute(f"DROP TABLE IF EXISTS {table}")
        for statement in SCHEMA:
            conn.execute(statement)
        _seed_catalog(conn, db.seed)
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

    logger.info("Created schema version %d in %s with %d catalog items",
                SCHEMA_VERSION, db.path, len(db.seed))
    return True


def _seed_catalog(conn: sqlite3.Connection, seed: list) -> None:
    conn.executemany(
        "INSERT INTO catalog_items (name, cost, category, calories) VALUES (?, ?, ?, ?)",
        [(name, money_param(cost), category, calories) for name, cost, category, calories in seed],
    )
