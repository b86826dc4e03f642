"""Environment-driven configuration.

Known variables (a .env file is loaded by app.main at startup):
    DB_PATH    : SQLite file for the planner database.
    LOG_LEVEL  : root logging level for the web app (default INFO).

APP_PASSWORD and SECRET_KEY are read by the web layer at call time.
"""

import os
from pathlib import Path

DEFAULT_DB_DIR = Path.home() / ".budget_meals"
DEFAULT_DB_NAME = "budget_meals.db"


def get_db_path() -> Path:
    """Return the database path.

    Priority order:
    1. DB_PATH environment variable (used by Docker / tests)
    2. Default ~/.budget_meals/budget_meals.db
    """
    env_path = os.environ.get("DB_PATH")
    if env_path:
        return Path(env_path)
    return DEFAULT_DB_DIR / DEFAULT_DB_NAME


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").upper()
