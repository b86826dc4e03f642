import os
from itsdangerous import URLSafeTimedSerializer, BadSignature
from fastapi import Request

from budget_meals.db.database import Database

SESSION_COOKIE = "bm_session"
SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7 days


def _get_signer() -> URLSafeTimedSerializer:
    key = os.environ.get("SECRET_KEY", "dev-secret-change-in-production")
    return URLSafeTimedSerializer(key)


def create_session_token() -> str:
    return _get_signer().dumps("ok")


def verify_session_token(token: str) -> bool:
    try:
        _get_signer().loads(token, max_age=SESSION_MAX_AGE)
        return True
    except BadSignature:
        return False


# Paths that don't require auth
_PUBLIC_PREFIXES = ("/login",)


def is_public(path: str) -> bool:
    return any(path.startswith(p) for p in _PUBLIC_PREFIXES)


def get_db(request: Request) -> Database:
    """The Database opened by the app lifespan."""
    return request.app.state.db
