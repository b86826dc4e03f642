import logging
from contextlib import asynccontextmanager
from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from budget_meals.config import get_db_path, get_log_level
from budget_meals.db.database import Database
from budget_meals.errors import ConstraintViolation, StorageUnavailable
from app.dependencies import verify_session_token, is_public, SESSION_COOKIE
from app.routers import auth, catalog, plans

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A nested startup (a second TestClient) hands the outer handle back on exit.
    previous = getattr(app.state, "db", None)
    db = Database(get_db_path()).open()
    app.state.db = db
    logger.info("Opened database %s", db.path)
    try:
        yield
    finally:
        db.close()
        app.state.db = previous


app = FastAPI(lifespan=lifespan)


@app.middleware("http")
async def auth_middleware(request: Request, call_next):
    if not is_public(request.url.path):
        token = request.cookies.get(SESSION_COOKIE)
        if not token or not verify_session_token(token):
            return RedirectResponse(url="/login", status_code=302)
    return await call_next(request)


@app.exception_handler(ConstraintViolation)
async def constraint_violation_handler(request: Request, exc: ConstraintViolation):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(StorageUnavailable)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailable):
    logger.error("Storage unavailable: %s", exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


app.include_router(auth.router)
app.include_router(catalog.router)
app.include_router(plans.router)
