import logging
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from . import telemetry_pipeline  # noqa: F401
from .admin_routes import router as admin_router
from .auth_routes import router as auth_router
from .config import get_settings
from .db.monitoring import get_pool_snapshot
from .db.session import get_engine
from .logging_config import configure_logging
from .progress_routes import router as progress_router
from .quiz_routes import router as quiz_router
from .setoran_routes import router as setoran_router


configure_logging()
logger = logging.getLogger(__name__)
app = FastAPI(title="Setoran Backend", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(auth_router)
app.include_router(quiz_router)
app.include_router(setoran_router)
app.include_router(progress_router)
app.include_router(admin_router)

settings_snapshot = get_settings()
logger.info("Backend starting with auth service URL: %s", settings_snapshot.supabase_url)
logger.info("Setoran point policy: %s", settings_snapshot.point_policy)


@app.get("/healthz")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/healthz/database")
def database_health() -> Dict[str, Any]:
    try:
        engine = get_engine()
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except (RuntimeError, SQLAlchemyError) as exc:
        logger.warning("Database health check failed: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return {
        "status": "ok",
        "dialect": engine.dialect.name,
        "pool": get_pool_snapshot(engine),
    }
