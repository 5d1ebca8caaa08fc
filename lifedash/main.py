import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from lifedash.config import settings
from lifedash.db import create_tables
from lifedash.engine.router import router as engine_router
from lifedash.errors import EngineError, InvalidInput, NotFound, Unauthenticated

logging.basicConfig(level=settings.log_level.upper())

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.create_tables_on_startup:
        await create_tables()
        logger.info("Database tables ensured")
    yield


app = FastAPI(title="Life Dashboard", version="0.1.0", lifespan=lifespan)
app.include_router(engine_router)

_STATUS_BY_ERROR: dict[type[EngineError], int] = {
    NotFound: 404,
    Unauthenticated: 401,
    InvalidInput: 400,
}


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    status = _STATUS_BY_ERROR.get(type(exc), 500)
    return JSONResponse(status_code=status, content=exc.to_body())


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "api": {
            "activities": "/api/activities",
            "activities_feed": "/api/activities/feed",
            "goals": "/api/goals",
            "goal_history": "/api/goals/{id}/history",
            "dashboard": "/api/dashboard",
            "reminders": "/api/reminders",
            "profile": "/api/profile",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
