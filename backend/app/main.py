"""
FastAPI application entrypoint.
Run with: uvicorn app.main:app --reload --port 8000

API base path: routes are mounted at root (no /api/v1 prefix).
  - Topics: GET/POST /topics, POST /topics/generate, GET/PATCH/DELETE /topics/{id},
            GET /topics/{id}/children, PATCH /topics/{id}/status
  - Profile: GET/PUT /profile, POST /profile/setup
  - Dashboard: GET /dashboard/stats

Every error response has the shape {"error": {"code", "message", "details"?}}.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app import metrics
from app.config import settings
from app.api.dashboard import router as dashboard_router
from app.api.profile import router as profile_router
from app.api.topics import router as topics_router
from app.errors import (
    AppError,
    AuthenticationError,
    InternalError,
    QuotaExceededError,
    ValidationError,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Dev Refresher API",
    description="Personal learning topics for returning developers: topic tree, AI suggestions, streaks.",
    version="0.1.0",
)

_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins if _origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(topics_router)
app.include_router(profile_router)
app.include_router(dashboard_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = {}
    if isinstance(exc, QuotaExceededError):
        headers["Retry-After"] = str(exc.retry_after)
    elif isinstance(exc, AuthenticationError):
        headers["WWW-Authenticate"] = "Bearer"
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers or None)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    err = ValidationError.from_pydantic(exc)
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    err = InternalError("An unexpected error occurred")
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


@app.on_event("startup")
def startup():
    """Init SQLite DB and log AI provider status. Fail fast if production uses default SECRET_KEY."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if (settings.env or "").strip().lower() == "production":
        if (settings.secret_key or "").strip() == "change-me-in-production":
            logger.critical("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
            raise RuntimeError("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
    provider = settings.llm_provider
    if provider == "mock":
        logger.warning("LLM_PROVIDER=mock: topic generation returns placeholder topics.")
    elif provider == "claude" and not settings.claude_api_key.strip():
        logger.warning("Claude: no CLAUDE_API_KEY set; generation will fail until one is configured.")
    elif provider == "openrouter" and not settings.openrouter_api_key.strip():
        logger.warning("OpenRouter: no OPENROUTER_API_KEY set; generation will fail until one is configured.")
    else:
        logger.info("AI provider %s, model %s", provider, settings.active_llm_model)
    from app.database import init_sqlite_db
    init_sqlite_db()


@app.get("/health")
def health():
    """Health check (JSON) with process-local provider counters."""
    return {"status": "ok", "message": "Dev Refresher API", "metrics": metrics.snapshot()}
