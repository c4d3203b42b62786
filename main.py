"""EduAssist API entrypoint.

Run locally with: uvicorn main:app --reload
"""
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eduassist.api.routes import router
from eduassist.core.config import settings
from eduassist.core.logging import get_logger, setup_logging
from eduassist.infrastructure.redis import get_redis_client

setup_logging(level=settings.log_level, json_format=settings.environment == "production")
logger = get_logger(__name__)

APP_NAME = "EduAssist API"
APP_VERSION = "1.0.0"
SHOW_DOCS = settings.environment != "production"

app = FastAPI(
    title=APP_NAME,
    description="Subject-scoped AI study assistants with spaced repetition and gamification",
    version=APP_VERSION,
    docs_url="/docs" if SHOW_DOCS else None,
    redoc_url="/redoc" if SHOW_DOCS else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag each request with an id and log its outcome and latency."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.perf_counter()
    fields = {"request_id": request_id, "method": request.method, "path": request.url.path}

    try:
        response = await call_next(request)
    except Exception as e:
        fields["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
        logger.error(
            f"Unhandled error on {request.method} {request.url.path}",
            extra={**fields, "error_type": type(e).__name__},
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "details": str(e), "request_id": request_id},
        )

    fields["status_code"] = response.status_code
    fields["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
    logger.info(f"{request.method} {request.url.path} -> {response.status_code}", extra=fields)
    response.headers["X-Request-ID"] = request_id
    return response


@app.on_event("startup")
async def on_startup():
    logger.info(
        f"{APP_NAME} {APP_VERSION} starting ({settings.environment}, "
        f"{'supabase' if settings.supabase_configured else 'in-memory'} store)",
        extra={"operation": "startup"},
    )


@app.on_event("shutdown")
async def on_shutdown():
    logger.info(f"{APP_NAME} stopping", extra={"operation": "shutdown"})


app.include_router(router, prefix=settings.api_prefix)


@app.get("/")
def root():
    return {
        "service": APP_NAME,
        "version": APP_VERSION,
        "status": "running",
        "environment": settings.environment,
    }


@app.get("/ready")
async def ready():
    """Readiness: Gemini configuration plus which optional backends are in use."""
    checks = {
        "vertex_config": "ok" if settings.project_id else "missing",
        "store": "supabase" if settings.supabase_configured else "in_memory",
        "redis": "ok" if get_redis_client() is not None else "disabled",
    }
    status = "ready" if checks["vertex_config"] == "ok" else "degraded"
    return {"status": status, "checks": checks}
