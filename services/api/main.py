"""
Devlog Page Builder - Backend API
FastAPI with pluggable storage backends: JSON files and SQLite

Install dependencies:
pip install -e .

Run server:
uvicorn main:app --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import contextvars
import logging
import os
import time
import uuid

from settings import get_settings

# ========== Request Context for Tracing ==========
request_id_var = contextvars.ContextVar('request_id', default=None)

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from core.gateway import HttpPageGateway  # noqa: E402
from routers import editor as editor_router  # noqa: E402
from routers import pages as pages_router  # noqa: E402
from routers import public as public_router  # noqa: E402
from routers import versions as versions_router  # noqa: E402
from schemas import HealthCheck  # noqa: E402

API_VERSION = "1.0"

# ============================================================================
# BACKEND CONFIGURATION
# ============================================================================

STORAGE_BACKEND = settings.storage_backend.lower()

logger.info(f"Storage Backend: {STORAGE_BACKEND.upper()}")


# ============================================================================
# STORAGE ADAPTER INITIALIZATION
# ============================================================================

def build_storage_adapter(backend: str):
    if backend == "json":
        from adapters.json import JsonAdapter

        logger.info(f"Initializing JSON adapter in {settings.data_dir}/")
        return JsonAdapter(data_dir=settings.data_dir)

    if backend == "sqlite":
        from adapters.sqlite import SqliteAdapter

        try:
            adapter = SqliteAdapter.from_url(settings.db_url)
        except Exception as e:
            logger.error(f"Failed to initialize SQLite: {e}")
            raise
        logger.info(f"SQLite adapter initialized ({settings.db_url.split('://')[0]})")
        return adapter

    raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")


def build_page_gateway():
    """Remote gateway for editor sessions, or None to use the local storage."""
    if not settings.gateway_base_url:
        return None
    logger.info(f"Editor sessions use remote page gateway at {settings.gateway_base_url}")
    return HttpPageGateway(settings.gateway_base_url, timeout=settings.gateway_timeout_seconds)


# ============================================================================
# FASTAPI APP
# ============================================================================

app = FastAPI(
    title="Devlog Page Builder API",
    description="Backend API for authoring game-update devlog pages",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.state.storage_adapter = build_storage_adapter(STORAGE_BACKEND)
app.state.page_gateway = build_page_gateway()


# ========== Request Tracing Middleware ==========
@app.middleware("http")
async def request_tracing_middleware(request, call_next):
    """Add request_id and timing to all requests."""
    request_id = str(uuid.uuid4())[:8]
    request_id_var.set(request_id)
    start = time.time()

    response = await call_next(request)

    latency_ms = round((time.time() - start) * 1000, 2)
    logger.info(
        f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} ({latency_ms} ms)"
    )

    response.headers["X-Request-ID"] = request_id
    return response


ALLOWED_ORIGINS = settings.get_origins_list()

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"[{request_id_var.get()}] Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )

# ============================================================================
# ENDPOINTS
# ============================================================================
@app.get("/health", response_model=HealthCheck)
async def health_check():
    """Health check endpoint"""
    try:
        app.state.storage_adapter.ping()
        return {
            "status": "healthy",
            "backend": STORAGE_BACKEND,
            "version": API_VERSION
        }
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "backend": STORAGE_BACKEND, "error": str(e)}
        )


@app.get("/healthz")
async def healthz():
    """
    Liveness probe.
    Fast check - is the process alive and responding?
    """
    return {
        "status": "ok",
        "timestamp": time.time(),
        "version": API_VERSION
    }


@app.get("/readyz")
async def readyz():
    """
    Readiness probe.
    Checks if the storage backend is reachable. Returns 200 if ready, 503 if not.
    """
    try:
        app.state.storage_adapter.ping()
        return {
            "status": "ready",
            "backend": STORAGE_BACKEND,
            "editor_sessions": len(editor_router.sessions),
            "timestamp": time.time()
        }

    except Exception as e:
        logger.error(f"Readiness check failed: {str(e)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "backend": STORAGE_BACKEND,
                "error": str(e),
                "timestamp": time.time()
            }
        )


@app.get("/")
async def root():
    """API root endpoint"""
    return {
        "message": "Devlog Page Builder API",
        "version": API_VERSION,
        "backend": STORAGE_BACKEND,
        "status": "running",
        "docs": "/docs"
    }


# ========== Routers ==========
app.include_router(versions_router.router)
app.include_router(pages_router.router)
app.include_router(public_router.router)
app.include_router(editor_router.router)


@app.on_event("startup")
async def startup_event():
    logger.info("Devlog Page Builder API starting up...")
    logger.info(f"Storage Backend: {STORAGE_BACKEND.upper()}")
    logger.info(f"Allowed origins: {ALLOWED_ORIGINS}")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Devlog Page Builder API shutting down...")
    close_gateway = getattr(app.state.page_gateway, "close", None)
    if close_gateway is not None:
        close_gateway()
    engine = getattr(app.state.storage_adapter, "engine", None)
    if engine is not None:
        engine.dispose()

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level=settings.log_level.lower())
