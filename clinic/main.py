from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
import time
import logging

from . import __version__
from .api.v1 import admin, auth, dashboard, doctor, patient
from .core.config import settings
from .core.database import SessionLocal, init_db
from .services.auth_service import AuthService
from .services.demo_data import seed_demo_data

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Clinic management demo with admin, doctor and patient dashboards",
    openapi_url=f"{API_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started
    response.headers["X-Process-Time"] = f"{elapsed:.6f}"

    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"in {elapsed * 1000:.1f}ms"
    )
    return response

@app.exception_handler(404)
async def not_found_handler(request: Request, exc: HTTPException):
    # Unknown routes have no detail of their own
    detail = getattr(exc, "detail", None)
    if not detail or detail == "Not Found":
        detail = "The requested resource was not found"
    return JSONResponse(
        status_code=404,
        content={"error": "Not Found", "detail": detail, "path": request.url.path}
    )

@app.exception_handler(500)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred"
        }
    )

for module in (auth, dashboard, admin, doctor, patient):
    app.include_router(module.router, prefix=API_PREFIX)

def prepare_database() -> None:
    """Create tables, drop stale sessions and load the demo clinic."""
    init_db()
    db = SessionLocal()
    try:
        AuthService(db).cleanup_expired_sessions()
        if settings.SEED_DEMO_DATA:
            seed_demo_data(db)
    finally:
        db.close()

@app.on_event("startup")
async def startup_event():
    backend = settings.get_database_url.split(":", 1)[0]
    logger.info(f"Starting {settings.APP_NAME} {__version__} on {backend}")
    try:
        prepare_database()
    except Exception:
        logger.exception("Database setup failed")
        raise
    logger.info("Application startup complete")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Stopping {settings.APP_NAME}")

@app.get("/health")
async def health_check():
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.warning(f"Health check could not reach the database: {e}")
        database = "unavailable"
    finally:
        db.close()

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "database": database,
        "timestamp": time.time(),
        "version": settings.VERSION
    }

@app.get("/")
async def root():
    return {
        "message": f"Welcome to the {settings.APP_NAME} API",
        "docs": "/docs",
        "health": "/health",
        "demo_accounts": f"{API_PREFIX}/auth/demo-accounts"
    }

@app.get(f"{API_PREFIX}/info")
async def api_info():
    """Where each dashboard lives."""
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "endpoints": {
            module.__name__.rsplit(".", 1)[-1]: f"{API_PREFIX}{module.router.prefix}"
            for module in (auth, dashboard, admin, doctor, patient)
        }
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clinic.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
