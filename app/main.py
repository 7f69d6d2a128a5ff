# ---
# File: app/main.py
# Purpose: FastAPI app initialization, middleware, CORS, error handlers,
#          backend lifecycle, and router inclusion for the status page service
# ---

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from app import config
from app.core.errors import BackendError, ValidationError
from app.db import db
from app.health import keepalive

# Import routers for API functionality
from app.services.routes import router as services_router, groups_router
from app.incidents.routes import router as incidents_router
from app.maintenance.routes import router as maintenance_router
from app.status.routes import router as status_router
from app.dashboard.routes import router as dashboard_router
from app.health.routes import router as health_router

# ---
# Logging Configuration
# ---
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

# ---
# Initialize FastAPI app instance
# ---
app = FastAPI(title="Uptime Status Page")

# ---
# CORS Middleware for the dashboard and public page frontends
# ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---
# Middleware: Log all incoming HTTP requests for debugging
# ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.debug(f"[HTTP] {request.method} {request.url}")
    response = await call_next(request)
    logger.debug(f"[HTTP] {request.method} {request.url.path} -> {response.status_code}")
    return response


# ---
# Application Lifecycle Events
# ---
@app.on_event("startup")
async def startup():
    """
    Application Startup Handler

    Startup Sequence:
        1. Backend connection (REST client or in-memory store)
        2. Keep-alive service (if configured) to prevent cold starts
    """
    logger.info("[STARTUP] Connecting to backend...")
    await db.connect()
    logger.info("[STARTUP] Backend ready")

    keepalive.start()
    logger.info("[STARTUP] All services initialized successfully")


@app.on_event("shutdown")
async def shutdown():
    await keepalive.stop()

    logger.info("[SHUTDOWN] Disconnecting backend...")
    await db.disconnect()
    logger.info("[SHUTDOWN] All services stopped successfully")


# ---
# Rejected operations: blank fields, unknown ids, disallowed transitions
# ---
@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    logger.info(f"[VALIDATION] {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message, "field": exc.field},
    )


# ---
# Backend collaborator unreachable, failing, or answering in the wrong shape
# ---
@app.exception_handler(BackendError)
async def backend_exception_handler(request: Request, exc: BackendError):
    logger.error(f"[BACKEND ERROR] {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=502,
        content={"detail": exc.message},
    )


# ---
# Global exception handler for structured error logging
# ---
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"[UNHANDLED EXCEPTION] {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc)},
    )


# ---
# Include all routers
# ---
app.include_router(services_router)
app.include_router(groups_router)
app.include_router(incidents_router)
app.include_router(maintenance_router)
app.include_router(status_router)
app.include_router(dashboard_router)
app.include_router(health_router)


# ---
# Liveness probe for hosting platforms and the keep-alive pinger
# ---
@app.get("/health")
async def health_check():
    return {"status": "ok"}


# ---
# Entrypoint for local development with Uvicorn
# ---
if __name__ == "__main__":
    import uvicorn

    logger.info(f"[RUN] Starting Uvicorn on 0.0.0.0:{config.PORT}")
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=config.PORT,
        reload=False,
    )
