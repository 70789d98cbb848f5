"""
FormCoach Backend API
Real-time exercise rep counting and form coaching

FastAPI application entry point with WebSocket support and worker threads
for non-blocking pose frame processing.
"""

import logging
import sys
import time
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

# ============================================
# Configure Root Logger First
# ============================================
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)]
)

# Service routers
from coach_service.router import router as coach_router
from coach_service.models import get_exercise_catalog, get_session_dispatcher

# Core utilities
from core.config import settings
from core.database import init_firebase, is_mock_mode
from core.websocket import connection_manager
from core.threading import pose_worker_pool
from shared.utils import setup_logger

# Setup logging
logger = setup_logger("formcoach.main", level=logging.DEBUG)
request_logger = setup_logger("formcoach.requests", level=logging.DEBUG)


# ============================================
# Request Logging Middleware
# ============================================

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all incoming requests and responses with timing."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        client_ip = request.client.host if request.client else "unknown"
        query_string = f"?{request.url.query}" if request.url.query else ""

        request_logger.info(f"➡️  {request.method} {request.url.path}{query_string}")
        request_logger.debug(f"    Client: {client_ip}")

        try:
            response = await call_next(request)

            process_time = (time.time() - start_time) * 1000

            if response.status_code < 300:
                status_emoji = "✅"
            elif response.status_code < 400:
                status_emoji = "↪️"
            elif response.status_code < 500:
                status_emoji = "⚠️"
            else:
                status_emoji = "❌"

            request_logger.info(
                f"{status_emoji} {request.method} {request.url.path} → {response.status_code} ({process_time:.1f}ms)"
            )

            return response
        except Exception as e:
            process_time = (time.time() - start_time) * 1000
            request_logger.error(f"💥 {request.method} {request.url.path} → ERROR: {type(e).__name__}: {str(e)} ({process_time:.1f}ms)")
            request_logger.error(traceback.format_exc())
            raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown."""
    # ===== STARTUP =====
    logger.info("🚀 FormCoach API starting up...")

    if init_firebase():
        logger.info("🔥 Firebase connected")
    else:
        logger.warning("⚠️ Running in MOCK MODE (no Firebase)")

    get_exercise_catalog().load()

    dispatcher = get_session_dispatcher()

    await connection_manager.start_heartbeat()
    await dispatcher.start_reaper()

    logger.info("✅ FormCoach API ready!")

    yield  # Application runs here

    # ===== SHUTDOWN =====
    logger.info("👋 FormCoach API shutting down...")

    await dispatcher.stop_reaper()
    await connection_manager.stop_heartbeat()

    pose_worker_pool.shutdown(wait=True)

    logger.info("✅ Shutdown complete")


app = FastAPI(
    title="FormCoach API",
    description="Real-time exercise rep counting and form coaching",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "formcoach-api",
        "firebase": "connected" if not is_mock_mode() else "mock",
        "websocket_connections": connection_manager.connection_count,
        "active_sessions": get_session_dispatcher().registry.session_count
    }


@app.get("/stats")
async def get_stats():
    """Get service statistics."""
    return {
        "websocket": connection_manager.get_stats(),
        "sessions": get_session_dispatcher().get_stats(),
        "pose_pool": pose_worker_pool.get_stats()
    }


# Include service routers
app.include_router(coach_router, prefix="/api/coach", tags=["Coach Service"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
