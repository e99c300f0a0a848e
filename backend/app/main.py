"""
Student Records Service - FastAPI Application Entry Point.

This module:
1. Sets up structured JSON logging
2. Builds the FastAPI app with CORS and request ID middleware
3. Selects the student store once at startup (database or in-memory)
4. Registers the student API, status endpoints and the static client

Layout:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models
- services/: record stores and storage selection
- logging_config.py: Structured logging configuration
- database.py: Engine construction and connectivity checks
"""

import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.config import Settings, get_settings
from app.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from app.routes import students
from app.services.storage import get_store, select_store
from app.services.student_store import StudentStore

setup_logging()
logger = get_logger("http")

STATIC_DIR = Path(__file__).resolve().parent / "static"


def create_app(store: Optional[StudentStore] = None,
               settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        store: Store to serve from. When omitted, the lifespan picks one
            from DATABASE_URL at startup.
        settings: Settings to use instead of reading the environment.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "store", None) is None:
            cfg = settings or get_settings()
            app.state.store = select_store(cfg.DATABASE_URL, cfg.DB_CONNECT_TIMEOUT)
        log_with_context(logger, "INFO",
            "Server is ready with {} storage".format(app.state.store.mode))
        try:
            yield
        finally:
            app.state.store.close()

    app = FastAPI(
        title="Student Records Service",
        description=(
            "Create, list, edit and delete student records. Records are kept "
            "in a database when one is reachable at startup, in memory otherwise."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.store = store

    # ──────────────────────────────────────────────────────────────
    # CORS: open for development so the client can be served elsewhere.
    # ──────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"]
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """
        Tag every request with a UUID.

        The ID goes into the request_id context variable (picked up by
        every log entry) and back to the client as X-Request-ID.
        """
        req_id = generate_request_id()
        request_id_var.set(req_id)
        start_time = time.time()

        log_with_context(logger, "INFO",
            f"Request started: {request.method} {request.url.path}",
            extra_data={
                "ip": request.client.host if request.client else "unknown",
                "query_params": dict(request.query_params)
            })

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        response.headers["X-Request-ID"] = req_id

        log_with_context(logger, "INFO",
            f"Request completed: {request.method} {request.url.path} → {response.status_code}",
            extra_data={
                "duration_ms": round(duration_ms, 2),
                "status_code": response.status_code
            })
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies are client errors like any other: 400, not 422."""
        log_with_context(logger, "WARNING", "Rejected malformed request body",
                         extra_data={"errors": exc.errors()})
        return JSONResponse(status_code=400, content={"detail": "Invalid request body"})

    app.include_router(students.router, tags=["Students"])

    @app.get("/api/connection-status", tags=["Status"])
    def connection_status(request: Request):
        """Report whether records are being written to the database."""
        store = get_store(request)
        return {"connected": store.durable, "usingInMemory": not store.durable}

    @app.get("/health", tags=["Status"])
    def health_check(request: Request):
        """Liveness check including the active storage mode."""
        return {
            "status": "healthy",
            "service": "student-records",
            "version": "1.0.0",
            "storage": get_store(request).mode
        }

    # Registered last so the API routes take precedence
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")

    return app


app = create_app()
