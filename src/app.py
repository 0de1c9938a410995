"""Main FastAPI application module.

This module builds the FastAPI application, wires the database handle, error
handlers and route handlers.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.database import Database
from core.exceptions import InventoryError, InvalidInputError, NotFoundError
from core.logging_config import setup_logging
from config import (
    CORS_ALLOWED_ORIGINS,
    API_HOST,
    API_PORT,
    DATABASE_URL,
    PROJECT_NAME,
    PROJECT_VERSION,
)
from api.routes import auth, orders, products
from utils.session_manager import SessionManager

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return "; ".join(parts) or InvalidInputError.default_message


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{"error": kind, "message": message}``."""

    @app.exception_handler(InventoryError)
    async def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = InvalidInputError(_validation_message(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            content = NotFoundError("API endpoint not found").to_dict()
        else:
            content = {"error": "HTTPError", "message": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=InventoryError().to_dict())


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the application.

    Args:
        database: Database handle to use. When omitted, one is created from
            DATABASE_URL at startup.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="Inventory and Order Management API",
        description="Product catalog, session authentication and order workflow.",
        version=PROJECT_VERSION,
    )
    app.state.database = database
    if database is not None:
        database.init_db()

    # Configure CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
        return response

    register_exception_handlers(app)

    # Register route handlers
    app.include_router(products.router)
    app.include_router(auth.router)
    app.include_router(orders.router)

    @app.on_event("startup")
    def startup_tasks() -> None:
        """Open the database and drop sessions that expired while down."""
        if app.state.database is None:
            app.state.database = Database(DATABASE_URL)
            app.state.database.init_db()
        db = app.state.database.session()
        try:
            SessionManager(db).purge_expired()
        finally:
            db.close()

    @app.on_event("shutdown")
    def shutdown_tasks() -> None:
        if app.state.database is not None:
            app.state.database.dispose()

    @app.get("/", summary="API root", tags=["Info"])
    def root() -> dict:
        """API root, returns API information and documentation links."""
        return {
            "name": PROJECT_NAME,
            "version": PROJECT_VERSION,
            "docs": {
                "swagger": "/docs",
                "redoc": "/redoc",
            },
            "health": "/api/health",
        }

    @app.get("/api/info", summary="Project info", tags=["Info"])
    def info() -> dict:
        return {
            "project": PROJECT_NAME,
            "description": "CRUD API with session authentication and order workflow",
            "database": app.state.database.engine.dialect.name,
        }

    @app.get("/api/health", summary="Health check", tags=["Health"])
    def health() -> dict:
        """Health check endpoint.

        Returns:
            Dictionary with status "ok".
        """
        return {"status": "ok"}

    return app


setup_logging()

app = create_app()


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    server_url = f"http://{API_HOST}:{API_PORT}"
    print(f"🌐 Serving on: {server_url}")
    print(f"📚 API docs: {server_url}/docs")

    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
