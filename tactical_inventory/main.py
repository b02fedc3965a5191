"""
Tactical Inventory FastAPI Main Application
Entry point for the stock ledger REST API
"""
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tactical_inventory.core.config import settings
from tactical_inventory.core.exceptions import (
    ConstraintError, DatabaseConnectionError, IncompleteCountError, InvalidStateError,
    InventoryException, NotFoundError, QueryError, ValidationError
)
from tactical_inventory.core.logging import get_logger, setup_logging
from tactical_inventory.api.v1.api_router import api_router
from tactical_inventory.services.db_adapters import DatabaseAdapter, create_adapter
from tactical_inventory.services.notifications import ChangeNotifier, create_notifier

logger = get_logger("api")

# Most specific first
ERROR_RESPONSES = (
    (IncompleteCountError, 409, "incomplete_count"),
    (ValidationError, 400, "validation_error"),
    (NotFoundError, 404, "not_found"),
    (InvalidStateError, 409, "invalid_state"),
    (ConstraintError, 409, "constraint_violation"),
    (DatabaseConnectionError, 503, "database_unavailable"),
    (QueryError, 500, "query_error"),
)


def error_response(exc: InventoryException) -> JSONResponse:
    status_code, error_type = 500, "server_error"
    for exc_class, code, name in ERROR_RESPONSES:
        if isinstance(exc, exc_class):
            status_code, error_type = code, name
            break

    content = {
        "error": type(exc).__name__,
        "detail": str(exc),
        "type": error_type,
    }
    if isinstance(exc, IncompleteCountError):
        content["missing_line_ids"] = exc.missing_line_ids
    return JSONResponse(status_code=status_code, content=content)


def create_app(
    adapter: Optional[DatabaseAdapter] = None,
    notifier: Optional[ChangeNotifier] = None,
) -> FastAPI:
    """
    Build the application

    An injected adapter is used as-is; otherwise one is created from
    settings at startup and disposed at shutdown.
    """
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Multi-site stock ledger: entries, dispatches, recoveries and cyclic counts",
        docs_url=settings.DOCS_URL,
    )
    app.state.adapter = adapter
    app.state.notifier = notifier if notifier is not None else create_notifier(settings)
    app.state.owns_adapter = adapter is None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
        if app.state.adapter is None:
            app.state.adapter = create_adapter(settings)
            app.state.adapter.create_schema()
        logger.info("Application startup completed successfully")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down application")
        if app.state.owns_adapter and app.state.adapter is not None:
            app.state.adapter.dispose()

    @app.get("/health", tags=["System"])
    async def health_check():
        """
        Health check endpoint for monitoring and load balancers
        """
        if app.state.adapter is None:
            raise HTTPException(status_code=503, detail="Service unavailable")
        db_status = app.state.adapter.check_connection()
        return {
            "status": "healthy" if db_status else "degraded",
            "version": settings.APP_VERSION,
            "database": app.state.adapter.name if db_status else "disconnected",
        }

    @app.exception_handler(InventoryException)
    async def inventory_exception_handler(request: Request, exc: InventoryException):
        if isinstance(exc, (DatabaseConnectionError, QueryError)):
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "error": "ValidationError",
                "detail": jsonable_encoder(exc.errors()),
                "type": "validation_error",
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Global exception handler for unhandled errors
        """
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if settings.DEBUG else "An unexpected error occurred",
                "type": "server_error",
            },
        )

    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tactical_inventory.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
