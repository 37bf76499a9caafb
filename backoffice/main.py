"""
Main FastAPI Application
"""
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from backoffice.core.config import Settings, settings as default_settings
from backoffice.core.database import Database
from backoffice.core.exceptions import BackOfficeError
from backoffice.api.v1 import inventory, crm, invoices, payments

logger = logging.getLogger(__name__)


def create_app(app_settings: Settings = None) -> FastAPI:
    settings = app_settings or default_settings

    # Configure logging
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    database = Database(settings.database_url, echo=settings.DEBUG)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        # Startup
        logger.info("Starting up...")
        database.open()

        yield

        # Shutdown
        logger.info("Shutting down...")
        database.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.database = database

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(BackOfficeError)
    async def back_office_exception_handler(request: Request, exc: BackOfficeError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "An unexpected error occurred"}
        )

    # Health check
    @app.get("/health")
    def health_check():
        return {"status": "healthy", "version": settings.APP_VERSION}

    # Include routers
    app.include_router(inventory.router, prefix="/api/v1")
    app.include_router(crm.router, prefix="/api/v1")
    app.include_router(invoices.router, prefix="/api/v1")
    app.include_router(payments.router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
