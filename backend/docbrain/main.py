"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from docbrain.config import Settings, settings as default_settings
from docbrain.cors import install_cors
from docbrain.database import build_engine, build_session_factory, create_tables
from docbrain.exceptions import DocBrainError
from docbrain.logging_config import configure_logging
from docbrain.routes.pdfs import router as pdfs_router
from docbrain.schemas.common import HealthResponse
from docbrain.services.blob_storage import BlobStore

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup, release the pool on shutdown."""
    await create_tables(app.state.engine)
    logger.info("DocBrain API ready (blobs in %s)", app.state.blob_store.base_path)

    yield

    await app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app with its engine, session factory and blob store wired in."""
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="DocBrain API",
        version=VERSION,
        description="Upload, list, download and delete PDF documents.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.blob_store = BlobStore(settings.FILE_STORAGE_PATH)

    install_cors(app, settings)
    _install_exception_handlers(app)

    @app.get("/")
    async def root():
        return {
            "message": "DocBrain API Server",
            "status": "running",
            "version": VERSION,
            "endpoints": {
                "health": "/api/health",
                "upload": "POST /api/upload",
                "getAllPdfs": "GET /api/pdfs",
                "getPdfById": "GET /api/pdfs/:id",
                "downloadPdf": "GET /api/pdfs/:id/download",
                "deletePdf": "DELETE /api/pdfs/:id",
            },
        }

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Liveness probe. Reports database reachability without failing on it."""
        try:
            async with request.app.state.session_factory() as db:
                await db.execute(text("SELECT 1"))
            database = "connected"
        except Exception as e:
            logger.warning("Health check could not reach the database: %s", e)
            database = "unavailable"
        return {"status": "ok", "message": "Server is running", "database": database}

    app.include_router(pdfs_router)
    return app


def _install_exception_handlers(app: FastAPI) -> None:
    """Map every failure to a JSON body with an `error` message."""

    @app.exception_handler(DocBrainError)
    async def docbrain_error_handler(request: Request, exc: DocBrainError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
            return JSONResponse(status_code=exc.status_code, content={"error": "Internal server error"})
        logger.warning("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": _validation_details(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def _validation_details(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


app = create_app()
