"""Main entrypoint and application factory for the Tally Document Bridge API.

This module initializes the FastAPI application, configures logging, and exposes the Scalar API reference endpoint for
interactive OpenAPI documentation. It also includes the main entrypoint for running the app with Uvicorn.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from scalar_fastapi import get_scalar_api_reference

from app.api.routes import router
from app.core.errors import UnknownExtractorError
from app.core.settings import get_settings
from app.core.utils import LOG_FORMAT, ensure_dir, get_logger
from app.extractors import ExtractorRegistry


# --- Logging Setup ---
def setup_logging() -> None:
    """Configure logging to file and console, and ensure the log directory exists."""
    settings = get_settings()
    ensure_dir(settings.log_dir)
    logger = get_logger("tally-bridge")
    logger.setLevel(logging.INFO)
    # Add file handler for persistent logs (not colorized)
    if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        file_handler = logging.FileHandler(Path(settings.log_dir) / settings.log_file)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)


setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan event handler that checks the configured image backend exists."""
    _ = app  # Silence unused argument warning
    settings = get_settings()
    logger = get_logger("tally-bridge")
    try:
        ExtractorRegistry.get(settings.image_extractor)
    except UnknownExtractorError as exc:
        logger.error(str(exc))
        raise RuntimeError(str(exc)) from exc
    logger.info(f"Starting Tally Document Bridge (image extractor: {settings.image_extractor})")
    yield
    logger.info("Shutting down.")


app = FastAPI(
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    title="Tally Document Bridge API",
    description="""
    The Tally Document Bridge API extracts transaction records from financial documents
    and posts them to Tally ERP as vouchers.

    **Endpoints:**
    - `POST /api/process-file`: Upload a PDF, Excel or image file and get normalized transaction records.
    - `POST /api/upload`: Same as process-file, with an upload confirmation.
    - `POST /api/tally-integration/test`: Test the connection to a Tally server.
    - `POST /api/tally-integration/send`: Send one batch of records to Tally.
    - `POST /api/tally-integration/export`: Send all records to Tally in sequential batches.
    - `GET /health`: Health check endpoint.
    - `GET /scalar`: Interactive Scalar OpenAPI documentation.
    """,
    version="1.0.0",
)
app.include_router(router)


@app.get("/scalar", include_in_schema=False)
async def scalar_docs() -> HTMLResponse:
    """Return Scalar API reference."""
    return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=settings.server_host, port=settings.server_port, reload=True)
