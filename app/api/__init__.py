"""API package: provides FastAPI dependencies and route definitions for the application."""

from .dependencies import get_export_runner, get_file_processor, get_settings  # noqa: F401
from .routes import router  # noqa: F401
