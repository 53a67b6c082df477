"""FastAPI dependencies for DI (settings, extractors, export runner).

This module provides dependency injection helpers so the endpoints can be tested with a different image backend or a
runner that does not sleep between batches.
"""

from fastapi import Depends

from app.core.settings import Settings, get_settings
from app.extractors import ExtractorRegistry, FileProcessor, ImageExtractor
from app.workers.export_runner import ExportRunner


def get_image_extractor(settings: Settings = Depends(get_settings)) -> ImageExtractor:
    """Provide the image extractor backend named in the settings."""
    return ExtractorRegistry.create(settings.image_extractor, settings)


def get_file_processor(image_extractor: ImageExtractor = Depends(get_image_extractor)) -> FileProcessor:
    """Provide a FileProcessor wired with the configured image backend."""
    return FileProcessor(image_extractor)


def get_export_runner(settings: Settings = Depends(get_settings)) -> ExportRunner:
    """Provide an ExportRunner using the configured batch size and delay."""
    return ExportRunner.from_settings(settings)
