"""Extractors package: turns uploaded files into normalized transaction records."""

from .base import BaseExtractor, ImageExtractor  # noqa: F401
from .image import SizeImageExtractor, TemplateImageExtractor  # noqa: F401
from .registry import ExtractorRegistry  # noqa: F401
from .router import FileProcessor  # noqa: F401
