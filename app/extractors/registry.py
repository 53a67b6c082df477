"""Named image extraction backends.

Backends register themselves when their module is imported; the API builds the one named by
``Settings.image_extractor`` for each request, so a real OCR engine can replace the templates by name alone.
"""

from typing import ClassVar

from app.core.errors import UnknownExtractorError
from app.core.settings import Settings
from app.extractors.base import ImageExtractor


class ExtractorRegistry:
    """Maps backend names to image extractor classes."""

    _registry: ClassVar[dict[str, type[ImageExtractor]]] = {}

    @classmethod
    def register(cls, name: str, extractor_cls: type[ImageExtractor]) -> None:
        """Register a backend; a later registration under the same name replaces the earlier one."""
        cls._registry[name] = extractor_cls

    @classmethod
    def get(cls, name: str) -> type[ImageExtractor]:
        """Look up a backend class, raising UnknownExtractorError with the registered names."""
        try:
            return cls._registry[name]
        except KeyError:
            raise UnknownExtractorError(name, cls.available()) from None

    @classmethod
    def create(cls, name: str, settings: Settings) -> ImageExtractor:
        """Build the named backend from the application settings."""
        return cls.get(name).from_settings(settings)

    @classmethod
    def available(cls) -> list[str]:
        """Registered backend names, sorted."""
        return sorted(cls._registry)
