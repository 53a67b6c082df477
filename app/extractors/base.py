"""Base extractor abstractions.

Every extractor turns raw file bytes into the same normalized ``TransactionRecord`` list, so the router and the API
never need to know which format a record came from.
"""

import itertools
import uuid
from abc import ABC, abstractmethod

from app.core.models import TransactionRecord
from app.core.settings import Settings


class BaseExtractor(ABC):
    """Abstract base class for all file extractors."""

    @abstractmethod
    def extract(self, data: bytes, filename: str) -> list[TransactionRecord]:
        """Extract normalized records from a file's bytes."""


class ImageExtractor(BaseExtractor):
    """Capability for turning a scanned document or photo into records.

    Concrete backends (a template stand-in today, a real OCR engine later) are registered in the
    ``ExtractorRegistry`` and picked by name from the settings.
    """

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageExtractor":
        """Build the extractor from application settings."""
        _ = settings
        return cls()


class InvoiceNumberFactory:
    """Synthesizes invoice numbers that are unique within one extraction run.

    Numbers look like ``EXL-1a2b3c4d-0``: the source prefix, a random token drawn once per run, and a counter.
    """

    def __init__(self, prefix: str, token: str | None = None) -> None:
        """Initialize the factory for a given source prefix."""
        self.prefix = prefix
        self.token = token or uuid.uuid4().hex[:8]
        self._counter = itertools.count()

    def for_index(self, index: int) -> str:
        """Invoice number keyed by an explicit position, e.g. a spreadsheet row."""
        return f"{self.prefix}-{self.token}-{index}"

    def next(self) -> str:
        """Next invoice number in sequence."""
        return self.for_index(next(self._counter))
