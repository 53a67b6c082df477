"""Upload validation and dispatch of files to the matching extractor.

Files are validated by MIME type, extension and size before any extractor runs. The PDF path applies the
single-record placeholder policy when the text layer yields nothing; every other path reports an empty result as
``NoDataExtractedError``.
"""

from pathlib import Path

from app.core.errors import FileTooLargeError, NoDataExtractedError, UnsupportedFileError
from app.core.models import Category, ExtractionResult, TransactionRecord
from app.core.settings import MEGABYTE
from app.core.utils import get_logger, today_iso
from app.extractors.base import BaseExtractor, ImageExtractor, InvoiceNumberFactory
from app.extractors.spreadsheet import SpreadsheetExtractor
from app.extractors.text import PdfExtractor

logger = get_logger("tally-bridge.extractors")

ALLOWED_CONTENT_TYPES = frozenset(
    {
        "application/pdf",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "image/jpeg",
        "image/jpg",
        "image/png",
    }
)
PDF_EXTENSIONS = frozenset({"pdf"})
SPREADSHEET_EXTENSIONS = frozenset({"xls", "xlsx"})
IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png"})
SUPPORTED_EXTENSIONS = PDF_EXTENSIONS | SPREADSHEET_EXTENSIONS | IMAGE_EXTENSIONS


def file_extension(filename: str) -> str:
    """Lower-case extension without the dot."""
    return Path(filename or "").suffix.lower().lstrip(".")


def validate_upload(filename: str, content_type: str | None, size: int, max_bytes: int) -> None:
    """Reject unsupported or oversized files."""
    if content_type not in ALLOWED_CONTENT_TYPES or file_extension(filename) not in SUPPORTED_EXTENSIONS:
        logger.warning(f"Rejected file (unsupported type): {filename} ({content_type})")
        msg = "Unsupported file type"
        raise UnsupportedFileError(msg)
    if size > max_bytes:
        logger.warning(f"Rejected file (too large): {filename} ({size} bytes)")
        msg = f"File too large. Maximum size is {max_bytes // MEGABYTE}MB."
        raise FileTooLargeError(msg)


def placeholder_record(filename: str) -> TransactionRecord:
    """Single record standing in for a document nothing could be extracted from."""
    return TransactionRecord(
        date=today_iso(),
        description=f"Document processed: {filename}",
        amount=0.0,
        category=Category.MISCELLANEOUS.value,
        invoice_no=InvoiceNumberFactory("PDF").next(),
    )


class FileProcessor:
    """Routes uploaded files to the extractor for their format."""

    def __init__(
        self,
        image_extractor: ImageExtractor,
        spreadsheet_extractor: BaseExtractor | None = None,
        pdf_extractor: BaseExtractor | None = None,
    ) -> None:
        """Initialize the processor with its extractors."""
        self.image_extractor = image_extractor
        self.spreadsheet_extractor = spreadsheet_extractor or SpreadsheetExtractor()
        self.pdf_extractor = pdf_extractor or PdfExtractor()

    def extract(self, data: bytes, filename: str) -> list[TransactionRecord]:
        """Dispatch by extension and return the extracted records."""
        extension = file_extension(filename)
        if extension in PDF_EXTENSIONS:
            records = self.pdf_extractor.extract(data, filename)
            if not records:
                logger.info(f"No invoice records in {filename}; using placeholder record")
                records = [placeholder_record(filename)]
            return records
        if extension in SPREADSHEET_EXTENSIONS:
            return self.spreadsheet_extractor.extract(data, filename)
        if extension in IMAGE_EXTENSIONS:
            try:
                return self.image_extractor.extract(data, filename)
            except Exception:
                logger.exception(f"Image extraction failed for {filename}")
                return []
        msg = f"Unsupported file type: {extension}"
        raise UnsupportedFileError(msg)

    def process(self, data: bytes, filename: str, content_type: str | None, max_bytes: int) -> ExtractionResult:
        """Validate, extract, and wrap the records with upload metadata."""
        validate_upload(filename, content_type, len(data), max_bytes)
        records = self.extract(data, filename)
        if not records:
            msg = "No data could be extracted from the file"
            raise NoDataExtractedError(msg)
        logger.info(f"Extracted {len(records)} records from {filename}")
        return ExtractionResult(
            filename=filename,
            file_size=len(data),
            file_type=content_type,
            data=records,
            record_count=len(records),
        )
