"""Tests for upload validation and extractor dispatch."""

import pytest

from app.core.errors import FileTooLargeError, NoDataExtractedError, UnsupportedFileError
from app.core.models import TransactionRecord
from app.extractors.base import BaseExtractor, ImageExtractor
from app.extractors.router import FileProcessor, validate_upload

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
LIMIT = 10 * 1024 * 1024


class SpyExtractor(ImageExtractor):
    """Records calls and returns a fixed result."""

    def __init__(self, records: list[TransactionRecord] | None = None, error: Exception | None = None) -> None:
        """Initialize the spy."""
        self.records = records or []
        self.error = error
        self.calls: list[str] = []

    def extract(self, data: bytes, filename: str) -> list[TransactionRecord]:
        """Record the call."""
        self.calls.append(filename)
        if self.error:
            raise self.error
        return self.records


def _processor(**spies: BaseExtractor) -> tuple[FileProcessor, dict[str, SpyExtractor]]:
    extractors = {"image": SpyExtractor(), "spreadsheet": SpyExtractor(), "pdf": SpyExtractor(), **spies}
    processor = FileProcessor(
        extractors["image"], spreadsheet_extractor=extractors["spreadsheet"], pdf_extractor=extractors["pdf"]
    )
    return processor, extractors


def test_docx_rejected_before_any_extractor() -> None:
    """Unsupported extensions never reach an extractor."""
    processor, spies = _processor()
    with pytest.raises(UnsupportedFileError):
        processor.process(b"PK\x03\x04", "report.docx", DOCX_TYPE, LIMIT)
    if any(spy.calls for spy in spies.values()):
        msg = "An extractor ran for a rejected file"
        raise AssertionError(msg)


def test_extension_must_match_supported_formats() -> None:
    """A supported MIME type with an unsupported extension is rejected."""
    with pytest.raises(UnsupportedFileError):
        validate_upload("notes.txt", "application/pdf", 10, LIMIT)


def test_oversized_file_rejected() -> None:
    """Files above the limit are rejected with the limit in the message."""
    with pytest.raises(FileTooLargeError, match="Maximum size is 10MB"):
        validate_upload("big.pdf", "application/pdf", LIMIT + 1, LIMIT)


def test_dispatch_by_extension(record_factory) -> None:
    """Each family of extensions goes to its extractor."""
    record = record_factory()
    processor, spies = _processor(spreadsheet=SpyExtractor([record]), image=SpyExtractor([record]))
    processor.extract(b"", "book.XLS")
    processor.extract(b"", "photo.jpeg")
    if spies["spreadsheet"].calls != ["book.XLS"] or spies["image"].calls != ["photo.jpeg"]:
        msg = f"Unexpected dispatch: {spies}"
        raise AssertionError(msg)


def test_empty_pdf_gets_placeholder_record() -> None:
    """PDFs without extractable invoices produce a single zero-amount placeholder."""
    processor, _ = _processor()
    result = processor.process(b"%PDF-1.4", "statement.pdf", "application/pdf", LIMIT)
    record = result.data[0]
    if result.record_count != 1 or record.amount != 0 or not record.invoice_no.startswith("PDF-"):
        msg = f"Unexpected placeholder: {result}"
        raise AssertionError(msg)
    if "statement.pdf" not in record.description:
        msg = f"Placeholder description should name the file, got {record.description}"
        raise AssertionError(msg)


def test_empty_spreadsheet_raises_no_data() -> None:
    """Zero records from a non-PDF extractor is reported as no data."""
    processor, _ = _processor()
    with pytest.raises(NoDataExtractedError):
        processor.process(b"", "empty.xlsx", XLSX_TYPE, LIMIT)


def test_image_backend_failure_is_contained() -> None:
    """An exception inside the image backend becomes an empty result."""
    processor, _ = _processor(image=SpyExtractor(error=RuntimeError("ocr engine down")))
    records = processor.extract(b"", "receipt.png")
    if records != []:
        msg = f"Expected no records, got {records}"
        raise AssertionError(msg)


def test_result_metadata(record_factory) -> None:
    """The result carries file metadata and the record count."""
    processor, _ = _processor(spreadsheet=SpyExtractor([record_factory(0), record_factory(1)]))
    result = processor.process(b"abc", "book.xlsx", XLSX_TYPE, LIMIT)
    payload = result.model_dump(by_alias=True)
    if (payload["filename"], payload["fileSize"], payload["fileType"], payload["recordCount"]) != (
        "book.xlsx",
        3,
        XLSX_TYPE,
        2,
    ):
        msg = f"Unexpected metadata: {payload}"
        raise AssertionError(msg)
