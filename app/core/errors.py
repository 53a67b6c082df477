"""Exception hierarchy shared by the extraction and export pipelines."""


class BridgeError(Exception):
    """Base class for every error raised by the bridge."""


class UploadValidationError(BridgeError):
    """The uploaded file was rejected before any extractor ran."""


class UnsupportedFileError(UploadValidationError):
    """File type or extension is not one of the supported formats."""


class FileTooLargeError(UploadValidationError):
    """File exceeds the configured upload limit."""


class NoDataExtractedError(BridgeError):
    """Extraction finished without producing a single record."""


class TallyConfigError(BridgeError):
    """Tally connection parameters are missing or invalid."""


class TallyExportError(BridgeError):
    """A voucher batch could not be delivered to Tally."""

    def __init__(self, message: str, batch_number: int | None = None) -> None:
        """Store the failing batch number alongside the message."""
        super().__init__(message)
        self.batch_number = batch_number


class UnknownExtractorError(BridgeError, KeyError):
    """No image extractor backend is registered under the requested name."""

    def __init__(self, name: str, available: list[str]) -> None:
        """Keep the requested name and the registered alternatives."""
        super().__init__(f"Unknown image extractor '{name}', available: {', '.join(available) or 'none'}")
        self.name = name
        self.available = available

    def __str__(self) -> str:
        """Plain message, without the quoting KeyError adds."""
        return str(self.args[0])
