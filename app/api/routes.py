"""FastAPI endpoints for the Tally Document Bridge.

This module defines the routes for uploading and extracting financial documents, testing a Tally connection, and
sending extracted records to Tally either one batch at a time or as a full batched export. Error bodies carry an
``error`` field with a user-facing message.
"""

from typing import Any

from fastapi import APIRouter, Depends, UploadFile
from fastapi.responses import JSONResponse

from app.api.dependencies import get_export_runner, get_file_processor
from app.core.errors import NoDataExtractedError, TallyConfigError, TallyExportError, UploadValidationError
from app.core.models import (
    ConnectionTestResult,
    ExportReport,
    ExportRequest,
    ExtractionResult,
    SendRequest,
    SendResult,
    TallyConfig,
)
from app.core.settings import Settings, get_settings
from app.core.utils import get_logger, utcnow_iso
from app.extractors import FileProcessor
from app.services.tally_client import TallyClient
from app.workers.export_runner import ExportRunner, send_batch

router = APIRouter()
logger = get_logger("tally-bridge.api")

HTTP_400_BAD_REQUEST = 400
HTTP_500_INTERNAL_SERVER_ERROR = 500
HTTP_502_BAD_GATEWAY = 502

PROCESSING_HINT = "Please ensure the file is not corrupted and contains valid financial data"


def error_response(status_code: int, error: str, **extra: Any) -> JSONResponse:
    """JSON error body in the shape the browser client expects."""
    return JSONResponse(status_code=status_code, content={"success": False, "error": error, **extra})


def _extract_upload(file: UploadFile, processor: FileProcessor, settings: Settings) -> ExtractionResult:
    logger.info(f"Received upload request: filename={file.filename}, type={file.content_type}")
    data = file.file.read()
    return processor.process(data, file.filename or "", file.content_type, settings.max_upload_bytes)


@router.post(
    "/api/process-file",
    response_model=ExtractionResult,
    summary="Extract transaction records from an uploaded document",
    description=(
        "Upload a PDF, Excel workbook or receipt image. The file is validated and routed to the matching "
        "extractor, and the normalized records are returned for review.\n\n"
        "**Request:**\n"
        "- Content-Type: multipart/form-data\n"
        "- Form field: `file` (PDF, XLS, XLSX, JPG, JPEG or PNG, at most 10MB)\n\n"
        "**Response:**\n"
        "- 200 OK: extracted records and file metadata.\n"
        "- 400 Bad Request: unsupported type, oversized file, or nothing extracted.\n"
        "- 500 Internal Server Error: the file could not be processed."
    ),
    responses={
        400: {
            "description": "File rejected or no data extracted.",
            "content": {"application/json": {"example": {"success": False, "error": "Unsupported file type"}}},
        },
        500: {"description": "Internal server error."},
    },
)
def process_file(
    file: UploadFile | None = None,
    processor: FileProcessor = Depends(get_file_processor),
    settings: Settings = Depends(get_settings),
) -> ExtractionResult | JSONResponse:
    """Validate and extract an uploaded document."""
    if file is None:
        return error_response(HTTP_400_BAD_REQUEST, "No file provided")
    try:
        return _extract_upload(file, processor, settings)
    except (UploadValidationError, NoDataExtractedError) as exc:
        return error_response(HTTP_400_BAD_REQUEST, str(exc))
    except Exception as exc:
        logger.exception(f"Error processing {file.filename}")
        return error_response(
            HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Failed to process file", details=PROCESSING_HINT
        )


@router.get("/api/process-file", summary="Describe the file processing service")
def process_file_info() -> dict:
    """Supported formats, features and limits."""
    return {
        "message": "File Processing Service",
        "supportedFormats": {
            "PDF": "Invoices, receipts, financial statements",
            "Excel": "Financial data, transaction lists, reports",
            "Images": "Receipt photos, scanned documents (JPG, PNG)",
        },
        "features": [
            "Automatic data extraction",
            "Multiple file format support",
            "Financial data categorization",
            "Vendor/client identification",
            "Amount and date parsing",
        ],
        "limits": {
            "maxFileSize": "10MB",
            "supportedTypes": ["PDF", "XLSX", "XLS", "JPG", "JPEG", "PNG"],
        },
    }


@router.post(
    "/api/upload",
    summary="Upload and process a document",
    description=(
        "Same extraction as `/api/process-file`, with an upload confirmation message.\n\n"
        "**Response:**\n"
        "- 200 OK: extracted records, file metadata and `message`.\n"
        "- 400 Bad Request: no file in the form.\n"
        "- 500 Internal Server Error: the upload could not be processed; `details` carries the reason."
    ),
    responses={
        400: {
            "description": "No file uploaded.",
            "content": {"application/json": {"example": {"success": False, "error": "No file uploaded"}}},
        },
        500: {
            "description": "Upload failed.",
            "content": {
                "application/json": {
                    "example": {"success": False, "error": "Upload failed", "details": "Unsupported file type"}
                }
            },
        },
    },
)
def upload_file(
    file: UploadFile | None = None,
    processor: FileProcessor = Depends(get_file_processor),
    settings: Settings = Depends(get_settings),
) -> Any:
    """Extract the upload; every processing failure is reported as "Upload failed"."""
    if file is None:
        return error_response(HTTP_400_BAD_REQUEST, "No file uploaded")
    try:
        result = _extract_upload(file, processor, settings)
    except (UploadValidationError, NoDataExtractedError) as exc:
        logger.warning(f"Upload of {file.filename} rejected: {exc}")
        return error_response(HTTP_500_INTERNAL_SERVER_ERROR, "Upload failed", details=str(exc))
    except Exception as exc:
        logger.exception(f"Upload of {file.filename} failed")
        return error_response(HTTP_500_INTERNAL_SERVER_ERROR, "Upload failed", details=str(exc))
    return {"message": "File uploaded and processed successfully", **result.model_dump(by_alias=True)}


@router.get("/api/upload", summary="Describe the upload endpoint")
def upload_info() -> dict:
    """Supported types and size limit."""
    return {
        "message": "File upload endpoint",
        "supportedTypes": ["PDF", "Excel", "Images (JPG, PNG)"],
        "maxSize": "10MB",
    }


@router.get("/api/tally-integration", summary="Describe the Tally integration")
def tally_integration_info() -> dict:
    """Endpoints, features and requirements of the Tally integration."""
    return {
        "message": "Tally Integration API",
        "version": "1.0.0",
        "endpoints": {
            "test": "/api/tally-integration/test - Test connection to Tally server",
            "send": "/api/tally-integration/send - Send financial data to Tally",
            "export": "/api/tally-integration/export - Send all records in sequential batches",
        },
        "features": [
            "Tally ERP integration",
            "XML data format support",
            "Batch processing",
            "Connection testing",
            "Voucher creation",
            "Ledger management",
        ],
        "requirements": {
            "tallyVersion": "Tally.ERP 9 or higher",
            "apiAccess": "HTTP API enabled on Tally server",
            "network": "Network access to Tally server",
        },
    }


@router.post("/api/tally-integration", summary="Not available; use /test, /send or /export")
def tally_integration_direct() -> JSONResponse:
    """Reject direct calls."""
    return error_response(
        HTTP_400_BAD_REQUEST,
        "Direct integration endpoint not available",
        message="Please use specific endpoints: /test or /send",
    )


@router.post(
    "/api/tally-integration/test",
    summary="Test the connection to a Tally server",
    description=(
        "Validate the connection parameters and ask Tally for its list of companies.\n\n"
        "**Response:**\n"
        "- 200 OK: connected; echoes the company name and server info.\n"
        "- 400 Bad Request: missing fields, invalid port, or a categorized connection failure."
    ),
    responses={
        400: {
            "description": "Invalid configuration or connection failure.",
            "content": {
                "application/json": {
                    "example": {
                        "success": False,
                        "error": "Connection timeout. Please check if Tally server is running and accessible.",
                    }
                }
            },
        },
    },
)
def tally_connection_test(config: TallyConfig, settings: Settings = Depends(get_settings)) -> Any:
    """Test connectivity to Tally and the configured company."""
    try:
        config.validate_required()
    except TallyConfigError as exc:
        return error_response(HTTP_400_BAD_REQUEST, str(exc))
    result: ConnectionTestResult = TallyClient(config, timeout=settings.tally_test_timeout).test_connection()
    if not result.success:
        return error_response(HTTP_400_BAD_REQUEST, result.error or "Connection test failed")
    return {
        "success": True,
        "message": "Successfully connected to Tally server",
        "companyName": result.company_name,
        "serverInfo": result.server_info,
        "timestamp": utcnow_iso(),
    }


@router.get("/api/tally-integration/test", summary="Connection test instructions")
def tally_connection_test_info() -> dict:
    """Requirements and setup steps for the connection test."""
    return {
        "message": "Tally Connection Test Service",
        "description": "Test connectivity to Tally ERP server",
        "requirements": {
            "tally": "Tally.ERP 9 or higher",
            "httpApi": "HTTP API must be enabled in Tally",
            "network": "Network access to Tally server",
            "port": "Default port is 9000",
        },
        "instructions": [
            "1. Start Tally ERP software",
            "2. Enable HTTP API in Tally (Gateway of Tally > F11 > Advanced Configuration > HTTP API)",
            "3. Note the port number (usually 9000)",
            "4. Ensure company is loaded and accessible",
            "5. Test connection using this endpoint",
        ],
    }


def _validated_config(config: TallyConfig | None, has_data: bool) -> TallyConfig | JSONResponse:
    if config is None or not has_data:
        return error_response(HTTP_400_BAD_REQUEST, "Invalid request: Missing configuration or data")
    try:
        config.validate_required("Invalid Tally configuration: Server URL, port, and company name are required")
    except TallyConfigError as exc:
        return error_response(HTTP_400_BAD_REQUEST, str(exc))
    return config


@router.post(
    "/api/tally-integration/send",
    response_model=SendResult,
    summary="Send one batch of records to Tally",
    description=(
        "Create the party ledgers referenced by the batch, then the vouchers.\n\n"
        "**Response:**\n"
        "- 200 OK: batch accepted; `processedIds` lists one id per record.\n"
        "- 400 Bad Request: missing configuration or data.\n"
        "- 500 Internal Server Error: Tally rejected the vouchers or could not be reached."
    ),
)
def tally_send(request: SendRequest, settings: Settings = Depends(get_settings)) -> Any:
    """Push a single batch to Tally."""
    config = _validated_config(request.config, bool(request.data))
    if isinstance(config, JSONResponse):
        return config
    client = TallyClient(config, timeout=settings.tally_send_timeout)
    try:
        return send_batch(client, request.data, request.batch_number, request.total_batches)
    except TallyExportError as exc:
        logger.error(f"Batch {request.batch_number}/{request.total_batches} failed: {exc}")
        return error_response(HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


@router.get("/api/tally-integration/send", summary="Describe the send service")
def tally_send_info() -> dict:
    """Voucher types and requirements of the send service."""
    return {
        "message": "Tally Data Integration Service",
        "description": "Send financial data to Tally ERP as vouchers",
        "features": [
            "Automatic voucher creation",
            "Ledger management",
            "Batch processing",
            "Error handling",
            "Receipt and Payment vouchers",
            "Party ledger creation",
        ],
        "voucherTypes": {
            "Income": "Receipt Voucher",
            "Expenses": "Payment Voucher",
            "Other Categories": "Payment Voucher",
        },
        "requirements": {
            "tally": "Tally.ERP 9 or higher with HTTP API enabled",
            "company": "Company must be loaded and accessible",
            "ledgers": "Cash ledger must exist (created automatically if missing)",
        },
    }


@router.post(
    "/api/tally-integration/export",
    response_model=ExportReport,
    summary="Export all records to Tally in sequential batches",
    description=(
        "Split the records into batches and send them one after another. The first failed batch stops the "
        "export; batches already sent are not rolled back.\n\n"
        "**Response:**\n"
        "- 200 OK: every batch was accepted.\n"
        "- 400 Bad Request: missing configuration or data.\n"
        "- 502 Bad Gateway: a batch failed; the report says how many records reached Tally."
    ),
)
def tally_export(request: ExportRequest, runner: ExportRunner = Depends(get_export_runner)) -> Any:
    """Run a full batched export."""
    config = _validated_config(request.config, bool(request.data))
    if isinstance(config, JSONResponse):
        return config

    def log_progress(sent: int, total: int) -> None:
        logger.info(f"Export progress: {sent}/{total} records sent")

    report = runner.run(request.data, config, progress=log_progress)
    if not report.success:
        return JSONResponse(status_code=HTTP_502_BAD_GATEWAY, content=report.model_dump(by_alias=True))
    return report


@router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    response_description="Status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
