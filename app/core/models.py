"""Pydantic models for the Tally Document Bridge.

This module defines the normalized ``TransactionRecord`` produced by every extractor, the ``TallyConfig`` connection
value object, and the request/response shapes exchanged with the HTTP API. Field aliases keep the camel-case names
the browser client sends and expects (``invoiceNo``, ``serverUrl``, ``processedIds``...).
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.errors import TallyConfigError
from app.core.utils import utcnow_iso

MIN_PORT = 1
MAX_PORT = 65535


class Category(StrEnum):
    """Fixed set of accounting categories a record can be assigned to."""

    INCOME = "Income"
    EXPENSES = "Expenses"
    MARKETING = "Marketing"
    TRAVEL = "Travel & Entertainment"
    SOFTWARE = "Software"
    OFFICE_SUPPLIES = "Office Supplies"
    PROFESSIONAL_SERVICES = "Professional Services"
    UTILITIES = "Utilities"
    RENT = "Rent"
    INSURANCE = "Insurance"
    MISCELLANEOUS = "Miscellaneous"


class TransactionRecord(BaseModel):
    """Normalized transaction produced by extraction and consumed by export."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    description: str
    amount: float = 0.0
    category: str = Category.MISCELLANEOUS.value
    vendor: str | None = None
    client: str | None = None
    invoice_no: str = Field(alias="invoiceNo")

    @field_validator("amount")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        return abs(value)

    @property
    def counterparty(self) -> str | None:
        """Vendor or client, whichever is set."""
        return self.vendor or self.client

    @property
    def is_income(self) -> bool:
        """Whether the record is booked as a receipt."""
        return self.category == Category.INCOME.value


class TallyConfig(BaseModel):
    """Connection parameters for a Tally server, supplied by the user."""

    model_config = ConfigDict(populate_by_name=True)

    server_url: str = Field(default="", alias="serverUrl")
    port: str | int = ""
    company_name: str = Field(default="", alias="companyName")
    username: str = ""
    password: str = ""

    def validate_required(self, message: str = "Server URL, Port, and Company Name are required") -> None:
        """Raise TallyConfigError unless the required fields are present and the port is in range."""
        if not self.server_url or not str(self.port).strip() or not self.company_name:
            raise TallyConfigError(message)
        try:
            port = int(str(self.port).strip())
        except ValueError as exc:
            msg = "Please enter a valid port number (1-65535)"
            raise TallyConfigError(msg) from exc
        if not MIN_PORT <= port <= MAX_PORT:
            msg = "Please enter a valid port number (1-65535)"
            raise TallyConfigError(msg)

    @property
    def base_url(self) -> str:
        """HTTP endpoint of the Tally server."""
        return f"http://{self.server_url}:{str(self.port).strip()}"


class ExtractionResult(BaseModel):
    """Response returned after a file has been processed."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    filename: str
    file_size: int = Field(alias="fileSize")
    file_type: str = Field(alias="fileType")
    data: list[TransactionRecord]
    processed_at: str = Field(default_factory=utcnow_iso, alias="processedAt")
    record_count: int = Field(alias="recordCount")


class ConnectionTestResult(BaseModel):
    """Outcome of a Tally connection test."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    company_name: str | None = Field(default=None, alias="companyName")
    server_info: dict[str, Any] | None = Field(default=None, alias="serverInfo")
    error: str | None = None


class SendRequest(BaseModel):
    """One batch of records to be pushed to Tally."""

    model_config = ConfigDict(populate_by_name=True)

    config: TallyConfig | None = None
    data: list[TransactionRecord] = Field(default_factory=list)
    batch_number: int = Field(default=1, alias="batchNumber")
    total_batches: int = Field(default=1, alias="totalBatches")


class SendResult(BaseModel):
    """Outcome of a successfully delivered batch."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    processed_ids: list[str] = Field(alias="processedIds")
    batch_info: dict[str, int] = Field(alias="batchInfo")
    tally_response: str | None = Field(default=None, alias="tallyResponse")


class ExportRequest(BaseModel):
    """Full record list to be exported in batches."""

    model_config = ConfigDict(populate_by_name=True)

    config: TallyConfig | None = None
    data: list[TransactionRecord] = Field(default_factory=list)


class ExportReport(BaseModel):
    """Summary of a batched export run."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    total_records: int = Field(alias="totalRecords")
    sent_records: int = Field(default=0, alias="sentRecords")
    batches_sent: int = Field(default=0, alias="batchesSent")
    total_batches: int = Field(alias="totalBatches")
    processed_ids: list[str] = Field(default_factory=list, alias="processedIds")
    error: str | None = None
