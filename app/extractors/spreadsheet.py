"""Spreadsheet extraction: map rows with unknown column names onto TransactionRecords.

Each target field has an ordered list of accepted header aliases. The first alias holding a non-empty value wins;
otherwise a field-specific default applies, so every row yields exactly one record.
"""

import io
import math
import re
from datetime import date, datetime
from typing import Any

import pandas as pd

from app.core.models import TransactionRecord
from app.core.utils import get_logger, safe_cast, today_iso
from app.extractors.base import BaseExtractor, InvoiceNumberFactory
from app.extractors.heuristics import categorize_transaction, extract_vendor

logger = get_logger("tally-bridge.extractors.spreadsheet")

INVOICE_PREFIX = "EXL"

DATE_COLUMNS = ("Date", "date", "Transaction Date", "Txn Date", "DATE")
DESCRIPTION_COLUMNS = (
    "Description",
    "description",
    "Particulars",
    "particulars",
    "Details",
    "details",
    "Narration",
    "narration",
    "DESCRIPTION",
)
AMOUNT_COLUMNS = (
    "Amount",
    "amount",
    "Value",
    "value",
    "Total",
    "total",
    "Debit",
    "debit",
    "Credit",
    "credit",
    "AMOUNT",
)
CATEGORY_COLUMNS = ("Category", "category", "Type", "type", "Account", "account", "Head", "head", "CATEGORY")
VENDOR_COLUMNS = (
    "Vendor",
    "vendor",
    "Party",
    "party",
    "Client",
    "client",
    "Supplier",
    "supplier",
    "Customer",
    "customer",
    "VENDOR",
)
INVOICE_COLUMNS = (
    "Invoice No",
    "InvoiceNo",
    "invoiceNo",
    "Reference",
    "reference",
    "Ref No",
    "RefNo",
    "Bill No",
    "billNo",
    "INVOICE_NO",
)

_NON_NUMERIC = re.compile(r"[^\d.-]")
_LEADING_NUMBER = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def column_value(row: dict, names: tuple[str, ...]) -> Any:
    """Return the first non-empty value among the given column aliases, or None."""
    for name in names:
        value = row.get(name)
        if not _is_blank(value):
            return value
    return None


def _as_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_amount(value: Any) -> float:
    """Parse a signed amount, keeping only digits, dots and minus signs. Unparseable input gives 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
        return number if math.isfinite(number) else 0.0
    match = _LEADING_NUMBER.match(_NON_NUMERIC.sub("", str(value)))
    if not match:
        return 0.0
    return safe_cast(match.group(0), float, 0.0)


def normalize_amount(value: Any) -> float:
    """Non-negative magnitude of an amount cell."""
    return abs(parse_amount(value))


def normalize_date(value: Any, default: str | None = None) -> str:
    """Render a cell as YYYY-MM-DD, falling back to the default (today) when it is not a date."""
    fallback = default or today_iso()
    if _is_blank(value):
        return fallback
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    try:
        parsed = pd.to_datetime(str(value))
    except (ValueError, TypeError, OverflowError):
        return fallback
    if pd.isna(parsed):
        return fallback
    return parsed.date().isoformat()


def extract_rows(rows: list[dict], invoice_numbers: InvoiceNumberFactory | None = None) -> list[TransactionRecord]:
    """Produce one TransactionRecord per row, in input order."""
    invoice_numbers = invoice_numbers or InvoiceNumberFactory(INVOICE_PREFIX)
    today = today_iso()
    records = []
    for index, row in enumerate(rows):
        description_value = column_value(row, DESCRIPTION_COLUMNS)
        description = _as_text(description_value) if description_value is not None else f"Transaction {index + 1}"
        amount = parse_amount(column_value(row, AMOUNT_COLUMNS))

        category_value = column_value(row, CATEGORY_COLUMNS)
        if category_value is not None:
            category = _as_text(category_value)
        else:
            category = categorize_transaction(description, amount).value

        vendor_value = column_value(row, VENDOR_COLUMNS)
        vendor = _as_text(vendor_value) if vendor_value is not None else extract_vendor(description)

        invoice_value = column_value(row, INVOICE_COLUMNS)
        invoice_no = _as_text(invoice_value) if invoice_value is not None else invoice_numbers.for_index(index)

        records.append(
            TransactionRecord(
                date=normalize_date(column_value(row, DATE_COLUMNS), today),
                description=description,
                amount=abs(amount),
                category=category,
                vendor=vendor,
                invoice_no=invoice_no,
            )
        )
    return records


class SpreadsheetExtractor(BaseExtractor):
    """Reads the first worksheet of an .xls/.xlsx workbook."""

    def extract(self, data: bytes, filename: str) -> list[TransactionRecord]:
        """Extract one record per worksheet row."""
        try:
            data_frame = pd.read_excel(io.BytesIO(data), sheet_name=0)
        except Exception:
            logger.exception(f"Failed to read workbook {filename}")
            return []
        rows = data_frame.to_dict(orient="records")
        logger.info(f"Loaded {len(rows)} rows from {filename}")
        return extract_rows(rows)
