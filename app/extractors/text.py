"""Regex extraction over free text, used for PDF text layers.

Lines are folded into a small accumulator holding the invoice number, date and amount seen so far. As soon as both an
invoice number and an amount are known a record is emitted and the accumulator starts empty again. Fields that were
only present on the emitting line do not carry over to the next record.
"""

import io
import re
from dataclasses import dataclass, replace
from datetime import date

import pdfplumber

from app.core.models import Category, TransactionRecord
from app.core.utils import get_logger, today_iso
from app.extractors.base import BaseExtractor
from app.extractors.heuristics import extract_vendor

logger = get_logger("tally-bridge.extractors.text")

INVOICE_PATTERN = re.compile(r"invoice\s*(?:no\.?|number)?\s*:?\s*([A-Z0-9-]+)", re.IGNORECASE)
DATE_PATTERN = re.compile(r"(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})")
AMOUNT_PATTERN = re.compile(r"(?:₹|rs\.?|inr)\s*([0-9,]+(?:\.\d{2})?)", re.IGNORECASE)

TWO_DIGIT_YEAR = 2
FOUR_DIGIT_YEAR = 4


@dataclass(frozen=True)
class _Accumulator:
    invoice_no: str | None = None
    date: str | None = None
    amount: float | None = None

    @property
    def complete(self) -> bool:
        return bool(self.invoice_no) and bool(self.amount)


def parse_text_date(raw: str) -> str | None:
    """Parse a DD/MM/YYYY (or DD-MM-YY) token into YYYY-MM-DD, None when it is not a real date."""
    day, month, year_text = re.split(r"[/-]", raw)
    year = int(year_text)
    if len(year_text) == TWO_DIGIT_YEAR:
        year += 2000
    elif len(year_text) != FOUR_DIGIT_YEAR:
        return None
    try:
        return date(year, int(month), int(day)).isoformat()
    except ValueError:
        return None


def _scan_line(state: _Accumulator, line: str) -> _Accumulator:
    invoice_match = INVOICE_PATTERN.search(line)
    if invoice_match:
        state = replace(state, invoice_no=invoice_match.group(1))

    date_match = DATE_PATTERN.search(line)
    if date_match:
        parsed = parse_text_date(date_match.group(1))
        if parsed:
            state = replace(state, date=parsed)

    amount_match = AMOUNT_PATTERN.search(line)
    if amount_match:
        try:
            state = replace(state, amount=float(amount_match.group(1).replace(",", "")))
        except ValueError:
            pass
    return state


def extract_from_text(text: str, today: str | None = None) -> list[TransactionRecord]:
    """Scan text line by line and emit a record for every invoice number + amount pair found."""
    today = today or today_iso()
    records: list[TransactionRecord] = []
    state = _Accumulator()
    for line in text.split("\n"):
        if not line.strip():
            continue
        state = _scan_line(state, line)
        if state.complete:
            records.append(
                TransactionRecord(
                    date=state.date or today,
                    description=f"Invoice {state.invoice_no}",
                    amount=state.amount,
                    category=Category.EXPENSES.value,
                    vendor=extract_vendor(line),
                    invoice_no=state.invoice_no,
                )
            )
            state = _Accumulator()
    return records


def read_pdf_text(data: bytes) -> str:
    """Concatenate the text layer of every page."""
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        return "\n".join(page.extract_text() or "" for page in pdf.pages)


class PdfExtractor(BaseExtractor):
    """Best-effort regex extraction over a PDF's text layer."""

    def extract(self, data: bytes, filename: str) -> list[TransactionRecord]:
        """Extract invoice records, or an empty list when the PDF has no usable text."""
        try:
            text = read_pdf_text(data)
        except Exception:
            logger.exception(f"Failed to read PDF text from {filename}")
            return []
        records = extract_from_text(text)
        logger.info(f"Found {len(records)} invoice records in {filename}")
        return records
