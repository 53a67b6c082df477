"""Tests for the spreadsheet column mapper."""

import io
import math
from datetime import date, datetime

import pandas as pd
import pytest

from app.core.models import Category
from app.extractors.base import InvoiceNumberFactory
from app.extractors.spreadsheet import SpreadsheetExtractor, extract_rows, normalize_amount, normalize_date


def test_consulting_fee_row() -> None:
    """Particulars/Value aliases map onto description/amount."""
    records = extract_rows([{"Date": "2024-01-05", "Particulars": "Consulting Fee", "Value": "1,500.00"}])
    record = records[0]
    if (record.date, record.description, record.amount) != ("2024-01-05", "Consulting Fee", 1500):
        msg = f"Unexpected record: {record}"
        raise AssertionError(msg)
    if record.category not in set(Category):
        msg = f"Expected a heuristic category, got {record.category}"
        raise AssertionError(msg)
    if not record.invoice_no.startswith("EXL-"):
        msg = f"Expected a synthesized EXL- invoice number, got {record.invoice_no}"
        raise AssertionError(msg)


def test_missing_aliases_use_defaults() -> None:
    """A row without any known column still yields a complete record."""
    factory = InvoiceNumberFactory("EXL", token="run1")
    records = extract_rows([{"Unrelated": "x"}, {}], factory)
    first, second = records
    expected = {
        "date": date.today().isoformat(),
        "description": "Transaction 1",
        "amount": 0.0,
        "category": Category.MISCELLANEOUS.value,
        "vendor": None,
        "invoice_no": "EXL-run1-0",
    }
    actual = first.model_dump(include=set(expected))
    if actual != expected:
        msg = f"Expected defaults {expected}, got {actual}"
        raise AssertionError(msg)
    if second.description != "Transaction 2" or second.invoice_no != "EXL-run1-1":
        msg = f"Unexpected defaults for the second row: {second}"
        raise AssertionError(msg)


def test_first_non_empty_alias_wins() -> None:
    """Empty, None and NaN values fall through to the next alias."""
    row = {
        "Date": "",
        "Txn Date": "2024-03-01",
        "Description": None,
        "Narration": "Office chairs",
        "Amount": math.nan,
        "Debit": "₹2,450.50",
        "Vendor": "",
        "Supplier": "Chair World",
        "Invoice No": None,
        "Bill No": 1001.0,
    }
    record = extract_rows([row])[0]
    expected = ("2024-03-01", "Office chairs", 2450.5, "Office Supplies", "Chair World", "1001")
    actual = (record.date, record.description, record.amount, record.category, record.vendor, record.invoice_no)
    if actual != expected:
        msg = f"Expected {expected}, got {actual}"
        raise AssertionError(msg)


def test_explicit_category_and_vendor_heuristic() -> None:
    """A category column is kept verbatim; a missing vendor is guessed from the description."""
    record = extract_rows([{"Description": "Amazon Web Services", "Amount": 300, "Head": "Cloud"}])[0]
    if record.category != "Cloud" or record.vendor != "Amazon":
        msg = f"Unexpected category/vendor: {record.category}, {record.vendor}"
        raise AssertionError(msg)


def test_negative_amount_is_made_positive() -> None:
    """Debits come out as magnitudes; the signed value feeds the category fallback."""
    record = extract_rows([{"Description": "Misc item", "Debit": "-250"}])[0]
    if record.amount != 250 or record.category != Category.MISCELLANEOUS.value:
        msg = f"Unexpected amount/category: {record.amount}, {record.category}"
        raise AssertionError(msg)


def test_row_count_and_order_preserved() -> None:
    """One record per row, in input order, with distinct synthesized invoice numbers."""
    rows = [{"Description": f"Row {i}", "Amount": i} for i in range(7)]
    records = extract_rows(rows)
    if [r.description for r in records] != [f"Row {i}" for i in range(7)]:
        msg = "Record order does not match row order"
        raise AssertionError(msg)
    if len({r.invoice_no for r in records}) != len(rows):
        msg = "Synthesized invoice numbers are not unique within the run"
        raise AssertionError(msg)


AMOUNT_SAMPLES = ["1,500.00", "-42.5", "₹ 3,000", "abc", "", None, 12, -7.25, "1.2.3", math.nan, 1e20]


@pytest.mark.parametrize("value", AMOUNT_SAMPLES)
def test_normalize_amount_idempotent_and_non_negative(value: object) -> None:
    """normalize(normalize(x)) == normalize(x) and the result is never negative."""
    once = normalize_amount(value)
    twice = normalize_amount(once)
    if once < 0 or once != twice:
        msg = f"normalize_amount({value!r}) gave {once}, then {twice}"
        raise AssertionError(msg)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-01-05", "2024-01-05"),
        (datetime(2023, 12, 31, 18, 30), "2023-12-31"),
        (date(2022, 2, 28), "2022-02-28"),
        (pd.Timestamp("2021-07-04"), "2021-07-04"),
        ("not a date", "1999-01-01"),
        (None, "1999-01-01"),
    ],
)
def test_normalize_date(value: object, expected: str) -> None:
    """Dates render as ISO; anything else falls back to the default."""
    result = normalize_date(value, "1999-01-01")
    if result != expected:
        msg = f"Expected {expected} for {value!r}, got {result}"
        raise AssertionError(msg)


def test_extract_from_workbook_bytes() -> None:
    """The first worksheet of an xlsx workbook is read row by row."""
    frame = pd.DataFrame(
        [
            {"Date": "2024-02-01", "Description": "Payment received from Globex", "Amount": 5000, "Party": "Globex"},
            {"Date": "2024-02-02", "Description": "Internet bill", "Amount": "1,200", "Party": "Airtel"},
        ]
    )
    buffer = io.BytesIO()
    frame.to_excel(buffer, index=False)
    records = SpreadsheetExtractor().extract(buffer.getvalue(), "ledger.xlsx")
    summary = [(r.date, r.amount, r.category, r.vendor) for r in records]
    expected = [
        ("2024-02-01", 5000.0, "Income", "Globex"),
        ("2024-02-02", 1200.0, "Utilities", "Airtel"),
    ]
    if summary != expected:
        msg = f"Expected {expected}, got {summary}"
        raise AssertionError(msg)


def test_unreadable_workbook_returns_empty_list() -> None:
    """Corrupt workbooks are logged and produce no records."""
    records = SpreadsheetExtractor().extract(b"not a workbook", "broken.xlsx")
    if records != []:
        msg = f"Expected no records, got {records}"
        raise AssertionError(msg)
