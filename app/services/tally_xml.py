"""Tally XML generation for ledger masters and accounting vouchers.

Every record becomes one voucher with two ledger entries, a party entry and a cash entry, whose amounts always sum to
zero. Income records are booked as Receipt vouchers, everything else as Payment vouchers.
"""

import random
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from lxml import etree

from app.core.models import TransactionRecord

CASH_LEDGER = "Cash"
DEFAULT_PARTY_LEDGER = "Sundry Debtors"
ACCOUNTING_VIEW = "Accounting Voucher View"
GUID_TEMPLATE = "xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx"

# Tally marks "not applicable" enumerations with a leading &#4;, which lxml refuses to emit as text.
_NOT_APPLICABLE_MARK = "\ue004"
NOT_APPLICABLE = f"{_NOT_APPLICABLE_MARK} Not Applicable"

LEDGER_FLAGS: tuple[tuple[str, str], ...] = (
    ("PARENT", DEFAULT_PARTY_LEDGER),
    ("CATEGORY", "Primary"),
    ("ISBILLWISEON", "Yes"),
    ("ISCOSTCENTRESON", "No"),
    ("ISINTERESTON", "No"),
    ("ALLOWINMOBILE", "No"),
    ("ISCOSTTRACKINGON", "No"),
    ("ISBENEFICIARYCODEON", "No"),
    ("ISUPDATINGTARGETID", "No"),
    ("ASORIGINAL", "Yes"),
    ("ISCONDENSED", "No"),
    ("AFFECTSSTOCK", "No"),
    ("USEFORVAT", "No"),
    ("IGNOREPHYSICALDIFFERENCE", "No"),
    ("IGNORENEGATIVESTOCK", "No"),
    ("TREATSALESASMANUFACTURED", "No"),
    ("TREATPURCHASESASCONSUMED", "No"),
    ("TREATEXPENSESASCONSUMED", "No"),
    ("ALLOWUSEOFEXPIREDITEMS", "No"),
    ("IGNOREBATCHES", "No"),
    ("IGNOREGODOWNS", "No"),
    ("CALCONMRP", "No"),
    ("EXCLUDEJRNLFORDAY", "No"),
    ("USEFOREXCISE", "No"),
    ("ISTRADINGACCOUNT", "No"),
    ("USEFORSERVICETAX", "No"),
    ("USEFORINTEREST", "No"),
    ("USEFORGAINLOSS", "No"),
    ("USEFORGODOWNTRANSFER", "No"),
    ("USEFORCOMPOUND", "No"),
    ("ALTERID", "1"),
    ("SERVICECATEGORY", NOT_APPLICABLE),
    ("EXCISELEDGERCLASSIFICATION", NOT_APPLICABLE),
    ("EXCISEDUTYTYPE", NOT_APPLICABLE),
    ("EXCISENATUREOFPURCHASE", NOT_APPLICABLE),
    ("LEDGERFBTCATEGORY", NOT_APPLICABLE),
    ("VATAPPLICABLE", NOT_APPLICABLE),
)


@dataclass(frozen=True)
class LedgerEntry:
    """One line of a voucher posting against a ledger."""

    ledger: str
    amount: float
    deemed_positive: bool
    is_party: bool


def voucher_type(record: TransactionRecord) -> str:
    """Receipt for income, Payment for everything else."""
    return "Receipt" if record.is_income else "Payment"


def to_tally_date(iso_date: str) -> str:
    """Convert YYYY-MM-DD to Tally's YYYYMMDD."""
    return datetime.strptime(iso_date, "%Y-%m-%d").strftime("%Y%m%d")


def generate_guid(rng: random.Random | None = None) -> str:
    """Random identifier shaped like a version 4 UUID."""
    rng = rng or random.Random()
    chars = []
    for char in GUID_TEMPLATE:
        if char == "x":
            chars.append(f"{rng.randrange(16):x}")
        elif char == "y":
            chars.append(f"{rng.randrange(16) & 0x3 | 0x8:x}")
        else:
            chars.append(char)
    return "".join(chars)


def party_ledger(record: TransactionRecord) -> str:
    """Ledger the counterparty side of a voucher posts to."""
    return record.counterparty or DEFAULT_PARTY_LEDGER


def ledger_entries(record: TransactionRecord) -> tuple[LedgerEntry, LedgerEntry]:
    """Party and cash entries for a record; their amounts always cancel out."""
    sign = 1 if record.is_income else -1
    party = LedgerEntry(party_ledger(record), sign * record.amount, deemed_positive=record.is_income, is_party=True)
    cash = LedgerEntry(CASH_LEDGER, -party.amount, deemed_positive=not record.is_income, is_party=False)
    return party, cash


def unique_ledgers(records: Iterable[TransactionRecord]) -> list[str]:
    """Distinct vendor/client names in first-seen order."""
    seen: dict[str, None] = {}
    for record in records:
        name = record.counterparty
        if name:
            seen.setdefault(name, None)
    return list(seen)


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _format_amount(amount: float) -> str:
    # Never "-0.00"; adding 0.0 clears the sign of a negative zero.
    return f"{round(amount, 2) + 0.0:.2f}"


def _sub(parent: etree._Element, tag: str, text: str | None = None, **attrib: str) -> etree._Element:
    element = etree.SubElement(parent, tag, **attrib)
    if text is not None:
        element.text = text
    return element


def _envelope(tally_request: str, body_tag: str, report_name: str, company: str | None) -> etree._Element:
    envelope = etree.Element("ENVELOPE")
    header = _sub(envelope, "HEADER")
    _sub(header, "TALLYREQUEST", tally_request)
    body = _sub(envelope, "BODY")
    data = _sub(body, body_tag)
    request_desc = _sub(data, "REQUESTDESC")
    _sub(request_desc, "REPORTNAME", report_name)
    if company:
        static = _sub(request_desc, "STATICVARIABLES")
        _sub(static, "SVCURRENTCOMPANY", company)
    return envelope


def _import_envelope(company: str) -> tuple[etree._Element, etree._Element]:
    envelope = _envelope("Import Data", "IMPORTDATA", "All Masters", company)
    request_data = _sub(envelope.find("BODY/IMPORTDATA"), "REQUESTDATA")
    return envelope, request_data


def _serialize(envelope: etree._Element) -> str:
    xml = etree.tostring(envelope, pretty_print=True, xml_declaration=True, encoding="UTF-8").decode("utf-8")
    return xml.replace(_NOT_APPLICABLE_MARK, "&#4;")


def _append_entry(voucher: etree._Element, entry: LedgerEntry) -> None:
    line = _sub(voucher, "ALLLEDGERENTRIES.LIST")
    _sub(line, "LEDGERNAME", entry.ledger)
    _sub(line, "GSTCLASS")
    _sub(line, "ISDEEMEDPOSITIVE", _yes_no(entry.deemed_positive))
    _sub(line, "LEDGERFROMITEM", "No")
    _sub(line, "REMOVEZEROENTRIES", "No")
    _sub(line, "ISPARTYLEDGER", _yes_no(entry.is_party))
    _sub(line, "AMOUNT", _format_amount(entry.amount))
    _sub(line, "VATEXPAMOUNT", _format_amount(entry.amount))


def generate_voucher_xml(
    records: Iterable[TransactionRecord], company_name: str, rng: random.Random | None = None
) -> str:
    """Render records as an Import Data envelope of accounting vouchers."""
    envelope, request_data = _import_envelope(company_name)
    for record in records:
        kind = voucher_type(record)
        party, cash = ledger_entries(record)
        voucher = _sub(request_data, "VOUCHER", VCHTYPE=kind, ACTION="Create", OBJVIEW=ACCOUNTING_VIEW)
        _sub(voucher, "DATE", to_tally_date(record.date))
        _sub(voucher, "GUID", generate_guid(rng))
        _sub(voucher, "VOUCHERTYPENAME", kind)
        _sub(voucher, "VOUCHERNUMBER", record.invoice_no)
        _sub(voucher, "PARTYLEDGERNAME", party.ledger)
        _sub(voucher, "CSTFORMISSUETYPE")
        _sub(voucher, "CSTFORMRECVTYPE")
        _sub(voucher, "FBTPAYMENTTYPE", "Default")
        _sub(voucher, "PERSISTEDVIEW", ACCOUNTING_VIEW)
        _sub(voucher, "NARRATION", record.description)
        _append_entry(voucher, party)
        _append_entry(voucher, cash)
    return _serialize(envelope)


def generate_ledger_xml(ledger_names: Iterable[str], company_name: str, rng: random.Random | None = None) -> str:
    """Render an Import Data envelope creating a party ledger for each name."""
    envelope, request_data = _import_envelope(company_name)
    for name in ledger_names:
        ledger = _sub(request_data, "LEDGER", NAME=name, ACTION="Create")
        _sub(ledger, "GUID", generate_guid(rng))
        for tag, value in LEDGER_FLAGS:
            _sub(ledger, tag, value)
    return _serialize(envelope)


def connection_test_xml() -> str:
    """Export Data request listing the companies loaded in Tally."""
    return _serialize(_envelope("Export Data", "EXPORTDATA", "List of Companies", None))


def company_test_xml(company_name: str) -> str:
    """Export Data request for a single company."""
    return _serialize(_envelope("Export Data", "EXPORTDATA", "Company", company_name))
