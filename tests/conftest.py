"""Shared fixtures: a fake Tally server standing in for requests.post."""

from collections.abc import Callable

import pytest

from app.core.models import Category, TallyConfig, TransactionRecord

TALLY_OK = "<RESPONSE><CREATED>1</CREATED><ALTERED>0</ALTERED><ERRORS>0</ERRORS></RESPONSE>"


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, text: str = TALLY_OK, reason: str = "OK") -> None:
        """Initialize the response."""
        self.status_code = status_code
        self.text = text
        self.reason = reason

    @property
    def ok(self) -> bool:
        """Mirror requests' definition of a successful status."""
        return self.status_code < 400  # noqa: PLR2004


class FakeTally:
    """Records every POST and answers through a configurable handler."""

    def __init__(self) -> None:
        """Initialize with a handler that accepts everything."""
        self.calls: list[dict] = []
        self.handler: Callable[[str], FakeResponse] = lambda _xml: FakeResponse()

    def post(self, url: str, data: bytes | None = None, headers: dict | None = None, timeout: float | None = None):
        """Capture the request and delegate to the handler."""
        xml = data.decode("utf-8") if data else ""
        self.calls.append({"url": url, "xml": xml, "headers": headers or {}, "timeout": timeout})
        return self.handler(xml)

    @staticmethod
    def response(status_code: int = 200, text: str = TALLY_OK, reason: str = "OK") -> FakeResponse:
        """Build a response for a custom handler."""
        return FakeResponse(status_code, text, reason)

    def reply(self, status_code: int = 200, text: str = TALLY_OK, reason: str = "OK") -> None:
        """Answer every request with the same response."""
        self.handler = lambda _xml: FakeResponse(status_code, text, reason)

    def fail_with(self, error: Exception) -> None:
        """Raise the given exception for every request."""

        def handler(_xml: str) -> FakeResponse:
            raise error

        self.handler = handler

    @property
    def voucher_calls(self) -> list[dict]:
        """Requests carrying vouchers."""
        return [call for call in self.calls if "<VOUCHER " in call["xml"]]

    @property
    def ledger_calls(self) -> list[dict]:
        """Requests carrying ledger masters."""
        return [call for call in self.calls if "<LEDGER " in call["xml"]]


@pytest.fixture
def fake_tally(monkeypatch: pytest.MonkeyPatch) -> FakeTally:
    """Route the Tally client's HTTP calls to an in-memory fake."""
    fake = FakeTally()
    monkeypatch.setattr("app.services.tally_client.requests.post", fake.post)
    return fake


@pytest.fixture
def tally_config() -> TallyConfig:
    """A complete, valid connection configuration."""
    return TallyConfig(serverUrl="localhost", port="9000", companyName="Acme Books", username="", password="")


def make_record(index: int = 0, category: Category = Category.EXPENSES, amount: float = 100.0, **kwargs):
    """Build a record with sensible defaults."""
    fields = {
        "date": "2024-01-05",
        "description": f"Record {index}",
        "amount": amount,
        "category": category.value,
        "vendor": f"Vendor {index}",
        "invoice_no": f"INV-{index}",
    }
    fields.update(kwargs)
    return TransactionRecord(**fields)


@pytest.fixture
def record_factory() -> Callable[..., TransactionRecord]:
    """Factory for TransactionRecords."""
    return make_record
