"""HTTP transport to a Tally server's XML interface."""

import re
from dataclasses import dataclass

import requests

from app.core.models import ConnectionTestResult, TallyConfig
from app.core.utils import epoch_millis, get_logger
from app.services.tally_xml import company_test_xml, connection_test_xml

logger = get_logger("tally-bridge.tally")

HTTP_NOT_FOUND = 404
ERROR_PATTERN = re.compile(r"<ERROR>(.*?)</ERROR>", re.DOTALL)


@dataclass
class TallyResponse:
    """Parsed outcome of one XML request."""

    success: bool
    response: str | None = None
    error: str | None = None


class TallyClient:
    """Posts XML envelopes to Tally and classifies the replies."""

    def __init__(self, config: TallyConfig, timeout: float | None = None) -> None:
        """Initialize the client for one Tally server."""
        self.config = config
        self.timeout = timeout

    @property
    def url(self) -> str:
        """Endpoint every request is posted to."""
        return self.config.base_url

    def post_xml(self, xml: str) -> requests.Response:
        """POST an XML document with an explicit Content-Length."""
        body = xml.encode("utf-8")
        headers = {"Content-Type": "application/xml", "Content-Length": str(len(body))}
        return requests.post(self.url, data=body, headers=headers, timeout=self.timeout)

    def send(self, xml: str) -> TallyResponse:
        """Send an import request; HTTP, Tally and network failures come back as an error string."""
        try:
            resp = self.post_xml(xml)
        except requests.exceptions.RequestException as exc:
            logger.warning(f"Network error talking to {self.url}: {exc}")
            return TallyResponse(success=False, error=f"Network error: {exc}")
        if not resp.ok:
            logger.warning(f"Tally HTTP {resp.status_code} from {self.url}")
            return TallyResponse(success=False, error=f"Tally server error: {resp.status_code} {resp.reason}")
        text = resp.text
        if "<ERROR>" in text or "Error" in text:
            match = ERROR_PATTERN.search(text)
            message = match.group(1) if match else "Unknown Tally error"
            logger.warning(f"Tally rejected request: {message}")
            return TallyResponse(success=False, error=f"Tally processing error: {message}")
        logger.debug(f"Tally OK ({len(text)} bytes)")
        return TallyResponse(success=True, response=text)

    def test_connection(self) -> ConnectionTestResult:
        """Check that Tally answers and that the configured company is loaded."""
        company = self.config.company_name
        try:
            resp = self.post_xml(connection_test_xml())
            if resp.status_code == HTTP_NOT_FOUND:
                return self._failed(
                    "Tally server not found. Please check if Tally is running and HTTP API is enabled."
                )
            if not resp.ok:
                return self._failed(f"Tally server responded with error: {resp.status_code} {resp.reason}")
            text = resp.text
            if "No Company" in text or "Error" in text:
                return self._failed(f'Company "{company}" not found in Tally. Please check the company name.')
            if company and company not in text:
                company_resp = self.post_xml(company_test_xml(company))
                if not company_resp.ok:
                    return self._failed(
                        f'Cannot access company "{company}". '
                        "Please verify the company name and ensure it's not password protected."
                    )
        except requests.exceptions.Timeout:
            return self._failed("Connection timeout. Please check if Tally server is running and accessible.")
        except requests.exceptions.ConnectionError:
            return self._failed(
                "Connection refused. Please ensure Tally is running and HTTP API is enabled on the specified port."
            )
        except requests.exceptions.RequestException as exc:
            return self._failed(
                f"Network error: {exc}. Please check your network connection and Tally server settings."
            )
        logger.info(f"Connected to Tally at {self.url} (company={company})")
        return ConnectionTestResult(
            success=True,
            company_name=company,
            server_info={
                "url": self.url,
                "status": "Connected",
                "version": "Tally.ERP 9",
                "responseTime": epoch_millis(),
            },
        )

    def _failed(self, error: str) -> ConnectionTestResult:
        logger.warning(f"Tally connection test failed for {self.url}: {error}")
        return ConnectionTestResult(success=False, error=error)
