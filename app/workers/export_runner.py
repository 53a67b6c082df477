"""Batched export of transaction records to Tally.

Records are split into fixed-size batches sent strictly one after another. For each batch the party ledgers are
created first (best effort; a failure usually means the ledger already exists), then the vouchers. A voucher failure
stops the run: earlier batches stay in Tally and nothing is retried or rolled back.
"""

import time
from collections.abc import Callable, Sequence

from app.core.errors import TallyExportError
from app.core.models import ExportReport, SendResult, TallyConfig, TransactionRecord
from app.core.settings import Settings
from app.core.utils import epoch_millis, get_logger
from app.services.tally_client import TallyClient
from app.services.tally_xml import generate_ledger_xml, generate_voucher_xml, unique_ledgers

logger = get_logger("tally-bridge.export")

DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_DELAY = 0.5

ProgressCallback = Callable[[int, int], None]


def chunk(records: Sequence[TransactionRecord], size: int) -> list[list[TransactionRecord]]:
    """Split records into consecutive batches of at most ``size``."""
    if size < 1:
        msg = f"Batch size must be positive, got {size}"
        raise ValueError(msg)
    return [list(records[start : start + size]) for start in range(0, len(records), size)]


def send_batch(
    client: TallyClient, records: Sequence[TransactionRecord], batch_number: int, total_batches: int
) -> SendResult:
    """Create the batch's ledgers, then its vouchers. Raises TallyExportError when the vouchers are rejected."""
    company = client.config.company_name
    ledgers = unique_ledgers(records)
    if ledgers:
        try:
            ledger_xml = generate_ledger_xml(ledgers, company)
        except ValueError as exc:
            logger.warning(f"Ledger creation skipped (batch {batch_number}/{total_batches}): {exc}")
        else:
            ledger_result = client.send(ledger_xml)
            if not ledger_result.success:
                logger.warning(
                    f"Ledger creation warning (batch {batch_number}/{total_batches}): {ledger_result.error}"
                )

    try:
        voucher_xml = generate_voucher_xml(records, company)
    except ValueError as exc:
        msg = f"Tally integration error: {exc}"
        raise TallyExportError(msg, batch_number) from exc
    voucher_result = client.send(voucher_xml)
    if not voucher_result.success:
        raise TallyExportError(voucher_result.error or "Unknown Tally error", batch_number)

    stamp = epoch_millis()
    logger.info(f"Batch {batch_number}/{total_batches}: {len(records)} vouchers, {len(ledgers)} ledgers")
    return SendResult(
        message=f"Batch {batch_number}/{total_batches} processed successfully",
        processed_ids=[f"{record.invoice_no}-{stamp}" for record in records],
        batch_info={
            "batchNumber": batch_number,
            "totalBatches": total_batches,
            "recordsInBatch": len(records),
            "ledgersCreated": len(ledgers),
            "vouchersCreated": len(records),
        },
        tally_response=voucher_result.response,
    )


class ExportRunner:
    """Sends a full record list to Tally batch by batch."""

    def __init__(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY,
        client_factory: Callable[[TallyConfig], TallyClient] = TallyClient,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the runner with its batching policy and transport."""
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.client_factory = client_factory
        self.sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExportRunner":
        """Build a runner from application settings."""
        return cls(
            batch_size=settings.batch_size,
            batch_delay=settings.batch_delay_seconds,
            client_factory=lambda config: TallyClient(config, timeout=settings.tally_send_timeout),
        )

    def run(
        self,
        records: Sequence[TransactionRecord],
        config: TallyConfig,
        progress: ProgressCallback | None = None,
    ) -> ExportReport:
        """Export every batch in order, stopping at the first failed batch."""
        batches = chunk(records, self.batch_size)
        total = len(records)
        client = self.client_factory(config)
        processed_ids: list[str] = []
        sent = 0
        logger.info(f"Exporting {total} records to {client.url} in {len(batches)} batches")
        for number, batch in enumerate(batches, start=1):
            try:
                result = send_batch(client, batch, number, len(batches))
            except TallyExportError as exc:
                skipped = len(batches) - number
                logger.error(f"Batch {number}/{len(batches)} failed, {skipped} batches not attempted: {exc}")
                return ExportReport(
                    success=False,
                    total_records=total,
                    sent_records=sent,
                    batches_sent=number - 1,
                    total_batches=len(batches),
                    processed_ids=processed_ids,
                    error=str(exc),
                )
            processed_ids.extend(result.processed_ids)
            sent += len(batch)
            if progress is not None:
                progress(sent, total)
            if number < len(batches):
                self.sleep(self.batch_delay)
        return ExportReport(
            success=True,
            total_records=total,
            sent_records=sent,
            batches_sent=len(batches),
            total_batches=len(batches),
            processed_ids=processed_ids,
        )
