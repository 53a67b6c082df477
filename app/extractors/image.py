"""Template-based stand-ins for OCR on receipt and invoice images.

No pixels are analysed. Two backends are registered: ``template`` picks a canned record from the filename, and
``size`` picks between a detailed and a simple template from the byte count. Either keeps the upload flow exercisable
end to end until a real OCR backend is registered under another name.
"""

import random

from app.core.models import Category, TransactionRecord
from app.core.settings import Settings
from app.core.utils import get_logger, today_iso
from app.extractors.base import ImageExtractor, InvoiceNumberFactory
from app.extractors.registry import ExtractorRegistry

logger = get_logger("tally-bridge.extractors.image")

DEFAULT_LARGE_IMAGE_THRESHOLD = 500_000


class TemplateImageExtractor(ImageExtractor):
    """Simulated OCR: returns a template record chosen from the filename."""

    def __init__(self, rng: random.Random | None = None) -> None:
        """Initialize the extractor with an optional random source."""
        self.rng = rng or random.Random()

    def extract(self, data: bytes, filename: str) -> list[TransactionRecord]:
        """Return one template record for the image."""
        name = filename.lower()
        if "receipt" in name:
            description, low, high = "Receipt - Business Expense", 500, 5499
            category, vendor, prefix = Category.OFFICE_SUPPLIES, "Local Vendor", "REC"
        elif "invoice" in name:
            description, low, high = "Service Invoice", 2000, 16999
            category, vendor, prefix = Category.PROFESSIONAL_SERVICES, "Service Provider", "INV"
        else:
            description, low, high = "Scanned Receipt", 200, 2199
            category, vendor, prefix = Category.MISCELLANEOUS, "Unknown Vendor", "IMG"
        record = TransactionRecord(
            date=today_iso(),
            description=description,
            amount=self.rng.randint(low, high),
            category=category.value,
            vendor=vendor,
            invoice_no=InvoiceNumberFactory(prefix).next(),
        )
        logger.info(f"Simulated OCR matched the '{description}' template for {filename}")
        return [record]


class SizeImageExtractor(ImageExtractor):
    """Simulated OCR: large images read as a detailed invoice, small ones as a simple receipt."""

    def __init__(self, large_image_threshold: int = DEFAULT_LARGE_IMAGE_THRESHOLD) -> None:
        """Initialize the extractor with the byte count above which an image counts as large."""
        self.large_image_threshold = large_image_threshold

    @classmethod
    def from_settings(cls, settings: Settings) -> "SizeImageExtractor":
        """Build the extractor from application settings."""
        return cls(large_image_threshold=settings.large_image_threshold)

    def extract(self, data: bytes, filename: str) -> list[TransactionRecord]:
        """Return template records for the image size."""
        today = today_iso()
        invoice_numbers = InvoiceNumberFactory("IMG")
        if len(data) > self.large_image_threshold:
            records = [
                TransactionRecord(
                    date=today,
                    description="Business Lunch Receipt (OCR)",
                    amount=1200.00,
                    category=Category.TRAVEL.value,
                    vendor="Restaurant ABC",
                    invoice_no=invoice_numbers.next(),
                ),
                TransactionRecord(
                    date=today,
                    description="Taxi Fare (OCR)",
                    amount=350.00,
                    category=Category.TRAVEL.value,
                    vendor="Uber",
                    invoice_no=invoice_numbers.next(),
                ),
            ]
        else:
            records = [
                TransactionRecord(
                    date=today,
                    description="Coffee Shop Receipt (OCR)",
                    amount=450.00,
                    category=Category.OFFICE_SUPPLIES.value,
                    vendor="Starbucks",
                    invoice_no=invoice_numbers.next(),
                )
            ]
        logger.info(f"Simulated OCR produced {len(records)} records for {filename} ({len(data)} bytes)")
        return records


ExtractorRegistry.register("template", TemplateImageExtractor)
ExtractorRegistry.register("size", SizeImageExtractor)
