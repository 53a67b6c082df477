"""Keyword heuristics for categorizing transactions and spotting the counterparty.

Both functions are pure and deterministic. Keyword lists are matched as case-insensitive substrings of the description
and checked in a fixed priority order; the first hit wins.
"""

import re

from app.core.models import Category

EXPENSE_THRESHOLD = 10_000

CATEGORY_KEYWORDS: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (Category.INCOME, ("payment received", "income", "revenue", "sales", "receipt", "collection")),
    (Category.OFFICE_SUPPLIES, ("office", "supplies", "stationery")),
    (Category.SOFTWARE, ("software", "license", "subscription")),
    (Category.TRAVEL, ("travel", "taxi", "flight", "hotel", "meal", "restaurant")),
    (Category.MARKETING, ("marketing", "advertising", "promotion")),
    (Category.RENT, ("rent", "lease")),
    (Category.UTILITIES, ("utility", "electricity", "water", "internet", "phone")),
    (Category.INSURANCE, ("insurance", "premium")),
    (Category.PROFESSIONAL_SERVICES, ("professional", "consultant", "legal", "accounting", "audit")),
)

KNOWN_VENDORS = (
    "microsoft",
    "google",
    "amazon",
    "apple",
    "adobe",
    "salesforce",
    "uber",
    "ola",
    "swiggy",
    "zomato",
    "flipkart",
    "paytm",
    "airtel",
    "jio",
    "vodafone",
    "bsnl",
    "tata",
    "reliance",
    "hdfc",
    "icici",
    "sbi",
    "axis",
    "kotak",
    "yes bank",
)

COMPANY_PATTERN = re.compile(
    r"\b(\w+(?:\s+\w+)*)\s+(?:ltd|limited|inc|corp|corporation|pvt|private|llp|llc)\b",
    re.IGNORECASE,
)


def categorize_transaction(description: str, amount: float) -> Category:
    """Map a description and amount to exactly one category."""
    desc = (description or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in desc for keyword in keywords):
            return category
    if amount > 0:
        return Category.EXPENSES if amount > EXPENSE_THRESHOLD else Category.OFFICE_SUPPLIES
    return Category.MISCELLANEOUS


def extract_vendor(description: str) -> str | None:
    """Guess the vendor named in a description, or None when nothing looks like one."""
    if not description:
        return None
    desc = description.lower()
    for vendor in KNOWN_VENDORS:
        if vendor in desc:
            return vendor[0].upper() + vendor[1:]
    match = COMPANY_PATTERN.search(description)
    if match:
        return match.group(1).strip()
    return None
