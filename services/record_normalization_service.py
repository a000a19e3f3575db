"""
Record Normalization Service
Turns raw table rows into explicit record structures with a fixed
missing-field policy:

- amount: missing, null or non-numeric -> 0.0
- text fields: missing or null -> "" (never matches a filter)
- dates: missing or unparseable -> None (excluded from date groupings)
"""

import math
from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd


def normalize_amount(value: Any) -> float:
    """Coerce an amount to float, treating missing/invalid values as 0.0."""
    if value is None:
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    return amount


def normalize_text(value: Any) -> str:
    """Coerce a text field to str; None/NaN become an empty string."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def normalize_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """Parse a timestamp as UTC; returns None when missing or unparseable."""
    if value is None or value == "":
        return None
    ts = pd.to_datetime(value, utc=True, errors='coerce')
    if pd.isna(ts):
        return None
    return ts


def format_display_date(ts: Optional[pd.Timestamp]) -> Optional[str]:
    """Format a timestamp as a calendar-day display key (M/D/YYYY)."""
    if ts is None:
        return None
    return f"{ts.month}/{ts.day}/{ts.year}"


def format_month_key(ts: pd.Timestamp) -> str:
    """Format a timestamp as a YYYY-MM period key."""
    return f"{ts.year}-{ts.month:02d}"


@dataclass(frozen=True)
class SalesRecord:
    """A single sales transaction."""
    date: Optional[pd.Timestamp]
    amount: float
    product_name: str = ""
    category: str = ""
    customer_ref: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "SalesRecord":
        customer = row.get('customer_id')
        return cls(
            date=normalize_timestamp(row.get('transaction_date')),
            amount=normalize_amount(row.get('amount')),
            product_name=normalize_text(row.get('product_name')),
            category=normalize_text(row.get('category')),
            customer_ref=normalize_text(customer) or None,
        )


@dataclass(frozen=True)
class CustomerRecord:
    """A customer account."""
    name: str
    email: str
    created_at: Optional[pd.Timestamp] = None
    last_active_at: Optional[pd.Timestamp] = None

    @classmethod
    def from_row(cls, row: dict) -> "CustomerRecord":
        return cls(
            name=normalize_text(row.get('name')),
            email=normalize_text(row.get('email')),
            created_at=normalize_timestamp(row.get('created_at')),
            last_active_at=normalize_timestamp(row.get('last_active')),
        )


@dataclass(frozen=True)
class InsightRecord:
    """A stored business insight. Priority is free text (High/Medium/Low by convention)."""
    title: str
    description: str
    category: str = ""
    priority: str = ""

    @classmethod
    def from_row(cls, row: dict) -> "InsightRecord":
        return cls(
            title=normalize_text(row.get('title')),
            description=normalize_text(row.get('description')),
            category=normalize_text(row.get('category')),
            priority=normalize_text(row.get('priority')),
        )


class RecordNormalizationService:
    """Service for converting fetched rows into typed records."""

    @staticmethod
    def to_sales(rows: list[dict]) -> list[SalesRecord]:
        return [SalesRecord.from_row(row) for row in rows]

    @staticmethod
    def to_customers(rows: list[dict]) -> list[CustomerRecord]:
        return [CustomerRecord.from_row(row) for row in rows]

    @staticmethod
    def to_insights(rows: list[dict]) -> list[InsightRecord]:
        return [InsightRecord.from_row(row) for row in rows]
