import pandas as pd
import pytest

from services.error_handling_service import DataAccessError
from services.response_builder_service import ResponseBuilderService

FIXED_NOW = pd.Timestamp("2024-03-20T12:00:00", tz="UTC")


def sale_row(date, amount, product="Laptop Pro 14", category="Electronics", customer_id="C0001"):
    return {
        "transaction_date": date,
        "amount": amount,
        "product_name": product,
        "category": category,
        "customer_id": customer_id,
    }


def customer_row(name, created_at, last_active=None, email=None):
    return {
        "name": name,
        "email": email or f"{name.lower().replace(' ', '.')}@example.com",
        "created_at": created_at,
        "last_active": last_active,
    }


def insight_row(title, priority="Medium", category="Growth", description=None, created_at="2024-03-01"):
    return {
        "title": title,
        "description": description or f"{title} details.",
        "category": category,
        "priority": priority,
        "created_at": created_at,
    }


class FakeDataService:
    """In-memory stand-in for DataQueryService that records every fetch."""

    def __init__(self, tables=None, fail_on=None):
        self.tables = tables or {}
        self.fail_on = set(fail_on or ())
        self.calls = []

    def fetch_table(self, name, order_by=None, ascending=True, limit=None):
        self.calls.append((name, order_by, ascending, limit))
        if name in self.fail_on:
            raise DataAccessError(f"connection lost while reading {name}", table=name)
        rows = list(self.tables.get(name, []))
        return rows[:limit] if limit is not None else rows


@pytest.fixture
def builder():
    return ResponseBuilderService(now_provider=lambda: FIXED_NOW)


@pytest.fixture
def sales_rows():
    return [
        sale_row("2024-03-15T10:00:00", 1200.0, "Laptop Pro 14", "Electronics", "C0001"),
        sale_row("2024-03-15T08:30:00", 199.0, "Wireless Headphones", "Accessories", "C0002"),
        sale_row("2024-03-14T16:00:00", 899.0, "Smartphone X", "Electronics", "C0001"),
        sale_row("2024-03-12T09:00:00", 459.0, "Ergonomic Desk Chair", "Office Equipment", "C0003"),
        sale_row("2024-03-10T11:00:00", 1299.0, "Laptop Air 13", "Electronics", "C0004"),
        sale_row("2024-03-09T11:00:00", 349.0, "4K Monitor", "Electronics", "C0002"),
        sale_row("2024-03-08T11:00:00", 129.0, "Mechanical Keyboard", "Accessories", "C0005"),
    ]


@pytest.fixture
def customer_rows():
    return [
        customer_row("Ava Hassan", "2024-03-18", last_active="2024-03-19T09:00:00"),
        customer_row("Liam Miller", "2024-03-10", last_active="2024-03-11T09:00:00"),
        customer_row("Noah Khan", "2024-03-05", last_active=None),
        customer_row("Mia Garcia", "2024-02-28", last_active="2024-03-14T12:00:01"),
        customer_row("Omar Nguyen", "2024-02-20", last_active="2024-01-01"),
        customer_row("Sara Smith", "2024-02-10", last_active="2024-03-20T08:00:00"),
    ]


@pytest.fixture
def insight_rows():
    return [
        insight_row("Positive Growth Trend", priority="High", category="Growth"),
        insight_row("Restock Laptop Pro 14", priority="high", category="Opportunity"),
        insight_row("Accessories underperforming", priority="Medium", category="Risk"),
    ]
