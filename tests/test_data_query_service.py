import pandas as pd
import pytest

from services.data_query_service import DataQueryService
from services.error_handling_service import DataAccessError

from .conftest import customer_row, insight_row, sale_row


@pytest.fixture
def loaded_service():
    sales = pd.DataFrame([
        sale_row(pd.Timestamp("2024-01-03"), 50.0, customer_id="C1"),
        sale_row(pd.Timestamp("2024-02-14"), 75.5, customer_id="C2"),
        sale_row(pd.Timestamp("2024-01-20"), 25.0, customer_id=None),
        sale_row(pd.Timestamp("2024-02-01"), 10.0, customer_id="C3"),
    ])
    customers = pd.DataFrame([
        customer_row("Ava Hassan", pd.Timestamp("2024-01-01"), pd.Timestamp("2024-02-01")),
        customer_row("Liam Miller", pd.Timestamp("2024-02-01"), pd.NaT),
    ])
    insights = pd.DataFrame([insight_row("Positive Growth Trend", "High", created_at=pd.Timestamp("2024-02-01"))])

    service = DataQueryService()
    service.load_frames(sales, customers, insights)
    return service


def test_fetch_orders_descending_with_limit(loaded_service):
    rows = loaded_service.fetch_table("sales", "transaction_date", ascending=False, limit=2)

    assert [row["amount"] for row in rows] == [75.5, 10.0]
    assert rows[0]["transaction_date"] == pd.Timestamp("2024-02-14")


def test_fetch_orders_ascending_without_limit(loaded_service):
    rows = loaded_service.fetch_table("sales", "transaction_date", ascending=True)

    assert rows[0]["customer_id"] == "C1"
    assert pd.isna(rows[1]["customer_id"])
    assert len(rows) == 4


def test_fetch_customers_keeps_missing_last_active(loaded_service):
    rows = loaded_service.fetch_table("customers", "created_at", ascending=False)

    assert rows[0]["name"] == "Liam Miller"
    assert pd.isna(rows[0]["last_active"])


def test_monthly_view_sums_amounts(loaded_service):
    rows = loaded_service.fetch_table("monthly_sales", "period")

    assert [(row["period"], row["value"]) for row in rows] == [("2024-01", 75.0), ("2024-02", 85.5)]


def test_unknown_table_is_rejected(loaded_service):
    with pytest.raises(DataAccessError) as excinfo:
        loaded_service.fetch_table("users")
    assert excinfo.value.table == "users"


def test_injected_order_column_is_rejected(loaded_service):
    with pytest.raises(DataAccessError):
        loaded_service.fetch_table("sales", "amount; DROP TABLE sales")


def test_missing_column_becomes_data_access_error(loaded_service):
    with pytest.raises(DataAccessError):
        loaded_service.fetch_table("sales", "no_such_column")


def test_fetch_before_load_is_data_access_error():
    with pytest.raises(DataAccessError):
        DataQueryService().fetch_table("sales", "transaction_date")


def test_closed_connection_is_data_access_error(loaded_service):
    loaded_service.con.close()

    with pytest.raises(DataAccessError) as excinfo:
        loaded_service.fetch_table("sales", "transaction_date")
    assert excinfo.value.table == "sales"
