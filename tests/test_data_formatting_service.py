import pytest

from services.data_formatting_service import DataFormattingService
from services.response_payload import PayloadType, ResponsePayload


@pytest.mark.parametrize("value,expected", [
    (950, "950"),
    (1_500, "1.5K"),
    (2_300_000, "2.3M"),
    ("n/a", "n/a"),
])
def test_abbreviate_number(value, expected):
    assert DataFormattingService.abbreviate_number(value) == expected


def test_sales_payload_table_is_labelled_and_formatted():
    payload = ResponsePayload.result(
        PayloadType.SALES,
        [{"date": "3/1/2024", "amount": 1234.5}],
        "Found sales data for 1 days.",
    )
    df = DataFormattingService().format_chat_dataframe(DataFormattingService.payload_to_dataframe(payload))

    assert list(df.columns) == ["Date", "Amount"]
    assert df["Amount"].tolist() == ["$1234.50"]


def test_summary_payload_is_single_row():
    payload = ResponsePayload.result(
        PayloadType.SUMMARY,
        {"total": "350.00", "count": 2, "currency": "USD", "metric": "Revenue"},
        "Total revenue: $350.00",
    )
    df = DataFormattingService.payload_to_dataframe(payload)

    assert df.to_dict("records") == [{"Total": "350.00", "Count": 2, "Currency": "USD", "Metric": "Revenue"}]


def test_failure_payload_has_no_table():
    payload = ResponsePayload.failure(PayloadType.UNKNOWN, "?")
    assert DataFormattingService.payload_to_dataframe(payload).empty
