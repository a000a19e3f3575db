"""
Data Formatting Service
Turns response payloads into display tables and formats numbers for the dashboard.

Numeric Precision Policy:
- Computations: raw float math on record amounts
- Formatting: at render time only; currency 2 decimals, percentages 1 decimal
"""

import pandas as pd

from .config_service import ConfigService
from .response_payload import PayloadType, ResponsePayload

# Display column names per payload key
COLUMN_LABELS = {
    'date': 'Date',
    'amount': 'Amount',
    'product': 'Product',
    'category': 'Category',
    'period': 'Month',
    'value': 'Revenue',
    'name': 'Name',
    'email': 'Email',
    'joined': 'Joined',
    'lastActive': 'Last Active',
    'title': 'Title',
    'description': 'Description',
    'priority': 'Priority',
}

MONEY_COLUMNS = ('Amount', 'Revenue')


class DataFormattingService:
    """Service for formatting payload data for display."""

    @staticmethod
    def abbreviate_number(value: float | str) -> str:
        """
        Abbreviate large numbers to K/M/B format.

        Args:
            value: Numeric value to format

        Returns:
            Formatted string (e.g., "1.5M", "2.3K")
        """
        try:
            v = float(value)
        except (TypeError, ValueError):
            return str(value)

        av = abs(v)
        if av >= 1_000_000_000:
            return f"{v/1_000_000_000:.1f}B"
        if av >= 1_000_000:
            return f"{v/1_000_000:.1f}M"
        if av >= 1_000:
            return f"{v/1_000:.1f}K"
        return f"{v:,.0f}"

    @staticmethod
    def payload_to_dataframe(payload: ResponsePayload) -> pd.DataFrame:
        """
        Tabulate list-shaped payloads.

        Summary payloads become a single row; story and failure payloads have
        no table and yield an empty DataFrame.
        """
        if payload.is_failure or payload.type == PayloadType.STORY:
            return pd.DataFrame()
        if payload.type == PayloadType.SUMMARY:
            return pd.DataFrame([payload.data]).rename(columns=str.title)
        df = pd.DataFrame(payload.data)
        return df.rename(columns=COLUMN_LABELS)

    def format_chat_dataframe(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Format money columns with the configured currency.

        Args:
            df: DataFrame from payload_to_dataframe

        Returns:
            Formatted copy
        """
        out = df.copy()
        for c in MONEY_COLUMNS:
            if c in out.columns and pd.api.types.is_numeric_dtype(out[c]):
                out[c] = out[c].map(ConfigService.format_currency)
        return out
