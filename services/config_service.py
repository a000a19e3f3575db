"""
Configuration Service
Centralized configuration management for the application.
"""

import streamlit as st
from typing import Optional


class ConfigService:
    """Service for managing application configuration."""

    # Intent keyword table (priority order is significant, first match wins)
    SALES_KEYWORDS: tuple[str, ...] = ("sales", "revenue")
    CUSTOMER_KEYWORDS: tuple[str, ...] = ("customer", "user")
    TREND_KEYWORDS: tuple[str, ...] = ("trend", "growth", "compare")
    INSIGHT_KEYWORDS: tuple[str, ...] = ("insight", "analysis", "recommend")

    # Sub-rule keywords
    SALES_CATEGORIES: tuple[str, ...] = ("electronics", "accessories", "office equipment")
    SALES_PRODUCTS: tuple[str, ...] = ("laptop", "smartphone", "headphones", "monitor")
    INSIGHT_CATEGORIES: tuple[str, ...] = ("growth", "risk", "opportunity", "success")
    STOP_SPEAKING_COMMAND: str = "stop speaking"

    # Data fetch configuration
    SALES_FETCH_LIMIT: int = 10
    CUSTOMER_FETCH_LIMIT: int = 10
    RECENT_ITEMS_LIMIT: int = 5
    ACTIVE_WINDOW_DAYS: int = 7
    STORY_TOP_INSIGHTS: int = 3
    SPOKEN_TOP_INSIGHTS: int = 3
    QUERY_HISTORY_SIZE: int = 5

    # Currency/Number Format Configuration
    DEFAULT_CURRENCY_CODE: str = "USD"
    DEFAULT_CURRENCY_SYMBOL: str = "$"
    DEFAULT_DECIMAL_PLACES: int = 2
    DEFAULT_PERCENT_DECIMAL_PLACES: int = 1

    # User-facing messages
    UNKNOWN_QUERY_MESSAGE: str = (
        "I couldn't understand your query. Try asking about sales, revenue, "
        "customers, users, trends, or insights."
    )
    QUERY_ERROR_MESSAGE: str = "An error occurred while processing your query. Please try again."

    # Demo dataset configuration
    DEMO_SEED: int = 42
    DEMO_SALES_ROWS: int = 120
    DEMO_CUSTOMER_ROWS: int = 25
    DEMO_MONTHS: int = 6

    # UI/Theme Configuration
    CHART_COLORS: list[str] = [
        "#2563EB", "#10B981", "#F59E0B", "#EF4444",
        "#A855F7", "#06B6D4"
    ]

    # Chart Layout Configuration
    CHART_PAPER_BG: str = 'rgba(0,0,0,0)'
    CHART_PLOT_BG: str = 'rgba(0,0,0,0)'
    CHART_FONT_COLOR: str = '#E5E7EB'
    CHART_GRID_COLOR: str = '#1F2937'
    CHART_TICK_COLOR: str = '#9CA3AF'

    @classmethod
    def get_secret(cls, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a value from Streamlit secrets, or the default outside a Streamlit run."""
        try:
            return st.secrets.get(key, default)
        except Exception:
            return default

    @classmethod
    def get_demo_seed(cls) -> int:
        """Get demo dataset seed (secrets override)."""
        value = cls.get_secret("DEMO_SEED")
        if value is None:
            return cls.DEMO_SEED
        return int(value)

    @classmethod
    def get_speech_enabled(cls) -> bool:
        """Whether spoken replies are enabled for this session."""
        try:
            return bool(st.session_state.get('speech_enabled', True))
        except Exception:
            return True

    @classmethod
    def get_chart_layout(cls) -> dict:
        """
        Get Plotly chart layout configuration.

        Returns:
            Dictionary with layout settings
        """
        import plotly.graph_objects as go

        return go.Layout(
            paper_bgcolor=cls.CHART_PAPER_BG,
            plot_bgcolor=cls.CHART_PLOT_BG,
            font=dict(color=cls.CHART_FONT_COLOR),
            xaxis=dict(
                showgrid=True,
                gridcolor=cls.CHART_GRID_COLOR,
                tickfont=dict(color=cls.CHART_TICK_COLOR),
            ),
            yaxis=dict(
                showgrid=True,
                gridcolor=cls.CHART_GRID_COLOR,
                tickfont=dict(color=cls.CHART_TICK_COLOR),
            ),
            colorway=cls.CHART_COLORS,
        )

    @classmethod
    def format_currency(cls, amount: float) -> str:
        """
        Format currency amount for summaries.

        No thousands separators: summaries read "$1234.50", matching the
        payload's fixed-point `total` string.
        """
        return f"{cls.DEFAULT_CURRENCY_SYMBOL}{amount:.{cls.DEFAULT_DECIMAL_PLACES}f}"


# Singleton instance
_config_service = ConfigService()

def get_config() -> ConfigService:
    """Get the configuration service instance."""
    return _config_service
