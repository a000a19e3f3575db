"""
Comparison Service
Centralized logic for period-over-period percentage change with zero-baseline rules.
"""

from typing import Optional, Tuple

from .config_service import ConfigService


class ComparisonService:
    """Service for calculating percentage changes with consistent zero-baseline rules."""

    @staticmethod
    def calculate_percentage_change(
        current: float,
        previous: float,
        format_result: bool = True
    ) -> Tuple[Optional[str] | Optional[float], bool]:
        """
        Calculate percentage change with centralized zero-baseline rules.

        Rules:
        - prev == 0 and curr == 0 → 0.0% (valid)
        - prev == 0 and curr != 0 → N/A (undefined, cannot divide by zero)
        - else → (curr - prev) / prev * 100

        Args:
            current: Current period value
            previous: Previous period value (baseline)
            format_result: If True, returns formatted string; if False, returns float or None

        Returns:
            Tuple of (percentage_change, is_valid)
        """
        if previous == 0 and current == 0:
            pct_change = 0.0
        elif previous == 0:
            return ("N/A" if format_result else None), False
        else:
            pct_change = ((current - previous) / previous) * 100

        if format_result:
            return ComparisonService.format_percent(pct_change), True
        return pct_change, True

    @staticmethod
    def format_percent(value: float) -> str:
        """Format a percentage with the configured precision (e.g. "50.0%")."""
        return f"{value:.{ConfigService.DEFAULT_PERCENT_DECIMAL_PLACES}f}%"

    @staticmethod
    def is_positive_change(current: float, previous: float) -> bool:
        """Growth sign; no change counts as positive."""
        return current - previous >= 0
