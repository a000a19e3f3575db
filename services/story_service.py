"""
Story Service
Builds a structured business narrative (highlights, insights, recommendations,
conclusion) from the full sales, customers and insights snapshots.
"""

import pandas as pd

from .comparison_service import ComparisonService
from .config_service import ConfigService
from .record_normalization_service import InsightRecord, SalesRecord


class StoryService:
    """Service for generating business stories."""

    QUARTERLY = "last-quarter"

    @staticmethod
    def _top_by(frame: pd.DataFrame, column: str) -> tuple[str, float]:
        if frame.empty:
            return "N/A", 0.0
        totals = frame.groupby(column, sort=False)['amount'].sum()
        # Ties resolve to the first-seen group.
        return str(totals.idxmax()), float(totals.max())

    @staticmethod
    def _half_over_half_growth(sales: list[SalesRecord]) -> float:
        """Second half vs first half of date-ordered sales; 0.0 without a positive baseline."""
        ordered = sorted(
            (sale for sale in sales if sale.date is not None),
            key=lambda sale: sale.date,
        )
        halfway = len(ordered) // 2
        first_total = sum(sale.amount for sale in ordered[:halfway])
        second_total = sum(sale.amount for sale in ordered[halfway:])
        if first_total <= 0:
            return 0.0
        growth, _ = ComparisonService.calculate_percentage_change(
            second_total, first_total, format_result=False
        )
        return growth

    def generate_story(
        self,
        sales: list[SalesRecord],
        customer_count: int,
        insights: list[InsightRecord],
        timeframe: str = QUARTERLY,
    ) -> dict:
        """
        Generate the story dict.

        Args:
            sales: All sales records
            customer_count: Known customers (used when sales carry no customer refs)
            insights: All insight records
            timeframe: "last-quarter" for a quarterly review, anything else is annual

        Returns:
            Dict with title, summary, highlights, insights, recommendations, conclusion
        """
        fmt = ConfigService.format_currency
        frame = pd.DataFrame(
            {
                'product': [sale.product_name or "Unknown Product" for sale in sales],
                'category': [sale.category or "Uncategorized" for sale in sales],
                'amount': [sale.amount for sale in sales],
            },
            columns=['product', 'category', 'amount'],
        )
        total_sales = float(frame['amount'].sum()) if not frame.empty else 0.0
        buyers = {sale.customer_ref for sale in sales if sale.customer_ref}
        buyer_count = len(buyers) if buyers else customer_count

        top_product, top_product_amount = self._top_by(frame, 'product')
        top_category, top_category_amount = self._top_by(frame, 'category')

        growth = self._half_over_half_growth(sales) if timeframe == self.QUARTERLY else 0.0
        growing = growth >= 0
        pct = ComparisonService.format_percent(abs(growth))

        key_insights = [
            insight.title for insight in insights if insight.priority == "High"
        ][:ConfigService.STORY_TOP_INSIGHTS]

        return {
            "title": f"Business Performance {'Quarterly' if timeframe == self.QUARTERLY else 'Annual'} Review",
            "summary": (
                f"Your business generated {fmt(total_sales)} in revenue from "
                f"{len(sales)} sales to {buyer_count} customers."
            ),
            "highlights": [
                {
                    "title": "Growth Overview",
                    "content": (
                        f"Your sales grew by {pct} compared to the previous period."
                        if growing else
                        f"Your sales decreased by {pct} compared to the previous period."
                    ),
                },
                {
                    "title": "Top Performers",
                    "content": (
                        f'Your best-selling product was "{top_product}" generating '
                        f'{fmt(top_product_amount)} in sales. The "{top_category}" category '
                        f'was your highest performer, accounting for {fmt(top_category_amount)} in revenue.'
                    ),
                },
            ],
            "insights": [{"title": "Key Insight", "content": title} for title in key_insights],
            "recommendations": [
                {
                    "title": "Marketing Focus",
                    "content": (
                        f'Consider increasing marketing efforts for your "{top_category}" category, '
                        "which is already performing well and could be further optimized."
                    ),
                },
                {
                    "title": "Inventory Management",
                    "content": (
                        f'Ensure you have sufficient stock of "{top_product}" to meet customer demand, '
                        "as it's your top-selling product."
                    ),
                },
            ],
            "conclusion": (
                f"Overall, your business {'shows positive momentum' if growing else 'faces some challenges'} "
                "that can be addressed with targeted strategies. Focus on your strengths in the "
                f'"{top_category}" category while addressing any declining areas with renewed '
                "marketing and inventory strategies."
            ),
        }
