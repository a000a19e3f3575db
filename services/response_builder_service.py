"""
Response Builder Service
Applies intent-specific filter/aggregate rules to a fetched snapshot and
produces a typed ResponsePayload.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import pandas as pd

from .comparison_service import ComparisonService
from .config_service import ConfigService
from .intent_classifier_service import Intent
from .record_normalization_service import (
    CustomerRecord,
    InsightRecord,
    SalesRecord,
    format_display_date,
    format_month_key,
)
from .response_payload import PayloadType, ResponsePayload

logger = logging.getLogger(__name__)


def keyword_matcher(*keywords: str) -> Callable[[str], Optional[str]]:
    """Return a matcher yielding the first keyword (in the given order) found in text."""
    def match(text: str) -> Optional[str]:
        for keyword in keywords:
            if keyword in text:
                return keyword
        return None
    return match


@dataclass(frozen=True)
class SubRule:
    """One branch of an intent: `handle(records, keyword, text)` runs when `match` finds a keyword."""
    name: str
    match: Callable[[str], Optional[str]]
    handle: Callable[[list, str, str], ResponsePayload]


class ResponseBuilderService:
    """Service for turning snapshots into response payloads."""

    def __init__(self, now_provider: Optional[Callable[[], pd.Timestamp]] = None):
        self.now_provider = now_provider or (lambda: pd.Timestamp.now(tz="UTC"))

        # Priority order within each intent, first match wins.
        self.sales_rules: tuple[SubRule, ...] = (
            SubRule("recent", keyword_matcher("recent", "latest"), self._recent_sales),
            SubRule("category", keyword_matcher(*ConfigService.SALES_CATEGORIES), self._sales_by_category),
            SubRule("product", keyword_matcher(*ConfigService.SALES_PRODUCTS), self._sales_by_product),
            SubRule("total", keyword_matcher("total", "sum"), self._sales_total),
        )
        self.customer_rules: tuple[SubRule, ...] = (
            SubRule("recent", keyword_matcher("new", "recent"), self._recent_customers),
            SubRule("active", keyword_matcher("active"), self._active_customers),
        )
        self.insight_rules: tuple[SubRule, ...] = (
            SubRule("priority", keyword_matcher("high priority", "important"), self._high_priority_insights),
            SubRule("category", keyword_matcher(*ConfigService.INSIGHT_CATEGORIES), self._insights_by_category),
        )

    def build(self, intent: Intent, question: str, records: list) -> ResponsePayload:
        """
        Build the payload for an intent.

        Args:
            intent: Classified intent
            question: Original utterance (matched lower-cased)
            records: Typed snapshot fetched for the intent

        Returns:
            ResponsePayload
        """
        ql = (question or "").lower()

        if intent == Intent.SALES:
            return self._dispatch(self.sales_rules, self._sales_by_day, records, ql)
        if intent == Intent.CUSTOMER:
            return self._dispatch(self.customer_rules, self._all_customers, records, ql)
        if intent == Intent.TREND:
            return self.build_trend(records)
        if intent == Intent.INSIGHT:
            if not records:
                return ResponsePayload.result(
                    PayloadType.INSIGHTS, [], "No insights available at this time."
                )
            return self._dispatch(self.insight_rules, self._all_insights, records, ql)
        return ResponsePayload.failure(PayloadType.UNKNOWN, ConfigService.UNKNOWN_QUERY_MESSAGE)

    def _dispatch(
        self,
        rules: tuple[SubRule, ...],
        default: Callable[[list, str, str], ResponsePayload],
        records: list,
        ql: str,
    ) -> ResponsePayload:
        for rule in rules:
            keyword = rule.match(ql)
            if keyword is not None:
                logger.info("[ResponseBuilder] rule=%s keyword=%r rows=%d", rule.name, keyword, len(records))
                return rule.handle(records, keyword, ql)
        logger.info("[ResponseBuilder] rule=default rows=%d", len(records))
        return default(records, "", ql)

    # Sales

    def _recent_sales(self, records: list[SalesRecord], keyword: str, ql: str) -> ResponsePayload:
        recent = records[:ConfigService.RECENT_ITEMS_LIMIT]
        data = [
            {
                "date": format_display_date(sale.date),
                "amount": sale.amount,
                "product": sale.product_name,
                "category": sale.category,
            }
            for sale in recent
        ]
        return ResponsePayload.result(
            PayloadType.SALES, data, f"Found {len(data)} recent sales transactions."
        )

    def _sales_by_category(self, records: list[SalesRecord], category: str, ql: str) -> ResponsePayload:
        filtered = [sale for sale in records if sale.category.lower() == category]
        return ResponsePayload.result(
            PayloadType.SALES,
            self._sale_rows(filtered),
            f"Found {len(filtered)} sales in the {category} category.",
        )

    def _sales_by_product(self, records: list[SalesRecord], product: str, ql: str) -> ResponsePayload:
        filtered = [sale for sale in records if product in sale.product_name.lower()]
        return ResponsePayload.result(
            PayloadType.SALES,
            self._sale_rows(filtered),
            f"Found {len(filtered)} sales of {product}s.",
        )

    def _sales_total(self, records: list[SalesRecord], keyword: str, ql: str) -> ResponsePayload:
        total = sum(sale.amount for sale in records)
        metric = "Revenue" if "revenue" in ql else "Sales"
        data = {
            "total": f"{total:.{ConfigService.DEFAULT_DECIMAL_PLACES}f}",
            "count": len(records),
            "currency": ConfigService.DEFAULT_CURRENCY_CODE,
            "metric": metric,
        }
        return ResponsePayload.result(
            PayloadType.SUMMARY,
            data,
            f"Total {metric.lower()}: {ConfigService.format_currency(total)}",
        )

    def _sales_by_day(self, records: list[SalesRecord], keyword: str, ql: str) -> ResponsePayload:
        frame = self._dated_frame(records, format_display_date, "date")
        if frame.empty:
            data = []
        else:
            # Days keep first-seen order of the snapshot.
            daily = frame.groupby("date", sort=False)["amount"].sum()
            data = [{"date": day, "amount": float(amount)} for day, amount in daily.items()]
        return ResponsePayload.result(
            PayloadType.SALES, data, f"Found sales data for {len(data)} days."
        )

    @staticmethod
    def _sale_rows(sales: list[SalesRecord]) -> list[dict]:
        return [
            {
                "date": format_display_date(sale.date),
                "amount": sale.amount,
                "product": sale.product_name,
            }
            for sale in sales
        ]

    @staticmethod
    def _dated_frame(records: list[SalesRecord], key_fn: Callable, key: str) -> pd.DataFrame:
        """Frame of (key, amount); undated rows are dropped and logged."""
        dated = [sale for sale in records if sale.date is not None]
        skipped = len(records) - len(dated)
        if skipped:
            logger.warning("[ResponseBuilder] %d sales rows without a date excluded from grouping", skipped)
        return pd.DataFrame(
            {
                key: [key_fn(sale.date) for sale in dated],
                "amount": [sale.amount for sale in dated],
            },
            columns=[key, "amount"],
        )

    # Trend

    def monthly_totals(self, records: list[SalesRecord]) -> list[dict]:
        """Sum sales per YYYY-MM period, ascending by period."""
        frame = self._dated_frame(records, format_month_key, "period")
        if frame.empty:
            return []
        monthly = frame.groupby("period", sort=True)["amount"].sum()
        return [{"period": period, "value": float(value)} for period, value in monthly.items()]

    def build_trend(self, records: list[SalesRecord]) -> ResponsePayload:
        data = self.monthly_totals(records)

        if len(data) >= 2:
            previous = data[-2]["value"]
            last = data[-1]["value"]
            growth, is_valid = ComparisonService.calculate_percentage_change(
                last, previous, format_result=False
            )
            if is_valid:
                positive = growth >= 0
                growth_text = ComparisonService.format_percent(growth)
            else:
                positive = ComparisonService.is_positive_change(last, previous)
                growth_text = "N/A"
            direction = "Positive trend." if positive else "Negative trend."
            summary = f"Month-over-month growth: {growth_text}. {direction}"
        else:
            summary = f"Monthly trend data for {len(data)} months."

        return ResponsePayload.result(PayloadType.TREND, data, summary)

    # Customers

    def _recent_customers(self, records: list[CustomerRecord], keyword: str, ql: str) -> ResponsePayload:
        recent = records[:ConfigService.RECENT_ITEMS_LIMIT]
        return ResponsePayload.result(
            PayloadType.CUSTOMERS,
            self._customer_rows(recent),
            f"Found {len(recent)} recently added customers.",
        )

    def _active_customers(self, records: list[CustomerRecord], keyword: str, ql: str) -> ResponsePayload:
        now = self.now_provider()
        window = pd.Timedelta(days=ConfigService.ACTIVE_WINDOW_DAYS)
        active = [
            customer for customer in records
            if customer.last_active_at is not None and now - customer.last_active_at < window
        ]
        data = [
            {
                "name": customer.name,
                "email": customer.email,
                "lastActive": format_display_date(customer.last_active_at) or "Never",
            }
            for customer in active
        ]
        return ResponsePayload.result(
            PayloadType.CUSTOMERS,
            data,
            f"Found {len(active)} active users in the last {ConfigService.ACTIVE_WINDOW_DAYS} days.",
        )

    def _all_customers(self, records: list[CustomerRecord], keyword: str, ql: str) -> ResponsePayload:
        return ResponsePayload.result(
            PayloadType.CUSTOMERS,
            self._customer_rows(records),
            f"Found {len(records)} customers.",
        )

    @staticmethod
    def _customer_rows(customers: list[CustomerRecord]) -> list[dict]:
        return [
            {
                "name": customer.name,
                "email": customer.email,
                "joined": format_display_date(customer.created_at),
            }
            for customer in customers
        ]

    # Insights

    def _high_priority_insights(self, records: list[InsightRecord], keyword: str, ql: str) -> ResponsePayload:
        high = [insight for insight in records if insight.priority.lower() == "high"]
        return ResponsePayload.result(
            PayloadType.INSIGHTS,
            self._insight_rows(high),
            f"Found {len(high)} high priority insights.",
        )

    def _insights_by_category(self, records: list[InsightRecord], category: str, ql: str) -> ResponsePayload:
        filtered = [insight for insight in records if insight.category.lower() == category]
        data = [
            {
                "title": insight.title,
                "description": insight.description,
                "priority": insight.priority,
            }
            for insight in filtered
        ]
        return ResponsePayload.result(
            PayloadType.INSIGHTS, data, f"Found {len(filtered)} insights in the {category} category."
        )

    def _all_insights(self, records: list[InsightRecord], keyword: str, ql: str) -> ResponsePayload:
        return ResponsePayload.result(
            PayloadType.INSIGHTS,
            self._insight_rows(records),
            f"Retrieved {len(records)} business insights.",
        )

    @staticmethod
    def _insight_rows(insights: list[InsightRecord]) -> list[dict]:
        return [
            {
                "title": insight.title,
                "description": insight.description,
                "category": insight.category,
                "priority": insight.priority,
            }
            for insight in insights
        ]
