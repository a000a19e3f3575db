"""
Query Interpreter Service
Classifies a question, fetches the one snapshot its intent needs and builds
the response payload. Stateless across calls.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config_service import ConfigService
from .data_query_service import DataQueryService
from .error_handling_service import DataAccessError, ErrorCategory, ErrorHandlingService
from .intent_classifier_service import Intent, IntentClassifierService
from .record_normalization_service import RecordNormalizationService
from .response_builder_service import ResponseBuilderService
from .response_payload import PayloadType, ResponsePayload
from .story_service import StoryService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchPlan:
    """The single table fetch an intent requires."""
    table: str
    order_by: str
    ascending: bool
    limit: Optional[int] = None


FETCH_PLANS: dict[Intent, FetchPlan] = {
    Intent.SALES: FetchPlan("sales", "transaction_date", False, ConfigService.SALES_FETCH_LIMIT),
    Intent.CUSTOMER: FetchPlan("customers", "created_at", False, ConfigService.CUSTOMER_FETCH_LIMIT),
    Intent.TREND: FetchPlan("sales", "transaction_date", True),
    Intent.INSIGHT: FetchPlan("insights", "created_at", False),
}

_RECORD_PARSERS = {
    "sales": RecordNormalizationService.to_sales,
    "customers": RecordNormalizationService.to_customers,
    "insights": RecordNormalizationService.to_insights,
}


class QueryInterpreterService:
    """Service answering free-text business questions with typed payloads."""

    def __init__(
        self,
        data_service: DataQueryService,
        classifier: Optional[IntentClassifierService] = None,
        builder: Optional[ResponseBuilderService] = None,
        story_service: Optional[StoryService] = None,
    ):
        self.data_service = data_service
        self.classifier = classifier or IntentClassifierService()
        self.builder = builder or ResponseBuilderService()
        self.story_service = story_service or StoryService()

    def query(self, question: str) -> ResponsePayload:
        """
        Answer a question.

        Args:
            question: Free-text utterance

        Returns:
            A fully formed result payload, or an unknown/error payload
        """
        intent = self.classifier.classify(question)
        logger.info("[QueryInterpreter] intent=%s question=%r", intent.value, (question or "")[:100])

        if intent == Intent.UNKNOWN:
            return ResponsePayload.failure(PayloadType.UNKNOWN, ConfigService.UNKNOWN_QUERY_MESSAGE)

        try:
            records = self._fetch(FETCH_PLANS[intent])
        except DataAccessError as e:
            return self._error_payload(e, "fetch_snapshot", intent=intent.value)

        return self.builder.build(intent, question, records)

    def tell_story(self, timeframe: str = StoryService.QUARTERLY) -> ResponsePayload:
        """Build the business story payload from full sales, customers and insights."""
        try:
            sales = self._fetch(FetchPlan("sales", "transaction_date", True))
            customers = self._fetch(FetchPlan("customers", "created_at", False))
            insights = self._fetch(FetchPlan("insights", "created_at", False))
        except DataAccessError as e:
            return self._error_payload(e, "generate_story", timeframe=timeframe)

        story = self.story_service.generate_story(sales, len(customers), insights, timeframe)
        return ResponsePayload.result(PayloadType.STORY, story, story["summary"])

    def analytics_overview(self) -> dict:
        """
        Totals for the dashboard header.

        Returns:
            Dict with total_sales, categories [{name, value}], monthly_sales [{date, value}]

        Raises:
            DataAccessError: When the sales table cannot be read
        """
        sales = self._fetch(FetchPlan("sales", "transaction_date", True))

        categories: dict[str, float] = {}
        for sale in sales:
            categories[sale.category] = categories.get(sale.category, 0.0) + sale.amount

        monthly = self.builder.monthly_totals(sales)
        return {
            "total_sales": sum(sale.amount for sale in sales),
            "categories": [{"name": name, "value": value} for name, value in categories.items()],
            "monthly_sales": [{"date": m["period"], "value": m["value"]} for m in monthly],
        }

    def _fetch(self, plan: FetchPlan) -> list:
        """Fetch and parse one snapshot; any collaborator failure surfaces as DataAccessError."""
        try:
            rows = self.data_service.fetch_table(
                plan.table, plan.order_by, ascending=plan.ascending, limit=plan.limit
            )
        except DataAccessError:
            raise
        except Exception as e:
            raise DataAccessError(f"Fetch from {plan.table} failed: {e}", table=plan.table) from e
        return _RECORD_PARSERS[plan.table](rows)

    @staticmethod
    def _error_payload(error: DataAccessError, context: str, **details) -> ResponsePayload:
        error_info = ErrorHandlingService.process_error(
            error,
            context=context,
            category=ErrorCategory.DATA,
            user_message=ConfigService.QUERY_ERROR_MESSAGE,
            details={"table": error.table, **details},
        )
        ErrorHandlingService.log_error(error_info)
        return ResponsePayload.failure(PayloadType.ERROR, ConfigService.QUERY_ERROR_MESSAGE)
