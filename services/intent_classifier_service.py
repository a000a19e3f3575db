"""
Intent Classifier Service
Maps free-text questions to one of a closed set of intents by ordered keyword checks.
"""

from dataclasses import dataclass
from enum import Enum

from .config_service import ConfigService


class Intent(Enum):
    """Classified purpose of a query."""
    SALES = "sales_query"
    CUSTOMER = "customer_query"
    TREND = "trend_query"
    INSIGHT = "insight_query"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class KeywordRule:
    """Selects `intent` when any keyword is a substring of the lower-cased text."""
    intent: Intent
    keywords: tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


# Priority order, first match wins.
INTENT_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(Intent.SALES, ConfigService.SALES_KEYWORDS),
    KeywordRule(Intent.CUSTOMER, ConfigService.CUSTOMER_KEYWORDS),
    KeywordRule(Intent.TREND, ConfigService.TREND_KEYWORDS),
    KeywordRule(Intent.INSIGHT, ConfigService.INSIGHT_KEYWORDS),
)


class IntentClassifierService:
    """Service for classifying user questions into intents."""

    def __init__(self, rules: tuple[KeywordRule, ...] = INTENT_RULES):
        self.rules = rules

    def classify(self, question: str) -> Intent:
        """
        Classify a question.

        Matching is case-insensitive substring matching ("users" hits "user").
        Never raises; text matching no rule yields Intent.UNKNOWN.

        Args:
            question: User's natural language question

        Returns:
            The first matching Intent in rule order
        """
        ql = (question or "").lower()
        for rule in self.rules:
            if rule.matches(ql):
                return rule.intent
        return Intent.UNKNOWN
