"""
Response Payload
Tagged response union returned by the query interpreter.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class PayloadType(Enum):
    """Payload discriminator."""
    SUMMARY = "summary"
    SALES = "sales"
    TREND = "trend"
    CUSTOMERS = "customers"
    INSIGHTS = "insights"
    STORY = "story"
    ERROR = "error"
    UNKNOWN = "unknown"


FAILURE_TYPES = frozenset({PayloadType.ERROR, PayloadType.UNKNOWN})


@dataclass(frozen=True)
class ResponsePayload:
    """
    One fully formed response.

    Result payloads carry `data` and a human-readable `summary`; failure
    payloads (error/unknown) carry only `message`.
    """
    type: PayloadType
    data: Any = None
    summary: Optional[str] = None
    message: Optional[str] = None

    def __post_init__(self):
        if self.type in FAILURE_TYPES:
            if not self.message or self.data is not None or self.summary is not None:
                raise ValueError(f"{self.type.value} payload takes a message only")
        elif self.summary is None or self.data is None or self.message is not None:
            raise ValueError(f"{self.type.value} payload needs data and summary")

    @classmethod
    def result(cls, payload_type: PayloadType, data: Any, summary: str) -> "ResponsePayload":
        return cls(type=payload_type, data=data, summary=summary)

    @classmethod
    def failure(cls, payload_type: PayloadType, message: str) -> "ResponsePayload":
        return cls(type=payload_type, message=message)

    @property
    def is_failure(self) -> bool:
        return self.type in FAILURE_TYPES

    def to_dict(self) -> dict:
        """JSON-ready form with a `type` discriminator."""
        if self.is_failure:
            return {"type": self.type.value, "message": self.message}
        return {"type": self.type.value, "data": self.data, "summary": self.summary}
