"""
Services package for the Voice Insights dashboard.
Provides business logic separation from UI components.
"""

from .config_service import ConfigService, get_config
from .error_handling_service import (
    DataAccessError,
    ErrorHandlingService,
    ErrorCategory,
    get_error_handler,
)
from .comparison_service import ComparisonService
from .record_normalization_service import (
    CustomerRecord,
    InsightRecord,
    RecordNormalizationService,
    SalesRecord,
)
from .response_payload import PayloadType, ResponsePayload
from .intent_classifier_service import Intent, IntentClassifierService
from .response_builder_service import ResponseBuilderService
from .data_query_service import DataQueryService
from .story_service import StoryService
from .query_interpreter_service import QueryInterpreterService
from .speech_service import (
    SpeechCaptureDevice,
    SpeechSynthesisDevice,
    UnsupportedSpeechDevice,
)
from .voice_assistant_service import (
    AssistantReply,
    AssistantState,
    VoiceAssistantService,
    compose_spoken_response,
)
from .demo_data_service import DemoDataService
from .data_formatting_service import DataFormattingService

__all__ = [
    'ConfigService',
    'get_config',
    'DataAccessError',
    'ErrorHandlingService',
    'ErrorCategory',
    'get_error_handler',
    'ComparisonService',
    'CustomerRecord',
    'InsightRecord',
    'RecordNormalizationService',
    'SalesRecord',
    'PayloadType',
    'ResponsePayload',
    'Intent',
    'IntentClassifierService',
    'ResponseBuilderService',
    'DataQueryService',
    'StoryService',
    'QueryInterpreterService',
    'SpeechCaptureDevice',
    'SpeechSynthesisDevice',
    'UnsupportedSpeechDevice',
    'AssistantReply',
    'AssistantState',
    'VoiceAssistantService',
    'compose_spoken_response',
    'DemoDataService',
    'DataFormattingService',
]
