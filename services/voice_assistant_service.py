"""
Voice Assistant Service
Front controller for spoken and typed questions. Drives one session through
Idle -> Listening -> Processing -> Idle (speech) or Idle -> Processing -> Idle
(typed), with at most one utterance in flight.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .config_service import ConfigService
from .error_handling_service import ErrorCategory, ErrorHandlingService
from .query_interpreter_service import QueryInterpreterService
from .response_payload import PayloadType, ResponsePayload
from .speech_service import SpeechCaptureDevice, SpeechSynthesisDevice

logger = logging.getLogger(__name__)

STOPPED_SPEAKING_MESSAGE = "I've stopped speaking."
UNEXPECTED_ERROR_MESSAGE = "I'm sorry, I encountered an error processing your request."


class AssistantState(Enum):
    """Session state."""
    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"


@dataclass(frozen=True)
class AssistantReply:
    """What the assistant heard and answered. `payload` is None for system commands and failures."""
    transcript: str
    message: str
    payload: Optional[ResponsePayload] = None


def compose_spoken_response(payload: ResponsePayload) -> str:
    """Turn a payload into a short spoken confirmation."""
    data = payload.data

    if payload.type == PayloadType.UNKNOWN:
        return "I didn't understand that query. Could you please try again?"
    if payload.type == PayloadType.ERROR:
        return "I encountered an error processing your request. Please try again."
    if payload.type == PayloadType.SUMMARY:
        return (
            f"The total {data['metric'].lower()} is ${data['total']} "
            f"from {data['count']} transactions."
        )
    if payload.type == PayloadType.SALES:
        spoken = f"I found {len(data)} sales records. "
        if data:
            total = sum(item.get('amount') or 0 for item in data)
            spoken += f"The total amount is {ConfigService.format_currency(total)}."
        return spoken
    if payload.type == PayloadType.TREND:
        return payload.summary or "I've analyzed the trends in your data."
    if payload.type == PayloadType.CUSTOMERS:
        return f"I found {len(data)} customer records."
    if payload.type == PayloadType.INSIGHTS:
        spoken = payload.summary or "I've identified some key insights from your data."
        if data:
            spoken += " Here are the top insights: "
            for index, insight in enumerate(data[:ConfigService.SPOKEN_TOP_INSIGHTS], start=1):
                spoken += f"{index}: {insight['title']}. {insight['description']} "
        return spoken
    if payload.type == PayloadType.STORY:
        return f"{data['title']}. {data['summary']}"
    return "I found some data that might interest you. Check the dashboard for details."


class VoiceAssistantService:
    """Service orchestrating capture, interpretation and spoken replies for one session."""

    def __init__(
        self,
        interpreter: QueryInterpreterService,
        capture: SpeechCaptureDevice,
        synthesis: SpeechSynthesisDevice,
        speech_enabled: bool = True,
        on_query: Optional[Callable[[str], None]] = None,
    ):
        self.interpreter = interpreter
        self.capture = capture
        self.synthesis = synthesis
        self.speech_enabled = speech_enabled
        self.on_query = on_query
        self.state = AssistantState.IDLE
        self.transcript = ""
        self.last_message = ""

        # Capability check happens once per session.
        self.is_supported = capture.is_supported() and synthesis.is_available()
        if not self.is_supported:
            logger.warning("[VoiceAssistant] Speech capture or synthesis unsupported; voice controls disabled")

    @property
    def voice_controls_enabled(self) -> bool:
        return self.is_supported and self.state != AssistantState.PROCESSING

    async def toggle_listening(self) -> Optional[AssistantReply]:
        """
        Start capture, or stop it if already listening.

        Returns:
            The reply for the captured utterance, or None when capture was
            stopped, unsupported, or a query is still processing
        """
        if not self.is_supported:
            return None
        if self.state == AssistantState.LISTENING:
            self.stop_listening()
            return None
        if self.state == AssistantState.PROCESSING:
            logger.info("[VoiceAssistant] Ignoring capture request while processing")
            return None

        self.state = AssistantState.LISTENING
        try:
            transcript = await self.capture.listen()
        except Exception as e:
            self.state = AssistantState.IDLE
            error_info = ErrorHandlingService.process_error(e, context="speech_capture", category=ErrorCategory.SPEECH)
            ErrorHandlingService.log_error(error_info)
            return None

        # stop_listening() may have run while we were awaiting the device.
        if self.state != AssistantState.LISTENING or not transcript:
            self.state = AssistantState.IDLE
            return None

        return await self._process(transcript)

    def stop_listening(self) -> None:
        """Cancel capture without producing a payload."""
        if self.state != AssistantState.LISTENING:
            return
        self.capture.stop()
        self.state = AssistantState.IDLE

    async def submit_text(self, text: str) -> Optional[AssistantReply]:
        """Typed path; rejected (None) unless the session is idle."""
        if self.state != AssistantState.IDLE:
            logger.info("[VoiceAssistant] Rejecting typed query while %s", self.state.value)
            return None
        if not (text or "").strip():
            return None
        return await self._process(text)

    async def _process(self, text: str) -> AssistantReply:
        self.state = AssistantState.PROCESSING
        self.transcript = text
        try:
            if ConfigService.STOP_SPEAKING_COMMAND in text.lower():
                if self.is_supported:
                    self.synthesis.stop()
                return AssistantReply(text, self._respond(STOPPED_SPEAKING_MESSAGE))

            # Blocking fetch runs off the event loop.
            payload = await asyncio.to_thread(self.interpreter.query, text)

            if self.on_query is not None:
                self.on_query(text)

            return AssistantReply(text, self._respond(compose_spoken_response(payload)), payload)
        except Exception as e:
            error_info = ErrorHandlingService.process_error(
                e, context="process_voice_command", category=ErrorCategory.SYSTEM
            )
            ErrorHandlingService.log_error(error_info)
            return AssistantReply(text, self._respond(UNEXPECTED_ERROR_MESSAGE))
        finally:
            self.state = AssistantState.IDLE

    def _respond(self, message: str) -> str:
        self.last_message = message
        if self.speech_enabled and self.is_supported:
            self.synthesis.speak(message)
        return message

    def toggle_speech(self) -> bool:
        """Flip spoken replies on/off, cutting off any current speech. Returns the new setting."""
        if self.is_supported and self.synthesis.is_speaking_now():
            self.synthesis.stop()
        self.speech_enabled = not self.speech_enabled
        return self.speech_enabled

    def close(self) -> None:
        """Release devices at session end."""
        if not self.is_supported:
            return
        self.capture.stop()
        self.synthesis.stop()
        self.state = AssistantState.IDLE
