import asyncio
import threading

import pytest

from services.response_payload import PayloadType, ResponsePayload
from services.speech_service import UnsupportedSpeechDevice
from services.voice_assistant_service import (
    STOPPED_SPEAKING_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    AssistantState,
    VoiceAssistantService,
    compose_spoken_response,
)

TREND = ResponsePayload.result(
    PayloadType.TREND,
    [{"period": "2023-01", "value": 100.0}, {"period": "2023-02", "value": 150.0}],
    "Month-over-month growth: 50.0%. Positive trend.",
)


class FakeCapture:
    """Returns a scripted transcript, or blocks until stop() when none is scripted."""

    def __init__(self, transcript=None, supported=True):
        self.transcript = transcript
        self.supported = supported
        self.stops = 0
        self._stopped = None

    def is_supported(self):
        return self.supported

    async def listen(self):
        if self.transcript is not None:
            return self.transcript
        self._stopped = asyncio.Event()
        await self._stopped.wait()
        return None

    def stop(self):
        self.stops += 1
        if self._stopped is not None:
            self._stopped.set()


class FakeSynthesis:
    def __init__(self, available=True, speaking=False):
        self.available = available
        self.speaking = speaking
        self.spoken = []
        self.stops = 0

    def is_available(self):
        return self.available

    def speak(self, text):
        self.spoken.append(text)

    def stop(self):
        self.stops += 1
        self.speaking = False

    def is_speaking_now(self):
        return self.speaking


class StubInterpreter:
    def __init__(self, payload=TREND, error=None):
        self.payload = payload
        self.error = error
        self.questions = []

    def query(self, question):
        self.questions.append(question)
        if self.error is not None:
            raise self.error
        return self.payload


def make_assistant(transcript=None, interpreter=None, **kwargs):
    capture = FakeCapture(transcript)
    synthesis = FakeSynthesis()
    assistant = VoiceAssistantService(interpreter or StubInterpreter(), capture, synthesis, **kwargs)
    return assistant, capture, synthesis


def test_spoken_question_is_answered_and_spoken():
    assistant, _, synthesis = make_assistant("show me the trend")

    reply = asyncio.run(assistant.toggle_listening())

    assert reply.transcript == "show me the trend"
    assert reply.payload == TREND
    assert reply.message == "Month-over-month growth: 50.0%. Positive trend."
    assert synthesis.spoken == [reply.message]
    assert assistant.state == AssistantState.IDLE


def test_toggle_while_listening_stops_without_a_query():
    interpreter = StubInterpreter()
    assistant, capture, _ = make_assistant(interpreter=interpreter)

    async def scenario():
        listening = asyncio.create_task(assistant.toggle_listening())
        await asyncio.sleep(0)
        assert assistant.state == AssistantState.LISTENING
        assert assistant.voice_controls_enabled
        assert await assistant.toggle_listening() is None
        return await listening

    assert asyncio.run(scenario()) is None
    assert capture.stops == 1
    assert interpreter.questions == []
    assert assistant.state == AssistantState.IDLE


def test_stop_speaking_bypasses_interpreter():
    interpreter = StubInterpreter()
    assistant, _, synthesis = make_assistant("please STOP SPEAKING now", interpreter=interpreter)

    reply = asyncio.run(assistant.toggle_listening())

    assert reply.message == STOPPED_SPEAKING_MESSAGE
    assert reply.payload is None
    assert synthesis.stops == 1
    assert interpreter.questions == []


def test_interpreter_runs_off_the_event_loop_thread():
    loop_threads = []
    query_threads = []

    class ThreadRecordingInterpreter(StubInterpreter):
        def query(self, question):
            query_threads.append(threading.get_ident())
            return super().query(question)

    assistant, _, _ = make_assistant(interpreter=ThreadRecordingInterpreter())

    async def scenario():
        loop_threads.append(threading.get_ident())
        return await assistant.submit_text("trend")

    assert asyncio.run(scenario()).payload == TREND
    assert query_threads and query_threads[0] != loop_threads[0]


def test_typed_question_goes_through_interpreter():
    seen = []
    interpreter = StubInterpreter()
    assistant, _, _ = make_assistant(interpreter=interpreter, on_query=seen.append)

    reply = asyncio.run(assistant.submit_text("growth trend"))

    assert reply.payload == TREND
    assert interpreter.questions == ["growth trend"]
    assert seen == ["growth trend"]


@pytest.mark.parametrize("text", ["", "   ", None])
def test_blank_typed_question_is_ignored(text):
    interpreter = StubInterpreter()
    assistant, _, _ = make_assistant(interpreter=interpreter)

    assert asyncio.run(assistant.submit_text(text)) is None
    assert interpreter.questions == []


def test_typed_question_rejected_while_busy():
    interpreter = StubInterpreter()
    assistant, _, _ = make_assistant(interpreter=interpreter)
    assistant.state = AssistantState.PROCESSING

    assert asyncio.run(assistant.submit_text("sales")) is None
    assert interpreter.questions == []
    assert not assistant.voice_controls_enabled


def test_interpreter_exception_becomes_apology():
    interpreter = StubInterpreter(error=RuntimeError("boom"))
    assistant, _, synthesis = make_assistant(interpreter=interpreter)

    reply = asyncio.run(assistant.submit_text("sales"))

    assert reply.message == UNEXPECTED_ERROR_MESSAGE
    assert reply.payload is None
    assert synthesis.spoken == [UNEXPECTED_ERROR_MESSAGE]
    assert assistant.state == AssistantState.IDLE


def test_speech_disabled_answers_silently():
    assistant, _, synthesis = make_assistant(speech_enabled=False)

    reply = asyncio.run(assistant.submit_text("trend"))

    assert reply.message
    assert synthesis.spoken == []


def test_toggle_speech_cuts_off_current_speech():
    assistant, _, synthesis = make_assistant()
    synthesis.speaking = True

    assert assistant.toggle_speech() is False
    assert synthesis.stops == 1
    assert assistant.toggle_speech() is True


def test_unsupported_devices_disable_voice_but_keep_typing():
    device = UnsupportedSpeechDevice()
    interpreter = StubInterpreter()
    assistant = VoiceAssistantService(interpreter, device, device)

    assert not assistant.is_supported
    assert not assistant.voice_controls_enabled
    assert asyncio.run(assistant.toggle_listening()) is None

    reply = asyncio.run(assistant.submit_text("trend"))
    assert reply.payload == TREND
    assistant.close()


def test_close_releases_devices():
    assistant, capture, synthesis = make_assistant()
    assistant.close()

    assert capture.stops == 1
    assert synthesis.stops == 1


# Spoken replies

def test_spoken_summary():
    payload = ResponsePayload.result(
        PayloadType.SUMMARY,
        {"total": "350.00", "count": 2, "currency": "USD", "metric": "Revenue"},
        "Total revenue: $350.00",
    )
    assert compose_spoken_response(payload) == "The total revenue is $350.00 from 2 transactions."


def test_spoken_sales_adds_total():
    payload = ResponsePayload.result(
        PayloadType.SALES,
        [{"date": "3/1/2024", "amount": 10.0}, {"date": "3/2/2024", "amount": 15.5}],
        "Found sales data for 2 days.",
    )
    assert compose_spoken_response(payload) == "I found 2 sales records. The total amount is $25.50."


def test_spoken_insights_reads_top_three():
    data = [{"title": f"T{i}", "description": f"D{i}.", "priority": "High"} for i in range(5)]
    payload = ResponsePayload.result(PayloadType.INSIGHTS, data, "Retrieved 5 business insights.")

    spoken = compose_spoken_response(payload)

    assert spoken.startswith("Retrieved 5 business insights. Here are the top insights: 1: T0. D0.")
    assert "3: T2." in spoken
    assert "T3" not in spoken


@pytest.mark.parametrize("payload,expected", [
    (ResponsePayload.failure(PayloadType.UNKNOWN, "?"), "I didn't understand that query. Could you please try again?"),
    (ResponsePayload.failure(PayloadType.ERROR, "x"), "I encountered an error processing your request. Please try again."),
    (ResponsePayload.result(PayloadType.CUSTOMERS, [{}, {}], "Found 2 customers."), "I found 2 customer records."),
])
def test_spoken_fixed_phrases(payload, expected):
    assert compose_spoken_response(payload) == expected
