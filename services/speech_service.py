"""
Speech Service
Capability contracts for speech capture and synthesis devices, injected into
the voice assistant.
"""

from typing import Optional, Protocol


class SpeechCaptureDevice(Protocol):
    """Microphone side: produces one final transcript per listen()."""

    def is_supported(self) -> bool: ...

    async def listen(self) -> Optional[str]:
        """Await a final transcript; None when stop() ends capture first."""
        ...

    def stop(self) -> None: ...


class SpeechSynthesisDevice(Protocol):
    """Speaker side."""

    def is_available(self) -> bool: ...

    def speak(self, text: str) -> None: ...

    def stop(self) -> None: ...

    def is_speaking_now(self) -> bool: ...


class UnsupportedSpeechDevice:
    """Stand-in for environments without speech hardware (e.g. a server-rendered page)."""

    def is_supported(self) -> bool:
        return False

    def is_available(self) -> bool:
        return False

    async def listen(self) -> Optional[str]:
        return None

    def speak(self, text: str) -> None:
        return None

    def stop(self) -> None:
        return None

    def is_speaking_now(self) -> bool:
        return False
