"""Speech transcription service."""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Protocol

from saycal.errors import AudioDecodeError, SchemaViolationError

DEFAULT_AUDIO_FORMAT = "webm"

_logger = logging.getLogger(__name__)


class TranscriptionClient(Protocol):
    """Interface for speech-to-text providers."""

    async def transcribe(
        self, *, audio: bytes, audio_format: str, model: str
    ) -> dict[str, object]:
        """Return the provider's raw transcription result."""


@dataclass(frozen=True)
class TranscriptionResult:
    """Transcript text plus the provider payload it came from."""

    text: str
    raw: dict[str, object]


@dataclass
class TranscriptionService:
    """Service that decodes audio payloads and forwards them for transcription."""

    client: TranscriptionClient
    model: str = "whisper-1"
    default_format: str = DEFAULT_AUDIO_FORMAT

    async def transcribe(
        self,
        audio_b64: str | None,
        audio_format: str | None = None,
        timestamp: object = None,
    ) -> TranscriptionResult:
        """Decode base64 audio and transcribe it."""
        audio = decode_audio(audio_b64)
        return await self.transcribe_bytes(audio, audio_format, timestamp)

    async def transcribe_bytes(
        self,
        audio: bytes,
        audio_format: str | None = None,
        timestamp: object = None,
    ) -> TranscriptionResult:
        """Transcribe already-decoded audio."""
        resolved_format = audio_format or self.default_format
        _logger.info(
            "Transcribing audio",
            extra={
                "audio_bytes": len(audio),
                "audio_format": resolved_format,
                "captured_at": timestamp,
            },
        )
        raw = await self.client.transcribe(
            audio=audio, audio_format=resolved_format, model=self.model
        )
        text = raw.get("text")
        if not isinstance(text, str):
            raise SchemaViolationError("Transcription result has no text field")
        return TranscriptionResult(text=text, raw=raw)


def decode_audio(audio_b64: str | None) -> bytes:
    """Decode a base64 audio payload, failing before any network call."""
    if not audio_b64:
        raise AudioDecodeError("Missing audio data")
    try:
        audio = base64.b64decode(audio_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise AudioDecodeError("Audio is not valid base64") from exc
    if not audio:
        raise AudioDecodeError("Missing audio data")
    return audio
