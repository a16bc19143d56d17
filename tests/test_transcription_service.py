"""Tests for the transcription service."""

import asyncio
import base64

import pytest

from saycal.errors import AudioDecodeError, SchemaViolationError
from saycal.services.transcription import TranscriptionService, decode_audio
from tests.conftest import FakeTranscriptionClient


def _encoded(data: bytes = b"fake-audio") -> str:
    return base64.b64encode(data).decode()


def test_transcribe_uses_default_format() -> None:
    client = FakeTranscriptionClient(text="a banana")
    service = TranscriptionService(client=client)

    result = asyncio.run(service.transcribe(_encoded()))

    assert result.text == "a banana"
    assert result.raw == {"text": "a banana"}
    assert client.uploads == [(b"fake-audio", "webm", "whisper-1")]


def test_transcribe_uses_requested_format() -> None:
    client = FakeTranscriptionClient()
    service = TranscriptionService(client=client, model="whisper-large")

    asyncio.run(service.transcribe(_encoded(), audio_format="m4a", timestamp=1.5))

    assert client.uploads[0][1:] == ("m4a", "whisper-large")


@pytest.mark.parametrize("payload", [None, "", "not base64!!"])
def test_bad_audio_fails_before_upload(payload: str | None) -> None:
    client = FakeTranscriptionClient()
    service = TranscriptionService(client=client)

    with pytest.raises(AudioDecodeError):
        asyncio.run(service.transcribe(payload))

    assert client.uploads == []


def test_decode_audio() -> None:
    assert decode_audio(_encoded(b"\x00\x01")) == b"\x00\x01"


def test_result_without_text_is_schema_violation() -> None:
    class _NoText(FakeTranscriptionClient):
        async def transcribe(self, *, audio, audio_format, model):  # type: ignore[no-untyped-def]
            return {"language": "en"}

    service = TranscriptionService(client=_NoText())

    with pytest.raises(SchemaViolationError):
        asyncio.run(service.transcribe(_encoded()))
