"""OpenAI audio transcription client using httpx."""

from dataclasses import dataclass

import httpx

from saycal.errors import ProviderTransportError, SchemaViolationError
from saycal.services.transcription import TranscriptionClient

_PROVIDER = "openai"


@dataclass
class HttpxTranscriptionClient(TranscriptionClient):
    """Transcription client posting multipart audio to OpenAI."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 60.0

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout: float = 60.0
    ) -> "HttpxTranscriptionClient":
        """Create a transcription client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def transcribe(
        self, *, audio: bytes, audio_format: str, model: str
    ) -> dict[str, object]:
        """Upload audio and return the provider's JSON result."""
        url = f"{self.base_url}/audio/transcriptions"
        try:
            response = await self.http_client.post(
                url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                files={
                    "file": (f"audio.{audio_format}", audio, f"audio/{audio_format}")
                },
                data={"model": model},
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise ProviderTransportError(
                _PROVIDER, f"Transcription request failed: {exc}"
            ) from exc
        if response.is_error:
            raise ProviderTransportError(
                _PROVIDER,
                f"Transcription returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise SchemaViolationError("Transcription returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise SchemaViolationError("Transcription result must be a JSON object")
        return payload

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
