"""OpenAI Responses API client for nutrition estimation."""

import json
from dataclasses import dataclass

from openai import APIConnectionError, APIError, APIStatusError, AsyncOpenAI

from saycal.errors import ProviderTransportError, SchemaViolationError
from saycal.services.estimation import NutritionClient

_PROVIDER = "openai"


@dataclass
class OpenAINutritionClient(NutritionClient):
    """Nutrition client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(
        cls, api_key: str, base_url: str | None = None, timeout: float = 60.0
    ) -> "OpenAINutritionClient":
        """Create an OpenAI nutrition client without SDK retries."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
            )
        )

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        temperature: float,
        max_output_tokens: int,
        web_search: bool,
        store: bool,
        system_prompt: str,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Call OpenAI Responses API with structured outputs."""
        request_payload: dict[str, object] = {
            "model": model,
            "temperature": temperature,
            "max_output_tokens": max_output_tokens,
            "input": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "nutrition_response",
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if web_search:
            request_payload["tools"] = [{"type": "web_search"}]
            request_payload["tool_choice"] = "auto"

        try:
            response = await self.client.responses.create(**request_payload)
        except APIStatusError as exc:
            raise ProviderTransportError(
                _PROVIDER,
                f"OpenAI returned HTTP {exc.status_code}",
                status_code=exc.status_code,
                body=exc.response.text,
            ) from exc
        except APIConnectionError as exc:
            raise ProviderTransportError(
                _PROVIDER, f"OpenAI request failed: {exc}"
            ) from exc
        except APIError as exc:
            raise ProviderTransportError(
                _PROVIDER, f"OpenAI returned an unusable response: {exc}"
            ) from exc

        output_text = response.output_text
        if not output_text:
            raise SchemaViolationError("OpenAI returned an empty response")
        try:
            return json.loads(output_text)
        except json.JSONDecodeError as exc:
            raise SchemaViolationError("OpenAI returned invalid JSON") from exc
