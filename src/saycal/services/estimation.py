"""Meal nutrition estimation using LLMs."""

import logging
from dataclasses import dataclass
from typing import Protocol

from saycal.domain.nutrition import (
    NUTRITION_RESPONSE_SCHEMA,
    NutritionFailure,
    NutritionResponse,
    decode_nutrition_response,
)
from saycal.prompts import NUTRITION_SYSTEM_PROMPT, build_nutrition_prompt

_logger = logging.getLogger(__name__)


class NutritionClient(Protocol):
    """Interface for LLM nutrition estimation."""

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
        """Return the structured JSON object produced by the model."""


@dataclass
class NutritionEstimationService:
    """Service that turns a meal description into a nutrition response."""

    client: NutritionClient
    model: str
    temperature: float = 0.1
    max_output_tokens: int = 1500
    web_search: bool = True
    store: bool = False

    async def estimate(self, meal: str) -> NutritionResponse:
        """Estimate nutrition for a free-text meal description.

        Raises ``ProviderTransportError`` when the provider cannot be reached
        and ``SchemaViolationError`` when its answer breaks the contract.
        """
        raw = await self.client.complete(
            model=self.model,
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
            web_search=self.web_search,
            store=self.store,
            system_prompt=NUTRITION_SYSTEM_PROMPT,
            prompt=build_nutrition_prompt(meal),
            schema=NUTRITION_RESPONSE_SCHEMA,
        )
        response = decode_nutrition_response(raw)
        if isinstance(response, NutritionFailure):
            _logger.info("Meal not recognized as food: %s", response.error)
        else:
            _logger.info(
                "Meal estimated: %s kcal, %s items",
                response.analysis.total_calories,
                len(response.analysis.breakdown),
            )
        return response
