"""Shared test fixtures."""

import asyncio
import copy
from dataclasses import dataclass, field
from uuid import UUID

import pytest

from saycal.adapters.memory_meal_log_repository import InMemoryMealLogRepository
from saycal.config import Settings
from saycal.containers import AppContainer
from saycal.domain.profiles import UserProfile
from saycal.errors import ProviderTransportError
from saycal.services.estimation import NutritionClient, NutritionEstimationService
from saycal.services.meals import MealLogService
from saycal.services.profiles import ProfileService, UserProfileRepository
from saycal.services.stats import DailySummaryService
from saycal.services.transcription import TranscriptionClient, TranscriptionService

ANALYSIS_PAYLOAD: dict[str, object] = {
    "meal_type": "Lunch",
    "description": "Grilled chicken breast with rice and broccoli",
    "total_calories": 530,
    "total_protein": 45,
    "total_carbs": 50,
    "total_fats": 12,
    "breakdown": [
        {
            "item": "Grilled Chicken Breast",
            "portion": "6 oz",
            "calories": 280,
            "protein": 42,
            "carbs": 0,
            "fats": 6,
            "micros": ["Iron 1.5mg", "Vitamin B12 0.6mcg"],
        },
        {
            "item": "White Rice",
            "portion": "1 cup cooked",
            "calories": 200,
            "protein": 4,
            "carbs": 45,
            "fats": 0.5,
            "micros": [],
        },
        {
            "item": "Steamed Broccoli",
            "portion": "1 cup",
            "calories": 50,
            "protein": 4,
            "carbs": 10,
            "fats": 0.5,
            "micros": ["Vitamin C 81mg"],
        },
    ],
}


def success_payload(**overrides: object) -> dict[str, object]:
    data = copy.deepcopy(ANALYSIS_PAYLOAD)
    data.update(overrides)
    return {"success": True, "data": data, "error": None, "unparseable_meal": None}


def failure_payload(meal: str = "asdfghjkl") -> dict[str, object]:
    return {
        "success": False,
        "data": None,
        "error": "Could not identify food items",
        "unparseable_meal": meal,
    }


@dataclass
class FakeNutritionClient(NutritionClient):
    """Fake LLM client returning a fixed payload or raising an error."""

    payload: dict[str, object] = field(default_factory=success_payload)
    error: Exception | None = None
    gate: asyncio.Event | None = None
    prompts: list[str] = field(default_factory=list)
    requests: list[dict[str, object]] = field(default_factory=list)

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
        self.prompts.append(prompt)
        self.requests.append(
            {"model": model, "temperature": temperature, "schema": schema}
        )
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class FakeTranscriptionClient(TranscriptionClient):
    """Fake speech-to-text client recording uploads."""

    text: str = "two eggs and toast"
    error: Exception | None = None
    uploads: list[tuple[bytes, str, str]] = field(default_factory=list)

    async def transcribe(
        self, *, audio: bytes, audio_format: str, model: str
    ) -> dict[str, object]:
        self.uploads.append((audio, audio_format, model))
        if self.error is not None:
            raise self.error
        return {"text": self.text}


@dataclass
class InMemoryUserProfileRepository(UserProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[UUID, UserProfile] = field(default_factory=dict)

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        return self.profiles.get(user_id)

    def upsert_profile(self, profile: UserProfile) -> UserProfile:
        self.profiles[profile.user_id] = profile
        return profile


def transport_error(status_code: int | None = 503) -> ProviderTransportError:
    return ProviderTransportError(
        "openai",
        "OpenAI returned HTTP 503",
        status_code=status_code,
        body='{"error": "upstream unavailable"}',
    )


def build_meal_log_service(
    nutrition_client: FakeNutritionClient | None = None,
    transcription_client: FakeTranscriptionClient | None = None,
) -> MealLogService:
    return MealLogService(
        repository=InMemoryMealLogRepository(),
        estimation_service=NutritionEstimationService(
            client=nutrition_client or FakeNutritionClient(), model="gpt-4.1-mini"
        ),
        transcription_service=TranscriptionService(
            client=transcription_client or FakeTranscriptionClient()
        ),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="openai-key",
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
    )


@pytest.fixture
def nutrition_client() -> FakeNutritionClient:
    return FakeNutritionClient()


@pytest.fixture
def transcription_client() -> FakeTranscriptionClient:
    return FakeTranscriptionClient()


@pytest.fixture
def profile_repository() -> InMemoryUserProfileRepository:
    return InMemoryUserProfileRepository()


@pytest.fixture
def container(
    settings: Settings,
    nutrition_client: FakeNutritionClient,
    transcription_client: FakeTranscriptionClient,
    profile_repository: InMemoryUserProfileRepository,
) -> AppContainer:
    meal_log_service = build_meal_log_service(nutrition_client, transcription_client)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        estimation_service=meal_log_service.estimation_service,
        transcription_service=meal_log_service.transcription_service,
        meal_log_service=meal_log_service,
        daily_summary_service=DailySummaryService(meal_log_service),
        profile_service=ProfileService(profile_repository),
        close_resources=close_resources,
    )
