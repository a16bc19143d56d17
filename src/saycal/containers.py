"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from saycal.adapters.memory_meal_log_repository import InMemoryMealLogRepository
from saycal.adapters.openai_nutrition_client import OpenAINutritionClient
from saycal.adapters.openai_transcription_client import HttpxTranscriptionClient
from saycal.adapters.supabase_user_profile_repository import (
    SupabaseUserProfileRepository,
)
from saycal.config import Settings
from saycal.services.estimation import NutritionEstimationService
from saycal.services.meals import MealLogService
from saycal.services.profiles import ProfileService
from saycal.services.stats import DailySummaryService
from saycal.services.transcription import TranscriptionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    estimation_service: NutritionEstimationService
    transcription_service: TranscriptionService
    meal_log_service: MealLogService
    daily_summary_service: DailySummaryService
    profile_service: ProfileService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    profile_repository = SupabaseUserProfileRepository(supabase_client)
    nutrition_client = OpenAINutritionClient.create(
        resolved_settings.openai_api_key,
        base_url=resolved_settings.openai_base_url,
        timeout=resolved_settings.request_timeout_seconds,
    )
    transcription_client = HttpxTranscriptionClient.create(
        resolved_settings.openai_api_key,
        base_url=resolved_settings.openai_base_url,
        timeout=resolved_settings.request_timeout_seconds,
    )
    estimation_service = NutritionEstimationService(
        client=nutrition_client,
        model=resolved_settings.openai_model,
        temperature=resolved_settings.openai_temperature,
        max_output_tokens=resolved_settings.openai_max_output_tokens,
        web_search=resolved_settings.openai_web_search,
        store=resolved_settings.openai_store,
    )
    transcription_service = TranscriptionService(
        client=transcription_client,
        model=resolved_settings.transcription_model,
        default_format=resolved_settings.default_audio_format,
    )
    meal_log_service = MealLogService(
        repository=InMemoryMealLogRepository(),
        estimation_service=estimation_service,
        transcription_service=transcription_service,
    )
    daily_summary_service = DailySummaryService(meal_log_service)
    profile_service = ProfileService(
        repository=profile_repository,
        default_goal_calories=resolved_settings.default_goal_calories,
    )

    async def close_resources() -> None:
        await meal_log_service.wait_pending()
        await transcription_client.close()
        await nutrition_client.client.close()

    return AppContainer(
        settings=resolved_settings,
        estimation_service=estimation_service,
        transcription_service=transcription_service,
        meal_log_service=meal_log_service,
        daily_summary_service=daily_summary_service,
        profile_service=profile_service,
        close_resources=close_resources,
    )
