"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from saycal.api.models import (
    BiometricsRequest,
    CalculateCaloriesRequest,
    MealTextRequest,
    ProfileRequest,
    TranscribeRequest,
)
from saycal.app_logging import configure_logging
from saycal.containers import AppContainer
from saycal.domain.meals import DailySummary, LoggedMeal
from saycal.domain.nutrition import encode_nutrition_response
from saycal.domain.profiles import MacroSplit, UserProfile, profile_to_record
from saycal.errors import (
    AudioDecodeError,
    ProfileValidationError,
    ProviderTransportError,
    SchemaViolationError,
)
from saycal.services.profiles import (
    CalorieTargets,
    ProfileService,
    calculate_targets,
    format_height,
    format_weight,
)
from saycal.services.stats import meal_type_for


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.container.meal_log_service.cleanup_stale_loading_meals()
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        missing = any(error.get("type") == "missing" for error in exc.errors())
        message = "Missing required fields" if missing else "Invalid request body"
        return _error_response(status.HTTP_400_BAD_REQUEST, message, "validation")

    @app.exception_handler(ProviderTransportError)
    async def handle_transport_error(
        request: Request, exc: ProviderTransportError
    ) -> JSONResponse:
        logger.error(
            "Provider request failed: %s",
            exc,
            extra={"provider": exc.provider, "status_code": exc.status_code},
        )
        status_code = exc.status_code or status.HTTP_502_BAD_GATEWAY
        return _error_response(status_code, exc.body or str(exc), exc.kind)

    @app.exception_handler(SchemaViolationError)
    async def handle_schema_violation(
        request: Request, exc: SchemaViolationError
    ) -> JSONResponse:
        logger.error("Provider response violated schema: %s", exc)
        return _error_response(status.HTTP_502_BAD_GATEWAY, str(exc), exc.kind)

    @app.exception_handler(AudioDecodeError)
    async def handle_decode_error(
        request: Request, exc: AudioDecodeError
    ) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc), exc.kind)

    @app.exception_handler(ProfileValidationError)
    async def handle_profile_error(
        request: Request, exc: ProfileValidationError
    ) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc), exc.kind)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/calculate-calories")
    async def calculate_calories(
        payload: CalculateCaloriesRequest, request: Request
    ) -> dict[str, object]:
        """Estimate nutrition for a meal description."""
        state_container: AppContainer = request.app.state.container
        response = await state_container.estimation_service.estimate(
            payload.transcribed_meal
        )
        return encode_nutrition_response(response)

    @app.post("/transcribe")
    async def transcribe(
        payload: TranscribeRequest, request: Request
    ) -> dict[str, object]:
        """Transcribe base64 audio and pass the provider result through."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.transcription_service.transcribe(
            payload.audio, payload.format, payload.timestamp
        )
        return result.raw

    @app.post("/meals", status_code=status.HTTP_201_CREATED)
    async def log_meal(
        payload: MealTextRequest, request: Request, wait: bool = False
    ) -> dict[str, object]:
        """Log a typed meal; estimation runs in the background unless wait=true."""
        meal_service = request.app.state.container.meal_log_service
        if wait:
            meal = await meal_service.log_text(payload.text)
        else:
            meal = meal_service.submit_text(payload.text)
        return _meal_payload(meal)

    @app.post("/meals/audio", status_code=status.HTTP_201_CREATED)
    async def log_audio_meal(
        payload: TranscribeRequest, request: Request, wait: bool = False
    ) -> dict[str, object]:
        """Log a spoken meal; processing runs in the background unless wait=true."""
        meal_service = request.app.state.container.meal_log_service
        if wait:
            meal = await meal_service.log_audio(
                payload.audio, payload.format, payload.timestamp
            )
        else:
            meal = meal_service.submit_audio(
                payload.audio, payload.format, payload.timestamp
            )
        return _meal_payload(meal)

    @app.get("/meals", response_model=None)
    async def list_meals(
        request: Request, day: date | None = None, timezone: str = "UTC"
    ) -> dict[str, object] | JSONResponse:
        """List meals for a day (today by default)."""
        if not _is_valid_timezone(timezone):
            return _invalid_timezone(timezone)
        meal_service = request.app.state.container.meal_log_service
        resolved_day = day or datetime.now(tz=ZoneInfo(timezone)).date()
        meals = meal_service.list_meals_for_day(resolved_day, timezone)
        return {
            "day": resolved_day.isoformat(),
            "meals": [_meal_payload(meal) for meal in meals],
        }

    @app.delete("/meals", status_code=status.HTTP_204_NO_CONTENT)
    async def reset_meals(request: Request) -> Response:
        """Clear the whole meal log, cancelling pending estimates."""
        request.app.state.container.meal_log_service.reset()
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/meals/{meal_id}", response_model=None)
    async def get_meal(
        meal_id: UUID, request: Request
    ) -> dict[str, object] | JSONResponse:
        """Return one logged meal."""
        meal = request.app.state.container.meal_log_service.get_meal(meal_id)
        if meal is None:
            return _error_response(
                status.HTTP_404_NOT_FOUND, "Meal not found", "not_found"
            )
        return _meal_payload(meal)

    @app.delete("/meals/{meal_id}", response_model=None)
    async def delete_meal(meal_id: UUID, request: Request) -> Response:
        """Delete a meal; a pending estimate for it is discarded."""
        if not request.app.state.container.meal_log_service.delete_meal(meal_id):
            return _error_response(
                status.HTTP_404_NOT_FOUND, "Meal not found", "not_found"
            )
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/days/{day}/summary", response_model=None)
    async def day_summary(
        day: date,
        request: Request,
        timezone: str = "UTC",
        user_id: UUID | None = None,
    ) -> dict[str, object] | JSONResponse:
        """Return totals against the calorie goal and meals grouped by type."""
        if not _is_valid_timezone(timezone):
            return _invalid_timezone(timezone)
        state_container: AppContainer = request.app.state.container
        goal_calories = state_container.profile_service.get_goal_calories(user_id)
        summary = state_container.daily_summary_service.get_day(
            day, timezone, goal_calories
        )
        return _summary_payload(summary)

    @app.post("/profiles/targets")
    async def profile_targets(payload: BiometricsRequest) -> dict[str, object]:
        """Compute calorie and macro targets from biometrics."""
        targets = calculate_targets(
            payload.sex,
            payload.age,
            payload.height_cm,
            payload.weight_kg,
            payload.activity_level,
            payload.goal,
        )
        return _targets_payload(targets)

    @app.put("/profiles/{user_id}")
    async def save_profile(
        user_id: UUID, payload: ProfileRequest, request: Request
    ) -> dict[str, object]:
        """Create or update a user profile."""
        profile_service: ProfileService = request.app.state.container.profile_service
        profile = profile_service.build_profile(
            user_id=user_id,
            units_preference=payload.units_preference,
            sex=payload.sex,
            age=payload.age,
            height_cm=payload.height_cm,
            weight_kg=payload.weight_kg,
            activity_level=payload.activity_level,
            goal=payload.goal,
            dietary_preferences=payload.dietary_preferences,
            allergies=payload.allergies,
            target_calories=payload.target_calories,
            macro_split=_manual_split(payload),
        )
        stored = profile_service.save_profile(profile)
        return _profile_payload(profile_service, stored)

    @app.get("/profiles/{user_id}", response_model=None)
    async def get_profile(
        user_id: UUID, request: Request
    ) -> dict[str, object] | JSONResponse:
        """Return a stored user profile."""
        profile_service: ProfileService = request.app.state.container.profile_service
        profile = profile_service.get_profile(user_id)
        if profile is None:
            return _error_response(
                status.HTTP_404_NOT_FOUND, "Profile not found", "not_found"
            )
        return _profile_payload(profile_service, profile)

    return app


def _error_response(status_code: int, message: str, kind: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": message, "kind": kind}
    )


def _invalid_timezone(timezone: str) -> JSONResponse:
    return _error_response(
        status.HTTP_400_BAD_REQUEST, f"Unknown timezone: {timezone}", "validation"
    )


def _is_valid_timezone(value: str) -> bool:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def _manual_split(payload: ProfileRequest) -> MacroSplit | None:
    """Return a manual macro split when all three percentages are provided."""
    values = (payload.carbs_percent, payload.fats_percent, payload.protein_percent)
    if all(value is None for value in values):
        return None
    if any(value is None for value in values):
        raise ProfileValidationError(
            "carbs_percent, fats_percent and protein_percent must be set together"
        )
    return MacroSplit(
        carbs=payload.carbs_percent,
        fats=payload.fats_percent,
        protein=payload.protein_percent,
    )


def _meal_payload(meal: LoggedMeal) -> dict[str, object]:
    """Serialize a logged meal for API responses."""
    return {
        "id": str(meal.id),
        "timestamp": meal.timestamp.isoformat(),
        "transcription": meal.transcription,
        "nutrition_response": (
            encode_nutrition_response(meal.nutrition_response)
            if meal.nutrition_response is not None
            else None
        ),
        "is_loading": meal.is_loading,
        "error": (
            {"kind": meal.error.kind, "message": meal.error.message}
            if meal.error
            else None
        ),
        "meal_type": meal_type_for(meal),
    }


def _summary_payload(summary: DailySummary) -> dict[str, object]:
    totals = summary.totals
    return {
        "day": totals.day.isoformat(),
        "total_calories": totals.total_calories,
        "total_protein": totals.total_protein,
        "total_carbs": totals.total_carbs,
        "total_fats": totals.total_fats,
        "goal_calories": totals.goal_calories,
        "remaining_calories": totals.remaining_calories,
        "is_over_target": totals.is_over_target,
        "meals": [_meal_payload(meal) for meal in summary.meals],
        "groups": {
            meal_type: [str(meal.id) for meal in meals]
            for meal_type, meals in summary.groups.items()
        },
    }


def _targets_payload(targets: CalorieTargets) -> dict[str, object]:
    return {
        "target_calories": targets.target_calories,
        "carbs_percent": targets.split.carbs,
        "fats_percent": targets.split.fats,
        "protein_percent": targets.split.protein,
        "carbs_g": targets.grams.carbs_g,
        "fats_g": targets.grams.fats_g,
        "protein_g": targets.grams.protein_g,
    }


def _profile_payload(
    profile_service: ProfileService, profile: UserProfile
) -> dict[str, object]:
    grams = profile_service.macro_targets(profile)
    return {
        **profile_to_record(profile),
        "display_height": format_height(profile),
        "display_weight": format_weight(profile),
        "carbs_g": grams.carbs_g,
        "fats_g": grams.fats_g,
        "protein_g": grams.protein_g,
    }
