"""Meal logging service.

Each submission inserts a loading placeholder, then a background task
transcribes (for audio) and estimates the meal. Tasks only hold the meal id;
every write-back looks the meal up again and is dropped if the user deleted
it while the task was in flight.
"""

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from saycal.domain.meals import LoggedMeal, MealError
from saycal.domain.nutrition import NutritionResponse
from saycal.errors import SayCalError
from saycal.services.estimation import NutritionEstimationService
from saycal.services.transcription import TranscriptionService, decode_audio

_logger = logging.getLogger(__name__)


class MealLogRepository(Protocol):
    """Storage interface for logged meals."""

    def insert(self, meal: LoggedMeal) -> None:
        """Store a new meal."""

    def get(self, meal_id: UUID) -> LoggedMeal | None:
        """Return a meal by id."""

    def update(self, meal: LoggedMeal) -> bool:
        """Replace a stored meal; return False if it no longer exists."""

    def delete(self, meal_id: UUID) -> LoggedMeal | None:
        """Remove a meal and return it, if present."""

    def list_between(self, start: datetime, end: datetime) -> list[LoggedMeal]:
        """Return meals with start <= timestamp < end, oldest first."""

    def list_all(self) -> list[LoggedMeal]:
        """Return every stored meal, oldest first."""

    def clear(self) -> int:
        """Remove every meal and return how many were removed."""


@dataclass
class MealLogService:
    """Service that logs meals and backfills their nutrition."""

    repository: MealLogRepository
    estimation_service: NutritionEstimationService
    transcription_service: TranscriptionService
    _tasks: dict[UUID, asyncio.Task[LoggedMeal | None]] = field(
        default_factory=dict, init=False
    )

    def create_loading_meal(
        self, transcription: str | None, timestamp: datetime | None = None
    ) -> LoggedMeal:
        """Insert a placeholder meal in the loading state."""
        meal = LoggedMeal(
            timestamp=timestamp or datetime.now(tz=UTC),
            transcription=transcription,
            is_loading=True,
        )
        self.repository.insert(meal)
        return meal

    def submit_text(self, text: str) -> LoggedMeal:
        """Log a typed meal and estimate it in the background."""
        meal = self.create_loading_meal(transcription=text)
        self._schedule(meal.id, self.process_text(meal.id, text))
        return meal

    def submit_audio(
        self,
        audio_b64: str | None,
        audio_format: str | None = None,
        timestamp: object = None,
    ) -> LoggedMeal:
        """Log a spoken meal; transcription and estimation run in the background."""
        audio = decode_audio(audio_b64)
        meal = self.create_loading_meal(transcription=None)
        self._schedule(
            meal.id, self.process_audio(meal.id, audio, audio_format, timestamp)
        )
        return meal

    async def log_text(self, text: str) -> LoggedMeal:
        """Log a typed meal and wait for its estimate."""
        meal = self.create_loading_meal(transcription=text)
        return await self.process_text(meal.id, text) or meal

    async def log_audio(
        self,
        audio_b64: str | None,
        audio_format: str | None = None,
        timestamp: object = None,
    ) -> LoggedMeal:
        """Log a spoken meal and wait for transcription and estimate."""
        audio = decode_audio(audio_b64)
        meal = self.create_loading_meal(transcription=None)
        return (
            await self.process_audio(meal.id, audio, audio_format, timestamp) or meal
        )

    async def process_text(self, meal_id: UUID, text: str) -> LoggedMeal | None:
        """Estimate a meal and write the result back."""
        try:
            response = await self.estimation_service.estimate(text)
        except SayCalError as exc:
            return self._fail(meal_id, exc)
        except Exception as exc:
            return self._fail_unexpected(meal_id, exc)
        return self._complete(meal_id, response)

    async def process_audio(
        self,
        meal_id: UUID,
        audio: bytes,
        audio_format: str | None = None,
        timestamp: object = None,
    ) -> LoggedMeal | None:
        """Transcribe, then estimate, a spoken meal."""
        try:
            transcript = await self.transcription_service.transcribe_bytes(
                audio, audio_format, timestamp
            )
        except SayCalError as exc:
            return self._fail(meal_id, exc)
        except Exception as exc:
            return self._fail_unexpected(meal_id, exc)
        meal = self._write_back(meal_id, transcription=transcript.text)
        if meal is None:
            return None
        return await self.process_text(meal_id, transcript.text)

    def get_meal(self, meal_id: UUID) -> LoggedMeal | None:
        return self.repository.get(meal_id)

    def delete_meal(self, meal_id: UUID) -> bool:
        """Delete a meal; any in-flight estimation for it is discarded."""
        deleted = self.repository.delete(meal_id)
        if deleted and deleted.is_loading:
            _logger.info("Deleted meal while loading", extra={"meal_id": str(meal_id)})
        return deleted is not None

    def list_meals_for_day(self, day: date, timezone_name: str) -> list[LoggedMeal]:
        """Return meals logged on a calendar day in the given timezone."""
        tz = ZoneInfo(timezone_name)
        start = datetime.combine(day, datetime.min.time(), tzinfo=tz)
        end = start + timedelta(days=1)
        return self.repository.list_between(start.astimezone(UTC), end.astimezone(UTC))

    def cleanup_stale_loading_meals(self) -> int:
        """Remove loading meals with no task still running for them."""
        removed = 0
        for meal in self.repository.list_all():
            if meal.is_loading and meal.id not in self._tasks:
                self.repository.delete(meal.id)
                removed += 1
        if removed:
            _logger.info("Removed %s stale loading meal(s)", removed)
        return removed

    def reset(self) -> int:
        """Cancel in-flight work and clear the log, e.g. on logout."""
        for task in list(self._tasks.values()):
            task.cancel()
        self._tasks.clear()
        removed = self.repository.clear()
        _logger.info("Cleared meal log", extra={"removed": removed})
        return removed

    async def wait_pending(self) -> None:
        """Wait for every in-flight meal task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    def _schedule(
        self, meal_id: UUID, coro: Coroutine[object, object, LoggedMeal | None]
    ) -> None:
        task = asyncio.create_task(coro)
        self._tasks[meal_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(meal_id, None))

    def _complete(
        self, meal_id: UUID, response: NutritionResponse
    ) -> LoggedMeal | None:
        return self._write_back(
            meal_id, nutrition_response=response, is_loading=False, error=None
        )

    def _fail(self, meal_id: UUID, exc: SayCalError) -> LoggedMeal | None:
        _logger.warning(
            "Meal processing failed: %s",
            exc,
            extra={"meal_id": str(meal_id), "error_kind": exc.kind},
        )
        return self._write_back(
            meal_id,
            is_loading=False,
            error=MealError(kind=exc.kind, message=str(exc)),
        )

    def _fail_unexpected(self, meal_id: UUID, exc: Exception) -> LoggedMeal | None:
        _logger.exception(
            "Unexpected error while processing meal", extra={"meal_id": str(meal_id)}
        )
        return self._write_back(
            meal_id,
            is_loading=False,
            error=MealError(
                kind=SayCalError.kind, message=str(exc) or type(exc).__name__
            ),
        )

    def _write_back(self, meal_id: UUID, **changes: object) -> LoggedMeal | None:
        current = self.repository.get(meal_id)
        if current is None:
            _logger.info(
                "Dropping result for deleted meal", extra={"meal_id": str(meal_id)}
            )
            return None
        updated = replace(current, **changes)
        if not self.repository.update(updated):
            _logger.info(
                "Dropping result for deleted meal", extra={"meal_id": str(meal_id)}
            )
            return None
        return updated
