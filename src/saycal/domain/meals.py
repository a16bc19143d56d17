"""Domain models for meal logging."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

from saycal.domain.nutrition import NutritionResponse


@dataclass(frozen=True)
class MealError:
    """Reason a meal left the loading state without a nutrition response."""

    kind: str
    message: str


@dataclass(frozen=True)
class LoggedMeal:
    """One logged eating event."""

    id: UUID = field(default_factory=uuid4)
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    transcription: str | None = None
    nutrition_response: NutritionResponse | None = None
    is_loading: bool = False
    error: MealError | None = None


@dataclass(frozen=True)
class DailyNutritionTotals:
    """Daily consumed macros against the calorie goal."""

    day: date
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fats: float
    goal_calories: float

    @property
    def remaining_calories(self) -> float:
        return self.goal_calories - self.total_calories

    @property
    def is_over_target(self) -> bool:
        return self.remaining_calories < 0


@dataclass(frozen=True)
class DailySummary:
    """Totals plus the day's meals grouped for display."""

    totals: DailyNutritionTotals
    meals: list[LoggedMeal]
    groups: dict[str, list[LoggedMeal]]
