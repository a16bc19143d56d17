"""User profile models driving calorie and macro targets."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class UnitsPreference(StrEnum):
    """Display units. Storage is always metric."""

    METRIC = "metric"
    IMPERIAL = "imperial"

    @property
    def display_name(self) -> str:
        if self is UnitsPreference.METRIC:
            return "Metric (kg, cm)"
        return "Imperial (lbs, ft/in)"


class Sex(StrEnum):
    """Biological sex used by the BMR equation."""

    MALE = "male"
    FEMALE = "female"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class ActivityLevel(StrEnum):
    """Activity level with its TDEE multiplier."""

    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly_active"
    MODERATELY_ACTIVE = "moderately_active"
    VERY_ACTIVE = "very_active"
    EXTREMELY_ACTIVE = "extremely_active"

    @property
    def multiplier(self) -> float:
        return _ACTIVITY_MULTIPLIERS[self]

    @property
    def display_name(self) -> str:
        return _ACTIVITY_NAMES[self]


_ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
    ActivityLevel.EXTREMELY_ACTIVE: 1.9,
}

_ACTIVITY_NAMES = {
    ActivityLevel.SEDENTARY: "Sedentary (little or no exercise)",
    ActivityLevel.LIGHTLY_ACTIVE: "Lightly Active (1-3 days/week)",
    ActivityLevel.MODERATELY_ACTIVE: "Moderately Active (3-5 days/week)",
    ActivityLevel.VERY_ACTIVE: "Very Active (6-7 days/week)",
    ActivityLevel.EXTREMELY_ACTIVE: "Extremely Active (physical job & daily exercise)",
}


class Goal(StrEnum):
    """Fitness goal with its daily calorie adjustment."""

    LOSE_WEIGHT = "lose_weight"
    MAINTAIN_WEIGHT = "maintain_weight"
    BUILD_MUSCLE = "build_muscle"
    GAIN_WEIGHT = "gain_weight"

    @property
    def calorie_adjustment(self) -> int:
        return _GOAL_ADJUSTMENTS[self]

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def calorie_adjustment_text(self) -> str:
        adjustment = self.calorie_adjustment
        if adjustment > 0:
            return f"+{adjustment} calories"
        if adjustment < 0:
            return f"{adjustment} calories"
        return "Maintain current weight"


_GOAL_ADJUSTMENTS = {
    Goal.LOSE_WEIGHT: -500,
    Goal.MAINTAIN_WEIGHT: 0,
    Goal.BUILD_MUSCLE: 300,
    Goal.GAIN_WEIGHT: 500,
}


@dataclass(frozen=True)
class MacroSplit:
    """Share of daily calories per macro, in whole percent."""

    carbs: int
    fats: int
    protein: int

    @property
    def total(self) -> int:
        return self.carbs + self.fats + self.protein


@dataclass(frozen=True)
class MacroGrams:
    """Daily macro targets in grams."""

    carbs_g: float
    fats_g: float
    protein_g: float


@dataclass(frozen=True)
class UserProfile:
    """Biometrics and preferences for one user, stored in metric."""

    user_id: UUID
    units_preference: UnitsPreference
    sex: Sex
    age: int
    height_cm: int
    weight_kg: float
    activity_level: ActivityLevel
    goal: Goal
    target_calories: int
    carbs_percent: int
    fats_percent: int
    protein_percent: int
    dietary_preferences: list[str] | None = None
    allergies: list[str] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    onboarding_completed: bool = False

    @property
    def macro_split(self) -> MacroSplit:
        return MacroSplit(
            carbs=self.carbs_percent,
            fats=self.fats_percent,
            protein=self.protein_percent,
        )


def profile_to_record(profile: UserProfile) -> dict[str, object]:
    """Serialize a profile to its snake_case persisted record."""
    return {
        "user_id": str(profile.user_id),
        "units_preference": profile.units_preference.value,
        "sex": profile.sex.value,
        "age": profile.age,
        "height_cm": profile.height_cm,
        "weight_kg": profile.weight_kg,
        "activity_level": profile.activity_level.value,
        "dietary_preferences": profile.dietary_preferences,
        "allergies": profile.allergies,
        "goal": profile.goal.value,
        "target_calories": profile.target_calories,
        "carbs_percent": profile.carbs_percent,
        "fats_percent": profile.fats_percent,
        "protein_percent": profile.protein_percent,
        "created_at": _isoformat(profile.created_at),
        "updated_at": _isoformat(profile.updated_at),
        "onboarding_completed": profile.onboarding_completed,
    }


def profile_from_record(row: dict[str, object]) -> UserProfile:
    """Parse a persisted profile record."""
    return UserProfile(
        user_id=UUID(str(row["user_id"])),
        units_preference=UnitsPreference(row["units_preference"]),
        sex=Sex(row["sex"]),
        age=int(row["age"]),
        height_cm=int(row["height_cm"]),
        weight_kg=float(row["weight_kg"]),
        activity_level=ActivityLevel(row["activity_level"]),
        goal=Goal(row["goal"]),
        target_calories=int(row["target_calories"]),
        carbs_percent=int(row["carbs_percent"]),
        fats_percent=int(row["fats_percent"]),
        protein_percent=int(row["protein_percent"]),
        dietary_preferences=row.get("dietary_preferences"),
        allergies=row.get("allergies"),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
        onboarding_completed=bool(row.get("onboarding_completed", False)),
    )


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_datetime(value: object) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
