"""Pydantic models for API request payloads."""

from pydantic import BaseModel, Field

from saycal.domain.profiles import ActivityLevel, Goal, Sex, UnitsPreference


class CalculateCaloriesRequest(BaseModel):
    """Meal description to estimate."""

    transcribed_meal: str = Field(min_length=1)


class TranscribeRequest(BaseModel):
    """Base64 audio with its container format."""

    audio: str | None = None
    format: str | None = None
    timestamp: float | str | None = None


class MealTextRequest(BaseModel):
    """Typed meal description to log."""

    text: str = Field(min_length=1)


class BiometricsRequest(BaseModel):
    """Biometrics used to compute calorie targets."""

    sex: Sex
    age: int = Field(gt=0)
    height_cm: int = Field(gt=0)
    weight_kg: float = Field(gt=0)
    activity_level: ActivityLevel
    goal: Goal


class ProfileRequest(BiometricsRequest):
    """Profile payload; omitted targets fall back to calculated defaults."""

    units_preference: UnitsPreference = UnitsPreference.METRIC
    dietary_preferences: list[str] | None = None
    allergies: list[str] | None = None
    target_calories: int | None = Field(default=None, gt=0)
    carbs_percent: int | None = None
    fats_percent: int | None = None
    protein_percent: int | None = None
