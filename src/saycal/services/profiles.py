"""User profile service."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from saycal.domain.profiles import (
    ActivityLevel,
    Goal,
    MacroGrams,
    MacroSplit,
    Sex,
    UnitsPreference,
    UserProfile,
)
from saycal.errors import ProfileValidationError
from saycal.services.calculator import (
    calculate_macro_grams,
    calculate_macro_percentages,
    calculate_target_calories,
    cm_to_feet_and_inches,
    kg_to_lbs,
)

DEFAULT_GOAL_CALORIES = 2000

_logger = logging.getLogger(__name__)


class UserProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile for a user, if present."""

    def upsert_profile(self, profile: UserProfile) -> UserProfile:
        """Create or replace a profile and return the stored version."""


@dataclass(frozen=True)
class CalorieTargets:
    """Calorie and macro targets computed from biometrics."""

    target_calories: int
    split: MacroSplit
    grams: MacroGrams


@dataclass
class ProfileService:
    """Application service for profile creation and targets."""

    repository: UserProfileRepository
    default_goal_calories: int = DEFAULT_GOAL_CALORIES

    def build_profile(  # noqa: PLR0913
        self,
        *,
        user_id: UUID,
        units_preference: UnitsPreference,
        sex: Sex,
        age: int,
        height_cm: int,
        weight_kg: float,
        activity_level: ActivityLevel,
        goal: Goal,
        dietary_preferences: list[str] | None = None,
        allergies: list[str] | None = None,
        target_calories: int | None = None,
        macro_split: MacroSplit | None = None,
    ) -> UserProfile:
        """Build a profile, filling calculated defaults for missing overrides."""
        if target_calories is None:
            target_calories = calculate_target_calories(
                sex, age, height_cm, weight_kg, activity_level, goal
            )
        split = macro_split or calculate_macro_percentages(goal)
        validate_macro_split(split)
        return UserProfile(
            user_id=user_id,
            units_preference=units_preference,
            sex=sex,
            age=age,
            height_cm=height_cm,
            weight_kg=weight_kg,
            activity_level=activity_level,
            goal=goal,
            target_calories=target_calories,
            carbs_percent=split.carbs,
            fats_percent=split.fats,
            protein_percent=split.protein,
            dietary_preferences=dietary_preferences,
            allergies=allergies,
            onboarding_completed=True,
        )

    def save_profile(self, profile: UserProfile) -> UserProfile:
        """Validate and persist a profile."""
        validate_macro_split(profile.macro_split)
        existing = self.repository.get_profile(profile.user_id)
        now = datetime.now(tz=UTC)
        created_at = existing.created_at if existing else None
        stored = self.repository.upsert_profile(
            replace(profile, created_at=created_at or now, updated_at=now)
        )
        _logger.info("Saved profile", extra={"user_id": str(profile.user_id)})
        return stored

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        return self.repository.get_profile(user_id)

    def get_goal_calories(self, user_id: UUID | None) -> int:
        """Return the user's calorie target, or the default without a profile."""
        if user_id is None:
            return self.default_goal_calories
        profile = self.repository.get_profile(user_id)
        if profile is None:
            return self.default_goal_calories
        return profile.target_calories

    def macro_targets(self, profile: UserProfile) -> MacroGrams:
        return calculate_macro_grams(profile.target_calories, profile.macro_split)


def calculate_targets(  # noqa: PLR0913
    sex: Sex,
    age: int,
    height_cm: int,
    weight_kg: float,
    activity_level: ActivityLevel,
    goal: Goal,
) -> CalorieTargets:
    """Compute calorie target, macro split and grams for onboarding."""
    target = calculate_target_calories(
        sex, age, height_cm, weight_kg, activity_level, goal
    )
    split = calculate_macro_percentages(goal)
    return CalorieTargets(
        target_calories=target,
        split=split,
        grams=calculate_macro_grams(target, split),
    )


def validate_macro_split(split: MacroSplit) -> None:
    """Ensure the macro percentages sum to exactly 100."""
    if split.total != 100:  # noqa: PLR2004
        raise ProfileValidationError(
            f"Macro percentages must sum to 100, got {split.total}"
        )
    if min(split.carbs, split.fats, split.protein) < 0:
        raise ProfileValidationError("Macro percentages must not be negative")


def format_height(profile: UserProfile) -> str:
    """Height for display in the user's preferred units."""
    if profile.units_preference is UnitsPreference.IMPERIAL:
        feet, inches = cm_to_feet_and_inches(profile.height_cm)
        return f"{feet}'{inches}\""
    return f"{profile.height_cm} cm"


def format_weight(profile: UserProfile) -> str:
    """Weight for display in the user's preferred units."""
    if profile.units_preference is UnitsPreference.IMPERIAL:
        return f"{round(kg_to_lbs(profile.weight_kg))} lbs"
    return f"{round(profile.weight_kg, 1):g} kg"
