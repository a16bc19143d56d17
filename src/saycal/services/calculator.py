"""Unit conversions and daily energy targets.

Heights are whole centimetres or inches and every conversion rounds half to
even, so cm -> in -> cm settles after one round trip instead of drifting.
Weights convert without rounding; callers round for display.
"""

import math

from saycal.domain.profiles import ActivityLevel, Goal, MacroGrams, MacroSplit, Sex

CM_PER_INCH = 2.54
LBS_PER_KG = 2.20462
INCHES_PER_FOOT = 12

MINIMUM_CALORIES = {Sex.MALE: 1500, Sex.FEMALE: 1200}

_MACRO_SPLITS = {
    Goal.LOSE_WEIGHT: MacroSplit(carbs=35, fats=30, protein=35),
    Goal.MAINTAIN_WEIGHT: MacroSplit(carbs=40, fats=30, protein=30),
    Goal.BUILD_MUSCLE: MacroSplit(carbs=40, fats=25, protein=35),
    Goal.GAIN_WEIGHT: MacroSplit(carbs=45, fats=25, protein=30),
}


def cm_to_inches(cm: int) -> int:
    return round(cm / CM_PER_INCH)


def inches_to_cm(inches: int) -> int:
    return round(inches * CM_PER_INCH)


def kg_to_lbs(kg: float) -> float:
    return kg * LBS_PER_KG


def lbs_to_kg(lbs: float) -> float:
    return lbs / LBS_PER_KG


def cm_to_feet_and_inches(cm: int) -> tuple[int, int]:
    """Return (feet, inches) for a height in centimetres."""
    total_inches = cm_to_inches(cm)
    return total_inches // INCHES_PER_FOOT, total_inches % INCHES_PER_FOOT


def feet_and_inches_to_cm(feet: int, inches: int) -> int:
    return inches_to_cm(feet * INCHES_PER_FOOT + inches)


def calculate_bmr(sex: Sex, age: int, height_cm: float, weight_kg: float) -> float:
    """Basal metabolic rate from the Mifflin-St Jeor equation."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if sex is Sex.MALE:
        return base + 5
    return base - 161


def calculate_tdee(
    sex: Sex,
    age: int,
    height_cm: float,
    weight_kg: float,
    activity_level: ActivityLevel,
) -> float:
    """Total daily energy expenditure."""
    return calculate_bmr(sex, age, height_cm, weight_kg) * activity_level.multiplier


def calculate_target_calories(  # noqa: PLR0913
    sex: Sex,
    age: int,
    height_cm: float,
    weight_kg: float,
    activity_level: ActivityLevel,
    goal: Goal,
) -> int:
    """Daily calorie target, never below the per-sex safety floor."""
    tdee = calculate_tdee(sex, age, height_cm, weight_kg, activity_level)
    target = math.floor(tdee) + goal.calorie_adjustment
    return max(target, MINIMUM_CALORIES[sex])


def calculate_macro_percentages(goal: Goal) -> MacroSplit:
    """Recommended macro split for a goal; always sums to 100."""
    return _MACRO_SPLITS[goal]


def calculate_macro_grams(calories: float, split: MacroSplit) -> MacroGrams:
    """Convert a calorie target and percent split into grams.

    The divisors fold kcal per gram (4 or 9) together with percent (100).
    """
    return MacroGrams(
        carbs_g=calories * split.carbs / 400,
        fats_g=calories * split.fats / 900,
        protein_g=calories * split.protein / 400,
    )
