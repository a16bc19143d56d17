"""Daily nutrition totals for logged meals."""

from dataclasses import dataclass
from datetime import date

from saycal.domain.meals import DailyNutritionTotals, DailySummary, LoggedMeal
from saycal.domain.nutrition import MEAL_TYPES, NutritionSuccess, resolve_meal_type
from saycal.services.meals import MealLogService


@dataclass
class DailySummaryService:
    """Service for computing a day's totals against the calorie goal."""

    meal_log_service: MealLogService

    def get_day(
        self, day: date, timezone_name: str, goal_calories: float
    ) -> DailySummary:
        """Return totals, meals and meal-type groups for a day."""
        meals = self.meal_log_service.list_meals_for_day(day, timezone_name)
        return DailySummary(
            totals=aggregate_day(day, meals, goal_calories),
            meals=meals,
            groups=group_by_meal_type(meals),
        )


def aggregate_day(
    day: date, meals: list[LoggedMeal], goal_calories: float
) -> DailyNutritionTotals:
    """Sum completed, successful meals; loading or failed meals count as zero."""
    total = DailyNutritionTotals(
        day=day,
        total_calories=0,
        total_protein=0,
        total_carbs=0,
        total_fats=0,
        goal_calories=goal_calories,
    )
    for meal in meals:
        if meal.is_loading or not isinstance(meal.nutrition_response, NutritionSuccess):
            continue
        analysis = meal.nutrition_response.analysis
        total = DailyNutritionTotals(
            day=day,
            total_calories=total.total_calories + analysis.total_calories,
            total_protein=total.total_protein + analysis.total_protein,
            total_carbs=total.total_carbs + analysis.total_carbs,
            total_fats=total.total_fats + analysis.total_fats,
            goal_calories=goal_calories,
        )
    return total


def meal_type_for(meal: LoggedMeal) -> str:
    """Display category for a meal; Snack until a successful analysis exists."""
    if meal.is_loading or not isinstance(meal.nutrition_response, NutritionSuccess):
        return resolve_meal_type(None)
    return resolve_meal_type(meal.nutrition_response.analysis.meal_type)


def group_by_meal_type(meals: list[LoggedMeal]) -> dict[str, list[LoggedMeal]]:
    """Group meals by category in display order, oldest first within a group."""
    groups: dict[str, list[LoggedMeal]] = {}
    ordered = sorted(meals, key=lambda meal: meal.timestamp)
    for meal_type in MEAL_TYPES:
        members = [meal for meal in ordered if meal_type_for(meal) == meal_type]
        if members:
            groups[meal_type] = members
    return groups
