"""In-memory meal log repository."""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from saycal.domain.meals import LoggedMeal
from saycal.services.meals import MealLogRepository


@dataclass
class InMemoryMealLogRepository(MealLogRepository):
    """Meal log held in process memory; each operation runs under one lock."""

    _meals: dict[UUID, LoggedMeal] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def insert(self, meal: LoggedMeal) -> None:
        """Store a new meal."""
        with self._lock:
            self._meals[meal.id] = meal

    def get(self, meal_id: UUID) -> LoggedMeal | None:
        """Return a meal by id."""
        with self._lock:
            return self._meals.get(meal_id)

    def update(self, meal: LoggedMeal) -> bool:
        """Replace a meal if it is still present."""
        with self._lock:
            if meal.id not in self._meals:
                return False
            self._meals[meal.id] = meal
            return True

    def delete(self, meal_id: UUID) -> LoggedMeal | None:
        """Remove a meal and return it."""
        with self._lock:
            return self._meals.pop(meal_id, None)

    def list_between(self, start: datetime, end: datetime) -> list[LoggedMeal]:
        """Return meals in [start, end), oldest first."""
        with self._lock:
            meals = [m for m in self._meals.values() if start <= m.timestamp < end]
        return sorted(meals, key=lambda meal: meal.timestamp)

    def clear(self) -> int:
        """Remove all meals."""
        with self._lock:
            removed = len(self._meals)
            self._meals.clear()
        return removed

    def list_all(self) -> list[LoggedMeal]:
        """Return all meals, oldest first."""
        with self._lock:
            meals = list(self._meals.values())
        return sorted(meals, key=lambda meal: meal.timestamp)
