"""Nutrition analysis models and the estimation response contract."""

from dataclasses import dataclass

from pydantic import BaseModel, Field, StrictBool, ValidationError

from saycal.errors import SchemaViolationError

MEAL_TYPES: tuple[str, ...] = ("Breakfast", "Lunch", "Dinner", "Snack", "Drink")
DEFAULT_MEAL_TYPE = "Snack"

_NUMBER = {"type": "number", "minimum": 0}
_NULLABLE_STRING = {"anyOf": [{"type": "string"}, {"type": "null"}]}

NUTRITION_ITEM_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "item": {"type": "string"},
        "portion": {"type": "string"},
        "calories": _NUMBER,
        "protein": _NUMBER,
        "carbs": _NUMBER,
        "fats": _NUMBER,
        "micros": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["item", "portion", "calories", "protein", "carbs", "fats", "micros"],
    "additionalProperties": False,
}

NUTRITION_ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "meal_type": {"type": "string"},
        "description": {"type": "string"},
        "total_calories": _NUMBER,
        "total_protein": _NUMBER,
        "total_carbs": _NUMBER,
        "total_fats": _NUMBER,
        "breakdown": {"type": "array", "items": NUTRITION_ITEM_SCHEMA},
    },
    "required": [
        "meal_type",
        "description",
        "total_calories",
        "total_protein",
        "total_carbs",
        "total_fats",
        "breakdown",
    ],
    "additionalProperties": False,
}

NUTRITION_RESPONSE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "success": {"type": "boolean"},
        "data": {"anyOf": [NUTRITION_ANALYSIS_SCHEMA, {"type": "null"}]},
        "error": _NULLABLE_STRING,
        "unparseable_meal": _NULLABLE_STRING,
    },
    "required": ["success", "data", "error", "unparseable_meal"],
    "additionalProperties": False,
}


class NutritionItem(BaseModel):
    """One component of a meal with its estimated macros."""

    item: str
    portion: str
    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fats: float = Field(ge=0.0)
    micros: list[str]


class NutritionAnalysis(BaseModel):
    """Parsed estimate for one meal.

    Totals come from the model alongside the breakdown and are kept as
    reported, even when they differ from the sum of the items.
    """

    meal_type: str
    description: str
    total_calories: float = Field(ge=0.0)
    total_protein: float = Field(ge=0.0)
    total_carbs: float = Field(ge=0.0)
    total_fats: float = Field(ge=0.0)
    breakdown: list[NutritionItem]


class _ResponseEnvelope(BaseModel):
    """Flat wire shape; every key must be present, even when null."""

    success: StrictBool
    data: NutritionAnalysis | None
    error: str | None
    unparseable_meal: str | None


@dataclass(frozen=True)
class NutritionSuccess:
    """The meal was understood and estimated."""

    analysis: NutritionAnalysis


@dataclass(frozen=True)
class NutritionFailure:
    """The model reported the text could not be read as food."""

    error: str
    unparseable_meal: str | None = None


NutritionResponse = NutritionSuccess | NutritionFailure


def decode_nutrition_response(payload: object) -> NutritionResponse:
    """Decode the flat four-field wire object into a response value."""
    if not isinstance(payload, dict):
        raise SchemaViolationError("Nutrition response must be a JSON object")
    missing = sorted(set(_ResponseEnvelope.model_fields) - set(payload))
    if missing:
        raise SchemaViolationError(
            f"Nutrition response is missing fields: {', '.join(missing)}"
        )
    try:
        envelope = _ResponseEnvelope.model_validate(payload)
    except ValidationError as exc:
        raise SchemaViolationError(f"Invalid nutrition response: {exc}") from exc

    if not envelope.success:
        if envelope.data is not None:
            raise SchemaViolationError("Failed nutrition response carries data")
        return NutritionFailure(
            error=envelope.error or "Unknown error",
            unparseable_meal=envelope.unparseable_meal,
        )
    if envelope.error is not None or envelope.unparseable_meal is not None:
        raise SchemaViolationError("Successful nutrition response carries an error")
    if envelope.data is None:
        raise SchemaViolationError("Successful nutrition response has no data")
    if not envelope.data.breakdown:
        raise SchemaViolationError("Successful nutrition response has no breakdown")
    return NutritionSuccess(analysis=envelope.data)


def encode_nutrition_response(response: NutritionResponse) -> dict[str, object]:
    """Encode a response value back into the flat wire object."""
    if isinstance(response, NutritionSuccess):
        return {
            "success": True,
            "data": response.analysis.model_dump(),
            "error": None,
            "unparseable_meal": None,
        }
    return {
        "success": False,
        "data": None,
        "error": response.error,
        "unparseable_meal": response.unparseable_meal,
    }


def resolve_meal_type(label: str | None) -> str:
    """Map a free-text meal type onto a known category, defaulting to Snack."""
    if label:
        cleaned = label.strip().lower()
        for meal_type in MEAL_TYPES:
            if meal_type.lower() == cleaned:
                return meal_type
    return DEFAULT_MEAL_TYPE
