"""Prompt contract for meal nutrition estimation."""

NUTRITION_SYSTEM_PROMPT = (
    "You are a nutrition analysis engine for a calorie tracking app. "
    "Respond ONLY with a JSON object matching the provided schema. "
    "Always include all four top-level fields: success, data, error and "
    "unparseable_meal, using null for the ones that do not apply. "
    "Use up-to-date nutrition label data when possible. "
    "Always respect serving sizes and user-described quantities by scaling "
    "calories and macros up or down based on the amount eaten. "
    "Always attempt a best-effort estimate instead of refusing."
)

_NUTRITION_USER_TEMPLATE = """\
Analyze this meal: "{meal}"

Your goal is to ALWAYS return a best-effort nutrition estimate.

SERVING SIZE AND QUANTITY
1. When the meal names a brand or product (Aldi, Ben & Jerry's, Costco,
   Trader Joe's, ...), search for that product's nutrition label. Prefer
   official brand or retailer sites, then major nutrition databases, then
   large retailers with clear nutrition panels.
2. From the label take the serving size, calories, protein, carbs and fats
   per serving, and servings per container when available.
3. Work out how many servings were eaten. "1 slice" of a 2-slice serving is
   0.5 servings. "The whole pint" or "the whole container" is all servings in
   the container, "half the tub" is half of them, "a quarter" is a quarter.
4. Multiply every per-serving value by the servings eaten. Never copy
   per-serving values when more or less than one serving was eaten. Round
   calories to the nearest 5 kcal and macros to 0.1 g.
5. When the quantity is unclear, assume one standard serving (1 slice of
   bread, 1 cup cooked pasta, 1 medium apple).

BRAND NAMES
- If the text slightly misspells a brand or product, infer the official name
  and use it in the description and breakdown.
- If branded data is conflicting or missing, use a close generic equivalent
  with consistent label data.

OUTPUT
- meal_type: one of Breakfast, Lunch, Dinner, Snack, Drink.
- description: brief and label-like, e.g. "Grilled chicken breast with rice".
- total_calories, total_protein, total_carbs, total_fats for the whole meal.
- breakdown: one entry per component with item, portion, calories, protein,
  carbs, fats and micros (short notes such as "Vitamin C 81mg"; may be empty).
- On success set success=true, fill data, and set error and unparseable_meal
  to null.

PARSING
- If part of the meal is understandable, analyze that part instead of failing.
- Only when the text clearly describes no food at all (random letters, "test",
  "hello there") set success=false, data=null, a short reason in error, and
  the original text in unparseable_meal.
"""


def build_nutrition_prompt(meal: str) -> str:
    """Return the user prompt for a meal description."""
    return _NUTRITION_USER_TEMPLATE.format(meal=meal.strip())
