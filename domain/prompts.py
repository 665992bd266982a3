from collections.abc import Sequence

from domain.models import GenerativeParameters, RecipeDetail


MEAL_TYPES = ("Breakfast", "Lunch", "Dinner", "Snack")
MOODS = ("Savory", "Sweet", "Spicy", "Healthy", "Comfort")
DIETARIES = ("Vegetarian", "Vegan", "Gluten-free", "Dairy-free")

# Keeps the suggestion prompt a sensible size on a fully synced cache.
MAX_CONTEXT_RECIPES = 50


CHAT_SYSTEM_PROMPT = """
You are a friendly, knowledgeable cooking assistant.
Help the user decide what to cook, adapt recipes to what they have available,
and explain techniques clearly. Your users are competent cooks but are not
professionals so include tips where a step is easy to get wrong.
Format your answers as GitHub flavoured markdown.
""".strip()


TITLE_PROMPT = """
Create a short title of at most five words for a conversation that starts with
the question below. Respond with the title only, without quotes or punctuation
at the end.

Question: {question}
""".strip()


GENERATIVE_PROMPT = """
You are a creative chef helping someone decide on their next meal.
Suggest one meal that fits all of these preferences:

- Meal type: {meal_type}
- Cuisine: {cuisine}
- Mood: {mood}
{extras}
Recipes the user can already cook from:
{recipes}

Meals the user has had recently, avoid repeating them:
{past_meals}

Prefer a recipe from the list above when one fits, otherwise be creative.
Respond with the meal name as a heading, a one paragraph description of why it
fits, the ingredients as a list and the preparation steps as a numbered list.
""".strip()


def title_prompt(question: str) -> str:
    return TITLE_PROMPT.format(question=question)


def build_extras(parameters: GenerativeParameters) -> str:
    s = ""
    if parameters.dietary:
        s += f"- Dietary requirement: {parameters.dietary}\n"
    if parameters.is_quick:
        s += "- It must be quick to prepare, around 30 minutes or less.\n"
    return s


def _bullets(items: Sequence[str]) -> str:
    if not items:
        return "- None"
    return "\n".join(f"- {i}" for i in items)


def generative_prompt(
    *,
    recipes: Sequence[RecipeDetail],
    past_meals: Sequence[str],
    parameters: GenerativeParameters,
) -> str:
    return GENERATIVE_PROMPT.format(
        meal_type=parameters.meal_type,
        cuisine=parameters.cuisine,
        mood=parameters.mood,
        extras=build_extras(parameters),
        recipes=_bullets([str(r) for r in recipes[:MAX_CONTEXT_RECIPES]]),
        past_meals=_bullets(past_meals),
    )
