from collections.abc import Callable
import logging

from db import RecipeDetailsRepository
from domain.llm_service import GenerativeModel
from domain.models import GenerativeParameters, GenerativeState, RecipeDetail
from domain.prompts import generative_prompt


logger = logging.getLogger(__name__)


REQUIRED_MESSAGE = "Please select a meal type, cuisine and mood."


class AiData:
    """Context handed to the model alongside the user's parameters."""

    def __init__(
        self,
        *,
        recipes: list[RecipeDetail] | None = None,
        past_meals: list[str] | None = None,
    ) -> None:
        self.recipes = [] if recipes is None else recipes
        self.past_meals = [] if past_meals is None else past_meals

    @property
    def cuisines(self) -> list[str]:
        return sorted({r.area for r in self.recipes if r.area})


async def load_ai_data(
    details: RecipeDetailsRepository,
    *,
    past_meals: list[str] | None = None,
) -> AiData:
    return AiData(recipes=await details.list(), past_meals=past_meals)


class SuggestionSession:
    def __init__(self, *, model: GenerativeModel, ai_data: AiData) -> None:
        self.model = model
        self.ai_data = ai_data
        self.parameters = GenerativeParameters()
        self.state = GenerativeState()

    def on_meal_type_change(self, value: str) -> None:
        self.parameters.meal_type = value

    def on_cuisine_change(self, value: str) -> None:
        self.parameters.cuisine = value

    def on_mood_change(self, value: str) -> None:
        self.parameters.mood = value

    def on_dietary_change(self, value: str) -> None:
        self.parameters.dietary = value

    def on_quick_change(self, value: bool) -> None:
        self.parameters.is_quick = value

    async def generate_suggestions(self, on_success: Callable[[], None]) -> None:
        """Ask the model for a meal matching the parameters.

        Nothing is sent unless meal type, cuisine and mood are all chosen.
        """
        if self.parameters.missing:
            self.state.error_message = REQUIRED_MESSAGE
            return

        self.state.is_loading = True
        self.state.error_message = ""
        prompt = generative_prompt(
            recipes=self.ai_data.recipes,
            past_meals=self.ai_data.past_meals,
            parameters=self.parameters,
        )
        try:
            answer = await self.model.generate_content(prompt)
        except Exception as e:
            logger.warning("Could not generate suggestions", exc_info=True)
            self.state.is_loading = False
            self.state.error_message = str(e) or "Something went wrong!"
            return

        self.state.is_loading = False
        self.state.generative_answer = answer
        on_success()
