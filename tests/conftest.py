from pathlib import Path
from typing import Any, AsyncIterator

from databases import Database
import pytest
import pytest_asyncio

import db
from domain.aopenai import ChatMsg
from domain.recipes import RecipeRepository


def meal(id: str, name: str, **extra: str) -> dict[str, Any]:
    dto: dict[str, Any] = {
        "idMeal": id,
        "strMeal": name,
        "strMealThumb": f"https://img/{id}.jpg",
        "strCategory": "Beef",
        "strArea": "British",
        "strInstructions": "Cook it.",
        "strIngredient1": "Beef",
        "strMeasure1": "500g",
        "strIngredient2": "",
        "strMeasure2": " ",
        "strIngredient3": None,
    }
    dto.update(extra)
    return dto


class FakeMealdb:
    """Stands in for `MealdbClient`, failing for the names it is told to."""

    def __init__(
        self,
        categories: list[tuple[str, str]] | None = None,
        recipes: dict[str, list[tuple[str, str]]] | None = None,
        *,
        failing_categories: set[str] | None = None,
        failing_details: set[str] | None = None,
        random_meals: list[dict[str, Any]] | None = None,
    ) -> None:
        self.categories = [] if categories is None else categories
        self.recipes = {} if recipes is None else recipes
        self.failing_categories = set() if failing_categories is None else failing_categories
        self.failing_details = set() if failing_details is None else failing_details
        self.random_meals = [meal("52772", "Teriyaki Chicken")] if random_meals is None else random_meals
        self.calls: list[str] = []

    async def get_categories(self) -> list[dict[str, Any]]:
        self.calls.append("categories")
        return [
            {"idCategory": id, "strCategory": name, "strCategoryThumb": ""}
            for id, name in self.categories
        ]

    async def get_category_recipe(self, name: str) -> list[dict[str, Any]]:
        self.calls.append(f"category:{name}")
        if name in self.failing_categories:
            raise ConnectionError(f"No route to {name}")
        return [
            {"idMeal": id, "strMeal": title, "strMealThumb": ""}
            for id, title in self.recipes.get(name, [])
        ]

    async def get_recipe_detail(self, id: str) -> list[dict[str, Any]]:
        self.calls.append(f"detail:{id}")
        if id in self.failing_details:
            raise ConnectionError(f"No detail for {id}")
        for recipes in self.recipes.values():
            for recipe_id, title in recipes:
                if recipe_id == id:
                    return [meal(id, title)]
        return []

    async def get_random_recipe(self) -> list[dict[str, Any]]:
        self.calls.append("random")
        if not self.random_meals:
            raise ConnectionError("Offline")
        return [self.random_meals.pop(0)]


class FakeChat:
    def __init__(self, model: "FakeModel", history: list[ChatMsg]) -> None:
        self.model = model
        self.history = history

    async def send_message(self, text: str) -> str:
        self.model.sent.append(text)
        if self.model.reply_error is not None:
            raise self.model.reply_error
        return f"Answer to: {text}"


class FakeModel:
    """Stands in for `LLMService`, recording everything it is asked."""

    def __init__(
        self,
        *,
        title: str = "Dinner ideas",
        title_error: Exception | None = None,
        reply_error: Exception | None = None,
        content_error: Exception | None = None,
    ) -> None:
        self.title = title
        self.title_error = title_error
        self.reply_error = reply_error
        self.content_error = content_error
        self.prompts: list[str] = []
        self.histories: list[list[ChatMsg]] = []
        self.sent: list[str] = []

    async def generate_content(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if prompt.startswith("Create a short title"):
            if self.title_error is not None:
                raise self.title_error
            return self.title
        if self.content_error is not None:
            raise self.content_error
        return "## Spaghetti Carbonara\n\nCreamy and quick."

    def start_chat(self, history: list[ChatMsg]) -> FakeChat:
        self.histories.append(history)
        return FakeChat(self, history)


@pytest_asyncio.fixture
async def database(tmp_path: Path) -> AsyncIterator[Database]:
    database = Database(f"sqlite:///{tmp_path / 'test.db'}", force_rollback=True)
    await database.connect()
    await db.create_db(database)
    yield database
    await database.disconnect()


@pytest.fixture
def chats(database: Database) -> db.ChatHistoryRepository:
    return db.ChatHistoryRepository(database)


@pytest.fixture
def answers(database: Database) -> db.AiAnswersRepository:
    return db.AiAnswersRepository(database)


@pytest.fixture
def bookmarks(database: Database) -> db.BookmarksRepository:
    return db.BookmarksRepository(database)


@pytest.fixture
def details(database: Database) -> db.RecipeDetailsRepository:
    return db.RecipeDetailsRepository(database)


def recipe_repository(database: Database, api: FakeMealdb) -> RecipeRepository:
    return RecipeRepository(
        api=api,  # pyright: ignore[reportArgumentType]
        categories=db.CategoriesRepository(database),
        recipes=db.RecipesRepository(database),
        details=db.RecipeDetailsRepository(database),
        day_recipes=db.DayRecipesRepository(database),
    )
