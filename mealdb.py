"""TheMealDB client and the mappers from its records to our models."""

from datetime import datetime
import logging
from typing import Any

import httpx

from domain.models import Category, DayRecipe, Ingredient, Recipe, RecipeDetail


logger = logging.getLogger(__name__)


BASE_URL = "https://www.themealdb.com/api/json/v1/1/"
TIMEOUT = 20
MAX_INGREDIENTS = 20


type Dto = dict[str, Any]


class MealdbError(ValueError):
    pass


class MealdbClient:
    def __init__(
        self,
        *,
        base_url: str = BASE_URL,
        timeout: float = TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.client = (
            httpx.AsyncClient(base_url=base_url, timeout=timeout)
            if client is None
            else client
        )

    async def _get(self, path: str, key: str, **params: str) -> list[Dto]:
        logger.debug("GET %s %s", path, params)
        resp = await self.client.get(path, params=params)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict) or key not in data:
            raise MealdbError(f"Problem reading {path}. Expecting a '{key}' key.")
        # Unknown names and ids come back as null rather than an empty list.
        return data[key] or []

    async def get_categories(self) -> list[Dto]:
        return await self._get("categories.php", "categories")

    async def get_category_recipe(self, name: str) -> list[Dto]:
        return await self._get("filter.php", "meals", c=name)

    async def get_recipe_detail(self, id: str) -> list[Dto]:
        return await self._get("lookup.php", "meals", i=id)

    async def get_random_recipe(self) -> list[Dto]:
        meals = await self._get("random.php", "meals")
        if not meals:
            raise MealdbError("No random recipe.")
        return meals

    async def close(self) -> None:
        await self.client.aclose()


def _text(dto: Dto, key: str) -> str:
    return (dto.get(key) or "").strip()


def _required(dto: Dto, key: str) -> str:
    value = _text(dto, key)
    if not value:
        raise MealdbError(f"Record is missing '{key}'. {dto}")
    return value


def to_category(dto: Dto) -> Category:
    return Category(
        id=_required(dto, "idCategory"),
        name=_required(dto, "strCategory"),
        thumbnail=_text(dto, "strCategoryThumb"),
        description=_text(dto, "strCategoryDescription"),
    )


def to_recipe(dto: Dto, category_id: str) -> Recipe:
    return Recipe(
        id=_required(dto, "idMeal"),
        category_id=category_id,
        name=_required(dto, "strMeal"),
        image=_text(dto, "strMealThumb"),
    )


def to_ingredients(dto: Dto) -> list[Ingredient]:
    ingredients: list[Ingredient] = []
    for n in range(1, MAX_INGREDIENTS + 1):
        name = _text(dto, f"strIngredient{n}")
        if name:
            ingredients.append(Ingredient(name, _text(dto, f"strMeasure{n}")))
    return ingredients


def to_recipe_detail(dto: Dto) -> RecipeDetail:
    return RecipeDetail(
        id=_required(dto, "idMeal"),
        name=_required(dto, "strMeal"),
        category=_text(dto, "strCategory"),
        area=_text(dto, "strArea"),
        instructions=_text(dto, "strInstructions"),
        image=_text(dto, "strMealThumb"),
        youtube=_text(dto, "strYoutube"),
        source=_text(dto, "strSource"),
        ingredients=to_ingredients(dto),
    )


def to_day_recipe(dto: Dto, created_on: datetime) -> DayRecipe:
    return DayRecipe(
        id=_required(dto, "idMeal"),
        name=_required(dto, "strMeal"),
        category=_text(dto, "strCategory"),
        area=_text(dto, "strArea"),
        image=_text(dto, "strMealThumb"),
        created_on=created_on,
    )
