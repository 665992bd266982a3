"""Keeps the local recipe cache in step with TheMealDB."""

from collections.abc import AsyncIterator
from datetime import datetime
import logging

from db import (
    CategoriesRepository,
    DayRecipesRepository,
    RecipeDetailsRepository,
    RecipesRepository,
)
from domain.models import Category, DayRecipe, Recipe, RecipeDetail, Resource
from mealdb import (
    MealdbClient,
    to_category,
    to_day_recipe,
    to_recipe,
    to_recipe_detail,
)


logger = logging.getLogger(__name__)


class RecipeRepository:
    def __init__(
        self,
        *,
        api: MealdbClient,
        categories: CategoriesRepository,
        recipes: RecipesRepository,
        details: RecipeDetailsRepository,
        day_recipes: DayRecipesRepository,
    ) -> None:
        self.api = api
        self.category_store = categories
        self.recipe_store = recipes
        self.detail_store = details
        self.day_recipe_store = day_recipes

    async def categories(self) -> list[Category]:
        return await self.category_store.list()

    async def get_recipes(self, category_id: str) -> list[Recipe]:
        """Cached recipes of a category. Raises `CategoryNotFound`."""
        category = await self.category_store.get(category_id)
        return await self.recipe_store.by_category(category.id)

    async def recipe_detail(self, id: str) -> RecipeDetail:
        return await self.detail_store.get(id)

    async def random_recipe(self) -> Resource[RecipeDetail]:
        try:
            meals = await self.api.get_random_recipe()
            return Resource.success(to_recipe_detail(meals[0]))
        except Exception as e:
            logger.warning("Could not fetch a random recipe", exc_info=True)
            return Resource.error(str(e) or "Something went wrong!")

    async def day_recipe(self) -> AsyncIterator[Resource[DayRecipe]]:
        """Yield the recipe of the day, picking one the first time round.

        A stored recipe is reused until the store is cleared. A failure is
        yielded as an error resource rather than raised.
        """
        try:
            stored = await self.day_recipe_store.list()
            if not stored:
                meals = await self.api.get_random_recipe()
                await self.day_recipe_store.insert(
                    to_day_recipe(meals[0], created_on=datetime.now())
                )
                stored = await self.day_recipe_store.list()
                logger.info("Picked %s as the recipe of the day", stored[0].name)
        except Exception as e:
            logger.warning("Could not load the recipe of the day", exc_info=True)
            yield Resource.error(str(e) or "Something went wrong!")
            return
        yield Resource.success(stored[0])

    async def refresh_database(self) -> None:
        """Sweep categories, their recipes and every recipe's detail into the cache.

        Runs one request at a time. A failure abandons the rest of the
        current category (or the whole sweep if the category list itself
        fails) and is only logged; whatever was stored before it stays.
        """
        try:
            dtos = await self.api.get_categories()
            categories = [to_category(dto) for dto in dtos]
            await self.category_store.insert(categories)
        except Exception:
            logger.warning("Could not refresh categories", exc_info=True)
            return

        logger.info("Refreshing %d categories", len(categories))
        for category in categories:
            try:
                await self._refresh_category(category)
            except Exception:
                logger.warning(
                    "Could not refresh category %s", category.name, exc_info=True
                )

    async def _refresh_category(self, category: Category) -> None:
        dtos = await self.api.get_category_recipe(category.name)
        recipes = [to_recipe(dto, category.id) for dto in dtos]
        await self.recipe_store.insert(recipes)

        for recipe in recipes:
            details = await self.api.get_recipe_detail(recipe.id)
            await self.detail_store.insert([to_recipe_detail(d) for d in details])
        logger.debug("Refreshed %d recipes for %s", len(recipes), category.name)
