import logging

from db import BookmarksRepository, RecipeNotFound
from domain.models import RecipeDetail, RecipeDetailState
from domain.recipes import RecipeRepository


logger = logging.getLogger(__name__)


async def recipe_detail_state(
    id: str,
    *,
    repository: RecipeRepository,
    bookmarks: BookmarksRepository,
) -> RecipeDetailState:
    try:
        detail = await repository.recipe_detail(id)
    except RecipeNotFound:
        return RecipeDetailState(message="Recipe not found.")
    is_bookmarked = await bookmarks.is_bookmarked(id)
    return RecipeDetailState(recipe_detail=detail, is_bookmarked=is_bookmarked)


async def toggle_bookmark(id: str, *, bookmarks: BookmarksRepository) -> bool:
    """Flip the bookmark for a recipe and return whether it is now bookmarked."""
    if await bookmarks.is_bookmarked(id):
        await bookmarks.delete(id)
        return False
    await bookmarks.save(id)
    return True


async def bookmarked_recipes(
    *,
    repository: RecipeRepository,
    bookmarks: BookmarksRepository,
) -> list[RecipeDetail]:
    details: list[RecipeDetail] = []
    for id in await bookmarks.list():
        try:
            details.append(await repository.recipe_detail(id))
        except RecipeNotFound:
            logger.info("Bookmarked recipe %s is no longer cached", id)
    return details
