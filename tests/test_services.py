from databases import Database
import pytest

from conftest import FakeMealdb, recipe_repository
import db
from domain.models import AiAnswer, Ingredient, RecipeDetail, Role
from domain.services import bookmarked_recipes, recipe_detail_state, toggle_bookmark


@pytest.mark.asyncio
async def test_recipe_detail_state(
    database: Database,
    details: db.RecipeDetailsRepository,
    bookmarks: db.BookmarksRepository,
) -> None:
    repo = recipe_repository(database, FakeMealdb())
    await details.insert(
        [RecipeDetail(id="1", name="Stew", ingredients=[Ingredient("Beef", "1kg")])]
    )

    state = await recipe_detail_state("1", repository=repo, bookmarks=bookmarks)
    assert state.recipe_detail is not None
    assert state.recipe_detail.ingredients == [Ingredient("Beef", "1kg")]
    assert state.is_bookmarked is False

    missing = await recipe_detail_state("2", repository=repo, bookmarks=bookmarks)
    assert missing.recipe_detail is None
    assert missing.message == "Recipe not found."


@pytest.mark.asyncio
async def test_toggle_bookmark(bookmarks: db.BookmarksRepository) -> None:
    assert await toggle_bookmark("1", bookmarks=bookmarks) is True
    assert await bookmarks.is_bookmarked("1")
    assert await bookmarks.list() == ["1"]

    assert await toggle_bookmark("1", bookmarks=bookmarks) is False
    assert not await bookmarks.is_bookmarked("1")
    assert await bookmarks.list() == []


@pytest.mark.asyncio
async def test_bookmarked_recipes_skips_uncached(
    database: Database,
    details: db.RecipeDetailsRepository,
    bookmarks: db.BookmarksRepository,
) -> None:
    repo = recipe_repository(database, FakeMealdb())
    await details.insert([RecipeDetail(id="1", name="Stew")])
    await bookmarks.save("1")
    await bookmarks.save("2")

    got = await bookmarked_recipes(repository=repo, bookmarks=bookmarks)

    assert [d.id for d in got] == ["1"]


def test_answer_html() -> None:
    answer = AiAnswer(role=Role.model, content="Use **fresh** basil.", chat_id="1")
    assert "<strong>fresh</strong>" in answer.html
