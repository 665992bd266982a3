from databases import Database
import pytest

from conftest import FakeMealdb, meal, recipe_repository
import db


async def first(gen):
    async for item in gen:
        return item
    raise AssertionError("Nothing yielded.")


@pytest.mark.asyncio
async def test_refresh_database_stores_everything(database: Database) -> None:
    api = FakeMealdb(
        categories=[("1", "Beef"), ("2", "Dessert")],
        recipes={
            "Beef": [("10", "Beef Wellington"), ("11", "Beef Stew")],
            "Dessert": [("20", "Apple Pie")],
        },
    )
    repo = recipe_repository(database, api)

    await repo.refresh_database()

    assert [c.name for c in await repo.categories()] == ["Beef", "Dessert"]
    assert [r.name for r in await repo.get_recipes("1")] == [
        "Beef Stew",
        "Beef Wellington",
    ]
    detail = await repo.recipe_detail("20")
    assert detail.name == "Apple Pie"
    assert [str(i) for i in detail.ingredients] == ["Beef (500g)"]


@pytest.mark.asyncio
async def test_refresh_database_keeps_earlier_categories_on_failure(
    database: Database,
) -> None:
    api = FakeMealdb(
        categories=[("1", "A"), ("2", "B")],
        recipes={"A": [("10", "A one"), ("11", "A two")], "B": [("20", "B one")]},
        failing_categories={"B"},
    )
    repo = recipe_repository(database, api)

    await repo.refresh_database()

    assert [c.id for c in await repo.categories()] == ["1", "2"]
    assert [r.id for r in await repo.get_recipes("1")] == ["10", "11"]
    assert (await repo.recipe_detail("10")).name == "A one"
    assert (await repo.recipe_detail("11")).name == "A two"
    assert await repo.get_recipes("2") == []


@pytest.mark.asyncio
async def test_refresh_database_abandons_rest_of_category(database: Database) -> None:
    api = FakeMealdb(
        categories=[("1", "A"), ("2", "B")],
        recipes={"A": [("10", "A one"), ("11", "A two")], "B": [("20", "B one")]},
        failing_details={"10"},
    )
    repo = recipe_repository(database, api)

    await repo.refresh_database()

    assert "detail:11" not in api.calls
    with pytest.raises(db.RecipeNotFound):
        await repo.recipe_detail("11")
    # The next category is still synced.
    assert (await repo.recipe_detail("20")).name == "B one"


@pytest.mark.asyncio
async def test_get_recipes_unknown_category(database: Database) -> None:
    repo = recipe_repository(database, FakeMealdb())
    with pytest.raises(db.CategoryNotFound):
        await repo.get_recipes("404")


@pytest.mark.asyncio
async def test_day_recipe_is_picked_once(database: Database) -> None:
    api = FakeMealdb(
        random_meals=[meal("1", "First pick"), meal("2", "Second pick")],
    )
    repo = recipe_repository(database, api)

    got = await first(repo.day_recipe())
    again = await first(repo.day_recipe())

    assert got.ok and again.ok
    assert got.data.id == again.data.id == "1"
    assert api.calls.count("random") == 1
    assert len(await db.DayRecipesRepository(database).list()) == 1


@pytest.mark.asyncio
async def test_day_recipe_picks_again_once_cleared(database: Database) -> None:
    api = FakeMealdb(
        random_meals=[meal("1", "First pick"), meal("2", "Second pick")],
    )
    repo = recipe_repository(database, api)

    await first(repo.day_recipe())
    await db.DayRecipesRepository(database).clear()
    got = await first(repo.day_recipe())

    assert got.data.name == "Second pick"
    assert len(await db.DayRecipesRepository(database).list()) == 1


@pytest.mark.asyncio
async def test_day_recipe_failure_is_yielded(database: Database) -> None:
    repo = recipe_repository(database, FakeMealdb(random_meals=[]))

    got = await first(repo.day_recipe())

    assert not got.ok
    assert got.message == "Offline"


@pytest.mark.asyncio
async def test_random_recipe(database: Database) -> None:
    repo = recipe_repository(database, FakeMealdb())
    got = await repo.random_recipe()
    assert got.ok
    assert got.data.name == "Teriyaki Chicken"

    got = await repo.random_recipe()
    assert not got.ok
