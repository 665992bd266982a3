import json
from datetime import datetime

from databases import Database
from databases.interfaces import Record

from domain.models import (
    AiAnswer,
    Category,
    ChatHistory,
    DayRecipe,
    Ingredient,
    Recipe,
    RecipeDetail,
    Role,
)


CREATE_TABLES = (
    """
    CREATE TABLE IF NOT EXISTS Categories (
        id VARCHAR(64) PRIMARY KEY,
        name VARCHAR(256),
        thumbnail VARCHAR(512),
        description TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS Recipes (
        id VARCHAR(64) PRIMARY KEY,
        category_id VARCHAR(64) REFERENCES Categories(id),
        name VARCHAR(256),
        image VARCHAR(512)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS RecipeDetails (
        id VARCHAR(64) PRIMARY KEY,
        name VARCHAR(256),
        category VARCHAR(256),
        area VARCHAR(256),
        instructions TEXT,
        image VARCHAR(512),
        youtube VARCHAR(512),
        source VARCHAR(512),
        ingredients TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS DayRecipes (
        slot INTEGER PRIMARY KEY CHECK (slot = 0),
        id VARCHAR(64),
        name VARCHAR(256),
        category VARCHAR(256),
        area VARCHAR(256),
        image VARCHAR(512),
        created_on VARCHAR(64)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS Bookmarks (recipe_id VARCHAR(64) PRIMARY KEY)
    """,
    """
    CREATE TABLE IF NOT EXISTS ChatHistory (
        id VARCHAR(64) PRIMARY KEY,
        title VARCHAR(256),
        started_on VARCHAR(64)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS AiAnswers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        role VARCHAR(16),
        content TEXT,
        chat_id VARCHAR(64) REFERENCES ChatHistory(id)
    )
    """,
)


UPSERT_CATEGORY = """
INSERT OR REPLACE INTO Categories(id, name, thumbnail, description)
VALUES (:id, :name, :thumbnail, :description)
"""

LIST_CATEGORIES = "SELECT * FROM Categories ORDER BY name"

GET_CATEGORY = "SELECT * FROM Categories WHERE id = :id"


UPSERT_RECIPE = """
INSERT OR REPLACE INTO Recipes(id, category_id, name, image)
VALUES (:id, :category_id, :name, :image)
"""

LIST_CATEGORY_RECIPES = (
    "SELECT * FROM Recipes WHERE category_id = :category_id ORDER BY name"
)


UPSERT_RECIPE_DETAIL = """
INSERT OR REPLACE INTO RecipeDetails(
    id, name, category, area, instructions, image, youtube, source, ingredients
)
VALUES (
    :id, :name, :category, :area, :instructions, :image, :youtube, :source,
    :ingredients
)
"""

GET_RECIPE_DETAIL = "SELECT * FROM RecipeDetails WHERE id = :id"

LIST_RECIPE_DETAILS = "SELECT * FROM RecipeDetails ORDER BY name"


INSERT_DAY_RECIPE = """
INSERT OR REPLACE INTO DayRecipes(slot, id, name, category, area, image, created_on)
VALUES (0, :id, :name, :category, :area, :image, :created_on)
"""

LIST_DAY_RECIPES = "SELECT * FROM DayRecipes"

CLEAR_DAY_RECIPES = "DELETE FROM DayRecipes"


LIST_BOOKMARKS = "SELECT recipe_id FROM Bookmarks ORDER BY recipe_id"

SAVE_BOOKMARK = "INSERT OR IGNORE INTO Bookmarks(recipe_id) VALUES (:recipe_id)"

DELETE_BOOKMARK = "DELETE FROM Bookmarks WHERE recipe_id = :recipe_id"

GET_BOOKMARK = "SELECT recipe_id FROM Bookmarks WHERE recipe_id = :recipe_id"


INSERT_CHAT = """
INSERT INTO ChatHistory(id, title, started_on) VALUES (:id, :title, :started_on)
"""

UPDATE_CHAT = "UPDATE ChatHistory SET title = :title WHERE id = :id"

GET_CHAT = "SELECT * FROM ChatHistory WHERE id = :id"

LIST_CHATS = "SELECT * FROM ChatHistory ORDER BY started_on DESC"

DELETE_CHAT = "DELETE FROM ChatHistory WHERE id = :id"


INSERT_ANSWER = """
INSERT INTO AiAnswers(role, content, chat_id) VALUES (:role, :content, :chat_id)
"""

LIST_CHAT_ANSWERS = "SELECT * FROM AiAnswers WHERE chat_id = :chat_id ORDER BY id"

DELETE_CHAT_ANSWERS = "DELETE FROM AiAnswers WHERE chat_id = :chat_id"


class NotFound(Exception):
    pass


class CategoryNotFound(NotFound):
    pass


class RecipeNotFound(NotFound):
    pass


class ChatNotFound(NotFound):
    pass


async def create_db(db: Database) -> None:
    for query in CREATE_TABLES:
        await db.execute(query=query)  # pyright: ignore[reportUnknownMemberType]


def _category(r: Record) -> Category:
    return Category(
        id=r["id"],
        name=r["name"],
        thumbnail=r["thumbnail"] or "",
        description=r["description"] or "",
    )


def _recipe(r: Record) -> Recipe:
    return Recipe(
        id=r["id"],
        category_id=r["category_id"],
        name=r["name"],
        image=r["image"] or "",
    )


def _recipe_detail(r: Record) -> RecipeDetail:
    ingredients = [
        Ingredient(i["name"], i["measure"]) for i in json.loads(r["ingredients"] or "[]")
    ]
    return RecipeDetail(
        id=r["id"],
        name=r["name"],
        category=r["category"] or "",
        area=r["area"] or "",
        instructions=r["instructions"] or "",
        image=r["image"] or "",
        youtube=r["youtube"] or "",
        source=r["source"] or "",
        ingredients=ingredients,
    )


def _day_recipe(r: Record) -> DayRecipe:
    return DayRecipe(
        id=r["id"],
        name=r["name"],
        category=r["category"] or "",
        area=r["area"] or "",
        image=r["image"] or "",
        created_on=datetime.fromisoformat(r["created_on"]),
    )


def _chat(r: Record) -> ChatHistory:
    return ChatHistory(
        id=r["id"],
        title=r["title"] or "",
        started_on=datetime.fromisoformat(r["started_on"]),
    )


def _answer(r: Record) -> AiAnswer:
    return AiAnswer(
        id=r["id"],
        role=Role(r["role"]),
        content=r["content"],
        chat_id=r["chat_id"],
    )


class CategoriesRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def insert(self, categories: list[Category]) -> None:
        if not categories:
            return
        await self.db.execute_many(  # pyright: ignore[reportUnknownMemberType]
            UPSERT_CATEGORY, values=[c.to_dict() for c in categories]
        )

    async def list(self) -> list[Category]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            LIST_CATEGORIES
        )
        return [_category(r) for r in result]

    async def get(self, id: str) -> Category:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_CATEGORY, values={"id": id}
        )
        if result is None:
            raise CategoryNotFound(f"{id}")
        return _category(result)


class RecipesRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def insert(self, recipes: list[Recipe]) -> None:
        if not recipes:
            return
        await self.db.execute_many(  # pyright: ignore[reportUnknownMemberType]
            UPSERT_RECIPE, values=[r.to_dict() for r in recipes]
        )

    async def by_category(self, category_id: str) -> list[Recipe]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            LIST_CATEGORY_RECIPES, values={"category_id": category_id}
        )
        return [_recipe(r) for r in result]


class RecipeDetailsRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def insert(self, details: list[RecipeDetail]) -> None:
        if not details:
            return
        values = []
        for detail in details:
            row = detail.to_dict()
            row["ingredients"] = json.dumps(row["ingredients"])
            values.append(row)
        await self.db.execute_many(  # pyright: ignore[reportUnknownMemberType]
            UPSERT_RECIPE_DETAIL, values=values
        )

    async def get(self, id: str) -> RecipeDetail:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_RECIPE_DETAIL, values={"id": id}
        )
        if result is None:
            raise RecipeNotFound(f"{id}")
        return _recipe_detail(result)

    async def list(self) -> list[RecipeDetail]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            LIST_RECIPE_DETAILS
        )
        return [_recipe_detail(r) for r in result]


class DayRecipesRepository:
    """Holds at most one recipe of the day."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def list(self) -> list[DayRecipe]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            LIST_DAY_RECIPES
        )
        return [_day_recipe(r) for r in result]

    async def insert(self, day_recipe: DayRecipe) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            INSERT_DAY_RECIPE, values=day_recipe.to_dict()
        )

    async def clear(self) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            CLEAR_DAY_RECIPES
        )


class BookmarksRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def list(self) -> list[str]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            LIST_BOOKMARKS
        )
        return [r["recipe_id"] for r in result]

    async def save(self, recipe_id: str) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            SAVE_BOOKMARK, values={"recipe_id": recipe_id}
        )

    async def delete(self, recipe_id: str) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            DELETE_BOOKMARK, values={"recipe_id": recipe_id}
        )

    async def is_bookmarked(self, recipe_id: str) -> bool:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_BOOKMARK, values={"recipe_id": recipe_id}
        )
        return result is not None


class ChatHistoryRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def list(self) -> list[ChatHistory]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            LIST_CHATS
        )
        return [_chat(r) for r in result]

    async def find(self, id: str) -> ChatHistory | None:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_CHAT, values={"id": id}
        )
        return None if result is None else _chat(result)

    async def get(self, id: str) -> ChatHistory:
        chat = await self.find(id)
        if chat is None:
            raise ChatNotFound(f"{id}")
        return chat

    async def insert(self, chat: ChatHistory) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            INSERT_CHAT, values=chat.to_dict()
        )

    async def update(self, chat: ChatHistory) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            UPDATE_CHAT, values={"id": chat.id, "title": chat.title}
        )

    async def delete(self, id: str) -> None:
        # Answers go with their chat.
        async with self.db.transaction():
            await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                DELETE_CHAT_ANSWERS, values={"chat_id": id}
            )
            await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                DELETE_CHAT, values={"id": id}
            )


class AiAnswersRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def insert(self, answer: AiAnswer) -> int:
        id = await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            INSERT_ANSWER,
            values={
                "role": answer.role.value,
                "content": answer.content,
                "chat_id": answer.chat_id,
            },
        )
        return int(id)

    async def by_chat(self, chat_id: str) -> list[AiAnswer]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            LIST_CHAT_ANSWERS, values={"chat_id": chat_id}
        )
        return [_answer(r) for r in result]
