from datetime import datetime
from enum import Enum
from typing import Any, Generic, Self, TypeVar

import markdown2  # pyright: ignore[reportMissingTypeStubs]


T = TypeVar("T")


class Category:
    def __init__(
        self,
        *,
        id: str,
        name: str,
        thumbnail: str = "",
        description: str = "",
    ) -> None:
        self.id = id
        self.name = name
        self.thumbnail = thumbnail
        self.description = description

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name})>"

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "thumbnail": self.thumbnail,
            "description": self.description,
        }


class Recipe:
    def __init__(
        self,
        *,
        id: str,
        category_id: str,
        name: str,
        image: str = "",
    ) -> None:
        self.id = id
        self.category_id = category_id
        self.name = name
        self.image = image

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, name={self.name})>"

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "category_id": self.category_id,
            "name": self.name,
            "image": self.image,
        }


class Ingredient:
    def __init__(self, name: str, measure: str = "") -> None:
        self.name = name
        self.measure = measure

    def __str__(self) -> str:
        return f"{self.name} ({self.measure})" if self.measure else self.name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ingredient):
            return NotImplemented
        return (self.name, self.measure) == (other.name, other.measure)

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "measure": self.measure}


class RecipeDetail:
    def __init__(
        self,
        *,
        id: str,
        name: str,
        category: str = "",
        area: str = "",
        instructions: str = "",
        image: str = "",
        youtube: str = "",
        source: str = "",
        ingredients: list[Ingredient] | None = None,
    ) -> None:
        self.id = id
        self.name = name
        self.category = category
        self.area = area
        self.instructions = instructions
        self.image = image
        self.youtube = youtube
        self.source = source
        self.ingredients = [] if ingredients is None else ingredients

    def __repr__(self) -> str:
        return f"<RecipeDetail(id={self.id}, name={self.name})>"

    def __str__(self) -> str:
        ingredients = ", ".join(str(i) for i in self.ingredients)
        return f"{self.name} ({self.area} {self.category}): {ingredients}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "area": self.area,
            "instructions": self.instructions,
            "image": self.image,
            "youtube": self.youtube,
            "source": self.source,
            "ingredients": [i.to_dict() for i in self.ingredients],
        }


class DayRecipe:
    """The cached recipe of the day. Only one is ever stored."""

    def __init__(
        self,
        *,
        id: str,
        name: str,
        category: str = "",
        area: str = "",
        image: str = "",
        created_on: datetime,
    ) -> None:
        self.id = id
        self.name = name
        self.category = category
        self.area = area
        self.image = image
        self.created_on = created_on

    def __repr__(self) -> str:
        return f"<DayRecipe(id={self.id}, name={self.name})>"

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "area": self.area,
            "image": self.image,
            "created_on": self.created_on.isoformat(),
        }


class ChatHistory:
    def __init__(self, *, id: str, title: str, started_on: datetime) -> None:
        self.id = id
        self.title = title
        self.started_on = started_on

    def __repr__(self) -> str:
        return f"<ChatHistory(id={self.id}, title={self.title})>"

    def copy(self, *, title: str) -> Self:
        return type(self)(id=self.id, title=title, started_on=self.started_on)

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "started_on": self.started_on.isoformat(),
        }


class Role(Enum):
    user = "user"
    model = "model"


class AiAnswer:
    def __init__(
        self,
        *,
        role: Role,
        content: str,
        chat_id: str,
        id: int | None = None,
    ) -> None:
        self.id = id
        self.role = role
        self.content = content
        self.chat_id = chat_id

    def __repr__(self) -> str:
        return f"<AiAnswer(id={self.id}, role={self.role.value})>"

    @property
    def html(self) -> str:
        return markdown2.markdown(  # pyright: ignore[reportUnknownVariableType, reportUnknownMemberType]
            self.content, extras=["fences", "tables"]
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "content": self.content,
            "chat_id": self.chat_id,
        }


class GenerativeParameters:
    """Filter values picked by the user before asking for a meal suggestion."""

    def __init__(
        self,
        *,
        meal_type: str = "",
        cuisine: str = "",
        mood: str = "",
        dietary: str = "",
        is_quick: bool = False,
    ) -> None:
        self.meal_type = meal_type
        self.cuisine = cuisine
        self.mood = mood
        self.dietary = dietary
        self.is_quick = is_quick

    @property
    def missing(self) -> list[str]:
        required = {
            "meal type": self.meal_type,
            "cuisine": self.cuisine,
            "mood": self.mood,
        }
        return [name for name, value in required.items() if not value]

    def to_dict(self) -> dict[str, Any]:
        return {
            "meal_type": self.meal_type,
            "cuisine": self.cuisine,
            "mood": self.mood,
            "dietary": self.dietary,
            "is_quick": self.is_quick,
        }


class GenerativeState:
    def __init__(
        self,
        *,
        is_loading: bool = False,
        error_message: str = "",
        generative_answer: str = "",
    ) -> None:
        self.is_loading = is_loading
        self.error_message = error_message
        self.generative_answer = generative_answer

    @property
    def html(self) -> str:
        return markdown2.markdown(  # pyright: ignore[reportUnknownVariableType, reportUnknownMemberType]
            self.generative_answer, extras=["fences", "tables"]
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_loading": self.is_loading,
            "error_message": self.error_message,
            "generative_answer": self.generative_answer,
        }


class AskStep(Enum):
    """Storage and model steps of a question, in the order they run."""

    persist_chat = "persist_chat"
    save_question = "save_question"
    model_reply = "model_reply"
    save_reply = "save_reply"


class ChatUiState:
    def __init__(
        self,
        *,
        messages: list[AiAnswer] | None = None,
        title: str = "",
        is_processing: bool = False,
        error: str | None = None,
        failed_step: AskStep | None = None,
    ) -> None:
        self.messages = [] if messages is None else messages
        self.title = title
        self.is_processing = is_processing
        self.error = error
        self.failed_step = failed_step

    def to_dict(self) -> dict[str, Any]:
        return {
            "messages": [m.to_dict() for m in self.messages],
            "title": self.title,
            "is_processing": self.is_processing,
            "error": self.error,
            "failed_step": None if self.failed_step is None else self.failed_step.value,
        }


class ChatUiError:
    """The conversation itself could not be read."""

    def __init__(self, message: str) -> None:
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class RecipeDetailState:
    def __init__(
        self,
        *,
        is_loading: bool = False,
        message: str = "",
        recipe_detail: RecipeDetail | None = None,
        is_bookmarked: bool = False,
    ) -> None:
        self.is_loading = is_loading
        self.message = message
        self.recipe_detail = recipe_detail
        self.is_bookmarked = is_bookmarked

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_loading": self.is_loading,
            "message": self.message,
            "recipe_detail": (
                None if self.recipe_detail is None else self.recipe_detail.to_dict()
            ),
            "is_bookmarked": self.is_bookmarked,
        }


class Resource(Generic[T]):
    """Either some data or the message explaining why there is none."""

    def __init__(self, *, data: T | None = None, message: str = "") -> None:
        self.data = data
        self.message = message

    @classmethod
    def success(cls, data: T) -> "Resource[T]":
        return cls(data=data)

    @classmethod
    def error(cls, message: str) -> "Resource[T]":
        return cls(message=message)

    @property
    def ok(self) -> bool:
        return self.data is not None

    def __repr__(self) -> str:
        if self.ok:
            return f"<Resource(data={self.data!r})>"
        return f"<Resource(message={self.message})>"
