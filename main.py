import contextlib
import logging
from typing import Any
import uuid

from databases import Database
from rich.logging import RichHandler
from starlette.applications import Starlette
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

import config
import db
from domain.aopenai import openai_client_factory
from domain.chat import ChatSession
from domain.generative import SuggestionSession, load_ai_data
from domain.llm_service import GenerativeModel, LLMService
from domain.recipes import RecipeRepository
from domain.services import bookmarked_recipes, recipe_detail_state, toggle_bookmark
from mealdb import MealdbClient


logger = logging.getLogger(__name__)


class Session:
    """What one client screen session holds on to between requests."""

    def __init__(self, *, chat: ChatSession, suggestions: SuggestionSession) -> None:
        self.chat = chat
        self.suggestions = suggestions


def get_session(request: Request) -> Session:
    sid = request.path_params["sid"]
    session = request.app.state.sessions.get(sid)
    if session is None:
        raise HTTPException(404, f"Unknown session {sid}")
    return session


def chat_response(session: Session) -> JSONResponse:
    return JSONResponse(
        {
            "chat": (
                None
                if session.chat.current_chat is None
                else session.chat.current_chat.to_dict()
            ),
            "state": session.chat.state.to_dict(),
            "new_message_id": session.chat.new_message_id,
        }
    )


async def not_found(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": f"Not found: {exc}"}, status_code=404)


async def categories(request: Request) -> JSONResponse:
    repo: RecipeRepository = request.app.state.repo
    return JSONResponse([c.to_dict() for c in await repo.categories()])


async def category_recipes(request: Request) -> JSONResponse:
    repo: RecipeRepository = request.app.state.repo
    recipes = await repo.get_recipes(request.path_params["id"])
    return JSONResponse([r.to_dict() for r in recipes])


async def recipe_detail(request: Request) -> JSONResponse:
    state = await recipe_detail_state(
        request.path_params["id"],
        repository=request.app.state.repo,
        bookmarks=request.app.state.bookmarks,
    )
    return JSONResponse(state.to_dict())


async def bookmark(request: Request) -> JSONResponse:
    id = request.path_params["id"]
    is_bookmarked = await toggle_bookmark(id, bookmarks=request.app.state.bookmarks)
    return JSONResponse({"id": id, "is_bookmarked": is_bookmarked})


async def bookmarks(request: Request) -> JSONResponse:
    details = await bookmarked_recipes(
        repository=request.app.state.repo,
        bookmarks=request.app.state.bookmarks,
    )
    return JSONResponse([d.to_dict() for d in details])


async def day_recipe(request: Request) -> JSONResponse:
    repo: RecipeRepository = request.app.state.repo
    async for resource in repo.day_recipe():
        if resource.ok:
            return JSONResponse(resource.data.to_dict())
        return JSONResponse({"error": resource.message}, status_code=502)
    return JSONResponse({"error": "No recipe of the day."}, status_code=502)


async def refresh(request: Request) -> JSONResponse:
    repo: RecipeRepository = request.app.state.repo
    task = BackgroundTask(repo.refresh_database)
    return JSONResponse({"refreshing": True}, status_code=202, background=task)


async def chats(request: Request) -> JSONResponse:
    store: db.ChatHistoryRepository = request.app.state.chats
    return JSONResponse([c.to_dict() for c in await store.list()])


async def create_session(request: Request) -> JSONResponse:
    sid = uuid.uuid4().hex
    ai_data = await load_ai_data(request.app.state.details)
    request.app.state.sessions[sid] = Session(
        chat=ChatSession(
            chats=request.app.state.chats,
            answers=request.app.state.answers,
            model=request.app.state.llm,
        ),
        suggestions=SuggestionSession(model=request.app.state.llm, ai_data=ai_data),
    )
    return JSONResponse({"sid": sid, "cuisines": ai_data.cuisines}, status_code=201)


async def end_session(request: Request) -> JSONResponse:
    sid = request.path_params["sid"]
    if request.app.state.sessions.pop(sid, None) is None:
        raise HTTPException(404, f"Unknown session {sid}")
    logger.debug("Ended session %s", sid)
    return JSONResponse({"sid": sid, "ended": True})


async def new_chat(request: Request) -> JSONResponse:
    session = get_session(request)
    await session.chat.start_new_chat()
    return chat_response(session)


async def current_chat(request: Request) -> JSONResponse:
    session = get_session(request)
    match request.method.lower():
        case "put":
            if not await session.chat.set_current_chat(request.path_params["chat_id"]):
                raise HTTPException(404, "Unknown chat")
        case "delete":
            await session.chat.delete_chat(request.path_params["chat_id"])
        case _:
            raise ValueError("Unsupported method.")
    return chat_response(session)


async def messages(request: Request) -> JSONResponse:
    session = get_session(request)
    data = await request.json()
    question = str(data.get("question", "")).strip()
    if not question:
        raise HTTPException(400, "Ask a question.")
    await session.chat.ask_question(question)
    resp = chat_response(session)
    session.chat.reset_message_id()
    return resp


def suggestions_status(session: SuggestionSession, *, suggested: bool) -> int:
    if suggested:
        return 200
    # Missing choices are the caller's fault, anything else is the model's.
    return 422 if session.parameters.missing else 502


async def suggestions(request: Request) -> JSONResponse:
    session = get_session(request).suggestions
    data: dict[str, Any] = await request.json()
    session.on_meal_type_change(str(data.get("meal_type", "")))
    session.on_cuisine_change(str(data.get("cuisine", "")))
    session.on_mood_change(str(data.get("mood", "")))
    session.on_dietary_change(str(data.get("dietary", "")))
    session.on_quick_change(bool(data.get("is_quick", False)))

    suggested: list[bool] = []
    await session.generate_suggestions(lambda: suggested.append(True))
    return JSONResponse(
        {
            "parameters": session.parameters.to_dict(),
            "state": session.state.to_dict(),
            "suggested": bool(suggested),
        },
        status_code=suggestions_status(session, suggested=bool(suggested)),
    )


def create_app(
    conf: config.Config | None = None,
    *,
    llm: GenerativeModel | None = None,
    mealdb: MealdbClient | None = None,
) -> Starlette:
    conf = config.Config() if conf is None else conf

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        logging.basicConfig(
            level=conf.log_level,
            format="%(message)s",
            handlers=[RichHandler()],
        )
        database = Database(conf.db_url, force_rollback=conf.db_force_rollback)
        await database.connect()
        await db.create_db(database)

        api = (
            MealdbClient(base_url=conf.mealdb_base_url, timeout=conf.mealdb_timeout)
            if mealdb is None
            else mealdb
        )
        owned_llm = None
        if llm is None:
            owned_llm = LLMService(
                openai_client_factory(conf.openai_api_key, timeout=conf.llm_timeout),
                model=conf.core_model,
            )

        app.state.llm = llm if owned_llm is None else owned_llm
        app.state.details = db.RecipeDetailsRepository(database)
        app.state.bookmarks = db.BookmarksRepository(database)
        app.state.chats = db.ChatHistoryRepository(database)
        app.state.answers = db.AiAnswersRepository(database)
        app.state.repo = RecipeRepository(
            api=api,
            categories=db.CategoriesRepository(database),
            recipes=db.RecipesRepository(database),
            details=app.state.details,
            day_recipes=db.DayRecipesRepository(database),
        )
        app.state.sessions = {}
        logger.info("Pantrypal started against %s", conf.db_url)
        yield
        # Abandoned sessions simply drop their in-flight work.
        app.state.sessions.clear()
        if mealdb is None:
            await api.close()
        if owned_llm is not None:
            await owned_llm.close()
        await database.disconnect()

    return Starlette(
        debug=conf.env == config.Env.local,
        routes=[
            Route("/categories", categories),
            Route("/categories/{id:str}/recipes", category_recipes),
            Route("/recipes/{id:str}", recipe_detail),
            Route("/recipes/{id:str}/bookmark", bookmark, methods=["POST"]),
            Route("/bookmarks", bookmarks),
            Route("/day-recipe", day_recipe),
            Route("/refresh", refresh, methods=["POST"]),
            Route("/chats", chats),
            Route("/sessions", create_session, methods=["POST"]),
            Route("/sessions/{sid:str}", end_session, methods=["DELETE"]),
            Route("/sessions/{sid:str}/chats", new_chat, methods=["POST"]),
            Route(
                "/sessions/{sid:str}/chats/{chat_id:str}",
                current_chat,
                methods=["PUT", "DELETE"],
            ),
            Route("/sessions/{sid:str}/messages", messages, methods=["POST"]),
            Route("/sessions/{sid:str}/suggestions", suggestions, methods=["POST"]),
        ],
        exception_handlers={db.NotFound: not_found},
        lifespan=lifespan,
    )


app = create_app()
