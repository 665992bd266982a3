"""AI chat over the stored conversations.

A `ChatSession` belongs to one screen session. It tracks which conversation
is current and republishes `state` after every change:

    no chat -> new chat (not stored yet) -> stored chat

A new chat only reaches storage when its first question is asked, so a chat
that is started and abandoned leaves nothing behind.
"""

from datetime import datetime
import logging
import uuid

from db import AiAnswersRepository, ChatHistoryRepository
from domain.aopenai import ChatMsg
from domain.llm_service import GenerativeModel
from domain.models import AiAnswer, AskStep, ChatHistory, ChatUiError, ChatUiState, Role
from domain.prompts import title_prompt


logger = logging.getLogger(__name__)


class ChatSession:
    def __init__(
        self,
        *,
        chats: ChatHistoryRepository,
        answers: AiAnswersRepository,
        model: GenerativeModel,
    ) -> None:
        self.chats = chats
        self.answers = answers
        self.model = model
        self.current_chat: ChatHistory | None = None
        self.state: ChatUiState | ChatUiError = ChatUiState()
        self.new_message_id: str | None = None

    async def chat_history(self) -> list[ChatHistory]:
        return await self.chats.list()

    async def refresh(self) -> ChatUiState | ChatUiError:
        """Rebuild the conversation view from storage."""
        chat = self.current_chat
        if chat is None:
            self.state = ChatUiState()
            return self.state

        try:
            messages = await self.answers.by_chat(chat.id)
        except Exception as e:
            logger.exception("Could not read chat %s", chat.id)
            self.state = ChatUiError(str(e) or "Unknown error occurred")
            return self.state

        previous = self.state if isinstance(self.state, ChatUiState) else ChatUiState()
        self.state = ChatUiState(
            messages=messages,
            title=chat.title,
            is_processing=previous.is_processing,
            error=previous.error,
            failed_step=previous.failed_step,
        )
        return self.state

    async def _switch_to(self, chat: ChatHistory | None) -> None:
        self.current_chat = chat
        self.state = ChatUiState()
        await self.refresh()

    async def reset_chat(self) -> None:
        await self._switch_to(None)

    def reset_message_id(self) -> None:
        self.new_message_id = None

    async def start_new_chat(self) -> ChatHistory:
        chat = ChatHistory(id=str(uuid.uuid4()), title="", started_on=datetime.now())
        await self._switch_to(chat)
        return chat

    async def set_current_chat(self, id: str) -> bool:
        """Make a stored chat current. Unknown ids leave everything as it was."""
        chat = await self.chats.find(id)
        if chat is None:
            logger.warning("Chat %s does not exist, keeping the current chat", id)
            return False
        await self._switch_to(chat)
        return True

    async def delete_chat(self, id: str) -> None:
        await self.chats.delete(id)
        if self.current_chat is not None and self.current_chat.id == id:
            await self._switch_to(None)

    def _update(self, **changes: object) -> None:
        if isinstance(self.state, ChatUiState):
            for name, value in changes.items():
                setattr(self.state, name, value)

    async def ask_question(self, question: str) -> None:
        """Store the question, ask the model and store its answer.

        Each write stands on its own: if a later step fails the earlier ones
        are kept and the failing step is reported on the state.
        """
        chat = self.current_chat
        if chat is None:
            return

        self._update(is_processing=True)
        step = AskStep.persist_chat
        try:
            if await self.chats.find(chat.id) is None:
                await self.chats.insert(chat)
                logger.info("Stored new chat %s", chat.id)

            step = AskStep.save_question
            history = await self.answers.by_chat(chat.id)
            await self.answers.insert(
                AiAnswer(role=Role.user, content=question, chat_id=chat.id)
            )
            await self.refresh()

            if not chat.title:
                await self._generate_title(question, chat)

            step = AskStep.model_reply
            session = self.model.start_chat(
                [ChatMsg(role=a.role, content=a.content) for a in history]
            )
            reply = await session.send_message(question)

            step = AskStep.save_reply
            id = await self.answers.insert(
                AiAnswer(role=Role.model, content=reply, chat_id=chat.id)
            )
            self.new_message_id = str(id)
        except Exception as e:
            logger.warning("Question failed at %s", step.value, exc_info=True)
            self._update(
                is_processing=False,
                error=str(e) or "Something went wrong!",
                failed_step=step,
            )
        else:
            self._update(is_processing=False, error=None, failed_step=None)
        await self.refresh()

    async def _generate_title(self, question: str, chat: ChatHistory) -> None:
        # A chat without a title is still usable so failures only get logged.
        try:
            title = await self.model.generate_content(title_prompt(question))
            updated = chat.copy(title=title.strip())
            await self.chats.update(updated)
        except Exception:
            logger.warning("Could not title chat %s", chat.id, exc_info=True)
            return
        if self.current_chat is not None and self.current_chat.id == chat.id:
            self.current_chat = updated
