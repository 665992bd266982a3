import logging
from typing import Protocol

import openai

from domain.aopenai import (
    Chat,
    ChatMsg,
    EmptyResponse,
    openai_client_factory,
    quick_chat,
)
from domain.prompts import CHAT_SYSTEM_PROMPT


logger = logging.getLogger(__name__)


class ChatSessionLike(Protocol):
    async def send_message(self, text: str) -> str:
        ...


class GenerativeModel(Protocol):
    async def generate_content(self, prompt: str) -> str:
        ...

    def start_chat(self, history: list[ChatMsg]) -> ChatSessionLike:
        ...


class LLMService:
    def __init__(
        self,
        openai_client: openai.AsyncClient | None = None,
        *,
        model: str | None = None,
        system_prompt: str = CHAT_SYSTEM_PROMPT,
    ) -> None:
        self.openai_client = (
            openai_client_factory() if openai_client is None else openai_client
        )
        self.model = model
        self.system_prompt = system_prompt

    async def generate_content(self, prompt: str) -> str:
        ans = await quick_chat(prompt, openai_client=self.openai_client, model=self.model)
        if not ans:
            raise EmptyResponse("The model returned no text.")
        return ans

    def start_chat(self, history: list[ChatMsg]) -> Chat:
        logger.debug("Starting chat with %d previous messages", len(history))
        return Chat(
            openai_client=self.openai_client,
            model=self.model,
            system_prompt=self.system_prompt,
            messages=history,
        )

    async def close(self) -> None:
        await self.openai_client.close()
