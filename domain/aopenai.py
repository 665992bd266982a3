import os
from typing import Any

import openai

from domain.models import Role


OPENAI_TOKEN = os.environ.get("OPENAI_API_KEY")
TIMEOUT = 60 * 2
DEFAULT_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")

# The api calls the model "assistant", we store it as "model".
API_ROLES = {Role.user: "user", Role.model: "assistant"}


class EmptyResponse(ValueError):
    pass


def openai_client_factory(
    token: str | None = None,
    *,
    timeout: float = TIMEOUT,
) -> openai.AsyncClient:
    token = OPENAI_TOKEN if token is None else token
    return openai.AsyncClient(api_key=token, timeout=timeout)


async def quick_chat(
    msg: str,
    *,
    openai_client: openai.AsyncClient,
    model: str | None = None,
) -> str:
    model = DEFAULT_MODEL if model is None else model
    resp = await openai_client.chat.completions.create(
        model=model,
        messages=[{"role": "user", "content": msg}],
    )
    ans = resp.choices[0].message.content or ""
    return ans.strip()


class ChatMsg:
    def __init__(self, *, role: Role, content: str) -> None:
        self.role = role
        self.content = content

    def to_dict(self) -> dict[str, Any]:
        return {"role": API_ROLES[self.role], "content": self.content}


class Chat:
    """A conversation with the model seeded from stored history."""

    def __init__(
        self,
        *,
        openai_client: openai.AsyncClient,
        model: str | None = None,
        system_prompt: str | None = None,
        messages: list[ChatMsg] | None = None,
    ) -> None:
        self.model = DEFAULT_MODEL if model is None else model
        self.system_prompt = system_prompt
        self._messages: list[ChatMsg] = [] if messages is None else list(messages)
        self._client = openai_client

    @property
    def history(self) -> list[ChatMsg]:
        return list(self._messages)

    def to_dict(self, pending: ChatMsg) -> dict[str, Any]:
        messages = [m.to_dict() for m in self._messages + [pending]]
        if self.system_prompt:
            messages.insert(0, {"role": "system", "content": self.system_prompt})
        return {"model": self.model, "messages": messages}

    async def send_message(self, text: str) -> str:
        """Send the next user turn, only remembering it once the model replied."""
        msg = ChatMsg(role=Role.user, content=text)
        resp = await self._client.chat.completions.create(**self.to_dict(msg))
        ans = (resp.choices[0].message.content or "").strip()
        if not ans:
            raise EmptyResponse("The model returned no text.")
        self._messages.append(msg)
        self._messages.append(ChatMsg(role=Role.model, content=ans))
        return ans
