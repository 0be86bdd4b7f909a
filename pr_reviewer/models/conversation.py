"""Conversation models sent to the review model."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

Role = Literal["system", "user", "assistant"]


class Message(BaseModel):
    """One role-tagged turn of a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class Conversation(BaseModel):
    """Ordered, immutable message sequence for a single model call."""

    model_config = ConfigDict(frozen=True)

    messages: tuple[Message, ...] = ()

    @classmethod
    def of(cls, *messages: tuple[Role, str]) -> "Conversation":
        """Build a conversation from ``(role, content)`` pairs."""
        return cls(
            messages=tuple(Message(role=role, content=content) for role, content in messages)
        )

    @property
    def system_prompt(self) -> str | None:
        """Content of the leading system message, if any."""
        if self.messages and self.messages[0].role == "system":
            return self.messages[0].content
        return None
