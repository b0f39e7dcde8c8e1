"""
Conversation History - Append-only record of prior turns.
"""

from typing import Iterable, List, Optional, Tuple

from finresearch.models.schemas import Message, MessageRole


class MessageHistory:
    """
    Ordered, append-only list of user/assistant turns.

    Supplied to the planner and the answer generator so follow-up
    questions ("and what about last year?") resolve against earlier turns.
    """

    def __init__(self):
        self._messages: List[Message] = []

    @classmethod
    def from_messages(cls, messages: Iterable[Message]) -> "MessageHistory":
        history = cls()
        for message in messages:
            history._append(message.role, message.content)
        return history

    def add_user_message(self, content: str) -> None:
        self._append(MessageRole.USER, content)

    def add_assistant_message(self, content: str) -> None:
        self._append(MessageRole.ASSISTANT, content)

    def _append(self, role: MessageRole, content: str) -> None:
        self._messages.append(Message(role=role, content=content))

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def format_for_prompt(self, limit: Optional[int] = 10) -> str:
        """Render the most recent turns as plain text."""
        if not self._messages:
            return ""
        recent = self._messages[-limit:] if limit else self._messages
        return "\n\n".join(
            f"{m.role.value.capitalize()}: {m.content}" for m in recent
        )
