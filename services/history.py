"""
Conversation History - Append-only in-memory log of turns
=========================================================

Each exchange adds one user turn and one agent turn. Nothing is ever
removed and nothing is written to disk; the log lives as long as the
object that owns it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List


class Role(str, Enum):
    """Author of a conversation turn."""
    USER = "user"
    AGENT = "agent"


@dataclass(frozen=True)
class ConversationTurn:
    """A single role-tagged entry in the history."""
    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class ConversationHistory:
    """
    Append-only list of conversation turns.

    Example:
        history = ConversationHistory()
        history.append(Role.USER, "hello")
        history.append(Role.AGENT, "Hello!")
        len(history)  # 2
    """

    def __init__(self):
        self._turns: List[ConversationTurn] = []

    def append(self, role: Role, content: str) -> ConversationTurn:
        """Append a turn and return it."""
        turn = ConversationTurn(role=Role(role), content=content)
        self._turns.append(turn)
        return turn

    def turns(self) -> List[ConversationTurn]:
        """Copy of all turns in chronological order."""
        return list(self._turns)

    def to_list(self) -> List[Dict[str, str]]:
        return [turn.to_dict() for turn in self._turns]

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(list(self._turns))
