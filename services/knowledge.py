"""
Knowledge Base - Static self-description of the agent
=====================================================

Built once when a responder is created and never changed afterwards.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Tuple


DEFAULT_CAPABILITIES: Tuple[str, ...] = (
    "Answer questions and provide information",
    "Analyze problems and suggest solutions",
    "Generate creative content",
    "Perform calculations and logical reasoning",
    "Provide recommendations and advice",
)


@dataclass(frozen=True)
class Personality:
    """Tone, approach and style descriptors."""
    tone: str = "helpful and professional"
    approach: str = "autonomous and proactive"
    style: str = "clear and concise"


@dataclass(frozen=True)
class KnowledgeBase:
    """
    Immutable key/value knowledge held by a responder.

    Attributes:
        capabilities (tuple): Ordered capability descriptions
        personality (Personality): Fixed personality record
    """
    capabilities: Tuple[str, ...] = DEFAULT_CAPABILITIES
    personality: Personality = field(default_factory=Personality)

    def get(self, key: str) -> Any:
        """
        Look up an entry by key.

        Raises:
            KeyError: For keys other than ``capabilities`` and ``personality``
        """
        if key == "capabilities":
            return self.capabilities
        if key == "personality":
            return self.personality
        raise KeyError(key)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capabilities": list(self.capabilities),
            "personality": asdict(self.personality),
        }
