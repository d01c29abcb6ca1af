"""
Services Module - Reply generation
==================================

This module provides the responder and its building blocks:
- Rule-based responder with ordered classification
- Single-operation calculator
- Append-only conversation history
- Static knowledge base
"""

from .responder import Responder, Reply
from .history import ConversationHistory, ConversationTurn, Role
from .knowledge import KnowledgeBase, Personality

__all__ = [
    "Responder",
    "Reply",
    "ConversationHistory",
    "ConversationTurn",
    "Role",
    "KnowledgeBase",
    "Personality",
]
