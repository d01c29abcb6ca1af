"""
Terminal UI Module - Textual-based chat
======================================

This module provides a terminal chat window using Textual.
"""

from .app import ChatApp, build_session, run_tui

__all__ = [
    "ChatApp",
    "build_session",
    "run_tui",
]
