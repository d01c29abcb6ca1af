"""
Web UI Module - FastAPI-based web interface
===========================================

This module provides the web surface of Rule Agent:
- The ``/api/agent`` endpoint
- A browser chat page
- Read-only history, rules and status views
"""

from .app import create_app, run_app
from .routes import router

__all__ = [
    "create_app",
    "run_app",
    "router",
]
