"""
Core Module - Foundation components for Rule Agent
==================================================

This module provides the foundational components including:
- Configuration management
- Logging setup
- Exception handling
"""

from .config import Config, load_config, save_config
from .exceptions import (
    RuleAgentError,
    ConfigError,
    RuleError,
    TransportError,
)
from .logging import setup_logging, get_logger

__all__ = [
    "Config",
    "load_config",
    "save_config",
    "RuleAgentError",
    "ConfigError",
    "RuleError",
    "TransportError",
    "setup_logging",
    "get_logger",
]
