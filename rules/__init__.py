"""
Rules Module - Ordered classification and reply templates
=========================================================

This module provides the rule machinery behind the responder:
- Ordered, first-match-wins rules
- Substring, prefix, keyword and regex matching
- Template-based reply text
"""

from .engine import RulesEngine, Rule, RuleMatch, MatchType
from .templates import TemplateManager, Template

__all__ = [
    "RulesEngine",
    "Rule",
    "RuleMatch",
    "MatchType",
    "TemplateManager",
    "Template",
]
