"""
Rules Engine - Ordered pattern matching with handler dispatch
=============================================================

This module implements the rules engine that classifies incoming
messages. Rules are evaluated strictly in the order they were added
and the first match wins, so the rule list itself is the
classification order and can be inspected at runtime.
"""

import re
from typing import Optional, List, Dict, Any, Callable
from dataclasses import dataclass, field
from enum import Enum

from core.exceptions import RuleError


Handler = Callable[["RuleMatch"], str]


class MatchType(Enum):
    """Types of pattern matching."""
    CONTAINS = "contains"     # Contains substring
    STARTSWITH = "startswith" # Starts with
    REGEX = "regex"           # Regular expression (searched anywhere)
    KEYWORDS = "keywords"     # Contains any whitespace-separated keyword
    ALWAYS = "always"         # Matches everything, for fallbacks


@dataclass
class RuleMatch:
    """
    Result of a rule matching a message.

    Attributes:
        rule (Rule): The matching rule
        message (str): The matched message, verbatim
        groups (dict): Named groups captured by a regex pattern
    """
    rule: 'Rule'
    message: str
    groups: Dict[str, str] = field(default_factory=dict)

    def get_response(self) -> str:
        """Generate response from the matched rule."""
        return self.rule.handler(self)


@dataclass
class Rule:
    """
    A single classification rule.

    Matching is case-insensitive for every match type. The handler
    receives the RuleMatch and returns the reply text.

    Attributes:
        name (str): Unique rule name
        patterns (list): Patterns to match, any one suffices
        handler (callable): Produces the reply for a match
        match_type (MatchType): How to match patterns
        enabled (bool): Whether rule is active
    """
    name: str
    patterns: List[str]
    handler: Handler
    match_type: MatchType = MatchType.CONTAINS
    enabled: bool = True
    _compiled: List["re.Pattern"] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        if self.match_type == MatchType.REGEX:
            try:
                self._compiled = [re.compile(p, re.IGNORECASE | re.ASCII) for p in self.patterns]
            except re.error as e:
                raise RuleError(f"Invalid pattern in rule '{self.name}': {e}")

    def matches(self, message: str) -> Optional[RuleMatch]:
        """
        Check if this rule matches a message.

        Args:
            message: Message to check

        Returns:
            RuleMatch if matched, None otherwise
        """
        if not self.enabled:
            return None

        if self.match_type == MatchType.ALWAYS:
            return RuleMatch(rule=self, message=message)

        if self.match_type == MatchType.REGEX:
            for regex in self._compiled:
                found = regex.search(message)
                if found:
                    return RuleMatch(rule=self, message=message, groups=found.groupdict())
            return None

        message_lower = message.lower()
        for pattern in self.patterns:
            if self._match_pattern(pattern.lower(), message_lower):
                return RuleMatch(rule=self, message=message)

        return None

    def _match_pattern(self, pattern: str, message_lower: str) -> bool:
        if self.match_type == MatchType.CONTAINS:
            return pattern in message_lower

        if self.match_type == MatchType.STARTSWITH:
            return message_lower.startswith(pattern)

        if self.match_type == MatchType.KEYWORDS:
            return any(kw in message_lower for kw in pattern.split())

        return False

    def to_dict(self) -> Dict[str, Any]:
        """Convert rule to a serialisable dictionary (handler excluded)."""
        return {
            "name": self.name,
            "patterns": list(self.patterns),
            "match_type": self.match_type.value,
            "enabled": self.enabled,
        }


class RulesEngine:
    """
    Ordered, first-match-wins collection of rules.

    Example:
        engine = RulesEngine()

        engine.add_rule(Rule(
            name="greeting",
            patterns=[r"^(hi|hello)"],
            match_type=MatchType.REGEX,
            handler=lambda match: "Hello!",
        ))

        match = engine.match("Hello there!")
        if match:
            print(match.get_response())
    """

    def __init__(self, rules: Optional[List[Rule]] = None):
        self.rules: List[Rule] = []
        for rule in rules or []:
            self.add_rule(rule)

    def add_rule(self, rule: Rule, before: Optional[str] = None) -> None:
        """
        Add a rule to the engine.

        Args:
            rule: Rule to add
            before: Name of an existing rule to insert in front of;
                appended at the end when omitted

        Raises:
            RuleError: If the name is taken or ``before`` is unknown
        """
        if self.get_rule(rule.name) is not None:
            raise RuleError(f"Duplicate rule name: {rule.name}")

        if before is None:
            self.rules.append(rule)
            return

        for i, existing in enumerate(self.rules):
            if existing.name == before:
                self.rules.insert(i, rule)
                return

        raise RuleError(f"Cannot insert before unknown rule: {before}")

    def remove_rule(self, name: str) -> bool:
        """
        Remove a rule by name.

        Returns:
            True if rule was removed
        """
        for i, rule in enumerate(self.rules):
            if rule.name == name:
                del self.rules[i]
                return True
        return False

    def get_rule(self, name: str) -> Optional[Rule]:
        """Get a rule by name, or None."""
        for rule in self.rules:
            if rule.name == name:
                return rule
        return None

    def match(self, message: str) -> Optional[RuleMatch]:
        """
        Find the first rule, in order, that matches a message.

        Returns:
            RuleMatch if found, None otherwise
        """
        for rule in self.rules:
            found = rule.matches(message)
            if found:
                return found
        return None

    def match_all(self, message: str) -> List[RuleMatch]:
        """Find all matching rules for a message, in order."""
        matches = []
        for rule in self.rules:
            found = rule.matches(message)
            if found:
                matches.append(found)
        return matches

    def rule_names(self) -> List[str]:
        """Rule names in evaluation order."""
        return [rule.name for rule in self.rules]

    def to_list(self) -> List[Dict[str, Any]]:
        """Serialisable view of the rules in evaluation order."""
        return [rule.to_dict() for rule in self.rules]

    def enable_rule(self, name: str) -> bool:
        """Enable a rule by name."""
        rule = self.get_rule(name)
        if rule:
            rule.enabled = True
            return True
        return False

    def disable_rule(self, name: str) -> bool:
        """Disable a rule by name."""
        rule = self.get_rule(name)
        if rule:
            rule.enabled = False
            return True
        return False
