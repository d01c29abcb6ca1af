"""
Responder - Rule-based reply generation
=======================================

This module provides the responder that maps an incoming message to a
reply. Messages are classified by an ordered list of rules; the first
matching rule's handler renders one of the canned reply templates.

Classification order:
    1. question   - what/how/why/when/where or a "?", with its own
                    sub-rules (identity, time, agent, capabilities,
                    insight)
    2. greeting   - starts with hi/hello/hey/greetings
    3. task       - help/assist/can you/could you
    4. math       - "<n> <op> <n>" or a calculation keyword
    5. capabilities
    6. default
"""

import random
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from core.config import ResponderConfig
from core.exceptions import RuleError
from core.logging import get_logger
from rules.engine import MatchType, Rule, RuleMatch, RulesEngine
from rules.templates import TemplateManager
from . import calculator
from .history import ConversationHistory, Role
from .knowledge import KnowledgeBase

logger = get_logger("services.responder")


REPLY_TEMPLATES: Dict[str, str] = {
    "greeting": (
        "Hello! I'm an autonomous AI agent ready to assist you. I can answer "
        "questions, solve problems, provide recommendations, and help with "
        "various tasks. What would you like to explore today?"
    ),
    "identity": (
        "I'm an autonomous AI agent designed to assist, analyze, and solve "
        "problems independently. I process information, make decisions, and "
        "provide solutions without requiring step-by-step guidance. Think of me "
        "as an intelligent assistant that can understand context and take "
        "initiative to help you effectively."
    ),
    "clock": "Current time: {time}\nCurrent date: {date}\nTimezone: {timezone}",
    "agent": (
        "As an autonomous agent, I'm designed to operate independently while "
        "serving your needs. I can understand context, make informed decisions, "
        "and provide comprehensive assistance across various domains. I "
        "continuously adapt my responses based on our conversation."
    ),
    "insight": (
        "That's an interesting question! Based on my analysis, I'd approach this "
        "by considering multiple perspectives. {insight} Would you like me to "
        "elaborate on any particular aspect?"
    ),
    "task": (
        "I'm ready to help with that! I'll autonomously work on: \"{input}\"\n\n"
        "I can break this down into actionable steps, analyze the requirements, "
        "and provide you with a comprehensive solution. I'm approaching this "
        "systematically to ensure the best outcome. What specific aspect would "
        "you like me to focus on first?"
    ),
    "calculation": (
        "Calculation result: {left} {operator} {right} = {result}\n\n"
        "I've computed this autonomously. Would you like me to perform any other "
        "calculations or explain the math?"
    ),
    "undefined": "That operation resulted in an undefined value (possibly division by zero).",
    "need_numbers": (
        "I can help with calculations! Please provide the numbers and operation "
        "you'd like me to compute."
    ),
    "capabilities": (
        "I'm an autonomous agent with these capabilities:\n\n{capability_list}\n\n"
        "I operate independently to provide you with the best assistance "
        "possible. How can I help you today?"
    ),
    "default": (
        "I've processed your input: \"{input}\"\n\n"
        "As an autonomous agent, I'm analyzing this to provide the most relevant "
        "assistance. Based on context, I can offer insights, suggestions, or take "
        "action. What specific outcome are you looking for? I'm ready to adapt my "
        "approach based on your needs."
    ),
}

INSIGHTS: Tuple[str, ...] = (
    "This requires a multi-faceted analysis considering various factors.",
    "Breaking this down, there are several key considerations to explore.",
    "From an analytical perspective, I see multiple dimensions to this.",
    "This is a complex topic that benefits from systematic examination.",
    "Let me provide a comprehensive view of this subject.",
)


@dataclass
class Reply:
    """
    Result of responder processing.

    Attributes:
        response (str): Reply text
        rule (str): Dotted path of the rules that produced it,
            e.g. ``math`` or ``question.time``
        latency_ms (int): Processing time
        path (list): Rule names from top level down, e.g.
            ``["question", "time"]``
    """
    response: str
    rule: str
    latency_ms: int = 0
    path: List[str] = field(default_factory=list)


def _local_clock() -> datetime:
    return datetime.now().astimezone()


def _timezone_name(now: datetime) -> str:
    key = getattr(now.tzinfo, "key", None)
    return key or now.tzname() or "UTC"


class Responder:
    """
    Rule-based responder with an append-only conversation history.

    One instance is created per application and handed to whoever needs
    it; nothing about it is global.

    Example:
        responder = Responder(rng=random.Random(7))
        responder.respond("2 ^ 3")   # "Calculation result: 2 ^ 3 = 8 ..."
        len(responder.history)       # 2
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        knowledge: Optional[KnowledgeBase] = None,
        history: Optional[ConversationHistory] = None,
    ):
        """
        Initialize the responder.

        Args:
            rng: Source for picking insight fillers (seed it for
                reproducible replies)
            clock: Returns the current, timezone-aware time
            knowledge: Static knowledge; the default capabilities and
                personality when omitted
            history: History to append to; a fresh one when omitted
        """
        self.rng = rng or random.Random()
        self.clock = clock or _local_clock
        self.knowledge = knowledge or KnowledgeBase()
        self.history = history if history is not None else ConversationHistory()
        self.templates = TemplateManager(REPLY_TEMPLATES)

        self.question_rules = self._build_question_rules()
        self.rules = self._build_rules()
        self._branches: Dict[str, RulesEngine] = {"question": self.question_rules}

    @classmethod
    def from_config(cls, config: ResponderConfig) -> "Responder":
        """Build a responder from the ``responder`` config section."""
        rng = random.Random(config.insight_seed)

        clock = None
        if config.timezone:
            zone = ZoneInfo(config.timezone)
            clock = lambda: datetime.now(zone)

        return cls(rng=rng, clock=clock)

    # === Rule sets ===

    def _build_rules(self) -> RulesEngine:
        return RulesEngine([
            Rule(
                name="question",
                patterns=["what", "how", "why", "when", "where", "?"],
                match_type=MatchType.CONTAINS,
                handler=self._answer_question,
            ),
            Rule(
                name="greeting",
                patterns=["^(hi|hello|hey|greetings)"],
                match_type=MatchType.REGEX,
                handler=lambda match: self.templates.render("greeting"),
            ),
            Rule(
                name="task",
                patterns=["help", "assist", "can you", "could you"],
                match_type=MatchType.CONTAINS,
                handler=lambda match: self.templates.render("task", {"input": match.message}),
            ),
            Rule(
                name="math",
                patterns=[calculator.TRIGGER_EXPRESSION, calculator.TRIGGER_WORDS],
                match_type=MatchType.REGEX,
                handler=self._calculate,
            ),
            Rule(
                name="capabilities",
                patterns=["what can you do", "capabilities"],
                match_type=MatchType.CONTAINS,
                handler=self._list_capabilities,
            ),
            Rule(
                name="default",
                patterns=[],
                match_type=MatchType.ALWAYS,
                handler=lambda match: self.templates.render("default", {"input": match.message}),
            ),
        ])

    def _build_question_rules(self) -> RulesEngine:
        return RulesEngine([
            Rule(
                name="identity",
                patterns=["who are you", "what are you"],
                handler=lambda match: self.templates.render("identity"),
            ),
            Rule(
                name="time",
                patterns=["time", "date"],
                handler=self._tell_time,
            ),
            Rule(
                name="agent",
                patterns=["agent", "ai"],
                handler=lambda match: self.templates.render("agent"),
            ),
            # "what can you do" always contains "what", so it is caught here
            Rule(
                name="capabilities",
                patterns=["what can you do", "capabilities"],
                handler=self._list_capabilities,
            ),
            Rule(
                name="insight",
                patterns=[],
                match_type=MatchType.ALWAYS,
                handler=lambda match: self.templates.render(
                    "insight", {"insight": self.pick_insight()}
                ),
            ),
        ])

    # === Handlers ===

    def _answer_question(self, match: RuleMatch) -> str:
        sub = self.question_rules.match(match.message)
        if sub is None:
            raise RuleError("No question rule matched", {"message": match.message})
        return sub.get_response()

    def _tell_time(self, match: RuleMatch) -> str:
        now = self.clock()
        return self.templates.render("clock", {
            "time": now.strftime("%X"),
            "date": now.strftime("%x"),
            "timezone": _timezone_name(now),
        })

    def _calculate(self, match: RuleMatch) -> str:
        calc = calculator.extract(match.message)
        if calc is None:
            return self.templates.render("need_numbers")

        if calc.undefined:
            return self.templates.render("undefined")

        return self.templates.render("calculation", {
            "left": calculator.format_number(calc.left),
            "operator": calc.operator,
            "right": calculator.format_number(calc.right),
            "result": calculator.format_number(calc.result),
        })

    def _list_capabilities(self, match: RuleMatch) -> str:
        lines = [f"{i}. {c}" for i, c in enumerate(self.knowledge.capabilities, start=1)]
        return self.templates.render("capabilities", {"capability_list": "\n".join(lines)})

    def pick_insight(self) -> str:
        """Pick one of the insight fillers uniformly at random."""
        return self.rng.choice(INSIGHTS)

    # === Public API ===

    def classify(self, message: str) -> List[str]:
        """
        Return the path of rule names that would handle ``message``.

        Example:
            responder.classify("what time is it")  # ["question", "time"]
        """
        return self._dispatch(message)[1]

    def _dispatch(self, message: str) -> Tuple[RuleMatch, List[str]]:
        engine = self.rules
        path: List[str] = []

        while True:
            match = engine.match(message)
            if match is None:
                raise RuleError("No rule matched", {"path": path})
            path.append(match.rule.name)

            branch = self._branches.get(match.rule.name)
            if branch is None:
                return match, path
            engine = branch

    def reply(self, message: str) -> Reply:
        """
        Classify ``message``, render the reply and record both turns.

        Args:
            message: User message, used verbatim in echoing replies

        Returns:
            Reply with the text and the rule path that produced it
        """
        start = time.perf_counter()
        self.history.append(Role.USER, message)

        match, path = self._dispatch(message)
        response = match.get_response()

        self.history.append(Role.AGENT, response)
        latency_ms = int((time.perf_counter() - start) * 1000)

        rule = ".".join(path)
        logger.debug(f"Answered with rule '{rule}' in {latency_ms}ms")

        return Reply(response=response, rule=rule, latency_ms=latency_ms, path=path)

    def respond(self, message: str) -> str:
        """Reply text for ``message``. See ``reply``."""
        return self.reply(message).response

    def get_status(self) -> Dict[str, object]:
        """Summary used by status endpoints."""
        return {
            "rules": self.rules.rule_names(),
            "question_rules": self.question_rules.rule_names(),
            "history_length": len(self.history),
            "knowledge": self.knowledge.to_dict(),
        }
