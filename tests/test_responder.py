"""
Test Responder Module
=====================

Unit tests for classification, reply rendering and history.
"""

import random
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import ResponderConfig
from services.history import ConversationHistory, Role
from services.knowledge import DEFAULT_CAPABILITIES, KnowledgeBase
from services.responder import INSIGHTS, REPLY_TEMPLATES, Responder


FIXED_NOW = datetime(2024, 3, 5, 14, 30, 15, tzinfo=ZoneInfo("Europe/Berlin"))


@pytest.fixture
def responder():
    return Responder(rng=random.Random(42), clock=lambda: FIXED_NOW)


class TestClassificationOrder:
    """Tests for which rule handles a message."""

    def test_rule_order(self, responder):
        """Test the top-level evaluation order."""
        assert responder.rules.rule_names() == [
            "question", "greeting", "task", "math", "capabilities", "default",
        ]
        assert responder.question_rules.rule_names() == [
            "identity", "time", "agent", "capabilities", "insight",
        ]

    @pytest.mark.parametrize("message", [
        "hello?",
        "can you help me?",
        "2 + 2?",
        "list your capabilities?",
        "?",
    ])
    def test_question_mark_wins(self, responder, message):
        """Test any message with a question mark is a question."""
        assert responder.classify(message)[0] == "question"

    def test_question_words_are_substrings(self, responder):
        """Test question words match inside other words."""
        assert responder.classify("show me 2 + 2")[0] == "question"

    @pytest.mark.parametrize("message, path", [
        ("who are you?", ["question", "identity"]),
        ("What time is it", ["question", "time"]),
        ("what is the date", ["question", "time"]),
        ("how does an agent work", ["question", "agent"]),
        ("what can you do", ["question", "capabilities"]),
        ("why is the sky blue", ["question", "insight"]),
        ("hello", ["greeting"]),
        ("Hey there", ["greeting"]),
        ("please assist me", ["task"]),
        ("could you move this", ["task"]),
        ("5 * 3", ["math"]),
        ("please calculate something", ["math"]),
        ("list capabilities", ["capabilities"]),
        ("tell me a story", ["default"]),
    ])
    def test_paths(self, responder, message, path):
        """Test classification of representative messages."""
        assert responder.classify(message) == path

    def test_greeting_only_at_start(self, responder):
        """Test greetings must open the message."""
        assert responder.classify("well hello") == ["default"]

    def test_task_beats_math(self, responder):
        """Test task requests take precedence over calculations."""
        assert responder.classify("can you add 2 + 3") == ["task"]

    def test_only_ascii_digits_are_math(self, responder):
        """Test non-ASCII digits do not trigger the math rule."""
        assert responder.classify("\u0662+\u0662") == ["default"]
        assert responder.classify("\uff12 * \uff13") == ["default"]


class TestReplies:
    """Tests for reply text."""

    def test_addition(self, responder):
        """Test a simple sum."""
        response = responder.respond("2 + 2")

        assert response.startswith("Calculation result: 2 + 2 = 4\n\n")

    def test_power(self, responder):
        """Test caret means exponentiation."""
        assert "2 ^ 3 = 8" in responder.respond("2 ^ 3")

    def test_decimal_operands(self, responder):
        """Test decimals are parsed as floats."""
        assert "12.5 * 2 = 25" in responder.respond("12.5 * 2")
        assert "7 / 2 = 3.5" in responder.respond("7 / 2")

    def test_division_by_zero(self, responder):
        """Test division by zero is reported, not computed."""
        assert responder.respond("5 / 0") == REPLY_TEMPLATES["undefined"]

    def test_power_overflow(self, responder):
        """Test an overflowing power is reported as infinite."""
        assert "= Infinity" in responder.respond("9 ^ 999")

    def test_math_without_numbers(self, responder):
        """Test a calculation keyword without an expression."""
        assert responder.respond("compute the total") == REPLY_TEMPLATES["need_numbers"]

    def test_greeting(self, responder):
        """Test the fixed greeting."""
        assert responder.respond("hello") == REPLY_TEMPLATES["greeting"]
        assert responder.respond("GREETINGS friend") == REPLY_TEMPLATES["greeting"]

    def test_identity(self, responder):
        """Test the identity reply."""
        assert responder.respond("what are you") == REPLY_TEMPLATES["identity"]

    def test_agent(self, responder):
        """Test the agent explanation."""
        assert responder.respond("are you an agent?") == REPLY_TEMPLATES["agent"]

    def test_time(self, responder):
        """Test time, date and zone come from the clock."""
        response = responder.respond("what time is it?")

        assert f"Current time: {FIXED_NOW.strftime('%X')}" in response
        assert f"Current date: {FIXED_NOW.strftime('%x')}" in response
        assert response.endswith("Timezone: Europe/Berlin")

    def test_capabilities_enumerated(self, responder):
        """Test all capabilities are listed 1-indexed in order."""
        response = responder.respond("what can you do")

        positions = []
        for i, capability in enumerate(DEFAULT_CAPABILITIES, start=1):
            line = f"{i}. {capability}"
            assert line in response
            positions.append(response.index(line))

        assert positions == sorted(positions)
        assert response.endswith("How can I help you today?")

    def test_capabilities_top_level(self, responder):
        """Test the capability rule outside the question branch."""
        assert responder.respond("capabilities") == responder.respond("what can you do")

    def test_task_echoes_input(self, responder):
        """Test the task reply quotes the message verbatim."""
        response = responder.respond("Please Help me plan")

        assert 'work on: "Please Help me plan"' in response

    def test_default_echoes_input_verbatim(self, responder):
        """Test braces in the input are not treated as placeholders."""
        response = responder.respond("tell me {input} {insight}")

        assert response.startswith('I\'ve processed your input: "tell me {input} {insight}"')

    def test_insight_from_fixed_set(self, responder):
        """Test the insight filler is one of the known ones."""
        for _ in range(20):
            response = responder.respond("why not")
            assert any(insight in response for insight in INSIGHTS)

    def test_insight_uses_injected_rng(self):
        """Test the same seed gives the same replies."""
        first = Responder(rng=random.Random(7))
        second = Responder(rng=random.Random(7))

        assert [first.respond("why?") for _ in range(5)] == [second.respond("why?") for _ in range(5)]

    def test_deterministic_outside_insight(self):
        """Test other branches ignore the random source."""
        first = Responder(rng=random.Random(1), clock=lambda: FIXED_NOW)
        second = Responder(rng=random.Random(2), clock=lambda: FIXED_NOW)

        for message in ["hello", "help", "3 - 1", "what are you", "what time is it", "story"]:
            assert first.respond(message) == second.respond(message)

    def test_reply_metadata(self, responder):
        """Test reply carries the rule path."""
        reply = responder.reply("what is the date")

        assert reply.rule == "question.time"
        assert reply.path == ["question", "time"]
        assert reply.latency_ms >= 0


class TestHistory:
    """Tests for the conversation history."""

    def test_two_turns_per_call(self, responder):
        """Test history grows by exactly two per call."""
        messages = ["hello", "2 + 2", "why?", "help", "5 / 0", "capabilities", "xyz"]

        for n, message in enumerate(messages, start=1):
            responder.respond(message)
            assert len(responder.history) == 2 * n

    def test_turn_order(self, responder):
        """Test user then agent, with verbatim content."""
        response = responder.respond("hello")

        turns = responder.history.turns()
        assert [t.role for t in turns] == [Role.USER, Role.AGENT]
        assert turns[0].content == "hello"
        assert turns[1].content == response

    def test_shared_history(self):
        """Test an explicitly owned history object is used."""
        history = ConversationHistory()
        responder = Responder(history=history)

        responder.respond("hi")

        assert history.to_list()[0] == {"role": "user", "content": "hi"}

    def test_separate_instances(self):
        """Test responders do not share state."""
        first, second = Responder(), Responder()
        first.respond("hello")

        assert len(first.history) == 2
        assert len(second.history) == 0


class TestConstruction:
    """Tests for building responders."""

    def test_from_config_seeded(self):
        """Test a configured seed fixes the insight sequence."""
        config = ResponderConfig(insight_seed=11)

        first = Responder.from_config(config)
        second = Responder.from_config(config)

        assert first.respond("why?") == second.respond("why?")

    def test_from_config_timezone(self):
        """Test a configured timezone is reported."""
        responder = Responder.from_config(ResponderConfig(timezone="Asia/Tokyo"))

        assert responder.respond("what time is it").endswith("Timezone: Asia/Tokyo")

    def test_knowledge_is_static(self, responder):
        """Test the knowledge base content."""
        assert responder.knowledge.get("capabilities") == DEFAULT_CAPABILITIES
        assert responder.knowledge.get("personality").tone == "helpful and professional"

        with pytest.raises(KeyError):
            responder.knowledge.get("mood")

    def test_custom_knowledge(self):
        """Test capabilities come from the knowledge base."""
        responder = Responder(knowledge=KnowledgeBase(capabilities=("Count", "Echo")))

        response = responder.respond("capabilities")

        assert "1. Count\n2. Echo" in response

    def test_status(self, responder):
        """Test the status summary."""
        responder.respond("hello")
        status = responder.get_status()

        assert status["history_length"] == 2
        assert status["rules"][0] == "question"
        assert len(status["knowledge"]["capabilities"]) == 5


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
