"""
Textual Application - Terminal chat surface
==========================================

This module implements a Textual chat window over a ChatSession:
a scrolling transcript, a typing indicator while a reply is pending
and an input line.
"""

from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.widgets import Footer, Header, Input, Static
from textual import work
from rich.markup import escape

from core.config import Config, load_config
from core.logging import get_logger
from services.history import Role
from services.responder import Responder
from ui.chat import ChatMessage, ChatSession, HttpTransport, LocalTransport

logger = get_logger("tui.app")


class MessageBubble(Static):
    """One transcript entry."""

    def __init__(self, message: ChatMessage, **kwargs):
        is_user = message.role == Role.USER
        author = "👤 You" if is_user else "🤖 Agent"
        stamp = message.timestamp.strftime("%X")
        super().__init__(
            f"[b]{author}[/b]  [dim]{stamp}[/dim]\n{escape(message.content)}",
            markup=True,
            classes="user-message" if is_user else "agent-message",
            **kwargs,
        )


class EmptyState(Static):
    """Shown until the first message is sent."""

    def __init__(self, **kwargs):
        super().__init__(
            "🤖\n[b]Ready to assist[/b]\nAsk me anything and I'll help you autonomously",
            markup=True,
            **kwargs,
        )


class ChatApp(App):
    """
    Terminal chat with the rule agent.

    Talks to a remote ``/api/agent`` endpoint when one is configured,
    otherwise answers in-process.
    """

    CSS = """
    Screen {
        background: $surface;
    }

    #transcript {
        height: 1fr;
        padding: 0 1;
    }

    #empty-state {
        width: 100%;
        margin: 4 0;
        text-align: center;
        color: $text-muted;
    }

    .user-message {
        background: $primary 20%;
        border: round $primary;
        margin: 1 0 0 12;
        padding: 0 1;
    }

    .agent-message {
        background: $panel;
        border: round $accent;
        margin: 1 12 0 0;
        padding: 0 1;
    }

    #typing {
        color: $text-muted;
        margin: 1 0 0 0;
        display: none;
    }

    #typing.visible {
        display: block;
    }

    #message-input {
        dock: bottom;
        margin: 0 1 1 1;
    }
    """

    TITLE = "AI Agent"
    SUB_TITLE = "Autonomous intelligent assistant"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+l", "clear_input", "Clear input"),
    ]

    def __init__(self, session: ChatSession):
        super().__init__()
        self.session = session
        self._shown = 0

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical():
            with VerticalScroll(id="transcript"):
                yield EmptyState(id="empty-state")
            yield Static("🤖 Agent is typing…", id="typing")
        yield Input(placeholder="Type your message...", id="message-input")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#message-input", Input).focus()

    async def on_unmount(self) -> None:
        await self.session.aclose()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if not event.value.strip() or self.session.awaiting_reply:
            return
        self.session.input_buffer = event.value
        event.input.value = ""
        self.send_message()

    @work(exclusive=False)
    async def send_message(self) -> None:
        input_widget = self.query_one("#message-input", Input)
        input_widget.disabled = True
        try:
            await self.session.submit()
        finally:
            input_widget.disabled = False
            input_widget.focus()

    def refresh_transcript(self, session: ChatSession) -> None:
        """Re-render the transcript from the session state."""
        transcript = self.query_one("#transcript", VerticalScroll)

        if session.messages:
            for empty in transcript.query(EmptyState):
                empty.remove()

        for message in session.messages[self._shown:]:
            transcript.mount(MessageBubble(message))
        self._shown = len(session.messages)

        self.query_one("#typing", Static).set_class(session.awaiting_reply, "visible")
        transcript.scroll_end(animate=False)

    def action_clear_input(self) -> None:
        self.query_one("#message-input", Input).value = ""


def build_session(config: Config, endpoint_url: Optional[str] = None) -> ChatSession:
    """
    Create a ChatSession wired to the configured transport.

    Args:
        config: Application configuration
        endpoint_url: Overrides ``config.ui.endpoint_url``
    """
    url = endpoint_url or config.ui.endpoint_url
    if url:
        logger.info(f"Chatting with remote agent at {url}")
        transport = HttpTransport(url, timeout=config.ui.request_timeout)
    else:
        logger.info("Chatting with in-process agent")
        transport = LocalTransport(Responder.from_config(config.responder))
    return ChatSession(transport)


def run_tui(config: Optional[Config] = None, endpoint_url: Optional[str] = None) -> None:
    config = config or load_config()
    session = build_session(config, endpoint_url)
    app = ChatApp(session)
    session.on_change = app.refresh_transcript
    app.run()


if __name__ == "__main__":
    run_tui()
