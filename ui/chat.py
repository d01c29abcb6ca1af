"""
Chat Session - Display state shared by the chat surfaces
========================================================

Holds the transcript a chat surface shows and the "awaiting reply"
flag, and knows how to submit a message through a transport. The
transcript is separate from the responder's own history: the two are
parallel logs of the same conversation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import httpx

from core.exceptions import TransportError
from core.logging import get_logger
from services.history import Role
from services.responder import Responder

logger = get_logger("ui.chat")


ERROR_REPLY = "Sorry, I encountered an error processing your request."


@dataclass
class ChatMessage:
    """A transcript entry as displayed to the user."""
    role: Role
    content: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }


class LocalTransport:
    """Answers in-process with a Responder."""

    def __init__(self, responder: Responder):
        self.responder = responder

    async def send(self, message: str) -> str:
        return self.responder.respond(message)

    async def aclose(self) -> None:
        pass


class HttpTransport:
    """
    Posts messages to a running ``/api/agent`` endpoint.

    Example:
        transport = HttpTransport("http://127.0.0.1:8080")
        reply = await transport.send("hello")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def send(self, message: str) -> str:
        """
        Send one message and return the reply text.

        Raises:
            TransportError: On connection failure, a non-success status
                or a payload without a string ``response``
        """
        try:
            resp = await self.client.post("/api/agent", json={"message": message})
        except httpx.HTTPError as e:
            raise TransportError(f"Request to agent endpoint failed: {e}")

        if resp.status_code != 200:
            raise TransportError(
                f"Agent endpoint returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                details={"body": resp.text[:200]},
            )

        try:
            data = resp.json()
        except ValueError:
            raise TransportError("Agent endpoint returned invalid JSON", status_code=resp.status_code)

        reply = data.get("response") if isinstance(data, dict) else None
        if not isinstance(reply, str):
            raise TransportError("Agent endpoint reply has no response field", status_code=resp.status_code)

        return reply

    async def aclose(self) -> None:
        await self.client.aclose()


class ChatSession:
    """
    Transcript plus "awaiting reply" flag for one chat surface.

    ``submit`` appends the user message right away, then the reply or
    a fixed error message once the transport answers. Blank input and
    input sent while a reply is pending are ignored. Failed requests
    are not retried.

    Attributes:
        messages (list): Displayed ChatMessages, oldest first
        awaiting_reply (bool): True while a request is in flight
        input_buffer (str): Text typed but not yet sent
    """

    def __init__(self, transport, on_change: Optional[Callable[["ChatSession"], None]] = None):
        self.transport = transport
        self.on_change = on_change
        self.messages: List[ChatMessage] = []
        self.awaiting_reply = False
        self.input_buffer = ""

    def _changed(self) -> None:
        if self.on_change:
            self.on_change(self)

    async def submit(self, text: Optional[str] = None) -> Optional[ChatMessage]:
        """
        Send ``text`` (or the input buffer) and record the exchange.

        Returns:
            The agent ChatMessage that was appended, or None if the
            submission was ignored
        """
        if text is None:
            text = self.input_buffer

        if not text.strip() or self.awaiting_reply:
            return None

        self.messages.append(ChatMessage(role=Role.USER, content=text))
        self.input_buffer = ""
        self.awaiting_reply = True
        self._changed()

        try:
            reply = await self.transport.send(text)
        except TransportError as e:
            logger.warning(f"Chat request failed: {e}")
            reply = ERROR_REPLY
        except Exception as e:
            logger.error(f"Chat request raised: {e}", exc_info=True)
            reply = ERROR_REPLY
        finally:
            self.awaiting_reply = False

        agent_message = ChatMessage(role=Role.AGENT, content=reply)
        self.messages.append(agent_message)
        self._changed()
        return agent_message

    def to_list(self) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in self.messages]

    async def aclose(self) -> None:
        """Release the transport (closes the HTTP client, if any)."""
        await self.transport.aclose()
