"""
Web Routes - API endpoints and page routes
=========================================

This module defines the web routes: the agent endpoint, the chat
page, and read-only views of the responder's state.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from core.logging import get_logger

logger = get_logger("web.routes")

router = APIRouter()


# === Page Routes ===

@router.get("/", response_class=HTMLResponse)
async def chat_page(request: Request):
    """Render the chat page."""
    templates = request.app.state.templates
    config = request.app.state.config

    return templates.TemplateResponse(
        request,
        "chat.html",
        {"app_name": config.app_name},
    )


# === API Routes ===

class AgentRequest(BaseModel):
    """Agent request model."""
    message: str = Field(..., min_length=1, strict=True)


class AgentResponse(BaseModel):
    """Agent response model."""
    response: str


@router.post("/api/agent", response_model=AgentResponse)
async def agent(request: Request, payload: AgentRequest):
    """Answer one message."""
    responder = request.app.state.responder

    reply = responder.reply(payload.message)
    logger.info(f"Answered message via rule '{reply.rule}' in {reply.latency_ms}ms")

    return AgentResponse(response=reply.response)


@router.get("/api/history")
async def get_history(request: Request):
    """Get the responder's conversation history."""
    history = request.app.state.responder.history

    return {
        "history": history.to_list(),
        "length": len(history),
    }


@router.get("/api/rules")
async def get_rules(request: Request):
    """Get the classification rules in evaluation order."""
    responder = request.app.state.responder

    return {
        "rules": responder.rules.to_list(),
        "question_rules": responder.question_rules.to_list(),
    }


@router.get("/api/status")
async def get_status(request: Request):
    """Get system status."""
    config = request.app.state.config
    responder = request.app.state.responder

    return {
        "app_name": config.app_name,
        "version": config.version,
        "responder": responder.get_status(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health")
async def health():
    return {"ok": True}
