"""
Chat session endpoints driving the travel conversation.

Sessions live in process memory; a restart drops them.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.limits import limiter, RATE_LIMIT_CHAT, RATE_LIMIT_READ, RATE_LIMIT_DELETE
from app.api.schemas import (
    ChatSessionCreate, ChatSessionRead, ChatMessageRequest, SelectDestinationRequest,
)
from app.core.conversation import (
    ConversationEngine, ConversationStore, GENERATIVE_MODE,
    SessionNotFoundError, SelectionNotAllowedError, DestinationNotFoundError,
    conversation_store,
)
from app.core.llm.gemini import GeminiClient, get_gemini_client
from app.core.planner import TripPlanner
from app.core.recommender.qloo import QlooClient, get_qloo_client
from app.core.settings import Settings, get_settings
from app.db.session import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


def get_conversation_store() -> ConversationStore:
    return conversation_store


def get_engine(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    gemini: GeminiClient = Depends(get_gemini_client),
    qloo: QlooClient = Depends(get_qloo_client),
) -> ConversationEngine:
    planner = None
    if settings.CHAT_MODE == GENERATIVE_MODE:
        planner = TripPlanner(session, gemini, qloo, settings)
    return ConversationEngine(session, settings=settings, planner=planner)


def _load(store: ConversationStore, session_id: str):
    try:
        return store.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Chat session not found")


@router.post("/sessions", response_model=ChatSessionRead, status_code=201)
@limiter.limit(RATE_LIMIT_CHAT)
async def create_chat_session(
    request: Request,
    payload: Optional[ChatSessionCreate] = None,
    store: ConversationStore = Depends(get_conversation_store),
    settings: Settings = Depends(get_settings),
):
    user_location = payload.user_location if payload else None
    conv = store.create(settings.CHAT_MODE, user_location=user_location)
    logger.info(f"Created chat session {conv.id} in {conv.mode} mode")
    return conv.to_read()


@router.get("/sessions/{session_id}", response_model=ChatSessionRead)
@limiter.limit(RATE_LIMIT_READ)
async def read_chat_session(
    request: Request,
    session_id: str,
    store: ConversationStore = Depends(get_conversation_store),
):
    return _load(store, session_id).to_read()


@router.post("/sessions/{session_id}/messages",
    response_model=ChatSessionRead,
    responses={404: {"description": "Chat session not found"}},
    summary="Send a user message and get the assistant reply",
)
@limiter.limit(RATE_LIMIT_CHAT)
async def post_chat_message(
    request: Request,
    session_id: str,
    payload: ChatMessageRequest,
    store: ConversationStore = Depends(get_conversation_store),
    engine: ConversationEngine = Depends(get_engine),
):
    conv = _load(store, session_id)
    await engine.handle_message(conv, payload.content)
    return conv.to_read()


@router.post("/sessions/{session_id}/select",
    response_model=ChatSessionRead,
    responses={
        404: {"description": "Chat session or destination not found"},
        409: {"description": "Session is not choosing a destination"},
    },
    summary="Pick one of the recommended destinations",
)
@limiter.limit(RATE_LIMIT_CHAT)
async def select_chat_destination(
    request: Request,
    session_id: str,
    payload: SelectDestinationRequest,
    store: ConversationStore = Depends(get_conversation_store),
    engine: ConversationEngine = Depends(get_engine),
):
    conv = _load(store, session_id)
    try:
        await engine.select_destination(conv, payload.destination_id)
    except SelectionNotAllowedError:
        raise HTTPException(
            status_code=409,
            detail=f"Destinations can only be selected while choosing one (current step: {conv.state.step.value})",
        )
    except DestinationNotFoundError:
        raise HTTPException(status_code=404, detail=f"Destination '{payload.destination_id}' not found")
    return conv.to_read()


@router.delete("/sessions/{session_id}", status_code=204)
@limiter.limit(RATE_LIMIT_DELETE)
async def delete_chat_session(
    request: Request,
    session_id: str,
    store: ConversationStore = Depends(get_conversation_store),
):
    try:
        store.delete(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Chat session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
