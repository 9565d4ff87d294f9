from fastapi import APIRouter, Depends

from agent_chat.app.api.deps import get_chat_settings, get_current_user
from agent_chat.app.core.config import MULTIMODAL_PROFILE, TEXT_PROFILE, Settings
from agent_chat.app.schemas.auth import CurrentUser
from agent_chat.app.schemas.chat import ChatRequest, ChatWithHistoryRequest
from agent_chat.app.schemas.prompt import ChatReply
from agent_chat.app.services import chat_service

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatReply)
async def chat(
    payload: ChatRequest,
    settings: Settings = Depends(get_chat_settings),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await chat_service.chat(payload.message, settings)


@router.post("/history", response_model=ChatReply)
async def chat_with_history(
    payload: ChatWithHistoryRequest,
    settings: Settings = Depends(get_chat_settings),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Multi-turn text chat using the caller-supplied history."""
    return await chat_service.chat_with_history(payload.message, payload.history, TEXT_PROFILE, settings)


@router.post("/multimodal", response_model=ChatReply)
async def chat_multimodal(
    payload: ChatWithHistoryRequest,
    settings: Settings = Depends(get_chat_settings),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Multi-turn chat accepting image, video and file blocks."""
    return await chat_service.chat_with_history(payload.message, payload.history, MULTIMODAL_PROFILE, settings)
