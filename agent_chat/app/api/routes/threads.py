from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from agent_chat.app.api.deps import get_chat_settings, get_current_user, get_db_session
from agent_chat.app.core.config import Settings
from agent_chat.app.schemas.auth import CurrentUser
from agent_chat.app.schemas.thread import (
    MessageRead,
    SendMessageRequest,
    SendMessageResponse,
    ThreadCreate,
    ThreadDetail,
    ThreadRead,
    ThreadStats,
    ThreadSummary,
    ThreadUpdate,
)
from agent_chat.app.services import chat_service, threads_service

router = APIRouter(prefix="/threads", tags=["threads"])


@router.post("", response_model=ThreadRead, status_code=status.HTTP_201_CREATED)
def create_thread(
    payload: ThreadCreate,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return threads_service.create_thread(db, current_user.id, payload)


@router.get("", response_model=List[ThreadSummary])
def list_threads(
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    summaries = []
    for thread in threads_service.list_threads(db, current_user.id):
        summary = ThreadSummary.model_validate(thread)
        summary.message_count = threads_service.count_messages(db, thread.id)
        last = threads_service.last_message(db, thread.id)
        summary.last_message = MessageRead.model_validate(last) if last else None
        summaries.append(summary)
    return summaries


@router.get("/stats", response_model=ThreadStats)
def get_stats(
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return threads_service.get_stats(db, current_user.id)


@router.get("/{thread_id}", response_model=ThreadDetail)
def get_thread(
    thread_id: str,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    thread = threads_service.get_thread(db, current_user.id, thread_id)
    detail = ThreadDetail.model_validate(thread)
    detail.messages = [MessageRead.model_validate(m) for m in threads_service.list_messages(db, thread.id)]
    return detail


@router.patch("/{thread_id}", response_model=ThreadRead)
def update_thread(
    thread_id: str,
    payload: ThreadUpdate,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return threads_service.update_thread(db, current_user.id, thread_id, payload)


@router.delete("/{thread_id}", response_model=ThreadRead)
def delete_thread(
    thread_id: str,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return threads_service.delete_thread(db, current_user.id, thread_id)


@router.get("/{thread_id}/messages", response_model=List[MessageRead])
def list_thread_messages(
    thread_id: str,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    thread = threads_service.get_thread(db, current_user.id, thread_id)
    return threads_service.list_messages(db, thread.id)


@router.post("/{thread_id}/messages", response_model=SendMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_thread_message(
    thread_id: str,
    payload: SendMessageRequest,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_chat_settings),
    current_user: CurrentUser = Depends(get_current_user),
):
    user_message, assistant_message = await chat_service.send_thread_message(
        db, current_user.id, thread_id, payload.content, settings
    )
    return SendMessageResponse(
        user_message=MessageRead.model_validate(user_message),
        assistant_message=MessageRead.model_validate(assistant_message),
    )
