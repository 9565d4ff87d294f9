"""
Conversation turns: validate the submitted blocks, assemble the prompt,
call the chat model and map the answer back to a reply or a stored message.
"""
import logging
import uuid
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from agent_chat.app.core.config import MULTIMODAL_PROFILE, TEXT_PROFILE, Settings, get_settings
from agent_chat.app.db import models
from agent_chat.app.schemas.content import ChatMessage, ContentBlock, dump_blocks
from agent_chat.app.schemas.prompt import ChatReply, HistoryProfile
from agent_chat.app.services import history_assembler, llm_client, message_normalizer, threads_service

logger = logging.getLogger(__name__)


def _reply_id() -> str:
    return f"msg_{uuid.uuid4().hex}"


async def _run_turn(
    content: Sequence[ContentBlock],
    history: Sequence[ChatMessage],
    profile: HistoryProfile,
    settings: Settings,
) -> str:
    logger.info(
        "Chat turn (profile=%s, history=%d): %s",
        profile.name,
        len(history),
        message_normalizer.describe(content, profile.normalizer.describe_max_length),
    )
    messages = history_assembler.assemble(content, history, profile)
    reply = await llm_client.invoke(messages, settings)
    return reply.text


async def chat(content: Sequence[ContentBlock], settings: Optional[Settings] = None) -> ChatReply:
    """Single turn with no prior history."""
    return await chat_with_history(content, [], TEXT_PROFILE, settings)


async def chat_with_history(
    content: Sequence[ContentBlock],
    history: Optional[Sequence[ChatMessage]],
    profile_name: str = TEXT_PROFILE,
    settings: Optional[Settings] = None,
) -> ChatReply:
    settings = settings or get_settings()
    profile = settings.history_profile(profile_name)
    text = await _run_turn(content, history or [], profile, settings)
    return ChatReply(id=_reply_id(), content=text, timestamp=datetime.utcnow())


def to_chat_message(message: models.Message) -> ChatMessage:
    return ChatMessage.model_validate(
        {
            "id": message.id,
            "role": message.role.value.lower(),
            "content": message.content,
            "timestamp": message.created_at,
        }
    )


async def send_thread_message(
    db: Session,
    user_id: str,
    thread_id: str,
    content: List[ContentBlock],
    settings: Optional[Settings] = None,
) -> Tuple[models.Message, models.Message]:
    """
    Run one turn inside a stored thread.

    Both messages are written only after the model answered, so a failed model
    call leaves the thread untouched.
    """
    settings = settings or get_settings()
    thread = threads_service.get_thread(db, user_id, thread_id)
    profile = settings.history_profile(MULTIMODAL_PROFILE, system_prompt=thread.system_prompt)

    stored = threads_service.list_messages(db, thread.id, limit=profile.history_window)
    history = [to_chat_message(m) for m in stored]
    text = await _run_turn(content, history, profile, settings)

    user_message = threads_service.create_message(
        db,
        thread,
        models.MessageRole.USER,
        dump_blocks(content),
        user_id=user_id,
        commit=False,
    )
    assistant_message = threads_service.create_message(
        db,
        thread,
        models.MessageRole.ASSISTANT,
        [{"type": "text", "text": text}],
    )
    db.refresh(user_message)
    return user_message, assistant_message
