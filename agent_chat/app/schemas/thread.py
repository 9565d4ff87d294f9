from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agent_chat.app.db.models import MessageRole, MessageType, ThreadStatus
from agent_chat.app.schemas.content import ContentBlock, text_blocks


class ThreadCreate(BaseModel):
    title: Optional[str] = None
    system_prompt: Optional[str] = None


class ThreadUpdate(BaseModel):
    title: Optional[str] = None
    system_prompt: Optional[str] = None
    status: Optional[ThreadStatus] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: Optional[ThreadStatus]) -> Optional[ThreadStatus]:
        if value == ThreadStatus.DELETED:
            raise ValueError("Use DELETE to remove a thread")
        return value


class MessageRead(BaseModel):
    id: str
    thread_id: str
    user_id: Optional[str] = None
    role: MessageRole
    type: MessageType
    content: List[dict]
    seq: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ThreadRead(BaseModel):
    id: str
    user_id: str
    title: str
    system_prompt: Optional[str] = None
    status: ThreadStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ThreadSummary(ThreadRead):
    message_count: int = 0
    last_message: Optional[MessageRead] = None


class ThreadDetail(ThreadRead):
    messages: List[MessageRead] = Field(default_factory=list)


class ThreadStats(BaseModel):
    total_threads: int
    active_threads: int
    total_messages: int


class SendMessageRequest(BaseModel):
    content: List[ContentBlock]

    @field_validator("content", mode="before")
    @classmethod
    def coerce_plain_text(cls, value: Any) -> Any:
        return text_blocks(value)


class SendMessageResponse(BaseModel):
    user_message: MessageRead
    assistant_message: MessageRead
