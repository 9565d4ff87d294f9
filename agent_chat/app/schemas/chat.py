from typing import Any, List, Optional

from pydantic import BaseModel, field_validator

from agent_chat.app.schemas.content import ChatMessage, ContentBlock, text_blocks


class ChatRequest(BaseModel):
    message: List[ContentBlock]

    @field_validator("message", mode="before")
    @classmethod
    def coerce_plain_text(cls, value: Any) -> Any:
        return text_blocks(value)


class ChatWithHistoryRequest(ChatRequest):
    history: Optional[List[ChatMessage]] = None
