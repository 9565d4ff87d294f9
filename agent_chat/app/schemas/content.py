from datetime import datetime
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator


class MediaMetadata(BaseModel):
    name: Optional[str] = None
    filename: Optional[str] = None
    size_bytes: Optional[int] = Field(default=None, alias="sizeBytes")

    model_config = ConfigDict(populate_by_name=True)


class TextBlock(BaseModel):
    type: Literal["text"] = "text"
    text: Optional[str] = None


class MediaBlock(BaseModel):
    """Inline media payload. Structural checks live in the message normalizer."""

    encoding: Literal["base64"] = "base64"
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    data: Optional[str] = None  # base64 text, never raw bytes
    metadata: Optional[MediaMetadata] = None

    model_config = ConfigDict(populate_by_name=True)


class ImageBlock(MediaBlock):
    type: Literal["image"] = "image"


class VideoBlock(MediaBlock):
    type: Literal["video"] = "video"


class FileBlock(MediaBlock):
    type: Literal["file"] = "file"


def _block_kind(value: Any) -> Optional[str]:
    # Clients send either "type" or the older "kind" field
    if isinstance(value, dict):
        return value.get("type") or value.get("kind")
    return getattr(value, "type", None)


ContentBlock = Annotated[
    Union[
        Annotated[TextBlock, Tag("text")],
        Annotated[ImageBlock, Tag("image")],
        Annotated[VideoBlock, Tag("video")],
        Annotated[FileBlock, Tag("file")],
    ],
    Discriminator(_block_kind),
]


def text_blocks(value: Any) -> Any:
    """Legacy clients post plain strings; read them as a single text block."""
    if isinstance(value, str):
        return [{"type": "text", "text": value}]
    return value


class ChatMessage(BaseModel):
    id: Optional[str] = None
    role: Literal["user", "assistant", "system"]
    content: List[ContentBlock]
    timestamp: Optional[datetime] = None

    @field_validator("content", mode="before")
    @classmethod
    def coerce_plain_text(cls, value: Any) -> Any:
        return text_blocks(value)

    @field_validator("content")
    @classmethod
    def validate_content(cls, value: List[ContentBlock]) -> List[ContentBlock]:
        if not value:
            raise ValueError("Message content must not be empty")
        return value


def dump_blocks(blocks: List[ContentBlock]) -> List[dict]:
    return [block.model_dump(by_alias=True, exclude_none=True) for block in blocks]
