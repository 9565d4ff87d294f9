"""Pydantic models for prompt assembly and model invocation."""

from datetime import datetime
from typing import List, Literal, Union

from pydantic import BaseModel, Field


class NormalizerConfig(BaseModel):
    """Limits applied to a single submitted turn."""

    max_text_length: int = 4000
    max_images: int = 10
    max_videos: int = 3
    max_files: int = 5
    default_image_prompt: str = "Please analyze these images."
    describe_max_length: int = 100


class HistoryProfile(BaseModel):
    """Named history window used when building a multi-turn prompt."""

    name: str
    history_window: int = Field(ge=0)
    system_prompt: str
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)


class ImageReference(BaseModel):
    url: str  # data:<mime>;base64,<payload>


class MultimodalPayload(BaseModel):
    text: str
    images: List[ImageReference] = Field(default_factory=list)


ModelContent = Union[str, MultimodalPayload]


class PromptMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: ModelContent


class ModelReply(BaseModel):
    text: str


class ChatReply(BaseModel):
    id: str
    content: str
    timestamp: datetime
