"""
Validation and model-payload conversion for submitted content blocks.

A turn is a list of text/image/video/file blocks. Structural problems with a
single block are reported as soon as the block is seen; aggregate limits are
only checked once every block has been scanned.
"""
import logging
from typing import List, Optional, Sequence

from agent_chat.app.schemas.content import (
    ContentBlock,
    FileBlock,
    ImageBlock,
    MediaBlock,
    TextBlock,
    VideoBlock,
)
from agent_chat.app.schemas.prompt import ImageReference, ModelContent, MultimodalPayload, NormalizerConfig

logger = logging.getLogger(__name__)


class ContentValidationError(ValueError):
    error_code = "invalid_content"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EmptyContent(ContentValidationError):
    error_code = "empty_content"


class EmptyText(ContentValidationError):
    error_code = "empty_text"


class IncompleteMedia(ContentValidationError):
    error_code = "incomplete_media"


class InvalidImageFormat(ContentValidationError):
    error_code = "invalid_image_format"


class InvalidVideoFormat(ContentValidationError):
    error_code = "invalid_video_format"


class TextTooLong(ContentValidationError):
    error_code = "text_too_long"


class TooManyImages(ContentValidationError):
    error_code = "too_many_images"


class TooManyVideos(ContentValidationError):
    error_code = "too_many_videos"


class TooManyFiles(ContentValidationError):
    error_code = "too_many_files"


def _unknown_block(block: object) -> TypeError:
    return TypeError(f"Unsupported content block: {type(block).__name__}")


def _require_media(block: MediaBlock, index: int) -> str:
    if not block.data or not block.mime_type:
        raise IncompleteMedia(f"Block {index} ({block.type}) is missing data or mimeType")
    return block.mime_type


def validate(blocks: Sequence[ContentBlock], config: Optional[NormalizerConfig] = None) -> None:
    config = config or NormalizerConfig()
    if not blocks:
        raise EmptyContent("Message content must contain at least one block")

    total_text_length = 0
    image_count = 0
    video_count = 0
    file_count = 0

    for index, block in enumerate(blocks):
        if isinstance(block, TextBlock):
            text = block.text or ""
            if not text.strip():
                raise EmptyText(f"Block {index} has empty text")
            total_text_length += len(text)
        elif isinstance(block, ImageBlock):
            mime_type = _require_media(block, index)
            if not mime_type.startswith("image/"):
                raise InvalidImageFormat(f"Block {index} has non-image mimeType {mime_type!r}")
            image_count += 1
        elif isinstance(block, VideoBlock):
            mime_type = _require_media(block, index)
            if not mime_type.startswith("video/"):
                raise InvalidVideoFormat(f"Block {index} has non-video mimeType {mime_type!r}")
            video_count += 1
        elif isinstance(block, FileBlock):
            _require_media(block, index)
            file_count += 1
        else:
            raise _unknown_block(block)

    if total_text_length > config.max_text_length:
        raise TextTooLong(
            f"Text length {total_text_length} exceeds the limit of {config.max_text_length} characters"
        )
    if image_count > config.max_images:
        raise TooManyImages(f"{image_count} images exceed the limit of {config.max_images}")
    if video_count > config.max_videos:
        raise TooManyVideos(f"{video_count} videos exceed the limit of {config.max_videos}")
    if file_count > config.max_files:
        raise TooManyFiles(f"{file_count} files exceed the limit of {config.max_files}")


def describe(blocks: Sequence[ContentBlock], max_length: int = 100) -> str:
    """
    Short human-readable summary of a turn, for logs only.

    Text comes first, then the non-zero media counts, e.g.
    "look [2 images, 1 files]". Labels are always plural.
    """
    texts: List[str] = []
    counts = {"images": 0, "videos": 0, "files": 0}
    for block in blocks:
        if isinstance(block, TextBlock):
            if block.text:
                texts.append(block.text.strip())
        elif isinstance(block, ImageBlock):
            counts["images"] += 1
        elif isinstance(block, VideoBlock):
            counts["videos"] += 1
        elif isinstance(block, FileBlock):
            counts["files"] += 1
        else:
            raise _unknown_block(block)

    summary = " ".join(t for t in texts if t)
    media = ", ".join(f"{n} {label}" for label, n in counts.items() if n)
    if media:
        summary = f"{summary} [{media}]" if summary else f"[{media}]"

    if len(summary) > max_length:
        summary = summary[: max(max_length - 3, 0)] + "..."
    return summary


def image_reference(block: ImageBlock) -> ImageReference:
    return ImageReference(url=f"data:{block.mime_type};base64,{block.data}")


def to_model_payload(blocks: Sequence[ContentBlock], config: Optional[NormalizerConfig] = None) -> ModelContent:
    """
    Convert blocks into what the chat model accepts.

    Text blocks are joined with newlines. Images become data-URI references and
    turn the result into a multimodal payload. Video and file blocks pass
    validation but are not forwarded to the model. Images missing mimeType or
    data, which can only arrive through unvalidated history, are skipped.
    """
    config = config or NormalizerConfig()
    texts: List[str] = []
    images: List[ImageReference] = []
    for block in blocks:
        if isinstance(block, TextBlock):
            if block.text:
                texts.append(block.text)
        elif isinstance(block, ImageBlock):
            if not block.mime_type or not block.data:
                logger.warning("Skipping image block without mimeType or data")
                continue
            images.append(image_reference(block))
        elif isinstance(block, (VideoBlock, FileBlock)):
            continue
        else:
            raise _unknown_block(block)

    joined = "\n".join(texts)
    if images:
        return MultimodalPayload(text=joined or config.default_image_prompt, images=images)
    return joined


def text_only(blocks: Sequence[ContentBlock]) -> str:
    return "\n".join(block.text for block in blocks if isinstance(block, TextBlock) and block.text)
