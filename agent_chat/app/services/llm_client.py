import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from agent_chat.app.core.config import Settings, get_settings
from agent_chat.app.schemas.prompt import ModelContent, ModelReply, MultimodalPayload, PromptMessage

logger = logging.getLogger(__name__)


class ModelInvocationError(RuntimeError):
    """Any failure while calling the chat model."""


def _headers(settings: Settings) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if settings.llm_api_key:
        headers["Authorization"] = f"Bearer {settings.llm_api_key}"
    return headers


def _content_parts(content: ModelContent) -> Any:
    if isinstance(content, MultimodalPayload):
        parts: List[Dict[str, Any]] = [{"type": "text", "text": content.text}]
        for image in content.images:
            parts.append({"type": "image_url", "image_url": {"url": image.url}})
        return parts
    return content


def build_payload(messages: Sequence[PromptMessage], settings: Settings) -> Dict[str, Any]:
    return {
        "model": settings.llm_model_name,
        "temperature": settings.llm_temperature,
        "max_tokens": settings.llm_max_tokens,
        "messages": [{"role": m.role, "content": _content_parts(m.content)} for m in messages],
        "stream": False,
    }


def _extract_text(data: Any) -> str:
    if isinstance(data, dict) and "error" in data:
        error_info = data["error"] if isinstance(data["error"], dict) else {"message": str(data["error"])}
        error_type = error_info.get("type", "unknown_error")
        error_message = error_info.get("message", "Unknown error")
        raise ModelInvocationError(f"LLM returned error ({error_type}): {error_message}")

    choices = data.get("choices") if isinstance(data, dict) else None
    if not choices:
        raise ModelInvocationError("LLM response missing choices")
    content = (choices[0].get("message") or {}).get("content")
    if isinstance(content, list):
        # Some providers answer with content parts even for text
        content = "".join(part.get("text", "") for part in content if isinstance(part, dict))
    if not content:
        raise ModelInvocationError("LLM response missing content")
    return content if isinstance(content, str) else str(content)


async def invoke(messages: Sequence[PromptMessage], settings: Optional[Settings] = None) -> ModelReply:
    """Send an assembled prompt to the chat completions endpoint. Never retries."""
    settings = settings or get_settings()
    payload = build_payload(messages, settings)
    timeout = httpx.Timeout(settings.llm_timeout_seconds, read=settings.llm_timeout_seconds, connect=10.0)
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(
                f"{settings.llm_base_url.rstrip('/')}/v1/chat/completions",
                json=payload,
                headers=_headers(settings),
            )
        if resp.status_code >= 400:
            raise ModelInvocationError(f"LLM request failed with status {resp.status_code}: {resp.text[:500]}")
        text = _extract_text(resp.json())
    except ModelInvocationError as exc:
        logger.error("Chat model invocation failed: %s", str(exc)[:500])
        raise
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Chat model request error: %s", exc)
        raise ModelInvocationError(f"LLM request error: {exc}") from exc

    logger.info("LLM reply (%d chars): %s", len(text), text[:50])
    return ModelReply(text=text)
