import logging
from typing import List, Sequence

from agent_chat.app.schemas.content import ChatMessage, ContentBlock
from agent_chat.app.schemas.prompt import HistoryProfile, PromptMessage
from agent_chat.app.services import message_normalizer

logger = logging.getLogger(__name__)


def history_window(history: Sequence[ChatMessage], size: int) -> List[ChatMessage]:
    """Last `size` entries of the history, oldest first."""
    if size <= 0:
        return []
    return list(history[-size:])


def assemble(
    new_content: Sequence[ContentBlock],
    history: Sequence[ChatMessage],
    profile: HistoryProfile,
) -> List[PromptMessage]:
    """
    Build the ordered prompt for one conversation turn.

    The persona goes first, then the windowed history, then the new user turn.
    Assistant entries keep only their text; entries with no text are dropped,
    as are user entries left with nothing to send.
    System entries in the history are not forwarded.
    """
    config = profile.normalizer
    message_normalizer.validate(new_content, config)

    messages: List[PromptMessage] = [PromptMessage(role="system", content=profile.system_prompt)]

    window = history_window(history, profile.history_window)
    for entry in window:
        if entry.role == "user":
            payload = message_normalizer.to_model_payload(entry.content, config)
            if payload:
                messages.append(PromptMessage(role="user", content=payload))
        elif entry.role == "assistant":
            text = message_normalizer.text_only(entry.content)
            if text:
                messages.append(PromptMessage(role="assistant", content=text))

    messages.append(PromptMessage(role="user", content=message_normalizer.to_model_payload(new_content, config)))
    logger.debug(
        "Assembled %d prompt messages (profile=%s, history=%d of %d)",
        len(messages),
        profile.name,
        len(window),
        len(history),
    )
    return messages
