import copy
from typing import List

import pytest
from pydantic import TypeAdapter

from agent_chat.app.core.config import MULTIMODAL_PROFILE, TEXT_PROFILE, Settings
from agent_chat.app.schemas.content import ChatMessage, ContentBlock
from agent_chat.app.schemas.prompt import HistoryProfile, MultimodalPayload
from agent_chat.app.services import history_assembler
from agent_chat.app.services.message_normalizer import EmptyContent, InvalidImageFormat

_adapter = TypeAdapter(List[ContentBlock])


def blocks(*items):
    return _adapter.validate_python(list(items))


def msg(role, *content, idx=0):
    return ChatMessage(id=f"m{idx}", role=role, content=list(content))


def turn_text(value):
    return {"type": "text", "text": value}


IMAGE = {"type": "image", "mimeType": "image/png", "data": "QQ=="}


def profile(window=8):
    return HistoryProfile(name="test", history_window=window, system_prompt="persona")


def make_history(count):
    roles = ["user", "assistant"]
    return [msg(roles[i % 2], turn_text(f"turn {i}"), idx=i) for i in range(count)]


def test_system_message_first_and_new_turn_last():
    result = history_assembler.assemble(blocks(turn_text("hello")), [], profile())
    assert [(m.role, m.content) for m in result] == [("system", "persona"), ("user", "hello")]


def test_only_last_window_entries_kept_in_order():
    history = make_history(12)
    result = history_assembler.assemble(blocks(turn_text("new")), history, profile(window=8))
    middle = result[1:-1]
    assert [m.content for m in middle] == [f"turn {i}" for i in range(4, 12)]
    assert [m.role for m in middle] == ["user", "assistant"] * 4
    assert result[-1].content == "new"


def test_zero_window_keeps_no_history():
    result = history_assembler.assemble(blocks(turn_text("new")), make_history(4), profile(window=0))
    assert len(result) == 2


def test_assistant_media_only_entry_is_omitted():
    history = [
        msg("user", turn_text("draw a cat"), idx=0),
        msg("assistant", IMAGE, idx=1),
        msg("user", turn_text("again"), idx=2),
    ]
    result = history_assembler.assemble(blocks(turn_text("thanks")), history, profile())
    assert [m.role for m in result] == ["system", "user", "user", "user"]


def test_assistant_media_blocks_are_dropped_but_text_kept():
    history = [msg("assistant", turn_text("here"), IMAGE, turn_text("done"), idx=0)]
    result = history_assembler.assemble(blocks(turn_text("ok")), history, profile())
    assert result[1].role == "assistant"
    assert result[1].content == "here\ndone"


def test_user_history_images_become_multimodal():
    history = [msg("user", turn_text("what is this"), IMAGE, idx=0)]
    result = history_assembler.assemble(blocks(turn_text("and now?")), history, profile())
    assert isinstance(result[1].content, MultimodalPayload)
    assert result[1].content.images[0].url == "data:image/png;base64,QQ=="


def test_system_history_entries_not_forwarded():
    history = [msg("system", turn_text("old persona"), idx=0), msg("user", turn_text("hi"), idx=1)]
    result = history_assembler.assemble(blocks(turn_text("next")), history, profile())
    assert [m.role for m in result] == ["system", "user", "user"]
    assert result[0].content == "persona"


def test_invalid_new_content_fails_before_assembly():
    with pytest.raises(EmptyContent):
        history_assembler.assemble([], make_history(2), profile())
    with pytest.raises(InvalidImageFormat):
        history_assembler.assemble(blocks({"type": "image", "mimeType": "video/mp4", "data": "QQ=="}), [], profile())


def test_history_is_not_mutated():
    history = make_history(12)
    snapshot = copy.deepcopy(history)
    history_assembler.assemble(blocks(turn_text("new")), history, profile(window=8))
    assert history == snapshot
    assert len(history) == 12


def test_named_profiles_use_configured_windows():
    settings = Settings(_env_file=None)
    assert settings.history_profile(TEXT_PROFILE).history_window == 10
    assert settings.history_profile(MULTIMODAL_PROFILE).history_window == 8

    tuned = Settings(_env_file=None, CHAT_HISTORY_WINDOW_MULTIMODAL=2)
    result = history_assembler.assemble(
        blocks(turn_text("new")), make_history(6), tuned.history_profile(MULTIMODAL_PROFILE)
    )
    assert [m.content for m in result[1:-1]] == ["turn 4", "turn 5"]


def test_unknown_profile_rejected():
    with pytest.raises(ValueError):
        Settings(_env_file=None).history_profile("audio")


def test_profile_system_prompt_override():
    settings = Settings(_env_file=None, CHAT_SYSTEM_PROMPT="default persona")
    assert settings.history_profile(TEXT_PROFILE).system_prompt == "default persona"
    assert settings.history_profile(TEXT_PROFILE, system_prompt="thread persona").system_prompt == "thread persona"


def test_incomplete_history_images_are_not_forwarded():
    history = [
        msg("user", turn_text("what about this"), {"type": "image", "data": "QQ=="}, idx=0),
        msg("user", {"type": "image", "mimeType": "image/png"}, idx=1),
        msg("user", turn_text("and this"), IMAGE, idx=2),
    ]
    result = history_assembler.assemble(blocks(turn_text("next")), history, profile())
    assert [m.role for m in result] == ["system", "user", "user", "user"]
    assert result[1].content == "what about this"
    assert [img.url for img in result[2].content.images] == ["data:image/png;base64,QQ=="]
