"""
Validator Tests
---------------
Checks the request rules in chat_relay.utils.validators.

USAGE:
pytest backend/test_validators.py
"""

import pytest

from chat_relay.models.result import ErrorKind
from chat_relay.utils.validators import (
    INVALID_MESSAGE_FORMAT,
    MESSAGE_FORMAT_DETAIL,
    MESSAGES_REQUIRED,
    MODEL_NOT_STRING,
    conversation_to_text,
    is_valid_message,
    validate_conversation,
    validate_messages
)

DEFAULT_MODEL = "openai/gpt-4o"


@pytest.mark.parametrize("payload", [
    None,
    {},
    {"messages": None},
    {"messages": []},
    {"messages": "hi"},
    {"messages": {"role": "user", "content": "hi"}},
    [{"role": "user", "content": "hi"}],
])
def test_missing_or_empty_messages(payload):
    result = validate_messages(payload)
    assert not result.ok
    assert result.error.kind == ErrorKind.INVALID_REQUEST
    assert result.error.message == MESSAGES_REQUIRED


@pytest.mark.parametrize("message", [
    {"role": "tool", "content": "hi"},
    {"role": "", "content": "hi"},
    {"content": "hi"},
    {"role": "user", "content": ""},
    {"role": "user"},
    {"role": "user", "content": None},
    {"role": "user", "content": 42},
    {"role": "USER", "content": "hi"},
    "user: hi",
    None,
])
def test_bad_message_rejected(message):
    assert not is_valid_message(message)


def test_one_bad_message_invalidates_whole_request():
    payload = {"messages": [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "hi"},
        {"role": "robot", "content": "beep"},
    ]}

    result = validate_messages(payload)

    assert result.error.kind == ErrorKind.INVALID_REQUEST
    assert result.error.message == INVALID_MESSAGE_FORMAT
    # The hint names the required fields and every legal role
    for word in ("role", "content", "user", "assistant", "system"):
        assert word in result.error.detail


def test_empty_messages_checked_before_format():
    result = validate_conversation({"messages": [], "model": 5}, DEFAULT_MODEL)
    assert result.error.message == MESSAGES_REQUIRED


def test_valid_messages_returned_unchanged():
    messages = [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "hi", "name": "ana"},
        {"role": "assistant", "content": "hello"},
    ]

    result = validate_messages({"messages": messages})

    assert result.ok
    assert result.value is messages


@pytest.mark.parametrize("payload_model,expected", [
    (None, DEFAULT_MODEL),
    ("", DEFAULT_MODEL),
    ("anthropic/claude-3.5-sonnet", "anthropic/claude-3.5-sonnet"),
])
def test_model_resolution(payload_model, expected):
    payload = {"messages": [{"role": "user", "content": "hi"}]}
    if payload_model is not None:
        payload["model"] = payload_model

    result = validate_conversation(payload, DEFAULT_MODEL)

    assert result.ok
    assert result.value.model == expected


def test_non_string_model_rejected():
    payload = {"messages": [{"role": "user", "content": "hi"}], "model": ["a", "b"]}

    result = validate_conversation(payload, DEFAULT_MODEL)

    assert result.error.kind == ErrorKind.INVALID_REQUEST
    assert result.error.message == MODEL_NOT_STRING


def test_conversation_to_text():
    messages = [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
    ]
    assert conversation_to_text(messages) == "AI: Be brief.\nYou: hi\nAI: hello"


def test_bad_message_detail_lists_roles():
    result = validate_messages({"messages": [{"role": "wizard", "content": "hi"}]})

    assert result.error.detail == MESSAGE_FORMAT_DETAIL
    assert "'role' (user, assistant, system)" in MESSAGE_FORMAT_DETAIL
