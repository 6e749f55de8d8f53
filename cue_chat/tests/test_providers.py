import pytest

from cue_chat.prompts import load_system_prompt
from cue_chat.providers import create_client, resolve_system_prompt
from cue_chat.providers.registry import RCAC_CONFIG, get_provider_config
from cue_chat.providers.streaming_client import StreamingChatClient


class DummySettings:
    default_provider = "rcac"
    default_model = "chat-fallback"
    genai_api_key = "k-0123456789"
    genai_base_url = None
    http_timeout = 1.0
    system_prompt = None
    system_prompt_locale = "en"


def test_create_client_default():
    client = create_client(cfg=DummySettings())
    assert isinstance(client, StreamingChatClient)
    assert client.name == "rcac"
    assert client.system_prompt == load_system_prompt()


def test_explicit_empty_system_prompt_disables_it():
    class NoPrompt(DummySettings):
        system_prompt = ""

    assert resolve_system_prompt(NoPrompt()) is None
    assert create_client(cfg=NoPrompt()).system_prompt is None


def test_explicit_system_prompt_wins():
    class Custom(DummySettings):
        system_prompt = "Only talk about tennis."

    assert resolve_system_prompt(Custom()) == "Only talk about tennis."


def test_prompt_locales():
    assert "tennis" in load_system_prompt(locale="en")
    assert "网球" in load_system_prompt(locale="zh")
    assert load_system_prompt(locale="xx") == load_system_prompt(locale="en")


def test_registry_lookup_and_model_resolution():
    assert get_provider_config("RCAC") is RCAC_CONFIG
    assert RCAC_CONFIG.resolve_model("chat-fallback") == "llama3.1:latest"
    assert RCAC_CONFIG.resolve_model("mistral:7b") == "mistral:7b"
    assert RCAC_CONFIG.chat_url("http://localhost:8080/api/") == "http://localhost:8080/api/chat/completions"
    with pytest.raises(KeyError):
        get_provider_config("unknown")
