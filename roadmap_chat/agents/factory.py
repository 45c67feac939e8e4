from __future__ import annotations

import logging
from pathlib import Path

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_openai import ChatOpenAI

from roadmap_chat.agents.engine import LangGraphChatEngine, ModelEngine
from roadmap_chat.core.errors import ModelNotConfiguredError
from roadmap_chat.core.settings import Settings

logger = logging.getLogger(__name__)

_MOCK_MESSAGE_DELIMITER = "\n\n--- message ---\n\n"
_DEFAULT_MOCK_RESPONSES = [
    "This is an offline mock answer. Set CHAT_USE_MOCK=false and OPENROUTER_API_KEY to talk to a real model.",
]


def _load_mock_messages(messages_file: str) -> list[str]:
    path = Path(messages_file)
    raw_content = path.read_text(encoding="utf-8")
    parsed_messages = [chunk.strip() for chunk in raw_content.split(_MOCK_MESSAGE_DELIMITER)]
    messages = [message for message in parsed_messages if message]
    if not messages:
        raise ValueError(
            f"No mock messages found in {path}. Use delimiter {_MOCK_MESSAGE_DELIMITER!r} between messages."
        )
    return messages


def build_chat_model(settings: Settings) -> BaseChatModel:
    if settings.chat_use_mock:
        fake_responses = (
            _load_mock_messages(settings.chat_mock_messages_file)
            if settings.chat_mock_messages_file
            else list(_DEFAULT_MOCK_RESPONSES)
        )
        logger.info("using FakeListChatModel chat model", extra={"responses_count": len(fake_responses)})
        return FakeListChatModel(responses=fake_responses)

    if not settings.chat_api_key:
        logger.error("OPENROUTER_API_KEY or GEMINI_API_KEY is not configured")
        raise ModelNotConfiguredError()

    model = settings.selected_model
    if model not in settings.chat_allowed_models:
        logger.warning("configured model is not in the allow-list", extra={"model": model})

    logger.info("using OpenRouter chat model", extra={"model": model})
    return ChatOpenAI(
        model=model,
        base_url=settings.chat_model_base_url,
        api_key=settings.chat_api_key,
        temperature=settings.chat_model_temperature,
        streaming=True,
    )


def build_chat_engine(settings: Settings) -> ModelEngine:
    """Create the LangGraph engine with a real or fake chat model."""

    return LangGraphChatEngine(
        model=build_chat_model(settings),
        system_prompt=settings.chat_system_prompt,
    )
