from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_ALLOWED_MODELS = [
    "google/gemini-2.0-flash-001",
    "google/gemini-2.0-flash-lite-preview-02-05",
    "google/gemini-3-flash-preview",
]


class Settings(BaseSettings):
    """Runtime configuration loaded from env vars and local env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = Field(default="local", alias="APP_ENV")
    log_level: str | None = Field(default=None, alias="LOG_LEVEL")

    chat_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENROUTER_API_KEY", "GEMINI_API_KEY"),
    )
    chat_model: str = Field(default="google/gemini-2.0-flash-001", alias="GEMINI_MODEL")
    chat_model_base_url: str = Field(default="https://openrouter.ai/api/v1", alias="CHAT_MODEL_BASE_URL")
    chat_model_temperature: float | None = Field(default=None, alias="CHAT_MODEL_TEMPERATURE")
    chat_system_prompt: str = Field(default="", alias="CHAT_SYSTEM_PROMPT")
    chat_allowed_models: list[str] = Field(default_factory=lambda: list(_DEFAULT_ALLOWED_MODELS), alias="CHAT_ALLOWED_MODELS")
    chat_use_mock: bool = Field(default=False, alias="CHAT_USE_MOCK")
    chat_mock_messages_file: str | None = Field(default=None, alias="CHAT_MOCK_MESSAGES_FILE")

    request_payload_encoded: bool | None = Field(default=None, alias="REQUEST_PAYLOAD_ENCODED")

    client_base_url: str = Field(default="http://localhost:8000", alias="CHAT_CLIENT_BASE_URL")
    client_timeout_seconds: float = Field(default=60.0, alias="CHAT_CLIENT_TIMEOUT_SECONDS")

    @property
    def enable_swagger(self) -> bool:
        return self.app_env.lower() == "local"

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return "DEBUG" if self.app_env.lower() == "local" else "INFO"

    @property
    def selected_model(self) -> str:
        # OpenRouter ids are vendor-qualified; bare Gemini names get the google/ prefix.
        return self.chat_model if "/" in self.chat_model else f"google/{self.chat_model}"

    @property
    def encode_request_payload(self) -> bool:
        if self.request_payload_encoded is not None:
            return self.request_payload_encoded
        return self.app_env.lower() != "local"

    @property
    def chat_configured(self) -> bool:
        return self.chat_use_mock or bool(self.chat_api_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
