import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from agent_chat.app.schemas.prompt import HistoryProfile, NormalizerConfig

DEFAULT_SYSTEM_PROMPT = (
    "You are a friendly and helpful AI assistant. "
    "Answer the user's questions accurately and helpfully."
)
DEFAULT_IMAGE_PROMPT = "Please analyze these images."

TEXT_PROFILE = "text"
MULTIMODAL_PROFILE = "multimodal"


class Settings(BaseSettings):
    database_url: str = Field("sqlite:///./agent_chat.db", alias="DATABASE_URL")
    auth_secret_key: str = Field("change-me", alias="AUTH_SECRET_KEY")
    auth_algorithm: str = Field("HS256", alias="AUTH_ALGORITHM")
    llm_base_url: str = Field("https://api.openai.com", alias="LLM_BASE_URL")
    llm_api_key: str | None = Field(None, alias="LLM_API_KEY")
    llm_model_name: str = Field("gpt-4o-mini", alias="LLM_MODEL_NAME")
    llm_temperature: float = Field(0.7, alias="LLM_TEMPERATURE")
    llm_max_tokens: int = Field(1000, alias="LLM_MAX_TOKENS")
    llm_timeout_seconds: int = Field(60, alias="LLM_TIMEOUT_SECONDS")
    chat_system_prompt: str = Field(DEFAULT_SYSTEM_PROMPT, alias="CHAT_SYSTEM_PROMPT")
    chat_default_image_prompt: str = Field(DEFAULT_IMAGE_PROMPT, alias="CHAT_DEFAULT_IMAGE_PROMPT")
    chat_max_text_length: int = Field(4000, alias="CHAT_MAX_TEXT_LENGTH")
    chat_max_images: int = Field(10, alias="CHAT_MAX_IMAGES")
    chat_max_videos: int = Field(3, alias="CHAT_MAX_VIDEOS")
    chat_max_files: int = Field(5, alias="CHAT_MAX_FILES")
    chat_describe_max_length: int = Field(100, alias="CHAT_DESCRIBE_MAX_LENGTH")
    # Multimodal turns carry image payloads, so they keep a shorter window
    chat_history_window_text: int = Field(10, alias="CHAT_HISTORY_WINDOW_TEXT")
    chat_history_window_multimodal: int = Field(8, alias="CHAT_HISTORY_WINDOW_MULTIMODAL")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    def normalizer_config(self) -> NormalizerConfig:
        return NormalizerConfig(
            max_text_length=self.chat_max_text_length,
            max_images=self.chat_max_images,
            max_videos=self.chat_max_videos,
            max_files=self.chat_max_files,
            default_image_prompt=self.chat_default_image_prompt,
            describe_max_length=self.chat_describe_max_length,
        )

    def history_profile(self, name: str = TEXT_PROFILE, system_prompt: str | None = None) -> HistoryProfile:
        windows = {
            TEXT_PROFILE: self.chat_history_window_text,
            MULTIMODAL_PROFILE: self.chat_history_window_multimodal,
        }
        if name not in windows:
            raise ValueError(f"Unknown history profile: {name}")
        return HistoryProfile(
            name=name,
            history_window=windows[name],
            system_prompt=system_prompt or self.chat_system_prompt,
            normalizer=self.normalizer_config(),
        )


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()
    except PermissionError:
        logger.warning("Unable to read .env; continuing with environment variables only")
        settings = Settings(_env_file=None)
    return settings
