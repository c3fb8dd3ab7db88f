"""Configuration management using pydantic-settings.

**Not a singleton**: each call to ``get_app_config()`` re-reads config
from disk so that ConfigMap updates are picked up without restarting.

Priority order (highest first):

1. ConfigMap YAML (path from ``RILEY_CONFIGMAP_FILE`` env var, hot-reloadable)
2. Environment variables (``RILEY_`` prefix, ``__`` for nesting)
3. ``.env`` dotenv file
4. Static YAML (``configs/config.yaml``)
5. Prompt YAML (``configs/prompt.yml``)
6. Init defaults / field defaults
7. File secrets
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .persona import PersonaConfig
from .system import (
    APIConfig,
    AuthConfig,
    ChatConfig,
    CommentsConfig,
    LLMConfig,
    LoggingConfig,
    PromptConfig,
    ThirdPartyConfig,
    TracingConfig,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

CONFIG_PY_PATH = Path(__file__).resolve()
PROJECT_ROOT = CONFIG_PY_PATH.parent.parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "configs"

STATIC_CONFIG_FILE = CONFIG_DIR / "config.yaml"
PROMPT_CONFIG_FILE = CONFIG_DIR / "prompt.yml"

_configmap_env = os.environ.get("RILEY_CONFIGMAP_FILE")
CONFIGMAP_CONFIG_FILE: Optional[Path] = Path(_configmap_env) if _configmap_env else None

DOTENV_FILE_PATH = PROJECT_ROOT / ".env"
ENV_DELIMITER = "__"
ENV_PREFIX = "RILEY_"

DEFAULT_ENCODING = "utf-8"


# ---------------------------------------------------------------------------
# Application config (re-created on every call, not a singleton)
# ---------------------------------------------------------------------------


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE_PATH,
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        yaml_file=STATIC_CONFIG_FILE,
        yaml_file_encoding=DEFAULT_ENCODING,
    )

    third_party: ThirdPartyConfig = Field(
        default_factory=ThirdPartyConfig,
        description="Database and store backend settings",
    )
    api: APIConfig = Field(
        default_factory=APIConfig,
        description="API configuration settings",
    )
    llm: LLMConfig = Field(
        default_factory=LLMConfig,
        description="Completion engine client settings",
    )
    chat: ChatConfig = Field(
        default_factory=ChatConfig,
        description="Conversation window, history and clear settings",
    )
    auth: AuthConfig = Field(
        default_factory=AuthConfig,
        description="Bearer credential verification settings",
    )
    comments: CommentsConfig = Field(
        default_factory=CommentsConfig,
        description="Comment board settings",
    )
    persona: PersonaConfig = Field(
        default_factory=PersonaConfig,
        description="Assistant persona",
    )
    prompt: PromptConfig = Field(
        default_factory=PromptConfig,
        description="System prompt configuration",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )
    tracing: TracingConfig = Field(
        default_factory=TracingConfig,
        description="OpenTelemetry tracing configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = []

        if CONFIGMAP_CONFIG_FILE is not None and CONFIGMAP_CONFIG_FILE.is_file():
            sources.append(
                YamlConfigSettingsSource(
                    settings_cls,
                    yaml_file=CONFIGMAP_CONFIG_FILE,
                )
            )

        sources.append(env_settings)
        sources.append(dotenv_settings)
        sources.append(YamlConfigSettingsSource(settings_cls))
        sources.append(_PromptYamlSettingsSource(settings_cls))
        sources.append(init_settings)
        sources.append(file_secret_settings)

        return tuple(sources)


class _PromptYamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads prompt.yml file."""

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        self.settings_cls = settings_cls

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        if not PROMPT_CONFIG_FILE.exists():
            return {}

        try:
            with open(PROMPT_CONFIG_FILE, encoding=DEFAULT_ENCODING) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError):
            logger.warning("Ignoring unreadable %s", PROMPT_CONFIG_FILE, exc_info=True)
            return {}

        if data and "system_prompt" in data:
            return {"prompt": {"system_prompt": data["system_prompt"]}}
        return {}


def get_app_config() -> AppConfig:
    """Get the application configuration.

    Re-reads ``configs/config.yaml`` (and the ConfigMap override when
    present) on every call so that hot-reloaded values are picked up
    immediately.
    """
    return AppConfig()


def get_api_config() -> APIConfig:
    return get_app_config().api


def get_llm_config() -> LLMConfig:
    return get_app_config().llm


def get_chat_config() -> ChatConfig:
    return get_app_config().chat


def get_auth_config() -> AuthConfig:
    return get_app_config().auth


def get_comments_config() -> CommentsConfig:
    return get_app_config().comments
