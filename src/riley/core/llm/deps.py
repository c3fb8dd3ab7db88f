"""Completion engine factory."""

import logging
from typing import Annotated

from fastapi import Depends
from langchain_openai import ChatOpenAI

from riley.configs.config import get_llm_config
from riley.configs.system import LLMConfig

logger = logging.getLogger(__name__)


def get_llm(
    config: Annotated[LLMConfig, Depends(get_llm_config)],
) -> ChatOpenAI:
    """Create a ChatOpenAI client for one request.

    Retries are disabled: a failed completion surfaces to the caller
    immediately and nothing is persisted.
    """
    return ChatOpenAI(
        base_url=config.endpoint,
        api_key=config.api_key,
        model=config.model_name,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        presence_penalty=config.presence_penalty,
        frequency_penalty=config.frequency_penalty,
        timeout=config.model_timeout.total_seconds(),
        max_retries=0,
    )
