"""LLM client object as BaseChatModel in langchain."""

from .deps import get_llm  # noqa: F401
