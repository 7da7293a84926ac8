"""Abstract LLM provider protocol — the model gateway seen by the analyzer."""

from typing import Any, Protocol


class LLMProvider(Protocol):
    """Protocol for LLM backends (OpenAI, Anthropic): prompt in, raw text out."""

    def complete(self, prompt: str, **kwargs: Any) -> str:
        """Return raw text completion. No structure is guaranteed."""
        ...
