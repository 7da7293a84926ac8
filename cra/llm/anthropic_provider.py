"""Anthropic messages gateway."""

from typing import Any

from anthropic import Anthropic, APIError

from cra.errors import ModelGatewayError


class AnthropicProvider:
    """Anthropic message completion returning raw text."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-3-5-sonnet-20241022",
        timeout: float = 60.0,
        max_retries: int = 2,
    ):
        self._client = Anthropic(api_key=api_key, timeout=timeout, max_retries=max_retries)
        self._model = model

    def complete(self, prompt: str, **kwargs: Any) -> str:
        try:
            response = self._client.messages.create(
                model=kwargs.get("model") or self._model,
                max_tokens=kwargs.get("max_tokens", 4096),
                messages=[{"role": "user", "content": prompt}],
            )
        except APIError as e:
            raise ModelGatewayError(f"Anthropic request failed: {e}") from e
        return "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
