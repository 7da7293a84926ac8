"""OpenAI chat-completion gateway."""

from typing import Any

from openai import APIError, OpenAI

from cra.errors import ModelGatewayError


class OpenAIProvider:
    """OpenAI chat completion returning raw text."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        timeout: float = 60.0,
        max_retries: int = 2,
    ):
        self._client = OpenAI(api_key=api_key, timeout=timeout, max_retries=max_retries)
        self._model = model

    def complete(self, prompt: str, **kwargs: Any) -> str:
        try:
            response = self._client.chat.completions.create(
                model=kwargs.get("model") or self._model,
                messages=[{"role": "user", "content": prompt}],
                **{k: v for k, v in kwargs.items() if k not in ("model",)},
            )
        except APIError as e:
            raise ModelGatewayError(f"OpenAI request failed: {e}") from e
        msg = response.choices[0].message
        return msg.content or ""
