"""Single-turn prompt forwarding to the Anthropic chat completion API."""

from __future__ import annotations

import logging
from typing import Any, Iterable

import anthropic

from .config import LLMConfig

logger = logging.getLogger("userhub.prompts")


def _extract_text(blocks: Iterable[Any]) -> str:
    parts = []
    for block in blocks:
        if isinstance(block, dict):
            block_type = block.get("type")
            text = block.get("text")
        else:
            block_type = getattr(block, "type", None)
            text = getattr(block, "text", None)
        if block_type == "text" and text:
            parts.append(text)
    return "".join(parts)


class PromptGateway:
    """Send a prompt as the only user message and return the completion text.

    Errors raised by the provider client are not caught here; callers see
    them exactly as the SDK raises them.
    """

    def __init__(self, client: Any, *, model: str, max_tokens: int) -> None:
        self._client = client
        self._model = model
        self._max_tokens = max_tokens

    @property
    def model(self) -> str:
        return self._model

    def ask(self, prompt: str) -> str:
        if prompt is None:
            raise ValueError("Prompt must not be None")

        logger.debug("Forwarding prompt of %d characters to %s", len(prompt), self._model)
        response = self._client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        return _extract_text(response.content)


def create_prompt_gateway(config: LLMConfig) -> PromptGateway:
    """Build a gateway backed by the official Anthropic client."""

    if not config.enabled:
        raise ValueError("An Anthropic API key is required to use the prompt gateway")

    client = anthropic.Anthropic(api_key=config.api_key, max_retries=0)
    return PromptGateway(client, model=config.model, max_tokens=config.max_tokens)


__all__ = ["PromptGateway", "create_prompt_gateway"]
