from __future__ import annotations

import logging
from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError

from checkresume.ai.types import ProviderError

logger = logging.getLogger(__name__)


class OpenAIProvider:
    name = "openai"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout_s: float = 45.0,
        max_retries: int = 1,
        json_mode: bool = True,
    ):
        key = (api_key or "").strip()
        if not key:
            raise RuntimeError(f"{self.name} API key is missing")

        self._json_mode = json_mode
        self._client = AsyncOpenAI(
            api_key=key,
            base_url=base_url,
            timeout=timeout_s,
            max_retries=max_retries,
        )

    def _max_tokens(self, requested: int) -> int:
        return requested

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        create_kwargs: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": self._max_tokens(max_tokens),
            "temperature": temperature,
        }
        if self._json_mode:
            create_kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(**create_kwargs)
        except OpenAIError as exc:
            raise ProviderError(f"{self.name} request failed: {exc}", provider=self.name) from exc

        content = response.choices[0].message.content if response.choices else ""
        if not content:
            raise ProviderError(f"No response from {self.name}", provider=self.name)
        logger.debug("ai_reply provider=%s model=%s chars=%s", self.name, model, len(content))
        return content
