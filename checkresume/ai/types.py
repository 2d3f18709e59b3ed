from typing import Protocol


class ProviderError(RuntimeError):
    """Raised when an AI provider cannot produce a reply (network, auth, quota, empty body)."""

    def __init__(self, message: str, *, provider: str = "unknown"):
        super().__init__(message)
        self.provider = provider


class AIClient(Protocol):
    name: str

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> str: ...
