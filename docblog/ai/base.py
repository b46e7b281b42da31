"""Interface of the AI completion service used for translation and metadata extraction."""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, replace
from typing import Any

Messages = str | list[dict[str, str]]


@dataclass(frozen=True)
class CompletionOptions:
    """Per-call overrides. None falls back to the service's configured default."""

    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    timeout_seconds: float | None = None
    retries: int | None = None
    retry_delay_seconds: float | None = None

    def merged(self, defaults: "CompletionOptions") -> "CompletionOptions":
        """Fill unset fields from defaults."""
        return replace(
            defaults,
            **{name: value for name, value in asdict(self).items() if value is not None},
        )


class CompletionService(ABC):
    """Prompt + JSON schema in, parsed JSON object out."""

    @abstractmethod
    async def complete(
        self,
        messages: Messages,
        output_schema: dict[str, Any],
        options: CompletionOptions | None = None,
    ) -> dict[str, Any]:
        """Return a JSON object satisfying output_schema's required keys.

        Raises AIRequestError once retries are exhausted or the request is rejected.
        """
