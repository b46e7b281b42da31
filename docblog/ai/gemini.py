"""Gemini implementation of the completion service."""

import asyncio
import random
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from loguru import logger

from docblog.ai.base import CompletionOptions, CompletionService, Messages
from docblog.ai.structured import parse_structured_output, schema_instruction
from docblog.config import Settings
from docblog.exceptions import AIRequestError, StructuredOutputError

RETRYABLE_STATUS_CODES = {429, 500, 503, 504}

_ROLE_MAP = {"user": "user", "assistant": "model"}


def build_contents(messages: Messages, output_schema: dict[str, Any]) -> tuple[str | None, list[types.Content]]:
    """Split messages into a system instruction and Gemini contents.

    The schema instruction is appended to the last user message.
    """
    if isinstance(messages, str):
        messages = [{"role": "user", "content": messages}]

    system_parts = [m["content"] for m in messages if m["role"] == "system"]
    turns = [m for m in messages if m["role"] != "system"]
    if not turns or turns[-1]["role"] != "user":
        turns.append({"role": "user", "content": ""})

    contents = []
    for i, message in enumerate(turns):
        text = message["content"]
        if i == len(turns) - 1:
            text += schema_instruction(output_schema)
        contents.append(types.Content(role=_ROLE_MAP.get(message["role"], "user"), parts=[types.Part(text=text)]))

    system_instruction = "\n\n".join(system_parts) if system_parts else None
    return system_instruction, contents


class GeminiCompletionService(CompletionService):
    """Structured JSON completions via the Gemini API, with timeout and retry."""

    def __init__(self, settings: Settings, client: genai.Client | None = None):
        if client is None:
            if not settings.google_api_key:
                raise ValueError("GOOGLE_API_KEY is required for Gemini completions")
            client = genai.Client(api_key=settings.google_api_key)

        self._client = client
        self._max_delay = settings.ai_max_retry_delay_seconds
        self.defaults = CompletionOptions(
            model=settings.ai_model,
            max_tokens=settings.ai_max_tokens,
            temperature=settings.ai_temperature,
            timeout_seconds=settings.ai_timeout_seconds,
            retries=settings.ai_retries,
            retry_delay_seconds=settings.ai_retry_delay_seconds,
        )

    async def complete(
        self,
        messages: Messages,
        output_schema: dict[str, Any],
        options: CompletionOptions | None = None,
    ) -> dict[str, Any]:
        opts = (options or CompletionOptions()).merged(self.defaults)
        system_instruction, contents = build_contents(messages, output_schema)
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=opts.temperature,
            max_output_tokens=opts.max_tokens,
            response_mime_type="application/json",
        )
        return await self._call_gemini_with_retry(contents, config, output_schema, opts)

    async def _call_gemini_with_retry(
        self,
        contents: list[types.Content],
        config: types.GenerateContentConfig,
        output_schema: dict[str, Any],
        opts: CompletionOptions,
    ) -> dict[str, Any]:
        """Call Gemini with exponential backoff for transient errors and malformed output."""
        max_attempts = max(opts.retries or 1, 1)
        base_delay = opts.retry_delay_seconds or 0.0
        last_error: Exception | None = None

        for attempt in range(max_attempts):
            try:
                response = await asyncio.wait_for(
                    asyncio.to_thread(
                        self._client.models.generate_content,
                        model=opts.model,
                        contents=contents,
                        config=config,
                    ),
                    timeout=opts.timeout_seconds,
                )
                return parse_structured_output(response.text, output_schema)
            except genai_errors.APIError as e:
                last_error = e
                if e.code not in RETRYABLE_STATUS_CODES:
                    raise AIRequestError(f"Gemini request rejected ({e.code}): {e}", attempts=attempt + 1) from e
                reason = str(e.code)
            except TimeoutError as e:
                last_error = e
                reason = f"timeout after {opts.timeout_seconds}s"
            except StructuredOutputError as e:
                last_error = e
                reason = f"malformed output: {e}"
            except Exception as e:
                last_error = e
                reason = str(e)

            if attempt < max_attempts - 1:
                delay = min(base_delay * (2**attempt), self._max_delay)
                jitter = random.uniform(0, delay * 0.5)
                wait_time = delay + jitter
                logger.warning(
                    f"Gemini: attempt {attempt + 1}/{max_attempts} failed ({reason}), retrying in {wait_time:.1f}s"
                )
                await asyncio.sleep(wait_time)

        assert last_error is not None
        raise AIRequestError(
            f"Gemini request failed after {max_attempts} attempts: {last_error}", attempts=max_attempts
        ) from last_error
