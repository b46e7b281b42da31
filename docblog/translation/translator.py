"""Multi-language translation of content trees via placeholder substitution.

The walk registers every translatable leaf, then one AI request per leaf asks
for all target languages at once. Requests run concurrently and settle
independently; a failed leaf keeps its source text in every language.
"""

import asyncio
import copy
from typing import Any

from loguru import logger

from docblog.ai.base import CompletionOptions, CompletionService
from docblog.constants import language_name
from docblog.translation.placeholders import PlaceholderRegistry
from docblog.translation.walker import SchemaWalker

SYSTEM_PROMPT = (
    "You are a translation expert, proficient in conveying the intended meaning. "
    "Your current task is to translate sections of blog and help center content "
    "for a product named Notta into {count} different languages. "
    "The content will be read by users worldwide, so keep the intent and style of the original text "
    "while making the translations accurate and easy to understand. "
    "Keep all markdown symbols unchanged and do not translate them. "
    'Proprietary names like "Notta" and "AI" must not be translated.'
)

USER_PROMPT = (
    "Translate the following text into {count} languages:\n\n```\n{text}\n```\n\n"
    "Retain any numbering such as '1. ', '2. ' in the text as is."
)


def translation_schema(languages: list[str]) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            lng: {"type": "string", "description": f"{language_name(lng)} translation"} for lng in languages
        },
        "required": list(languages),
    }


def normalize_translation(source: str, translated: str) -> str:
    """Drop newlines the model added to single-line source text."""
    if "\n" not in source:
        return translated.replace("\n", "")
    return translated


class Translator:
    def __init__(
        self,
        completion: CompletionService,
        model: str | None = None,
        temperature: float = 0.5,
    ):
        self.completion = completion
        self.options = CompletionOptions(model=model, temperature=temperature)

    async def translate(
        self,
        content: dict[str, Any],
        schema: dict[str, Any],
        blok_templates: dict[str, Any] | None,
        languages: list[str],
    ) -> dict[str, dict[str, Any]]:
        """Translate content into every language. Returns language -> translated tree.

        content is not modified.
        """
        registry = PlaceholderRegistry()
        tree = copy.deepcopy(content)
        SchemaWalker(registry, blok_templates).walk(tree, schema)

        pending: list[str] = []
        for token, placeholder in registry.items():
            if placeholder.raw is None or not placeholder.raw.strip():
                registry.set_translations(token, {lng: "" for lng in languages})
            else:
                pending.append(token)

        results = await asyncio.gather(
            *(self._translate_leaf(registry[token].raw, languages) for token in pending),
            return_exceptions=True,
        )

        failed = 0
        for token, result in zip(pending, results):
            if isinstance(result, BaseException):
                failed += 1
                source = registry[token].raw or ""
                logger.warning(f"Translation failed for {token} ({source[:40]!r}), keeping source text: {result}")
                continue
            registry.set_translations(token, result)

        logger.info(
            f"Translated {len(pending) - failed}/{len(pending)} leaves into {len(languages)} languages "
            f"({len(registry) - len(pending)} empty leaves skipped)"
        )
        return {lng: registry.substitute(tree, lng) for lng in languages}

    async def _translate_leaf(self, text: str, languages: list[str]) -> dict[str, str]:
        count = len(languages)
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT.format(count=count)},
            {"role": "user", "content": USER_PROMPT.format(count=count, text=text.strip())},
        ]
        result = await self.completion.complete(messages, translation_schema(languages), self.options)

        if set(result) != set(languages):
            logger.debug(f"Translation returned languages {sorted(result)}, expected {sorted(languages)}")

        translations = {}
        for lng in languages:
            value = result.get(lng)
            if isinstance(value, str):
                translations[lng] = normalize_translation(text, value)
        return translations
