"""Placeholder tokens standing in for translatable leaves.

A translation session registers every leaf it finds, puts the token into the
tree in its place, and later substitutes each token with the per-language
result. Substitution works on the JSON serialization of the tree and is kept
behind ``PlaceholderRegistry.substitute`` so callers never touch the string form.
"""

import json
import uuid
from dataclasses import dataclass, field
from typing import Any

TOKEN_PREFIX = "need-translate-"
NOT_TRANSLATED = "not translate"


def new_token() -> str:
    return f"{TOKEN_PREFIX}{uuid.uuid4()}"


def json_escape(value: str) -> str:
    """Escape value for insertion inside a JSON string literal."""
    return json.dumps(value, ensure_ascii=False)[1:-1]


@dataclass
class Placeholder:
    raw: str | None
    translations: dict[str, str] = field(default_factory=dict)

    def replacement(self, language: str) -> str:
        """The language's translation, else the source text, else the not-translated marker."""
        translated = self.translations.get(language)
        if translated:
            return translated
        if self.raw is not None:
            return self.raw
        return NOT_TRANSLATED


class PlaceholderRegistry:
    """Token -> placeholder map owned by one translation session."""

    def __init__(self):
        self._placeholders: dict[str, Placeholder] = {}

    def register(self, raw: str | None) -> str:
        token = new_token()
        self._placeholders[token] = Placeholder(raw=raw)
        return token

    def set_translations(self, token: str, translations: dict[str, str]) -> None:
        self._placeholders[token].translations = dict(translations)

    def __getitem__(self, token: str) -> Placeholder:
        return self._placeholders[token]

    def __len__(self) -> int:
        return len(self._placeholders)

    def items(self):
        return self._placeholders.items()

    def substitute(self, tree: Any, language: str) -> Any:
        """Return a new tree with every token replaced by its text for language."""
        serialized = json.dumps(tree, ensure_ascii=False)
        for token, placeholder in self._placeholders.items():
            serialized = serialized.replace(token, json_escape(placeholder.replacement(language)))
        return json.loads(serialized)
