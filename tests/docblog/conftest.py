from types import SimpleNamespace
from typing import Any

import pytest

from docblog.ai.base import CompletionOptions, CompletionService
from docblog.exceptions import AIRequestError
from docblog.richtext.source import SourceDocument

# === SOURCE DOCUMENT BUILDERS ===


def text_run(content: str, **style: Any) -> dict:
    return {"textRun": {"content": content, "textStyle": style}}


def paragraph(*elements: dict, style: str | None = None, list_id: str | None = None, level: int = 0) -> dict:
    para: dict[str, Any] = {"elements": list(elements), "paragraphStyle": {"namedStyleType": style or "NORMAL_TEXT"}}
    if list_id is not None:
        para["bullet"] = {"listId": list_id, "nestingLevel": level}
    return {"paragraph": para}


def heading(text: str, level: int) -> dict:
    return paragraph(text_run(f"{text}\n"), style=f"HEADING_{level}")


def table(*rows: list[str]) -> dict:
    return {
        "table": {
            "rows": len(rows),
            "columns": len(rows[0]) if rows else 0,
            "tableRows": [
                {"tableCells": [{"content": [paragraph(text_run(f"{cell}\n"))]} for cell in row]} for row in rows
            ],
        }
    }


def bullet_list_props(*glyph_types: str | None) -> dict:
    return {"listProperties": {"nestingLevels": [{"glyphType": g} if g else {"glyphSymbol": "●"} for g in glyph_types]}}


def image_object(uri: str, title: str = "", description: str = "") -> dict:
    return {
        "inlineObjectProperties": {
            "embeddedObject": {
                "title": title,
                "description": description,
                "imageProperties": {"contentUri": uri},
            }
        }
    }


def document(*content: dict, lists: dict | None = None, inline_objects: dict | None = None) -> SourceDocument:
    return SourceDocument.model_validate(
        {
            "documentId": "doc-1",
            "title": "Test document",
            "body": {"content": [{"sectionBreak": {}}, *content]},
            "lists": lists or {},
            "inlineObjects": inline_objects or {},
        }
    )


@pytest.fixture
def build():
    """Source document builders."""
    return SimpleNamespace(
        text_run=text_run,
        paragraph=paragraph,
        heading=heading,
        table=table,
        bullet_list_props=bullet_list_props,
        image_object=image_object,
        document=document,
    )


# === FAKE COLLABORATORS ===


class FakeUploader:
    """Records uploads; fails for URIs listed in fail_on."""

    def __init__(self, fail_on: set[str] | None = None):
        self.fail_on = fail_on or set()
        self.calls: list[tuple[str, str]] = []

    async def upload(self, source_uri: str, alt_text: str) -> str:
        self.calls.append((source_uri, alt_text))
        if source_uri in self.fail_on:
            raise RuntimeError(f"upload failed: {source_uri}")
        return f"https://cdn.example.com/{len(self.calls)}.png"


def leaf_text(messages: list[dict[str, str]]) -> str:
    """The source text inside the fenced block of a translation request."""
    return messages[-1]["content"].split("```\n", 1)[1].split("\n```", 1)[0]


class FakeTranslationCompletion(CompletionService):
    """Translates by prefixing the language code; fails for texts listed in fail_on."""

    def __init__(self, fail_on: set[str] | None = None, responses: dict[str, dict[str, str]] | None = None):
        self.fail_on = fail_on or set()
        self.responses = responses or {}
        self.calls: list[str] = []

    async def complete(
        self,
        messages,
        output_schema: dict[str, Any],
        options: CompletionOptions | None = None,
    ) -> dict[str, Any]:
        text = leaf_text(messages)
        self.calls.append(text)
        if text in self.fail_on:
            raise AIRequestError(f"translation failed: {text}", attempts=3)
        if text in self.responses:
            return self.responses[text]
        return {lng: f"[{lng}] {text}" for lng in output_schema["required"]}


class FakeMetadataCompletion(CompletionService):
    """Returns a fixed result, or raises AIRequestError when result is None."""

    def __init__(self, result: dict[str, Any] | None):
        self.result = result
        self.calls: list[tuple[Any, dict[str, Any]]] = []

    async def complete(
        self,
        messages,
        output_schema: dict[str, Any],
        options: CompletionOptions | None = None,
    ) -> dict[str, Any]:
        self.calls.append((messages, output_schema))
        if self.result is None:
            raise AIRequestError("metadata request failed", attempts=3)
        return dict(self.result)


@pytest.fixture
def fake_uploader():
    return FakeUploader


@pytest.fixture
def translation_completion():
    return FakeTranslationCompletion


@pytest.fixture
def metadata_completion():
    return FakeMetadataCompletion
