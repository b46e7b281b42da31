"""Cleanup and repair of JSON returned by language models."""

import json
import re
from typing import Any

from docblog.exceptions import StructuredOutputError

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")


def schema_instruction(output_schema: dict[str, Any]) -> str:
    """Prompt block asking for strict JSON matching output_schema."""
    return (
        "\n\nRespond with a single JSON object that strictly follows this JSON schema. "
        "Output only the JSON object, without markdown fences or commentary.\n"
        f"{json.dumps(output_schema, ensure_ascii=False, indent=2)}"
    )


def clean_response_text(text: str) -> str:
    text = text.replace("\ufffd", "")
    text = _CONTROL_CHARS.sub("", text)
    return _CODE_FENCE.sub("", text.strip()).strip()


def extract_json_object(text: str) -> str | None:
    """The outermost {...} span of text, or None."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def parse_structured_output(text: str | None, output_schema: dict[str, Any]) -> dict[str, Any]:
    """Parse model output into a dict that has every key listed in the schema's ``required``.

    Tries the cleaned text as-is first, then the extracted object with trailing
    commas removed. Raises StructuredOutputError if neither parses.
    """
    if not text:
        raise StructuredOutputError("Empty response")

    cleaned = clean_response_text(text)
    candidates = [cleaned]
    extracted = extract_json_object(cleaned)
    if extracted is not None:
        candidates.append(_TRAILING_COMMA.sub(r"\1", extracted))

    result: Any = None
    for candidate in candidates:
        try:
            result = json.loads(candidate)
            break
        except json.JSONDecodeError:
            continue
    else:
        raise StructuredOutputError("Response is not valid JSON", raw=text)

    if not isinstance(result, dict):
        raise StructuredOutputError(f"Expected a JSON object, got {type(result).__name__}", raw=text)

    missing = [key for key in output_schema.get("required", []) if key not in result]
    if missing:
        raise StructuredOutputError(f"Missing required keys: {', '.join(missing)}", raw=text)

    return result
