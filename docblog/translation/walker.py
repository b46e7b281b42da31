"""Schema-driven walk that swaps translatable leaves for placeholder tokens.

A schema mirrors only the translatable shape of a content tree. String values
are markers: ``"str..."`` for a plain string field and ``"doc..."`` for an
embedded richtext document. A list holds exactly one template that applies to
every item of the matching content list. Fields missing or empty in the
content are skipped.
"""

from typing import Any

from loguru import logger

from docblog.translation.placeholders import PlaceholderRegistry

STRING_MARKER = "str"
DOC_MARKER = "doc"


class SchemaWalker:
    """Mutates a content tree in place; callers pass a clone."""

    def __init__(self, registry: PlaceholderRegistry, blok_templates: dict[str, Any] | None = None):
        self.registry = registry
        self.blok_templates = blok_templates or {}

    def walk(self, content: dict[str, Any], schema: dict[str, Any]) -> None:
        self._walk_dict(content, schema)

    def _walk_dict(self, content: Any, template: dict[str, Any]) -> None:
        if not isinstance(content, dict):
            logger.debug(f"Schema expects an object, content has {type(content).__name__}")
            return
        for key, entry in template.items():
            if content.get(key):
                self._walk_field(content, key, entry)

    def _walk_field(self, container: dict | list, key: str | int, entry: Any) -> None:
        value = container[key]

        if isinstance(entry, list):
            if not entry or not isinstance(value, list):
                return
            item_entry = entry[0]
            for i, item in enumerate(value):
                if item:
                    self._walk_field(value, i, item_entry)

        elif isinstance(entry, dict):
            self._walk_dict(value, entry)

        elif isinstance(entry, str):
            if entry.startswith(STRING_MARKER):
                if isinstance(value, str):
                    container[key] = self.registry.register(value)
            elif entry.startswith(DOC_MARKER):
                self._walk_doc(value)

        else:
            logger.debug(f"Unknown schema entry for {key!r}: {entry!r}")

    # === RICHTEXT ===

    def _walk_doc(self, node: Any) -> None:
        if not isinstance(node, dict):
            return

        handlers = {
            "text": self._walk_text,
            "image": self._walk_image,
            "blok": self._walk_blok,
        }

        handler = handlers.get(node.get("type"))
        if handler:
            handler(node)
            return

        for child in node.get("content") or []:
            self._walk_doc(child)

    def _walk_text(self, node: dict[str, Any]) -> None:
        if isinstance(node.get("text"), str):
            node["text"] = self.registry.register(node["text"])

    def _walk_image(self, node: dict[str, Any]) -> None:
        attrs = node.get("attrs")
        if isinstance(attrs, dict) and isinstance(attrs.get("alt"), str):
            attrs["alt"] = self.registry.register(attrs["alt"])

    def _walk_blok(self, node: dict[str, Any]) -> None:
        for item in (node.get("attrs") or {}).get("body") or []:
            if not isinstance(item, dict):
                continue
            template = self.blok_templates.get(item.get("component"))
            if template is None:
                logger.debug(f"No template for blok component {item.get('component')!r}, left untranslated")
                continue
            self._walk_dict(item, template)
