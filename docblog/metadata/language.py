"""Character-class language classifier for markdown text."""

import re

from loguru import logger

from docblog.metadata.models import SUPPORTED_LANGUAGES, Language

KANA = re.compile(r"[\u3040-\u309F\u30A0-\u30FF]")
KANJI = re.compile(r"[\u4E00-\u9FAF]")
CJK = re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]")
LATIN = re.compile(r"[a-zA-Z]")

_CODE_BLOCK = re.compile(r"```[\s\S]*?```")
_INLINE_CODE = re.compile(r"`[^`]*`")
_LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_MARKUP = re.compile(r"[#*_~]")

# CJK characters carry roughly twice the content of a latin letter
CJK_DOMINANCE_RATIO = 0.5


def strip_markdown(markdown: str) -> str:
    text = _CODE_BLOCK.sub("", markdown)
    text = _INLINE_CODE.sub("", text)
    text = _LINK.sub(r"\1", text)
    text = _MARKUP.sub("", text)
    return text.replace("\n", " ").strip()


def detect_language(markdown: str) -> Language:
    """Classify text as Japanese, Chinese or English.

    CJK text wins when its character count exceeds half the latin letter
    count. It is Japanese if any kana is present, Chinese otherwise.
    """
    text = strip_markdown(markdown)
    cjk = len(CJK.findall(text))
    latin = len(LATIN.findall(text))

    if cjk > latin * CJK_DOMINANCE_RATIO:
        language: Language = "jp" if KANA.search(text) else "zh"
    else:
        language = "en"

    logger.debug(f"Language detection: cjk={cjk} latin={latin} -> {language}")
    return language


def resolve_language(markdown: str, override: str | None = None) -> Language:
    """Use override when it is a supported code, else detect from content."""
    if override in SUPPORTED_LANGUAGES:
        return override  # type: ignore[return-value]
    if override:
        logger.warning(f"Unsupported language override {override!r}, detecting from content")
    return detect_language(markdown)


def is_cjk(language: str) -> bool:
    return language in ("jp", "zh")
