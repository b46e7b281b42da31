"""Structural key information and summaries of long markdown documents.

Documents too long to send in full are replaced by a summary built from their
outline, opening paragraph, frequent keywords and the lines most likely to
carry the core message.
"""

import math
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Literal

from docblog.metadata.language import CJK, detect_language, is_cjk
from docblog.metadata.models import MAX_READING_TIME, MIN_READING_TIME, Language

DocumentType = Literal["technical", "tutorial", "news", "blog"]

STOP_WORDS = frozenset({"the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"})
MIN_PARAGRAPH_CHARS = 20
MAX_OUTLINE_HEADINGS = 15
MAX_SUMMARY_KEYWORDS = 20

_HEADING = re.compile(r"^(#{1,6})\s(.+)")
_LIST_ITEM = re.compile(r"^[-*+]\s")
_ASCII_TOKEN_CHARS = re.compile(r"[a-zA-Z0-9\s]")

CORE_PATTERNS: dict[str, list[re.Pattern]] = {
    "jp": [
        re.compile(r"について|とは|メリット|デメリット|おすすめ|使い方|まとめ"),
        re.compile(r"^#{1,6}\s.*(紹介|解説|方法|比較|選択|活用)"),
    ],
    "zh": [
        re.compile(r"介绍|推荐|比较|方法|总结|指南"),
        re.compile(r"^#{1,6}\s.*(介绍|方法|比较|选择|使用)"),
    ],
    "en": [
        re.compile(r"introduction|benefits|how to|summary|guide|comparison", re.IGNORECASE),
        re.compile(r"^#{1,6}\s.*(guide|tutorial|method|comparison)", re.IGNORECASE),
    ],
}
COMMON_CORE_PATTERNS = [
    re.compile(r"^#{1,6}\s"),  # headings
    re.compile(r"^[-*+]\s"),  # bullet items
    re.compile(r"^\d+\.\s"),  # numbered items
]


@dataclass
class Heading:
    level: int
    text: str


@dataclass
class KeyInfo:
    title: str = ""
    headings: list[Heading] = field(default_factory=list)
    first_paragraph: str = ""
    keywords: Counter = field(default_factory=Counter)
    image_count: int = 0
    link_count: int = 0
    code_block_count: int = 0
    section_count: int = 0
    paragraph_count: int = 0
    word_count: int = 0
    language: Language = "en"
    document_type: DocumentType = "blog"

    def top_keywords(self, limit: int) -> list[str]:
        """Most frequent keywords longer than two characters."""
        return [word for word, _ in self.keywords.most_common() if len(word) > 2][:limit]


def estimate_token_count(text: str) -> int:
    """Rough token estimate: ASCII 4 chars/token, CJK 1.5 tokens/char, other 3 chars/token."""
    if not text:
        return 0
    ascii_chars = len(_ASCII_TOKEN_CHARS.findall(text))
    cjk_chars = len(CJK.findall(text))
    other_chars = len(text) - ascii_chars - cjk_chars
    return math.ceil(ascii_chars / 4 + cjk_chars * 1.5 + other_chars / 3)


def estimate_word_count(text: str, language: str) -> int:
    """Characters for CJK text, whitespace separated words otherwise."""
    if is_cjk(language):
        return len(re.sub(r"\s", "", text))
    return len(text.split())


def estimate_reading_time(text: str, language: str, words_per_minute: int = 200) -> int:
    minutes = math.ceil(estimate_word_count(text, language) / words_per_minute)
    return max(MIN_READING_TIME, min(MAX_READING_TIME, minutes))


def _add_keywords(line: str, keywords: Counter) -> None:
    cleaned = re.sub(r"[^\w\s]", " ", line.lower())
    keywords.update(word for word in cleaned.split() if len(word) >= 2 and word not in STOP_WORDS)


def extract_key_info(content: str, language: Language | None = None) -> KeyInfo:
    """Structural facts about a markdown document. Word counts follow language, detected when not given."""
    info = KeyInfo()
    in_code_block = False

    for line in content.split("\n"):
        stripped = line.strip()
        if not stripped:
            continue

        if stripped.startswith("```"):
            # Count opening fences only
            if not in_code_block:
                info.code_block_count += 1
            in_code_block = not in_code_block
            continue
        if in_code_block:
            continue

        heading = _HEADING.match(stripped)
        if heading:
            level, text = len(heading.group(1)), heading.group(2).strip()
            info.headings.append(Heading(level=level, text=text))
            if level == 1 and not info.title:
                info.title = text
            info.section_count += 1
            continue

        info.image_count += stripped.count("![")
        info.link_count += stripped.count("](")

        if len(stripped) > MIN_PARAGRAPH_CHARS:
            if not info.first_paragraph and not _LIST_ITEM.match(stripped):
                info.first_paragraph = stripped
            info.paragraph_count += 1

        _add_keywords(stripped, info.keywords)

    info.language = language or detect_language(content)
    info.word_count = estimate_word_count(content, info.language)
    info.document_type = identify_document_type(info)
    return info


def identify_document_type(info: KeyInfo) -> DocumentType:
    text = " ".join([info.title, *(h.text for h in info.headings)]).lower()

    if info.code_block_count >= 2 or re.search(r"api|function|programming|code", text):
        return "technical"
    if re.search(r"tutorial|step|guide|how to|チュートリアル|手順|教程|步骤", text) and info.section_count >= 5:
        return "tutorial"
    if re.search(r"news|breaking|announcement|ニュース|お知らせ|新闻|发布", text) and info.word_count < 2000:
        return "news"
    return "blog"


def create_summary(content: str, info: KeyInfo, target_tokens: int = 45_000) -> str:
    """Condensed stand-in for a document too long to send in full."""
    parts = []
    if info.title:
        parts.append(f"# {info.title}\n")

    parts.append(
        "## Document info\n"
        f"- Type: {info.document_type}\n"
        f"- Language: {info.language}\n"
        f"- Words: {info.word_count}\n"
        f"- Sections: {info.section_count}\n"
    )

    if info.headings:
        outline = [
            f"{'  ' * max(0, h.level - 1)}- {h.text}" for h in info.headings[:MAX_OUTLINE_HEADINGS]
        ]
        parts.append("## Outline\n" + "\n".join(outline) + "\n")

    if info.first_paragraph:
        parts.append(f"## Opening\n{info.first_paragraph}\n")

    keywords = info.top_keywords(MAX_SUMMARY_KEYWORDS)
    if keywords:
        parts.append(f"## Keywords\n{', '.join(keywords)}\n")

    summary = "\n".join(parts)
    remaining = target_tokens - estimate_token_count(summary)
    if remaining > 1000:
        summary += extract_core_content(content, info, remaining)
    return summary


def extract_core_content(content: str, info: KeyInfo, max_tokens: int) -> str:
    """Lines matching the relevance patterns for the document's language, within a token budget."""
    patterns = CORE_PATTERNS.get(info.language, CORE_PATTERNS["en"]) + COMMON_CORE_PATTERNS
    lines = ["\n## Core content\n"]
    used = estimate_token_count(lines[0])

    for line in content.split("\n"):
        if used >= max_tokens * 0.8:
            break
        stripped = line.strip()
        if len(stripped) < MIN_PARAGRAPH_CHARS:
            continue
        if not any(pattern.search(stripped) for pattern in patterns):
            continue
        cost = estimate_token_count(stripped + "\n")
        if used + cost <= max_tokens:
            lines.append(f"{stripped}\n")
            used += cost

    return "\n".join(lines)
