import re
import unicodedata

from docblog.metadata.models import SLUG_PATTERN

DEFAULT_SLUG = "article"
MAX_SLUG_LENGTH = 50

# Common domain terms in Japanese titles, applied before non-ASCII text is dropped
TERM_TRANSLATIONS = {
    "チュートリアル": "tutorial",
    "プログラミング": "programming",
    "使い方": "usage",
    "開発": "development",
    "技術": "technology",
    "ウェブ": "web",
    "アプリ": "app",
    "システム": "system",
    "設計": "design",
    "分析": "analysis",
    "学習": "learning",
    "入門": "introduction",
    "基礎": "basics",
    "応用": "advanced",
    "実践": "practice",
    "解説": "explanation",
    "方法": "method",
    "手順": "steps",
    "ガイド": "guide",
}

_SLUG_RE = re.compile(SLUG_PATTERN)


def is_valid_slug(slug: object) -> bool:
    return isinstance(slug, str) and bool(_SLUG_RE.fullmatch(slug))


def generate_slug(title: str) -> str:
    """ASCII slug for a title in any language. Falls back to "article"."""
    text = title
    for term, english in TERM_TRANSLATIONS.items():
        text = text.replace(term, f" {english} ")

    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^a-z0-9\s-]", "", text.lower())
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"-+", "-", text).strip("-")
    text = text[:MAX_SLUG_LENGTH].rstrip("-")
    return text or DEFAULT_SLUG
