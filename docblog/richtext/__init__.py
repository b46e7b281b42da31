from docblog.richtext.converter import DocumentConverter, convert_document, is_external_link
from docblog.richtext.lists import normalize_lists
from docblog.richtext.models import Doc
from docblog.richtext.policies import ConversionPolicy, PlainPolicy
from docblog.richtext.source import SourceDocument

__all__ = [
    "ConversionPolicy",
    "Doc",
    "DocumentConverter",
    "PlainPolicy",
    "SourceDocument",
    "convert_document",
    "is_external_link",
    "normalize_lists",
]
