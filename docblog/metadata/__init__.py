from docblog.metadata.extractor import MetadataExtractor, generate_metadata, validate_and_fix
from docblog.metadata.fallback import generate_fallback
from docblog.metadata.language import detect_language
from docblog.metadata.models import MetadataRecord
from docblog.metadata.slug import generate_slug

__all__ = [
    "MetadataExtractor",
    "MetadataRecord",
    "detect_language",
    "generate_fallback",
    "generate_metadata",
    "generate_slug",
    "validate_and_fix",
]
