from docblog.ai.base import CompletionOptions, CompletionService, Messages
from docblog.ai.gemini import GeminiCompletionService
from docblog.ai.structured import parse_structured_output

__all__ = [
    "CompletionOptions",
    "CompletionService",
    "GeminiCompletionService",
    "Messages",
    "parse_structured_output",
]
