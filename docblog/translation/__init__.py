from docblog.translation.placeholders import PlaceholderRegistry
from docblog.translation.stories import StorySchema, TranslatedStory, translate_story
from docblog.translation.translator import Translator
from docblog.translation.walker import SchemaWalker

__all__ = [
    "PlaceholderRegistry",
    "SchemaWalker",
    "StorySchema",
    "TranslatedStory",
    "Translator",
    "translate_story",
]
