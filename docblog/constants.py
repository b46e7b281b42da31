"""Language and CMS constants shared across docblog."""

# Target language codes for translation, with the names used in prompts
LANGUAGE_INFO = {
    "FR": "French (France)",
    "ES": "Spanish (Spain)",
    "DE": "German (Germany)",
    "PT": "Portuguese (Portugal)",
    "KO": "Korean",
    "IT": "Italian",
    "NL": "Dutch",
    "HI": "Hindi (India)",
    "TR": "Turkish",
    "ID": "Indonesian",
    "AR": "Arabic (United Arab Emirates)",
    "UK": "Ukrainian",
    "TH": "Thai",
    "PL": "Polish",
    "CS": "Czech",
    "VI": "Vietnamese",
    "FA": "Persian",
    "EN": "English",
    "JA": "Japanese",
}

# Language prefixes used in site paths. Japanese is the unprefixed default.
ALL_LANGUAGES = ["en", "fr", "de", "pt", "ko", "it", "nl", "hi", "tr", "id", "ar", "uk", "th", "pl", "cs", "vi", "fa", "es"]
DEFAULT_SITE_LANGUAGE = "ja"

BLOG_COMPONENT = "blog_en"


def language_name(code: str) -> str:
    return LANGUAGE_INFO.get(code.upper(), code)
