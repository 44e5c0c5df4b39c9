# path: src/shared/utilities/language.py
from fastapi import Request
from src.shared.config.settings import settings
from src.shared.utilities.types import LanguageCode


def resolve_language(candidate: str) -> LanguageCode:
    """Fall back to the default language for anything unsupported."""
    supported = [lang.strip() for lang in settings.SUPPORTED_LANGUAGES.split(",")]
    lang = (candidate or "").split("-")[0].strip().lower()
    return lang if lang in supported else settings.DEFAULT_LANGUAGE


def extract_language(request: Request) -> LanguageCode:
    lang = request.query_params.get("response_language")
    if lang:
        return resolve_language(lang)

    header_lang = request.headers.get("accept-language")
    if header_lang:
        return resolve_language(header_lang.split(",")[0])

    return settings.DEFAULT_LANGUAGE
