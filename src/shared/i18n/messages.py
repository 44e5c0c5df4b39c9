import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from src.shared.utilities.types import LanguageCode
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig

logger = LoggingService(LogConfig())

I18N_DIR = Path(__file__).parent


@lru_cache()
def load_catalog(language: str) -> Dict[str, str]:
    """Load and cache the message catalog for one language."""
    file_path = I18N_DIR / f"{language}.json"
    logger.debug("Loading i18n file", context={"file_path": str(file_path)})
    try:
        with file_path.open(encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error("i18n file not found", context={"file_path": str(file_path), "language": language})
        return {}
    except json.JSONDecodeError as e:
        logger.error("Error loading i18n file", context={"file_path": str(file_path), "error": str(e)})
        return {}


def get_message(key: str, language: LanguageCode = "en", variables: Optional[Dict[str, object]] = None) -> str:
    """Get localized message for key, falling back to English."""
    message = load_catalog(language).get(key) or load_catalog("en").get(key, "")
    if not message:
        logger.warning("Message not found for key", context={"key": key, "language": language})
        return key
    if variables:
        try:
            return message.format(**variables)
        except KeyError as e:
            logger.warning("Missing message variable", context={"key": key, "variable": str(e)})
    return message
