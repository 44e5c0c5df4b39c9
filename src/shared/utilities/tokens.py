# Path: src/shared/utilities/tokens.py
import re
import secrets
from typing import Optional

from src.shared.config.settings import settings

# Excludes visually ambiguous symbols (0/O, 1/I)
PUBLIC_TOKEN_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REFERENCE_DIGITS = 6


def generate_public_token(length: int = None) -> str:
    """Random public lookup token, lowercased."""
    size = length or settings.UNIQUE_TOKEN_LENGTH
    return "".join(secrets.choice(PUBLIC_TOKEN_ALPHABET) for _ in range(size)).lower()


def format_reference_token(sequence: int) -> str:
    return f"{settings.REFERENCE_TOKEN_PREFIX}{sequence:0{REFERENCE_DIGITS}d}"


def parse_reference_token(token: Optional[str]) -> Optional[int]:
    """Sequence number of a REF token, or None if it is not one."""
    if not token:
        return None
    match = re.fullmatch(rf"{re.escape(settings.REFERENCE_TOKEN_PREFIX)}(\d+)", token)
    return int(match.group(1)) if match else None
