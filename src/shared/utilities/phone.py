# Path: src/shared/utilities/phone.py
import re
from dataclasses import dataclass
from typing import List

from src.shared.config.settings import settings
from src.shared.utilities.result import ErrorKind, Result

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True)
class NormalizedPhone:
    """The three comparable representations of one mobile number."""
    e164: str
    prefixed: str
    core: str


def digits_only(raw: str) -> str:
    return _NON_DIGITS.sub("", raw or "")


def extract_core(raw: str) -> str:
    """
    Reduce any phone representation to its local core.

    Leading zeros (international "00" dialing) are dropped, then the country
    prefix is removed when what remains is longer than a bare local number.
    """
    digits = digits_only(raw).lstrip("0")
    prefix = settings.PHONE_COUNTRY_PREFIX
    if len(digits) > settings.PHONE_CORE_LENGTH and digits.startswith(prefix):
        return digits[len(prefix):]
    return digits


def normalize_phone(raw: str) -> Result[NormalizedPhone]:
    """Canonicalize raw input, failing when the core is not a valid local number."""
    core = extract_core(raw)
    if len(core) != settings.PHONE_CORE_LENGTH:
        return Result.failure(ErrorKind.INVALID_PHONE_FORMAT, "Phone must be 8 digits for Qatar.")
    prefix = settings.PHONE_COUNTRY_PREFIX
    return Result.success(NormalizedPhone(e164=f"+{prefix}{core}", prefixed=f"{prefix}{core}", core=core))


def phone_variants(raw: str) -> List[str]:
    """
    All stored forms a phone may have been saved under.

    Looser than normalize_phone: any non-empty digit string yields candidates,
    so legacy rows written with a malformed number still match themselves.
    """
    digits = digits_only(raw)
    if not digits:
        return []
    candidates = [raw.strip(), digits]
    normalized = normalize_phone(raw)
    if normalized.ok:
        phone = normalized.value
        candidates.extend([phone.core, phone.prefixed, phone.e164])
    else:
        candidates.append(extract_core(raw))
    seen = []
    for candidate in candidates:
        if candidate and candidate not in seen:
            seen.append(candidate)
    return seen
