import logging

from src.shared.utilities.helpers import sanitize_data


class SensitiveDataFilter(logging.Filter):
    """Filter to mask phone numbers, codes and tokens in log context."""

    SENSITIVE_FIELDS = {
        "phone",
        "phone_number",
        "owner_phone",
        "national_id",
        "email",
        "code",
        "otp",
        "token",
        "access_token",
        "session_token",
        "api_key",
    }

    def filter(self, record: logging.LogRecord) -> bool:
        """Mask sensitive fields in a copy of the record context."""
        context = getattr(record, "extra_context", None)
        if isinstance(context, dict):
            masked = dict(context)
            for key, value in context.items():
                if key.lower() in self.SENSITIVE_FIELDS and isinstance(value, str):
                    masked[key] = sanitize_data(value)
            record.extra_context = masked
        return True
