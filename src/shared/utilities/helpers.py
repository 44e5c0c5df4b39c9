import uuid
import secrets

from src.shared.utilities.types import TraceId


# Generate unique trace ID for distributed tracing
def generate_trace_id() -> TraceId:
    return uuid.uuid4()


# Opaque server-side session key
def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


# Mask sensitive data, keeping the last four characters
def sanitize_data(data: str) -> str:
    if len(data) > 4:
        return "****" + data[-4:]
    return data


def truncate(value: str, limit: int) -> str:
    if value is None:
        return ""
    return value if len(value) <= limit else value[:limit]
