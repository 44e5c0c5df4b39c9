# Path: src/shared/utilities/types.py
from typing import Dict, Any, Literal, Callable
from datetime import datetime
from uuid import UUID

# Type for error codes (e.g., "REVIEW_RECORD_HIDDEN")
ErrorCode = str

# Type for trace IDs (UUID for distributed tracing)
TraceId = UUID

# Type for error details (flexible key-value pairs)
ErrorDetails = Dict[str, Any]

# Type for language codes
LanguageCode = Literal["en", "ar"]

# Injectable time source, returns an aware UTC datetime
Clock = Callable[[], datetime]
