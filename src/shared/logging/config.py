# Path: src/shared/logging/config.py
from pathlib import Path
from pydantic import BaseModel, ConfigDict
from ..config.settings import settings
from ..utilities.constants import LogLevel


class LogConfig(BaseModel):
    """Configuration for logging service."""

    model_config = ConfigDict(use_enum_values=True)

    logger_name: str = "vehicle_registry"
    level: LogLevel = LogLevel(settings.LOG_LEVEL.upper()).value
    enable_console: bool = True
    enable_file: bool = settings.LOG_TO_FILE
    file_path: str = str(Path(settings.LOG_FILE_PATH))
    max_file_size: int = 10 * 1024 * 1024  # 10 MB
    backup_count: int = 5
