"""
Logging Configuration
=====================
Helpers cấu hình logging cho lbsim.

Mặc định library im lặng (NullHandler trên logger 'lbsim'); caller phải
bật logging bằng các functions dưới đây.

Environment variables (configure_from_env):
    - LBSIM_LOGGING: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LBSIM_LOG_FILE: Đường dẫn log file (bật rotating file logging)
    - LBSIM_LOG_JSON: "1" để xuất JSON

Usage:
    >>> from lbsim.logging_config import enable_console_logging
    >>> enable_console_logging(level="DEBUG")
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

LOGGER_NAME = "lbsim"


class JsonFormatter(logging.Formatter):
    """Format log records thành một dòng JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def _get_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def _get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def _attach(handler: logging.Handler, level: Union[str, int]) -> logging.Handler:
    logger = _get_logger()
    logger.setLevel(_get_level(level))
    handler.setLevel(_get_level(level))
    logger.addHandler(handler)
    return handler


def enable_console_logging(
    level: Union[str, int] = "INFO",
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT
) -> logging.StreamHandler:
    """
    Bật console (stderr) logging.

    Args:
        level: Log level
        format: Format string cho log message
        date_format: Format cho %(asctime)s

    Returns:
        StreamHandler vừa tạo
    """
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format, date_format))
    return _attach(handler, level)


def enable_file_logging(
    path: Union[str, Path],
    level: Union[str, int] = "INFO",
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT
) -> RotatingFileHandler:
    """
    Bật rotating file logging.

    Args:
        path: Đường dẫn log file, thư mục cha được tạo tự động
        level: Log level
        max_bytes: Kích thước tối đa mỗi file trước khi rotate
        backup_count: Số file backup giữ lại

    Returns:
        RotatingFileHandler vừa tạo
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    handler.setFormatter(logging.Formatter(format, date_format))
    return _attach(handler, level)


def enable_json_logging(level: Union[str, int] = "INFO") -> logging.StreamHandler:
    """Bật JSON logging ra stderr."""
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    return _attach(handler, level)


def disable_logging() -> None:
    """Gỡ mọi handler (trừ NullHandler) khỏi logger 'lbsim'."""
    logger = _get_logger()
    for handler in logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()


def set_level(level: Union[str, int]) -> None:
    """Đổi level của logger 'lbsim' và các handlers đang gắn."""
    logger = _get_logger()
    logger.setLevel(_get_level(level))
    for handler in logger.handlers:
        if not isinstance(handler, logging.NullHandler):
            handler.setLevel(_get_level(level))


def configure_from_env() -> bool:
    """
    Cấu hình logging từ environment variables.

    Không làm gì nếu LBSIM_LOGGING và LBSIM_LOG_FILE đều không được set.

    Returns:
        True nếu đã gắn handler theo environment
    """
    level = os.environ.get("LBSIM_LOGGING", "").upper()
    log_file = os.environ.get("LBSIM_LOG_FILE", "")
    use_json = os.environ.get("LBSIM_LOG_JSON", "") == "1"

    if not level and not log_file:
        return False

    level = level or "INFO"

    if log_file:
        handler = enable_file_logging(log_file, level=level)
        if use_json:
            handler.setFormatter(JsonFormatter())
    elif use_json:
        enable_json_logging(level=level)
    else:
        enable_console_logging(level=level)

    return True
