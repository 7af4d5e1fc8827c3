"""
Logging configuration utilities with structured logging and log rotation.
"""
import json
import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Dict, Any


def setup_logging(
    log_file: Optional[str] = None,
    level: str = "INFO",
    enable_json: bool = False,
    enable_rotation: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> None:
    """
    Set up logging with optional file rotation and structured output.

    Console output goes to stderr so that listing results written to stdout
    stay machine-readable.

    Args:
        log_file: Path to log file (None = console only)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_json: If True, use JSON format for structured logging
        enable_rotation: If True, enable log rotation
        max_bytes: Maximum log file size before rotation
        backup_count: Number of backup log files to keep
    """
    # Clear existing handlers
    root_logger = logging.getLogger()
    root_logger.handlers = []

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if enable_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if not log_file:
        return

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    if enable_rotation:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
    else:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')

    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)


def mask_secret(value: Optional[str], visible: int = 3) -> str:
    """
    Render a secret for log output without revealing it.

    Args:
        value: Password, cookie or code to mask
        visible: Number of leading characters to keep

    Returns:
        e.g. ``"X-A…(412 chars)"``, or ``"<empty>"``
    """
    if not value:
        return "<empty>"
    if len(value) <= visible * 2:
        return f"***({len(value)} chars)"
    return f"{value[:visible]}…({len(value)} chars)"


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_obj: Dict[str, Any] = {
            'timestamp': self.formatTime(record, self.datefmt),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_obj['exception'] = self.formatException(record.exc_info)

        # Add extra fields if present
        if hasattr(record, 'extra'):
            log_obj.update(record.extra)

        return json.dumps(log_obj)
