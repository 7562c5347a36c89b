"""
Logging setup for the auth service.

Records are written as JSON lines to the console and to two files under the
configured log directory:
- combined.log: everything from INFO up (silent in development)
- error.log: errors only (silent in test)
The console handler is silent in test.
"""
import json
import logging
import os
from datetime import datetime, timezone

from auth_service.config import Config

SERVICE_NAME = "auth-service"


class JSONFormatter(logging.Formatter):
    """Render a log record as a single JSON object."""

    def __init__(self, service_name: str = SERVICE_NAME):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "service": self.service_name,
            "message": record.getMessage(),
        }
        extra = getattr(record, "data", None)
        if extra:
            log_data["data"] = extra
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def setup_logging(config: Config, service_name: str = SERVICE_NAME) -> logging.Logger:
    """
    Configure and return the service logger.

    Calling this more than once replaces the handlers installed by the previous call.

    Args:
        config: Application configuration
        service_name: Logger name, also stamped on every record

    Returns:
        The configured logger
    """
    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, config.log_level, logging.INFO))
    logger.propagate = config.is_test

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = JSONFormatter(service_name)

    if not config.is_test:
        console = logging.StreamHandler()
        console.setLevel(logging.INFO)
        console.setFormatter(formatter)
        logger.addHandler(console)

    if not config.is_development:
        os.makedirs(config.log_dir, exist_ok=True)
        combined = logging.FileHandler(os.path.join(config.log_dir, "combined.log"))
        combined.setLevel(logging.INFO)
        combined.setFormatter(formatter)
        logger.addHandler(combined)

    if not config.is_test:
        os.makedirs(config.log_dir, exist_ok=True)
        errors = logging.FileHandler(os.path.join(config.log_dir, "error.log"))
        errors.setLevel(logging.ERROR)
        errors.setFormatter(formatter)
        logger.addHandler(errors)

    return logger
