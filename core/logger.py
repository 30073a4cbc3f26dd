"""
Service Logger Setup

Configures standard library logging for a service from LoggingConfig.
"""
import logging
import sys
from typing import Optional

from .config import LoggingConfig


def setup_service_logger(
    service_name: str,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure root handlers once and return the service logger.

    Args:
        service_name: Name used for the returned logger
        config: Logging configuration (defaults to LoggingConfig.from_env())

    Returns:
        Logger named after the service
    """
    config = config or LoggingConfig.from_env()
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    formatter = logging.Formatter(config.log_format)

    root = logging.getLogger()
    if not getattr(root, "_service_logging_configured", False):
        if config.enable_console:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(formatter)
            root.addHandler(console)
        if config.log_file:
            file_handler = logging.FileHandler(config.log_file)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
        root._service_logging_configured = True
    root.setLevel(level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    service_logger = logging.getLogger(service_name)
    service_logger.setLevel(level)
    return service_logger


__all__ = ["setup_service_logger"]
