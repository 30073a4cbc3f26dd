#!/usr/bin/env python3
"""Web service main configuration

Combines the hosted service and logging sub-configs with the settings of the
server-rendered web service itself.
"""
import os
from dataclasses import dataclass, field

from .hosted_config import HostedServiceConfig
from .logging_config import LoggingConfig


def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class WebServiceConfig:
    """Web service configuration with all sub-configs"""

    # Environment
    environment: str = "development"
    debug: bool = False

    # Service settings
    service_name: str = "web_service"
    service_host: str = "0.0.0.0"
    service_port: int = 8000
    log_level: str = "INFO"

    # Data
    items_table: str = "items"

    # Sub-configurations
    hosted: HostedServiceConfig = field(default_factory=HostedServiceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> 'WebServiceConfig':
        """Load complete configuration from environment"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        logging_config = LoggingConfig.from_env()
        return cls(
            environment=env,
            debug=_bool(os.getenv("DEBUG", "true" if env == "development" else "false")),
            service_name=os.getenv("SERVICE_NAME", "web_service"),
            service_host=os.getenv("HOST", "0.0.0.0"),
            service_port=_int(os.getenv("PORT", "8000"), 8000),
            log_level=logging_config.log_level,
            items_table=os.getenv("ITEMS_TABLE", "items"),
            hosted=HostedServiceConfig.from_env(),
            logging=logging_config,
        )
