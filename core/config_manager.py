"""
Configuration Manager

Single entry point used by services at process start to load and validate
their configuration. The returned config object is passed explicitly to
everything that needs it; nothing reads it from module globals.

Usage:
    from core.config_manager import ConfigManager

    config = ConfigManager("web_service").get_service_config()
"""
import logging
from typing import Optional

from .config import ConfigurationError, WebServiceConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """Loads and validates the configuration of one service"""

    def __init__(self, service_name: str):
        self.service_name = service_name
        self._config: Optional[WebServiceConfig] = None

    def get_service_config(self) -> WebServiceConfig:
        """
        Load service configuration from the environment.

        Returns:
            Validated WebServiceConfig

        Raises:
            ConfigurationError: If the hosted service endpoint or key is missing
        """
        if self._config is None:
            config = WebServiceConfig.from_env()
            config.service_name = self.service_name
            config.logging.service_name = self.service_name
            config.hosted.validate()
            logger.debug(
                f"Loaded {self.service_name} config "
                f"(env={config.environment}, hosted={config.hosted.base_url})"
            )
            self._config = config
        return self._config


__all__ = ["ConfigManager", "ConfigurationError"]
