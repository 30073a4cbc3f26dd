#!/usr/bin/env python3
"""
Core Module

Shared components of the web service.

COMPONENTS:
    - config/: Dataclass configuration loaded from the environment
    - config_manager.py: Process-start configuration loading and validation
    - logger.py: Service logger setup
    - cookies.py: Cookie / Set-Cookie header codec
    - hosted/: Hosted auth + database client (per-request handle)
    - session_bridge.py: Request cookie <-> response header bridging

USAGE:
    from core.config_manager import ConfigManager
    from core.session_bridge import SessionBridgingClient

    config = ConfigManager("web_service").get_service_config()
    bridged = SessionBridgingClient(config.hosted, http_client).create_handle(request)
"""

__version__ = "1.0.0"
