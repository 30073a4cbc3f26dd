#!/usr/bin/env python3
"""Modular configuration system for the web service

Configuration hierarchy:
- hosted_config: Hosted auth/database endpoint and access key
- logging_config: Logging configuration
- web_config: Web service settings combining the sub-configs
"""
import os
from dotenv import load_dotenv
from .hosted_config import ConfigurationError, HostedServiceConfig
from .logging_config import LoggingConfig
from .web_config import WebServiceConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

__all__ = [
    'WebServiceConfig',
    'HostedServiceConfig',
    'LoggingConfig',
    'ConfigurationError',
]
