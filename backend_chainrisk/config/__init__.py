"""
Configuration management for Backend ChainRisk.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for endpoints, API keys and timeouts.
"""

from backend_chainrisk.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
