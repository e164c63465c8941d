"""Configuration management for nodeconsole.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides.
"""

from nodeconsole.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
