"""Configuration for the resilient SQL access layer."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
