"""Configuration module for the yield router."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
