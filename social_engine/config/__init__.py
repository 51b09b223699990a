"""Configuration package for the social engine."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
