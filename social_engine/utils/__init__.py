"""Utility helpers for the social engine."""

from .logging import setup_logging

__all__ = ["setup_logging"]
