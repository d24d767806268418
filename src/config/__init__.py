"""
Application configuration using Pydantic settings.

Configuration comes from environment variables (or a .env file),
including R2 credentials and the in-memory storage mock switch.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
