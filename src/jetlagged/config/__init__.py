"""Configuration management for the resolver."""

from .settings import NetworkSettings, Settings, UnknownNetworkError, get_settings

__all__ = ["NetworkSettings", "Settings", "UnknownNetworkError", "get_settings"]
