"""Configuration module: exports Settings."""

from logcore.config.settings import Settings

__all__ = ["Settings"]
