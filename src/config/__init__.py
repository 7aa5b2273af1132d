"""
Configuration package for mdtypst

Provides application settings via environment variables using pydantic-settings,
plus the per-call option models handed to the preprocessing passes.
"""

from .settings import appsettings, AppSettings, MARKER_KINDS
from .options import PreprocessorOptions, WikilinkConfig

__all__ = ["appsettings", "AppSettings", "MARKER_KINDS", "PreprocessorOptions", "WikilinkConfig"]
