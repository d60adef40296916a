"""Configuration package (engine-wide defaults)."""

from . import settings  # noqa: F401
