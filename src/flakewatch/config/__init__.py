"""Configuration for flakewatch."""

from .flakiness_config import FlakinessConfig

__all__ = ["FlakinessConfig"]
