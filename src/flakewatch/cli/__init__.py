"""Command line interface for flakewatch."""

from .app import main
from .renderer import ReportRenderer

__all__ = ["main", "ReportRenderer"]
