"""Service layer for flakewatch."""

from .flakiness_service import FlakinessService, create_storage

__all__ = ["FlakinessService", "create_storage"]
