"""
Shared models package.
Contains the declarative base and mixins used by the messaging models.
"""

from .base import Base, TimestampMixin, UTCDateTime, UUIDMixin, utcnow

__all__ = ["Base", "UUIDMixin", "TimestampMixin", "UTCDateTime", "utcnow"]
