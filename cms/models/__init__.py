"""SQLAlchemy ORM models for the CMS backend."""

from cms.models.base import Base
from cms.models.config import ConfigRow

__all__ = [
    "Base",
    "ConfigRow",
]
