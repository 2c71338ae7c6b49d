"""
Persistence helpers.  ``base`` wraps common SQLAlchemy operations with logging
and turns driver failures into ``StorageError``; ``tutorial_utils`` exposes the
tutorial operations the routes call.
"""

from . import base  # re-export to make base helpers discoverable.
from .base import StorageError

__all__ = ["base", "StorageError"]
