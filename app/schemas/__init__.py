"""Beanie ODM schemas for MongoDB collections."""

from .init import init_beanie_odm
from .stream import Stream

__all__ = [
    "Stream",
    "init_beanie_odm",
]
