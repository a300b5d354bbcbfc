"""
Database Models

The declarative base lives here; feature models are defined in their
feature packages and must be imported before creating tables.
"""

from plore.models.base import Base

__all__ = ["Base"]
