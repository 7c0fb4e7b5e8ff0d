"""Affirmation line pool and session template catalog."""

from .models import Goal, Line, Template
from .storage import LibraryStorage

__all__ = ["Goal", "LibraryStorage", "Line", "Template"]
