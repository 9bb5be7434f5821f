"""Persistence infrastructure: SQLite database and document-backed repositories."""

from .database import Database

__all__ = ["Database"]
