"""Database layer - declarative base and the blob database handle."""

from workforce_kernel.db.base import Base
from workforce_kernel.db.engine import Database

__all__ = [
    "Base",
    "Database",
]
