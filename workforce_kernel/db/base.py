"""
Module: workforce_kernel.db.base
Responsibility: Declarative base class for the kernel's SQLAlchemy models,
    with a type annotation map for consistent column types.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel.  MUST NOT import from models/, services/, domain/, or outer layers.

Invariants enforced:
    - Timestamps are always stored timezone-aware.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all kernel models.

    Guarantees:
        - datetime maps to DateTime(timezone=True).
        - str maps to Text (blob payloads are unbounded).
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        str: Text,
    }
