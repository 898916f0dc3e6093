"""
Module: workforce_kernel.models.store_blob
Responsibility: ORM model for the single key-value row that holds the
    serialized record store.
Architecture position: Kernel > Models.  Imports only from db/base.

Quarantined copies of unreadable blobs are stored in the same table under
``{key}.corrupt.{timestamp}`` keys; rows are never deleted by the engine.
"""

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from workforce_kernel.db.base import Base


class StoreBlob(Base):
    __tablename__ = "store_blobs"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    payload: Mapped[str]
    schema_version: Mapped[int | None]
    saved_at: Mapped[datetime]

    def __repr__(self) -> str:
        return f"<StoreBlob {self.key} v{self.schema_version}>"
