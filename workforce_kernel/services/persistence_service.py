"""
PersistenceService -- reads and writes the store blob.

Responsibility:
    Moves the codec's blob text in and out of the single ``store_blobs``
    row named by ``blob_key``.  Quarantines unreadable blobs.

Architecture position:
    Kernel > Services -- imperative shell around the pure codec
    (``workforce_kernel.domain.codec``) and the ``Database`` handle.

Invariants enforced:
    - ``load`` never raises for bad data.  A missing row yields an empty
      store.  A corrupt, unsupported or unreadable row is logged at ERROR,
      copied to ``{blob_key}.corrupt.{timestamp}``, and an empty store is
      returned.
    - The original row is never deleted.  The next successful save
      overwrites it only after the quarantine copy exists.  If the row
      could not be read or the quarantine copy could not be written,
      the service locks writes until ``release_write_lock`` is called.

Failure modes:
    - ``save`` propagates SQLAlchemy errors; the flush scheduler logs them
      and retries on the next request.
    - ``save`` raises ``BlobWriteLockedError`` while writes are locked.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from workforce_kernel.db.engine import Database
from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.domain.codec import (
    SCHEMA_VERSION,
    StoreData,
    decode_store,
    empty_store,
    encode_store,
)
from workforce_kernel.exceptions import BlobWriteLockedError, PersistenceError
from workforce_kernel.logging_config import get_logger
from workforce_kernel.models.store_blob import StoreBlob

logger = get_logger("services.persistence")


class PersistenceService:
    def __init__(self, database: Database, blob_key: str, clock: Clock | None = None):
        self._db = database
        self.blob_key = blob_key
        self._clock = clock or SystemClock()
        self._write_lock_reason: str | None = None

    @property
    def writes_locked(self) -> bool:
        return self._write_lock_reason is not None

    def release_write_lock(self) -> None:
        """Allow saves again once an operator has secured the stored blob."""
        if self._write_lock_reason is not None:
            logger.warning(
                "store_write_lock_released",
                extra={"blob_key": self.blob_key, "reason": self._write_lock_reason},
            )
        self._write_lock_reason = None

    def _lock_writes(self, reason: str) -> None:
        self._write_lock_reason = reason
        logger.error("store_writes_locked", extra={"blob_key": self.blob_key, "reason": reason})

    def load(self) -> StoreData:
        """Read and decode the blob, or return an empty store."""
        try:
            with self._db.session_scope() as session:
                row = session.get(StoreBlob, self.blob_key)
                payload = row.payload if row is not None else None
                version = row.schema_version if row is not None else None
        except SQLAlchemyError:
            logger.error(
                "store_blob_unreadable", extra={"blob_key": self.blob_key}, exc_info=True
            )
            self._lock_writes("stored blob could not be read")
            return empty_store()

        if payload is None:
            logger.info("store_blob_missing", extra={"blob_key": self.blob_key})
            return empty_store()

        try:
            data = decode_store(payload)
        except PersistenceError:
            logger.error(
                "store_blob_corrupt",
                extra={"blob_key": self.blob_key, "schema_version": version},
                exc_info=True,
            )
            if self._quarantine(payload, version) is None:
                self._lock_writes("corrupt blob could not be quarantined")
            return empty_store()

        logger.info(
            "store_loaded",
            extra={
                "blob_key": self.blob_key,
                "schema_version": version,
                "tenant_count": len(data["tenants"]),
            },
        )
        return data

    def save(self, data: StoreData) -> None:
        if self._write_lock_reason is not None:
            raise BlobWriteLockedError(self.blob_key, self._write_lock_reason)
        saved_at = self._clock.now()
        payload = encode_store(data, saved_at)
        with self._db.session_scope() as session:
            row = session.get(StoreBlob, self.blob_key)
            if row is None:
                session.add(
                    StoreBlob(
                        key=self.blob_key,
                        payload=payload,
                        schema_version=SCHEMA_VERSION,
                        saved_at=saved_at,
                    )
                )
            else:
                row.payload = payload
                row.schema_version = SCHEMA_VERSION
                row.saved_at = saved_at
        logger.info(
            "store_saved",
            extra={
                "blob_key": self.blob_key,
                "bytes": len(payload),
                "tenant_count": len(data["tenants"]),
            },
        )

    def read_payload(self, key: str) -> str | None:
        with self._db.session_scope() as session:
            row = session.get(StoreBlob, key)
            return row.payload if row is not None else None

    def quarantined_keys(self) -> tuple[str, ...]:
        prefix = f"{self.blob_key}.corrupt."
        with self._db.session_scope() as session:
            keys = session.scalars(
                select(StoreBlob.key).where(StoreBlob.key.startswith(prefix)).order_by(StoreBlob.key)
            ).all()
        return tuple(keys)

    def _quarantine(self, payload: str, version: int | None) -> str | None:
        now = self._clock.now()
        key = f"{self.blob_key}.corrupt.{now.strftime('%Y%m%dT%H%M%S%f')}"
        try:
            with self._db.session_scope() as session:
                session.add(
                    StoreBlob(key=key, payload=payload, schema_version=version, saved_at=now)
                )
        except SQLAlchemyError:
            logger.error(
                "store_blob_quarantine_failed",
                extra={"blob_key": self.blob_key, "quarantine_key": key},
                exc_info=True,
            )
            return None
        logger.warning(
            "store_blob_quarantined",
            extra={"blob_key": self.blob_key, "quarantine_key": key},
        )
        return key
