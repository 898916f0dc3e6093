"""
TenantRecordStore -- tenant-partitioned record collections.

Responsibility:
    Typed reads and transactional whole-collection replacement over
    per-tenant collections (employees, leave, payroll, documents, assets,
    roles, users, audit entries).  Reads return immutable snapshots.

Architecture position:
    Kernel > Services -- the single owner of in-memory workforce state.
    Every module service reads and mutates through this store; the
    persistence service snapshots and restores it.

Invariants enforced:
    TENANT_ISOLATION           -- every read and write names exactly one
                                  tenant; there is no cross-tenant path.
    SNAPSHOT_READS             -- ``get`` returns a tuple of frozen records,
                                  never the live backing structure.
    ATOMIC_TENANT_COMMIT       -- a transaction's staged collections are
                                  swapped in together under the commit lock,
                                  or not at all.
    SERIALIZED_TENANT_MUTATION -- a per-tenant re-entrant lock is held for the
                                  whole read-modify-write of a transaction.

Failure modes:
    - TenantNotFoundError on any read or transaction for an unknown tenant.
    - TenantAlreadyExistsError when registering a duplicate tenant id.
    - ValueError for an unknown collection name (programming error).
    - Any exception raised inside ``transaction()`` discards the staged
      changes and propagates unchanged.

Audit relevance:
    The store itself writes no audit entries.  Module services call the
    AuditTrail after their transaction commits.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from workforce_kernel.domain.codec import StoreData
from workforce_kernel.domain.records import Collection, Tenant
from workforce_kernel.exceptions import TenantAlreadyExistsError, TenantNotFoundError
from workforce_kernel.logging_config import get_logger

logger = get_logger("services.tenant_store")

CollectionName = Collection | str


def _name(collection: CollectionName) -> str:
    return Collection(collection).value


class TenantTransaction:
    """
    Staged whole-collection replacements for one tenant.

    Reads inside the transaction see staged values first.  Nothing is
    visible to other readers until the enclosing ``transaction()`` block
    exits normally.
    """

    def __init__(self, store: TenantRecordStore, tenant_id: str):
        self.tenant_id = tenant_id
        self._store = store
        self._staged: dict[str, tuple] = {}

    @property
    def staged_collections(self) -> tuple[str, ...]:
        return tuple(self._staged)

    def get(self, collection: CollectionName) -> tuple:
        name = _name(collection)
        if name in self._staged:
            return self._staged[name]
        return self._store._committed(self.tenant_id, name)

    def find(self, collection: CollectionName, record_id: str) -> Any | None:
        for record in self.get(collection):
            if record.id == record_id:
                return record
        return None

    def require(
        self,
        collection: CollectionName,
        record_id: str,
        error: Callable[[], Exception],
    ) -> Any:
        record = self.find(collection, record_id)
        if record is None:
            raise error()
        return record

    def replace(self, collection: CollectionName, records: Iterable[Any]) -> None:
        self._staged[_name(collection)] = tuple(records)

    def append(self, collection: CollectionName, record: Any) -> None:
        self.replace(collection, self.get(collection) + (record,))

    def prepend(self, collection: CollectionName, record: Any) -> None:
        self.replace(collection, (record,) + self.get(collection))

    def upsert(self, collection: CollectionName, record: Any) -> None:
        """Replace the record with the same id in place, or append it."""
        current = self.get(collection)
        if any(existing.id == record.id for existing in current):
            self.replace(
                collection,
                (record if existing.id == record.id else existing for existing in current),
            )
        else:
            self.replace(collection, current + (record,))

    def remove(self, collection: CollectionName, record_id: str) -> Any | None:
        """Remove a record by id.  Returns the removed record, or None."""
        current = self.get(collection)
        removed = None
        kept = []
        for record in current:
            if record.id == record_id:
                removed = record
            else:
                kept.append(record)
        if removed is not None:
            self.replace(collection, kept)
        return removed


class TenantRecordStore:
    """
    In-memory, tenant-partitioned record store.

    Contract:
        Readers always observe a committed state.  Writers go through
        ``transaction(tenant_id)``.  ``on_commit`` is invoked after every
        successful commit (the engine wires it to the flush scheduler).
    """

    def __init__(self, on_commit: Callable[[], None] | None = None):
        self._tenants: dict[str, Tenant] = {}
        self._collections: dict[str, dict[str, tuple]] = {}
        self._tenant_locks: dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()
        self._commit_lock = threading.Lock()
        self._on_commit = on_commit

    def set_commit_hook(self, on_commit: Callable[[], None] | None) -> None:
        self._on_commit = on_commit

    # ------------------------------------------------------------------
    # Tenants
    # ------------------------------------------------------------------

    def has_tenant(self, tenant_id: str) -> bool:
        with self._commit_lock:
            return tenant_id in self._tenants

    def get_tenant(self, tenant_id: str) -> Tenant:
        with self._commit_lock:
            tenant = self._tenants.get(tenant_id)
        if tenant is None:
            raise TenantNotFoundError(tenant_id)
        return tenant

    def list_tenants(self) -> tuple[Tenant, ...]:
        with self._commit_lock:
            return tuple(self._tenants.values())

    def create_tenant(
        self,
        tenant: Tenant,
        initial: Mapping[CollectionName, Iterable[Any]] | None = None,
    ) -> Tenant:
        """Register a tenant together with its initial collections."""
        collections = {
            _name(name): tuple(records) for name, records in (initial or {}).items()
        }
        with self._lock_for(tenant.id):
            with self._commit_lock:
                if tenant.id in self._tenants:
                    raise TenantAlreadyExistsError(tenant.id)
                self._tenants[tenant.id] = tenant
                self._collections[tenant.id] = collections
        logger.info(
            "tenant_created",
            extra={"tenant_id": tenant.id, "collections": sorted(collections)},
        )
        self._notify_commit()
        return tenant

    def update_tenant(self, tenant: Tenant) -> Tenant:
        with self._lock_for(tenant.id):
            with self._commit_lock:
                if tenant.id not in self._tenants:
                    raise TenantNotFoundError(tenant.id)
                self._tenants[tenant.id] = tenant
        self._notify_commit()
        return tenant

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, tenant_id: str, collection: CollectionName) -> tuple:
        """Snapshot of one tenant collection."""
        return self._committed(tenant_id, _name(collection))

    def find(self, tenant_id: str, collection: CollectionName, record_id: str) -> Any | None:
        for record in self.get(tenant_id, collection):
            if record.id == record_id:
                return record
        return None

    def require(
        self,
        tenant_id: str,
        collection: CollectionName,
        record_id: str,
        error: Callable[[], Exception],
    ) -> Any:
        record = self.find(tenant_id, collection, record_id)
        if record is None:
            raise error()
        return record

    def _committed(self, tenant_id: str, name: str) -> tuple:
        with self._commit_lock:
            by_name = self._collections.get(tenant_id)
            if by_name is None:
                raise TenantNotFoundError(tenant_id)
            return by_name.get(name, ())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self, tenant_id: str) -> Iterator[TenantTransaction]:
        """
        Serialized read-modify-write scope for one tenant.

        Postconditions: on normal exit every staged collection becomes
            visible at once.  On exception nothing is applied.
        """
        with self._lock_for(tenant_id):
            if not self.has_tenant(tenant_id):
                raise TenantNotFoundError(tenant_id)
            txn = TenantTransaction(self, tenant_id)
            yield txn
            if not txn._staged:
                return
            with self._commit_lock:
                merged = dict(self._collections[tenant_id])
                merged.update(txn._staged)
                self._collections[tenant_id] = merged
            logger.debug(
                "tenant_transaction_committed",
                extra={"tenant_id": tenant_id, "collections": sorted(txn._staged)},
            )
        self._notify_commit()

    def _lock_for(self, tenant_id: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._tenant_locks.get(tenant_id)
            if lock is None:
                lock = threading.RLock()
                self._tenant_locks[tenant_id] = lock
            return lock

    def _notify_commit(self) -> None:
        if self._on_commit is not None:
            self._on_commit()

    # ------------------------------------------------------------------
    # Snapshot / restore (persistence)
    # ------------------------------------------------------------------

    def snapshot(self) -> StoreData:
        """Consistent logical copy of the whole store."""
        with self._commit_lock:
            return {
                "tenants": dict(self._tenants),
                "collections": {
                    tenant_id: dict(by_name)
                    for tenant_id, by_name in self._collections.items()
                },
            }

    def restore(self, data: StoreData) -> None:
        """Replace all state with a decoded snapshot.  Startup only."""
        tenants = dict(data.get("tenants", {}))
        collections = {
            tenant_id: dict(data.get("collections", {}).get(tenant_id, {}))
            for tenant_id in tenants
        }
        with self._commit_lock:
            self._tenants = tenants
            self._collections = collections
        logger.info("store_restored", extra={"tenant_count": len(tenants)})
