"""
Persistence Codec (``workforce_kernel.domain.codec``).

Responsibility
--------------
Round-trips the entire record store to a single JSON text blob.  Ordered
sequences and associative collections stay distinct: maps are written as
``{"type": "map", "entries": [[key, value], ...]}`` so they decode back to
maps, never to plain keyed objects.

Architecture position
---------------------
**Kernel domain layer** -- pure functions with ZERO I/O.  The persistence
service reads and writes the blob; this module only converts it.

Wire form
---------
Tagged values::

    {"type": "map",      "entries": [[k, v], ...]}
    {"type": "record",   "kind": "Employee", "fields": {...}}
    {"type": "enum",     "kind": "LeaveStatus", "value": "Approved"}
    {"type": "date",     "value": "2024-06-15"}
    {"type": "datetime", "value": "2024-06-15T09:00:00+00:00"}

JSON arrays decode to tuples.  Scalars pass through unchanged.

Envelope::

    {"format": "workforce-store", "schema_version": 2,
     "saved_at": "<iso>", "store": <tagged map>}

Schema history
--------------
* v1 -- legacy unversioned blob.  The root is the store map itself, laid
  out collection-major (``{"employees": {tenant_id: [...]}, ...}``) with
  camelCase collection names and a single settings record per tenant.
* v2 -- tenant-major ``{"tenants": {...}, "collections": {tenant_id:
  {collection: (...)}}}`` inside a versioned envelope.

Failure modes
-------------
* ``CorruptBlobError`` -- invalid JSON, unknown tag or kind, or field values
  rejected by record validation.
* ``UnsupportedBlobVersionError`` -- blob written by a newer schema.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Callable
from datetime import date, datetime
from enum import Enum
from typing import Any

from workforce_kernel.domain.records import ENUM_TYPES, RECORD_TYPES, Collection
from workforce_kernel.exceptions import (
    CorruptBlobError,
    UnsupportedBlobVersionError,
    WorkforceKernelError,
)

FORMAT_NAME = "workforce-store"
SCHEMA_VERSION = 2

StoreData = dict[str, Any]


# ---------------------------------------------------------------------------
# Value tagging
# ---------------------------------------------------------------------------


def encode_value(value: Any) -> Any:
    """Convert a logical value into its tagged JSON-compatible form."""
    if isinstance(value, Enum):
        return {"type": "enum", "kind": type(value).__name__, "value": value.value}
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    # datetime is a date subclass; test it first.
    if isinstance(value, datetime):
        return {"type": "datetime", "value": value.isoformat()}
    if isinstance(value, date):
        return {"type": "date", "value": value.isoformat()}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            "type": "record",
            "kind": type(value).__name__,
            "fields": {
                f.name: encode_value(getattr(value, f.name))
                for f in dataclasses.fields(value)
            },
        }
    if isinstance(value, dict):
        return {
            "type": "map",
            "entries": [[encode_value(k), encode_value(v)] for k, v in value.items()],
        }
    if isinstance(value, (list, tuple)):
        return [encode_value(item) for item in value]
    raise TypeError(f"Cannot encode value of type {type(value).__name__}")


def decode_value(raw: Any) -> Any:
    """Inverse of :func:`encode_value`.  Raises ``CorruptBlobError``."""
    if isinstance(raw, list):
        return tuple(decode_value(item) for item in raw)
    if not isinstance(raw, dict):
        return raw

    tag = raw.get("type")
    if tag == "map":
        entries = raw.get("entries")
        if not isinstance(entries, list):
            raise CorruptBlobError("map without entries")
        result = {}
        for entry in entries:
            if not isinstance(entry, list) or len(entry) != 2:
                raise CorruptBlobError("map entry is not a [key, value] pair")
            result[decode_value(entry[0])] = decode_value(entry[1])
        return result
    if tag == "record":
        return _decode_record(raw)
    if tag == "enum":
        enum_cls = ENUM_TYPES.get(raw.get("kind"))
        if enum_cls is None:
            raise CorruptBlobError(f"unknown enum kind {raw.get('kind')!r}")
        try:
            return enum_cls(raw.get("value"))
        except ValueError as exc:
            raise CorruptBlobError(str(exc)) from exc
    if tag == "date":
        return _parse_iso(date.fromisoformat, raw.get("value"))
    if tag == "datetime":
        return _parse_iso(datetime.fromisoformat, raw.get("value"))
    raise CorruptBlobError(f"unknown value tag {tag!r}")


def _decode_record(raw: dict[str, Any]) -> Any:
    kind = raw.get("kind")
    record_cls = RECORD_TYPES.get(kind)
    if record_cls is None:
        raise CorruptBlobError(f"unknown record kind {kind!r}")
    fields = raw.get("fields")
    if not isinstance(fields, dict):
        raise CorruptBlobError(f"record {kind} without fields")
    decoded = {name: decode_value(value) for name, value in fields.items()}
    try:
        return record_cls(**decoded)
    except (TypeError, WorkforceKernelError) as exc:
        raise CorruptBlobError(f"invalid {kind} record: {exc}") from exc


def _parse_iso(parser: Callable[[str], Any], value: Any) -> Any:
    if not isinstance(value, str):
        raise CorruptBlobError(f"expected ISO string, got {value!r}")
    try:
        return parser(value)
    except ValueError as exc:
        raise CorruptBlobError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Migrations
# ---------------------------------------------------------------------------

_V1_COLLECTION_NAMES = {
    "users": Collection.USERS,
    "roles": Collection.ROLES,
    "companySettings": Collection.COMPANY_SETTINGS,
    "employees": Collection.EMPLOYEES,
    "leaveRequests": Collection.LEAVE_REQUESTS,
    "leaveBalances": Collection.LEAVE_BALANCES,
    "payrollRuns": Collection.PAYROLL_RUNS,
    "payslips": Collection.PAYSLIPS,
    "documents": Collection.DOCUMENTS,
    "companyAssets": Collection.ASSETS,
    "assetMaintenances": Collection.ASSET_MAINTENANCES,
    "attendanceRecords": Collection.ATTENDANCE_RECORDS,
    "jobOpenings": Collection.JOB_OPENINGS,
    "candidates": Collection.CANDIDATES,
    "auditLogs": Collection.AUDIT_LOGS,
}


def _migrate_v1_to_v2(store: StoreData) -> StoreData:
    """Transpose the collection-major legacy layout to tenant-major."""
    tenants = store.get("tenants", {})
    collections: dict[str, dict[str, tuple]] = {
        tenant_id: {} for tenant_id in tenants
    }
    for legacy_name, collection in _V1_COLLECTION_NAMES.items():
        by_tenant = store.get(legacy_name, {})
        if not isinstance(by_tenant, dict):
            raise CorruptBlobError(f"legacy collection {legacy_name} is not a map")
        for tenant_id, records in by_tenant.items():
            if not isinstance(records, tuple):
                # Legacy settings held one record per tenant.
                records = (records,)
            collections.setdefault(tenant_id, {})[collection.value] = records
    return {"tenants": tenants, "collections": collections}


# from_version -> function producing from_version + 1
MIGRATIONS: dict[int, Callable[[StoreData], StoreData]] = {
    1: _migrate_v1_to_v2,
}


def migrate(store: StoreData, from_version: int) -> StoreData:
    """Apply migrations step by step up to ``SCHEMA_VERSION``."""
    if from_version > SCHEMA_VERSION:
        raise UnsupportedBlobVersionError(from_version, SCHEMA_VERSION)
    version = from_version
    while version < SCHEMA_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            raise CorruptBlobError(f"no migration from schema version {version}")
        store = step(store)
        version += 1
    return store


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


def empty_store() -> StoreData:
    return {"tenants": {}, "collections": {}}


def encode_store(store: StoreData, saved_at: datetime) -> str:
    """Serialize a logical store into the versioned blob text."""
    envelope = {
        "format": FORMAT_NAME,
        "schema_version": SCHEMA_VERSION,
        "saved_at": saved_at.isoformat(),
        "store": encode_value(store),
    }
    return json.dumps(envelope, ensure_ascii=False)


def decode_store(payload: str) -> StoreData:
    """Parse blob text into a logical store, migrating legacy versions."""
    try:
        document = json.loads(payload)
    except (json.JSONDecodeError, TypeError) as exc:
        raise CorruptBlobError(f"invalid JSON: {exc}") from exc

    if isinstance(document, dict) and document.get("format") == FORMAT_NAME:
        version = document.get("schema_version")
        if not isinstance(version, int) or isinstance(version, bool) or version < 1:
            raise CorruptBlobError(f"invalid schema_version {version!r}")
        if version > SCHEMA_VERSION:
            raise UnsupportedBlobVersionError(version, SCHEMA_VERSION)
        raw_store = document.get("store")
    else:
        version = 1
        raw_store = document

    store = decode_value(raw_store)
    if not isinstance(store, dict):
        raise CorruptBlobError("store root is not a map")
    store = migrate(store, version)
    _check_shape(store)
    return store


def _check_shape(store: StoreData) -> None:
    tenants = store.get("tenants")
    collections = store.get("collections")
    if not isinstance(tenants, dict) or not isinstance(collections, dict):
        raise CorruptBlobError("store must hold 'tenants' and 'collections' maps")
    for tenant_id, by_name in collections.items():
        if not isinstance(by_name, dict):
            raise CorruptBlobError(f"collections for {tenant_id} is not a map")
        for name, records in by_name.items():
            if not isinstance(records, tuple):
                raise CorruptBlobError(f"collection {tenant_id}/{name} is not a sequence")
