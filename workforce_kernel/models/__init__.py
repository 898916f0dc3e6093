"""ORM models for the persisted store blob."""

from workforce_kernel.models.store_blob import StoreBlob

__all__ = ["StoreBlob"]
