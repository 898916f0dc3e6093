"""
Assets Module Service (``workforce_modules.assets.service``).

Responsibility
--------------
Company assets issued to employees (laptops, phones, vehicles), their
custody lifecycle, maintenance records and straight-line book value.

Architecture position
---------------------
**Modules layer** -- service facade over the kernel record store.  Every
status change goes through ``ASSET_WORKFLOW``.

Invariants enforced
-------------------
* ``assigned_to_employee_id`` is set exactly when status is Assigned.
* Assets are only assigned to active employees of the same tenant.
* ``update_asset`` edits descriptive fields only; custody state is owned
  by the workflow actions.
* A maintenance record names an existing asset; its ``asset_name`` is
  copied at logging time.

Failure modes
-------------
* ``AssetNotFoundError`` / ``MaintenanceRecordNotFoundError`` /
  ``EmployeeNotFoundError`` -- unknown references.
* ``InvalidTransitionError`` -- action not allowed from the current status.
* ``NegativeAmountError`` -- negative cost or residual value.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date

from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.domain.dates import DateLike, to_date
from workforce_kernel.domain.money import format_amount
from workforce_kernel.domain.records import (
    Actor,
    AssetCategory,
    AssetMaintenance,
    AssetStatus,
    Collection,
    CompanyAsset,
    MaintenanceStatus,
    MaintenanceType,
    new_id,
)
from workforce_kernel.domain.workflow import apply_transition
from workforce_kernel.exceptions import (
    AssetNotFoundError,
    EmployeeNotFoundError,
    MaintenanceRecordNotFoundError,
)
from workforce_kernel.logging_config import get_logger
from workforce_kernel.services.audit_trail import AuditAction, AuditTrail
from workforce_kernel.services.tenant_store import TenantRecordStore, TenantTransaction
from workforce_modules.assets.helpers import book_value
from workforce_modules.assets.workflows import ASSET_WORKFLOW

logger = get_logger("modules.assets.service")


@dataclass(frozen=True)
class AssetHolding:
    """An asset with the display name of its current holder, if any."""
    asset: CompanyAsset
    assigned_to_employee_name: str | None = None


class AssetService:
    """Company assets and maintenance records."""

    def __init__(
        self,
        store: TenantRecordStore,
        audit: AuditTrail,
        clock: Clock | None = None,
    ):
        self._store = store
        self._audit = audit
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_assets(self, tenant_id: str) -> tuple[AssetHolding, ...]:
        names = {e.id: e.name for e in self._store.get(tenant_id, Collection.EMPLOYEES)}
        return tuple(
            AssetHolding(
                asset=asset,
                assigned_to_employee_name=names.get(asset.assigned_to_employee_id),
            )
            for asset in self._store.get(tenant_id, Collection.ASSETS)
        )

    def get_asset(self, tenant_id: str, asset_id: str) -> CompanyAsset:
        return self._store.require(
            tenant_id, Collection.ASSETS, asset_id, lambda: AssetNotFoundError(tenant_id, asset_id)
        )

    def assets_for_employee(self, tenant_id: str, employee_id: str) -> tuple[CompanyAsset, ...]:
        return tuple(
            a for a in self._store.get(tenant_id, Collection.ASSETS)
            if a.assigned_to_employee_id == employee_id
        )

    def book_value(self, tenant_id: str, asset_id: str, as_of: date | None = None) -> float:
        return book_value(self.get_asset(tenant_id, asset_id), as_of or self._clock.today())

    # ------------------------------------------------------------------
    # Register / edit
    # ------------------------------------------------------------------

    def add_asset(
        self,
        tenant_id: str,
        actor: Actor,
        *,
        asset_tag: str,
        name: str,
        category: AssetCategory,
        serial_number: str,
        purchase_date: DateLike,
        purchase_cost: float,
        location: str,
        residual_value: float = 0.0,
        useful_life_months: int = 0,
        vendor: str = "",
        warranty_end_date: DateLike | None = None,
    ) -> CompanyAsset:
        asset = CompanyAsset(
            id=new_id("asset"),
            tenant_id=tenant_id,
            asset_tag=asset_tag,
            name=name,
            category=category,
            serial_number=serial_number,
            purchase_date=to_date(purchase_date, "purchase_date"),
            purchase_cost=float(purchase_cost),
            location=location,
            status=AssetStatus(ASSET_WORKFLOW.initial_state),
            residual_value=float(residual_value),
            useful_life_months=useful_life_months,
            vendor=vendor,
            warranty_end_date=(
                to_date(warranty_end_date, "warranty_end_date")
                if warranty_end_date is not None
                else None
            ),
        )
        with self._store.transaction(tenant_id) as txn:
            txn.append(Collection.ASSETS, asset)

        logger.info(
            "asset_added",
            extra={
                "tenant_id": tenant_id,
                "asset_id": asset.id,
                "asset_tag": asset_tag,
                "purchase_cost": format_amount(asset.purchase_cost),
            },
        )
        self._audit.record(
            tenant_id, actor, AuditAction.ASSET_ADDED, f"Registered asset {asset_tag} ({name})."
        )
        return asset

    def update_asset(self, tenant_id: str, asset: CompanyAsset, actor: Actor) -> CompanyAsset:
        """
        Replace an asset's descriptive fields.

        Status, holder and assignment date are kept from the stored record;
        use the custody actions to change them.
        """
        with self._store.transaction(tenant_id) as txn:
            current = self._require(txn, tenant_id, asset.id)
            updated = replace(
                asset,
                tenant_id=tenant_id,
                status=current.status,
                assigned_to_employee_id=current.assigned_to_employee_id,
                assignment_date=current.assignment_date,
            )
            txn.upsert(Collection.ASSETS, updated)

        logger.info("asset_updated", extra={"tenant_id": tenant_id, "asset_id": asset.id})
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.ASSET_UPDATED,
            f"Updated asset {updated.asset_tag} ({updated.name}).",
        )
        return updated

    # ------------------------------------------------------------------
    # Custody
    # ------------------------------------------------------------------

    def assign_asset(
        self,
        tenant_id: str,
        asset_id: str,
        employee_id: str,
        actor: Actor,
        assignment_date: DateLike | None = None,
    ) -> CompanyAsset:
        assigned_on = (
            to_date(assignment_date, "assignment_date")
            if assignment_date is not None
            else self._clock.today()
        )
        with self._store.transaction(tenant_id) as txn:
            asset = self._require(txn, tenant_id, asset_id)
            transition = apply_transition(ASSET_WORKFLOW, asset.status.value, "assign")
            employee = txn.find(Collection.EMPLOYEES, employee_id)
            if employee is None or not employee.is_active:
                raise EmployeeNotFoundError(tenant_id, employee_id)
            updated = replace(
                asset,
                status=AssetStatus(transition.to_state),
                assigned_to_employee_id=employee.id,
                assignment_date=assigned_on,
            )
            txn.upsert(Collection.ASSETS, updated)

        self._log_custody(tenant_id, updated, "assign")
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.ASSET_UPDATED,
            f"Assigned {asset.asset_tag} to {employee.name}.",
        )
        return updated

    def return_asset(self, tenant_id: str, asset_id: str, actor: Actor) -> CompanyAsset:
        return self._custody_action(tenant_id, asset_id, "return", actor, "Returned")

    def send_to_repair(self, tenant_id: str, asset_id: str, actor: Actor) -> CompanyAsset:
        return self._custody_action(tenant_id, asset_id, "send_to_repair", actor, "Sent to repair")

    def complete_repair(self, tenant_id: str, asset_id: str, actor: Actor) -> CompanyAsset:
        return self._custody_action(tenant_id, asset_id, "complete_repair", actor, "Repaired")

    def retire_asset(self, tenant_id: str, asset_id: str, actor: Actor) -> CompanyAsset:
        return self._custody_action(tenant_id, asset_id, "retire", actor, "Retired")

    def _custody_action(
        self,
        tenant_id: str,
        asset_id: str,
        action: str,
        actor: Actor,
        verb: str,
    ) -> CompanyAsset:
        """Any custody move that ends with nobody holding the asset."""
        with self._store.transaction(tenant_id) as txn:
            asset = self._require(txn, tenant_id, asset_id)
            transition = apply_transition(ASSET_WORKFLOW, asset.status.value, action)
            updated = replace(
                asset,
                status=AssetStatus(transition.to_state),
                assigned_to_employee_id=None,
                assignment_date=None,
            )
            txn.upsert(Collection.ASSETS, updated)

        self._log_custody(tenant_id, updated, action)
        self._audit.record(
            tenant_id, actor, AuditAction.ASSET_UPDATED, f"{verb} {asset.asset_tag}."
        )
        return updated

    @staticmethod
    def _log_custody(tenant_id: str, asset: CompanyAsset, action: str) -> None:
        logger.info(
            "asset_custody_changed",
            extra={
                "tenant_id": tenant_id,
                "asset_id": asset.id,
                "action": action,
                "status": asset.status.value,
                "employee_id": asset.assigned_to_employee_id,
            },
        )

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def list_maintenances(
        self, tenant_id: str, asset_id: str | None = None
    ) -> tuple[AssetMaintenance, ...]:
        return tuple(
            m for m in self._store.get(tenant_id, Collection.ASSET_MAINTENANCES)
            if asset_id is None or m.asset_id == asset_id
        )

    def log_maintenance(
        self,
        tenant_id: str,
        asset_id: str,
        maintenance_type: MaintenanceType,
        description: str,
        cost: float,
        maintenance_date: DateLike,
        actor: Actor,
        status: MaintenanceStatus = MaintenanceStatus.OPEN,
    ) -> AssetMaintenance:
        with self._store.transaction(tenant_id) as txn:
            asset = self._require(txn, tenant_id, asset_id)
            record = AssetMaintenance(
                id=new_id("maint"),
                tenant_id=tenant_id,
                asset_id=asset.id,
                asset_name=asset.name,
                maintenance_type=maintenance_type,
                description=description,
                cost=float(cost),
                date=to_date(maintenance_date, "maintenance_date"),
                status=status,
            )
            txn.prepend(Collection.ASSET_MAINTENANCES, record)

        logger.info(
            "maintenance_logged",
            extra={
                "tenant_id": tenant_id,
                "maintenance_id": record.id,
                "asset_id": asset_id,
                "maintenance_type": maintenance_type.value,
                "cost": format_amount(record.cost),
            },
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.MAINTENANCE_LOGGED,
            f"{maintenance_type.value} logged for {asset.name}: {description}",
        )
        return record

    def update_maintenance_status(
        self,
        tenant_id: str,
        maintenance_id: str,
        status: MaintenanceStatus,
        actor: Actor,
    ) -> AssetMaintenance:
        with self._store.transaction(tenant_id) as txn:
            record = txn.require(
                Collection.ASSET_MAINTENANCES,
                maintenance_id,
                lambda: MaintenanceRecordNotFoundError(tenant_id, maintenance_id),
            )
            updated = replace(record, status=status)
            txn.upsert(Collection.ASSET_MAINTENANCES, updated)

        logger.info(
            "maintenance_updated",
            extra={
                "tenant_id": tenant_id,
                "maintenance_id": maintenance_id,
                "status": status.value,
            },
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.MAINTENANCE_UPDATED,
            f"Maintenance on {record.asset_name} marked {status.value}.",
        )
        return updated

    @staticmethod
    def _require(txn: TenantTransaction, tenant_id: str, asset_id: str) -> CompanyAsset:
        return txn.require(
            Collection.ASSETS, asset_id, lambda: AssetNotFoundError(tenant_id, asset_id)
        )
