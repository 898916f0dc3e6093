"""
Attendance Module Service (``workforce_modules.attendance.service``).

Responsibility
--------------
Daily attendance: one check-in / check-out pair per record, with hours
worked derived at write time.

Architecture position
---------------------
**Modules layer** -- service facade over the kernel record store.

Invariants enforced
-------------------
* ``hours_worked`` is computed, never supplied, and is never negative.
* Listings are ordered by date, newest first.  Records for the same day
  keep their insertion order.

Failure modes
-------------
* ``EmployeeNotFoundError`` -- record for an unknown employee.
* ``InvalidClockTimeError`` -- check-in or check-out is not ``HH:MM``.
"""

from __future__ import annotations

from workforce_kernel.domain.dates import DateLike, to_date
from workforce_kernel.domain.records import Actor, AttendanceRecord, Collection, new_id
from workforce_kernel.exceptions import EmployeeNotFoundError
from workforce_kernel.logging_config import get_logger
from workforce_kernel.services.audit_trail import AuditAction, AuditTrail
from workforce_kernel.services.tenant_store import TenantRecordStore
from workforce_modules.attendance.helpers import hours_between

logger = get_logger("modules.attendance.service")


class AttendanceService:
    """Check-in / check-out records per employee."""

    def __init__(self, store: TenantRecordStore, audit: AuditTrail):
        self._store = store
        self._audit = audit

    def list_records(self, tenant_id: str) -> tuple[AttendanceRecord, ...]:
        records = self._store.get(tenant_id, Collection.ATTENDANCE_RECORDS)
        return tuple(sorted(records, key=lambda r: r.date, reverse=True))

    def employee_records(self, tenant_id: str, employee_id: str) -> tuple[AttendanceRecord, ...]:
        return tuple(r for r in self.list_records(tenant_id) if r.employee_id == employee_id)

    def total_hours(
        self,
        tenant_id: str,
        employee_id: str,
        start: DateLike,
        end: DateLike,
    ) -> float:
        """Hours worked by one employee between two dates, inclusive."""
        first = to_date(start, "start")
        last = to_date(end, "end")
        return round(
            sum(
                r.hours_worked
                for r in self.employee_records(tenant_id, employee_id)
                if first <= r.date <= last
            ),
            2,
        )

    def add_record(
        self,
        tenant_id: str,
        employee_id: str,
        record_date: DateLike,
        check_in: str,
        check_out: str,
        actor: Actor,
    ) -> AttendanceRecord:
        day = to_date(record_date, "date")
        hours = hours_between(check_in, check_out)
        with self._store.transaction(tenant_id) as txn:
            employee = txn.require(
                Collection.EMPLOYEES,
                employee_id,
                lambda: EmployeeNotFoundError(tenant_id, employee_id),
            )
            record = AttendanceRecord(
                id=new_id("att"),
                tenant_id=tenant_id,
                employee_id=employee.id,
                employee_name=employee.name,
                date=day,
                check_in=check_in.strip(),
                check_out=check_out.strip(),
                hours_worked=hours,
            )
            txn.append(Collection.ATTENDANCE_RECORDS, record)

        logger.info(
            "attendance_recorded",
            extra={
                "tenant_id": tenant_id,
                "employee_id": employee_id,
                "date": day.isoformat(),
                "hours_worked": hours,
            },
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.ATTENDANCE_RECORDED,
            f"Recorded {hours:g}h for {employee.name} on {day.isoformat()}.",
        )
        return record
