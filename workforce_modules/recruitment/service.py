"""
Recruitment Module Service (``workforce_modules.recruitment.service``).

Responsibility
--------------
Job openings, the candidate pipeline, and turning a hired candidate into
an employee record.

Architecture position
---------------------
**Modules layer** -- service facade over the kernel record store.  Hiring
delegates to ``EmployeeService.add_employee`` so a converted candidate
gets the same checklists and leave ledger as any other new hire.

Invariants enforced
-------------------
* A candidate always references an existing job opening.  ``job_title``
  is copied from the opening when the candidate applies.
* Openings are listed newest first.  Candidates keep application order.
* Conversion happens once per candidate, only from ``Hired``.  After
  conversion the candidate's stage is frozen.

Failure modes
-------------
* ``JobOpeningNotFoundError`` -- candidate for an unknown opening.
* ``CandidateNotFoundError`` -- unknown candidate id.
* ``CandidateNotHiredError`` -- conversion before the Hired stage.
* ``CandidateAlreadyConvertedError`` -- second conversion, or a stage
  change after conversion.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.domain.dates import DateLike, to_date
from workforce_kernel.domain.records import (
    Actor,
    Candidate,
    CandidateStatus,
    Collection,
    Department,
    Employee,
    JobOpening,
    JobStatus,
    new_id,
)
from workforce_kernel.exceptions import (
    CandidateAlreadyConvertedError,
    CandidateNotFoundError,
    CandidateNotHiredError,
    JobOpeningNotFoundError,
)
from workforce_kernel.logging_config import get_logger
from workforce_kernel.services.audit_trail import AuditAction, AuditTrail
from workforce_kernel.services.tenant_store import TenantRecordStore
from workforce_modules.employees.service import EmployeeService

logger = get_logger("modules.recruitment.service")


class RecruitmentService:
    """Job openings and candidates."""

    def __init__(
        self,
        store: TenantRecordStore,
        audit: AuditTrail,
        employees: EmployeeService,
        clock: Clock | None = None,
    ):
        self._store = store
        self._audit = audit
        self._employees = employees
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Job openings
    # ------------------------------------------------------------------

    def list_job_openings(self, tenant_id: str) -> tuple[JobOpening, ...]:
        return self._store.get(tenant_id, Collection.JOB_OPENINGS)

    def open_job_openings(self, tenant_id: str) -> tuple[JobOpening, ...]:
        return tuple(j for j in self.list_job_openings(tenant_id) if j.status is JobStatus.OPEN)

    def get_job_opening(self, tenant_id: str, job_opening_id: str) -> JobOpening:
        return self._store.require(
            tenant_id,
            Collection.JOB_OPENINGS,
            job_opening_id,
            lambda: JobOpeningNotFoundError(tenant_id, job_opening_id),
        )

    def add_job_opening(
        self,
        tenant_id: str,
        actor: Actor,
        *,
        title: str,
        department: Department,
        location: str,
        description: str = "",
        status: JobStatus = JobStatus.OPEN,
        date_posted: DateLike | None = None,
    ) -> JobOpening:
        posted = to_date(date_posted, "date_posted") if date_posted else self._clock.today()
        job = JobOpening(
            id=new_id("job"),
            tenant_id=tenant_id,
            title=title,
            department=department,
            location=location,
            description=description,
            date_posted=posted,
            status=status,
        )
        with self._store.transaction(tenant_id) as txn:
            txn.prepend(Collection.JOB_OPENINGS, job)

        logger.info(
            "job_opening_posted",
            extra={
                "tenant_id": tenant_id,
                "job_opening_id": job.id,
                "department": department.value,
            },
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.JOB_OPENING_POSTED,
            f"Posted {title} ({department.value}, {location}).",
        )
        return job

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    def list_candidates(self, tenant_id: str) -> tuple[Candidate, ...]:
        return self._store.get(tenant_id, Collection.CANDIDATES)

    def candidates_for_job(self, tenant_id: str, job_opening_id: str) -> tuple[Candidate, ...]:
        return tuple(
            c for c in self.list_candidates(tenant_id) if c.job_opening_id == job_opening_id
        )

    def get_candidate(self, tenant_id: str, candidate_id: str) -> Candidate:
        return self._store.require(
            tenant_id,
            Collection.CANDIDATES,
            candidate_id,
            lambda: CandidateNotFoundError(tenant_id, candidate_id),
        )

    def add_candidate(
        self,
        tenant_id: str,
        actor: Actor,
        *,
        name: str,
        email: str,
        phone: str,
        job_opening_id: str,
        resume_url: str = "",
        applied_date: DateLike | None = None,
    ) -> Candidate:
        applied = to_date(applied_date, "applied_date") if applied_date else self._clock.today()
        with self._store.transaction(tenant_id) as txn:
            job = txn.require(
                Collection.JOB_OPENINGS,
                job_opening_id,
                lambda: JobOpeningNotFoundError(tenant_id, job_opening_id),
            )
            candidate = Candidate(
                id=new_id("cand"),
                tenant_id=tenant_id,
                name=name,
                email=email,
                phone=phone,
                job_opening_id=job.id,
                job_title=job.title,
                applied_date=applied,
                resume_url=resume_url,
            )
            txn.append(Collection.CANDIDATES, candidate)

        logger.info(
            "candidate_added",
            extra={
                "tenant_id": tenant_id,
                "candidate_id": candidate.id,
                "job_opening_id": job.id,
            },
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.CANDIDATE_ADDED,
            f"{name} applied for {job.title}.",
        )
        return candidate

    def update_candidate_status(
        self,
        tenant_id: str,
        candidate_id: str,
        status: CandidateStatus,
        actor: Actor,
    ) -> Candidate:
        """Move a candidate to any pipeline stage."""
        with self._store.transaction(tenant_id) as txn:
            candidate = txn.require(
                Collection.CANDIDATES,
                candidate_id,
                lambda: CandidateNotFoundError(tenant_id, candidate_id),
            )
            if candidate.employee_id is not None:
                raise CandidateAlreadyConvertedError(candidate_id, candidate.employee_id)
            previous = candidate.status
            updated = replace(candidate, status=status)
            txn.upsert(Collection.CANDIDATES, updated)

        logger.info(
            "candidate_status_changed",
            extra={
                "tenant_id": tenant_id,
                "candidate_id": candidate_id,
                "from_status": previous.value,
                "to_status": status.value,
            },
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.CANDIDATE_STATUS_CHANGED,
            f"{candidate.name}: {previous.value} -> {status.value}.",
        )
        return updated

    def convert_to_employee(
        self,
        tenant_id: str,
        candidate_id: str,
        actor: Actor,
        *,
        qid: str,
        basic_salary: float,
        allowances: float,
        deductions: float,
        bank_name: str,
        iban: str,
        join_date: DateLike,
        position: str | None = None,
        department: Department | None = None,
        **employee_fields: Any,
    ) -> Employee:
        """
        Create the employee record for a hired candidate.

        Name comes from the candidate, position from the job title, and
        department from the opening unless overridden.  The tenant stays
        locked for the whole conversion, so a candidate converts once.
        """
        with self._store.transaction(tenant_id) as txn:
            candidate = txn.require(
                Collection.CANDIDATES,
                candidate_id,
                lambda: CandidateNotFoundError(tenant_id, candidate_id),
            )
            if candidate.employee_id is not None:
                raise CandidateAlreadyConvertedError(candidate_id, candidate.employee_id)
            if candidate.status is not CandidateStatus.HIRED:
                raise CandidateNotHiredError(candidate_id, candidate.status.value)
            if department is None:
                job = txn.require(
                    Collection.JOB_OPENINGS,
                    candidate.job_opening_id,
                    lambda: JobOpeningNotFoundError(tenant_id, candidate.job_opening_id),
                )
                department = job.department

            employee = self._employees.add_employee(
                tenant_id,
                actor,
                name=candidate.name,
                qid=qid,
                position=position or candidate.job_title,
                department=department,
                basic_salary=basic_salary,
                allowances=allowances,
                deductions=deductions,
                bank_name=bank_name,
                iban=iban,
                join_date=join_date,
                **employee_fields,
            )
            txn.upsert(Collection.CANDIDATES, replace(candidate, employee_id=employee.id))

        logger.info(
            "candidate_converted",
            extra={
                "tenant_id": tenant_id,
                "candidate_id": candidate_id,
                "employee_id": employee.id,
            },
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.CANDIDATE_CONVERTED,
            f"{candidate.name} joined as {employee.position}.",
        )
        return employee
