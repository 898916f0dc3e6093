"""
Workforce Records (``workforce_kernel.domain.records``).

Responsibility
--------------
Frozen dataclass value objects for every record kind held by the tenant
record store: tenants, users and roles, employees, leave requests and
balances, payroll runs and payslips, documents, assets, attendance,
recruitment, and audit logs.

Architecture position
---------------------
**Kernel domain layer** -- pure data definitions with ZERO I/O.  Consumed
by the record store, the persistence codec and every module service.

Invariants enforced
-------------------
* All records are ``frozen=True``; sequence-valued fields are tuples, so
  a snapshot handed to a caller can never mutate store state by reference.
* Compensation amounts are finite (``NonFiniteAmountError``) and
  non-negative (``NegativeAmountError``).
* Date ranges are ordered (``InvalidDateRangeError``).
* Leave counters are non-negative (``InvalidLeaveBalanceError``).
* Attendance hours are finite and non-negative.

Failure modes
-------------
* Construction with invalid values raises a ``ValidationFailedError``
  subclass.  The codec relies on this to reject corrupt blobs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from functools import total_ordering
from uuid import uuid4

from workforce_kernel.exceptions import (
    InvalidDateRangeError,
    InvalidLeaveBalanceError,
    NegativeAmountError,
    NonFiniteAmountError,
)


def new_id(prefix: str) -> str:
    """Generate a record id such as ``emp-3f9c0a1b2d4e``."""
    return f"{prefix}-{uuid4().hex[:12]}"


def _require_non_negative(**amounts: float) -> None:
    for name, amount in amounts.items():
        if not math.isfinite(amount):
            raise NonFiniteAmountError(name, amount)
        if amount < 0:
            raise NegativeAmountError(name, amount)


def _require_ordered(start: date, end: date, field_name: str) -> None:
    if end < start:
        raise InvalidDateRangeError(start.isoformat(), end.isoformat(), field_name)


class Collection(str, Enum):
    """Tenant-partitioned collections held by the record store."""
    USERS = "users"
    ROLES = "roles"
    COMPANY_SETTINGS = "company_settings"
    EMPLOYEES = "employees"
    LEAVE_REQUESTS = "leave_requests"
    LEAVE_BALANCES = "leave_balances"
    PAYROLL_RUNS = "payroll_runs"
    PAYSLIPS = "payslips"
    DOCUMENTS = "documents"
    ASSETS = "assets"
    ASSET_MAINTENANCES = "asset_maintenances"
    ATTENDANCE_RECORDS = "attendance_records"
    JOB_OPENINGS = "job_openings"
    CANDIDATES = "candidates"
    AUDIT_LOGS = "audit_logs"


@total_ordering
class SubscriptionTier(Enum):
    """Billing tier.  Ordered: FREE < PREMIUM < ENTERPRISE."""
    FREE = "Free"
    PREMIUM = "Premium"
    ENTERPRISE = "Enterprise"

    @property
    def rank(self) -> int:
        return list(SubscriptionTier).index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SubscriptionTier):
            return NotImplemented
        return self.rank < other.rank


class EmployeeStatus(Enum):
    ACTIVE = "Active"
    OFFBOARDED = "Offboarded"


class Department(Enum):
    ENGINEERING = "Engineering"
    HR = "HR"
    MARKETING = "Marketing"
    SALES = "Sales"
    FINANCE = "Finance"


class LeaveType(Enum):
    ANNUAL = "Annual"
    SICK = "Sick"
    UNPAID = "Unpaid"
    MATERNITY = "Maternity"


class LeaveStatus(Enum):
    """Leave request states.  APPROVED and REJECTED are terminal."""
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class PayrollRunStatus(Enum):
    """PENDING exists only while a run is under construction."""
    PENDING = "Pending"
    COMPLETED = "Completed"


class TaskOwner(Enum):
    HR = "HR"
    MANAGER = "Manager"
    EMPLOYEE = "Employee"


class DocumentType(Enum):
    QID = "QID"
    PASSPORT = "Passport"
    VISA = "Visa"
    LABOR_CONTRACT = "Labor Contract"
    OTHER = "Other"


class AssetCategory(Enum):
    IT_EQUIPMENT = "IT Equipment"
    FURNITURE = "Furniture"
    VEHICLE = "Vehicle"
    OTHER = "Other"


class AssetStatus(Enum):
    AVAILABLE = "Available"
    ASSIGNED = "Assigned"
    IN_REPAIR = "In Repair"
    RETIRED = "Retired"


class MaintenanceType(Enum):
    REPAIR = "Repair"
    UPGRADE = "Upgrade"
    CHECK_UP = "Check-up"


class MaintenanceStatus(Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class JobStatus(Enum):
    OPEN = "Open"
    CLOSED = "Closed"


class CandidateStatus(Enum):
    """Pipeline stages.  Any stage may move to any other until conversion."""
    APPLIED = "Applied"
    SCREENING = "Screening"
    INTERVIEW = "Interview"
    OFFER = "Offer"
    HIRED = "Hired"
    REJECTED = "Rejected"


# ---------------------------------------------------------------------------
# Tenancy, identity, access
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Actor:
    """Who performed a mutation (recorded on audit entries)."""
    id: str
    name: str


@dataclass(frozen=True)
class Tenant:
    """An isolated customer organization."""
    id: str
    name: str
    tier: SubscriptionTier = SubscriptionTier.FREE
    created_at: datetime | None = None


@dataclass(frozen=True)
class CompanySettings:
    """WPS compliance settings.  A tenant holds at most one."""
    id: str
    tenant_id: str
    company_name: str
    establishment_id: str
    bank_name: str
    corporate_account_number: str


@dataclass(frozen=True)
class Permission:
    id: str  # e.g. "employees:create"
    name: str
    group: str


@dataclass(frozen=True)
class Role:
    id: str
    name: str
    permissions: tuple[str, ...] = ()


@dataclass(frozen=True)
class User:
    id: str
    tenant_id: str
    username: str  # email
    name: str
    role_id: str
    employee_id: str | None = None


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VisaDetails:
    """Sponsorship / residence visa metadata."""
    sponsor_id: str
    visa_number: str
    expiry_date: date | None = None


@dataclass(frozen=True)
class ContractDetails:
    start_date: date
    end_date: date
    job_title: str
    salary: float
    benefits: tuple[str, ...] = ()

    def __post_init__(self):
        _require_ordered(self.start_date, self.end_date, "contract_dates")
        _require_non_negative(salary=self.salary)


@dataclass(frozen=True)
class OnboardingTask:
    id: str
    description: str
    completed: bool
    due_date: date


@dataclass(frozen=True)
class OffboardingTask:
    id: str
    description: str
    completed: bool
    responsible: TaskOwner


@dataclass(frozen=True)
class Employee:
    """An employee and their monthly compensation row."""
    id: str
    tenant_id: str
    name: str
    qid: str
    position: str
    department: Department
    basic_salary: float
    allowances: float
    deductions: float
    bank_name: str
    iban: str
    join_date: date
    manager_id: str | None = None  # back-reference only
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    name_ar: str | None = None
    visa: VisaDetails | None = None
    contract: ContractDetails | None = None
    onboarding_tasks: tuple[OnboardingTask, ...] = ()
    offboarding_tasks: tuple[OffboardingTask, ...] = ()

    def __post_init__(self):
        _require_non_negative(
            basic_salary=self.basic_salary,
            allowances=self.allowances,
            deductions=self.deductions,
        )

    @property
    def net_salary(self) -> float:
        return self.basic_salary + self.allowances - self.deductions

    @property
    def is_active(self) -> bool:
        return self.status is EmployeeStatus.ACTIVE


# ---------------------------------------------------------------------------
# Leave
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LeaveBalanceDetail:
    leave_type: LeaveType
    total_days: float
    used_days: float

    def __post_init__(self):
        if not (math.isfinite(self.total_days) and math.isfinite(self.used_days)):
            raise InvalidLeaveBalanceError(self.leave_type.value, "counters must be finite")
        if self.total_days < 0:
            raise InvalidLeaveBalanceError(self.leave_type.value, "total_days is negative")
        if self.used_days < 0:
            raise InvalidLeaveBalanceError(self.leave_type.value, "used_days is negative")

    @property
    def remaining_days(self) -> float:
        return max(0.0, self.total_days - self.used_days)


@dataclass(frozen=True)
class LeaveBalance:
    """One ledger record per employee."""
    id: str
    tenant_id: str
    employee_id: str
    employee_name: str
    balances: tuple[LeaveBalanceDetail, ...] = ()

    def detail(self, leave_type: LeaveType) -> LeaveBalanceDetail | None:
        for entry in self.balances:
            if entry.leave_type is leave_type:
                return entry
        return None


@dataclass(frozen=True)
class LeaveRequest:
    id: str
    tenant_id: str
    employee_id: str
    employee_name: str
    start_date: date
    end_date: date
    leave_type: LeaveType
    reason: str
    status: LeaveStatus = LeaveStatus.PENDING

    def __post_init__(self):
        _require_ordered(self.start_date, self.end_date, "leave_dates")


# ---------------------------------------------------------------------------
# Payroll
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PayrollRun:
    """A completed payroll cycle.  Immutable history; never updated."""
    id: str
    tenant_id: str
    month: str
    year: int
    run_date: datetime
    total_amount: float
    employee_count: int
    status: PayrollRunStatus
    wps_file_content: str
    employee_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Payslip:
    id: str
    tenant_id: str
    employee_id: str
    payroll_run_id: str
    period: str  # e.g. "June 2024"
    gross_salary: float
    net_salary: float
    created_at: datetime


# ---------------------------------------------------------------------------
# Documents and assets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EmployeeDocument:
    id: str
    tenant_id: str
    employee_id: str
    employee_name: str
    document_type: DocumentType
    issue_date: date
    expiry_date: date
    storage_key: str
    version: int = 1

    def __post_init__(self):
        _require_ordered(self.issue_date, self.expiry_date, "document_dates")


@dataclass(frozen=True)
class CompanyAsset:
    id: str
    tenant_id: str
    asset_tag: str
    name: str
    category: AssetCategory
    serial_number: str
    purchase_date: date
    purchase_cost: float
    location: str
    status: AssetStatus = AssetStatus.AVAILABLE
    residual_value: float = 0.0
    useful_life_months: int = 0
    vendor: str = ""
    warranty_end_date: date | None = None
    assigned_to_employee_id: str | None = None
    assignment_date: date | None = None

    def __post_init__(self):
        _require_non_negative(
            purchase_cost=self.purchase_cost,
            residual_value=self.residual_value,
        )


@dataclass(frozen=True)
class AssetMaintenance:
    id: str
    tenant_id: str
    asset_id: str
    asset_name: str
    maintenance_type: MaintenanceType
    description: str
    cost: float
    date: date
    status: MaintenanceStatus = MaintenanceStatus.OPEN

    def __post_init__(self):
        _require_non_negative(cost=self.cost)


# ---------------------------------------------------------------------------
# Attendance and recruitment
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AttendanceRecord:
    """One working day.  Clock times are ``HH:MM`` strings in tenant local time."""
    id: str
    tenant_id: str
    employee_id: str
    employee_name: str
    date: date
    check_in: str
    check_out: str
    hours_worked: float

    def __post_init__(self):
        _require_non_negative(hours_worked=self.hours_worked)


@dataclass(frozen=True)
class JobOpening:
    id: str
    tenant_id: str
    title: str
    department: Department
    location: str
    description: str
    date_posted: date
    status: JobStatus = JobStatus.OPEN


@dataclass(frozen=True)
class Candidate:
    """An applicant.  ``job_title`` is copied from the opening at apply time.

    ``employee_id`` is set once, when a hired candidate becomes an employee.
    """
    id: str
    tenant_id: str
    name: str
    email: str
    phone: str
    job_opening_id: str
    job_title: str
    applied_date: date
    status: CandidateStatus = CandidateStatus.APPLIED
    resume_url: str = ""
    employee_id: str | None = None


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AuditLog:
    """One append-only audit entry.  Never mutated or deleted."""
    id: str
    tenant_id: str
    actor_id: str
    actor_name: str
    action: str
    details: str
    timestamp: datetime


# ---------------------------------------------------------------------------
# Codec registries
# ---------------------------------------------------------------------------

RECORD_TYPES: dict[str, type] = {
    cls.__name__: cls
    for cls in (
        Actor,
        Tenant,
        CompanySettings,
        Permission,
        Role,
        User,
        VisaDetails,
        ContractDetails,
        OnboardingTask,
        OffboardingTask,
        Employee,
        LeaveBalanceDetail,
        LeaveBalance,
        LeaveRequest,
        PayrollRun,
        Payslip,
        EmployeeDocument,
        CompanyAsset,
        AssetMaintenance,
        AttendanceRecord,
        JobOpening,
        Candidate,
        AuditLog,
    )
}

ENUM_TYPES: dict[str, type[Enum]] = {
    cls.__name__: cls
    for cls in (
        SubscriptionTier,
        EmployeeStatus,
        Department,
        LeaveType,
        LeaveStatus,
        PayrollRunStatus,
        TaskOwner,
        DocumentType,
        AssetCategory,
        AssetStatus,
        MaintenanceType,
        MaintenanceStatus,
        JobStatus,
        CandidateStatus,
    )
}
