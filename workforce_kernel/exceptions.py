"""
Typed Exception Hierarchy for the Workforce Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (an HTTP layer, a CLI, a UI facade) need to map failures to
user-visible outcomes such as "Employee not found" without parsing
message strings.  Every exception here therefore:

  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries its context as attributes (tenant_id, employee_id, ...)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    WorkforceKernelError (base)
    |
    +-- NotFoundError
    |   +-- TenantNotFoundError
    |   +-- EmployeeNotFoundError
    |   +-- LeaveRequestNotFoundError
    |   +-- LeaveBalanceRecordNotFoundError
    |   +-- PayrollRunNotFoundError
    |   +-- RoleNotFoundError
    |   +-- UserNotFoundError
    |   +-- DocumentNotFoundError
    |   +-- AssetNotFoundError
    |   +-- MaintenanceRecordNotFoundError
    |   +-- LifecycleTaskNotFoundError
    |   +-- JobOpeningNotFoundError
    |   +-- CandidateNotFoundError
    |
    +-- PreconditionFailedError
    |   +-- ComplianceSettingsMissingError
    |
    +-- InvalidStateError
    |   +-- TenantAlreadyExistsError
    |   +-- InvalidTransitionError
    |   +-- LeaveRequestAlreadyDecidedError
    |   +-- LeaveBalanceNotFoundError
    |   +-- LeaveTypeNotInLedgerError
    |   +-- LeaveBalanceExceededError
    |   +-- DuplicatePayrollRunError
    |   +-- CandidateNotHiredError
    |   +-- CandidateAlreadyConvertedError
    |
    +-- ValidationFailedError
    |   +-- InvalidDateRangeError
    |   +-- NegativeAmountError
    |   +-- NonFiniteAmountError
    |   +-- InvalidClockTimeError
    |   +-- InvalidPeriodError
    |   +-- InvalidSifFieldError
    |   +-- InvalidLeaveBalanceError
    |   +-- UserAlreadyExistsError
    |   +-- UnknownPermissionError
    |
    +-- PersistenceError
        +-- CorruptBlobError
        +-- UnsupportedBlobVersionError
        +-- BlobWriteLockedError

===============================================================================
PROPAGATION
===============================================================================

* Settlement calculator and WPS encoder are pure: they raise only
  ValidationFailedError / PreconditionFailedError subclasses.
* The record store raises NotFoundError subclasses for missing references.
* Everything surfaces to the caller unchanged.  The only deliberate
  downgrade is the text-generation collaborator, which returns a placeholder.
* PersistenceError never escapes ``PersistenceService.load``; a corrupt blob
  is quarantined and the engine starts empty.
"""


class WorkforceKernelError(Exception):
    """
    Base exception for all workforce kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "WORKFORCE_KERNEL_ERROR"


# Not-found exceptions


class NotFoundError(WorkforceKernelError):
    """Base exception for references with no matching record."""

    code: str = "NOT_FOUND"


class TenantNotFoundError(NotFoundError):
    """Tenant with given ID does not exist."""

    code: str = "TENANT_NOT_FOUND"

    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        super().__init__(f"Tenant not found: {tenant_id}")


class EmployeeNotFoundError(NotFoundError):
    """Employee with given ID does not exist in the tenant."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, tenant_id: str, employee_id: str):
        self.tenant_id = tenant_id
        self.employee_id = employee_id
        super().__init__(f"Employee not found: {employee_id}")


class LeaveRequestNotFoundError(NotFoundError):
    """Leave request with given ID does not exist in the tenant."""

    code: str = "LEAVE_REQUEST_NOT_FOUND"

    def __init__(self, tenant_id: str, request_id: str):
        self.tenant_id = tenant_id
        self.request_id = request_id
        super().__init__(f"Leave request not found: {request_id}")


class LeaveBalanceRecordNotFoundError(NotFoundError):
    """Leave balance record with given ID does not exist in the tenant."""

    code: str = "LEAVE_BALANCE_RECORD_NOT_FOUND"

    def __init__(self, tenant_id: str, balance_id: str):
        self.tenant_id = tenant_id
        self.balance_id = balance_id
        super().__init__(f"Leave balance not found: {balance_id}")


class PayrollRunNotFoundError(NotFoundError):
    """Payroll run with given ID does not exist in the tenant."""

    code: str = "PAYROLL_RUN_NOT_FOUND"

    def __init__(self, tenant_id: str, run_id: str):
        self.tenant_id = tenant_id
        self.run_id = run_id
        super().__init__(f"Payroll run not found: {run_id}")


class RoleNotFoundError(NotFoundError):
    """Role with given ID does not exist in the tenant."""

    code: str = "ROLE_NOT_FOUND"

    def __init__(self, tenant_id: str, role_id: str):
        self.tenant_id = tenant_id
        self.role_id = role_id
        super().__init__(f"Role not found: {role_id}")


class UserNotFoundError(NotFoundError):
    """User with given ID does not exist in the tenant."""

    code: str = "USER_NOT_FOUND"

    def __init__(self, tenant_id: str, user_id: str):
        self.tenant_id = tenant_id
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class DocumentNotFoundError(NotFoundError):
    """Employee document with given ID does not exist in the tenant."""

    code: str = "DOCUMENT_NOT_FOUND"

    def __init__(self, tenant_id: str, document_id: str):
        self.tenant_id = tenant_id
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}")


class AssetNotFoundError(NotFoundError):
    """Company asset with given ID does not exist in the tenant."""

    code: str = "ASSET_NOT_FOUND"

    def __init__(self, tenant_id: str, asset_id: str):
        self.tenant_id = tenant_id
        self.asset_id = asset_id
        super().__init__(f"Asset not found: {asset_id}")


class MaintenanceRecordNotFoundError(NotFoundError):
    """Maintenance record with given ID does not exist in the tenant."""

    code: str = "MAINTENANCE_RECORD_NOT_FOUND"

    def __init__(self, tenant_id: str, maintenance_id: str):
        self.tenant_id = tenant_id
        self.maintenance_id = maintenance_id
        super().__init__(f"Maintenance record not found: {maintenance_id}")


class LifecycleTaskNotFoundError(NotFoundError):
    """Onboarding or offboarding task with given ID is not on the employee."""

    code: str = "LIFECYCLE_TASK_NOT_FOUND"

    def __init__(self, employee_id: str, task_id: str):
        self.employee_id = employee_id
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found for employee {employee_id}")


class JobOpeningNotFoundError(NotFoundError):
    """Job opening with given ID does not exist in the tenant."""

    code: str = "JOB_OPENING_NOT_FOUND"

    def __init__(self, tenant_id: str, job_opening_id: str):
        self.tenant_id = tenant_id
        self.job_opening_id = job_opening_id
        super().__init__(f"Job opening not found: {job_opening_id}")


class CandidateNotFoundError(NotFoundError):
    """Candidate with given ID does not exist in the tenant."""

    code: str = "CANDIDATE_NOT_FOUND"

    def __init__(self, tenant_id: str, candidate_id: str):
        self.tenant_id = tenant_id
        self.candidate_id = candidate_id
        super().__init__(f"Candidate not found: {candidate_id}")


# Precondition exceptions


class PreconditionFailedError(WorkforceKernelError):
    """Base exception for operations attempted before required setup."""

    code: str = "PRECONDITION_FAILED"


class ComplianceSettingsMissingError(PreconditionFailedError):
    """
    Tenant has not configured WPS compliance settings.

    A tenant must configure establishment id and bank details before
    any payroll run or SIF generation.
    """

    code: str = "COMPLIANCE_SETTINGS_MISSING"

    def __init__(self, tenant_id: str, missing_field: str = "settings"):
        self.tenant_id = tenant_id
        self.missing_field = missing_field
        super().__init__(
            f"Company compliance settings not configured for tenant "
            f"{tenant_id} (missing: {missing_field})"
        )


# Invalid-state exceptions


class InvalidStateError(WorkforceKernelError):
    """Base exception for operations that conflict with current state."""

    code: str = "INVALID_STATE"


class TenantAlreadyExistsError(InvalidStateError):
    """A tenant with the given ID is already registered."""

    code: str = "TENANT_ALREADY_EXISTS"

    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        super().__init__(f"Tenant already exists: {tenant_id}")


class InvalidTransitionError(InvalidStateError):
    """No workflow transition exists for the action from the current state."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, workflow: str, current_state: str, action: str):
        self.workflow = workflow
        self.current_state = current_state
        self.action = action
        super().__init__(
            f"Workflow {workflow} has no '{action}' transition from "
            f"state '{current_state}'"
        )


class LeaveRequestAlreadyDecidedError(InvalidStateError):
    """Leave request is already Approved or Rejected (terminal)."""

    code: str = "LEAVE_REQUEST_ALREADY_DECIDED"

    def __init__(self, request_id: str, status: str):
        self.request_id = request_id
        self.status = status
        super().__init__(
            f"Leave request {request_id} is already {status}"
        )


class LeaveBalanceNotFoundError(InvalidStateError):
    """Employee has no leave ledger record to debit."""

    code: str = "LEAVE_BALANCE_NOT_FOUND"

    def __init__(self, tenant_id: str, employee_id: str):
        self.tenant_id = tenant_id
        self.employee_id = employee_id
        super().__init__(f"No leave balance record for employee {employee_id}")


class LeaveTypeNotInLedgerError(InvalidStateError):
    """Employee's ledger has no entry for the requested leave type."""

    code: str = "LEAVE_TYPE_NOT_IN_LEDGER"

    def __init__(self, employee_id: str, leave_type: str):
        self.employee_id = employee_id
        self.leave_type = leave_type
        super().__init__(
            f"Leave ledger for employee {employee_id} has no "
            f"'{leave_type}' entry"
        )


class LeaveBalanceExceededError(InvalidStateError):
    """Approving would push used days past allotted days."""

    code: str = "LEAVE_BALANCE_EXCEEDED"

    def __init__(
        self,
        employee_id: str,
        leave_type: str,
        total_days: float,
        used_days: float,
        requested_days: int,
    ):
        self.employee_id = employee_id
        self.leave_type = leave_type
        self.total_days = total_days
        self.used_days = used_days
        self.requested_days = requested_days
        super().__init__(
            f"{leave_type} leave for employee {employee_id}: "
            f"{used_days} used + {requested_days} requested exceeds "
            f"{total_days} allotted"
        )


class DuplicatePayrollRunError(InvalidStateError):
    """A completed run already exists for the period."""

    code: str = "DUPLICATE_PAYROLL_RUN"

    def __init__(self, tenant_id: str, month: str, year: int, existing_run_id: str):
        self.tenant_id = tenant_id
        self.month = month
        self.year = year
        self.existing_run_id = existing_run_id
        super().__init__(
            f"Payroll for {month} {year} already run ({existing_run_id})"
        )


class CandidateNotHiredError(InvalidStateError):
    """Only a candidate in the Hired stage can become an employee."""

    code: str = "CANDIDATE_NOT_HIRED"

    def __init__(self, candidate_id: str, status: str):
        self.candidate_id = candidate_id
        self.status = status
        super().__init__(
            f"Candidate {candidate_id} is {status}, not Hired"
        )


class CandidateAlreadyConvertedError(InvalidStateError):
    """Candidate already became an employee and is closed to changes."""

    code: str = "CANDIDATE_ALREADY_CONVERTED"

    def __init__(self, candidate_id: str, employee_id: str):
        self.candidate_id = candidate_id
        self.employee_id = employee_id
        super().__init__(
            f"Candidate {candidate_id} already converted to {employee_id}"
        )


# Validation exceptions


class ValidationFailedError(WorkforceKernelError):
    """Base exception for malformed input."""

    code: str = "VALIDATION_FAILED"


class InvalidDateRangeError(ValidationFailedError):
    """End date precedes start date."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start: str, end: str, field: str = "date_range"):
        self.start = start
        self.end = end
        self.field = field
        super().__init__(f"Invalid {field}: {end} is before {start}")


class NegativeAmountError(ValidationFailedError):
    """A monetary amount that must be non-negative is negative."""

    code: str = "NEGATIVE_AMOUNT"

    def __init__(self, field: str, amount: float):
        self.field = field
        self.amount = amount
        super().__init__(f"{field} cannot be negative: {amount}")


class NonFiniteAmountError(ValidationFailedError):
    """A monetary amount is NaN or infinite."""

    code: str = "NON_FINITE_AMOUNT"

    def __init__(self, field: str, amount: float):
        self.field = field
        self.amount = amount
        super().__init__(f"{field} must be a finite number: {amount}")


class InvalidClockTimeError(ValidationFailedError):
    """A check-in or check-out value is not an HH:MM clock time."""

    code: str = "INVALID_CLOCK_TIME"

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"{field} must be HH:MM: {value!r}")


class InvalidPeriodError(ValidationFailedError):
    """Payroll period (month name / year) cannot be interpreted."""

    code: str = "INVALID_PERIOD"

    def __init__(self, month: str, year: int):
        self.month = month
        self.year = year
        super().__init__(f"Invalid payroll period: {month} {year}")


class InvalidSifFieldError(ValidationFailedError):
    """A SIF field value would break the comma/newline record structure."""

    code: str = "INVALID_SIF_FIELD"

    def __init__(self, field: str, value: str, employee_id: str | None = None):
        self.field = field
        self.value = value
        self.employee_id = employee_id
        super().__init__(
            f"SIF field '{field}' contains a separator character: {value!r}"
        )


class InvalidLeaveBalanceError(ValidationFailedError):
    """Leave balance counters are inconsistent."""

    code: str = "INVALID_LEAVE_BALANCE"

    def __init__(self, leave_type: str, reason: str):
        self.leave_type = leave_type
        self.reason = reason
        super().__init__(f"Invalid {leave_type} leave balance: {reason}")


class UserAlreadyExistsError(ValidationFailedError):
    """An account with the username already exists."""

    code: str = "USER_ALREADY_EXISTS"

    def __init__(self, username: str):
        self.username = username
        super().__init__("An account with this email already exists.")


class UnknownPermissionError(ValidationFailedError):
    """A role names a permission that is not in the catalog."""

    code: str = "UNKNOWN_PERMISSION"

    def __init__(self, permission_ids: tuple[str, ...]):
        self.permission_ids = permission_ids
        super().__init__(f"Unknown permission(s): {', '.join(permission_ids)}")


# Persistence exceptions


class PersistenceError(WorkforceKernelError):
    """Base exception for persisted-blob errors."""

    code: str = "PERSISTENCE_ERROR"


class CorruptBlobError(PersistenceError):
    """Persisted blob cannot be decoded."""

    code: str = "CORRUPT_BLOB"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Persisted store blob is corrupt: {reason}")


class UnsupportedBlobVersionError(PersistenceError):
    """Persisted blob was written by a newer schema version."""

    code: str = "UNSUPPORTED_BLOB_VERSION"

    def __init__(self, found_version: int, supported_version: int):
        self.found_version = found_version
        self.supported_version = supported_version
        super().__init__(
            f"Blob schema version {found_version} is newer than supported "
            f"version {supported_version}"
        )


class BlobWriteLockedError(PersistenceError):
    """Saving is refused because the stored blob could not be preserved."""

    code: str = "BLOB_WRITE_LOCKED"

    def __init__(self, blob_key: str, reason: str):
        self.blob_key = blob_key
        self.reason = reason
        super().__init__(f"Writes to blob {blob_key!r} are locked: {reason}")
