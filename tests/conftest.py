"""
Pytest fixtures for the workforce engine test suite.

Provides:
- Structured logging configured once per session, plus a log capture fixture
- A deterministic clock pinned to 2024-06-15 09:00 UTC
- An in-memory SQLite database per test
- Kernel services (store, audit trail) and every module service
- A registered tenant with compliance settings, and a demo tenant

Every fixture builds fresh objects: no test shares state with another.
"""

import json
import logging
from datetime import date, datetime, timezone
from io import StringIO

import pytest

from workforce_kernel.db.engine import Database
from workforce_kernel.domain.clock import DeterministicClock
from workforce_kernel.domain.records import Actor, Department
from workforce_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from workforce_kernel.services.audit_trail import AuditTrail
from workforce_kernel.services.tenant_store import TenantRecordStore
from workforce_modules.assets.service import AssetService
from workforce_modules.attendance.service import AttendanceService
from workforce_modules.documents.service import DocumentService
from workforce_modules.employees.service import EmployeeService
from workforce_modules.leave.service import LeaveService
from workforce_modules.payroll.service import PayrollService
from workforce_modules.recruitment.service import RecruitmentService
from workforce_modules.tenancy.service import TenancyService

FIXED_NOW = datetime(2024, 6, 15, 9, 0, 0, tzinfo=timezone.utc)
TODAY = date(2024, 6, 15)

HR_ACTOR = Actor(id="user-hr", name="HR Tester")


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture workforce_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, payroll):
            payroll.run(...)
            logs = captured_logs()
            assert any(r["message"] == "payroll_run_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("workforce_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def clock():
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_tables()
    yield db
    db.dispose()


@pytest.fixture
def store():
    return TenantRecordStore()


@pytest.fixture
def audit(store, clock):
    return AuditTrail(store, clock)


# =============================================================================
# Module services
# =============================================================================


@pytest.fixture
def actor():
    return HR_ACTOR


@pytest.fixture
def leave(store, audit, clock):
    return LeaveService(store, audit, clock)


@pytest.fixture
def employees(store, audit, leave):
    return EmployeeService(store, audit, leave)


@pytest.fixture
def payroll(store, audit, clock):
    return PayrollService(store, audit, clock)


@pytest.fixture
def tenancy(store, audit, clock):
    return TenancyService(store, audit, clock)


@pytest.fixture
def documents(store, audit, clock):
    return DocumentService(store, audit, clock)


@pytest.fixture
def assets(store, audit, clock):
    return AssetService(store, audit, clock)


@pytest.fixture
def attendance(store, audit):
    return AttendanceService(store, audit)


@pytest.fixture
def recruitment(store, audit, employees, clock):
    return RecruitmentService(store, audit, employees, clock)


# =============================================================================
# Tenants and employees
# =============================================================================


@pytest.fixture
def tenant_id(tenancy):
    """A freshly registered tenant with default settings and no employees."""
    registration = tenancy.register_company(
        "Al Bidda Logistics", "Khalid Al-Emadi", "owner@albidda.qa", tenant_id="tenant-a"
    )
    return registration.tenant.id


@pytest.fixture
def demo_tenant_id(tenancy):
    """A tenant seeded with the demo workforce."""
    registration = tenancy.register_company(
        "Noor Trading W.L.L.",
        "Mariam Al-Sulaiti",
        "owner@noor.app",
        tenant_id="tenant-demo",
        with_demo_data=True,
        hr_email="hr@noor.app",
    )
    return registration.tenant.id


@pytest.fixture
def hire(employees, tenant_id):
    """
    Factory: add an employee to ``tenant_id``.

    Usage::

        emp = hire(name="Sara", basic_salary=12000)
    """

    def _hire(**overrides):
        fields = dict(
            name="Omar Al-Naimi",
            qid="28811223344",
            position="Accountant",
            department=Department.FINANCE,
            basic_salary=12000,
            allowances=2500,
            deductions=300,
            bank_name="QNB",
            iban="QA58 QNBA 0000 0000 0000 1234 5678 9",
            join_date=date(2020, 1, 1),
        )
        fields.update(overrides)
        return employees.add_employee(tenant_id, HR_ACTOR, **fields)

    return _hire
