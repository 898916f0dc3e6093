"""
Demo tenant dataset (``workforce_modules.tenancy.demo_data``).

Responsibility
--------------
Builds the fixed sample workforce a demo tenant starts with: five
employees with contracts and lifecycle tasks, an HR user, documents
near or past expiry, leave requests and balances, assets with one
maintenance record, four completed payroll runs with payslips, a month
of attendance, and one job opening with two candidates.

Architecture position
---------------------
**Modules layer** -- pure builder.  Returns collections keyed by
``Collection``; the tenancy service hands them to
``TenantRecordStore.create_tenant`` together with the roles, owner and
settings.  Dates that matter for alerts are relative to ``today``.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from workforce_kernel.domain.dates import days_in_month, month_name
from workforce_kernel.domain.money import net_amount
from workforce_kernel.domain.records import (
    AssetCategory,
    AssetMaintenance,
    AssetStatus,
    AttendanceRecord,
    Candidate,
    CandidateStatus,
    Collection,
    CompanyAsset,
    CompanySettings,
    ContractDetails,
    Department,
    DocumentType,
    Employee,
    EmployeeDocument,
    JobOpening,
    LeaveBalance,
    LeaveBalanceDetail,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    MaintenanceStatus,
    MaintenanceType,
    Payslip,
    PayrollRun,
    PayrollRunStatus,
    User,
)
from workforce_modules.attendance.helpers import hours_between
from workforce_modules.employees.tasks import offboarding_tasks, onboarding_tasks
from workforce_modules.payroll.wps import generate_sif_content, total_net_amount
from workforce_modules.tenancy.permissions import hr_role_id

CONTRACT_BENEFITS = ("Health Insurance", "Annual Air Ticket")
DEMO_HR_USER_NAME = "Abdullah Al-Sada"
DEMO_PAYROLL_MONTHS = 4

# (id, name, qid, position, department, basic, allowances, deductions, bank, iban, joined)
_EMPLOYEES = (
    ("emp-1", "Fatima Al-Marri", "29012345678", "Senior Frontend Engineer",
     Department.ENGINEERING, 18000, 4000, 500, "QIB",
     "QA50QISB000000000000123456789", date(2022, 3, 15)),
    ("emp-2", "Hassan Al-Haydos", "29109876543", "HR Specialist",
     Department.HR, 14000, 3000, 300, "QNB",
     "QA58QNBA000000000000987654321", date(2023, 1, 20)),
    ("emp-3", "Aisha Al-Kuwari", "28801112233", "Engineering Manager",
     Department.ENGINEERING, 25000, 6000, 1000, "Dukhan Bank",
     "QA21DUKH000000000000111222333", date(2021, 8, 1)),
    ("emp-4", "Yousef Al-Malki", "29204455667", "Marketing Lead",
     Department.MARKETING, 16000, 3500, 400, "Commercial Bank",
     "QA85CBQA000000000000445566778", date(2022, 11, 5)),
    ("emp-5", "Noora Al-Thani", "29307788990", "Junior Accountant",
     Department.FINANCE, 10000, 2000, 200, "QIB",
     "QA60QISB000000000000778899001", date(2023, 6, 10)),
)

# Onboarding steps complete for every demo employee; step 2 alternates.
_ALWAYS_DONE = frozenset({1, 3})

# Employees with clock records, and the weekdays they never work (Fri, Sat).
_ATTENDANCE_EMPLOYEES = ("emp-1", "emp-3", "emp-4")
_WEEKEND = frozenset({4, 5})

# Annual and Sick days already taken.
_USED_DAYS = {"emp-1": (10, 0), "emp-4": (5, 2)}


def _add_years(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        # 29 February
        return day.replace(year=day.year + years, day=28)


def demo_employees(tenant_id: str, owner_id: str) -> tuple[Employee, ...]:
    employees = []
    for index, row in enumerate(_EMPLOYEES):
        (emp_id, name, qid, position, department, basic, allowances,
         deductions, bank, iban, joined) = row
        employees.append(
            Employee(
                id=emp_id,
                tenant_id=tenant_id,
                name=name,
                qid=qid,
                position=position,
                department=department,
                basic_salary=float(basic),
                allowances=float(allowances),
                deductions=float(deductions),
                bank_name=bank,
                iban=iban,
                join_date=joined,
                manager_id="emp-3" if emp_id == "emp-1" else owner_id,
                contract=ContractDetails(
                    start_date=joined,
                    end_date=_add_years(joined, 2),
                    job_title=position,
                    salary=float(basic + allowances),
                    benefits=CONTRACT_BENEFITS,
                ),
                onboarding_tasks=onboarding_tasks(
                    emp_id, joined, _ALWAYS_DONE | ({2} if index % 2 == 0 else set())
                ),
                offboarding_tasks=offboarding_tasks(emp_id),
            )
        )
    return tuple(employees)


def _leave_balances(tenant_id: str, employees: tuple[Employee, ...]) -> tuple[LeaveBalance, ...]:
    balances = []
    for employee in employees:
        annual_used, sick_used = _USED_DAYS.get(employee.id, (0, 0))
        balances.append(
            LeaveBalance(
                id=f"bal-{employee.id}",
                tenant_id=tenant_id,
                employee_id=employee.id,
                employee_name=employee.name,
                balances=(
                    LeaveBalanceDetail(LeaveType.ANNUAL, 21, annual_used),
                    LeaveBalanceDetail(LeaveType.SICK, 14, sick_used),
                    LeaveBalanceDetail(LeaveType.UNPAID, 0, 0),
                    LeaveBalanceDetail(LeaveType.MATERNITY, 50, 0),
                ),
            )
        )
    return tuple(balances)


def _leave_requests(tenant_id: str, today: date) -> tuple[LeaveRequest, ...]:
    return (
        LeaveRequest(
            id="leave-1", tenant_id=tenant_id, employee_id="emp-1",
            employee_name="Fatima Al-Marri", start_date=date(2024, 8, 1),
            end_date=date(2024, 8, 10), leave_type=LeaveType.ANNUAL,
            reason="Vacation", status=LeaveStatus.APPROVED,
        ),
        LeaveRequest(
            id="leave-2", tenant_id=tenant_id, employee_id="emp-5",
            employee_name="Noora Al-Thani", start_date=today + timedelta(days=40),
            end_date=today + timedelta(days=42), leave_type=LeaveType.ANNUAL,
            reason="Personal", status=LeaveStatus.PENDING,
        ),
        LeaveRequest(
            id="leave-3", tenant_id=tenant_id, employee_id="emp-4",
            employee_name="Yousef Al-Malki", start_date=date(2024, 6, 10),
            end_date=date(2024, 6, 11), leave_type=LeaveType.SICK,
            reason="Flu", status=LeaveStatus.APPROVED,
        ),
    )


def _documents(tenant_id: str, today: date) -> tuple[EmployeeDocument, ...]:
    return (
        EmployeeDocument(
            id="doc-1", tenant_id=tenant_id, employee_id="emp-1",
            employee_name="Fatima Al-Marri", document_type=DocumentType.QID,
            issue_date=date(2022, 4, 1), expiry_date=today + timedelta(days=25),
            storage_key="key1", version=2,
        ),
        EmployeeDocument(
            id="doc-2", tenant_id=tenant_id, employee_id="emp-2",
            employee_name="Hassan Al-Haydos", document_type=DocumentType.PASSPORT,
            issue_date=date(2021, 10, 10), expiry_date=date(2026, 10, 9),
            storage_key="key2",
        ),
        EmployeeDocument(
            id="doc-3", tenant_id=tenant_id, employee_id="emp-4",
            employee_name="Yousef Al-Malki", document_type=DocumentType.VISA,
            issue_date=date(2022, 11, 1), expiry_date=today - timedelta(days=5),
            storage_key="key3",
        ),
    )


def _assets(tenant_id: str) -> tuple[CompanyAsset, ...]:
    return (
        CompanyAsset(
            id="asset-1", tenant_id=tenant_id, asset_tag="QT-LAP-001",
            name='MacBook Pro 16"', category=AssetCategory.IT_EQUIPMENT,
            serial_number="C02F1234ABCD", purchase_date=date(2023, 1, 15),
            purchase_cost=9500.0, location="Doha Office", status=AssetStatus.ASSIGNED,
            residual_value=1000.0, useful_life_months=36, vendor="iSpot",
            warranty_end_date=date(2026, 1, 14), assigned_to_employee_id="emp-1",
            assignment_date=date(2023, 1, 20),
        ),
        CompanyAsset(
            id="asset-2", tenant_id=tenant_id, asset_tag="QT-PHN-001",
            name="iPhone 15 Pro", category=AssetCategory.IT_EQUIPMENT,
            serial_number="A12B3456CDEF", purchase_date=date(2023, 9, 22),
            purchase_cost=4500.0, location="Doha Office", status=AssetStatus.ASSIGNED,
            residual_value=500.0, useful_life_months=24, vendor="Ooredoo",
            warranty_end_date=date(2025, 9, 21), assigned_to_employee_id="emp-3",
            assignment_date=date(2023, 9, 25),
        ),
        CompanyAsset(
            id="asset-3", tenant_id=tenant_id, asset_tag="QT-VEH-001",
            name="Toyota Land Cruiser", category=AssetCategory.VEHICLE,
            serial_number="JT1234567890", purchase_date=date(2022, 5, 10),
            purchase_cost=220000.0, location="Company Parking",
            residual_value=80000.0, useful_life_months=60, vendor="Toyota Qatar",
            warranty_end_date=date(2027, 5, 9),
        ),
    )


def _maintenances(tenant_id: str) -> tuple[AssetMaintenance, ...]:
    return (
        AssetMaintenance(
            id="maint-1", tenant_id=tenant_id, asset_id="asset-3",
            asset_name="Toyota Land Cruiser", maintenance_type=MaintenanceType.CHECK_UP,
            description="Annual 40,000km service.", cost=850.0, date=date(2024, 5, 15),
            status=MaintenanceStatus.COMPLETED,
        ),
    )


def _attendance(
    tenant_id: str,
    employees: tuple[Employee, ...],
    today: date,
) -> tuple[AttendanceRecord, ...]:
    """Thirty days of records ending ``today``, newest first.

    Times vary with the day so the history looks lived-in; every tenth
    employee-day is an absence.
    """
    names = {e.id: e.name for e in employees}
    records = []
    for offset in range(31):
        day = today - timedelta(days=offset)
        if day.weekday() in _WEEKEND:
            continue
        for index, employee_id in enumerate(_ATTENDANCE_EMPLOYEES):
            seed = day.toordinal() + index
            if seed % 10 == 0:
                continue
            check_in = f"{7 + seed % 3:02d}:{(day.day * 7 + index * 11) % 30:02d}"
            check_out = f"{16 + seed % 3:02d}:{(day.day * 13 + index * 5) % 59:02d}"
            records.append(
                AttendanceRecord(
                    id=f"att-{employee_id}-{day.isoformat()}",
                    tenant_id=tenant_id,
                    employee_id=employee_id,
                    employee_name=names[employee_id],
                    date=day,
                    check_in=check_in,
                    check_out=check_out,
                    hours_worked=hours_between(check_in, check_out),
                )
            )
    return tuple(records)


def _job_openings(tenant_id: str) -> tuple[JobOpening, ...]:
    return (
        JobOpening(
            id="job-1", tenant_id=tenant_id, title="Senior Backend Engineer",
            department=Department.ENGINEERING, location="Doha, Qatar",
            description="Design and operate the payroll and WPS services.",
            date_posted=date(2024, 5, 20),
        ),
    )


def _candidates(tenant_id: str) -> tuple[Candidate, ...]:
    return (
        Candidate(
            id="cand-1", tenant_id=tenant_id, name="Khalid Al-Abdullah",
            email="khalid@test.com", phone="33445566", job_opening_id="job-1",
            job_title="Senior Backend Engineer", applied_date=date(2024, 5, 22),
            status=CandidateStatus.INTERVIEW,
        ),
        Candidate(
            id="cand-2", tenant_id=tenant_id, name="Sara Mahmoud",
            email="sara@test.com", phone="55667788", job_opening_id="job-1",
            job_title="Senior Backend Engineer", applied_date=date(2024, 6, 1),
        ),
    )


def _previous_months(today: date, count: int) -> list[tuple[int, int]]:
    """``(year, month)`` pairs for the ``count`` months before ``today``, newest first."""
    periods = []
    year, month = today.year, today.month
    for _ in range(count):
        month -= 1
        if month == 0:
            year, month = year - 1, 12
        periods.append((year, month))
    return periods


def _payroll_history(
    tenant_id: str,
    settings: CompanySettings,
    employees: tuple[Employee, ...],
    today: date,
) -> tuple[tuple[PayrollRun, ...], tuple[Payslip, ...]]:
    runs = []
    payslips = []
    for index, (year, month) in enumerate(_previous_months(today, DEMO_PAYROLL_MONTHS), start=1):
        period_month = month_name(month)
        month_end = date(year, month, days_in_month(date(year, month, 1)))
        run = PayrollRun(
            id=f"pr-{index}",
            tenant_id=tenant_id,
            month=period_month,
            year=year,
            run_date=datetime.combine(month_end, time(9, 0), tzinfo=timezone.utc),
            total_amount=total_net_amount(employees),
            employee_count=len(employees),
            status=PayrollRunStatus.COMPLETED,
            wps_file_content=generate_sif_content(settings, employees, period_month, year),
            employee_ids=tuple(e.id for e in employees),
        )
        runs.append(run)
        payslips.extend(
            Payslip(
                id=f"ps-{run.id}-{employee.id}",
                tenant_id=tenant_id,
                employee_id=employee.id,
                payroll_run_id=run.id,
                period=f"{run.month} {run.year}",
                gross_salary=employee.basic_salary + employee.allowances,
                net_salary=net_amount(
                    employee.basic_salary, employee.allowances, employee.deductions
                ),
                created_at=run.run_date,
            )
            for employee in employees
        )
    return tuple(runs), tuple(payslips)


def demo_collections(
    tenant_id: str,
    settings: CompanySettings,
    owner: User,
    today: date,
    hr_email: str | None = None,
) -> dict[Collection, tuple]:
    """
    Sample records for a new demo tenant.

    Roles, settings and the owner are not included; the caller already
    has them.  ``users`` holds only the HR user, and only when
    ``hr_email`` is given, since usernames are unique across tenants.
    """
    employees = demo_employees(tenant_id, owner.id)
    runs, payslips = _payroll_history(tenant_id, settings, employees, today)
    users: tuple[User, ...] = ()
    if hr_email:
        users = (
            User(
                id=f"user-{tenant_id}-hr",
                tenant_id=tenant_id,
                username=hr_email,
                name=DEMO_HR_USER_NAME,
                role_id=hr_role_id(tenant_id),
                employee_id="emp-2",
            ),
        )
    return {
        Collection.USERS: users,
        Collection.EMPLOYEES: employees,
        Collection.DOCUMENTS: _documents(tenant_id, today),
        Collection.LEAVE_REQUESTS: _leave_requests(tenant_id, today),
        Collection.LEAVE_BALANCES: _leave_balances(tenant_id, employees),
        Collection.ASSETS: _assets(tenant_id),
        Collection.ASSET_MAINTENANCES: _maintenances(tenant_id),
        Collection.PAYROLL_RUNS: runs,
        Collection.PAYSLIPS: payslips,
        Collection.ATTENDANCE_RECORDS: _attendance(tenant_id, employees, today),
        Collection.JOB_OPENINGS: _job_openings(tenant_id),
        Collection.CANDIDATES: _candidates(tenant_id),
    }
