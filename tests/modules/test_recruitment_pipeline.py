"""Job openings, the candidate pipeline and hiring into the workforce."""

from datetime import date

import pytest

from workforce_kernel.domain.records import CandidateStatus, Collection, Department, JobStatus
from workforce_kernel.exceptions import (
    CandidateAlreadyConvertedError,
    CandidateNotFoundError,
    CandidateNotHiredError,
    JobOpeningNotFoundError,
    NegativeAmountError,
)

NEW_HIRE = dict(
    qid="29511223344",
    basic_salary=20000,
    allowances=4000,
    deductions=250,
    bank_name="QNB",
    iban="QA58QNBA000000000000555666777",
    join_date="2024-07-01",
)


@pytest.fixture
def job(recruitment, tenant_id, actor):
    return recruitment.add_job_opening(
        tenant_id,
        actor,
        title="Payroll Analyst",
        department=Department.FINANCE,
        location="Doha, Qatar",
        description="Own the monthly WPS cycle.",
    )


@pytest.fixture
def candidate(recruitment, job, tenant_id, actor):
    return recruitment.add_candidate(
        tenant_id,
        actor,
        name="Layla Al-Suwaidi",
        email="layla@example.qa",
        phone="55001122",
        job_opening_id=job.id,
    )


# =============================================================================
# Job openings
# =============================================================================


class TestJobOpenings:
    def test_defaults(self, job):
        assert job.status is JobStatus.OPEN
        assert job.date_posted == date(2024, 6, 15)

    def test_newest_first(self, recruitment, job, tenant_id, actor):
        later = recruitment.add_job_opening(
            tenant_id, actor, title="Driver", department=Department.SALES, location="Al Wakrah"
        )
        assert recruitment.list_job_openings(tenant_id) == (later, job)

    def test_open_filter(self, recruitment, job, tenant_id, actor):
        recruitment.add_job_opening(
            tenant_id,
            actor,
            title="Intern",
            department=Department.HR,
            location="Doha",
            status=JobStatus.CLOSED,
        )
        assert recruitment.open_job_openings(tenant_id) == (job,)

    def test_unknown_opening(self, recruitment, tenant_id):
        with pytest.raises(JobOpeningNotFoundError) as exc:
            recruitment.get_job_opening(tenant_id, "job-ghost")
        assert exc.value.code == "JOB_OPENING_NOT_FOUND"


# =============================================================================
# Candidates
# =============================================================================


class TestCandidates:
    def test_copies_job_title(self, candidate, job):
        assert candidate.job_title == "Payroll Analyst"
        assert candidate.job_opening_id == job.id
        assert candidate.status is CandidateStatus.APPLIED
        assert candidate.applied_date == date(2024, 6, 15)
        assert candidate.employee_id is None

    def test_application_order_kept(self, recruitment, candidate, job, tenant_id, actor):
        second = recruitment.add_candidate(
            tenant_id, actor, name="Fahad", email="f@x.qa", phone="1", job_opening_id=job.id
        )
        assert recruitment.list_candidates(tenant_id) == (candidate, second)
        assert recruitment.candidates_for_job(tenant_id, job.id) == (candidate, second)

    def test_unknown_job_refused(self, recruitment, tenant_id, actor):
        with pytest.raises(JobOpeningNotFoundError):
            recruitment.add_candidate(
                tenant_id, actor, name="Ghost", email="g@x.qa", phone="0", job_opening_id="job-x"
            )
        assert recruitment.list_candidates(tenant_id) == ()

    def test_any_stage_reachable(self, recruitment, candidate, tenant_id, actor):
        recruitment.update_candidate_status(tenant_id, candidate.id, CandidateStatus.OFFER, actor)
        moved = recruitment.update_candidate_status(
            tenant_id, candidate.id, CandidateStatus.SCREENING, actor
        )
        assert moved.status is CandidateStatus.SCREENING
        assert recruitment.get_candidate(tenant_id, candidate.id) == moved

    def test_unknown_candidate(self, recruitment, tenant_id, actor):
        with pytest.raises(CandidateNotFoundError):
            recruitment.update_candidate_status(
                tenant_id, "cand-ghost", CandidateStatus.HIRED, actor
            )

    def test_status_change_audited(self, recruitment, candidate, audit, tenant_id, actor):
        recruitment.update_candidate_status(
            tenant_id, candidate.id, CandidateStatus.INTERVIEW, actor
        )
        entry = audit.entries(tenant_id)[0]
        assert entry.action == "Candidate Status Changed"
        assert entry.details == "Layla Al-Suwaidi: Applied -> Interview."


# =============================================================================
# Hiring
# =============================================================================


class TestConversion:
    def _hire(self, recruitment, tenant_id, candidate_id, actor):
        recruitment.update_candidate_status(tenant_id, candidate_id, CandidateStatus.HIRED, actor)

    def test_hired_candidate_becomes_employee(
        self, recruitment, employees, leave, candidate, tenant_id, actor
    ):
        self._hire(recruitment, tenant_id, candidate.id, actor)
        employee = recruitment.convert_to_employee(tenant_id, candidate.id, actor, **NEW_HIRE)

        assert employee.name == "Layla Al-Suwaidi"
        assert employee.position == "Payroll Analyst"
        assert employee.department is Department.FINANCE
        assert employee.join_date == date(2024, 7, 1)
        assert employee.onboarding_tasks
        assert leave.balance_for(tenant_id, employee.id) is not None
        assert employees.list_employees(tenant_id) == (employee,)
        assert recruitment.get_candidate(tenant_id, candidate.id).employee_id == employee.id

    def test_overrides(self, recruitment, candidate, tenant_id, actor):
        self._hire(recruitment, tenant_id, candidate.id, actor)
        employee = recruitment.convert_to_employee(
            tenant_id,
            candidate.id,
            actor,
            position="Senior Payroll Analyst",
            department=Department.HR,
            name_ar="ليلى السويدي",
            **NEW_HIRE,
        )
        assert employee.position == "Senior Payroll Analyst"
        assert employee.department is Department.HR
        assert employee.name_ar == "ليلى السويدي"

    @pytest.mark.parametrize(
        "status",
        [s for s in CandidateStatus if s is not CandidateStatus.HIRED],
    )
    def test_requires_hired(self, recruitment, employees, candidate, tenant_id, actor, status):
        recruitment.update_candidate_status(tenant_id, candidate.id, status, actor)
        with pytest.raises(CandidateNotHiredError) as exc:
            recruitment.convert_to_employee(tenant_id, candidate.id, actor, **NEW_HIRE)
        assert exc.value.status == status.value
        assert employees.list_employees(tenant_id) == ()

    def test_converts_once(self, recruitment, employees, candidate, tenant_id, actor):
        self._hire(recruitment, tenant_id, candidate.id, actor)
        employee = recruitment.convert_to_employee(tenant_id, candidate.id, actor, **NEW_HIRE)

        with pytest.raises(CandidateAlreadyConvertedError) as exc:
            recruitment.convert_to_employee(tenant_id, candidate.id, actor, **NEW_HIRE)
        assert exc.value.employee_id == employee.id
        assert len(employees.list_employees(tenant_id)) == 1

    def test_stage_frozen_after_conversion(self, recruitment, candidate, tenant_id, actor):
        self._hire(recruitment, tenant_id, candidate.id, actor)
        recruitment.convert_to_employee(tenant_id, candidate.id, actor, **NEW_HIRE)

        with pytest.raises(CandidateAlreadyConvertedError):
            recruitment.update_candidate_status(
                tenant_id, candidate.id, CandidateStatus.REJECTED, actor
            )

    def test_invalid_salary_leaves_candidate_unconverted(
        self, recruitment, store, candidate, tenant_id, actor
    ):
        self._hire(recruitment, tenant_id, candidate.id, actor)
        with pytest.raises(NegativeAmountError):
            recruitment.convert_to_employee(
                tenant_id, candidate.id, actor, **{**NEW_HIRE, "basic_salary": -1}
            )

        assert recruitment.get_candidate(tenant_id, candidate.id).employee_id is None
        assert store.get(tenant_id, Collection.EMPLOYEES) == ()

    def test_audit_trail(self, recruitment, audit, candidate, tenant_id, actor):
        self._hire(recruitment, tenant_id, candidate.id, actor)
        recruitment.convert_to_employee(tenant_id, candidate.id, actor, **NEW_HIRE)

        actions = [e.action for e in audit.entries(tenant_id)]
        assert actions[:2] == ["Candidate Converted", "Employee Created"]


class TestDemoPipeline:
    def test_seeded_opening_and_candidates(self, recruitment, demo_tenant_id):
        (job,) = recruitment.list_job_openings(demo_tenant_id)
        assert job.title == "Senior Backend Engineer"
        assert job.department is Department.ENGINEERING

        candidates = recruitment.candidates_for_job(demo_tenant_id, job.id)
        assert [(c.name, c.status) for c in candidates] == [
            ("Khalid Al-Abdullah", CandidateStatus.INTERVIEW),
            ("Sara Mahmoud", CandidateStatus.APPLIED),
        ]
