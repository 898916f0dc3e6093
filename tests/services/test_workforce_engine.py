"""
WorkforceEngine: wiring, demo seeding and persistence across restarts.

Every engine here runs against an in-memory SQLite database with
synchronous flushing, so a commit is on disk before the call returns.
"""

import pytest

from workforce_config import EngineConfig
from workforce_kernel.db.engine import Database
from workforce_kernel.domain.records import Actor, CandidateStatus, Department, LeaveType
from workforce_kernel.exceptions import DuplicatePayrollRunError
from workforce_kernel.models.store_blob import StoreBlob
from workforce_services import WorkforceEngine

ACTOR = Actor(id="user-tenant-demo-owner", name="Mariam Al-Sulaiti")

DEMO_TENANT = {
    "tenant_id": "tenant-demo",
    "company_name": "Noor Trading W.L.L.",
    "owner_name": "Mariam Al-Sulaiti",
    "owner_email": "owner@noor.app",
    "hr_email": "hr@noor.app",
}


def _config(seed: bool = True, **sections) -> EngineConfig:
    data = {
        "config_id": "engine-test",
        "store": {
            "database_url": "sqlite://",
            "blob_key": "engine-test",
            "flush_debounce_seconds": 0,
            "flush_max_delay_seconds": 0,
        },
        "bootstrap": {"seed_demo_tenants": seed, "demo_tenants": [DEMO_TENANT]},
    }
    data.update(sections)
    return EngineConfig.from_dict(data)


@pytest.fixture
def shared_db():
    db = Database("sqlite://")
    yield db
    db.dispose()


class TestLifecycle:
    def test_open_seeds_demo_tenant(self, clock, captured_logs):
        with WorkforceEngine(_config(), clock=clock) as engine:
            assert engine.store.has_tenant("tenant-demo")
            assert len(engine.employees.list_employees("tenant-demo")) == 5

        opened = [r for r in captured_logs() if r["message"] == "engine_opened"]
        assert opened[0]["seeded_tenants"] == ["tenant-demo"]
        assert opened[0]["config_id"] == "engine-test"
        closed = [r for r in captured_logs() if r["message"] == "engine_closed"]
        assert closed[0]["final_flush_ok"] is True

    def test_seeding_disabled(self, clock):
        with WorkforceEngine(_config(seed=False), clock=clock) as engine:
            assert engine.store.list_tenants() == ()

    def test_open_is_idempotent(self, clock):
        engine = WorkforceEngine(_config(), clock=clock)
        engine.open()
        engine.open()
        assert len(engine.store.list_tenants()) == 1
        engine.close()
        engine.close()

    def test_state_survives_restart(self, clock, shared_db):
        with WorkforceEngine(_config(), clock=clock, database=shared_db) as engine:
            result = engine.payroll.run("tenant-demo", "June", 2024, ACTOR)
            run_id = result.payroll_run.id

        with WorkforceEngine(_config(), clock=clock, database=shared_db) as engine:
            assert engine.payroll.latest_run("tenant-demo").id == run_id
            assert len(engine.store.list_tenants()) == 1
            # Registration and payroll audit entries both came back.
            actions = [e.action for e in engine.audit.entries("tenant-demo")]
            assert actions[:2] == ["Payroll Run", "Tenant Registered"]

    def test_hired_candidate_survives_restart(self, clock, shared_db):
        with WorkforceEngine(_config(), clock=clock, database=shared_db) as engine:
            engine.recruitment.update_candidate_status(
                "tenant-demo", "cand-1", CandidateStatus.HIRED, ACTOR
            )
            employee = engine.recruitment.convert_to_employee(
                "tenant-demo",
                "cand-1",
                ACTOR,
                qid="29511223344",
                basic_salary=20000,
                allowances=4000,
                deductions=0,
                bank_name="QNB",
                iban="QA58QNBA000000000000555666777",
                join_date="2024-07-01",
            )

        with WorkforceEngine(_config(), clock=clock, database=shared_db) as engine:
            candidate = engine.recruitment.get_candidate("tenant-demo", "cand-1")
            assert candidate.status is CandidateStatus.HIRED
            assert candidate.employee_id == employee.id
            assert engine.employees.get_employee("tenant-demo", employee.id).name == (
                "Khalid Al-Abdullah"
            )
            assert engine.attendance.list_records("tenant-demo")

    def test_restart_does_not_reseed(self, clock, shared_db, captured_logs):
        with WorkforceEngine(_config(), clock=clock, database=shared_db):
            pass
        with WorkforceEngine(_config(), clock=clock, database=shared_db):
            pass

        opened = [r for r in captured_logs() if r["message"] == "engine_opened"]
        assert [r["seeded_tenants"] for r in opened] == [["tenant-demo"], []]

    def test_corrupt_blob_starts_empty_then_reseeds(self, clock, shared_db):
        shared_db.create_tables()
        with shared_db.session_scope() as session:
            session.add(
                StoreBlob(key="engine-test", payload="{oops", schema_version=2, saved_at=clock.now())
            )

        with WorkforceEngine(_config(), clock=clock, database=shared_db) as engine:
            assert engine.store.has_tenant("tenant-demo")
            assert len(engine.persistence.quarantined_keys()) == 1


class TestWiring:
    def test_leave_allotments_from_config(self, clock):
        config = _config(
            seed=False,
            leave={
                "default_allotments": {"Annual": 30, "Sick": 10},
                "uncapped_leave_types": ["Unpaid", "Sick"],
            },
        )
        with WorkforceEngine(config, clock=clock) as engine:
            engine.tenancy.register_company("Al Bidda", "Khalid", "k@albidda.qa", tenant_id="t-1")
            emp = engine.employees.add_employee(
                "t-1",
                ACTOR,
                name="Omar",
                qid="28811223344",
                position="Accountant",
                department=Department.FINANCE,
                basic_salary=12000,
                allowances=0,
                deductions=0,
                bank_name="QNB",
                iban="QA00",
                join_date="2020-01-01",
            )
            balance = engine.leave.balance_for("t-1", emp.id)
            assert {d.leave_type: d.total_days for d in balance.balances} == {
                LeaveType.ANNUAL: 30.0,
                LeaveType.SICK: 10.0,
            }
            assert not engine.leave.is_capped(LeaveType.SICK)

    def test_strict_duplicate_policy_from_config(self, clock):
        config = _config(payroll={"duplicate_period_policy": "reject"})
        with WorkforceEngine(config, clock=clock) as engine:
            with pytest.raises(DuplicatePayrollRunError):
                engine.payroll.run("tenant-demo", "May", 2024, ACTOR)

    def test_register_company_issues_login_code(self, clock):
        with WorkforceEngine(_config(seed=False), clock=clock) as engine:
            result = engine.register_company("Lusail Trading", "Nasser", "nasser@lusail.qa")

            assert result.success
            assert engine.auth.pending_count() == 1
            assert engine.tenancy.find_user_by_username("nasser@lusail.qa") is not None

    def test_text_generation_disabled_by_default(self, clock):
        with WorkforceEngine(_config(seed=False), clock=clock) as engine:
            assert not engine.text.enabled
            assert engine.text.generate("hi") == "AI features are currently unavailable."

    def test_engines_share_nothing(self, clock):
        with WorkforceEngine(_config(), clock=clock) as first:
            with WorkforceEngine(_config(seed=False), clock=clock) as second:
                assert first.store.has_tenant("tenant-demo")
                assert not second.store.has_tenant("tenant-demo")
