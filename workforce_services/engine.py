"""
WorkforceEngine -- composition root.

Responsibility:
    Builds one fully wired engine from an ``EngineConfig``: the tenant
    record store, audit trail, blob persistence with debounced flushing,
    every module service, and the external collaborators.  There is no
    module-level state; two engines never share anything.

Architecture position:
    Services -- the only layer that reads ``workforce_config``.  Config
    values are translated here into plain service arguments so the kernel
    and the modules stay configuration-agnostic.

Lifecycle:
    ``open()``  -- create the blob table, load and restore the persisted
                   store, attach the flush hook, seed missing demo tenants.
    ``close()`` -- flush outstanding changes, release HTTP and DB resources.

    Usage::

        with WorkforceEngine(get_active_config()) as engine:
            result = engine.payroll.run("tenant-demo", "June", 2024, actor)
"""

from __future__ import annotations

from workforce_config import EngineConfig, get_active_config
from workforce_kernel.db.engine import Database
from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.domain.records import LeaveType
from workforce_kernel.logging_config import get_logger
from workforce_kernel.services.audit_trail import AuditTrail
from workforce_kernel.services.flush_scheduler import FlushScheduler
from workforce_kernel.services.persistence_service import PersistenceService
from workforce_kernel.services.tenant_store import TenantRecordStore
from workforce_modules.assets.service import AssetService
from workforce_modules.attendance.service import AttendanceService
from workforce_modules.documents.service import DocumentService
from workforce_modules.employees.service import EmployeeService
from workforce_modules.leave.service import LeaveService
from workforce_modules.payroll.service import PayrollService
from workforce_modules.recruitment.service import RecruitmentService
from workforce_modules.tenancy.bootstrap import DemoTenant, bootstrap_demo_tenants
from workforce_modules.tenancy.service import TenancyService
from workforce_services.otp import IssueCodeResult, VerificationCodeService
from workforce_services.text_generation import TextGenerationClient

logger = get_logger("services.engine")


class WorkforceEngine:
    def __init__(
        self,
        config: EngineConfig | None = None,
        clock: Clock | None = None,
        database: Database | None = None,
        text_client: TextGenerationClient | None = None,
    ):
        self.config = config if config is not None else get_active_config()
        self.clock = clock or SystemClock()
        self._owns_database = database is None
        self.database = database or Database(self.config.store.database_url)
        self._opened = False

        self.store = TenantRecordStore()
        self.audit = AuditTrail(self.store, self.clock)
        self.persistence = PersistenceService(
            self.database, self.config.store.blob_key, self.clock
        )
        self.flusher = FlushScheduler(
            self._flush,
            debounce_seconds=self.config.store.flush_debounce_seconds,
            max_delay_seconds=self.config.store.flush_max_delay_seconds,
        )

        leave_config = self.config.leave
        self.leave = LeaveService(
            self.store,
            self.audit,
            self.clock,
            default_allotments={
                LeaveType(name): days for name, days in leave_config.default_allotments.items()
            },
            uncapped_leave_types=[LeaveType(name) for name in leave_config.uncapped_leave_types],
        )
        self.employees = EmployeeService(self.store, self.audit, self.leave)
        self.payroll = PayrollService(
            self.store,
            self.audit,
            self.clock,
            duplicate_period_policy=self.config.payroll.duplicate_period_policy,
        )
        self.tenancy = TenancyService(self.store, self.audit, self.clock)
        self.documents = DocumentService(self.store, self.audit, self.clock)
        self.assets = AssetService(self.store, self.audit, self.clock)
        self.attendance = AttendanceService(self.store, self.audit)
        self.recruitment = RecruitmentService(
            self.store, self.audit, self.employees, self.clock
        )

        text_config = self.config.text_generation
        self.text = text_client or TextGenerationClient(
            endpoint_url=text_config.endpoint_url,
            timeout_seconds=text_config.timeout_seconds,
            placeholder=text_config.placeholder,
        )
        self.auth = VerificationCodeService(
            self.tenancy.find_user_by_username,
            clock=self.clock,
            ttl_seconds=self.config.auth.code_ttl_seconds,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> WorkforceEngine:
        if self._opened:
            return self
        self.database.create_tables()
        self.store.restore(self.persistence.load())
        self.store.set_commit_hook(self.flusher.request_flush)

        seeded: tuple[str, ...] = ()
        bootstrap = self.config.bootstrap
        if bootstrap.seed_demo_tenants:
            seeded = bootstrap_demo_tenants(
                self.store,
                self.tenancy,
                (
                    DemoTenant(
                        tenant_id=demo.tenant_id,
                        company_name=demo.company_name,
                        owner_name=demo.owner_name,
                        owner_email=demo.owner_email,
                        hr_email=demo.hr_email,
                    )
                    for demo in bootstrap.demo_tenants
                ),
            )

        self._opened = True
        logger.info(
            "engine_opened",
            extra={
                "config_id": self.config.config_id,
                "tenant_count": len(self.store.list_tenants()),
                "seeded_tenants": list(seeded),
            },
        )
        return self

    def close(self) -> None:
        if not self._opened:
            return
        self.store.set_commit_hook(None)
        flushed = self.flusher.close()
        self.text.close()
        if self._owns_database:
            self.database.dispose()
        self._opened = False
        logger.info("engine_closed", extra={"final_flush_ok": flushed})

    def __enter__(self) -> WorkforceEngine:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _flush(self) -> None:
        self.persistence.save(self.store.snapshot())

    # ------------------------------------------------------------------
    # Cross-service flows
    # ------------------------------------------------------------------

    def register_company(
        self, company_name: str, owner_name: str, owner_email: str
    ) -> IssueCodeResult:
        """Register a tenant and send the owner their first login code."""
        self.tenancy.register_company(company_name, owner_name, owner_email)
        return self.auth.issue_code(owner_email)
