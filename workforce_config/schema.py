"""
EngineConfig schema.

Typed, frozen view of a configuration set.  YAML documents are parsed
into these types by the loader; ``EngineConfig.from_dict`` is also the
override path tests use.  Values stay raw (leave types as their display
names, policies as strings); the services layer translates them into
service arguments.

Every validation failure raises ``ValueError`` naming the offending key.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from workforce_kernel.domain.records import LeaveType

DUPLICATE_PERIOD_POLICIES = ("allow", "reject")


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Configuration section '{key}' must be a mapping")
    return value


def _number(section: str, key: str, value: Any, minimum: float = 0) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{section}.{key} must be a number, got {value!r}")
    if value < minimum:
        raise ValueError(f"{section}.{key} must be >= {minimum}, got {value}")
    return float(value)


def _leave_type(section: str, name: Any) -> str:
    valid = [t.value for t in LeaveType]
    if name not in valid:
        raise ValueError(f"{section}: unknown leave type {name!r}; expected one of {valid}")
    return name


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StoreConfig:
    """Where the persisted blob lives and how often it is flushed."""

    database_url: str = "sqlite:///workforce.db"
    blob_key: str = "workforce-store"
    flush_debounce_seconds: float = 0.5
    flush_max_delay_seconds: float = 5.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StoreConfig:
        config = cls(
            database_url=str(data.get("database_url", cls.database_url)),
            blob_key=str(data.get("blob_key", cls.blob_key)),
            flush_debounce_seconds=_number(
                "store", "flush_debounce_seconds",
                data.get("flush_debounce_seconds", cls.flush_debounce_seconds),
            ),
            flush_max_delay_seconds=_number(
                "store", "flush_max_delay_seconds",
                data.get("flush_max_delay_seconds", cls.flush_max_delay_seconds),
            ),
        )
        if not config.blob_key.strip():
            raise ValueError("store.blob_key must not be empty")
        if config.flush_max_delay_seconds < config.flush_debounce_seconds:
            raise ValueError(
                "store.flush_max_delay_seconds must be >= store.flush_debounce_seconds"
            )
        return config


@dataclass(frozen=True)
class LeaveConfig:
    """Allotments given to every new employee, by leave type name."""

    default_allotments: dict[str, float] = field(
        default_factory=lambda: {"Annual": 21.0, "Sick": 14.0, "Unpaid": 0.0, "Maternity": 50.0}
    )
    uncapped_leave_types: tuple[str, ...] = ("Unpaid",)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LeaveConfig:
        defaults = cls()
        raw_allotments = data.get("default_allotments", defaults.default_allotments)
        if not isinstance(raw_allotments, dict):
            raise ValueError("leave.default_allotments must be a mapping")
        allotments = {
            _leave_type("leave.default_allotments", name): _number(
                "leave.default_allotments", str(name), days
            )
            for name, days in raw_allotments.items()
        }
        uncapped = data.get("uncapped_leave_types", defaults.uncapped_leave_types)
        if isinstance(uncapped, str) or not isinstance(uncapped, (list, tuple)):
            raise ValueError("leave.uncapped_leave_types must be a list")
        return cls(
            default_allotments=allotments,
            uncapped_leave_types=tuple(
                _leave_type("leave.uncapped_leave_types", name) for name in uncapped
            ),
        )


@dataclass(frozen=True)
class PayrollConfig:
    duplicate_period_policy: str = "allow"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PayrollConfig:
        policy = data.get("duplicate_period_policy", cls.duplicate_period_policy)
        if policy not in DUPLICATE_PERIOD_POLICIES:
            raise ValueError(
                f"payroll.duplicate_period_policy must be one of "
                f"{list(DUPLICATE_PERIOD_POLICIES)}, got {policy!r}"
            )
        return cls(duplicate_period_policy=policy)


@dataclass(frozen=True)
class AuthConfig:
    code_ttl_seconds: float = 300.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuthConfig:
        ttl = _number("auth", "code_ttl_seconds", data.get("code_ttl_seconds", cls.code_ttl_seconds))
        if ttl == 0:
            raise ValueError("auth.code_ttl_seconds must be positive")
        return cls(code_ttl_seconds=ttl)


@dataclass(frozen=True)
class TextGenerationConfig:
    """An empty ``endpoint_url`` disables remote calls; the placeholder is returned."""

    endpoint_url: str | None = None
    timeout_seconds: float = 10.0
    placeholder: str = "AI features are currently unavailable."

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TextGenerationConfig:
        endpoint = data.get("endpoint_url") or None
        return cls(
            endpoint_url=str(endpoint) if endpoint else None,
            timeout_seconds=_number(
                "text_generation", "timeout_seconds",
                data.get("timeout_seconds", cls.timeout_seconds),
            ),
            placeholder=str(data.get("placeholder", cls.placeholder)),
        )


@dataclass(frozen=True)
class DemoTenantConfig:
    tenant_id: str
    company_name: str
    owner_name: str
    owner_email: str
    hr_email: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DemoTenantConfig:
        missing = [
            key for key in ("tenant_id", "company_name", "owner_name", "owner_email")
            if not data.get(key)
        ]
        if missing:
            raise ValueError(f"bootstrap.demo_tenants entry is missing {missing}")
        return cls(
            tenant_id=str(data["tenant_id"]),
            company_name=str(data["company_name"]),
            owner_name=str(data["owner_name"]),
            owner_email=str(data["owner_email"]),
            hr_email=str(data["hr_email"]) if data.get("hr_email") else None,
        )


@dataclass(frozen=True)
class BootstrapConfig:
    seed_demo_tenants: bool = False
    demo_tenants: tuple[DemoTenantConfig, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BootstrapConfig:
        raw = data.get("demo_tenants") or []
        if not isinstance(raw, list):
            raise ValueError("bootstrap.demo_tenants must be a list")
        tenants = tuple(DemoTenantConfig.from_dict(entry) for entry in raw)
        ids = [t.tenant_id for t in tenants]
        if len(ids) != len(set(ids)):
            raise ValueError(f"bootstrap.demo_tenants has duplicate tenant ids: {ids}")
        return cls(seed_demo_tenants=bool(data.get("seed_demo_tenants", False)), demo_tenants=tenants)


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineConfig:
    """The complete configuration for one engine instance."""

    config_id: str = "default"
    store: StoreConfig = field(default_factory=StoreConfig)
    leave: LeaveConfig = field(default_factory=LeaveConfig)
    payroll: PayrollConfig = field(default_factory=PayrollConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    text_generation: TextGenerationConfig = field(default_factory=TextGenerationConfig)
    bootstrap: BootstrapConfig = field(default_factory=BootstrapConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EngineConfig:
        if not isinstance(data, dict):
            raise ValueError("Configuration root must be a mapping")
        return cls(
            config_id=str(data.get("config_id", "default")),
            store=StoreConfig.from_dict(_section(data, "store")),
            leave=LeaveConfig.from_dict(_section(data, "leave")),
            payroll=PayrollConfig.from_dict(_section(data, "payroll")),
            auth=AuthConfig.from_dict(_section(data, "auth")),
            text_generation=TextGenerationConfig.from_dict(_section(data, "text_generation")),
            bootstrap=BootstrapConfig.from_dict(_section(data, "bootstrap")),
        )
