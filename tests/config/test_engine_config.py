"""
Engine configuration: schema validation and the YAML load path.

Every bad value raises ValueError naming the offending key; a good file
produces a frozen EngineConfig and one ``workforce_config_loaded`` trace.
"""

import dataclasses

import pytest

from workforce_config import DEFAULT_CONFIG_PATH, get_active_config
from workforce_config.loader import compute_checksum, load_yaml_file
from workforce_config.schema import (
    AuthConfig,
    BootstrapConfig,
    EngineConfig,
    LeaveConfig,
    PayrollConfig,
    StoreConfig,
    TextGenerationConfig,
)


# =============================================================================
# Defaults
# =============================================================================


class TestDefaults:
    def test_empty_mapping_gives_defaults(self):
        config = EngineConfig.from_dict({})
        assert config == EngineConfig()
        assert config.store.blob_key == "workforce-store"
        assert config.leave.default_allotments["Annual"] == 21.0
        assert config.leave.uncapped_leave_types == ("Unpaid",)
        assert config.payroll.duplicate_period_policy == "allow"
        assert config.auth.code_ttl_seconds == 300.0
        assert config.text_generation.endpoint_url is None
        assert config.bootstrap.demo_tenants == ()

    def test_config_is_frozen(self):
        config = EngineConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.config_id = "other"

    def test_null_section_is_treated_as_empty(self):
        config = EngineConfig.from_dict({"store": None, "payroll": None})
        assert config.store == StoreConfig()
        assert config.payroll == PayrollConfig()


# =============================================================================
# Section validation
# =============================================================================


class TestStoreSection:
    def test_values_parsed(self):
        config = StoreConfig.from_dict(
            {
                "database_url": "sqlite://",
                "blob_key": "k",
                "flush_debounce_seconds": 0,
                "flush_max_delay_seconds": 2,
            }
        )
        assert config.database_url == "sqlite://"
        assert config.flush_debounce_seconds == 0.0
        assert config.flush_max_delay_seconds == 2.0

    def test_max_delay_below_debounce_refused(self):
        with pytest.raises(ValueError, match="flush_max_delay_seconds"):
            StoreConfig.from_dict({"flush_debounce_seconds": 3, "flush_max_delay_seconds": 1})

    def test_blank_blob_key_refused(self):
        with pytest.raises(ValueError, match="blob_key"):
            StoreConfig.from_dict({"blob_key": "  "})

    @pytest.mark.parametrize("value", ["soon", True, -1])
    def test_bad_debounce_refused(self, value):
        with pytest.raises(ValueError, match="flush_debounce_seconds"):
            StoreConfig.from_dict({"flush_debounce_seconds": value})


class TestLeaveSection:
    def test_allotments_parsed_as_floats(self):
        config = LeaveConfig.from_dict({"default_allotments": {"Annual": 30, "Sick": 10}})
        assert config.default_allotments == {"Annual": 30.0, "Sick": 10.0}

    def test_unknown_leave_type_refused(self):
        with pytest.raises(ValueError, match="Sabbatical"):
            LeaveConfig.from_dict({"default_allotments": {"Sabbatical": 5}})

    def test_uncapped_must_be_a_list(self):
        with pytest.raises(ValueError, match="uncapped_leave_types"):
            LeaveConfig.from_dict({"uncapped_leave_types": "Unpaid"})

    def test_unknown_uncapped_type_refused(self):
        with pytest.raises(ValueError):
            LeaveConfig.from_dict({"uncapped_leave_types": ["Holiday"]})

    def test_allotments_must_be_a_mapping(self):
        with pytest.raises(ValueError, match="default_allotments"):
            LeaveConfig.from_dict({"default_allotments": [21, 14]})


class TestOtherSections:
    def test_reject_policy_accepted(self):
        assert PayrollConfig.from_dict({"duplicate_period_policy": "reject"}).duplicate_period_policy == "reject"

    def test_unknown_policy_refused(self):
        with pytest.raises(ValueError, match="duplicate_period_policy"):
            PayrollConfig.from_dict({"duplicate_period_policy": "overwrite"})

    @pytest.mark.parametrize("ttl", [0, -5])
    def test_non_positive_ttl_refused(self, ttl):
        with pytest.raises(ValueError, match="code_ttl_seconds"):
            AuthConfig.from_dict({"code_ttl_seconds": ttl})

    def test_blank_endpoint_disables_text_generation(self):
        config = TextGenerationConfig.from_dict({"endpoint_url": "", "timeout_seconds": 3})
        assert config.endpoint_url is None
        assert config.timeout_seconds == 3.0

    def test_demo_tenant_requires_identity_fields(self):
        with pytest.raises(ValueError, match="owner_email"):
            BootstrapConfig.from_dict(
                {"demo_tenants": [{"tenant_id": "t", "company_name": "c", "owner_name": "o"}]}
            )

    def test_duplicate_demo_tenant_ids_refused(self):
        entry = {
            "tenant_id": "t",
            "company_name": "c",
            "owner_name": "o",
            "owner_email": "o@c.qa",
        }
        with pytest.raises(ValueError, match="duplicate"):
            BootstrapConfig.from_dict({"demo_tenants": [entry, dict(entry)]})

    def test_demo_tenants_must_be_a_list(self):
        with pytest.raises(ValueError, match="demo_tenants"):
            BootstrapConfig.from_dict({"demo_tenants": {"tenant_id": "t"}})

    def test_section_must_be_a_mapping(self):
        with pytest.raises(ValueError, match="'auth'"):
            EngineConfig.from_dict({"auth": [1, 2]})

    def test_root_must_be_a_mapping(self):
        with pytest.raises(ValueError):
            EngineConfig.from_dict(["store"])


# =============================================================================
# YAML load path
# =============================================================================


class TestLoadFromFile:
    def test_default_file_loads(self):
        config = get_active_config()
        assert config.config_id == "default"
        assert config.bootstrap.seed_demo_tenants is True
        assert [t.tenant_id for t in config.bootstrap.demo_tenants] == ["tenant-demo"]
        assert config.bootstrap.demo_tenants[0].hr_email == "hr@noor.app"
        assert config.leave.default_allotments["Maternity"] == 50.0

    def test_load_emits_trace(self, captured_logs):
        get_active_config(DEFAULT_CONFIG_PATH)
        loaded = [r for r in captured_logs() if r["message"] == "workforce_config_loaded"]
        assert len(loaded) == 1
        assert loaded[0]["logger"] == "workforce_kernel.config"
        assert loaded[0]["config_id"] == "default"
        assert loaded[0]["checksum"] == compute_checksum(DEFAULT_CONFIG_PATH)
        assert loaded[0]["demo_tenant_count"] == 1

    def test_custom_file(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text(
            "config_id: qa\n"
            "payroll:\n"
            "  duplicate_period_policy: reject\n"
            "leave:\n"
            "  uncapped_leave_types: []\n",
            encoding="utf-8",
        )
        config = get_active_config(path)
        assert config.config_id == "qa"
        assert config.payroll.duplicate_period_policy == "reject"
        assert config.leave.uncapped_leave_types == ()

    def test_empty_file_is_all_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_yaml_file(path) == {}
        assert get_active_config(path) == EngineConfig()

    def test_non_mapping_root_refused(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_yaml_file(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")

    def test_checksum_changes_with_content(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("config_id: a\n", encoding="utf-8")
        first = compute_checksum(path)
        path.write_text("config_id: b\n", encoding="utf-8")
        assert compute_checksum(path) != first
