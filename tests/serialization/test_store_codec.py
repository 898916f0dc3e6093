"""
Persistence codec.

The blob must round-trip the whole store with maps kept as maps,
sequences as tuples, dates as dates, and enums as enums.  Legacy
unversioned blobs migrate forward; newer or damaged blobs are refused
with a typed error.
"""

import json
from datetime import date, datetime, timezone

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from workforce_kernel.domain.codec import (
    FORMAT_NAME,
    SCHEMA_VERSION,
    decode_store,
    decode_value,
    empty_store,
    encode_store,
    encode_value,
    migrate,
)
from workforce_kernel.domain.records import (
    Collection,
    CompanySettings,
    Department,
    Employee,
    LeaveBalance,
    LeaveBalanceDetail,
    LeaveType,
    SubscriptionTier,
    Tenant,
    User,
)
from workforce_kernel.exceptions import CorruptBlobError, UnsupportedBlobVersionError
from workforce_modules.tenancy.demo_data import demo_collections
from workforce_modules.tenancy.service import default_company_settings

SAVED_AT = datetime(2024, 6, 15, 9, 0, tzinfo=timezone.utc)


def _employee(tenant_id: str = "tenant-a") -> Employee:
    return Employee(
        id="emp-1",
        tenant_id=tenant_id,
        name="Fatima Al-Marri",
        qid="29012345678",
        position="Engineer",
        department=Department.ENGINEERING,
        basic_salary=18000.0,
        allowances=4000.0,
        deductions=500.0,
        bank_name="QIB",
        iban="QA50QISB000000000000123456789",
        join_date=date(2022, 3, 15),
        name_ar="فاطمة المري",
    )


def _store_with(tenant_id: str, collections: dict) -> dict:
    return {
        "tenants": {tenant_id: Tenant(id=tenant_id, name="Noor", created_at=SAVED_AT)},
        "collections": {tenant_id: {c.value: tuple(r) for c, r in collections.items()}},
    }


# =============================================================================
# Value tagging
# =============================================================================


class TestValueTags:
    def test_map_is_tagged_not_an_object(self):
        encoded = encode_value({"a": 1})
        assert encoded == {"type": "map", "entries": [["a", 1]]}

    def test_map_keys_keep_their_type(self):
        decoded = decode_value(encode_value({1: "one", "1": "text"}))
        assert decoded == {1: "one", "1": "text"}

    def test_sequences_decode_to_tuples(self):
        assert decode_value(encode_value([1, [2, 3]])) == (1, (2, 3))

    def test_enum_round_trip_keeps_identity(self):
        assert decode_value(encode_value(LeaveType.MATERNITY)) is LeaveType.MATERNITY

    def test_date_and_datetime_stay_distinct(self):
        assert decode_value(encode_value(date(2024, 6, 15))) == date(2024, 6, 15)
        decoded = decode_value(encode_value(SAVED_AT))
        assert isinstance(decoded, datetime)
        assert decoded == SAVED_AT

    def test_record_round_trip(self):
        employee = _employee()
        assert decode_value(encode_value(employee)) == employee

    def test_nested_record_round_trip(self):
        balance = LeaveBalance(
            id="lb-1",
            tenant_id="tenant-a",
            employee_id="emp-1",
            employee_name="Fatima",
            balances=(
                LeaveBalanceDetail(LeaveType.ANNUAL, 21, 10.5),
                LeaveBalanceDetail(LeaveType.SICK, 14, 0),
            ),
        )
        assert decode_value(encode_value(balance)) == balance

    def test_unencodable_type_raises(self):
        with pytest.raises(TypeError):
            encode_value(object())

    @pytest.mark.parametrize(
        "raw",
        [
            {"type": "mystery"},
            {"type": "map"},
            {"type": "map", "entries": [["only-key"]]},
            {"type": "record", "kind": "Spaceship", "fields": {}},
            {"type": "record", "kind": "Tenant"},
            {"type": "enum", "kind": "LeaveType", "value": "Sabbatical"},
            {"type": "enum", "kind": "Nope", "value": "x"},
            {"type": "date", "value": "15/06/2024"},
            {"type": "datetime", "value": 20240615},
        ],
    )
    def test_malformed_tags_are_corrupt(self, raw):
        with pytest.raises(CorruptBlobError):
            decode_value(raw)

    def test_record_failing_validation_is_corrupt(self):
        raw = encode_value(_employee())
        raw["fields"]["basic_salary"] = -5
        with pytest.raises(CorruptBlobError) as exc_info:
            decode_value(raw)
        assert "Employee" in exc_info.value.reason

    def test_record_with_unknown_field_is_corrupt(self):
        raw = encode_value(_employee())
        raw["fields"]["shoe_size"] = 44
        with pytest.raises(CorruptBlobError):
            decode_value(raw)


# =============================================================================
# Envelope
# =============================================================================


class TestEnvelope:
    def test_envelope_fields(self):
        document = json.loads(encode_store(empty_store(), SAVED_AT))
        assert document["format"] == FORMAT_NAME
        assert document["schema_version"] == SCHEMA_VERSION
        assert document["saved_at"] == SAVED_AT.isoformat()

    def test_empty_store_round_trip(self):
        assert decode_store(encode_store(empty_store(), SAVED_AT)) == empty_store()

    def test_demo_tenant_round_trip(self):
        settings = default_company_settings("tenant-demo", "Noor Trading W.L.L.")
        owner = User(
            id="user-tenant-demo-owner",
            tenant_id="tenant-demo",
            username="owner@noor.app",
            name="Mariam",
            role_id="role-tenant-demo-owner",
        )
        collections = demo_collections(
            "tenant-demo", settings, owner, date(2024, 6, 15), "hr@noor.app"
        )
        collections[Collection.COMPANY_SETTINGS] = (settings,)
        store = _store_with("tenant-demo", collections)

        decoded = decode_store(encode_store(store, SAVED_AT))

        assert decoded == store
        employees = decoded["collections"]["tenant-demo"]["employees"]
        assert isinstance(employees, tuple)
        assert employees[0].onboarding_tasks[0].due_date == date(2022, 3, 16)

    def test_unicode_is_written_verbatim(self):
        store = _store_with("tenant-a", {Collection.EMPLOYEES: (_employee(),)})
        assert "فاطمة" in encode_store(store, SAVED_AT)

    @pytest.mark.parametrize("payload", ["", "{not json", "null", "[1, 2]", '"text"'])
    def test_garbage_is_corrupt(self, payload):
        with pytest.raises(CorruptBlobError):
            decode_store(payload)

    def test_newer_schema_refused(self):
        payload = json.dumps(
            {"format": FORMAT_NAME, "schema_version": SCHEMA_VERSION + 1, "store": {}}
        )
        with pytest.raises(UnsupportedBlobVersionError) as exc_info:
            decode_store(payload)
        assert exc_info.value.found_version == SCHEMA_VERSION + 1

    @pytest.mark.parametrize("version", [0, "2", True, None])
    def test_invalid_schema_version_is_corrupt(self, version):
        payload = json.dumps({"format": FORMAT_NAME, "schema_version": version, "store": {}})
        with pytest.raises(CorruptBlobError):
            decode_store(payload)

    def test_wrong_shape_is_corrupt(self):
        payload = json.dumps(
            {
                "format": FORMAT_NAME,
                "schema_version": SCHEMA_VERSION,
                "store": encode_value({"tenants": {}, "collections": {"t": {"employees": 5}}}),
            }
        )
        with pytest.raises(CorruptBlobError):
            decode_store(payload)


# =============================================================================
# Migration
# =============================================================================


class TestLegacyMigration:
    def _legacy_payload(self) -> str:
        settings = CompanySettings(
            id="settings-tenant-a",
            tenant_id="tenant-a",
            company_name="Noor",
            establishment_id="EST-1",
            bank_name="QNB",
            corporate_account_number="QA00",
        )
        legacy = {
            "tenants": {"tenant-a": Tenant(id="tenant-a", name="Noor", tier=SubscriptionTier.PREMIUM)},
            "employees": {"tenant-a": [_employee()]},
            "companySettings": {"tenant-a": settings},
            "companyAssets": {"tenant-a": []},
        }
        return json.dumps(encode_value(legacy))

    def test_unversioned_blob_is_transposed_to_tenant_major(self):
        store = decode_store(self._legacy_payload())

        assert set(store) == {"tenants", "collections"}
        assert store["tenants"]["tenant-a"].tier is SubscriptionTier.PREMIUM
        tenant = store["collections"]["tenant-a"]
        assert tenant[Collection.EMPLOYEES.value][0].name == "Fatima Al-Marri"
        assert tenant[Collection.ASSETS.value] == ()

    def test_single_settings_record_becomes_a_sequence(self):
        store = decode_store(self._legacy_payload())
        settings = store["collections"]["tenant-a"][Collection.COMPANY_SETTINGS.value]
        assert isinstance(settings, tuple)
        assert settings[0].establishment_id == "EST-1"

    def test_migrated_store_reencodes_at_current_version(self):
        store = decode_store(self._legacy_payload())
        document = json.loads(encode_store(store, SAVED_AT))
        assert document["schema_version"] == SCHEMA_VERSION
        assert decode_store(json.dumps(document)) == store

    def test_migrate_refuses_newer_version(self):
        with pytest.raises(UnsupportedBlobVersionError):
            migrate(empty_store(), SCHEMA_VERSION + 1)

    def test_migrate_is_noop_at_current_version(self):
        store = empty_store()
        assert migrate(store, SCHEMA_VERSION) is store


# =============================================================================
# Property: arbitrary JSON-like values survive the round trip
# =============================================================================

_scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-(10**12), max_value=10**12),
    st.floats(allow_nan=False, allow_infinity=False),
    st.text(max_size=20),
    st.dates(),
    st.sampled_from(list(LeaveType)),
)

_values = st.recursive(
    _scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=4).map(tuple),
        st.dictionaries(st.text(max_size=8), children, max_size=4),
    ),
    max_leaves=20,
)


class TestRoundTripProperty:
    @settings(max_examples=200, deadline=None)
    @given(_values)
    def test_encode_then_decode_through_json(self, value):
        text = json.dumps(encode_value(value), ensure_ascii=False)
        assert decode_value(json.loads(text)) == value
