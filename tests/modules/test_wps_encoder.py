"""
WPS Salary Information File encoder.

The SIF layout is a fixed bank protocol: these tests pin the exact bytes.
"""

from datetime import date

import pytest

from workforce_kernel.domain.records import CompanySettings, Department, Employee
from workforce_kernel.exceptions import (
    ComplianceSettingsMissingError,
    InvalidPeriodError,
    InvalidSifFieldError,
)
from workforce_modules.payroll.wps import (
    DETAIL_FIELD_COUNT,
    HEADER_FIELD_COUNT,
    encode_detail,
    generate_sif_content,
    payroll_period_code,
    sif_filename,
    total_net_amount,
)


def _settings(establishment_id: str = "EST-7788") -> CompanySettings:
    return CompanySettings(
        id="settings-tenant-a",
        tenant_id="tenant-a",
        company_name="Al Bidda Logistics",
        establishment_id=establishment_id,
        bank_name="QNB",
        corporate_account_number="QA12QNBA000000000000987654321",
    )


def _employee(emp_id: str = "emp-1", **overrides) -> Employee:
    fields = dict(
        id=emp_id,
        tenant_id="tenant-a",
        name="Omar Al-Naimi",
        qid="28811223344",
        position="Accountant",
        department=Department.FINANCE,
        basic_salary=12000.0,
        allowances=2500.0,
        deductions=300.0,
        bank_name="QNB",
        iban="QA58 QNBA 0000 0000 0000 1234 5678 9",
        join_date=date(2020, 1, 1),
    )
    fields.update(overrides)
    return Employee(**fields)


# =============================================================================
# Whole-file layout
# =============================================================================


class TestSifContent:
    def test_exact_bytes_for_two_employees(self):
        employees = [
            _employee(),
            _employee(
                "emp-2",
                name="Aisha Khan",
                qid="29933445566",
                basic_salary=8000.5,
                allowances=0,
                deductions=0.25,
                iban="QA11QIIB000000000000000000001",
            ),
        ]

        content = generate_sif_content(_settings(), employees, "June", 2024)

        assert content == (
            "EST-7788,202406,22200.25,2\n"
            "28811223344,QA58QNBA000000000000123456789,Omar Al-Naimi,"
            "12000.00,2500.00,300.00,14200.00,28811223344,SAL,Salary for June 2024\n"
            "29933445566,QA11QIIB000000000000000000001,Aisha Khan,"
            "8000.50,0.00,0.25,8000.25,29933445566,SAL,Salary for June 2024"
        )

    def test_field_counts(self):
        content = generate_sif_content(_settings(), [_employee()], "June", 2024)
        header, detail = content.split("\n")
        assert len(header.split(",")) == HEADER_FIELD_COUNT
        assert len(detail.split(",")) == DETAIL_FIELD_COUNT

    def test_no_trailing_newline(self):
        content = generate_sif_content(_settings(), [_employee()], "June", 2024)
        assert not content.endswith("\n")
        assert "\r" not in content

    def test_empty_run_ends_with_bare_newline(self):
        assert generate_sif_content(_settings(), [], "June", 2024) == "EST-7788,202406,0.00,0\n"

    def test_header_total_is_sum_of_nets(self):
        employees = [_employee(f"emp-{i}", basic_salary=1000.0 + i) for i in range(5)]
        header = generate_sif_content(_settings(), employees, "March", 2025).split("\n")[0]
        # 5 * (1000 + 2500 - 300) + (0+1+2+3+4)
        assert header == "EST-7788,202503,16010.00,5"

    def test_iban_whitespace_of_every_kind_removed(self):
        detail = encode_detail(_employee(iban="QA58\tQNBA 0000 0000"), "June", 2024)
        assert detail.split(",")[1] == "QA58QNBA00000000"

    def test_qid_repeated_as_reference(self):
        fields = encode_detail(_employee(), "June", 2024).split(",")
        assert fields[0] == fields[7] == "28811223344"
        assert fields[8] == "SAL"


# =============================================================================
# Period and filename
# =============================================================================


class TestPeriod:
    @pytest.mark.parametrize(
        "month, year, expected",
        [
            ("January", 2024, "202401"),
            ("december", 2023, "202312"),
            ("Sep", 2024, "202409"),
            (" June ", 2024, "202406"),
        ],
    )
    def test_period_code(self, month, year, expected):
        assert payroll_period_code(month, year) == expected

    @pytest.mark.parametrize(
        "month, year",
        [("Juneteenth", 2024), ("", 2024), ("June", 0), ("June", 10000), ("June", True)],
    )
    def test_invalid_period(self, month, year):
        with pytest.raises(InvalidPeriodError):
            payroll_period_code(month, year)

    def test_filename(self):
        assert sif_filename("June", 2024) == "WPS_JUNE_2024.sif"

    def test_filename_rejects_unknown_month(self):
        with pytest.raises(InvalidPeriodError):
            sif_filename("Smarch", 2024)


# =============================================================================
# Field validation
# =============================================================================


class TestFieldValidation:
    def test_blank_establishment_id(self):
        with pytest.raises(ComplianceSettingsMissingError) as exc_info:
            generate_sif_content(_settings("   "), [_employee()], "June", 2024)
        assert exc_info.value.missing_field == "establishment_id"

    @pytest.mark.parametrize(
        "field, value",
        [("name", "Khan, Aisha"), ("name", "Aisha\nKhan"), ("qid", "2993,3445566")],
    )
    def test_separator_in_text_field(self, field, value):
        with pytest.raises(InvalidSifFieldError) as exc_info:
            encode_detail(_employee(**{field: value}), "June", 2024)
        assert exc_info.value.field == field
        assert exc_info.value.employee_id == "emp-1"

    def test_separator_in_establishment_id(self):
        with pytest.raises(InvalidSifFieldError):
            generate_sif_content(_settings("EST,1"), [], "June", 2024)

    def test_total_net_amount(self):
        assert total_net_amount([_employee(), _employee("emp-2")]) == 28400.0
        assert total_net_amount([]) == 0.0
