"""
Workforce modules -- business services over the kernel record store.

Each module owns one area (employees, leave, payroll, tenancy, documents,
assets, attendance, recruitment).  Modules depend on ``workforce_kernel``
and never on ``workforce_services`` or ``workforce_config``.
"""
