"""
Workforce Kernel

A multi-tenant record store and compliance core for HR/payroll with:
- Per-tenant serialized mutation
- Atomic whole-collection commits
- Append-only audit trail
- Versioned, tag-preserving persistence to a single local blob
"""

__version__ = "0.1.0"
