"""
workforce_services -- composition root and external collaborators.

Wires configuration into the kernel and module services
(``WorkforceEngine``), and adapts the text-generation and one-time-code
collaborators.
"""

from workforce_services.engine import WorkforceEngine
from workforce_services.otp import IssueCodeResult, VerificationCodeService
from workforce_services.text_generation import TextGenerationClient

__all__ = [
    "IssueCodeResult",
    "TextGenerationClient",
    "VerificationCodeService",
    "WorkforceEngine",
]
