"""
Certificate summary model.
"""
from dataclasses import dataclass
from datetime import datetime


@dataclass
class CertificateInfo:
    """Information about a certificate."""
    subject: str
    issuer: str
    serial_number: str
    not_before: datetime
    not_after: datetime
    is_valid: bool
    is_self_signed: bool
    fingerprint: str
