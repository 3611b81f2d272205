"""
Pinning data models: the pin itself, the per-handshake verification
options, and the events and outcomes of the handshake decision procedure.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from cryptography import x509


@dataclass(frozen=True)
class Pin:
    """The root certificate to trust and the peer certificate that must match."""
    root_cert: x509.Certificate
    pinned_cert: x509.Certificate


@dataclass(frozen=True)
class VerificationOptions:
    """State threaded through every decision call of one handshake."""
    pinned_cert: x509.Certificate
    ignore_expired_pinned_cert: bool = False


class BadCertReason(Enum):
    """Reasons the TLS engine's built-in checks may reject a certificate."""
    CERT_EXPIRED = "cert_expired"
    CERT_NOT_YET_VALID = "cert_not_yet_valid"
    INVALID_ISSUER = "invalid_issuer"
    INVALID_SIGNATURE = "invalid_signature"
    UNKNOWN_CA = "unknown_ca"
    SELFSIGNED_PEER = "selfsigned_peer"
    MISSING_BASIC_CONSTRAINT = "missing_basic_constraint"
    INVALID_KEY_USAGE = "invalid_key_usage"
    NAME_NOT_PERMITTED = "name_not_permitted"
    CERT_REVOKED = "cert_revoked"
    UNHANDLED_EXTENSION = "unhandled_extension"
    OTHER = "other"


@dataclass(frozen=True)
class PeerCertDiffersFromPinned:
    """Rejection reason: the peer presented a certificate other than the pinned one."""
    presented_subject: x509.Name
    pinned_subject: x509.Name

    def __str__(self):
        return (
            f"peer certificate differs from pinned: presented "
            f"{self.presented_subject.rfc4514_string()!r}, pinned "
            f"{self.pinned_subject.rfc4514_string()!r}"
        )


# Verification events

@dataclass(frozen=True)
class ValidEvent:
    """An intermediate or root certificate passed the engine's built-in checks."""


@dataclass(frozen=True)
class ValidPeerEvent:
    """The peer (leaf) certificate passed the engine's built-in checks."""


@dataclass(frozen=True)
class ExtensionEvent:
    """The engine met a certificate extension it does not handle itself."""
    extension: Any = None


@dataclass(frozen=True)
class BadCertEvent:
    """The engine's built-in checks rejected the certificate."""
    reason: BadCertReason
    detail: Optional[str] = None


VerificationEvent = Union[ValidEvent, ValidPeerEvent, ExtensionEvent, BadCertEvent]


# Decision outcomes

@dataclass(frozen=True)
class Valid:
    state: VerificationOptions


@dataclass(frozen=True)
class Unknown:
    state: VerificationOptions


@dataclass(frozen=True)
class Fail:
    reason: Union[BadCertReason, PeerCertDiffersFromPinned]

    def __str__(self):
        if isinstance(self.reason, BadCertReason):
            return f"bad certificate: {self.reason.value}"
        return str(self.reason)


Outcome = Union[Valid, Unknown, Fail]
