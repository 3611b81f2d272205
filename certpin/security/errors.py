"""
Exceptions raised while building or enforcing a certificate pin.
"""
from typing import List, Optional

from cryptography import x509


def _name(name: Optional[x509.Name]) -> str:
    return name.rfc4514_string() if name is not None else "<unknown>"


class PinningError(Exception):
    """Base class for all certificate pinning errors."""


class CertificateDecodeError(PinningError):
    """PEM data could not be decoded into certificates."""


class ChainError(PinningError):
    """The certificates do not form a single root-to-peer chain."""


class NoSelfSignedCertificate(ChainError):
    """No certificate in the input is self-signed, so there is no root."""

    def __init__(self):
        super().__init__("no self-signed certificate found to use as the chain root")


class BrokenChain(ChainError):
    """No remaining certificate was issued by the current chain tail."""

    def __init__(self, missing_issuer_for: x509.Name):
        self.missing_issuer_for = missing_issuer_for
        super().__init__(f"broken chain: nothing issued by {_name(missing_issuer_for)!r}")


class AmbiguousChain(ChainError):
    """More than one remaining certificate was issued by the current chain tail."""

    def __init__(self, subject: x509.Name, candidates: Optional[List[x509.Certificate]] = None):
        self.subject = subject
        self.candidates = list(candidates or [])
        super().__init__(
            f"ambiguous chain: {len(self.candidates)} certificates issued by {_name(subject)!r}"
        )


class PinVerificationError(PinningError):
    """The handshake was rejected by the pin verifier."""

    def __init__(self, reason):
        self.reason = reason
        super().__init__(f"pin verification failed: {reason}")


class TLSHandshakeError(PinningError):
    """The TLS handshake failed for a reason other than the pin."""
