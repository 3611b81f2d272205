"""
Binds the pin verifier to pyOpenSSL's certificate verification callback.

OpenSSL calls the context's verify callback once per certificate (and once
more per verification error) while it validates the peer's chain. Each
connection carries its own PinnedHandshake as app data, so concurrent
handshakes on a shared context never share state.
"""
import logging
from typing import Callable, List, Optional, Tuple

from cryptography import x509
from OpenSSL import SSL, crypto

from ..models.pinning import (
    BadCertEvent,
    BadCertReason,
    ExtensionEvent,
    Fail,
    Outcome,
    Unknown,
    ValidEvent,
    ValidPeerEvent,
    VerificationEvent,
    VerificationOptions,
)
from .tls_options import TlsOptions

logger = logging.getLogger(__name__)

# X509_V_ERR_* codes from OpenSSL's x509_vfy.h
X509_V_ERR_UNHANDLED_CRITICAL_EXTENSION = 34

OPENSSL_BAD_CERT_REASONS = {
    2: BadCertReason.UNKNOWN_CA,                # UNABLE_TO_GET_ISSUER_CERT
    7: BadCertReason.INVALID_SIGNATURE,         # CERT_SIGNATURE_FAILURE
    9: BadCertReason.CERT_NOT_YET_VALID,        # CERT_NOT_YET_VALID
    10: BadCertReason.CERT_EXPIRED,             # CERT_HAS_EXPIRED
    18: BadCertReason.SELFSIGNED_PEER,          # DEPTH_ZERO_SELF_SIGNED_CERT
    19: BadCertReason.UNKNOWN_CA,               # SELF_SIGNED_CERT_IN_CHAIN
    20: BadCertReason.UNKNOWN_CA,               # UNABLE_TO_GET_ISSUER_CERT_LOCALLY
    21: BadCertReason.UNKNOWN_CA,               # UNABLE_TO_VERIFY_LEAF_SIGNATURE
    23: BadCertReason.CERT_REVOKED,             # CERT_REVOKED
    24: BadCertReason.MISSING_BASIC_CONSTRAINT, # INVALID_CA
    26: BadCertReason.INVALID_KEY_USAGE,        # INVALID_PURPOSE
    29: BadCertReason.INVALID_ISSUER,           # SUBJECT_ISSUER_MISMATCH
    32: BadCertReason.INVALID_KEY_USAGE,        # KEYUSAGE_NO_CERTSIGN
    47: BadCertReason.NAME_NOT_PERMITTED,       # PERMITTED_VIOLATION
}


def event_from_openssl(errnum: int, depth: int, preverify_ok: int) -> VerificationEvent:
    """Translate OpenSSL's verify callback arguments into a verification event."""
    if preverify_ok:
        return ValidPeerEvent() if depth == 0 else ValidEvent()

    if errnum == X509_V_ERR_UNHANDLED_CRITICAL_EXTENSION:
        return ExtensionEvent(extension=errnum)

    reason = OPENSSL_BAD_CERT_REASONS.get(errnum, BadCertReason.OTHER)
    detail = f"X509_V_ERR {errnum}" if reason is BadCertReason.OTHER else None
    return BadCertEvent(reason=reason, detail=detail)


class PinnedHandshake:
    """State thread of a single handshake's verification calls."""

    def __init__(self, verify_fun: Tuple[Callable, VerificationOptions]):
        self._fun, self.state = verify_fun
        self.failure: Optional[Fail] = None
        self.peer_cert: Optional[x509.Certificate] = None
        self.decisions: List[Tuple[str, VerificationEvent, Outcome]] = []

    def examine(self, cert: x509.Certificate, event: VerificationEvent, preverify_ok: bool) -> bool:
        """
        Run the decision procedure for one certificate.

        Returns:
            Whether the TLS engine should continue the handshake
        """
        if self.failure is not None:
            return False

        outcome = self._fun(cert, event, self.state)
        self.decisions.append((cert.subject.rfc4514_string(), event, outcome))

        if isinstance(outcome, Fail):
            self.failure = outcome
            return False

        self.state = outcome.state
        if isinstance(event, ValidPeerEvent):
            self.peer_cert = cert

        if isinstance(outcome, Unknown):
            # Defer to the engine's own verdict
            if not preverify_ok:
                self.failure = Fail(BadCertReason.UNHANDLED_EXTENSION)
            return bool(preverify_ok)
        return True


def _verify_callback(conn: SSL.Connection, cert: crypto.X509, errnum: int,
                     depth: int, preverify_ok: int) -> bool:
    handshake = conn.get_app_data()
    if not isinstance(handshake, PinnedHandshake):
        logger.error("Connection has no pinned handshake attached, rejecting certificate")
        return False

    event = event_from_openssl(errnum, depth, preverify_ok)
    logger.debug(f"Verifying certificate at depth {depth}: {event!r}")
    return handshake.examine(cert.to_cryptography(), event, bool(preverify_ok))


def create_pinned_context(tls_options: TlsOptions) -> SSL.Context:
    """Create a client context that trusts only the pinned root and checks the pin."""
    ctx = SSL.Context(SSL.TLS_CLIENT_METHOD)
    ctx.set_min_proto_version(SSL.TLS1_2_VERSION)

    store = ctx.get_cert_store()
    for der in tls_options.cacerts:
        store.add_cert(crypto.X509.from_cryptography(x509.load_der_x509_certificate(der)))

    ctx.set_verify(SSL.VERIFY_PEER, _verify_callback)
    return ctx


def attach_handshake(conn: SSL.Connection, tls_options: TlsOptions) -> PinnedHandshake:
    handshake = PinnedHandshake(tls_options.verify_fun)
    conn.set_app_data(handshake)
    return handshake
