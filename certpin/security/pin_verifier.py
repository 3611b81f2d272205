"""
Handshake-time pin verification.

The TLS engine calls verify_pin once per certificate of the presented
chain, passing the state returned by the previous call. The state is
always the full VerificationOptions, so the expiry tolerance flag is
still available on every later call of the same handshake.
"""
import logging

from cryptography import x509

from ..models.pinning import (
    BadCertEvent,
    BadCertReason,
    ExtensionEvent,
    Fail,
    Outcome,
    PeerCertDiffersFromPinned,
    Unknown,
    Valid,
    ValidEvent,
    ValidPeerEvent,
    VerificationEvent,
    VerificationOptions,
)

logger = logging.getLogger(__name__)


def verify_pin(cert: x509.Certificate, event: VerificationEvent,
               state: VerificationOptions) -> Outcome:
    """
    Decide whether the certificate under examination is acceptable.

    Args:
        cert: The certificate the engine is examining
        event: The engine's classification of that certificate
        state: Options returned by the previous call, or the initial options

    Returns:
        Valid or Unknown carrying the unchanged state, or a terminal Fail
    """
    if not isinstance(state, VerificationOptions):
        raise TypeError(f"verification state must be VerificationOptions, got {type(state).__name__}")

    pinned = state.pinned_cert

    if isinstance(event, ValidPeerEvent):
        if cert == pinned:
            return Valid(state)
        logger.warning(
            f"Rejecting peer certificate {cert.subject.rfc4514_string()}: "
            f"does not match pinned certificate {pinned.subject.rfc4514_string()}"
        )
        return Fail(PeerCertDiffersFromPinned(
            presented_subject=cert.subject,
            pinned_subject=pinned.subject
        ))

    if isinstance(event, BadCertEvent):
        # Only the pinned certificate itself may be expired, and only when allowed
        if (event.reason is BadCertReason.CERT_EXPIRED
                and cert == pinned
                and state.ignore_expired_pinned_cert):
            logger.info(f"Accepting expired pinned certificate {pinned.subject.rfc4514_string()}")
            return Valid(state)
        logger.warning(f"Rejecting certificate {cert.subject.rfc4514_string()}: {event.reason.value}")
        return Fail(event.reason)

    if isinstance(event, ExtensionEvent):
        return Unknown(state)

    if isinstance(event, ValidEvent):
        return Valid(state)

    raise TypeError(f"unrecognised verification event: {event!r}")
