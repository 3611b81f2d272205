"""
Assembly of the TLS configuration that enforces a pin.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Tuple, Union

from cryptography import x509

from .certificates import encode_der
from .chain_sorter import pem_to_cert_chain, pin
from .pin_verifier import verify_pin
from ..models.pinning import Pin, VerificationOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TlsOptions:
    """Trusted root plus the verification hook and its initial state."""
    cacerts: Tuple[bytes, ...]
    verify_fun: Tuple[Callable, VerificationOptions]

    @property
    def pin(self) -> Pin:
        root = x509.load_der_x509_certificate(self.cacerts[0])
        return Pin(root_cert=root, pinned_cert=self.verify_fun[1].pinned_cert)


def pin_to_tls_options(certificate_pin: Pin, ignore_expired_pinned_cert: bool) -> TlsOptions:
    if not isinstance(ignore_expired_pinned_cert, bool):
        raise TypeError("ignore_expired_pinned_cert must be a bool")

    options = VerificationOptions(
        pinned_cert=certificate_pin.pinned_cert,
        ignore_expired_pinned_cert=ignore_expired_pinned_cert
    )
    logger.info(
        f"Pinning {certificate_pin.pinned_cert.subject.rfc4514_string()} "
        f"under root {certificate_pin.root_cert.subject.rfc4514_string()}"
        f"{' (expiry tolerated)' if ignore_expired_pinned_cert else ''}"
    )
    return TlsOptions(
        cacerts=(encode_der(certificate_pin.root_cert),),
        verify_fun=(verify_pin, options)
    )


def chain_to_tls_options(chain: Iterable[x509.Certificate],
                         ignore_expired_pinned_cert: bool) -> TlsOptions:
    return pin_to_tls_options(pin(chain), ignore_expired_pinned_cert)


def pem_to_tls_options(pem_data: Union[bytes, str],
                       ignore_expired_pinned_cert: bool) -> TlsOptions:
    """
    Build TLS options pinning the peer certificate of a PEM bundle.

    Args:
        pem_data: PEM holding the root, any intermediates and the peer certificate
        ignore_expired_pinned_cert: Accept the pinned certificate even when expired

    Returns:
        TlsOptions ready to hand to the TLS engine

    Raises:
        CertificateDecodeError: If the PEM data holds no certificates
        ChainError: If the certificates do not form a single chain
        TypeError: If ignore_expired_pinned_cert is not a bool
    """
    return chain_to_tls_options(pem_to_cert_chain(pem_data), ignore_expired_pinned_cert)


build_tls_options = pem_to_tls_options
