"""
Certificate decoding and accessors used by the chain sorter.

Decoding and signature checks are delegated to the cryptography library;
this module only exposes the subject/issuer/self-signed view the pinning
code needs.
"""
import logging
from datetime import datetime, timezone
from typing import List, Tuple, Union

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization

from .errors import CertificateDecodeError
from ..models.certificate import CertificateInfo

logger = logging.getLogger(__name__)

NormalizedName = Tuple[Tuple[Tuple[str, object], ...], ...]


def decode_pem(pem_data: Union[bytes, str]) -> List[x509.Certificate]:
    """
    Decode every CERTIFICATE block of a PEM bundle.

    Other PEM blocks (private keys, parameters) are skipped. Certificates
    that appear more than once are kept only at their first position.

    Args:
        pem_data: PEM encoded data, as bytes or text

    Returns:
        Certificates in the order they appear in the input

    Raises:
        CertificateDecodeError: If the data holds no decodable certificate
    """
    try:
        if isinstance(pem_data, str):
            pem_data = pem_data.encode("ascii")
        certs = x509.load_pem_x509_certificates(pem_data)
    except ValueError as e:
        raise CertificateDecodeError(f"Failed to decode PEM certificates: {e}") from e

    if not certs:
        raise CertificateDecodeError("No certificates found in PEM data")

    unique: List[x509.Certificate] = []
    for cert in certs:
        if cert in unique:
            logger.debug(f"Dropping duplicate certificate: {cert.subject.rfc4514_string()}")
            continue
        unique.append(cert)

    logger.debug(f"Decoded {len(unique)} certificate(s) from PEM data")
    return unique


def encode_der(cert: x509.Certificate) -> bytes:
    return cert.public_bytes(serialization.Encoding.DER)


def normalize_name(name: x509.Name) -> NormalizedName:
    """Reduce a distinguished name to a form compared structurally."""
    rdns = []
    for rdn in name.rdns:
        attributes = []
        for attribute in rdn:
            value = attribute.value
            if isinstance(value, str):
                value = " ".join(value.split()).casefold()
            attributes.append((attribute.oid.dotted_string, value))
        rdns.append(tuple(sorted(attributes, key=repr)))
    return tuple(rdns)


def subject(cert: x509.Certificate) -> NormalizedName:
    return normalize_name(cert.subject)


def issuer(cert: x509.Certificate) -> NormalizedName:
    return normalize_name(cert.issuer)


def is_self_signed(cert: x509.Certificate) -> bool:
    """Check the certificate names itself as issuer and its signature verifies with its own key."""
    if subject(cert) != issuer(cert):
        return False

    try:
        cert.verify_directly_issued_by(cert)
    except (ValueError, TypeError, InvalidSignature) as e:
        logger.debug(f"Certificate {cert.subject.rfc4514_string()} is not self-signed: {e!r}")
        return False
    return True


def describe(cert: x509.Certificate) -> CertificateInfo:
    """Extract information from a certificate."""
    now = datetime.now(timezone.utc)
    not_before = cert.not_valid_before_utc
    not_after = cert.not_valid_after_utc

    return CertificateInfo(
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        serial_number=str(cert.serial_number),
        not_before=not_before,
        not_after=not_after,
        is_valid=not_before <= now <= not_after,
        is_self_signed=is_self_signed(cert),
        fingerprint=cert.fingerprint(hashes.SHA256()).hex()
    )
