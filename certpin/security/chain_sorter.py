"""
Orders a set of certificates into a root-to-peer chain and derives the pin.
"""
import logging
from typing import Iterable, List, Union

from cryptography import x509

from .certificates import decode_pem, is_self_signed, issuer, subject
from .errors import AmbiguousChain, BrokenChain, NoSelfSignedCertificate
from ..models.pinning import Pin

logger = logging.getLogger(__name__)


def root_cert(certs: Iterable[x509.Certificate]) -> x509.Certificate:
    """
    Select the chain root.

    When several certificates are self-signed the first one in input
    order is used.

    Raises:
        NoSelfSignedCertificate: If no certificate is self-signed
    """
    roots = [cert for cert in certs if is_self_signed(cert)]
    if not roots:
        raise NoSelfSignedCertificate()

    if len(roots) > 1:
        logger.warning(
            f"{len(roots)} self-signed certificates found, using the first as root: "
            f"{roots[0].subject.rfc4514_string()}"
        )
    return roots[0]


def sort_chain(certs: Iterable[x509.Certificate]) -> List[x509.Certificate]:
    """
    Order certificates from the self-signed root to the peer certificate.

    Args:
        certs: The root, any intermediates and one peer certificate, in any order

    Returns:
        The chain, root first and peer last

    Raises:
        NoSelfSignedCertificate: If there is no root
        BrokenChain: If no remaining certificate was issued by the chain tail
        AmbiguousChain: If more than one remaining certificate was issued by the chain tail
    """
    remaining = list(certs)
    root = root_cert(remaining)
    remaining.remove(root)
    chain = [root]

    while remaining:
        tail = chain[-1]
        tail_subject = subject(tail)
        candidates = [cert for cert in remaining if issuer(cert) == tail_subject]

        if not candidates:
            raise BrokenChain(missing_issuer_for=tail.subject)
        if len(candidates) > 1:
            raise AmbiguousChain(subject=tail.subject, candidates=candidates)

        chain.append(candidates[0])
        remaining.remove(candidates[0])

    logger.debug(
        "Sorted certificate chain: " + " -> ".join(c.subject.rfc4514_string() for c in chain)
    )
    return chain


def peer_cert(certs: Iterable[x509.Certificate]) -> x509.Certificate:
    return sort_chain(certs)[-1]


def pin(certs: Iterable[x509.Certificate]) -> Pin:
    """Derive the (root, peer) pin from an ordered or unordered chain."""
    chain = sort_chain(certs)
    return Pin(root_cert=chain[0], pinned_cert=chain[-1])


def pem_to_cert_chain(pem_data: Union[bytes, str]) -> List[x509.Certificate]:
    return sort_chain(decode_pem(pem_data))
