"""
Security package: chain ordering, pin extraction and handshake pin verification.
"""
from .errors import (
    PinningError,
    CertificateDecodeError,
    ChainError,
    NoSelfSignedCertificate,
    BrokenChain,
    AmbiguousChain,
    PinVerificationError,
    TLSHandshakeError,
)
from .certificates import decode_pem, encode_der, describe, subject, issuer, is_self_signed
from .chain_sorter import sort_chain, root_cert, peer_cert, pin, pem_to_cert_chain
from .pin_verifier import verify_pin
from .tls_options import TlsOptions, build_tls_options, pem_to_tls_options, chain_to_tls_options, pin_to_tls_options
from .openssl_adapter import PinnedHandshake, create_pinned_context, event_from_openssl
from .client import PinnedTLSClient, HandshakeResult

__all__ = [
    'PinningError',
    'CertificateDecodeError',
    'ChainError',
    'NoSelfSignedCertificate',
    'BrokenChain',
    'AmbiguousChain',
    'PinVerificationError',
    'TLSHandshakeError',
    'decode_pem',
    'encode_der',
    'describe',
    'subject',
    'issuer',
    'is_self_signed',
    'sort_chain',
    'root_cert',
    'peer_cert',
    'pin',
    'pem_to_cert_chain',
    'verify_pin',
    'TlsOptions',
    'build_tls_options',
    'pem_to_tls_options',
    'chain_to_tls_options',
    'pin_to_tls_options',
    'PinnedHandshake',
    'create_pinned_context',
    'event_from_openssl',
    'PinnedTLSClient',
    'HandshakeResult',
]
