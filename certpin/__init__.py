"""
certpin: SSL/TLS certificate pinning.
"""
from .security.chain_sorter import sort_chain, root_cert, peer_cert, pin, pem_to_cert_chain
from .security.pin_verifier import verify_pin
from .security.tls_options import (
    TlsOptions,
    build_tls_options,
    pem_to_tls_options,
    chain_to_tls_options,
    pin_to_tls_options,
)

__version__ = "0.3.0"

__all__ = [
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
]
