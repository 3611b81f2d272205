"""
Data models for the certificate pinning library.
"""
from .config import Config, ConfigValidationError, ConfigValidationResult
from .certificate import CertificateInfo
from .pinning import (
    Pin,
    VerificationOptions,
    BadCertReason,
    PeerCertDiffersFromPinned,
    ValidEvent,
    ValidPeerEvent,
    ExtensionEvent,
    BadCertEvent,
    Valid,
    Unknown,
    Fail,
)

__all__ = [
    'Config', 'ConfigValidationError', 'ConfigValidationResult',
    'CertificateInfo',
    'Pin', 'VerificationOptions', 'BadCertReason', 'PeerCertDiffersFromPinned',
    'ValidEvent', 'ValidPeerEvent', 'ExtensionEvent', 'BadCertEvent',
    'Valid', 'Unknown', 'Fail',
]
