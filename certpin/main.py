"""
Command line entry point: inspect a pinned chain or check a host against it.
"""

import os
import sys
import logging
from typing import Any, Dict, List, Optional

from .models.certificate import CertificateInfo
from .security.certificates import describe
from .security.chain_sorter import pem_to_cert_chain
from .security.client import HandshakeResult, PinnedTLSClient
from .security.errors import ChainError, CertificateDecodeError, PinningError
from .security.tls_options import TlsOptions, chain_to_tls_options
from .services.config_service import ConfigService
from .services.logging_service import LoggingService

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_REJECTED = 2


class PinCheckApplication:
    """Loads configuration and the pinned chain, and runs pin checks."""

    def __init__(self, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize the application.

        Args:
            config_path: Path to configuration file (optional)
            overrides: Settings taking precedence over the file (optional)
        """
        self.config_path = config_path or self._get_default_config_path()
        self.config_path_given = config_path is not None
        self.overrides = overrides or {}
        self.logger = logging.getLogger(__name__)
        self.config_service = ConfigService()
        self.config = None
        self.logging_service = None
        self.chain = None
        self.tls_options: Optional[TlsOptions] = None

    def _get_default_config_path(self) -> str:
        """Get the default configuration file path."""
        possible_paths = [
            "config/certpin.properties",
            "certpin.properties",
            os.path.expanduser("~/.certpin/certpin.properties"),
            "/etc/certpin/certpin.properties"
        ]

        for path in possible_paths:
            if os.path.exists(path):
                return path

        return possible_paths[0]

    def initialize(self) -> bool:
        """
        Load configuration, set up logging and build the pin.

        Returns:
            True if initialization successful, False otherwise
        """
        try:
            if os.path.exists(self.config_path):
                self.config = self.config_service.load_config(self.config_path, self.overrides)
            elif self.config_path_given:
                self.logger.warning(f"Configuration file not found: {self.config_path}")
                self.config_service.create_default_config_file(self.config_path)
                self.logger.warning("Default configuration created, edit it and run again")
                return False
            else:
                self.config = self.config_service.load_from_values(self.overrides)

            self.logging_service = LoggingService(self.config)
            self.logger.info(f"Loading pinned chain from: {self.config.pem_path}")

            with open(self.config.pem_path, 'rb') as f:
                pem_data = f.read()

            self.chain = pem_to_cert_chain(pem_data)
            self.tls_options = chain_to_tls_options(self.chain, self.config.ignore_expired_pinned_cert)
            return True

        except (ValueError, OSError, CertificateDecodeError, ChainError) as e:
            self.logger.error(f"Failed to initialize: {e}")
            return False

    def describe_chain(self) -> List[CertificateInfo]:
        """Describe the sorted chain, root first."""
        return [describe(cert) for cert in self.chain]

    def check(self, host: Optional[str] = None, port: Optional[int] = None) -> HandshakeResult:
        """
        Run a pinned handshake against the configured (or given) peer.

        Raises:
            ValueError: If no host is configured
            PinVerificationError: If the peer's certificate does not match the pin
            TLSHandshakeError: If the handshake failed for another reason
        """
        host = host or self.config.host
        port = port or self.config.port
        if not host:
            raise ValueError("No host to check")

        client = PinnedTLSClient(self.tls_options, timeout=self.config.timeout_seconds)
        with self.logging_service.measure_performance("tls_handshake", {'host': host, 'port': port}):
            result = client.check(host, port)

        self.logging_service.log_with_context(
            'info', "Pin accepted",
            host=host, port=port, peer=result.peer_subject, protocol=result.protocol
        )
        return result

    def get_handshake_stats(self) -> Dict[str, Any]:
        """Timing summary of the handshakes run so far."""
        return self.logging_service.get_performance_stats("tls_handshake") if self.logging_service else {}

    def get_status(self) -> dict:
        """Get a summary of the loaded configuration and pin."""
        pin = self.tls_options.pin if self.tls_options else None
        return {
            'config_path': self.config_path,
            'pem_path': self.config.pem_path if self.config else None,
            'root': pin.root_cert.subject.rfc4514_string() if pin else None,
            'pinned': pin.pinned_cert.subject.rfc4514_string() if pin else None,
            'ignore_expired_pinned_cert': self.config.ignore_expired_pinned_cert if self.config else None,
            'host': self.config.host if self.config else None,
            'port': self.config.port if self.config else None,
        }


def _print_certificate(index: int, info: CertificateInfo):
    print(f"[{index}] {info.subject}")
    print(f"    Issuer: {info.issuer}")
    print(f"    Serial: {info.serial_number}")
    print(f"    Valid: {info.not_before.isoformat()} - {info.not_after.isoformat()}"
          f"{'' if info.is_valid else ' (not currently valid)'}")
    print(f"    SHA-256: {info.fingerprint}")


def _print_handshake_stats(stats: Dict[str, Any]):
    if not stats:
        return
    print(f"Handshakes: {stats['success_count']} accepted, {stats['failure_count']} failed, "
          f"avg {stats['avg_duration_ms']:.1f} ms "
          f"(min {stats['min_duration_ms']:.1f}, max {stats['max_duration_ms']:.1f})")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description='SSL/TLS certificate pinning check')
    parser.add_argument('--config', '-c', help='Configuration file path')
    parser.add_argument('--pem', help='PEM file with the root, intermediates and peer certificate')
    parser.add_argument('--host', help='Host to check')
    parser.add_argument('--port', type=int, help='Port to check (default: 443)')
    parser.add_argument('--attempts', type=int, default=1,
                        help='Number of pinned handshakes to run (default: 1)')
    parser.add_argument('--ignore-expired', action='store_true', default=None,
                        help='Accept the pinned certificate even when it has expired')
    parser.add_argument('--show-chain', action='store_true', help='Print the sorted chain and pin, then exit')
    parser.add_argument('--check-config', action='store_true', help='Check configuration and exit')

    args = parser.parse_args(argv)
    if args.attempts < 1:
        parser.error("--attempts must be at least 1")

    overrides = {
        key: value for key, value in (
            ('pem_path', args.pem),
            ('host', args.host),
            ('port', args.port),
            ('ignore_expired_pinned_cert', args.ignore_expired),
        ) if value is not None
    }

    app = PinCheckApplication(config_path=args.config, overrides=overrides)

    if not app.initialize():
        print("Failed to initialize")
        return EXIT_CONFIG_ERROR

    if args.check_config:
        print("Configuration check passed")
        for key, value in app.get_status().items():
            print(f"{key}: {value}")
        return EXIT_OK

    if args.show_chain:
        for index, info in enumerate(app.describe_chain()):
            _print_certificate(index, info)
        status = app.get_status()
        print(f"Pin: root={status['root']!r} peer={status['pinned']!r}")
        return EXIT_OK

    try:
        for _ in range(args.attempts):
            result = app.check()
    except ValueError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except PinningError as e:
        print(f"Rejected: {e}")
        _print_handshake_stats(app.get_handshake_stats())
        return EXIT_REJECTED

    print(f"Accepted: {result.host}:{result.port} presented {result.peer_subject} "
          f"({result.protocol}, {result.cipher}, {result.duration_ms:.1f} ms)")
    _print_handshake_stats(app.get_handshake_stats())
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
