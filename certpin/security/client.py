"""
Outbound TLS connections that enforce a certificate pin.
"""
import ipaddress
import logging
import select
import socket
import time
from dataclasses import dataclass

from OpenSSL import SSL

from .errors import PinVerificationError, TLSHandshakeError
from .openssl_adapter import attach_handshake, create_pinned_context
from .tls_options import TlsOptions


@dataclass
class HandshakeResult:
    """Result of a handshake accepted by the pin."""
    host: str
    port: int
    peer_subject: str
    protocol: str
    cipher: str
    duration_ms: float


def _is_ip_address(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


class PinnedTLSClient:
    """Client that only completes handshakes with the pinned peer certificate."""

    def __init__(self, tls_options: TlsOptions, timeout: float = 10.0):
        self.tls_options = tls_options
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self._context = create_pinned_context(tls_options)

    def check(self, host: str, port: int) -> HandshakeResult:
        """
        Connect, run the TLS handshake against the pin, and disconnect.

        Args:
            host: Host name or IP address of the peer
            port: TCP port of the peer

        Returns:
            HandshakeResult describing the accepted connection

        Raises:
            PinVerificationError: If the pin rejected the peer's certificates
            TLSHandshakeError: If the connection or handshake failed otherwise
        """
        start_time = time.monotonic()
        try:
            sock = socket.create_connection((host, port), timeout=self.timeout)
        except OSError as e:
            raise TLSHandshakeError(f"Failed to connect to {host}:{port}: {e}") from e

        try:
            conn = SSL.Connection(self._context, sock)
            handshake = attach_handshake(conn, self.tls_options)
            if not _is_ip_address(host):
                conn.set_tlsext_host_name(host.encode("idna"))
            conn.set_connect_state()

            try:
                self._do_handshake(conn, sock)
            except SSL.Error as e:
                if handshake.failure is not None:
                    raise PinVerificationError(handshake.failure.reason) from e
                raise TLSHandshakeError(f"TLS handshake with {host}:{port} failed: {e}") from e

            # OpenSSL may accept without a final depth-0 call; the pin must still have been checked
            if handshake.peer_cert is None:
                raise TLSHandshakeError(f"TLS handshake with {host}:{port} completed without a peer check")

            result = HandshakeResult(
                host=host,
                port=port,
                peer_subject=handshake.peer_cert.subject.rfc4514_string(),
                protocol=conn.get_protocol_version_name(),
                cipher=conn.get_cipher_name(),
                duration_ms=(time.monotonic() - start_time) * 1000
            )
            self.logger.info(
                f"Pinned handshake with {host}:{port} accepted "
                f"({result.protocol}, {result.cipher})"
            )

            try:
                conn.shutdown()
            except SSL.Error as e:
                self.logger.debug(f"TLS shutdown with {host}:{port} was not clean: {e}")
            return result
        finally:
            sock.close()

    def _do_handshake(self, conn: SSL.Connection, sock: socket.socket):
        deadline = time.monotonic() + self.timeout
        while True:
            try:
                conn.do_handshake()
                return
            except SSL.WantReadError:
                readable, writable = [sock], []
            except SSL.WantWriteError:
                readable, writable = [], [sock]

            remaining = deadline - time.monotonic()
            if remaining <= 0 or not any(select.select(readable, writable, [], remaining)):
                raise TLSHandshakeError(f"TLS handshake timed out after {self.timeout}s")
