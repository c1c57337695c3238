"""
SMPP Socket Transport

This module provides a blocking TCP transport over a pool of SMSC hosts.
Host names are resolved once, at construction, into IPv6 and IPv4 address
lists; open() then tries every address of every host in order until one
accepts the connection. The connected socket stays in non-blocking mode and
all waits are bounded by select() with the configured connect, send and
receive timeouts.
"""

import errno
import ipaddress
import logging
import os
import random
import select
import socket
import struct
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from ..config.settings import ConnectionConfig, IPFamily
from ..exceptions import (
    SMPPConfigurationException,
    SMPPTimeoutException,
    SMPPTransportException,
)
from .base import DebugSink

logger = logging.getLogger(__name__)

_CONNECT_IN_PROGRESS = (errno.EINPROGRESS, errno.EALREADY, errno.EWOULDBLOCK)


@dataclass
class ResolvedHost:
    """A configured host with the addresses it resolved to."""

    hostname: str
    port: int
    ipv6: List[str] = field(default_factory=list)
    ipv4: List[str] = field(default_factory=list)


def _append_unique(addresses: List[str], address: str) -> None:
    if address not in addresses:
        addresses.append(address)


class SocketTransport:
    """
    Blocking TCP transport with multi-host failover.

    Timeouts are given in milliseconds. Addresses are tried IPv6 first unless
    ip_family restricts the pool to one family.
    """

    def __init__(
        self,
        hosts: Sequence[str],
        ports: Union[int, Sequence[int]],
        connect_timeout: int = 5000,
        send_timeout: int = 100,
        receive_timeout: int = 10000,
        ip_family: IPFamily = IPFamily.ANY,
        random_host: bool = False,
        debug: bool = False,
        debug_sink: Optional[DebugSink] = None,
    ):
        """
        Initialize the transport and resolve the host pool.

        Args:
            hosts: Host names or IP literals, tried in order
            ports: Port shared by all hosts, or one port per host
            connect_timeout: Connect deadline per address in milliseconds
            send_timeout: Wait for the socket to accept data in milliseconds
            receive_timeout: Wait for incoming data in milliseconds
            ip_family: Restrict connections to one address family
            random_host: Shuffle the host pool once after resolution
            debug: Emit DNS and connect traces to debug_sink
            debug_sink: Receiver of traces, the module logger by default

        Raises:
            SMPPConfigurationException: If no host resolved to a usable address
        """
        self.connect_timeout = connect_timeout
        self.send_timeout = send_timeout
        self.receive_timeout = receive_timeout
        self.ip_family = ip_family
        self.random_host = random_host
        self.debug = debug
        self.debug_sink: DebugSink = debug_sink or logger

        if isinstance(ports, int):
            port_list = [ports] * len(hosts)
        else:
            port_list = list(ports)

        self._socket: Optional[socket.socket] = None
        self.hosts = self.resolve_hosts(list(zip(hosts, port_list)))

    @classmethod
    def from_config(
        cls,
        config: ConnectionConfig,
        debug: bool = False,
        debug_sink: Optional[DebugSink] = None,
    ) -> 'SocketTransport':
        return cls(
            config.hosts,
            config.host_ports(),
            connect_timeout=config.connect_timeout,
            send_timeout=config.send_timeout,
            receive_timeout=config.receive_timeout,
            ip_family=config.ip_family,
            random_host=config.random_host,
            debug=debug,
            debug_sink=debug_sink,
        )

    def _trace(self, msg: str, *args) -> None:
        if self.debug:
            self.debug_sink.debug(msg, *args)

    def resolve_hosts(self, hosts: List[Tuple[str, int]]) -> List[ResolvedHost]:
        """
        Resolve host names into IPv6 and IPv4 address lists.

        IP literals are used as-is. Hosts that yield no address usable under
        the configured family are dropped from the pool.

        Raises:
            SMPPConfigurationException: If the resulting pool is empty
        """
        pool: List[ResolvedHost] = []
        for hostname, port in hosts:
            resolved = ResolvedHost(hostname, port)
            try:
                literal = ipaddress.ip_address(hostname)
            except ValueError:
                literal = None

            if literal is not None:
                if literal.version == 6:
                    resolved.ipv6.append(hostname)
                else:
                    resolved.ipv4.append(hostname)
            else:
                if self.ip_family != IPFamily.IPV4:
                    for address in self._lookup(hostname, socket.AF_INET6):
                        _append_unique(resolved.ipv6, address)
                    self._trace(
                        'IPv6 addresses for %s: %s', hostname, ', '.join(resolved.ipv6)
                    )
                if self.ip_family != IPFamily.IPV6:
                    for address in self._lookup(hostname, socket.AF_INET):
                        _append_unique(resolved.ipv4, address)
                    # names like "localhost" may only be known to the resolver
                    try:
                        address = socket.gethostbyname(hostname)
                    except OSError as e:
                        self._trace('gethostbyname for %s failed: %s', hostname, e)
                    else:
                        if address != hostname:
                            _append_unique(resolved.ipv4, address)
                    self._trace(
                        'IPv4 addresses for %s: %s', hostname, ', '.join(resolved.ipv4)
                    )

            if (
                (self.ip_family == IPFamily.IPV4 and not resolved.ipv4)
                or (self.ip_family == IPFamily.IPV6 and not resolved.ipv6)
                or (not resolved.ipv4 and not resolved.ipv6)
            ):
                logger.warning(f'Host {hostname} has no usable address, skipping')
                continue
            pool.append(resolved)

        if not pool:
            raise SMPPConfigurationException(
                'No valid hosts was found',
                config_key='hosts',
                config_value=', '.join(h for h, _ in hosts),
            )

        if self.random_host:
            random.shuffle(pool)
        return pool

    def _lookup(self, hostname: str, family: int) -> List[str]:
        kind = 'AAAA' if family == socket.AF_INET6 else 'A'
        try:
            infos = socket.getaddrinfo(hostname, None, family, socket.SOCK_STREAM)
        except socket.gaierror as e:
            self._trace('DNS lookup for %s records for: %s failed; %s', kind, hostname, e)
            return []
        addresses: List[str] = []
        for info in infos:
            _append_unique(addresses, info[4][0])
        return addresses

    def _candidates(self) -> List[Tuple[int, str, int]]:
        candidates = []
        for host in self.hosts:
            if self.ip_family != IPFamily.IPV4:
                candidates.extend((socket.AF_INET6, ip, host.port) for ip in host.ipv6)
            if self.ip_family != IPFamily.IPV6:
                candidates.extend((socket.AF_INET, ip, host.port) for ip in host.ipv4)
        return candidates

    def _attempt_connect(
        self, family: int, ip: str, port: int
    ) -> Tuple[Optional[socket.socket], int, str]:
        """Connect a fresh socket to one address, returning (socket, errno, reason)."""
        try:
            sock = socket.socket(family, socket.SOCK_STREAM)
        except OSError as e:
            self._trace('Could not create socket (%s); %s', family, e)
            return None, e.errno or 0, str(e)

        try:
            sock.setblocking(False)
            err = sock.connect_ex((ip, port))
            if err in _CONNECT_IN_PROGRESS:
                _, writable, failed = select.select(
                    [], [sock], [sock], self.connect_timeout / 1000
                )
                if not writable and not failed:
                    err = errno.ETIMEDOUT
                else:
                    err = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
            if err == 0:
                # stays non-blocking; every wait goes through select
                return sock, 0, ''
        except OSError as e:
            err = e.errno or 0

        reason = 'Connection timed out' if err == errno.ETIMEDOUT else _strerror(err)
        self._trace('Connect to %s:%s failed; %s (%s)', ip, port, reason, err)
        sock.close()
        return None, err, reason

    def open(self) -> None:
        """
        Connect to the first reachable address in the pool.

        Raises:
            SMPPTransportException: If every address failed; carries the last errno
        """
        last_errno: Optional[int] = None
        last_reason = ''
        for family, ip, port in self._candidates():
            label = 'IPv6' if family == socket.AF_INET6 else 'IPv4'
            self._trace('Connecting to %s:%s (%s)...', ip, port, label)
            sock, last_errno, last_reason = self._attempt_connect(family, ip, port)
            if sock is not None:
                self._trace('Connected to %s:%s (%s)!', ip, port, label)
                self._socket = sock
                return

        if last_errno is not None:
            raise SMPPTransportException(
                f'Could not connect to any of the specified hosts; last error: {last_reason}',
                errno=last_errno,
            )
        raise SMPPTransportException('Could not connect to any of the specified hosts')

    def is_open(self) -> bool:
        """
        Check the socket exists and has no pending exceptional condition.

        Raises:
            SMPPTransportException: If the socket state cannot be examined
        """
        if self._socket is None or self._socket.fileno() < 0:
            return False
        try:
            _, _, failed = select.select([], [], [self._socket], 0)
        except (OSError, ValueError) as e:
            raise SMPPTransportException(
                f'Could not examine socket; {e}', original_error=e
            ) from e
        return not failed

    def _require_socket(self) -> socket.socket:
        if self._socket is None:
            raise SMPPTransportException('Socket is not open')
        return self._socket

    def _select(self, read: bool, write: bool, timeout_ms: int):
        sock = self._require_socket()
        try:
            return select.select(
                [sock] if read else [],
                [sock] if write else [],
                [sock],
                timeout_ms / 1000,
            )
        except (OSError, ValueError) as e:
            raise SMPPTransportException(
                f'Could not examine socket; {e}', original_error=e
            ) from e

    def has_data(self) -> bool:
        """Check whether data is waiting, without blocking."""
        readable, _, _ = self._select(True, False, 0)
        return bool(readable)

    def read(self, length: int) -> Optional[bytes]:
        """
        Read up to length bytes.

        Returns:
            The bytes read, or None on timeout or end of stream

        Raises:
            SMPPTransportException: If the socket reports an error
        """
        readable, _, _ = self._select(True, False, self.receive_timeout)
        if not readable:
            return None
        try:
            data = self._require_socket().recv(length)
        except (BlockingIOError, socket.timeout):
            return None
        except OSError as e:
            raise SMPPTransportException(
                f'Could not read {length} bytes from socket; {e}',
                errno=e.errno,
                original_error=e,
            ) from e
        return data or None

    def read_all(self, length: int) -> bytes:
        """
        Read exactly length bytes, waiting up to the receive timeout for each chunk.

        Raises:
            SMPPTimeoutException: If no data arrives within the receive timeout
            SMPPTransportException: On socket errors or if the peer closes the stream
        """
        chunks = []
        remaining = length
        while remaining > 0:
            readable, _, failed = self._select(True, False, self.receive_timeout)
            if failed:
                raise SMPPTransportException(
                    'Socket exception while waiting for data'
                )
            if not readable:
                raise SMPPTimeoutException(
                    'Timed out waiting for data on socket',
                    timeout_duration=self.receive_timeout / 1000,
                    operation='read',
                )
            try:
                chunk = self._require_socket().recv(remaining)
            except BlockingIOError:
                continue
            except OSError as e:
                raise SMPPTransportException(
                    f'Could not read {length} bytes from socket; {e}',
                    errno=e.errno,
                    original_error=e,
                ) from e
            if not chunk:
                raise SMPPTransportException(
                    f'Connection closed by peer after {length - remaining} of {length} bytes'
                )
            chunks.append(chunk)
            remaining -= len(chunk)
        return b''.join(chunks)

    def write(self, data: bytes) -> None:
        """
        Write all of data, waiting up to the send timeout whenever the socket is full.

        Raises:
            SMPPTimeoutException: If the socket does not accept data in time
            SMPPTransportException: On socket errors
        """
        view = memoryview(data)
        while view:
            _, writable, failed = self._select(False, True, self.send_timeout)
            if failed:
                raise SMPPTransportException(
                    'Socket exception while waiting to write data'
                )
            if not writable:
                raise SMPPTimeoutException(
                    'Timed out waiting to write data on socket',
                    timeout_duration=self.send_timeout / 1000,
                    operation='write',
                )
            try:
                sent = self._require_socket().send(view)
            except BlockingIOError:
                continue
            except OSError as e:
                raise SMPPTransportException(
                    f'Could not write {len(data)} bytes to socket; {e}',
                    errno=e.errno,
                    original_error=e,
                ) from e
            view = view[sent:]

    def close(self) -> None:
        """Close the socket, lingering briefly so queued data is delivered."""
        sock, self._socket = self._socket, None
        if sock is None:
            return
        try:
            sock.setblocking(True)
            sock.setsockopt(
                socket.SOL_SOCKET, socket.SO_LINGER, struct.pack('ii', 1, 1)
            )
        except OSError as e:
            logger.debug(f'Could not set linger on close: {e}')
        finally:
            sock.close()


def _strerror(err: int) -> str:
    try:
        return os.strerror(err)
    except ValueError:
        return f'errno {err}'
