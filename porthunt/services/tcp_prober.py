"""
Single-Port Prober
Connects to one TCP address, classifies the outcome and fingerprints the service
"""

import logging
import socket
import time
from datetime import datetime
from typing import Optional, Sequence

from porthunt.models.scan_result import PortState, TCPPortScanResult, TransportAddress
from porthunt.services.detectors import Connection, Detector, MIN_SOCKET_TIMEOUT
from porthunt.services.service_catalog import lookup_potential_services


logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 1.0
DEFAULT_BANNER_TIMEOUT = 1.0
MAX_BANNER_SIZE = 512

DEADLINE_EXCEEDED = "scan deadline exceeded"


def _remaining(deadline: Optional[float]) -> Optional[float]:
    if deadline is None:
        return None
    return deadline - time.monotonic()


def read_banner(sock: socket.socket, timeout: float, size: int = MAX_BANNER_SIZE) -> bytes:
    """
    Wait up to timeout for the server to talk first

    A timeout, a reset or an immediate close all mean no banner was offered.
    """
    sock.settimeout(timeout)
    try:
        return sock.recv(size)
    except OSError:
        return b""


def probe_tcp_port(
    address: TransportAddress,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    detectors: Sequence[Detector] = (),
    banner_timeout: float = DEFAULT_BANNER_TIMEOUT,
    banner_size: int = MAX_BANNER_SIZE,
    deadline: Optional[float] = None
) -> TCPPortScanResult:
    """
    Probe a single TCP port. Always returns a result, failures are
    reported through the result state.

    Args:
        address: Target IP and port
        connect_timeout: Connection timeout in seconds, 1s when zero or negative
        detectors: Detectors tried in order until one confirms a service
        banner_timeout: How long to wait for an unsolicited banner
        banner_size: Maximum number of banner bytes kept
        deadline: time.monotonic() value no socket operation may run past

    Returns:
        TCPPortScanResult for the address
    """
    if connect_timeout <= 0:
        connect_timeout = DEFAULT_CONNECT_TIMEOUT
    if banner_timeout <= 0:
        banner_timeout = DEFAULT_BANNER_TIMEOUT
    if banner_size <= 0:
        banner_size = MAX_BANNER_SIZE

    at = datetime.now().isoformat()
    potential_services = lookup_potential_services(address.port)

    remaining = _remaining(deadline)
    if remaining is not None:
        if remaining <= 0:
            return TCPPortScanResult(
                address=address,
                state=PortState.UNKNOWN,
                at=at,
                conn_error=DEADLINE_EXCEEDED,
                potential_services=potential_services
            )
        connect_timeout = min(connect_timeout, remaining)

    try:
        sock = socket.create_connection(address.as_tuple(), timeout=connect_timeout)
    except ConnectionRefusedError:
        # Explicit refusal, stop here
        return TCPPortScanResult(
            address=address,
            state=PortState.CLOSED,
            at=at,
            potential_services=potential_services
        )
    except OSError as e:
        # Timeout, unreachable host or network, etc.
        return TCPPortScanResult(
            address=address,
            state=PortState.UNKNOWN,
            at=at,
            conn_error=str(e) or e.__class__.__name__,
            potential_services=potential_services
        )

    try:
        conn = Connection(sock, address, deadline=deadline)
        banner = read_banner(sock, conn.clip_timeout(banner_timeout), banner_size)
        conn.banner = banner

        confirmed_service = None
        for detector in detectors:
            if deadline is not None and _remaining(deadline) <= MIN_SOCKET_TIMEOUT:
                break
            confirmed_service = detector.detect(conn)
            if confirmed_service is not None:
                logger.debug("%s: %s confirmed by %r", address, confirmed_service.value, detector)
                break
    finally:
        sock.close()

    return TCPPortScanResult(
        address=address,
        state=PortState.OPEN,
        at=at,
        banner=banner[:banner_size],
        potential_services=potential_services,
        confirmed_service=confirmed_service
    )
