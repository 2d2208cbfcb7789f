"""
Service Detectors
Active probes run over an open TCP connection to confirm the application protocol
"""

import http.client
import io
import ipaddress
import re
import socket
import time
from abc import ABC, abstractmethod
from typing import Optional

from porthunt.models.scan_result import Service, TransportAddress
from porthunt.services.user_agents import random_user_agent


DEFAULT_WRITE_TIMEOUT = 5.0
DEFAULT_READ_TIMEOUT = 1.0

# Smallest timeout handed to a socket, 0 would switch it to non-blocking mode
MIN_SOCKET_TIMEOUT = 0.001


class Connection:
    """
    An established TCP connection handed to detectors

    The prober owns the socket: detectors may read, write and change its
    timeout, but never close it.
    """

    def __init__(
        self,
        sock: socket.socket,
        address: TransportAddress,
        banner: bytes = b"",
        deadline: Optional[float] = None
    ):
        self.sock = sock
        self.address = address
        self.banner = banner
        self.deadline = deadline

    def clip_timeout(self, timeout: float) -> float:
        """Shorten a timeout so it never runs past the scan deadline"""
        if self.deadline is not None:
            timeout = min(timeout, self.deadline - time.monotonic())
        return max(timeout, MIN_SOCKET_TIMEOUT)

    def reader(self, timeout: float) -> io.BufferedReader:
        """
        Buffered reader over the socket that gives up once timeout seconds
        have passed in total, however the peer paces its bytes
        """
        deadline = time.monotonic() + self.clip_timeout(timeout)
        return io.BufferedReader(_DeadlineReader(self.sock, deadline))


class _DeadlineReader(io.RawIOBase):
    """Raw socket reader bounded by an absolute time.monotonic() deadline"""

    def __init__(self, sock: socket.socket, deadline: float):
        self.sock = sock
        self.deadline = deadline

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        remaining = self.deadline - time.monotonic()
        if remaining <= 0:
            raise socket.timeout('timed out')
        self.sock.settimeout(max(remaining, MIN_SOCKET_TIMEOUT))
        return self.sock.recv_into(buffer)


class _ReaderSocket:
    """Hands a prepared reader to http.client, which only calls makefile()"""

    def __init__(self, fp: io.BufferedReader):
        self.fp = fp

    def makefile(self, mode, *args, **kwargs):
        return self.fp


class Detector(ABC):
    """Confirms whether a specific protocol is spoken on a connection"""

    name = "detector"

    @abstractmethod
    def detect(self, conn: Connection) -> Optional[Service]:
        """Return the confirmed service, or None when it cannot be confirmed"""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class HTTPDetector(Detector):
    """
    Sends a HTTP request to the remote server and confirms HTTP when the
    server replies with a well-formed HTTP response.

    Args:
        http_host: Value of the Host header (the target's virtual host)
        user_agent: Fixed User-Agent, a random one is picked per request when empty
        write_timeout: Time allowed to send the request
        read_timeout: Time allowed to receive the response status line and headers
    """

    name = "http"

    def __init__(
        self,
        http_host: str,
        user_agent: Optional[str] = None,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT
    ):
        if not http_host or not http_host.strip():
            raise ValueError("HTTP host is mandatory")

        self.http_host = http_host.strip()
        # Header values go out as ASCII, reject anything else up front
        self.http_host.encode('ascii')
        self.user_agent = user_agent
        self.write_timeout = write_timeout if write_timeout > 0 else DEFAULT_WRITE_TIMEOUT
        self.read_timeout = read_timeout if read_timeout > 0 else DEFAULT_READ_TIMEOUT

    @property
    def host_header(self) -> str:
        """Host header value, IPv6 literals go in brackets"""
        try:
            if ipaddress.ip_address(self.http_host).version == 6:
                return f'[{self.http_host}]'
        except ValueError:
            pass
        return self.http_host

    def build_request(self) -> bytes:
        """Serialize a GET / request, headers only"""
        user_agent = self.user_agent or random_user_agent()
        lines = [
            'GET / HTTP/1.1',
            f'Host: {self.host_header}',
            f'User-Agent: {user_agent}',
            '',
            '',
        ]
        return '\r\n'.join(lines).encode('latin-1', errors='replace')

    def detect(self, conn: Connection) -> Optional[Service]:
        try:
            conn.sock.settimeout(conn.clip_timeout(self.write_timeout))
            conn.sock.sendall(self.build_request())
        except OSError:
            return None

        # The read timeout bounds the whole status line and headers, not each recv
        fp = conn.reader(self.read_timeout)
        response = http.client.HTTPResponse(_ReaderSocket(fp), method='GET')
        try:
            response.begin()
        except (http.client.HTTPException, OSError):
            return None
        finally:
            response.close()
            fp.close()

        return Service.HTTP

    def __repr__(self) -> str:
        return f"HTTPDetector(http_host={self.http_host!r})"


class SSHDetector(Detector):
    """Confirms SSH from the identification string servers send on connect"""

    name = "ssh"

    SSH_BANNER = re.compile(rb'^SSH-\d+\.\d+-')

    def __init__(self, read_timeout: float = DEFAULT_READ_TIMEOUT):
        self.read_timeout = read_timeout if read_timeout > 0 else DEFAULT_READ_TIMEOUT

    def detect(self, conn: Connection) -> Optional[Service]:
        banner = conn.banner
        if not banner:
            try:
                conn.sock.settimeout(conn.clip_timeout(self.read_timeout))
                banner = conn.sock.recv(255)
            except OSError:
                return None

        if self.SSH_BANNER.match(banner):
            return Service.SSH
        return None


DETECTORS = {
    'http': HTTPDetector,
    'ssh': SSHDetector,
}


def build_detectors(
    names,
    http_host: Optional[str] = None,
    user_agent: Optional[str] = None,
    write_timeout: float = DEFAULT_WRITE_TIMEOUT,
    read_timeout: float = DEFAULT_READ_TIMEOUT
):
    """
    Build detectors by name, keeping the given order

    Raises:
        ValueError: unknown detector name, or 'http' without a host
    """
    detectors = []
    for name in names:
        if name not in DETECTORS:
            raise ValueError(f"Unknown detector: {name!r}")
        if name == 'http':
            detectors.append(HTTPDetector(
                http_host,
                user_agent=user_agent,
                write_timeout=write_timeout,
                read_timeout=read_timeout
            ))
        else:
            detectors.append(DETECTORS[name](read_timeout=read_timeout))
    return detectors
