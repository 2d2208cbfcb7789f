"""
Pytest Configuration and Fixtures
Shared fixtures for all test modules
"""

import pytest
import os
import sys
import socket
import tempfile
import threading
import time
from unittest.mock import MagicMock

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)


# ============================================================
# CONFIGURATION
# ============================================================

def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "live: marks tests that require live network access"
    )
    config.addinivalue_line(
        "markers", "unit: marks unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: marks integration tests"
    )


# ============================================================
# FIXTURES - BASIC
# ============================================================

@pytest.fixture
def test_domain():
    """Test domain fixture"""
    return "example.com"


@pytest.fixture
def test_ip():
    """Test IP address fixture"""
    return "93.184.216.34"


@pytest.fixture
def localhost():
    """Localhost fixture"""
    return "127.0.0.1"


@pytest.fixture
def temp_dir():
    """Temporary directory fixture"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


# ============================================================
# FIXTURES - LOCAL TCP SERVERS
# ============================================================

class LocalTCPServer:
    """Listens on 127.0.0.1 and runs handler(conn) for every accepted connection"""

    def __init__(self, handler):
        self.handler = handler
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(('127.0.0.1', 0))
        self.sock.listen(16)
        self.sock.settimeout(0.1)
        self.port = self.sock.getsockname()[1]
        self._stop = threading.Event()
        self.thread = threading.Thread(target=self._serve, daemon=True)
        self.thread.start()

    def _serve(self):
        while not self._stop.is_set():
            try:
                conn, _ = self.sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            threading.Thread(target=self._handle, args=(conn,), daemon=True).start()

    def _handle(self, conn):
        with conn:
            conn.settimeout(2)
            try:
                self.handler(conn)
            except OSError:
                pass

    def close(self):
        self._stop.set()
        self.thread.join(timeout=1)
        self.sock.close()


def drain(conn):
    """Read until the client goes away"""
    while conn.recv(1024):
        pass


def banner_handler(banner):
    """Server talking first, like SSH or FTP"""
    def handle(conn):
        conn.sendall(banner)
        drain(conn)
    return handle


def http_handler(conn):
    """Minimal HTTP server answering any request"""
    data = b""
    while b"\r\n\r\n" not in data:
        chunk = conn.recv(1024)
        if not chunk:
            return
        data += chunk
    conn.sendall(b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\nConnection: close\r\n\r\nok")


def trickle_handler(response, delay):
    """HTTP server sending its response one byte at a time"""
    def handle(conn):
        data = b""
        while b"\r\n\r\n" not in data:
            chunk = conn.recv(1024)
            if not chunk:
                return
            data += chunk
        for byte in response:
            conn.sendall(bytes([byte]))
            time.sleep(delay)
    return handle


def silent_handler(conn):
    """Accepts and never answers"""
    drain(conn)


@pytest.fixture
def tcp_server():
    """Factory starting local TCP servers, all closed at teardown"""
    servers = []

    def _start(handler):
        server = LocalTCPServer(handler)
        servers.append(server)
        return server

    yield _start

    for server in servers:
        server.close()


@pytest.fixture
def refused_port():
    """A localhost port nothing listens on"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(('127.0.0.1', 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


# ============================================================
# FIXTURES - MOCKS
# ============================================================

@pytest.fixture
def mock_socket():
    """Connected socket mock sending no banner"""
    sock = MagicMock()
    sock.recv.side_effect = socket.timeout('timed out')
    return sock


@pytest.fixture
def mock_dns_resolver():
    """Mock DNS resolver answering A and MX queries"""
    mock_a = MagicMock()
    mock_a.__str__ = lambda x: "93.184.216.34"

    mock_mx = MagicMock()
    mock_mx.preference = 10
    mock_mx.exchange = "mail.example.com."

    def make_answer(records):
        answer = MagicMock()
        answer.__iter__ = lambda x: iter(records)
        answer.rrset = MagicMock()
        answer.rrset.ttl = 3600
        return answer

    def resolve_side_effect(domain, record_type):
        import dns.resolver
        if record_type == 'A':
            return make_answer([mock_a])
        if record_type == 'MX':
            return make_answer([mock_mx])
        raise dns.resolver.NoAnswer()

    resolver = MagicMock()
    resolver.resolve.side_effect = resolve_side_effect
    return resolver


# ============================================================
# FIXTURES - FLASK
# ============================================================

@pytest.fixture
def app(temp_dir):
    """Flask application in testing mode"""
    from porthunt import create_app
    from porthunt.config import TestingConfig

    class Config(TestingConfig):
        REPORTS_FOLDER = os.path.join(temp_dir, 'reports')

    return create_app(Config)


@pytest.fixture
def client(app):
    """Flask test client"""
    return app.test_client()
