"""
Scan Result Models
Data models for port probes, per-host port reports and combined recon reports
"""

from dataclasses import dataclass, field, asdict
from typing import List, Dict, Optional, Any, Tuple
from datetime import datetime
from enum import Enum
import ipaddress
import json
import os


MIN_PORT_NUMBER = 0
MAX_PORT_NUMBER = 65535


# ============================================================
# ENUMS
# ============================================================

class PortState(Enum):
    """Outcome of a TCP connection attempt"""
    UNKNOWN = "unknown"  # timeouts, unreachable, cancelled, etc.
    CLOSED = "closed"    # connection explicitly refused
    OPEN = "open"        # connection successfully established


class Service(Enum):
    """Networked application running on a server"""
    CPANEL = "cpanel"
    CUPS = "cups"
    DNS = "dns"
    DOCKER = "docker"
    FTP = "ftp"
    IMAP = "imap"
    KERBEROS = "kerberos"
    HTTP = "http"
    MYSQL = "mysql"
    NFS = "nfs"
    NTP = "ntp"
    POP3 = "pop3"
    SFTP = "sftp"
    SSH = "ssh"
    SMTP = "smtp"
    SQUID = "squid"
    SYSLOG = "syslog"
    TELNET = "telnet"
    NODE_EXPORTER = "node-exporter"
    VNC = "vnc"


class ScanStatus(Enum):
    """Scan status values"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# ============================================================
# BASE MODELS
# ============================================================

class BaseModel:
    """Base model with common functionality, mixed into dataclasses"""

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary"""
        def serialize(obj):
            if isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, datetime):
                return obj.isoformat()
            elif isinstance(obj, bytes):
                return obj.decode('utf-8', errors='replace')
            elif isinstance(obj, BaseModel):
                return obj.to_dict()
            elif isinstance(obj, (list, tuple)):
                return [serialize(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: serialize(v) for k, v in obj.items()}
            elif isinstance(obj, set):
                return [serialize(item) for item in obj]
            return obj

        return {k: serialize(v) for k, v in asdict(self).items()}

    def to_json(self, indent: int = 2) -> str:
        """Convert model to JSON string"""
        return json.dumps(self.to_dict(), indent=indent, default=str)


# ============================================================
# TRANSPORT ADDRESS
# ============================================================

@dataclass(frozen=True)
class TransportAddress(BaseModel):
    """An IP address plus a TCP port number"""

    ip: str
    port: int

    def __post_init__(self):
        # Normalizes the textual form ("::0001" -> "::1") and rejects hostnames
        normalized = str(ipaddress.ip_address(self.ip.strip()))
        object.__setattr__(self, 'ip', normalized)

        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ValueError(f"Invalid port: {self.port!r}")
        if not MIN_PORT_NUMBER <= self.port <= MAX_PORT_NUMBER:
            raise ValueError(f"Port out of range: {self.port}")

    @property
    def is_ipv6(self) -> bool:
        return ipaddress.ip_address(self.ip).version == 6

    def as_tuple(self) -> Tuple[str, int]:
        """Address in the form accepted by socket.create_connection"""
        return (self.ip, self.port)

    def __str__(self) -> str:
        if self.is_ipv6:
            return f"[{self.ip}]:{self.port}"
        return f"{self.ip}:{self.port}"


# ============================================================
# PORT SCAN MODELS
# ============================================================

@dataclass(frozen=True)
class TCPPortScanResult(BaseModel):
    """Result of probing a single TCP port"""

    address: TransportAddress
    state: PortState = PortState.UNKNOWN
    at: str = field(default_factory=lambda: datetime.now().isoformat())

    # Only set when the connection attempt failed for a reason other than refusal
    conn_error: Optional[str] = None

    banner: bytes = b""
    potential_services: Tuple[Service, ...] = ()
    confirmed_service: Optional[Service] = None

    def __post_init__(self):
        if self.state != PortState.OPEN and (self.banner or self.confirmed_service):
            raise ValueError(f"{self.state.value} result cannot carry a banner or a confirmed service")

    @property
    def port(self) -> int:
        return self.address.port

    @property
    def is_open(self) -> bool:
        return self.state == PortState.OPEN

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['address'] = str(self.address)
        data['ip'] = self.address.ip
        data['port'] = self.address.port
        return data


@dataclass
class PortScanReport(BaseModel):
    """Per-host port scan report, one result per requested port"""

    # Identification
    scan_id: str = field(default_factory=lambda: f"port_{datetime.now().strftime('%Y%m%d%H%M%S')}")
    scan_type: str = "port_scan"

    # Target
    target_ip: str = ""

    # Results keyed by port number
    results: Dict[int, TCPPortScanResult] = field(default_factory=dict)

    # Timing
    start_time: str = ""
    end_time: str = ""
    duration: float = 0.0

    # Status
    status: ScanStatus = ScanStatus.PENDING

    def add_result(self, result: TCPPortScanResult) -> None:
        """Record the result for a port"""
        self.results[result.port] = result

    def sorted_results(self) -> List[TCPPortScanResult]:
        """Results ordered by port number"""
        return [self.results[port] for port in sorted(self.results)]

    @property
    def open_ports(self) -> List[TCPPortScanResult]:
        return [r for r in self.sorted_results() if r.is_open]

    @property
    def ports_scanned(self) -> int:
        return len(self.results)

    def count(self, state: PortState) -> int:
        """Number of ports in the given state"""
        return sum(1 for r in self.results.values() if r.state == state)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['results'] = [r.to_dict() for r in self.sorted_results()]
        data['ports_scanned'] = self.ports_scanned
        data['open_count'] = self.count(PortState.OPEN)
        data['closed_count'] = self.count(PortState.CLOSED)
        data['unknown_count'] = self.count(PortState.UNKNOWN)
        return data


# ============================================================
# RECON MODELS
# ============================================================

@dataclass
class WebsiteInfo(BaseModel):
    """Web presence of a host"""

    host: str
    robots_txt: Optional[str] = None
    pages: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass
class HuntReport(BaseModel):
    """Combined report for a domain: DNS, WHOIS, ports and website"""

    # Identification
    scan_id: str = field(default_factory=lambda: f"hunt_{datetime.now().strftime('%Y%m%d%H%M%S')}")
    scan_type: str = "hunt"

    # Target
    domain: str = ""
    ip_addresses: List[str] = field(default_factory=list)
    linked_domains: List[str] = field(default_factory=list)

    # Collaborator results
    dns: Dict[str, Any] = field(default_factory=dict)
    whois: Optional[Dict[str, Any]] = None
    ports: Optional[PortScanReport] = None
    website: Optional[WebsiteInfo] = None

    # Timing
    start_time: str = ""
    end_time: str = ""
    duration: float = 0.0

    # Status
    success: bool = True
    error: Optional[str] = None

    # Metadata
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.ports is not None:
            data['ports'] = self.ports.to_dict()
        return data


# ============================================================
# UTILITY FUNCTIONS
# ============================================================

def save_scan_result(result: BaseModel, directory: str = 'reports') -> str:
    """
    Save scan result to JSON file

    Args:
        result: Scan result model
        directory: Directory to save to

    Returns:
        Path to saved file
    """
    os.makedirs(directory, exist_ok=True)

    scan_id = getattr(result, 'scan_id', f"scan_{datetime.now().strftime('%Y%m%d%H%M%S')}")

    filepath = os.path.join(directory, f"{scan_id}.json")

    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(result.to_json())

    return filepath


def load_scan_result(filepath: str) -> Optional[Dict[str, Any]]:
    """
    Load scan result from JSON file

    Args:
        filepath: Path to JSON file

    Returns:
        Dict with scan result data or None
    """
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError):
        return None
