"""
Port Scanner Service
Scans the TCP ports of one IP address and fingerprints the services found
"""

import concurrent.futures
import logging
import threading
import time
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence, Union

from porthunt.models.scan_result import (
    PortScanReport,
    PortState,
    ScanStatus,
    TCPPortScanResult,
    TransportAddress
)
from porthunt.services.detectors import Detector
from porthunt.services.notifier import LogType, Notifier, describe_result, no_log
from porthunt.services.service_catalog import (
    all_ports,
    common_ports,
    lookup_potential_services,
    parse_ports
)
from porthunt.services.tcp_prober import (
    DEFAULT_BANNER_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    MAX_BANNER_SIZE,
    probe_tcp_port
)
from porthunt.services.utils import generate_scan_id, is_valid_ip


logger = logging.getLogger(__name__)

SCAN_CANCELLED = "scan cancelled"


class PortScanner:
    """
    Port Scanner for one target IP address

    Features:
    - TCP connect scan with refused/unknown/open classification
    - Bounded thread pool
    - Banner grabbing
    - Pluggable service detectors
    - Overall scan deadline and cooperative cancellation
    - Progress callbacks and notifications
    """

    def __init__(
        self,
        target_ip: str,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        banner_timeout: float = DEFAULT_BANNER_TIMEOUT,
        max_threads: int = 100,
        detectors: Optional[Sequence[Detector]] = None,
        scan_timeout: Optional[float] = None,
        banner_size: int = MAX_BANNER_SIZE,
        notify: Optional[Notifier] = None
    ):
        """
        Initialize Port Scanner

        Args:
            target_ip: Resolved IP address of the target
            connect_timeout: Connection timeout per port in seconds
            banner_timeout: Banner read timeout per port in seconds
            max_threads: Maximum concurrent probes
            detectors: Ordered detectors run on every open port
            scan_timeout: Overall time budget for a scan, unlimited when None
            banner_size: Maximum banner bytes kept per port
            notify: Notifier receiving one line per port result
        """
        if not is_valid_ip(target_ip):
            raise ValueError(f"Invalid target IP address: {target_ip!r}")
        if max_threads < 1:
            raise ValueError("max_threads must be >= 1")

        self.target_ip = target_ip
        self.connect_timeout = connect_timeout
        self.banner_timeout = banner_timeout
        self.max_threads = max_threads
        self.detectors = list(detectors or [])
        self.scan_timeout = float(scan_timeout) if scan_timeout else None
        self.banner_size = banner_size
        self.notify = notify or no_log()
        self.scan_id = generate_scan_id()
        self.is_scanning = False
        self.stop_scan = False
        self._lock = threading.Lock()
        self._report: Optional[PortScanReport] = None

    def resolve_ports(self, ports: Union[str, Iterable[int], None] = None, scan_type: str = 'tcp') -> List[int]:
        """
        Turn a port specification into a sorted list of ports

        Args:
            ports: Port spec string ('80', '1-1000', '22,80'), an iterable of ports, or None
            scan_type: 'common' for catalog ports, 'full' for 1-65535, anything else uses ports
        """
        if scan_type == 'common':
            return common_ports()
        if scan_type == 'full':
            return all_ports()
        if ports is None:
            return common_ports()
        if isinstance(ports, str):
            return parse_ports(ports)
        return sorted({p for p in ports if 1 <= p <= 65535})

    def scan_port(self, port: int, deadline: Optional[float] = None) -> TCPPortScanResult:
        """
        Scan a single port

        Args:
            port: Port number to scan
            deadline: time.monotonic() value the probe may not run past

        Returns:
            TCPPortScanResult for the port
        """
        address = TransportAddress(self.target_ip, port)

        if self.stop_scan:
            return self._skipped(address, SCAN_CANCELLED)

        return probe_tcp_port(
            address,
            connect_timeout=self.connect_timeout,
            detectors=self.detectors,
            banner_timeout=self.banner_timeout,
            banner_size=self.banner_size,
            deadline=deadline
        )

    def _skipped(self, address: TransportAddress, reason: str) -> TCPPortScanResult:
        return TCPPortScanResult(
            address=address,
            state=PortState.UNKNOWN,
            conn_error=reason,
            potential_services=lookup_potential_services(address.port)
        )

    def scan(
        self,
        ports: Union[str, Iterable[int], None] = None,
        scan_type: str = 'tcp',
        callback: Optional[Callable[[TCPPortScanResult], None]] = None
    ) -> PortScanReport:
        """
        Perform port scan

        Every requested port gets a result, failures included.

        Args:
            ports: Port specification, see resolve_ports
            scan_type: Type of scan ('tcp', 'common', 'full')
            callback: Called with each result as soon as it is available

        Returns:
            PortScanReport with results keyed by port
        """
        # A stop() from here on applies to this scan
        self.stop_scan = False
        self.is_scanning = True

        start_time = datetime.now()
        started = time.monotonic()
        deadline = started + self.scan_timeout if self.scan_timeout else None

        port_list = self.resolve_ports(ports, scan_type)

        report = PortScanReport(
            scan_id=self.scan_id,
            scan_type=scan_type,
            target_ip=self.target_ip,
            start_time=start_time.isoformat(),
            status=ScanStatus.RUNNING
        )
        with self._lock:
            self._report = report

        logger.info("Scanning %d TCP ports on %s", len(port_list), self.target_ip)

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_threads) as executor:
            future_to_port = {
                executor.submit(self.scan_port, port, deadline): port
                for port in port_list
            }

            for future in concurrent.futures.as_completed(future_to_port):
                port = future_to_port[future]
                try:
                    result = future.result()
                except Exception as e:
                    logger.exception("Probe of %s:%d failed unexpectedly", self.target_ip, port)
                    result = self._skipped(TransportAddress(self.target_ip, port), f"probe error: {e}")

                with self._lock:
                    report.add_result(result)
                self._report_result(result, callback)

        end_time = datetime.now()
        self.is_scanning = False

        report.end_time = end_time.isoformat()
        report.duration = (end_time - start_time).total_seconds()
        report.status = ScanStatus.CANCELLED if self.stop_scan else ScanStatus.COMPLETED

        logger.info(
            "Scan of %s finished in %.2fs: %d open, %d closed, %d unknown",
            self.target_ip,
            report.duration,
            report.count(PortState.OPEN),
            report.count(PortState.CLOSED),
            report.count(PortState.UNKNOWN)
        )
        return report

    def _report_result(self, result: TCPPortScanResult, callback: Optional[Callable]) -> None:
        """Hand a result to the notifier and the callback, whatever they do"""
        log_type = LogType.SUCCESS if self.is_interesting(result) else LogType.DEBUG
        try:
            self.notify(log_type, describe_result(result))
        except Exception:
            logger.warning("Notifier failed for %s", result.address, exc_info=True)

        if callback:
            try:
                callback(result)
            except Exception:
                logger.warning("Progress callback failed for %s", result.address, exc_info=True)

    @staticmethod
    def is_interesting(result: TCPPortScanResult) -> bool:
        """Open ports are worth a notification, the rest is routine"""
        return result.state == PortState.OPEN

    def common_scan(self, callback: Optional[Callable] = None) -> PortScanReport:
        """Scan every port of the service catalog"""
        return self.scan(scan_type='common', callback=callback)

    def full_scan(self, callback: Optional[Callable] = None) -> PortScanReport:
        """Perform full scan of all ports (1-65535)"""
        return self.scan(scan_type='full', callback=callback)

    def stop(self) -> None:
        """Stop ongoing scan, ports not yet probed are reported as cancelled"""
        self.stop_scan = True

    def get_results(self) -> List[TCPPortScanResult]:
        """Get current scan results, sorted by port"""
        with self._lock:
            if self._report is None:
                return []
            return self._report.sorted_results()

    def is_port_open(self, port: int) -> bool:
        """Check if specific port is open"""
        return self.scan_port(port).is_open
