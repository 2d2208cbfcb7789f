"""
Domain Recon Service
Chains DNS, WHOIS, port scanning and website checks into one report
"""

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Union

from porthunt.models.scan_result import HuntReport
from porthunt.services.detectors import Detector, HTTPDetector
from porthunt.services.dns_lookup import DNSLookup
from porthunt.services.notifier import LogType, Notifier, no_log
from porthunt.services.port_scanner import PortScanner
from porthunt.services.tcp_prober import DEFAULT_BANNER_TIMEOUT, DEFAULT_CONNECT_TIMEOUT
from porthunt.services.website_scanner import WebsiteScanner
from porthunt.services.whois_lookup import WhoisLookup


logger = logging.getLogger(__name__)


class DomainRecon:
    """
    Domain reconnaissance

    Resolves the domain, then scans the TCP ports of its first IP address
    with the domain as HTTP virtual host.
    """

    def __init__(
        self,
        domain: str,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        banner_timeout: float = DEFAULT_BANNER_TIMEOUT,
        max_threads: int = 100,
        scan_timeout: Optional[float] = None,
        detectors: Optional[List[Detector]] = None,
        user_agent: Optional[str] = None,
        dns_timeout: float = 5.0,
        nameservers: Optional[List[str]] = None,
        notify: Optional[Notifier] = None
    ):
        self.domain = domain.strip().lower()
        self.connect_timeout = connect_timeout
        self.banner_timeout = banner_timeout
        self.max_threads = max_threads
        self.scan_timeout = scan_timeout
        self.user_agent = user_agent
        self.notify = notify or no_log()
        self.dns = DNSLookup(self.domain, nameservers=nameservers, timeout=dns_timeout, notify=self.notify)

        if detectors is None:
            detectors = [HTTPDetector(self.domain, user_agent=user_agent)]
        self.detectors = detectors

    def run(
        self,
        ports: Union[str, Iterable[int], None] = None,
        scan_type: str = 'common',
        whois: bool = True,
        website: bool = False,
        website_paths: Optional[Iterable[str]] = None,
        callback: Optional[Callable] = None
    ) -> HuntReport:
        """
        Run the recon

        Args:
            ports: Port specification for the port scan
            scan_type: 'common', 'full' or 'tcp' (use ports)
            whois: Also fetch WHOIS data
            website: Also fetch robots.txt and check pages
            website_paths: Pages to check, defaults to WebsiteScanner.DEFAULT_PATHS
            callback: Port scan progress callback

        Returns:
            HuntReport
        """
        start_time = datetime.now()
        report = HuntReport(domain=self.domain, start_time=start_time.isoformat())

        report.dns = self.dns.lookup_all()
        for record_type, key in (('A', 'ip'), ('AAAA', 'ipv6')):
            lookup_result = report.dns['results'].get(record_type, {})
            if lookup_result.get('success'):
                report.ip_addresses.extend(r[key] for r in lookup_result['records'])

        if whois:
            report.whois = WhoisLookup(self.domain, notify=self.notify).lookup()

        if report.ip_addresses:
            target_ip = report.ip_addresses[0]
            report.linked_domains = self.dns.reverse_lookup(target_ip)['hostnames']

            scanner = PortScanner(
                target_ip,
                connect_timeout=self.connect_timeout,
                banner_timeout=self.banner_timeout,
                max_threads=self.max_threads,
                detectors=self.detectors,
                scan_timeout=self.scan_timeout,
                notify=self.notify
            )
            report.ports = scanner.scan(ports=ports, scan_type=scan_type, callback=callback)
        else:
            report.success = False
            report.error = 'No IP address found for this domain'
            self.notify(LogType.WARNING, f"{self.domain!r}: no IP address found for this domain")

        if website:
            scanner = WebsiteScanner(self.domain, user_agent=self.user_agent, notify=self.notify)
            report.website = scanner.scan(website_paths)

        end_time = datetime.now()
        report.end_time = end_time.isoformat()
        report.duration = (end_time - start_time).total_seconds()

        logger.info("Recon of %s finished in %.2fs", self.domain, report.duration)
        return report
