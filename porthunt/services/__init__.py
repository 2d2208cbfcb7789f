"""
porthunt Services Package
Contains the port scanning engine and the reconnaissance collaborators
"""

from porthunt.services.utils import (
    validate_target,
    is_valid_ip,
    is_valid_domain
)

from porthunt.services.service_catalog import (
    COMMON_TCP_PORTS,
    lookup_potential_services,
    common_ports,
    ports_between,
    all_ports,
    parse_ports
)
from porthunt.services.detectors import Connection, Detector, HTTPDetector, SSHDetector
from porthunt.services.tcp_prober import probe_tcp_port
from porthunt.services.port_scanner import PortScanner
from porthunt.services.notifier import (
    LogType,
    no_log,
    log_to_logger,
    log_to_file,
    log_to,
    describe_result
)
from porthunt.services.dns_lookup import DNSLookup
from porthunt.services.whois_lookup import WhoisLookup
from porthunt.services.website_scanner import WebsiteScanner
from porthunt.services.domain_recon import DomainRecon

__all__ = [
    'validate_target',
    'is_valid_ip',
    'is_valid_domain',
    'COMMON_TCP_PORTS',
    'lookup_potential_services',
    'common_ports',
    'ports_between',
    'all_ports',
    'parse_ports',
    'Connection',
    'Detector',
    'HTTPDetector',
    'SSHDetector',
    'probe_tcp_port',
    'PortScanner',
    'LogType',
    'no_log',
    'log_to_logger',
    'log_to_file',
    'log_to',
    'describe_result',
    'DNSLookup',
    'WhoisLookup',
    'WebsiteScanner',
    'DomainRecon'
]
