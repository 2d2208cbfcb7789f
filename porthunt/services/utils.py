"""
Utility Functions for porthunt
Common helper functions used across all services
"""

import re
from urllib.parse import urlparse
from typing import Tuple
import ipaddress
from datetime import datetime
import hashlib
import os


# ============ Validation Functions ============

def is_valid_ip(ip: str) -> bool:
    """Check if string is a valid IP address (IPv4 or IPv6)"""
    try:
        ipaddress.ip_address(ip)
        return True
    except ValueError:
        return False


def is_valid_ipv4(ip: str) -> bool:
    """Check if string is a valid IPv4 address"""
    try:
        ipaddress.IPv4Address(ip)
        return True
    except ValueError:
        return False


def is_valid_ipv6(ip: str) -> bool:
    """Check if string is a valid IPv6 address"""
    try:
        ipaddress.IPv6Address(ip)
        return True
    except ValueError:
        return False


def is_valid_domain(domain: str) -> bool:
    """Check if string is a valid domain name"""
    domain_pattern = re.compile(
        r'^(?:[a-zA-Z0-9]'
        r'(?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)'
        r'+[a-zA-Z]{2,}$'
    )
    return bool(domain_pattern.match(domain))


def validate_target(target: str) -> Tuple[bool, str, str]:
    """
    Validate and identify target type

    Returns:
        Tuple[bool, str, str]: (is_valid, target_type, normalized_target)
    """
    target = target.strip()

    if is_valid_ip(target):
        return True, 'ip', target

    # Accept URLs by keeping only their host part
    if target.startswith(('http://', 'https://')):
        host = urlparse(target).hostname or ''
        if is_valid_ip(host):
            return True, 'ip', host
        if is_valid_domain(host):
            return True, 'domain', host.lower()
        return False, 'invalid', target

    if is_valid_domain(target):
        return True, 'domain', target.lower()

    return False, 'invalid', target


# ============ String Functions ============

def generate_scan_id() -> str:
    """Generate unique scan ID"""
    timestamp = datetime.now().strftime('%Y%m%d%H%M%S')
    random_hash = hashlib.md5(os.urandom(16)).hexdigest()[:8]
    return f"scan_{timestamp}_{random_hash}"


def sanitize_filename(filename: str) -> str:
    """Sanitize string for use as filename"""
    return re.sub(r'[<>:"/\\|?*]', '_', filename)
