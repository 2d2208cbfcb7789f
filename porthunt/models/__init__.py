"""
porthunt Models Package
Data models for port probes and recon reports
"""

from porthunt.models.scan_result import (
    # Base Models
    BaseModel,
    PortState,
    Service,
    ScanStatus,

    # Port Scan Models
    TransportAddress,
    TCPPortScanResult,
    PortScanReport,

    # Recon Models
    WebsiteInfo,
    HuntReport,

    # Utility Functions
    save_scan_result,
    load_scan_result
)

__all__ = [
    # Base Models
    'BaseModel',
    'PortState',
    'Service',
    'ScanStatus',

    # Port Scan Models
    'TransportAddress',
    'TCPPortScanResult',
    'PortScanReport',

    # Recon Models
    'WebsiteInfo',
    'HuntReport',

    # Utility Functions
    'save_scan_result',
    'load_scan_result'
]
