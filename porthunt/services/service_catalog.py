"""
Service Catalog
Well-known TCP port to service associations, used to annotate scan results
"""

from typing import Dict, List, Tuple

from porthunt.models.scan_result import Service, MAX_PORT_NUMBER


# Based on: https://en.wikipedia.org/wiki/List_of_TCP_and_UDP_port_numbers
COMMON_TCP_PORTS: Dict[int, Tuple[Service, ...]] = {
    21: (Service.FTP,),
    22: (Service.SSH,),
    23: (Service.TELNET,),
    25: (Service.SMTP,),
    53: (Service.DNS,),
    80: (Service.HTTP,),
    88: (Service.KERBEROS,),
    110: (Service.POP3,),
    115: (Service.SFTP,),
    143: (Service.IMAP,),
    443: (Service.HTTP,),  # HTTP over TLS
    465: (Service.SMTP,),  # SMTP over TLS
    514: (Service.SYSLOG,),
    631: (Service.CUPS,),
    993: (Service.IMAP,),  # IMAP over TLS
    995: (Service.POP3,),  # POP3 over TLS
    2082: (Service.CPANEL,),
    2083: (Service.CPANEL,),
    2086: (Service.CPANEL,),
    2087: (Service.CPANEL,),
    2095: (Service.CPANEL,),
    2096: (Service.CPANEL,),
    2375: (Service.DOCKER,),
    2376: (Service.DOCKER,),
    2377: (Service.DOCKER,),
    3306: (Service.MYSQL,),
    5009: (Service.VNC,),
    9100: (Service.NODE_EXPORTER,),

    # Ports commonly picked by developers
    8080: (Service.HTTP,),
    8081: (Service.HTTP,),
    4200: (Service.HTTP,),
    1111: (Service.HTTP,),
    2222: (Service.HTTP,),
    3333: (Service.HTTP,),
    4444: (Service.HTTP,),
    5555: (Service.HTTP,),
    6666: (Service.HTTP,),
    7777: (Service.HTTP,),
    8888: (Service.HTTP,),
    9999: (Service.HTTP,),
}


def lookup_potential_services(port: int) -> Tuple[Service, ...]:
    """Services usually found on a port, empty when the port is not well known"""
    return COMMON_TCP_PORTS.get(port, ())


def common_ports() -> List[int]:
    """Every port listed in the catalog, sorted"""
    return sorted(COMMON_TCP_PORTS)


def ports_between(start: int, end: int) -> List[int]:
    """Ports from start to end, both included"""
    return list(range(start, end + 1))


def all_ports() -> List[int]:
    return ports_between(1, MAX_PORT_NUMBER)


def parse_ports(port_string: str) -> List[int]:
    """
    Parse port string into list of ports
    Supports: single (80), range (80-100), comma-separated (80,443,8080)
    """
    ports = set()

    for part in port_string.split(','):
        part = part.strip()
        if '-' in part:
            try:
                start, end = part.split('-')
                for port in range(int(start), int(end) + 1):
                    if 1 <= port <= MAX_PORT_NUMBER:
                        ports.add(port)
            except ValueError:
                continue
        else:
            try:
                port = int(part)
                if 1 <= port <= MAX_PORT_NUMBER:
                    ports.add(port)
            except ValueError:
                continue

    return sorted(ports)
