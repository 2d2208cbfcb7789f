"""
DNS Lookup Service
Resolves the records of a domain and the domains behind an IP address
"""

import dns.exception
import dns.resolver
import dns.reversename
from typing import List, Dict, Optional, Any
from datetime import datetime

from porthunt.services.notifier import LogType, Notifier, no_log
from porthunt.services.utils import (
    is_valid_ip,
    generate_scan_id
)


class DNSLookup:
    """
    DNS Lookup Service for domain reconnaissance

    Features:
    - Record type queries (A, AAAA, CNAME, TXT, MX, NS by default, SOA on request)
    - Reverse DNS lookup
    """

    DEFAULT_RECORD_TYPES = ['A', 'AAAA', 'CNAME', 'TXT', 'MX', 'NS']

    def __init__(
        self,
        target: str,
        nameservers: Optional[List[str]] = None,
        timeout: float = 5.0,
        notify: Optional[Notifier] = None
    ):
        """
        Initialize DNS Lookup

        Args:
            target: Domain name
            nameservers: Custom DNS servers to use
            timeout: Query timeout in seconds
            notify: Notifier for found records and errors
        """
        self.target = target.strip().lower()
        self.timeout = timeout
        self.scan_id = generate_scan_id()
        self.notify = notify or no_log()

        # Configure resolver
        self.resolver = dns.resolver.Resolver()
        self.resolver.timeout = timeout
        self.resolver.lifetime = timeout * 2

        if nameservers:
            self.resolver.nameservers = nameservers

    def lookup(self, record_type: str) -> Dict[str, Any]:
        """
        Perform DNS lookup for specific record type

        Args:
            record_type: DNS record type (A, AAAA, MX, etc.)

        Returns:
            Dict with lookup results
        """
        result = {
            'record_type': record_type,
            'records': [],
            'success': False,
            'error': None
        }

        try:
            answers = self.resolver.resolve(self.target, record_type)

            for rdata in answers:
                result['records'].append(self._parse_record(record_type, rdata))

            result['success'] = True
            result['ttl'] = answers.rrset.ttl

        except dns.resolver.NXDOMAIN:
            result['error'] = 'Domain does not exist'
        except dns.resolver.NoAnswer:
            result['error'] = f'No {record_type} records found'
        except dns.resolver.NoNameservers:
            result['error'] = 'No nameservers available'
        except dns.resolver.Timeout:
            result['error'] = 'Query timed out'
        except dns.exception.DNSException as e:
            result['error'] = str(e)

        if result['success']:
            for record in result['records']:
                self.notify(LogType.SUCCESS, f"{self.target!r} has {record_type}: {self._record_text(record)}")
        else:
            self.notify(LogType.ERROR, f"{self.target!r}: lookup {record_type}: {result['error']}")

        return result

    def _parse_record(self, record_type: str, rdata: Any) -> Dict[str, Any]:
        """Parse DNS record data into structured format"""
        if record_type == 'A':
            return {'ip': str(rdata)}

        elif record_type == 'AAAA':
            return {'ipv6': str(rdata)}

        elif record_type == 'MX':
            return {
                'priority': rdata.preference,
                'mail_server': str(rdata.exchange).rstrip('.')
            }

        elif record_type == 'NS':
            return {'nameserver': str(rdata).rstrip('.')}

        elif record_type == 'TXT':
            # A TXT record may be split over several strings
            return {'text': b''.join(rdata.strings).decode('utf-8', errors='ignore')}

        elif record_type == 'CNAME':
            return {'canonical_name': str(rdata.target).rstrip('.')}

        elif record_type == 'SOA':
            return {
                'primary_ns': str(rdata.mname).rstrip('.'),
                'admin_email': str(rdata.rname).rstrip('.').replace('.', '@', 1),
                'serial': rdata.serial
            }

        return {'raw': str(rdata)}

    @staticmethod
    def _record_text(record: Dict[str, Any]) -> str:
        if 'priority' in record and 'mail_server' in record:
            return f"{record['mail_server']} ({record['priority']})"
        return ', '.join(str(v) for v in record.values())

    def lookup_all(self, record_types: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Perform DNS lookup for multiple record types

        Args:
            record_types: List of record types to query (default: A, AAAA, CNAME, TXT, MX, NS)

        Returns:
            Dict with all lookup results
        """
        if record_types is None:
            record_types = self.DEFAULT_RECORD_TYPES

        start_time = datetime.now()
        results = {}
        all_records = []

        for record_type in record_types:
            lookup_result = self.lookup(record_type)
            results[record_type] = lookup_result

            if lookup_result['success']:
                for record in lookup_result['records']:
                    all_records.append({
                        'type': record_type,
                        **record
                    })

        end_time = datetime.now()

        return {
            'success': True,
            'scan_id': self.scan_id,
            'target': self.target,
            'results': results,
            'all_records': all_records,
            'total_records': len(all_records),
            'start_time': start_time.isoformat(),
            'end_time': end_time.isoformat(),
            'duration': (end_time - start_time).total_seconds(),
            'timestamp': datetime.now().isoformat()
        }

    def reverse_lookup(self, ip_address: str) -> Dict[str, Any]:
        """
        Perform reverse DNS lookup, giving the domains hosted on an IP

        Args:
            ip_address: IP address to lookup

        Returns:
            Dict with reverse lookup results
        """
        result = {
            'success': False,
            'ip': ip_address,
            'hostnames': [],
            'error': None
        }

        if not is_valid_ip(ip_address):
            result['error'] = 'Invalid IP address'
            return result

        try:
            rev_name = dns.reversename.from_address(ip_address)
            answers = self.resolver.resolve(rev_name, 'PTR')

            for rdata in answers:
                result['hostnames'].append(str(rdata).rstrip('.'))

            result['success'] = True

        except dns.resolver.NXDOMAIN:
            result['error'] = 'No PTR record found'
        except dns.resolver.NoAnswer:
            result['error'] = 'No answer for PTR query'
        except dns.exception.DNSException as e:
            result['error'] = str(e)

        if result['success']:
            for hostname in result['hostnames']:
                self.notify(LogType.SUCCESS, f"{ip_address!r} has domain: {hostname}")
        else:
            self.notify(LogType.ERROR, f"{ip_address!r}: lookup address: {result['error']}")

        return result

    def get_ip_addresses(self) -> List[str]:
        """IPv4 then IPv6 addresses of the domain"""
        addresses = []
        for record_type, key in (('A', 'ip'), ('AAAA', 'ipv6')):
            lookup_result = self.lookup(record_type)
            if lookup_result['success']:
                addresses.extend(r[key] for r in lookup_result['records'])
        return addresses
