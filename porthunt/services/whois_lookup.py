"""
WHOIS Lookup Service
Retrieves domain registration information
"""

import whois
from typing import Dict, Any, Optional
from datetime import datetime
import socket

from porthunt.services.notifier import LogType, Notifier, no_log
from porthunt.services.utils import generate_scan_id


class WhoisLookup:
    """
    WHOIS Lookup Service for domain registration information

    Registration fields come as parsed by the whois library, the raw
    text is kept alongside them.
    """

    RAW_TEXT_LIMIT = 5000

    def __init__(self, target: str, notify: Optional[Notifier] = None):
        """
        Initialize WHOIS Lookup

        Args:
            target: Domain name
            notify: Notifier for the WHOIS text and errors
        """
        self.target = target.strip().lower()
        self.scan_id = generate_scan_id()
        self.notify = notify or no_log()

    def lookup(self) -> Dict[str, Any]:
        """
        Perform WHOIS lookup

        Returns:
            Dict with WHOIS information
        """
        start_time = datetime.now()

        result = {
            'success': False,
            'scan_id': self.scan_id,
            'target': self.target,
            'whois_data': {},
            'error': None
        }

        try:
            w = whois.whois(self.target)

            if w is None:
                result['error'] = 'No WHOIS data returned'
            else:
                result['whois_data'] = self._parse_whois_data(w)
                result['success'] = True

        except whois.parser.PywhoisError as e:
            result['error'] = f'WHOIS parsing error: {str(e)}'
        except socket.timeout:
            result['error'] = 'WHOIS lookup timed out'
        except OSError as e:
            result['error'] = f'Network error: {str(e)}'

        if result['success']:
            raw = result['whois_data'].get('raw_text') or ''
            self.notify(LogType.SUCCESS, f"WHOIS:\n{raw}\n---")
        else:
            self.notify(LogType.ERROR, f"{self.target!r}: whois: {result['error']}")

        end_time = datetime.now()
        result['duration'] = (end_time - start_time).total_seconds()
        result['timestamp'] = datetime.now().isoformat()

        return result

    def _parse_whois_data(self, w: Any) -> Dict[str, Any]:
        """Parse WHOIS data into structured format"""
        data = {}

        data['domain_name'] = self._get_first_value(getattr(w, 'domain_name', None))
        data['registrar'] = getattr(w, 'registrar', None)

        data['creation_date'] = self._format_date(self._get_first_value(getattr(w, 'creation_date', None)))
        data['expiration_date'] = self._format_date(self._get_first_value(getattr(w, 'expiration_date', None)))
        data['updated_date'] = self._format_date(self._get_first_value(getattr(w, 'updated_date', None)))

        name_servers = getattr(w, 'name_servers', None) or []
        if isinstance(name_servers, str):
            name_servers = [name_servers]
        data['name_servers'] = sorted({ns.lower() for ns in name_servers if ns})

        status = getattr(w, 'status', None) or []
        data['status'] = status if isinstance(status, list) else [status]

        data['registrant'] = {
            'organization': getattr(w, 'org', None),
            'country': getattr(w, 'country', None)
        }

        text = getattr(w, 'text', None)
        data['raw_text'] = text[:self.RAW_TEXT_LIMIT] if isinstance(text, str) and text else None

        return data

    def _get_first_value(self, value: Any) -> Any:
        """Get first value from list or return value directly"""
        if isinstance(value, list):
            return value[0] if value else None
        return value

    def _format_date(self, date_value: Any) -> Optional[str]:
        """Format date value to ISO string"""
        if date_value is None:
            return None

        if isinstance(date_value, datetime):
            return date_value.isoformat()

        return str(date_value)
