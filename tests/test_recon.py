"""
Tests for Reconnaissance Modules
Tests for DNS lookup, WHOIS, website checks and the domain recon chain
"""

import pytest
import sys
import os
import json
from datetime import datetime
from unittest.mock import Mock, patch, MagicMock

import dns.resolver
import requests

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from porthunt.models.scan_result import PortScanReport, PortState, TCPPortScanResult, TransportAddress
from porthunt.services.detectors import HTTPDetector, SSHDetector
from porthunt.services.dns_lookup import DNSLookup
from porthunt.services.whois_lookup import WhoisLookup
from porthunt.services.website_scanner import WebsiteScanner
from porthunt.services.domain_recon import DomainRecon
from porthunt.services.notifier import LogType


# ============================================================
# DNS LOOKUP TESTS
# ============================================================

class TestDNSLookup:
    """Tests for DNSLookup class"""

    @pytest.mark.unit
    def test_dns_lookup_initialization(self, test_domain):
        """Test DNSLookup initialization"""
        lookup = DNSLookup(test_domain.upper(), timeout=3.0)

        assert lookup.target == test_domain
        assert lookup.resolver.timeout == 3.0
        assert lookup.resolver.lifetime == 6.0
        assert lookup.scan_id is not None

    @pytest.mark.unit
    def test_custom_nameservers(self, test_domain):
        """Test custom nameservers are used"""
        lookup = DNSLookup(test_domain, nameservers=['1.1.1.1'])
        assert lookup.resolver.nameservers == ['1.1.1.1']

    @pytest.mark.unit
    def test_lookup_a_record(self, test_domain, mock_dns_resolver):
        """Test A record lookup"""
        notify = Mock()
        lookup = DNSLookup(test_domain, notify=notify)
        lookup.resolver = mock_dns_resolver

        result = lookup.lookup('A')

        assert result['success'] is True
        assert result['records'] == [{'ip': '93.184.216.34'}]
        assert result['ttl'] == 3600
        notify.assert_called_once_with(LogType.SUCCESS, "'example.com' has A: 93.184.216.34")

    @pytest.mark.unit
    def test_lookup_mx_record(self, test_domain, mock_dns_resolver):
        """Test MX record parsing"""
        lookup = DNSLookup(test_domain)
        lookup.resolver = mock_dns_resolver

        assert lookup.lookup('MX')['records'] == [{'priority': 10, 'mail_server': 'mail.example.com'}]

    @pytest.mark.unit
    def test_soa_only_on_request(self, test_domain):
        """Test SOA is not queried by default but parsed when asked for"""
        soa = Mock()
        soa.mname = 'ns.icann.org.'
        soa.rname = 'noc.dns.icann.org.'
        soa.serial = 2024081464
        answer = MagicMock()
        answer.__iter__ = lambda x: iter([soa])

        lookup = DNSLookup(test_domain)
        lookup.resolver = MagicMock()
        lookup.resolver.resolve.return_value = answer

        assert 'SOA' not in DNSLookup.DEFAULT_RECORD_TYPES

        result = lookup.lookup('SOA')
        assert result['records'] == [{
            'primary_ns': 'ns.icann.org',
            'admin_email': 'noc@dns.icann.org',
            'serial': 2024081464
        }]

    @pytest.mark.unit
    def test_lookup_no_answer(self, test_domain, mock_dns_resolver):
        """Test missing record type"""
        notify = Mock()
        lookup = DNSLookup(test_domain, notify=notify)
        lookup.resolver = mock_dns_resolver

        result = lookup.lookup('TXT')

        assert result['success'] is False
        assert result['error'] == 'No TXT records found'
        assert notify.call_args[0][0] == LogType.ERROR

    @pytest.mark.unit
    def test_lookup_nxdomain(self, test_domain):
        """Test non-existent domain"""
        lookup = DNSLookup(test_domain)
        lookup.resolver = MagicMock()
        lookup.resolver.resolve.side_effect = dns.resolver.NXDOMAIN()

        result = lookup.lookup('A')

        assert result['success'] is False
        assert result['error'] == 'Domain does not exist'

    @pytest.mark.unit
    def test_lookup_timeout(self, test_domain):
        """Test query timeout"""
        lookup = DNSLookup(test_domain)
        lookup.resolver = MagicMock()
        lookup.resolver.resolve.side_effect = dns.resolver.Timeout()

        assert lookup.lookup('A')['error'] == 'Query timed out'

    @pytest.mark.unit
    def test_lookup_all(self, test_domain, mock_dns_resolver):
        """Test several record types at once"""
        lookup = DNSLookup(test_domain)
        lookup.resolver = mock_dns_resolver

        result = lookup.lookup_all(['A', 'MX', 'TXT'])

        assert result['success'] is True
        assert set(result['results']) == {'A', 'MX', 'TXT'}
        assert result['total_records'] == 2
        assert [r['type'] for r in result['all_records']] == ['A', 'MX']

    @pytest.mark.unit
    def test_get_ip_addresses(self, test_domain, mock_dns_resolver):
        """Test IPv4 and IPv6 addresses are collected"""
        lookup = DNSLookup(test_domain)
        lookup.resolver = mock_dns_resolver

        assert lookup.get_ip_addresses() == ['93.184.216.34']

    @pytest.mark.unit
    def test_reverse_lookup(self, test_domain, test_ip):
        """Test PTR lookup gives the linked domains"""
        lookup = DNSLookup(test_domain)
        lookup.resolver = MagicMock()
        lookup.resolver.resolve.return_value = ['www.example.com.', 'example.org.']

        result = lookup.reverse_lookup(test_ip)

        assert result['success'] is True
        assert result['hostnames'] == ['www.example.com', 'example.org']
        assert lookup.resolver.resolve.call_args[0][1] == 'PTR'

    @pytest.mark.unit
    def test_reverse_lookup_invalid_ip(self, test_domain):
        """Test reverse lookup rejects non-IPs"""
        lookup = DNSLookup(test_domain)
        result = lookup.reverse_lookup('not-an-ip')

        assert result['success'] is False
        assert result['error'] == 'Invalid IP address'


# ============================================================
# WHOIS LOOKUP TESTS
# ============================================================

def make_whois_response():
    w = Mock()
    w.domain_name = ['EXAMPLE.COM', 'example.com']
    w.registrar = 'RESERVED-Internet Assigned Numbers Authority'
    w.creation_date = datetime(1995, 8, 14, 4, 0)
    w.expiration_date = [datetime(2030, 8, 13, 4, 0), datetime(2030, 8, 13, 4, 0)]
    w.updated_date = None
    w.name_servers = ['A.IANA-SERVERS.NET', 'a.iana-servers.net', 'B.IANA-SERVERS.NET']
    w.status = 'clientDeleteProhibited'
    w.org = None
    w.country = 'US'
    w.text = 'Domain Name: EXAMPLE.COM\n' * 1000
    return w


class TestWhoisLookup:
    """Tests for WhoisLookup class"""

    @pytest.mark.unit
    def test_whois_lookup_initialization(self, test_domain):
        """Test WhoisLookup initialization"""
        lookup = WhoisLookup(' Example.com ')

        assert lookup.target == test_domain
        assert lookup.scan_id is not None

    @pytest.mark.unit
    def test_lookup_success(self, test_domain):
        """Test WHOIS data is parsed"""
        notify = Mock()
        with patch('whois.whois', return_value=make_whois_response()):
            result = WhoisLookup(test_domain, notify=notify).lookup()

        data = result['whois_data']
        assert result['success'] is True
        assert data['domain_name'] == 'EXAMPLE.COM'
        assert data['creation_date'] == '1995-08-14T04:00:00'
        assert data['expiration_date'] == '2030-08-13T04:00:00'
        assert data['updated_date'] is None
        assert data['name_servers'] == ['a.iana-servers.net', 'b.iana-servers.net']
        assert data['status'] == ['clientDeleteProhibited']
        assert data['registrant']['country'] == 'US'
        assert len(data['raw_text']) == WhoisLookup.RAW_TEXT_LIMIT
        assert notify.call_args[0][0] == LogType.SUCCESS
        assert 'duration' in result

    @pytest.mark.unit
    def test_lookup_no_data(self, test_domain):
        """Test empty WHOIS answer"""
        notify = Mock()
        with patch('whois.whois', return_value=None):
            result = WhoisLookup(test_domain, notify=notify).lookup()

        assert result['success'] is False
        assert result['error'] == 'No WHOIS data returned'
        assert notify.call_args[0][0] == LogType.ERROR

    @pytest.mark.unit
    def test_lookup_network_error(self, test_domain):
        """Test network failure"""
        with patch('whois.whois', side_effect=ConnectionResetError('reset')):
            result = WhoisLookup(test_domain).lookup()

        assert result['success'] is False
        assert result['error'].startswith('Network error')


# ============================================================
# WEBSITE SCANNER TESTS
# ============================================================

def make_response(status_code=200, text='', content_type='text/plain', url='http://example.com/'):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.url = url
    response.headers = {'Content-Type': content_type}
    return response


class TestWebsiteScanner:
    """Tests for WebsiteScanner class"""

    @pytest.mark.unit
    def test_initialization(self):
        """Test WebsiteScanner initialization"""
        scanner = WebsiteScanner('Example.com', user_agent='test-agent')

        assert scanner.base_url == 'http://example.com'
        assert scanner.session.headers['User-Agent'] == 'test-agent'

    @pytest.mark.unit
    def test_fetch_robots_txt(self, test_domain):
        """Test robots.txt is kept when served"""
        scanner = WebsiteScanner(test_domain)
        scanner.session = MagicMock()
        scanner.session.get.return_value = make_response(text='User-agent: *\nDisallow: /admin')

        info = scanner.fetch_robots_txt()

        assert info.robots_txt == 'User-agent: *\nDisallow: /admin'
        assert scanner.session.get.call_args[0][0] == 'http://example.com/robots.txt'

    @pytest.mark.unit
    def test_robots_txt_missing(self, test_domain):
        """Test a 404 means no robots.txt"""
        scanner = WebsiteScanner(test_domain)
        scanner.session = MagicMock()
        scanner.session.get.return_value = make_response(status_code=404)

        info = scanner.fetch_robots_txt()

        assert info.robots_txt is None
        assert info.errors == []

    @pytest.mark.unit
    def test_robots_txt_network_error(self, test_domain):
        """Test network errors are recorded"""
        notify = Mock()
        scanner = WebsiteScanner(test_domain, notify=notify)
        scanner.session = MagicMock()
        scanner.session.get.side_effect = requests.exceptions.ConnectionError('refused')

        info = scanner.fetch_robots_txt()

        assert info.robots_txt is None
        assert info.errors[0].startswith('robots.txt:')
        assert notify.call_args[0][0] == LogType.ERROR

    @pytest.mark.unit
    def test_check_page_title(self, test_domain):
        """Test page title extraction"""
        scanner = WebsiteScanner(test_domain)
        scanner.session = MagicMock()
        scanner.session.get.return_value = make_response(
            text='<html><head><title> Example Domain </title></head></html>',
            content_type='text/html; charset=UTF-8',
            url='http://example.com/login'
        )

        page = scanner.check_page('login')

        assert page['path'] == '/login'
        assert page['title'] == 'Example Domain'
        assert page['url'] == 'http://example.com/login'

    @pytest.mark.unit
    def test_check_page_not_found(self, test_domain):
        """Test non-200 pages are skipped"""
        scanner = WebsiteScanner(test_domain)
        scanner.session = MagicMock()
        scanner.session.get.return_value = make_response(status_code=403)

        assert scanner.check_page('/admin') is None

    @pytest.mark.unit
    def test_scan_pages_stops_on_network_error(self, test_domain):
        """Test an unreachable host ends the page checks"""
        scanner = WebsiteScanner(test_domain)
        scanner.session = MagicMock()
        scanner.session.get.side_effect = requests.exceptions.Timeout('timed out')

        info = scanner.scan_pages(['/', '/login', '/admin'])

        assert scanner.session.get.call_count == 1
        assert len(info.errors) == 1
        assert info.pages == []

    @pytest.mark.unit
    def test_scan(self, test_domain):
        """Test robots.txt and pages together"""
        def get(url, **kwargs):
            if url.endswith('/robots.txt'):
                return make_response(text='User-agent: *')
            if url.endswith('/missing'):
                return make_response(status_code=404)
            return make_response(text='<title>Home</title>', content_type='text/html', url=url)

        scanner = WebsiteScanner(test_domain)
        scanner.session = MagicMock()
        scanner.session.get.side_effect = get

        info = scanner.scan(['/', '/missing'])

        assert info.host == test_domain
        assert info.robots_txt == 'User-agent: *'
        assert [p['path'] for p in info.pages] == ['/']
        assert info.pages[0]['title'] == 'Home'


# ============================================================
# DOMAIN RECON TESTS
# ============================================================

def dns_results(ips):
    return {
        'success': True,
        'results': {
            'A': {'success': bool(ips), 'records': [{'ip': ip} for ip in ips]},
            'AAAA': {'success': False, 'records': []},
        },
        'all_records': [],
        'total_records': len(ips),
    }


class TestDomainRecon:
    """Tests for DomainRecon class"""

    @pytest.mark.unit
    def test_default_detectors(self, test_domain):
        """Test the domain is used as HTTP virtual host"""
        recon = DomainRecon(test_domain)

        assert len(recon.detectors) == 1
        assert isinstance(recon.detectors[0], HTTPDetector)
        assert recon.detectors[0].http_host == test_domain

    @pytest.mark.unit
    @patch('porthunt.services.domain_recon.WhoisLookup')
    @patch('porthunt.services.domain_recon.PortScanner')
    def test_run(self, mock_scanner_cls, mock_whois_cls, test_domain, test_ip):
        """Test the first IP address gets port scanned"""
        ports = PortScanReport(target_ip=test_ip)
        ports.add_result(TCPPortScanResult(address=TransportAddress(test_ip, 80), state=PortState.OPEN))
        mock_scanner_cls.return_value.scan.return_value = ports
        mock_whois_cls.return_value.lookup.return_value = {'success': True, 'whois_data': {}}

        recon = DomainRecon(test_domain, max_threads=5, detectors=[SSHDetector()])
        recon.dns = MagicMock()
        recon.dns.lookup_all.return_value = dns_results([test_ip, '93.184.216.35'])
        recon.dns.reverse_lookup.return_value = {'hostnames': ['www.example.com']}

        report = recon.run(ports='80,443', scan_type='tcp')

        assert report.success is True
        assert report.ip_addresses == [test_ip, '93.184.216.35']
        assert report.linked_domains == ['www.example.com']
        assert report.whois == {'success': True, 'whois_data': {}}
        assert report.ports is ports
        assert report.website is None
        recon.dns.reverse_lookup.assert_called_once_with(test_ip)

        args, kwargs = mock_scanner_cls.call_args
        assert args[0] == test_ip
        assert kwargs['max_threads'] == 5
        assert kwargs['detectors'] == recon.detectors
        mock_scanner_cls.return_value.scan.assert_called_once_with(ports='80,443', scan_type='tcp', callback=None)

        data = json.loads(json.dumps(report.to_dict()))
        assert data['ports']['open_count'] == 1

    @pytest.mark.unit
    @patch('porthunt.services.domain_recon.PortScanner')
    def test_run_no_ip(self, mock_scanner_cls, test_domain):
        """Test a domain without addresses is reported and not scanned"""
        notify = Mock()
        recon = DomainRecon(test_domain, notify=notify)
        recon.dns = MagicMock()
        recon.dns.lookup_all.return_value = dns_results([])

        report = recon.run(whois=False)

        assert report.success is False
        assert report.error == 'No IP address found for this domain'
        assert report.ports is None
        mock_scanner_cls.assert_not_called()
        notify.assert_called_with(LogType.WARNING, "'example.com': no IP address found for this domain")

    @pytest.mark.unit
    @patch('porthunt.services.domain_recon.WebsiteScanner')
    @patch('porthunt.services.domain_recon.PortScanner')
    def test_run_with_website(self, mock_scanner_cls, mock_website_cls, test_domain, test_ip):
        """Test the website check is chained when asked"""
        mock_scanner_cls.return_value.scan.return_value = PortScanReport(target_ip=test_ip)
        recon = DomainRecon(test_domain, user_agent='test-agent')
        recon.dns = MagicMock()
        recon.dns.lookup_all.return_value = dns_results([test_ip])
        recon.dns.reverse_lookup.return_value = {'hostnames': []}

        report = recon.run(whois=False, website=True, website_paths=['/'])

        mock_website_cls.return_value.scan.assert_called_once_with(['/'])
        assert report.website is mock_website_cls.return_value.scan.return_value
        assert mock_website_cls.call_args[1]['user_agent'] == 'test-agent'
