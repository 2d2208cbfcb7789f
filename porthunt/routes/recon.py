"""
Reconnaissance routes - port scanning and information gathering
"""

import logging

from flask import Blueprint, current_app, request, jsonify
from flask_socketio import emit
from porthunt import socketio
from porthunt.models.scan_result import save_scan_result
from porthunt.services.detectors import build_detectors
from porthunt.services.notifier import log_to_logger
from porthunt.services.utils import validate_target

recon_bp = Blueprint('recon', __name__)

logger = logging.getLogger(__name__)


def _resolve_target(target):
    """
    Resolve a target to (ip, http_host)

    Returns (None, error message) when the target cannot be used.
    """
    from porthunt.services.dns_lookup import DNSLookup

    is_valid, target_type, normalized = validate_target(target)
    if not is_valid:
        return None, f'Invalid target: {target}'

    if target_type == 'ip':
        return normalized, normalized

    addresses = DNSLookup(normalized, timeout=current_app.config['DNS_TIMEOUT']).get_ip_addresses()
    if not addresses:
        return None, f'Could not resolve target: {normalized}'
    return addresses[0], normalized


def _build_scanner(target_ip, http_host, data):
    """
    PortScanner configured from the app config, overridable per request

    Raises:
        ValueError, TypeError: request values that are not numbers or detector names
    """
    from porthunt.services.port_scanner import PortScanner

    config = current_app.config
    detectors = build_detectors(
        data.get('detectors', config['DETECTORS']),
        http_host=data.get('http_host') or http_host,
        user_agent=data.get('user_agent') or config['USER_AGENT'],
        write_timeout=config['DETECTOR_WRITE_TIMEOUT'],
        read_timeout=config['DETECTOR_READ_TIMEOUT']
    )
    scan_timeout = data.get('scan_timeout', config['SCAN_TIMEOUT'])
    return PortScanner(
        target_ip,
        connect_timeout=float(data.get('timeout', config['CONNECT_TIMEOUT'])),
        banner_timeout=config['BANNER_TIMEOUT'],
        banner_size=config['BANNER_SIZE'],
        max_threads=int(data.get('max_threads', config['MAX_THREADS'])),
        scan_timeout=float(scan_timeout) if scan_timeout is not None else None,
        detectors=detectors,
        notify=log_to_logger(logger)
    )


# ============ API ROUTES ============

@recon_bp.route('/api/port-scan', methods=['POST'])
def port_scan_api():
    """Port scan API endpoint"""
    data = request.get_json(silent=True) or {}
    target = data.get('target')

    if not target:
        return jsonify({'error': 'Target is required'}), 400

    target_ip, http_host = _resolve_target(target)
    if target_ip is None:
        return jsonify({'error': http_host}), 400

    try:
        scanner = _build_scanner(target_ip, http_host, data)
    except (TypeError, ValueError) as e:
        return jsonify({'error': str(e)}), 400

    ports = data.get('ports') or current_app.config['DEFAULT_PORTS'] or None
    report = scanner.scan(ports=ports, scan_type=data.get('scan_type', 'tcp'))

    results = report.to_dict()
    if data.get('save'):
        results['report_path'] = save_scan_result(report, current_app.config['REPORTS_FOLDER'])

    return jsonify(results)


@recon_bp.route('/api/dns-lookup', methods=['POST'])
def dns_lookup_api():
    """DNS lookup API endpoint"""
    from porthunt.services.dns_lookup import DNSLookup

    data = request.get_json(silent=True) or {}
    domain = data.get('domain')
    record_types = data.get('record_types')

    if not domain:
        return jsonify({'error': 'Domain is required'}), 400

    dns_lookup = DNSLookup(domain, timeout=current_app.config['DNS_TIMEOUT'])
    results = dns_lookup.lookup_all(record_types)

    return jsonify(results)


@recon_bp.route('/api/reverse-lookup', methods=['POST'])
def reverse_lookup_api():
    """Domains hosted on an IP address"""
    from porthunt.services.dns_lookup import DNSLookup

    data = request.get_json(silent=True) or {}
    ip = data.get('ip')

    if not ip:
        return jsonify({'error': 'IP is required'}), 400

    dns_lookup = DNSLookup(ip, timeout=current_app.config['DNS_TIMEOUT'])
    return jsonify(dns_lookup.reverse_lookup(ip))


@recon_bp.route('/api/whois', methods=['POST'])
def whois_api():
    """WHOIS lookup API endpoint"""
    from porthunt.services.whois_lookup import WhoisLookup

    data = request.get_json(silent=True) or {}
    domain = data.get('domain')

    if not domain:
        return jsonify({'error': 'Domain is required'}), 400

    whois_lookup = WhoisLookup(domain)
    results = whois_lookup.lookup()

    return jsonify(results)


@recon_bp.route('/api/website', methods=['POST'])
def website_api():
    """robots.txt and reachable pages of a host"""
    from porthunt.services.website_scanner import WebsiteScanner

    data = request.get_json(silent=True) or {}
    host = data.get('host')

    if not host:
        return jsonify({'error': 'Host is required'}), 400

    scanner = WebsiteScanner(
        host,
        timeout=current_app.config['WEBSITE_TIMEOUT'],
        user_agent=data.get('user_agent') or current_app.config['USER_AGENT']
    )
    info = scanner.scan(data.get('paths'))

    return jsonify(info.to_dict())


@recon_bp.route('/api/hunt', methods=['POST'])
def hunt_api():
    """DNS, WHOIS, port scan and website checks of a domain"""
    from porthunt.services.domain_recon import DomainRecon

    data = request.get_json(silent=True) or {}
    domain = data.get('domain')

    if not domain:
        return jsonify({'error': 'Domain is required'}), 400

    is_valid, target_type, normalized = validate_target(domain)
    if not is_valid or target_type != 'domain':
        return jsonify({'error': f'Invalid domain: {domain}'}), 400

    config = current_app.config
    recon = DomainRecon(
        normalized,
        connect_timeout=config['CONNECT_TIMEOUT'],
        banner_timeout=config['BANNER_TIMEOUT'],
        max_threads=config['MAX_THREADS'],
        scan_timeout=config['SCAN_TIMEOUT'],
        user_agent=config['USER_AGENT'],
        dns_timeout=config['DNS_TIMEOUT'],
        notify=log_to_logger(logger)
    )
    report = recon.run(
        ports=data.get('ports') or config['DEFAULT_PORTS'] or None,
        scan_type=data.get('scan_type', 'common'),
        whois=data.get('whois', True),
        website=data.get('website', False),
        website_paths=data.get('paths')
    )

    results = report.to_dict()
    if data.get('save'):
        results['report_path'] = save_scan_result(report, config['REPORTS_FOLDER'])

    return jsonify(results)


# ============ WEBSOCKET EVENTS ============

@socketio.on('start_port_scan')
def handle_port_scan(data):
    """Handle real-time port scanning via WebSocket"""
    target = data.get('target')
    if not target:
        emit('port_scan_error', {'error': 'Target is required'})
        return

    target_ip, http_host = _resolve_target(target)
    if target_ip is None:
        emit('port_scan_error', {'error': http_host})
        return

    try:
        scanner = _build_scanner(target_ip, http_host, data)
    except (TypeError, ValueError) as e:
        emit('port_scan_error', {'error': str(e)})
        return

    def progress_callback(result):
        emit('port_scan_progress', result.to_dict())

    report = scanner.scan(
        ports=data.get('ports') or current_app.config['DEFAULT_PORTS'] or None,
        scan_type=data.get('scan_type', 'tcp'),
        callback=progress_callback
    )
    emit('port_scan_complete', report.to_dict())
