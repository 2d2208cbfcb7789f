"""
General API routes
"""

from flask import Blueprint, current_app, request, jsonify
import os
from datetime import datetime

from porthunt.models.scan_result import load_scan_result
from porthunt.services.service_catalog import COMMON_TCP_PORTS
from porthunt.services.utils import sanitize_filename

api_bp = Blueprint('api', __name__)


@api_bp.route('/health')
def health_check():
    """API health check"""
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.now().isoformat(),
        'version': '1.0.0'
    })


@api_bp.route('/validate-target', methods=['POST'])
def validate_target():
    """Validate target domain/IP"""
    from porthunt.services.utils import validate_target

    data = request.get_json(silent=True) or {}
    target = data.get('target')

    if not target:
        return jsonify({'error': 'Target is required'}), 400

    is_valid, target_type, normalized = validate_target(target)

    return jsonify({
        'valid': is_valid,
        'type': target_type,
        'normalized': normalized
    })


@api_bp.route('/services')
def list_services():
    """Well-known port to service catalog"""
    return jsonify({
        str(port): [service.value for service in services]
        for port, services in sorted(COMMON_TCP_PORTS.items())
    })


@api_bp.route('/reports', methods=['GET'])
def list_reports():
    """List all saved reports"""
    reports_dir = current_app.config['REPORTS_FOLDER']
    reports = []

    if os.path.exists(reports_dir):
        for filename in sorted(os.listdir(reports_dir)):
            if not filename.endswith('.json'):
                continue
            report_data = load_scan_result(os.path.join(reports_dir, filename))
            if report_data is None:
                continue
            reports.append({
                'id': filename[:-len('.json')],
                'scan_type': report_data.get('scan_type'),
                'target': report_data.get('domain') or report_data.get('target_ip'),
                'date': report_data.get('start_time')
            })

    return jsonify(reports)


@api_bp.route('/reports/<report_id>', methods=['GET'])
def get_report(report_id):
    """Get a saved report"""
    filepath = os.path.join(current_app.config['REPORTS_FOLDER'], f"{sanitize_filename(report_id)}.json")
    report_data = load_scan_result(filepath)

    if report_data is None:
        return jsonify({'error': 'Report not found'}), 404

    return jsonify(report_data)
