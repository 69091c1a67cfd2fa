"""
Lease Calculation Backend API
Payment schedules, PV calculation tables with journal, and multi-lease reports
"""

from flask import Blueprint, request, jsonify, current_app
import logging

from lease_reporting.api import get_store, lease_error_response
from lease_reporting.lease_accounting.core.exceptions import LeaseReportingError, LeaseValidationError
from lease_reporting.lease_accounting.core.models import LeaseTerms
from lease_reporting.lease_accounting.core.processor import LeaseProcessor, build_payment_schedule
from lease_reporting.lease_accounting.core.results_processor import ResultsProcessor
from lease_reporting.lease_accounting.core.validation import (
    parse_lease_record, parse_pv_params, parse_report_params,
)

# Create blueprint
calc_bp = Blueprint('calc', __name__, url_prefix='/api')

logger = logging.getLogger(__name__)


def _lease_from_request(data: dict) -> LeaseTerms:
    """Lease posted inline as 'lease', or looked up in the store by 'leaseId'"""
    if data.get('lease'):
        return parse_lease_record(data['lease'])
    if data.get('leaseId'):
        return get_store().get_lease(str(data['leaseId']))
    raise LeaseValidationError(None, ["Provide either 'lease' or 'leaseId'"])


@calc_bp.route('/payment_schedule', methods=['POST'])
def payment_schedule():
    """Monthly payment rows with totals and committed years"""
    try:
        data = request.json or {}
        lease = _lease_from_request(data)
        logger.info(f"📥 Payment schedule request for lease {lease.id}")
        return jsonify({'success': True, **build_payment_schedule(lease)})
    except LeaseReportingError as e:
        return lease_error_response(e)
    except Exception as e:
        logger.error(f"Error generating payment schedule: {e}", exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500


@calc_bp.route('/pv_calculation', methods=['POST'])
def pv_calculation():
    """
    PV calculation for one lease over a reporting window
    Returns cash flows, right-of-use asset and liability tables, period
    aggregates, the journal and the balance summary
    """
    try:
        data = request.json or {}
        lease = _lease_from_request(data)
        params = parse_pv_params(data, default_timing=current_app.config['DEFAULT_PAYMENT_TIMING'])

        logger.info(f"📥 PV calculation for lease {lease.id}: "
                    f"{params.opening_date} to {params.closing_date} ({params.payment_timing.value})")

        calculation = LeaseProcessor(params).process_lease(lease)
        return jsonify({'success': True, **calculation.to_dict()})
    except LeaseReportingError as e:
        return lease_error_response(e)
    except Exception as e:
        logger.error(f"Error in PV calculation: {e}", exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500


@calc_bp.route('/reports', methods=['POST'])
def generate_report():
    """
    Summary or Detail report across leases
    Uses the posted 'leases' records when given, otherwise every stored lease
    """
    try:
        data = request.json or {}
        params = parse_report_params(data, default_timing=current_app.config['DEFAULT_PAYMENT_TIMING'])

        if data.get('leases') is not None:
            leases = [parse_lease_record(record) for record in data['leases']]
        else:
            leases = get_store().load_leases()

        logger.info(f"📥 {params.report_type.value} report ({params.included_leases.value}) "
                    f"for {len(leases)} leases")

        report = ResultsProcessor(params).generate_report(leases)
        return jsonify({'success': True, **report})
    except LeaseReportingError as e:
        return lease_error_response(e)
    except Exception as e:
        logger.error(f"Error generating report: {e}", exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500
