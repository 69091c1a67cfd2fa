"""
API Routes for Lease Records
Lease and opening balance CRUD against the JSON store
"""

from flask import Blueprint, request, jsonify, current_app
import logging

from lease_reporting.lease_accounting.core.exceptions import (
    DuplicateLeaseError, DuplicateOpeningBalanceError, LeaseNotFoundError,
    LeaseReportingError, LeaseValidationError, MissingOpeningBalanceError,
)
from lease_reporting.lease_accounting.core.validation import calculate_committed_years
from lease_reporting.lease_store import LeaseStore

logger = logging.getLogger(__name__)

# Create API blueprint
api_bp = Blueprint('api', __name__, url_prefix='/api')

ERROR_STATUS = {
    LeaseValidationError: 400,
    LeaseNotFoundError: 404,
    DuplicateLeaseError: 409,
    DuplicateOpeningBalanceError: 409,
    MissingOpeningBalanceError: 422,
}


def get_store() -> LeaseStore:
    return LeaseStore(current_app.config['LEASE_DATA_PATH'])


def lease_error_response(e: LeaseReportingError):
    """JSON error body and status for a typed lease reporting error"""
    body = {'success': False, 'error': str(e), 'code': e.code}
    if isinstance(e, LeaseValidationError):
        body['errors'] = e.errors
    if isinstance(e, MissingOpeningBalanceError):
        body['openingDate'] = e.opening_date.isoformat()
        body['leases'] = e.leases
    status = next((code for cls, code in ERROR_STATUS.items() if isinstance(e, cls)), 500)
    logger.warning(f"⚠️ {e.code}: {e}")
    return jsonify(body), status


@api_bp.route('/leases', methods=['GET'])
def get_leases():
    """Get all lease records"""
    logger.info("📋 GET /api/leases")
    try:
        leases = get_store().load_records()
        return jsonify({'success': True, 'leases': leases})
    except Exception as e:
        logger.error(f"Error fetching leases: {e}", exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500


@api_bp.route('/leases', methods=['POST'])
def create_lease():
    """Create a new lease"""
    logger.info("➕ POST /api/leases")
    try:
        record = get_store().add_lease(request.json or {})
        return jsonify({
            'success': True,
            'lease': record,
            'message': 'Lease saved successfully'
        }), 201
    except LeaseReportingError as e:
        return lease_error_response(e)
    except Exception as e:
        logger.error(f"Error creating lease: {e}", exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500


@api_bp.route('/leases/<lease_id>', methods=['GET'])
def get_lease(lease_id):
    """Get a specific lease with its committed years"""
    logger.info(f"🔍 GET /api/leases/{lease_id}")
    try:
        store = get_store()
        record = store.get_record(lease_id)
        committed_years = calculate_committed_years(store.get_lease(lease_id))
        return jsonify({'success': True, 'lease': record, 'committedYears': committed_years})
    except LeaseReportingError as e:
        return lease_error_response(e)
    except Exception as e:
        logger.error(f"Error fetching lease: {e}", exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500


@api_bp.route('/leases/<lease_id>', methods=['PUT'])
def update_lease(lease_id):
    """Update an existing lease"""
    logger.info(f"✏️ PUT /api/leases/{lease_id}")
    try:
        record = get_store().update_lease(lease_id, request.json or {})
        return jsonify({
            'success': True,
            'lease': record,
            'message': 'Lease updated successfully'
        })
    except LeaseReportingError as e:
        return lease_error_response(e)
    except Exception as e:
        logger.error(f"Error updating lease: {e}", exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500


@api_bp.route('/leases/<lease_id>', methods=['DELETE'])
def delete_lease(lease_id):
    """Delete a lease"""
    logger.info(f"🗑️ DELETE /api/leases/{lease_id}")
    try:
        get_store().delete_lease(lease_id)
        return jsonify({'success': True, 'message': 'Lease deleted'})
    except LeaseReportingError as e:
        return lease_error_response(e)
    except Exception as e:
        logger.error(f"Error deleting lease: {e}", exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500


@api_bp.route('/leases/<lease_id>/opening_balances', methods=['POST'])
def add_opening_balance(lease_id):
    """Add an opening balance snapshot; one per calendar date"""
    logger.info(f"📥 POST /api/leases/{lease_id}/opening_balances")
    try:
        balance = get_store().add_opening_balance(lease_id, request.json or {})
        return jsonify({'success': True, 'openingBalance': balance}), 201
    except LeaseReportingError as e:
        return lease_error_response(e)
    except Exception as e:
        logger.error(f"Error adding opening balance: {e}", exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500


@api_bp.route('/leases/<lease_id>/opening_balances/<balance_id>', methods=['DELETE'])
def delete_opening_balance(lease_id, balance_id):
    logger.info(f"🗑️ DELETE /api/leases/{lease_id}/opening_balances/{balance_id}")
    try:
        get_store().delete_opening_balance(lease_id, balance_id)
        return jsonify({'success': True, 'message': 'Opening balance deleted'})
    except LeaseReportingError as e:
        return lease_error_response(e)
    except Exception as e:
        logger.error(f"Error deleting opening balance: {e}", exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500
