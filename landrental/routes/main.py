# Main Routes
from datetime import datetime

from flask import Blueprint, jsonify
from sqlalchemy import text

from landrental.models import db

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """Liveness check including a database round trip"""
    try:
        db.session.execute(text('SELECT 1'))
        database = 'ok'
    except Exception as e:
        db.session.rollback()
        database = f'error: {e}'
    status = 200 if database == 'ok' else 503
    return jsonify({
        'success': status == 200,
        'message': 'Land rental API is running' if status == 200 else 'Database unavailable',
        'data': {'database': database, 'timestamp': datetime.utcnow().isoformat()},
    }), status
