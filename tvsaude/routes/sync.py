"""
Routes Sync - Estado e disparo manual do sincronizador de avisos
"""

from flask import Blueprint, jsonify, current_app

from tvsaude.utils.audit import audit_log, AuditAction

sync_bp = Blueprint('sync', __name__)


def _bridge():
    return current_app.extensions['sync_bridge']


@sync_bp.route('/status', methods=['GET'])
def sync_status():
    """Estado do sincronizador"""
    return jsonify(_bridge().status())


@sync_bp.route('/force', methods=['POST'])
def force_sync():
    """Sincronização completa imediata"""
    success = _bridge().sync_all()
    audit_log(AuditAction.SYNC_FORCED, resource_type='sync', status='success' if success else 'failure')
    return jsonify({'success': success, 'status': _bridge().status()})


@sync_bp.route('/announcements/<int:announcement_id>', methods=['POST'])
def sync_announcement(announcement_id):
    """Envia um único aviso urgente para o cache"""
    success = _bridge().sync_one(announcement_id)
    audit_log(AuditAction.SYNC_FORCED, resource_type='announcement', resource_id=announcement_id,
              status='success' if success else 'failure')
    return jsonify({'success': success})
