"""
Routes Announcements - Avisos das TVs
=====================================

Endpoints para:
- Avisos ativos de uma localidade (consumido pela TV e pelo sincronizador)
- Administração: listar, criar, atualizar, ativar/desativar, excluir
- Registro de exibição e estatísticas
"""

from flask import Blueprint, request, jsonify, current_app
from tvsaude import db
from tvsaude.models import Announcement
from tvsaude.services.announcement_scheduler import AnnouncementValidationError
from tvsaude.utils.audit import audit_log, AuditAction
from tvsaude.utils.decorators import handle_db_errors, json_body_required
from tvsaude.utils.helpers import get_int_arg
import logging

announcements_bp = Blueprint('announcements', __name__)
logger = logging.getLogger(__name__)


def _scheduler():
    return current_app.extensions['announcement_scheduler']


def _push_if_urgent(announcement):
    """Avisos urgentes vão para o cache sem esperar o próximo ciclo"""
    bridge = current_app.extensions.get('sync_bridge')
    if bridge is None or not bridge.running:
        return
    if announcement.is_active and bridge.is_urgent(announcement.to_dict()):
        bridge.sync_one(announcement.id)


@announcements_bp.route('/active', methods=['GET'])
@handle_db_errors
def get_active_announcements():
    """
    Avisos elegíveis agora

    Query params:
        - localityId: Localidade da TV (sem ele, só os avisos globais)
    """
    locality_id = get_int_arg('localityId')
    announcements = _scheduler().get_active_announcements(locality_id=locality_id)

    return jsonify({
        'announcements': [a.to_dict() for a in announcements],
        'total': len(announcements)
    })


@announcements_bp.route('/stats', methods=['GET'])
@handle_db_errors
def get_exhibition_stats():
    """
    Estatísticas de exibição

    Query params:
        - localityId: Filtrar por localidade
        - days: Janela em dias (padrão 7)
    """
    locality_id = get_int_arg('localityId')
    days = get_int_arg('days', 7)

    return jsonify({
        'days': days,
        'locality_id': locality_id,
        'stats': _scheduler().exhibition_stats(locality_id=locality_id, days=days)
    })


@announcements_bp.route('', methods=['GET'])
@handle_db_errors
def list_announcements():
    """
    Lista dos avisos

    Query params:
        - active_only: Somente avisos ativos
    """
    active_only = request.args.get('active_only', 'false').lower() == 'true'

    query = Announcement.query
    if active_only:
        query = query.filter_by(is_active=True)

    announcements = query.order_by(
        Announcement.priority.desc(),
        Announcement.created_at.desc()
    ).all()

    return jsonify({
        'announcements': [a.to_dict() for a in announcements]
    })


@announcements_bp.route('/<int:announcement_id>', methods=['GET'])
@handle_db_errors
def get_announcement(announcement_id):
    """Detalhes de um aviso"""
    announcement = db.session.get(Announcement, announcement_id)
    if not announcement:
        return jsonify({'error': 'Announcement not found', 'code': 'NOT_FOUND'}), 404

    return jsonify({
        'announcement': announcement.to_dict()
    })


@announcements_bp.route('', methods=['POST'])
@json_body_required
@handle_db_errors
def create_announcement():
    """
    Criar um aviso

    Body:
        - title, message: obrigatórios
        - type: consulta, medicacao, campanha, urgencia, informativo, horario, evento
        - locality_id: Localidade alvo (null = todas)
        - start_date, end_date: Período ('YYYY-MM-DD' cobre o dia inteiro)
        - start_time, end_time: Faixa de horário 'HH:MM'
        - weekdays: Dias permitidos (0 = domingo)
        - priority, repeat_count, repeat_interval_ms
    """
    data = request.get_json()

    try:
        announcement = _scheduler().build_announcement(data)
    except AnnouncementValidationError as e:
        return jsonify({'error': str(e), 'code': 'VALIDATION_ERROR'}), 400

    db.session.add(announcement)
    db.session.commit()

    audit_log(
        AuditAction.ANNOUNCEMENT_CREATE,
        resource_type='announcement',
        resource_id=announcement.id,
        details={'title': announcement.title, 'type': announcement.type}
    )

    _push_if_urgent(announcement)

    return jsonify({
        'message': 'Announcement created',
        'announcement': announcement.to_dict()
    }), 201


@announcements_bp.route('/<int:announcement_id>', methods=['PUT'])
@json_body_required
@handle_db_errors
def update_announcement(announcement_id):
    """Atualizar um aviso (somente os campos enviados)"""
    announcement = db.session.get(Announcement, announcement_id)
    if not announcement:
        return jsonify({'error': 'Announcement not found', 'code': 'NOT_FOUND'}), 404

    data = request.get_json()

    try:
        _scheduler().apply_changes(announcement, data)
    except AnnouncementValidationError as e:
        db.session.rollback()
        return jsonify({'error': str(e), 'code': 'VALIDATION_ERROR'}), 400

    db.session.commit()

    audit_log(
        AuditAction.ANNOUNCEMENT_UPDATE,
        resource_type='announcement',
        resource_id=announcement.id,
        details={'fields': sorted(data.keys())}
    )

    return jsonify({
        'message': 'Announcement updated',
        'announcement': announcement.to_dict()
    })


@announcements_bp.route('/<int:announcement_id>/toggle', methods=['POST'])
@handle_db_errors
def toggle_announcement(announcement_id):
    """Ativar/desativar um aviso"""
    announcement = db.session.get(Announcement, announcement_id)
    if not announcement:
        return jsonify({'error': 'Announcement not found', 'code': 'NOT_FOUND'}), 404

    announcement.toggle_active()
    db.session.commit()

    audit_log(
        AuditAction.ANNOUNCEMENT_TOGGLE,
        resource_type='announcement',
        resource_id=announcement.id,
        details={'is_active': announcement.is_active}
    )

    return jsonify({
        'message': f"Announcement {'activated' if announcement.is_active else 'deactivated'}",
        'announcement': announcement.to_dict()
    })


@announcements_bp.route('/<int:announcement_id>', methods=['DELETE'])
@handle_db_errors
def delete_announcement(announcement_id):
    """Excluir definitivamente um aviso (e seu log de exibições)"""
    announcement = db.session.get(Announcement, announcement_id)
    if not announcement:
        return jsonify({'error': 'Announcement not found', 'code': 'NOT_FOUND'}), 404

    title = announcement.title
    db.session.delete(announcement)
    db.session.commit()

    audit_log(
        AuditAction.ANNOUNCEMENT_DELETE,
        resource_type='announcement',
        resource_id=announcement_id,
        details={'title': title}
    )

    return jsonify({'message': 'Announcement deleted'})


@announcements_bp.route('/<int:announcement_id>/exhibit', methods=['POST'])
def register_exhibition(announcement_id):
    """
    Registrar uma exibição

    Body:
        - localityId: Localidade da TV
        - durationMs: Tempo em tela

    Sempre responde 200: o registro é best effort e não pode travar a TV.
    """
    data = request.get_json(silent=True) or {}

    logged = _scheduler().register_exhibition(
        announcement_id,
        locality_id=data.get('localityId'),
        duration_ms=data.get('durationMs')
    )

    return jsonify({'success': True, 'logged': logged})
