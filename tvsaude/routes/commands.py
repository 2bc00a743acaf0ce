"""
Routes Commands - Controle remoto das TVs
"""

from flask import Blueprint, request, jsonify, current_app
from tvsaude.services.command_channel import CommandChannel, CommandError, BlockedCommandError
from tvsaude.utils.decorators import handle_db_errors, json_body_required
from tvsaude.utils.helpers import get_int_arg
import logging

commands_bp = Blueprint('commands', __name__)
logger = logging.getLogger(__name__)


@commands_bp.route('/latest', methods=['GET'])
@handle_db_errors
def get_latest_command():
    """Último comando (null se nenhum); a TV compara o id com o último visto"""
    command = CommandChannel().poll_latest()
    return jsonify(command.to_dict() if command else None)


@commands_bp.route('', methods=['POST'])
@json_body_required
@handle_db_errors
def dispatch_command():
    """
    Enviar um comando para as TVs

    Body:
        - command: play, pause, next, previous, restart, reload_playlist,
          emergency_stop, volume_up, volume_down, mute, ... (obrigatório)
        - params: objeto opcional
        - issued_by: quem enviou
    """
    data = request.get_json()
    if not data.get('command'):
        return jsonify({'error': 'command is required', 'code': 'BAD_REQUEST'}), 400

    try:
        command = CommandChannel().dispatch(
            data['command'],
            data.get('params'),
            issued_by=data.get('issued_by')
        )
    except BlockedCommandError as e:
        return jsonify({'error': str(e), 'reason': e.reason, 'code': e.code}), e.status_code
    except CommandError as e:
        return jsonify({'error': str(e), 'code': e.code}), e.status_code

    return jsonify(command.to_dict()), 201


@commands_bp.route('', methods=['GET'])
@handle_db_errors
def list_commands():
    """
    Histórico de comandos

    Query params:
        - limit: Quantidade (padrão COMMAND_HISTORY_LIMIT)
    """
    limit = get_int_arg('limit', current_app.config.get('COMMAND_HISTORY_LIMIT', 50))
    commands = CommandChannel().history(limit)

    return jsonify({
        'commands': [c.to_dict() for c in commands]
    })
