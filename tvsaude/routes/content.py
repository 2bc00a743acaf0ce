"""
Routes Content - Conteúdo da TV por IP
"""

from flask import Blueprint, jsonify
from tvsaude.services.content_resolver import ContentResolver, ContentUnavailableError
from tvsaude.utils.helpers import get_client_ip
import logging

content_bp = Blueprint('content', __name__)
logger = logging.getLogger(__name__)


@content_bp.route('', methods=['GET'])
def get_content():
    """
    Vídeos da TV que fez a requisição

    Query params:
        - clientIp: IP a resolver (padrão: IP da requisição)

    Lista vazia significa "sem conteúdo", não erro.
    """
    client_ip = get_client_ip()

    try:
        content = ContentResolver().resolve(client_ip)
    except ContentUnavailableError as e:
        logger.error(f"Conteúdo indisponível para {client_ip}: {e}")
        return jsonify({'error': 'Conteúdo temporariamente indisponível', 'code': 'CONTENT_UNAVAILABLE'}), 503

    data = content.to_dict()
    data['client_ip'] = client_ip
    return jsonify(data)
