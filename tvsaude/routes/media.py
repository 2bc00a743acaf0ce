"""
Routes Media - Imagens, mensagens do letreiro e playlist ativa
"""

from flask import Blueprint, jsonify
from tvsaude.models import Message
from tvsaude.services.content_resolver import ContentResolver
from tvsaude.utils.decorators import handle_db_errors
from tvsaude.utils.helpers import get_client_ip

media_bp = Blueprint('media', __name__)


@media_bp.route('/images', methods=['GET'])
@handle_db_errors
def get_images():
    """Imagens do slideshow da TV (localidade do IP ou todas as ativas)"""
    images = ContentResolver().resolve_images(get_client_ip())
    return jsonify({'images': images, 'total': len(images)})


@media_bp.route('/messages', methods=['GET'])
@handle_db_errors
def get_messages():
    messages = (
        Message.query.filter_by(is_active=True)
        .order_by(Message.display_order.asc(), Message.id.asc())
        .all()
    )
    return jsonify({'messages': [m.to_dict() for m in messages]})


@media_bp.route('/playlists/active/videos', methods=['GET'])
@handle_db_errors
def get_active_playlist_videos():
    """Vídeos da playlist ativa global (fallback de conteúdo da TV)"""
    return jsonify(ContentResolver().active_playlist_content().to_dict())
