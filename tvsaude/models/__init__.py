"""
Modelos da aplicação
Export centralizado de todos os modelos SQLAlchemy
"""

from tvsaude.models.enums import AnnouncementType, CommandName, VideoKind
from tvsaude.models.locality import (
    Locality, LocalityIP, LocalityPlaylist, LocalityVideo, LocalityImage, normalize_ip
)
from tvsaude.models.media import Video, Playlist, PlaylistVideo, Image, Message, extract_youtube_id
from tvsaude.models.announcement import Announcement, AnnouncementExhibition
from tvsaude.models.command import RemoteCommand
from tvsaude.utils.audit import AuditLog

__all__ = [
    # Enums
    'AnnouncementType',
    'CommandName',
    'VideoKind',
    # Localidades
    'Locality',
    'LocalityIP',
    'LocalityPlaylist',
    'LocalityVideo',
    'LocalityImage',
    'normalize_ip',
    # Mídia
    'Video',
    'Playlist',
    'PlaylistVideo',
    'Image',
    'Message',
    'extract_youtube_id',
    # Avisos
    'Announcement',
    'AnnouncementExhibition',
    # Controle remoto
    'RemoteCommand',
    # Auditoria
    'AuditLog'
]
