"""
Modelos de mídia - Vídeos, playlists, imagens e mensagens do letreiro
"""

import re
from tvsaude import db
from tvsaude.models.enums import VideoKind
from datetime import datetime


YOUTUBE_ID_RE = re.compile(
    r'(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)([^"&?/\s]{11})'
)


def extract_youtube_id(url):
    """Extrai o ID (11 caracteres) de uma URL do YouTube, ou None"""
    if not url:
        return None
    match = YOUTUBE_ID_RE.search(url)
    return match.group(1) if match else None


class Video(db.Model):
    """Vídeo educativo: arquivo local ou URL do YouTube"""
    __tablename__ = 'videos'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    category = db.Column(db.String(100), default='Geral')

    # local | youtube
    kind = db.Column(db.String(10), nullable=False, default=VideoKind.LOCAL.value)
    file = db.Column(db.String(255))          # nome do arquivo em UPLOAD_FOLDER
    youtube_url = db.Column(db.String(500))

    duration = db.Column(db.Integer)          # segundos
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    display_order = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.now)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)

    @property
    def youtube_id(self):
        return extract_youtube_id(self.youtube_url) if self.kind == VideoKind.YOUTUBE.value else None

    def to_dict(self, priority=None):
        data = {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'kind': self.kind,
            'file': self.file,
            'youtube_url': self.youtube_url,
            'youtube_id': self.youtube_id,
            'duration': self.duration,
            'is_active': self.is_active,
            'display_order': self.display_order,
        }
        if priority is not None:
            data['priority'] = priority
        return data


class PlaylistVideo(db.Model):
    """Associação ordenada playlist ↔ vídeo"""
    __tablename__ = 'playlist_videos'

    id = db.Column(db.Integer, primary_key=True)
    playlist_id = db.Column(db.Integer, db.ForeignKey('playlists.id', ondelete='CASCADE'), nullable=False)
    video_id = db.Column(db.Integer, db.ForeignKey('videos.id', ondelete='CASCADE'), nullable=False)
    position = db.Column(db.Integer, default=0, nullable=False)

    video = db.relationship('Video')

    __table_args__ = (
        db.UniqueConstraint('playlist_id', 'video_id', name='uq_playlist_video'),
    )


class Playlist(db.Model):
    """
    Coleção ordenada de vídeos

    No máximo uma playlist fica ativa globalmente; a regra é garantida
    pela aplicação (activate), não pelo schema.
    """
    __tablename__ = 'playlists'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.now)

    items = db.relationship('PlaylistVideo', order_by='PlaylistVideo.position',
                            cascade='all, delete-orphan', backref='playlist')

    @classmethod
    def get_active(cls):
        return cls.query.filter_by(is_active=True).order_by(cls.id.desc()).first()

    def activate(self):
        """Ativa esta playlist e desativa todas as outras"""
        Playlist.query.filter(Playlist.id != self.id, Playlist.is_active.is_(True)).update(
            {'is_active': False}, synchronize_session=False
        )
        self.is_active = True

    def add_video(self, video, position=None):
        if position is None:
            position = len(self.items)
        self.items.append(PlaylistVideo(video=video, position=position))

    @property
    def active_videos(self):
        """Vídeos ativos na ordem da playlist"""
        return [item.video for item in self.items if item.video and item.video.is_active]

    def to_dict(self, include_videos=False):
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'is_active': self.is_active,
            'video_count': len(self.items),
        }
        if include_videos:
            data['videos'] = [v.to_dict() for v in self.active_videos]
        return data


class Image(db.Model):
    """Imagem do slideshow"""
    __tablename__ = 'imagens'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    file = db.Column(db.String(255), nullable=False)
    duration_ms = db.Column(db.Integer, default=5000, nullable=False)
    display_order = db.Column(db.Integer, default=0, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.now)

    def to_dict(self, priority=None):
        data = {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'file': self.file,
            'duration_ms': self.duration_ms,
            'display_order': self.display_order,
            'is_active': self.is_active,
        }
        if priority is not None:
            data['priority'] = priority
        return data


class Message(db.Model):
    """Mensagem de texto livre do letreiro (ticker)"""
    __tablename__ = 'mensagens'

    id = db.Column(db.Integer, primary_key=True)
    text = db.Column(db.String(500), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    display_order = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.now)

    def to_dict(self):
        return {
            'id': self.id,
            'text': self.text,
            'is_active': self.is_active,
            'display_order': self.display_order,
        }
