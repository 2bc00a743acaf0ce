"""
Modelo Locality - Unidades de saúde (UBS) e seus IPs
====================================================

Uma localidade possui:
- Os IPs/faixas usados para reconhecer a TV que faz a requisição
- Associações com playlists, vídeos e imagens, cada uma com prioridade

Tudo é removido em cascata com a localidade.
"""

import ipaddress
from tvsaude import db
from datetime import datetime


def normalize_ip(raw):
    """
    Converte o IP para ipaddress.ip_address, desfazendo o mapeamento
    IPv4-em-IPv6 (::ffff:10.0.50.10). Retorna None se inválido.
    """
    if not raw:
        return None
    try:
        ip = ipaddress.ip_address(raw.strip())
    except ValueError:
        return None
    if ip.version == 6 and ip.ipv4_mapped:
        return ip.ipv4_mapped
    return ip


class Locality(db.Model):
    """Localidade (UBS)"""
    __tablename__ = 'localidades'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.now)

    ips = db.relationship('LocalityIP', backref='locality', cascade='all, delete-orphan')
    playlist_links = db.relationship('LocalityPlaylist', backref='locality', cascade='all, delete-orphan')
    video_links = db.relationship('LocalityVideo', backref='locality', cascade='all, delete-orphan')
    image_links = db.relationship('LocalityImage', backref='locality', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'is_active': self.is_active,
        }


class LocalityIP(db.Model):
    """
    IP exato ou faixa associada a uma localidade

    ip_range aceita CIDR (10.0.50.0/24) ou intervalo (10.0.50.10-10.0.50.20).
    """
    __tablename__ = 'localidade_ips'

    id = db.Column(db.Integer, primary_key=True)
    locality_id = db.Column(db.Integer, db.ForeignKey('localidades.id', ondelete='CASCADE'), nullable=False)
    ip_address = db.Column(db.String(45))
    ip_range = db.Column(db.String(100))
    description = db.Column(db.String(200))
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    def matches(self, ip) -> bool:
        """Verifica se o IP (já normalizado) pertence a esta entrada"""
        if ip is None or not self.is_active:
            return False

        if self.ip_address:
            if normalize_ip(self.ip_address) == ip:
                return True

        if self.ip_range:
            spec = self.ip_range.strip()
            if '/' in spec:
                try:
                    network = ipaddress.ip_network(spec, strict=False)
                except ValueError:
                    return False
                return ip.version == network.version and ip in network
            if '-' in spec:
                first, _, last = spec.partition('-')
                low, high = normalize_ip(first), normalize_ip(last)
                if low is None or high is None or low.version != ip.version:
                    return False
                return low <= ip <= high
            return normalize_ip(spec) == ip

        return False

    def to_dict(self):
        return {
            'id': self.id,
            'locality_id': self.locality_id,
            'ip_address': self.ip_address,
            'ip_range': self.ip_range,
            'description': self.description,
            'is_active': self.is_active,
        }


class LocalityPlaylist(db.Model):
    __tablename__ = 'localidade_playlists'

    id = db.Column(db.Integer, primary_key=True)
    locality_id = db.Column(db.Integer, db.ForeignKey('localidades.id', ondelete='CASCADE'), nullable=False)
    playlist_id = db.Column(db.Integer, db.ForeignKey('playlists.id', ondelete='CASCADE'), nullable=False)
    priority = db.Column(db.Integer, default=1, nullable=False)

    playlist = db.relationship('Playlist')


class LocalityVideo(db.Model):
    __tablename__ = 'localidade_videos'

    id = db.Column(db.Integer, primary_key=True)
    locality_id = db.Column(db.Integer, db.ForeignKey('localidades.id', ondelete='CASCADE'), nullable=False)
    video_id = db.Column(db.Integer, db.ForeignKey('videos.id', ondelete='CASCADE'), nullable=False)
    priority = db.Column(db.Integer, default=1, nullable=False)

    video = db.relationship('Video')


class LocalityImage(db.Model):
    __tablename__ = 'localidade_imagens'

    id = db.Column(db.Integer, primary_key=True)
    locality_id = db.Column(db.Integer, db.ForeignKey('localidades.id', ondelete='CASCADE'), nullable=False)
    image_id = db.Column(db.Integer, db.ForeignKey('imagens.id', ondelete='CASCADE'), nullable=False)
    priority = db.Column(db.Integer, default=1, nullable=False)

    image = db.relationship('Image')
