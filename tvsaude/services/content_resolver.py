"""
Resolvedor de conteúdo por IP
=============================

Dado o IP da TV, decide qual conjunto de vídeos (e imagens) exibir:

1. IP cadastrado em uma localidade ativa → vídeos associados diretamente
   + vídeos das playlists associadas, sem duplicatas, ordenados por
   prioridade (desc) e ordem de exibição (asc)
2. Sem localidade (ou localidade sem vídeos) → playlist ativa global
3. Sem playlist ativa → todos os vídeos ativos

Falhas de banco em um caminho caem no próximo; só quando todos falham
o erro chega a quem chamou (ContentUnavailableError).
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from tvsaude import db
from tvsaude.models import Locality, LocalityIP, Playlist, Video, Image, normalize_ip

logger = logging.getLogger(__name__)


class ContentUnavailableError(Exception):
    """Todos os caminhos de resolução falharam"""


@dataclass
class ResolvedContent:
    locality: Optional[dict] = None
    playlist: Optional[dict] = None
    videos: List[dict] = field(default_factory=list)
    source: str = 'none'  # locality | active_playlist | all_videos | none

    def to_dict(self):
        return {
            'locality': self.locality,
            'playlist': self.playlist,
            'videos': self.videos,
            'source': self.source,
            'total': len(self.videos)
        }


class ContentResolver:
    """
    Usage:
        resolver = ContentResolver()
        content = resolver.resolve('10.0.50.10')
        content.videos  # lista vazia = "sem conteúdo", não é erro
    """

    def find_locality(self, client_ip) -> Optional[Locality]:
        """Localidade ativa dona do IP (exato ou faixa), ou None"""
        ip = normalize_ip(client_ip)
        if ip is None:
            return None

        entries = (
            LocalityIP.query
            .join(Locality, Locality.id == LocalityIP.locality_id)
            .filter(Locality.is_active.is_(True), LocalityIP.is_active.is_(True))
            .order_by(LocalityIP.id)
            .all()
        )

        # IP exato tem precedência sobre faixas
        for entry in entries:
            if entry.ip_address and normalize_ip(entry.ip_address) == ip:
                return entry.locality
        for entry in entries:
            if entry.matches(ip):
                return entry.locality
        return None

    def resolve(self, client_ip) -> ResolvedContent:
        locality = None
        try:
            locality = self.find_locality(client_ip)
            if locality is not None:
                content = self._locality_content(locality)
                if content.videos:
                    logger.info(f"IP {client_ip} → localidade {locality.name} ({len(content.videos)} vídeos)")
                    return content
                logger.info(f"Localidade {locality.name} sem vídeos, usando conteúdo global")
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.warning(f"Falha ao resolver localidade para {client_ip}, usando fallback: {e}")
            locality = None

        content = self._global_content()
        if locality is not None:
            content.locality = locality.to_dict()
        return content

    def resolve_images(self, client_ip) -> List[dict]:
        """Imagens da localidade do IP, ou todas as imagens ativas"""
        try:
            locality = self.find_locality(client_ip)
            if locality is not None:
                links = [link for link in locality.image_links if link.image and link.image.is_active]
                if links:
                    links.sort(key=lambda link: (-link.priority, link.image.display_order, link.image.id))
                    return [link.image.to_dict(priority=link.priority) for link in links]
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.warning(f"Falha ao resolver imagens para {client_ip}, usando todas as ativas: {e}")

        images = (
            Image.query.filter_by(is_active=True)
            .order_by(Image.display_order.asc(), Image.id.asc())
            .all()
        )
        return [image.to_dict() for image in images]

    def active_playlist_content(self) -> ResolvedContent:
        """Vídeos da playlist ativa global (pode vir vazio)"""
        playlist = Playlist.get_active()
        if playlist is None:
            return ResolvedContent()
        return ResolvedContent(
            playlist=playlist.to_dict(),
            videos=[v.to_dict() for v in playlist.active_videos],
            source='active_playlist'
        )

    def _locality_content(self, locality) -> ResolvedContent:
        # video_id -> (prioridade, vídeo); a maior prioridade vence
        merged = {}

        for link in locality.video_links:
            video = link.video
            if video is None or not video.is_active:
                continue
            current = merged.get(video.id)
            if current is None or link.priority > current[0]:
                merged[video.id] = (link.priority, video)

        playlist_links = sorted(
            (link for link in locality.playlist_links if link.playlist is not None),
            key=lambda link: -link.priority
        )
        for link in playlist_links:
            for video in link.playlist.active_videos:
                current = merged.get(video.id)
                if current is None or link.priority > current[0]:
                    merged[video.id] = (link.priority, video)

        ordered = sorted(merged.values(), key=lambda pair: (-pair[0], pair[1].display_order, pair[1].id))

        playlist = playlist_links[0].playlist.to_dict() if playlist_links else None
        return ResolvedContent(
            locality=locality.to_dict(),
            playlist=playlist,
            videos=[video.to_dict(priority=priority) for priority, video in ordered],
            source='locality'
        )

    def _global_content(self) -> ResolvedContent:
        try:
            content = self.active_playlist_content()
            if content.videos:
                return content
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.warning(f"Falha ao ler a playlist ativa, usando todos os vídeos: {e}")

        try:
            videos = (
                Video.query.filter_by(is_active=True)
                .order_by(Video.display_order.asc(), Video.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Falha ao ler os vídeos ativos: {e}")
            raise ContentUnavailableError('Nenhuma fonte de conteúdo disponível') from e

        if not videos:
            return ResolvedContent()
        return ResolvedContent(videos=[v.to_dict() for v in videos], source='all_videos')
