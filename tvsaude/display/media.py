"""
Players de mídia da TV
Interface de controle única implementada por backend (arquivo local, YouTube)
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional
from urllib.parse import quote

from tvsaude.models.media import extract_youtube_id

logger = logging.getLogger(__name__)

VOLUME_STEP = 0.1


def clamp_volume(value: float) -> float:
    return round(max(0.0, min(1.0, value)), 2)


class PlayerState:
    IDLE = 'idle'
    LOADING = 'loading'
    PLAYING = 'playing'
    PAUSED = 'paused'
    ENDED = 'ended'
    ERROR = 'error'


class MediaPlayerError(Exception):
    """Mídia que não pode ser carregada ou reproduzida"""


class MediaPlayer(ABC):
    """
    Interface de controle de um backend de mídia

    A rotação injeta os callbacks:
        - on_started(item_id): a mídia começou a tocar
        - on_ended(item_id): fim natural da mídia
        - on_error(item_id, error): falha de carregamento/reprodução
    """

    kind = None

    def __init__(self):
        self.on_started: Optional[Callable] = None
        self.on_ended: Optional[Callable] = None
        self.on_error: Optional[Callable] = None
        self.item = None
        self.volume = 1.0
        self.muted = False

    @abstractmethod
    def load(self, item: dict):
        """Carrega o item (não inicia a reprodução)"""
        pass

    @abstractmethod
    def play(self):
        pass

    @abstractmethod
    def pause(self):
        pass

    @abstractmethod
    def seek(self, seconds: float):
        pass

    @abstractmethod
    def stop(self):
        pass

    @abstractmethod
    def get_state(self) -> str:
        pass

    def set_volume(self, volume: float) -> float:
        self.volume = clamp_volume(volume)
        return self.volume

    def toggle_mute(self) -> bool:
        self.muted = not self.muted
        return self.muted

    @property
    def item_id(self):
        return self.item.get('id') if self.item else None

    def _emit_started(self):
        if self.on_started:
            self.on_started(self.item_id)

    def _emit_ended(self):
        if self.on_ended:
            self.on_ended(self.item_id)

    def _emit_error(self, error):
        logger.error(f"❌ Erro no vídeo {self.item.get('title') if self.item else '?'}: {error}")
        if self.on_error:
            self.on_error(self.item_id, error)


class HeadlessPlayer(MediaPlayer):
    """
    Player sem tela: simula a reprodução com timers

    O fim natural é emitido após a duração do item; itens sem duração
    nunca terminam sozinhos e ficam a cargo do timer de segurança.
    """

    def __init__(self, timers):
        super().__init__()
        self.timers = timers
        self.state = PlayerState.IDLE
        self.source = None
        self.position = 0.0
        self._started_at = None
        self._end_timer = None

    @abstractmethod
    def resolve_source(self, item: dict) -> str:
        """URL reproduzível do item; MediaPlayerError se não houver"""

    def load(self, item: dict):
        self._cancel_end()
        self.item = item
        self.position = 0.0
        self.state = PlayerState.LOADING
        try:
            self.source = self.resolve_source(item)
        except MediaPlayerError as e:
            self.source = None
            self.state = PlayerState.ERROR
            self._emit_error(e)
            return
        logger.info(f"🎬 Carregado: {item.get('title')} ({self.source})")

    def play(self):
        if self.item is None or self.state == PlayerState.ERROR:
            return
        if self.state == PlayerState.PLAYING:
            return
        self.state = PlayerState.PLAYING
        self._started_at = self.timers.now()
        self._arm_end()
        self._emit_started()

    def pause(self):
        if self.state != PlayerState.PLAYING:
            return
        self.position = self._current_position()
        self._cancel_end()
        self.state = PlayerState.PAUSED

    def seek(self, seconds: float):
        self.position = max(0.0, float(seconds))
        if self.state == PlayerState.PLAYING:
            self._started_at = self.timers.now()
            self._arm_end()

    def stop(self):
        self._cancel_end()
        self.state = PlayerState.IDLE
        self.position = 0.0

    def get_state(self) -> str:
        return self.state

    def _current_position(self) -> float:
        if self.state != PlayerState.PLAYING or self._started_at is None:
            return self.position
        return self.position + (self.timers.now() - self._started_at).total_seconds()

    def _arm_end(self):
        self._cancel_end()
        duration = (self.item or {}).get('duration')
        if not duration:
            return
        remaining = max(0.0, float(duration) - self.position)
        self._end_timer = self.timers.call_later(remaining, self._finish, name='fim-do-video')

    def _cancel_end(self):
        if self._end_timer is not None:
            self._end_timer.cancel()
            self._end_timer = None

    def _finish(self):
        self._end_timer = None
        self.state = PlayerState.ENDED
        self.position = float((self.item or {}).get('duration') or 0)
        self._emit_ended()


class LocalFilePlayer(HeadlessPlayer):
    """Vídeos enviados para a pasta de uploads do backend"""

    kind = 'local'

    def __init__(self, timers, uploads_base_url):
        super().__init__(timers)
        self.uploads_base_url = uploads_base_url.rstrip('/')

    def resolve_source(self, item: dict) -> str:
        if not item.get('file'):
            raise MediaPlayerError('Vídeo local sem arquivo')
        return f"{self.uploads_base_url}/{quote(item['file'])}"


class YouTubePlayer(HeadlessPlayer):
    """Vídeos do YouTube (player embed, sem controles)"""

    kind = 'youtube'
    EMBED_PARAMS = 'autoplay=1&controls=0&disablekb=1&fs=0&iv_load_policy=3&modestbranding=1&rel=0'

    def resolve_source(self, item: dict) -> str:
        video_id = item.get('youtube_id') or extract_youtube_id(item.get('youtube_url'))
        if not video_id:
            raise MediaPlayerError(f"URL do YouTube inválida: {item.get('youtube_url')}")
        return f"https://www.youtube.com/embed/{video_id}?{self.EMBED_PARAMS}"


class BackgroundAudio:
    """Música ambiente tocada por baixo dos vídeos"""

    TRACKS = {
        'ambient-1': 'Ambiente Relaxante',
        'ambient-2': 'Natureza Calma',
        'ambient-3': 'Meditação',
    }

    def __init__(self, volume=0.3, track_id='ambient-1', enabled=True):
        self.volume = clamp_volume(volume)
        self.track_id = track_id
        self.enabled = enabled
        self.muted = False

    def start(self):
        self.enabled = True
        logger.info(f"🎵 Música ambiente: {self.TRACKS.get(self.track_id, self.track_id)}")

    def stop(self):
        self.enabled = False
        logger.info("⏸️ Música ambiente parada")

    def toggle(self) -> bool:
        if self.enabled:
            self.stop()
        else:
            self.start()
        return self.enabled

    def change_track(self, track_id) -> bool:
        if track_id not in self.TRACKS:
            logger.warning(f"Faixa desconhecida: {track_id}")
            return False
        self.track_id = track_id
        logger.info(f"🎵 Faixa alterada para: {self.TRACKS[track_id]}")
        return True

    def volume_up(self) -> float:
        self.volume = clamp_volume(self.volume + VOLUME_STEP)
        return self.volume

    def volume_down(self) -> float:
        self.volume = clamp_volume(self.volume - VOLUME_STEP)
        return self.volume

    def toggle_mute(self) -> bool:
        self.muted = not self.muted
        return self.muted
