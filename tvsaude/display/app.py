"""
Aplicação da TV
===============

Orquestra os fluxos independentes da tela:

- Rotação de vídeos (VideoRotation)
- Slideshow de imagens e letreiro de mensagens (Carousel)
- Carrossel de avisos (AnnouncementCarousel)
- Polling do controle remoto (CommandConsumer)

Cada lista é recarregada no seu próprio intervalo. Para quem olha a TV só
existem três telas: carregando, sem conteúdo (com relógio) e reproduzindo.

As buscas HTTP rodam fora do lock dos timers; só a aplicação do resultado
(set_items, execução de comando) é serializada com as transições.
"""

import logging
from typing import Optional

from config import DisplayConfig
from tvsaude.display.api_client import TVApiClient
from tvsaude.display.carousel import AnnouncementCarousel, Carousel
from tvsaude.display.commands import CommandConsumer
from tvsaude.display.media import BackgroundAudio, LocalFilePlayer, YouTubePlayer
from tvsaude.display.rotation import VideoRotation
from tvsaude.models.enums import CommandName
from tvsaude.utils.helpers import format_clock
from tvsaude.utils.timers import ThreadingTimers

logger = logging.getLogger(__name__)


class Screen:
    LOADING = 'loading'
    NO_CONTENT = 'no_content'
    PLAYING = 'playing'


class DisplayApp:
    """
    Usage:
        app = DisplayApp()
        app.start()
        ...
        app.stop()
    """

    def __init__(self, settings=DisplayConfig, api: TVApiClient = None, timers=None,
                 players=None, audio: BackgroundAudio = None):
        self.settings = settings
        self.timers = timers or ThreadingTimers()
        self.api = api or TVApiClient(
            settings.API_BASE_URL,
            client_ip=settings.CLIENT_IP,
            timeout=settings.REQUEST_TIMEOUT,
            cache_file=settings.CACHE_FILE
        )
        self.audio = audio or BackgroundAudio()

        if players is None:
            players = {
                'local': LocalFilePlayer(self.timers, settings.UPLOADS_BASE_URL),
                'youtube': YouTubePlayer(self.timers),
            }

        self.rotation = VideoRotation(
            players,
            self.timers,
            safety_timeout=settings.SAFETY_TIMEOUT_SECONDS,
            max_errors=settings.MAX_VIDEO_ERRORS,
            error_advance_delay=settings.ERROR_ADVANCE_DELAY_SECONDS,
            end_advance_delay=settings.END_ADVANCE_DELAY_SECONDS,
            refetch=self._fetch_videos
        )
        self.slideshow = Carousel(
            self.timers,
            interval=settings.DEFAULT_IMAGE_DURATION_MS / 1000,
            duration_of=lambda image: (image.get('duration_ms') or settings.DEFAULT_IMAGE_DURATION_MS) / 1000,
            name='imagens'
        )
        self.ticker = Carousel(self.timers, interval=settings.MESSAGE_ROTATION_SECONDS, name='letreiro')
        self.announcements = AnnouncementCarousel(
            self.timers,
            rotation_interval=settings.ANNOUNCEMENT_ROTATION_SECONDS,
            auto_hide=settings.ANNOUNCEMENT_AUTO_HIDE,
            log_exhibition=self._log_exhibition
        )
        self.commands = CommandConsumer(self.api.get_latest_command, self.execute_command)

        self.locality: Optional[dict] = None
        self.content_loaded = False
        self._loops = []

        self._handlers = {
            CommandName.PLAY.value: lambda params: self.rotation.play(),
            CommandName.PAUSE.value: lambda params: self.rotation.pause(),
            CommandName.NEXT.value: lambda params: self.rotation.next(),
            CommandName.PREVIOUS.value: lambda params: self.rotation.previous(),
            CommandName.RESTART.value: lambda params: self.rotation.restart_current(),
            CommandName.RELOAD_PLAYLIST.value: lambda params: self._in_background(self.refresh_content, name='recarregar-playlist'),
            CommandName.EMERGENCY_STOP.value: lambda params: self.emergency_stop(),
            CommandName.VOLUME_UP.value: lambda params: self.rotation.volume_up(),
            CommandName.VOLUME_DOWN.value: lambda params: self.rotation.volume_down(),
            CommandName.MUTE.value: lambda params: self.toggle_mute(),
            CommandName.TOGGLE_BACKGROUND_MUSIC.value: lambda params: self.audio.toggle(),
            CommandName.BACKGROUND_MUSIC_ON.value: lambda params: self.audio.start(),
            CommandName.BACKGROUND_MUSIC_OFF.value: lambda params: self.audio.stop(),
            CommandName.CHANGE_BACKGROUND_TRACK.value: lambda params: self.audio.change_track((params or {}).get('trackId')),
            CommandName.BACKGROUND_VOLUME_UP.value: lambda params: self.audio.volume_up(),
            CommandName.BACKGROUND_VOLUME_DOWN.value: lambda params: self.audio.volume_down(),
        }

    @property
    def locality_id(self):
        if self.settings.LOCALITY_ID is not None:
            return self.settings.LOCALITY_ID
        return self.locality.get('id') if self.locality else None

    # ==================== CICLO DE VIDA ====================

    def start(self):
        logger.info("🚀 Inicializando aplicação TV Saúde")

        self.refresh_content()
        self.refresh_images()
        self.refresh_messages()
        self.refresh_announcements()

        with self.timers.lock:
            self.slideshow.start()
            self.ticker.start()
            self.announcements.start()

        s = self.settings
        self._loops = [
            self.timers.every(s.CONTENT_REFRESH_SECONDS, self.refresh_content, name='conteudo', serialized=False),
            self.timers.every(s.COMMAND_POLL_SECONDS, self.commands.poll, name='comandos', serialized=False),
            self.timers.every(s.ANNOUNCEMENT_REFRESH_SECONDS, self.refresh_announcements, name='avisos', serialized=False),
            self.timers.every(s.MESSAGE_REFRESH_SECONDS, self.refresh_messages, name='mensagens', serialized=False),
            self.timers.every(s.IMAGE_REFRESH_SECONDS, self.refresh_images, name='imagens', serialized=False),
        ]

    def stop(self):
        for loop in self._loops:
            loop.cancel()
        self._loops = []
        with self.timers.lock:
            self.announcements.stop()
            self.ticker.stop()
            self.slideshow.stop()
            self.rotation.stop()
        logger.info("⏹️ TV parada")

    # ==================== TELA ====================

    @property
    def screen(self) -> str:
        if not self.content_loaded:
            return Screen.LOADING
        if not self.rotation.items:
            return Screen.NO_CONTENT
        return Screen.PLAYING

    def screen_info(self) -> dict:
        info = {'screen': self.screen, 'locality': self.locality}
        if info['screen'] == Screen.NO_CONTENT:
            info['message'] = 'Nenhum vídeo disponível no momento'
            info['clock'] = format_clock(self.timers.now())
        elif info['screen'] == Screen.PLAYING:
            info['video'] = self.rotation.current
            info['state'] = self.rotation.state
            info['announcement'] = self.announcements.visible
            info['image'] = self.slideshow.current
            info['message'] = self.ticker.current
        return info

    # ==================== ATUALIZAÇÕES ====================

    def _fetch_videos(self):
        data = self.api.get_content()
        if data is None:
            return None
        self.locality = data.get('locality')
        return data.get('videos', [])

    def refresh_content(self):
        videos = self._fetch_videos()
        if videos is None:
            # Falha temporária: mantém o que está na tela
            return
        with self.timers.lock:
            self.content_loaded = True
            self.rotation.set_items(videos)

    def refresh_images(self):
        images = self.api.get_images()
        if images is not None:
            with self.timers.lock:
                self.slideshow.set_items(images)

    def refresh_messages(self):
        messages = self.api.get_messages()
        if messages is not None:
            with self.timers.lock:
                self.ticker.set_items(messages)

    def refresh_announcements(self):
        announcements = self.api.get_announcements(self.locality_id)
        if announcements is not None:
            with self.timers.lock:
                self.announcements.set_items(announcements)

    def _log_exhibition(self, announcement_id, duration_ms):
        self._in_background(self.api.post_exhibition, announcement_id, self.locality_id, duration_ms, name='exibicao')

    def _in_background(self, callback, *args, name=None):
        """Agenda I/O de rede para já, fora do lock das transições"""
        return self.timers.call_later(0, callback, *args, name=name, serialized=False)

    # ==================== COMANDOS ====================

    def execute_command(self, name, params=None):
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning(f"⚠️ Comando desconhecido: {name}")
            return
        with self.timers.lock:
            handler(params)

    def emergency_stop(self):
        logger.warning("🛑 Parada de emergência")
        self.rotation.pause()
        self.announcements.dismiss()
        self.audio.stop()

    def toggle_mute(self):
        muted = self.rotation.toggle_mute()
        if self.audio.muted != muted:
            self.audio.toggle_mute()
        return muted
