"""
Rotação de vídeos
=================

Máquina de estados que conduz a sequência de vídeos da TV:

    LOADING → PLAYING | PAUSED | ERROR, e ERROR sempre volta para PLAYING
    (avançando para o próximo item ou recarregando a lista)

Regras:
- Fim natural: com um único item, reinicia o mesmo; senão avança (i + 1) mod n
- Timer de segurança armado a cada item novo força o avanço se o fim não vier
- Erro: conta; ao atingir o limite recarrega a lista e zera; senão avança
  após um pequeno atraso. Um item que começa a tocar zera o contador
- next/previous cancelam o que estiver pendente e movem o cursor na hora
- Nova lista nunca interrompe o item em reprodução; se o cursor ficou fora
  do intervalo, volta a zero

Só existe uma transição agendada por vez: armar uma cancela a anterior.
"""

import logging
from typing import Callable, Dict, List, Optional

from tvsaude.display.media import MediaPlayer, PlayerState, clamp_volume, VOLUME_STEP

logger = logging.getLogger(__name__)


class PlaybackState:
    LOADING = 'loading'
    PLAYING = 'playing'
    PAUSED = 'paused'
    ERROR = 'error'
    NO_CONTENT = 'no_content'


def next_index(index: int, length: int, step: int = 1) -> int:
    """Cursor circular: next_index(0, 1) == 0"""
    if length <= 0:
        return 0
    return (index + step) % length


class VideoRotation:

    def __init__(
        self,
        players: Dict[str, MediaPlayer],
        timers,
        safety_timeout: float = 300,
        max_errors: int = 3,
        error_advance_delay: float = 2,
        end_advance_delay: float = 0.5,
        refetch: Optional[Callable[[], Optional[List[dict]]]] = None,
        on_change: Optional[Callable[[Optional[dict]], None]] = None
    ):
        self.players = players
        self.timers = timers
        self.safety_timeout = safety_timeout
        self.max_errors = max_errors
        self.error_advance_delay = error_advance_delay
        self.end_advance_delay = end_advance_delay
        self.refetch = refetch
        self.on_change = on_change

        self.items: List[dict] = []
        self.index = 0
        self.state = PlaybackState.LOADING
        self.error_count = 0
        self.paused = False
        self.volume = 1.0
        self.muted = False

        self._playing_id = None
        self._player: Optional[MediaPlayer] = None
        self._safety = None
        self._pending = None
        self._reload_token = None

        for player in players.values():
            player.on_started = self.on_started
            player.on_ended = self.on_ended
            player.on_error = self.on_error

    @property
    def current(self) -> Optional[dict]:
        if not self.items or self.index >= len(self.items):
            return None
        return self.items[self.index]

    @property
    def has_pending_transition(self) -> bool:
        return self._pending is not None or self._safety is not None

    # ==================== LISTA ====================

    def set_items(self, items: List[dict]):
        """
        Substitui a lista sem interromper o item em reprodução

        Só reinicia a reprodução quando não havia nada tocando ou quando o
        cursor ficou fora da nova lista.
        """
        self.items = list(items or [])

        if not self.items:
            self._halt()
            self.index = 0
            self.state = PlaybackState.NO_CONTENT
            logger.info("📭 Nenhum vídeo disponível")
            return

        if self.index >= len(self.items):
            logger.info(f"Lista encolheu para {len(self.items)} itens, cursor volta ao início")
            self.index = 0
            self._start_current()
        elif self._playing_id is None:
            self._start_current()

    def reload(self):
        """
        Busca a lista de novo e recarrega o item do cursor

        A busca roda fora do lock dos timers e o resultado é aplicado sob o
        lock. Se outra transição assumir nesse meio tempo (next, pause), o
        resultado é descartado.
        """
        if self.refetch is None:
            self._start_current()
            return

        self._cancel_pending()
        token = object()
        self._reload_token = token
        self._pending = self.timers.call_later(0, self._refetch, token, name='recarregar', serialized=False)

    def _refetch(self, token):
        try:
            items = self.refetch()
        except Exception as e:
            logger.error(f"Erro ao recarregar a lista de vídeos: {e}")
            items = None

        with self.timers.lock:
            if self._reload_token is not token:
                logger.debug("Recarga descartada, outra transição assumiu")
                return
            self._reload_token = None
            self._pending = None
            self._apply_reload(items)

    def _apply_reload(self, items):
        if items is None:
            # Servidor indisponível: mantém a lista atual
            self._start_current()
            return

        self.items = list(items)
        if not self.items:
            self.set_items([])
            return
        if self.index >= len(self.items):
            self.index = 0
        self._start_current()

    # ==================== TRANSIÇÕES ====================

    def start(self):
        if self.items:
            self._start_current()

    def stop(self):
        self._halt()
        self.state = PlaybackState.LOADING

    def next(self):
        if not self.items:
            return
        self.index = next_index(self.index, len(self.items))
        self._start_current()

    def previous(self):
        if not self.items:
            return
        self.index = next_index(self.index, len(self.items), -1)
        self._start_current()

    def restart_current(self):
        """Volta o item atual ao início"""
        if self._player is None or self.current is None:
            return
        self._cancel_pending()
        self._player.seek(0)
        if not self.paused:
            self._player.play()
        self._arm_safety()

    def play(self):
        self.paused = False
        if self._player is None:
            self.start()
            return
        self._player.play()
        self._arm_safety()

    def pause(self):
        self.paused = True
        self._cancel_pending()
        if self._player is not None:
            self._player.pause()
        if self.state == PlaybackState.PLAYING:
            self.state = PlaybackState.PAUSED

    # ==================== EVENTOS DO PLAYER ====================

    def on_started(self, item_id):
        if item_id != self._playing_id:
            return
        self.error_count = 0
        self.state = PlaybackState.PAUSED if self.paused else PlaybackState.PLAYING

    def on_ended(self, item_id):
        if item_id != self._playing_id:
            logger.debug(f"Fim ignorado de item antigo {item_id}")
            return
        logger.info(f"🏁 Vídeo terminou: {self._title()}")
        self._schedule(self.end_advance_delay, self._after_end, 'fim')

    def on_error(self, item_id, error=None):
        if item_id != self._playing_id:
            return

        self.error_count += 1
        self.state = PlaybackState.ERROR
        logger.warning(f"📊 Contador de erros: {self.error_count}/{self.max_errors}")

        if self.error_count >= self.max_errors:
            logger.warning("⚠️ Máximo de erros atingido, recarregando lista de vídeos")
            self.error_count = 0
            self._cancel_pending()
            self.reload()
            return

        self._schedule(self.error_advance_delay, self._after_end, 'erro')

    # ==================== INTERNOS ====================

    def _after_end(self):
        if len(self.items) == 1:
            self.index = 0
            self._restart_in_place()
        else:
            self.next()

    def _restart_in_place(self):
        logger.info("🔄 Apenas 1 vídeo, reiniciando")
        if self._player is not None and self._player.get_state() != PlayerState.ERROR and self._playing_id == self.items[0].get('id'):
            self._player.seek(0)
            self._player.play()
            self._arm_safety()
        else:
            self._start_current()

    def _start_current(self):
        self._cancel_pending()
        item = self.current
        if item is None:
            return

        player = self.players.get(item.get('kind') or 'local')
        if player is None:
            logger.error(f"Sem player para o tipo {item.get('kind')!r}")
            if self._player is not None:
                self._player.stop()
                self._player = None
            self._playing_id = item.get('id')
            self.on_error(self._playing_id, 'tipo de mídia não suportado')
            return

        if self._player is not None and self._player is not player:
            self._player.stop()
        self._player = player

        self._playing_id = item.get('id')
        self.state = PlaybackState.LOADING
        logger.info(f"🎬 Vídeo {self.index + 1}/{len(self.items)}: {item.get('title')}")

        player.set_volume(self.volume)
        player.muted = self.muted
        self._arm_safety()
        if self.on_change:
            self.on_change(item)

        player.load(item)
        if not self.paused and self._playing_id == item.get('id'):
            player.play()

    def _arm_safety(self):
        if self._safety is not None:
            self._safety.cancel()
        self._safety = self.timers.call_later(self.safety_timeout, self._on_safety_timeout, name='seguranca')

    def _on_safety_timeout(self):
        self._safety = None
        logger.warning(f"⏰ Tempo limite atingido em {self._title()}, forçando transição")
        self._after_end()

    def _schedule(self, delay, callback, name):
        """Agenda a única transição pendente (cancela timer de segurança e anterior)"""
        self._cancel_pending()

        def fire():
            self._pending = None
            callback()

        self._pending = self.timers.call_later(delay, fire, name=name)

    def _cancel_pending(self):
        self._reload_token = None
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if self._safety is not None:
            self._safety.cancel()
            self._safety = None

    def _halt(self):
        self._cancel_pending()
        if self._player is not None:
            self._player.stop()
        self._player = None
        self._playing_id = None

    def _title(self):
        item = self.current
        return item.get('title') if item else '?'

    # ==================== VOLUME ====================

    def change_volume(self, delta: float) -> float:
        self.volume = clamp_volume(self.volume + delta)
        for player in self.players.values():
            player.set_volume(self.volume)
        return self.volume

    def volume_up(self) -> float:
        return self.change_volume(VOLUME_STEP)

    def volume_down(self) -> float:
        return self.change_volume(-VOLUME_STEP)

    def toggle_mute(self) -> bool:
        self.muted = not self.muted
        for player in self.players.values():
            player.muted = self.muted
        return self.muted
