"""
Carrosséis da TV
================

Cada carrossel tem seu próprio timer e cursor e roda independente da
rotação de vídeos:

- Slideshow de imagens (duração própria de cada imagem)
- Letreiro de mensagens (intervalo fixo)
- Avisos (intervalo de rotação, duração por tipo, ocultar automático ou
  dispensa manual, registro de exibição)
"""

import logging
from typing import Callable, List, Optional

from tvsaude.display.rotation import next_index

logger = logging.getLogger(__name__)

DEFAULT_ANNOUNCEMENT_DURATION_MS = 20000


class Carousel:
    """
    Rotação circular de uma lista

    Args:
        timers: Serviço de timers
        interval: Segundos por item quando duration_of não é informado
        duration_of: Função item → segundos em tela
        on_change: Chamado com o novo item atual
    """

    def __init__(self, timers, interval: float = 5, duration_of: Callable = None,
                 on_change: Callable = None, name: str = 'carrossel'):
        self.timers = timers
        self.interval = interval
        self.duration_of = duration_of
        self.on_change = on_change
        self.name = name

        self.items: List = []
        self.index = 0
        self.running = False
        self._timer = None

    @property
    def current(self):
        if not self.items or self.index >= len(self.items):
            return None
        return self.items[self.index]

    def set_items(self, items):
        """Troca a lista mantendo o item atual; cursor fora do intervalo volta a zero"""
        previous = self.current
        self.items = list(items or [])

        shrunk = self.index >= len(self.items)
        if shrunk:
            self.index = 0

        if not self.running:
            return
        if not self.items:
            self._cancel()
            return
        if shrunk or previous is None:
            self._notify()
        if shrunk or self._timer is None:
            self._schedule()

    def start(self):
        if self.running:
            return
        self.running = True
        if self.items:
            self._notify()
            self._schedule()

    def stop(self):
        self.running = False
        self._cancel()

    def advance(self):
        if not self.items:
            return
        self.index = next_index(self.index, len(self.items))
        self._notify()
        self._schedule()

    def _delay(self) -> float:
        if self.duration_of is not None and self.current is not None:
            try:
                return max(0.5, float(self.duration_of(self.current)))
            except (TypeError, ValueError):
                pass
        return self.interval

    def _schedule(self):
        self._cancel()
        if not self.running or len(self.items) <= 1:
            return
        self._timer = self.timers.call_later(self._delay(), self._tick, name=self.name)

    def _tick(self):
        self._timer = None
        self.advance()

    def _cancel(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _notify(self):
        if self.on_change:
            self.on_change(self.current)


class AnnouncementCarousel:
    """
    Carrossel de avisos

    A cada rotation_interval, se nenhum aviso estiver na tela, mostra o
    próximo da lista e registra a exibição. Com auto_hide o aviso some após
    a duração do seu tipo; sem auto_hide fica até dismiss().
    """

    def __init__(
        self,
        timers,
        rotation_interval: float = 8,
        auto_hide: bool = True,
        default_duration_ms: int = DEFAULT_ANNOUNCEMENT_DURATION_MS,
        log_exhibition: Optional[Callable] = None,
        on_show: Optional[Callable] = None,
        on_hide: Optional[Callable] = None
    ):
        self.timers = timers
        self.rotation_interval = rotation_interval
        self.auto_hide = auto_hide
        self.default_duration_ms = default_duration_ms
        self.log_exhibition = log_exhibition
        self.on_show = on_show
        self.on_hide = on_hide

        self.items: List[dict] = []
        self.index = -1
        self.visible: Optional[dict] = None
        self._loop = None
        self._hide_timer = None

    @property
    def running(self) -> bool:
        return self._loop is not None

    def duration_ms(self, announcement: dict) -> int:
        return int(announcement.get('duration_ms') or self.default_duration_ms)

    def set_items(self, items):
        """Nova lista de avisos elegíveis; o aviso na tela continua até sumir"""
        self.items = list(items or [])
        if self.index >= len(self.items):
            # O próximo tick mostra o primeiro da nova lista
            self.index = -1

    def start(self):
        if self._loop is not None:
            return
        self._loop = self.timers.every(self.rotation_interval, self.tick, name='avisos')
        self.tick()

    def stop(self):
        if self._loop is not None:
            self._loop.cancel()
            self._loop = None
        self._cancel_hide()
        self.visible = None

    def tick(self):
        """Uma volta do carrossel: pula enquanto houver aviso na tela"""
        if self.visible is not None or not self.items:
            return
        self.index = next_index(self.index, len(self.items))
        self.show(self.items[self.index])

    def show(self, announcement: dict):
        self.visible = announcement
        duration_ms = self.duration_ms(announcement)
        logger.info(f"📢 Aviso na tela: {announcement.get('title')} ({duration_ms} ms)")

        if self.on_show:
            self.on_show(announcement)

        if self.log_exhibition:
            try:
                self.log_exhibition(announcement.get('id'), duration_ms)
            except Exception as e:
                logger.warning(f"Falha ao registrar exibição do aviso {announcement.get('id')}: {e}")

        self._cancel_hide()
        if self.auto_hide:
            self._hide_timer = self.timers.call_later(duration_ms / 1000, self.dismiss, name='ocultar-aviso')

    def dismiss(self):
        """Tira o aviso da tela (fim da duração ou dispensa manual)"""
        self._cancel_hide()
        if self.visible is None:
            return
        hidden, self.visible = self.visible, None
        if self.on_hide:
            self.on_hide(hidden)

    def _cancel_hide(self):
        if self._hide_timer is not None:
            self._hide_timer.cancel()
            self._hide_timer = None
