"""
Timers canceláveis
==================

Agendamento one-shot e periódico sobre threading.Timer. Os callbacks de
uma mesma instância rodam serializados por um lock reentrante,
reproduzindo o modelo de laço de eventos único: nenhum callback observa
outro pela metade.

Callbacks agendados com serialized=False rodam fora do lock. São os que
fazem I/O de rede: buscam sem segurar ninguém e aplicam o resultado com
`with timers.lock`.

Cada agendamento devolve um handle com cancel(); stop() cancela tudo.
"""

import logging
import threading
from datetime import datetime

logger = logging.getLogger(__name__)


class TimerHandle:
    """Handle de um agendamento (one-shot ou periódico)"""

    def __init__(self, owner, name=None):
        self._owner = owner
        self.name = name
        self.cancelled = False
        self._timer = None

    def cancel(self):
        self.cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._owner._forget(self)

    @property
    def active(self):
        return not self.cancelled


class ThreadingTimers:
    """Serviço de timers baseado em threads daemon"""

    def __init__(self, lock=None):
        self.lock = lock or threading.RLock()
        self._handles = set()
        self._guard = threading.Lock()

    def now(self) -> datetime:
        return datetime.now()

    def call_later(self, delay, callback, *args, name=None, serialized=True) -> TimerHandle:
        """Executa callback(*args) uma vez após delay segundos"""
        handle = TimerHandle(self, name)
        self._arm(handle, delay, callback, args, repeat=None, serialized=serialized)
        return handle

    def every(self, interval, callback, *args, name=None, immediate=False, serialized=True) -> TimerHandle:
        """Executa callback(*args) a cada interval segundos até cancel()"""
        handle = TimerHandle(self, name)
        self._arm(handle, 0 if immediate else interval, callback, args, repeat=interval, serialized=serialized)
        return handle

    def stop(self):
        """Cancela todos os agendamentos pendentes"""
        with self._guard:
            handles = list(self._handles)
        for handle in handles:
            handle.cancel()

    def _run(self, handle, callback, args):
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"Erro no timer {handle.name or callback}: {e}")

    def _arm(self, handle, delay, callback, args, repeat, serialized=True):
        def fire():
            if handle.cancelled:
                return
            if serialized:
                with self.lock:
                    if handle.cancelled:
                        return
                    self._run(handle, callback, args)
            else:
                self._run(handle, callback, args)
            if repeat is not None and not handle.cancelled:
                self._arm(handle, repeat, callback, args, repeat, serialized)
            elif repeat is None:
                self._forget(handle)

        timer = threading.Timer(max(0.0, delay), fire)
        timer.daemon = True
        with self._guard:
            if handle.cancelled:
                return
            handle._timer = timer
            self._handles.add(handle)
        timer.start()

    def _forget(self, handle):
        with self._guard:
            self._handles.discard(handle)
