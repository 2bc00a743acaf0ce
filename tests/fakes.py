"""Dublês de teste: timers com relógio virtual, sessão HTTP e player"""

import threading
from datetime import datetime, timedelta

import requests

from tvsaude.display.media import MediaPlayer, PlayerState


# Terça-feira, 15:00
DEFAULT_START = datetime(2024, 5, 14, 15, 0)


class ManualHandle:

    def __init__(self, when, callback, args, interval, name, seq):
        self.when = when
        self.callback = callback
        self.args = args
        self.interval = interval
        self.name = name
        self.seq = seq
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    @property
    def active(self):
        return not self.cancelled


class ManualTimers:
    """Timers determinísticos: nada dispara até advance()"""

    def __init__(self, start=DEFAULT_START):
        self.current = start
        self.lock = threading.RLock()
        self._handles = []
        self._seq = 0

    def now(self):
        return self.current

    def call_later(self, delay, callback, *args, name=None, serialized=True):
        return self._add(self.current + timedelta(seconds=delay), callback, args, None, name)

    def every(self, interval, callback, *args, name=None, immediate=False, serialized=True):
        first = self.current if immediate else self.current + timedelta(seconds=interval)
        return self._add(first, callback, args, interval, name)

    def stop(self):
        for handle in self._handles:
            handle.cancel()
        self._handles = []

    def pending(self, name=None):
        return [
            h for h in self._handles
            if h.active and (name is None or h.name == name)
        ]

    def advance(self, seconds):
        """Avança o relógio disparando, em ordem, tudo o que vencer"""
        target = self.current + timedelta(seconds=seconds)
        while True:
            due = [h for h in self._handles if h.active and h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self.current = handle.when
            if handle.interval is None:
                handle.cancelled = True
            else:
                handle.when = handle.when + timedelta(seconds=handle.interval)
            handle.callback(*handle.args)
            self._handles = [h for h in self._handles if h.active]
        self.current = target

    def advance_to(self, moment):
        self.advance((moment - self.current).total_seconds())

    def _add(self, when, callback, args, interval, name):
        self._seq += 1
        handle = ManualHandle(when, callback, args, interval, name, self._seq)
        self._handles.append(handle)
        return handle


class FakeResponse:

    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """
    Sessão requests falsa

    routes mapeia URL → FakeResponse, exceção (levantada) ou função
    (chamada com os kwargs do request).
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self.closed = False

    def _dispatch(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        target = self.routes.get((method, url), self.routes.get(url))
        if target is None:
            raise requests.ConnectionError(f"sem rota para {method} {url}")
        if isinstance(target, Exception):
            raise target
        if callable(target) and not isinstance(target, FakeResponse):
            target = target(**kwargs)
        return target

    def get(self, url, params=None, timeout=None):
        return self._dispatch('GET', url, params=params, timeout=timeout)

    def post(self, url, json=None, timeout=None):
        return self._dispatch('POST', url, json=json, timeout=timeout)

    def close(self):
        self.closed = True

    def urls(self, method=None):
        return [url for m, url, _ in self.calls if method is None or m == method]


class RecordingPlayer(MediaPlayer):
    """Player que só registra as chamadas; eventos são disparados pelo teste"""

    def __init__(self, kind='local', auto_start=True):
        super().__init__()
        self.kind = kind
        self.auto_start = auto_start
        self.state = PlayerState.IDLE
        self.calls = []

    def load(self, item):
        self.item = item
        self.state = PlayerState.LOADING
        self.calls.append(('load', item.get('id')))

    def play(self):
        self.calls.append(('play', self.item_id))
        if self.state == PlayerState.ERROR:
            return
        self.state = PlayerState.PLAYING
        if self.auto_start:
            self._emit_started()

    def pause(self):
        self.calls.append(('pause', self.item_id))
        self.state = PlayerState.PAUSED

    def seek(self, seconds):
        self.calls.append(('seek', seconds))

    def stop(self):
        self.calls.append(('stop', self.item_id))
        self.state = PlayerState.IDLE

    def get_state(self):
        return self.state

    def finish(self):
        """Fim natural do item carregado"""
        self.state = PlayerState.ENDED
        self._emit_ended()

    def fail(self, error='falha de mídia'):
        self.state = PlayerState.ERROR
        self._emit_error(error)

    def loaded_ids(self):
        return [item_id for call, item_id in self.calls if call == 'load']
