"""
Ponte de sincronização de avisos
================================

Busca periodicamente os avisos ativos na API principal e espelha tudo em
um diretório de cache lido pela camada de exibição:

- avisos-tv.json  → {announcements, timestamp, total}
- status.json     → {lastSync, totalCount, urgentCount, serverUp}

As gravações são sempre substituição completa (arquivo temporário +
os.replace): um leitor vê o arquivo antigo ou o novo, nunca um pedaço.
A ponte só lê avisos, nunca altera as linhas do banco.
"""

import json
import logging
import os
import tempfile
from datetime import datetime
from typing import List, Optional

import requests

from tvsaude.utils.timers import ThreadingTimers

logger = logging.getLogger(__name__)

CACHE_FILENAME = 'avisos-tv.json'
STATUS_FILENAME = 'status.json'
URGENT_TYPE = 'urgencia'


class AnnouncementSyncBridge:
    """
    Usage:
        bridge = AnnouncementSyncBridge(base_url='http://localhost:5000/api')
        bridge.start()          # sync imediato + laços periódico e urgente
        bridge.sync_one(42)     # empurra um aviso sem esperar o intervalo
        bridge.stop()
    """

    def __init__(
        self,
        base_url: str,
        cache_dir: str = 'cache-avisos',
        interval: float = 30,
        urgent_interval: float = 5,
        urgent_priority_threshold: int = 4,
        request_timeout: float = 10,
        session: requests.Session = None,
        timers=None,
        clock=None
    ):
        self.base_url = base_url.rstrip('/')
        self.cache_dir = cache_dir
        self.interval = interval
        self.urgent_interval = urgent_interval
        self.urgent_priority_threshold = urgent_priority_threshold
        self.request_timeout = request_timeout
        self.session = session or requests.Session()
        self.timers = timers or ThreadingTimers()
        self._clock = clock or getattr(self.timers, 'now', datetime.now)

        self._loops = {}
        self.last_sync: Optional[datetime] = None
        self.server_up = None

    @property
    def cache_file(self) -> str:
        return os.path.join(self.cache_dir, CACHE_FILENAME)

    @property
    def status_file(self) -> str:
        return os.path.join(self.cache_dir, STATUS_FILENAME)

    # ==================== CICLO DE VIDA ====================

    def start(self):
        """Sync inicial e laços periódicos (regular e urgente)"""
        if self._loops:
            return
        logger.info(f"🔄 Sincronização automática a cada {self.interval}s (urgentes: {self.urgent_interval}s)")

        self.sync_all()
        self._loops['sync'] = self.timers.every(self.interval, self.sync_all, name='sync')
        self._loops['urgent'] = self.timers.every(self.urgent_interval, self.sync_urgent_only, name='urgent')

    def stop(self):
        for name, handle in self._loops.items():
            handle.cancel()
            logger.info(f"⏹️ Parou sincronização: {name}")
        self._loops.clear()

    @property
    def running(self) -> bool:
        return bool(self._loops)

    def status(self) -> dict:
        return {
            'running': self.running,
            'last_sync': self.last_sync.isoformat() if self.last_sync else None,
            'active_loops': sorted(self._loops.keys()),
            'primary_url': self.base_url,
            'cache_dir': self.cache_dir,
            'server_up': self.server_up
        }

    # ==================== SINCRONIZAÇÃO ====================

    def is_urgent(self, announcement: dict) -> bool:
        priority = announcement.get('priority') or 0
        try:
            priority = int(priority)
        except (TypeError, ValueError):
            priority = 0
        return announcement.get('type') == URGENT_TYPE or priority >= self.urgent_priority_threshold

    def sync_all(self) -> bool:
        """
        Substitui o cache pelos avisos ativos atuais da API

        Returns:
            bool: True se o cache foi gravado
        """
        try:
            announcements = self._fetch_active()
        except Exception as e:
            logger.error(f"❌ Erro na sincronização: {e}")
            self._mark_server_down()
            return False

        if not self._write_cache(announcements):
            return False
        self.last_sync = self._clock()
        logger.info(f"✅ Sincronização completa: {len(announcements)} avisos")
        return True

    def sync_urgent_only(self) -> bool:
        """
        Grava no cache apenas os avisos urgentes, se houver

        Returns:
            bool: True se havia urgentes e o cache foi gravado
        """
        try:
            announcements = self._fetch_active()
        except Exception as e:
            logger.warning(f"⚠️ Verificação de urgentes falhou: {e}")
            return False

        urgent = [a for a in announcements if self.is_urgent(a)]
        if not urgent:
            return False

        logger.info(f"🚨 {len(urgent)} avisos urgentes encontrados")
        return self._write_cache(urgent)

    def sync_one(self, announcement_id) -> bool:
        """Busca um aviso e o publica no cache imediatamente"""
        try:
            response = self.session.get(
                f"{self.base_url}/announcements/{announcement_id}",
                timeout=self.request_timeout
            )
            response.raise_for_status()
            announcement = response.json().get('announcement')
        except Exception as e:
            logger.error(f"❌ Erro ao enviar aviso {announcement_id}: {e}")
            return False

        if not announcement:
            logger.warning(f"Aviso {announcement_id} não encontrado na API")
            return False

        written = self._write_cache([announcement])
        if written:
            logger.info(f"🚀 Aviso {announcement_id} enviado imediatamente")
        return written

    def read_cache(self) -> Optional[dict]:
        """Conteúdo atual do cache, ou None se ausente/ilegível"""
        try:
            with open(self.cache_file, encoding='utf-8') as fh:
                return json.load(fh)
        except (OSError, ValueError):
            return None

    # ==================== INTERNOS ====================

    def _fetch_active(self) -> List[dict]:
        response = self.session.get(f"{self.base_url}/announcements/active", timeout=self.request_timeout)
        response.raise_for_status()
        payload = response.json()
        announcements = payload.get('announcements') if isinstance(payload, dict) else None
        if not isinstance(announcements, list):
            raise ValueError('Resposta sem lista de avisos')
        self.server_up = True
        return announcements

    def _write_cache(self, announcements: List[dict]) -> bool:
        timestamp = self._clock().isoformat()
        cache = {
            'announcements': announcements,
            'timestamp': timestamp,
            'total': len(announcements)
        }
        status = {
            'lastSync': timestamp,
            'totalCount': len(announcements),
            'urgentCount': sum(1 for a in announcements if self.is_urgent(a)),
            'serverUp': True
        }
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            self._replace_json(self.cache_file, cache)
            self._replace_json(self.status_file, status)
            return True
        except OSError as e:
            logger.error(f"❌ Erro ao gravar cache de avisos: {e}")
            return False

    def _mark_server_down(self):
        self.server_up = False
        status = {
            'lastSync': self.last_sync.isoformat() if self.last_sync else None,
            'totalCount': 0,
            'urgentCount': 0,
            'serverUp': False
        }
        previous = self._read_json(self.status_file)
        if previous:
            status['totalCount'] = previous.get('totalCount', 0)
            status['urgentCount'] = previous.get('urgentCount', 0)
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            self._replace_json(self.status_file, status)
        except OSError as e:
            logger.error(f"❌ Erro ao gravar status: {e}")

    def _replace_json(self, path, data):
        fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, prefix='.tmp-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    @staticmethod
    def _read_json(path):
        try:
            with open(path, encoding='utf-8') as fh:
                return json.load(fh)
        except (OSError, ValueError):
            return None
