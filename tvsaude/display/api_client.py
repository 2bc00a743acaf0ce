"""
Cliente HTTP da TV
==================

Todas as chamadas devolvem None em caso de falha (servidor fora do ar,
timeout, JSON inválido) e registram o erro: a TV decide o que fazer com a
ausência de dados, nunca recebe uma exceção de rede.

Fallbacks:
- Conteúdo: /content (por IP) → /playlists/active/videos
- Avisos: /announcements/active → arquivo de cache do sincronizador
"""

import json
import logging
from typing import List, Optional

import requests

logger = logging.getLogger(__name__)


class TVApiClient:

    def __init__(self, base_url: str, client_ip: str = None, timeout: float = 5,
                 session: requests.Session = None, cache_file: str = None):
        self.base_url = base_url.rstrip('/')
        self.client_ip = client_ip
        self.timeout = timeout
        self.session = session or requests.Session()
        self.cache_file = cache_file

    def _get(self, path, params=None):
        response = self.session.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _ip_params(self) -> dict:
        return {'clientIp': self.client_ip} if self.client_ip else {}

    # ==================== CONTEÚDO ====================

    def get_content(self) -> Optional[dict]:
        """
        Vídeos da TV: {locality, playlist, videos, source}

        Returns:
            dict, ou None se nenhum caminho respondeu
        """
        try:
            data = self._get('/content', self._ip_params())
            if isinstance(data, dict) and isinstance(data.get('videos'), list):
                return data
            logger.warning("Resposta de /content sem lista de vídeos")
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Falha ao buscar conteúdo da localidade, usando playlist ativa: {e}")

        try:
            data = self._get('/playlists/active/videos')
            if isinstance(data, dict) and isinstance(data.get('videos'), list):
                data.setdefault('locality', None)
                return data
        except (requests.RequestException, ValueError) as e:
            logger.error(f"❌ Erro ao buscar vídeos: {e}")
        return None

    def get_images(self) -> Optional[List[dict]]:
        try:
            return self._get('/images', self._ip_params()).get('images', [])
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.error(f"Erro ao buscar imagens: {e}")
            return None

    def get_messages(self) -> Optional[List[dict]]:
        try:
            return self._get('/messages').get('messages', [])
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.error(f"Erro ao buscar mensagens: {e}")
            return None

    # ==================== AVISOS ====================

    def get_announcements(self, locality_id=None) -> Optional[List[dict]]:
        params = {'localityId': locality_id} if locality_id is not None else None
        try:
            return self._get('/announcements/active', params).get('announcements', [])
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.warning(f"Falha ao buscar avisos: {e}")

        return self.read_cached_announcements()

    def read_cached_announcements(self) -> Optional[List[dict]]:
        """Avisos do arquivo de cache do sincronizador, se configurado"""
        if not self.cache_file:
            return None
        try:
            with open(self.cache_file, encoding='utf-8') as fh:
                cached = json.load(fh)
        except (OSError, ValueError) as e:
            logger.error(f"Cache de avisos indisponível: {e}")
            return None

        announcements = cached.get('announcements') if isinstance(cached, dict) else None
        if not isinstance(announcements, list):
            return None
        logger.info(f"💾 {len(announcements)} avisos lidos do cache ({cached.get('timestamp')})")
        return announcements

    def post_exhibition(self, announcement_id, locality_id=None, duration_ms=None) -> bool:
        """Registro de exibição, best effort"""
        try:
            response = self.session.post(
                f"{self.base_url}/announcements/{announcement_id}/exhibit",
                json={'localityId': locality_id, 'durationMs': duration_ms},
                timeout=self.timeout
            )
            response.raise_for_status()
            return True
        except requests.RequestException as e:
            logger.warning(f"Falha ao registrar exibição do aviso {announcement_id}: {e}")
            return False

    # ==================== CONTROLE REMOTO ====================

    def get_latest_command(self) -> Optional[dict]:
        try:
            data = self._get('/commands/latest')
        except requests.HTTPError as e:
            if e.response is None or e.response.status_code != 404:
                logger.error(f"Erro ao verificar comandos: {e}")
            return None
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Erro ao verificar comandos: {e}")
            return None
        return data if isinstance(data, dict) else None

    def close(self):
        self.session.close()
