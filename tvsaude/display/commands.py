"""
Consumidor do controle remoto
Lê a caixa de mensagens e executa cada comando novo exatamente uma vez
"""

import logging
from typing import Callable, Optional

from tvsaude.utils.command_rules import find_block_rule

logger = logging.getLogger(__name__)


class CommandConsumer:
    """
    Usage:
        consumer = CommandConsumer(api.get_latest_command, app.execute_command)
        consumer.poll()   # a cada COMMAND_POLL_SECONDS

    O id do último comando visto evita reexecutar o mesmo comando a cada
    polling. Combinações bloqueadas são descartadas mesmo se chegarem.
    """

    def __init__(self, fetch_latest: Callable[[], Optional[dict]], executor: Callable, last_seen_id=None):
        self.fetch_latest = fetch_latest
        self.executor = executor
        self.last_seen_id = last_seen_id
        self.executed = 0

    def poll(self) -> Optional[dict]:
        """
        Returns:
            dict: O comando executado nesta rodada, ou None
        """
        try:
            command = self.fetch_latest()
        except Exception as e:
            logger.error(f"Erro ao verificar comandos: {e}")
            return None

        if not command or command.get('id') is None:
            return None
        if command['id'] == self.last_seen_id:
            return None

        self.last_seen_id = command['id']
        name = command.get('command')
        params = command.get('params')

        rule = find_block_rule(name, params)
        if rule is not None:
            logger.warning(f"🚫 Comando bloqueado ignorado: {name} ({rule.reason})")
            return None

        logger.info(f"🎮 Executando comando: {name} {params or ''}")
        try:
            self.executor(name, params)
        except Exception as e:
            logger.error(f"Erro ao executar comando {name}: {e}")
            return None

        self.executed += 1
        return command
