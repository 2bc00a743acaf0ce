"""
Canal de comandos remotos (lado emissor)
Grava o comando na caixa de mensagens e expõe o último para a TV
"""

import logging
from typing import List, Optional

from tvsaude import db
from tvsaude.models import RemoteCommand, CommandName
from tvsaude.utils.audit import audit_log, AuditAction
from tvsaude.utils.command_rules import find_block_rule

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Erro de despacho de comando"""
    status_code = 400
    code = 'COMMAND_ERROR'


class BlockedCommandError(CommandError):
    """Combinação comando/parâmetros que provoca loop na TV"""
    status_code = 422
    code = 'COMMAND_BLOCKED'

    def __init__(self, command, reason):
        super().__init__(f"Comando bloqueado: {command}")
        self.command = command
        self.reason = reason


class InvalidCommandError(CommandError):
    """Comando desconhecido ou parâmetros malformados"""
    status_code = 400
    code = 'INVALID_COMMAND'


class CommandChannel:
    """
    Caixa de mensagens de profundidade 1

    Usage:
        channel = CommandChannel()
        channel.dispatch('next', issued_by='recepcao')
        channel.poll_latest()
    """

    def dispatch(self, command, params=None, issued_by=None) -> RemoteCommand:
        """
        Grava um novo comando

        Raises:
            BlockedCommandError: combinação bloqueada (nunca gravada)
            InvalidCommandError: comando desconhecido ou params não-objeto
        """
        rule = find_block_rule(command, params)
        if rule is not None:
            logger.warning(f"🚫 Comando bloqueado: {command} ({rule.reason})")
            audit_log(
                AuditAction.COMMAND_BLOCKED,
                resource_type='command',
                details={'command': command, 'params': params, 'reason': rule.reason},
                status='warning',
                user=issued_by
            )
            raise BlockedCommandError(command, rule.reason)

        if not CommandName.is_valid(command):
            raise InvalidCommandError(f"Comando inválido: {command}")
        if params is not None and not isinstance(params, dict):
            raise InvalidCommandError('params deve ser um objeto')

        entry = RemoteCommand(command=command, params=params, issued_by=issued_by)
        db.session.add(entry)
        db.session.commit()

        logger.info(f"🎮 Comando enviado: {command} (ID: {entry.id})")
        audit_log(
            AuditAction.COMMAND_DISPATCH,
            resource_type='command',
            resource_id=entry.id,
            details={'command': command, 'params': params},
            user=issued_by
        )
        return entry

    def poll_latest(self) -> Optional[RemoteCommand]:
        return RemoteCommand.latest()

    def history(self, limit=50) -> List[RemoteCommand]:
        limit = max(1, min(int(limit), 500))
        return (
            RemoteCommand.query
            .order_by(RemoteCommand.created_at.desc(), RemoteCommand.id.desc())
            .limit(limit)
            .all()
        )
