"""
Services da aplicação
Lógica de conteúdo, avisos, controle remoto e sincronização
"""

from tvsaude.services.content_resolver import ContentResolver, ContentUnavailableError, ResolvedContent
from tvsaude.services.announcement_scheduler import AnnouncementScheduler, AnnouncementValidationError
from tvsaude.services.command_channel import (
    CommandChannel, CommandError, BlockedCommandError, InvalidCommandError
)
from tvsaude.services.sync_bridge import AnnouncementSyncBridge

__all__ = [
    'ContentResolver',
    'ContentUnavailableError',
    'ResolvedContent',
    'AnnouncementScheduler',
    'AnnouncementValidationError',
    'CommandChannel',
    'CommandError',
    'BlockedCommandError',
    'InvalidCommandError',
    'AnnouncementSyncBridge'
]
