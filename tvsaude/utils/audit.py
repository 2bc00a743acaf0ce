"""
Audit Logging - Rastreabilidade das ações administrativas
=========================================================

Registra comandos do controle remoto e alterações de avisos,
em banco (audit_logs) e no arquivo audit.log.
"""

import logging
import os
from datetime import datetime
from flask import request, has_request_context
from tvsaude import db
import json

logger = logging.getLogger('audit')

# Handler separado para os logs de auditoria
_audit_file = os.environ.get('AUDIT_LOG_FILE', 'audit.log')
if not any(
    isinstance(h, logging.FileHandler) and getattr(h, 'baseFilename', '').endswith(os.path.basename(_audit_file))
    for h in logger.handlers
):
    audit_handler = logging.FileHandler(_audit_file, delay=True)
    audit_handler.setLevel(logging.INFO)
    audit_handler.setFormatter(logging.Formatter(
        '%(asctime)s - AUDIT - %(message)s'
    ))
    logger.addHandler(audit_handler)

logger.setLevel(logging.INFO)
logger.propagate = False


class AuditLog(db.Model):
    """Log de auditoria persistido em banco"""
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime, default=datetime.now, nullable=False)
    user = db.Column(db.String(100), index=True)
    action = db.Column(db.String(50), nullable=False, index=True)
    resource_type = db.Column(db.String(50))
    resource_id = db.Column(db.String(36))
    details = db.Column(db.Text)  # JSON
    ip_address = db.Column(db.String(45))
    status = db.Column(db.String(20), default='success')  # success, failure, warning

    def to_dict(self):
        return {
            'id': self.id,
            'timestamp': self.timestamp.isoformat(),
            'user': self.user,
            'action': self.action,
            'resource_type': self.resource_type,
            'resource_id': self.resource_id,
            'details': json.loads(self.details) if self.details else None,
            'ip_address': self.ip_address,
            'status': self.status
        }


class AuditAction:
    # Controle remoto
    COMMAND_DISPATCH = 'command_dispatch'
    COMMAND_BLOCKED = 'command_blocked'

    # Avisos
    ANNOUNCEMENT_CREATE = 'announcement_create'
    ANNOUNCEMENT_UPDATE = 'announcement_update'
    ANNOUNCEMENT_TOGGLE = 'announcement_toggle'
    ANNOUNCEMENT_DELETE = 'announcement_delete'

    # Sincronização
    SYNC_FORCED = 'sync_forced'


def audit_log(
    action: str,
    resource_type: str = None,
    resource_id=None,
    details: dict = None,
    status: str = 'success',
    user: str = None
):
    """
    Registra uma ação no log de auditoria

    Args:
        action: Tipo de ação (ver AuditAction)
        resource_type: Tipo do recurso afetado (command, announcement...)
        resource_id: ID do recurso
        details: Detalhes adicionais (dict)
        status: success, failure, warning
        user: Quem executou a ação
    """
    try:
        ip_address = request.remote_addr if has_request_context() else None

        log_entry = AuditLog(
            user=user,
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id is not None else None,
            details=json.dumps(details) if details else None,
            ip_address=ip_address,
            status=status
        )

        db.session.add(log_entry)
        db.session.commit()

        log_message = f"[{status.upper()}] {action}"
        if resource_type:
            log_message += f" | {resource_type}"
        if resource_id is not None:
            log_message += f":{resource_id}"
        log_message += f" | user:{user} | ip:{ip_address}"
        if details:
            log_message += f" | {json.dumps(details)}"

        if status in ('failure', 'warning'):
            logger.warning(log_message)
        else:
            logger.info(log_message)

    except Exception as e:
        # A auditoria nunca derruba a operação principal
        db.session.rollback()
        logging.getLogger(__name__).error(f"Audit log error: {e}")
