"""
Modelo RemoteCommand - Caixa de mensagens do controle remoto

A TV consulta apenas o comando mais recente (caixa de profundidade 1):
um comando que não foi lido antes de ser substituído é perdido.
"""

from tvsaude import db
from datetime import datetime


class RemoteCommand(db.Model):
    __tablename__ = 'controle_tv'

    id = db.Column(db.Integer, primary_key=True)
    command = db.Column(db.String(50), nullable=False)
    params = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=datetime.now, nullable=False, index=True)
    issued_by = db.Column(db.String(100))

    @classmethod
    def latest(cls):
        """Comando mais recente (o id desempata timestamps iguais)"""
        return cls.query.order_by(cls.created_at.desc(), cls.id.desc()).first()

    def to_dict(self):
        return {
            'id': self.id,
            'command': self.command,
            'params': self.params,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'issued_by': self.issued_by
        }
