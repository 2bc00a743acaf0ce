"""
Modelo Announcement - Avisos exibidos nas TVs
Gerencia os avisos (tabela avisos) e o log de exibições (avisos_log)
"""

from tvsaude import db
from tvsaude.models.enums import AnnouncementType
from datetime import datetime, time


def js_weekday(moment: datetime) -> int:
    """Dia da semana no formato 0-6 com 0 = domingo"""
    return (moment.weekday() + 1) % 7


class Announcement(db.Model):
    """
    Aviso exibido na TV

    Um aviso só é elegível para exibição se estiver ativo, dentro do
    período [start_date, end_date], dentro da faixa de horário
    [start_time, end_time] e em um dos dias da semana permitidos.
    Limites nulos são abertos; weekdays vazio significa todos os dias.
    """
    __tablename__ = 'avisos'

    id = db.Column(db.Integer, primary_key=True)

    # Conteúdo
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)

    # Tipo: consulta, medicacao, campanha, urgencia, informativo, horario, evento
    type = db.Column(db.String(20), nullable=False, default=AnnouncementType.INFORMATIVO.value)

    # Localidade alvo (NULL = todas as UBS)
    locality_id = db.Column(db.Integer, db.ForeignKey('localidades.id', ondelete='SET NULL'), index=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Período de validade
    start_date = db.Column(db.DateTime)
    end_date = db.Column(db.DateTime)

    # Faixa de horário diária
    start_time = db.Column(db.Time)
    end_time = db.Column(db.Time)

    # Dias permitidos, "1,2,3,4,5" (0 = domingo)
    weekdays_raw = db.Column('dias_semana', db.String(20))

    # Prioridade de exibição (maior = exibido primeiro)
    priority = db.Column(db.Integer, default=1, nullable=False)

    # Repetições
    repeat_count = db.Column(db.Integer, default=1)
    repeat_interval_ms = db.Column(db.Integer, default=300000)

    created_at = db.Column(db.DateTime, default=datetime.now, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)

    exhibitions = db.relationship('AnnouncementExhibition', backref='announcement',
                                  lazy='dynamic', cascade='all, delete-orphan')

    @property
    def weekdays(self) -> set:
        """Conjunto de dias permitidos (vazio = sem restrição)"""
        if not self.weekdays_raw:
            return set()
        return {int(d) for d in self.weekdays_raw.split(',') if d.strip() != ''}

    @weekdays.setter
    def weekdays(self, days):
        if not days:
            self.weekdays_raw = None
        else:
            self.weekdays_raw = ','.join(str(d) for d in sorted(set(days)))

    @property
    def is_urgent_type(self) -> bool:
        return self.type == AnnouncementType.URGENCIA.value

    def within_date_range(self, moment: datetime) -> bool:
        if self.start_date and moment < self.start_date:
            return False
        if self.end_date and moment > self.end_date:
            return False
        return True

    def within_time_range(self, moment: datetime) -> bool:
        # Resolução de minuto: "16:00" inclui 16:00:59
        current = moment.time().replace(second=0, microsecond=0)
        start = self.start_time or time.min
        end = self.end_time or time.max

        if self.start_time and self.end_time and self.start_time > self.end_time:
            # Faixa que atravessa a meia-noite (ex: 22:00-06:00)
            return current >= start or current <= end

        return start <= current <= end

    def weekday_allowed(self, moment: datetime) -> bool:
        days = self.weekdays
        return not days or js_weekday(moment) in days

    def is_eligible(self, moment: datetime = None) -> bool:
        """Verifica se o aviso pode ser exibido no instante informado"""
        moment = moment or datetime.now()
        return bool(
            self.is_active
            and self.within_date_range(moment)
            and self.within_time_range(moment)
            and self.weekday_allowed(moment)
        )

    def toggle_active(self):
        """Alternar o estado ativo (soft delete)"""
        self.is_active = not self.is_active

    def to_dict(self, moment: datetime = None):
        """Serialização em dicionário (com metadados de exibição do tipo)"""
        display = AnnouncementType.get_display(self.type)
        return {
            'id': self.id,
            'title': self.title,
            'message': self.message,
            'type': self.type,
            'type_label': AnnouncementType.get_label(self.type),
            'icon': display['icon'],
            'color': display['color'],
            'weight': display['weight'],
            'duration_ms': display['duration_ms'],
            'locality_id': self.locality_id,
            'is_active': self.is_active,
            'is_eligible': self.is_eligible(moment),
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'start_time': self.start_time.strftime('%H:%M') if self.start_time else None,
            'end_time': self.end_time.strftime('%H:%M') if self.end_time else None,
            'weekdays': sorted(self.weekdays),
            'priority': self.priority,
            'repeat_count': self.repeat_count,
            'repeat_interval_ms': self.repeat_interval_ms,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }

    def __repr__(self):
        return f'<Announcement {self.id} {self.title!r}>'


class AnnouncementExhibition(db.Model):
    """Registro (append-only) de cada exibição de um aviso em uma TV"""
    __tablename__ = 'avisos_log'

    id = db.Column(db.Integer, primary_key=True)
    announcement_id = db.Column(db.Integer, db.ForeignKey('avisos.id', ondelete='CASCADE'),
                                nullable=False, index=True)
    locality_id = db.Column(db.Integer, index=True)
    exhibited_at = db.Column(db.DateTime, default=datetime.now, nullable=False, index=True)
    duration_ms = db.Column(db.Integer)

    def to_dict(self):
        return {
            'id': self.id,
            'announcement_id': self.announcement_id,
            'locality_id': self.locality_id,
            'exhibited_at': self.exhibited_at.isoformat() if self.exhibited_at else None,
            'duration_ms': self.duration_ms
        }
