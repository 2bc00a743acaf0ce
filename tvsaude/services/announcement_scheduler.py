"""
Agendador de Avisos
===================

- Seleciona os avisos elegíveis (ativos, no período, na faixa de horário
  e no dia da semana) ordenados por prioridade e data de criação
- Agenda avisos diários recorrentes: a cada disparo cria um aviso
  temporário e se reagenda para o mesmo horário no dia seguinte
- Registra as exibições no log (best effort, nunca bloqueia a TV)

Os agendamentos vivem apenas em memória: são recriados a partir da
configuração (SCHEDULED_ANNOUNCEMENTS) a cada start().
"""

import logging
from contextlib import nullcontext
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from flask import has_app_context
from sqlalchemy import func, or_

from tvsaude import db
from tvsaude.models import Announcement, AnnouncementExhibition, AnnouncementType
from tvsaude.utils.helpers import parse_date_bound, parse_time_of_day, parse_weekdays
from tvsaude.utils.timers import ThreadingTimers

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)
SCHEDULED_PRIORITY = 3


class AnnouncementValidationError(ValueError):
    """Dados de aviso inválidos"""


class AnnouncementScheduler:
    """
    Service de avisos com ciclo de vida explícito

    Usage:
        scheduler = AnnouncementScheduler(app)
        scheduler.start()
        scheduler.get_active_announcements(locality_id=3)
        scheduler.stop()
    """

    def __init__(self, app=None, timers=None, clock=None):
        self.app = app
        self.timers = timers or ThreadingTimers()
        self._clock = clock or getattr(self.timers, 'now', datetime.now)
        self._jobs: Dict[str, object] = {}
        self.running = False

    def now(self) -> datetime:
        return self._clock()

    # ==================== CICLO DE VIDA ====================

    def start(self):
        """Registra os avisos recorrentes da configuração"""
        if self.running:
            return
        self.running = True

        entries = self.app.config.get('SCHEDULED_ANNOUNCEMENTS', []) if self.app else []
        ttl = self.app.config.get('SCHEDULED_ANNOUNCEMENT_TTL', DEFAULT_TTL) if self.app else DEFAULT_TTL
        for entry in entries:
            try:
                self.schedule_recurring(
                    entry['title'],
                    entry['message'],
                    entry.get('type', AnnouncementType.INFORMATIVO.value),
                    entry.get('locality_id'),
                    entry['time_of_day'],
                    entry.get('ttl', ttl)
                )
            except (KeyError, ValueError) as e:
                logger.error(f"Aviso agendado inválido na configuração {entry!r}: {e}")

        logger.info(f"📅 Agendador de avisos iniciado ({len(self._jobs)} agendamentos)")

    def stop(self):
        """Cancela todos os agendamentos"""
        with self.timers.lock:
            for handle in self._jobs.values():
                handle.cancel()
            self._jobs.clear()
            self.running = False
        logger.info("⏹️ Agendador de avisos parado")

    @property
    def scheduled_jobs(self) -> List[str]:
        return sorted(self._jobs.keys())

    # ==================== CONSULTA ====================

    def get_active_announcements(self, locality_id=None, moment: datetime = None) -> List[Announcement]:
        """
        Avisos elegíveis agora, por prioridade (desc) e criação (desc)

        Args:
            locality_id: Localidade da TV. Avisos globais (sem localidade)
                sempre entram; com None só os globais são retornados.
            moment: Instante de referência (padrão: agora)
        """
        moment = moment or self.now()

        query = Announcement.query.filter(Announcement.is_active.is_(True))
        if locality_id is None:
            query = query.filter(Announcement.locality_id.is_(None))
        else:
            query = query.filter(or_(
                Announcement.locality_id.is_(None),
                Announcement.locality_id == locality_id
            ))

        candidates = query.order_by(
            Announcement.priority.desc(),
            Announcement.created_at.desc(),
            Announcement.id.desc()
        ).all()

        return [a for a in candidates if a.is_eligible(moment)]

    # ==================== CRIAÇÃO / ATUALIZAÇÃO ====================

    def build_announcement(self, data: dict) -> Announcement:
        """Cria (sem persistir) um aviso a partir do payload da API"""
        if not data.get('title'):
            raise AnnouncementValidationError('Title is required')
        if not data.get('message'):
            raise AnnouncementValidationError('Message is required')

        announcement = Announcement(
            title=data['title'],
            message=data['message'],
            type=AnnouncementType.INFORMATIVO.value,
            is_active=True,
            priority=1,
            repeat_count=1,
            repeat_interval_ms=300000
        )
        self.apply_changes(announcement, data)
        return announcement

    def apply_changes(self, announcement: Announcement, data: dict):
        """Aplica os campos presentes no payload, validando cada um"""
        try:
            if 'title' in data:
                if not data['title']:
                    raise AnnouncementValidationError('Title is required')
                announcement.title = data['title']
            if 'message' in data:
                if not data['message']:
                    raise AnnouncementValidationError('Message is required')
                announcement.message = data['message']
            if 'type' in data:
                if not AnnouncementType.is_valid(data['type']):
                    raise AnnouncementValidationError(f"Tipo inválido: {data['type']}")
                announcement.type = data['type']
            if 'locality_id' in data:
                announcement.locality_id = int(data['locality_id']) if data['locality_id'] not in (None, '') else None
            if 'is_active' in data:
                announcement.is_active = bool(data['is_active'])
            if 'start_date' in data:
                announcement.start_date = parse_date_bound(data['start_date'])
            if 'end_date' in data:
                announcement.end_date = parse_date_bound(data['end_date'], end=True)
            if 'start_time' in data:
                announcement.start_time = parse_time_of_day(data['start_time'])
            if 'end_time' in data:
                announcement.end_time = parse_time_of_day(data['end_time'])
            if 'weekdays' in data:
                announcement.weekdays = parse_weekdays(data['weekdays'])
            if 'priority' in data:
                announcement.priority = int(data['priority'])
            if 'repeat_count' in data:
                announcement.repeat_count = int(data['repeat_count'])
            if 'repeat_interval_ms' in data:
                announcement.repeat_interval_ms = int(data['repeat_interval_ms'])
        except AnnouncementValidationError:
            raise
        except (TypeError, ValueError) as e:
            raise AnnouncementValidationError(str(e)) from e

        if announcement.start_date and announcement.end_date and announcement.start_date > announcement.end_date:
            raise AnnouncementValidationError('start_date must be before end_date')

    # ==================== AGENDAMENTO RECORRENTE ====================

    @staticmethod
    def next_run(time_of_day, after: datetime) -> datetime:
        """
        Próximo disparo: hoje no horário, se ainda for futuro; senão amanhã

        Args:
            time_of_day: 'HH:MM' ou time
            after: Instante de referência
        """
        at = parse_time_of_day(time_of_day)
        candidate = after.replace(hour=at.hour, minute=at.minute, second=at.second, microsecond=0)
        if candidate <= after:
            candidate += timedelta(days=1)
        return candidate

    def schedule_recurring(self, title, message, type, locality_id, time_of_day, ttl=DEFAULT_TTL) -> str:
        """
        Registra um aviso diário

        Todo dia em time_of_day cria um aviso temporário válido por ttl e
        se reagenda para o dia seguinte. Reagendar a mesma chave
        (título + localidade) substitui o agendamento anterior.

        Returns:
            str: Chave do agendamento
        """
        if not AnnouncementType.is_valid(type):
            raise ValueError(f"Tipo inválido: {type}")
        if isinstance(ttl, (int, float)):
            ttl = timedelta(milliseconds=ttl)
        parse_time_of_day(time_of_day)

        key = f"{title}-{locality_id}"
        job = {
            'title': title,
            'message': message,
            'type': type,
            'locality_id': locality_id,
            'time_of_day': time_of_day,
            'ttl': ttl,
        }

        self._arm(key, job, self.now())
        logger.info(f"⏰ Aviso agendado: \"{title}\" para {time_of_day}")
        return key

    def cancel_recurring(self, key) -> bool:
        handle = self._jobs.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def _arm(self, key, job, reference: datetime):
        previous = self._jobs.pop(key, None)
        if previous is not None:
            previous.cancel()

        fire_at = self.next_run(job['time_of_day'], reference)
        delay = (fire_at - self.now()).total_seconds()
        self._jobs[key] = self.timers.call_later(delay, self._fire, key, job, fire_at, name=f"aviso:{key}")

    def _fire(self, key, job, fire_at: datetime):
        handle = self._jobs.get(key)
        try:
            self.create_temporary_announcement(job)
        finally:
            # Parado ou cancelado durante o disparo: não reagenda
            if handle is not None and self._jobs.get(key) is handle:
                # A partir do horário alvo, imune a disparo adiantado
                self._arm(key, job, max(self.now(), fire_at))

    def create_temporary_announcement(self, job) -> Optional[Announcement]:
        """Cria o aviso temporário de um agendamento (falhas só geram log)"""
        context = nullcontext() if has_app_context() or self.app is None else self.app.app_context()
        with context:
            try:
                now = self.now()
                announcement = Announcement(
                    title=job['title'],
                    message=job['message'],
                    type=job['type'],
                    locality_id=job['locality_id'],
                    is_active=True,
                    start_date=now,
                    end_date=now + job['ttl'],
                    priority=SCHEDULED_PRIORITY,
                    created_at=now
                )
                db.session.add(announcement)
                db.session.commit()
                logger.info(f"📢 Aviso temporário criado: \"{announcement.title}\" (ID: {announcement.id})")
                return announcement
            except Exception as e:
                db.session.rollback()
                logger.error(f"❌ Erro ao criar aviso temporário \"{job['title']}\": {e}")
                return None

    # ==================== EXIBIÇÕES ====================

    def register_exhibition(self, announcement_id, locality_id=None, duration_ms=None) -> bool:
        """
        Registra uma exibição no avisos_log

        Best effort: qualquer falha é registrada em log e engolida para não
        bloquear a TV. Aviso inexistente não gera registro.

        Returns:
            bool: True se gravado
        """
        try:
            if db.session.get(Announcement, int(announcement_id)) is None:
                logger.warning(f"⚠️ Exibição ignorada, aviso {announcement_id} não existe")
                return False
            entry = AnnouncementExhibition(
                announcement_id=int(announcement_id),
                locality_id=int(locality_id) if locality_id not in (None, '') else None,
                duration_ms=int(duration_ms) if duration_ms not in (None, '') else None,
                exhibited_at=self.now()
            )
            db.session.add(entry)
            db.session.commit()
            return True
        except Exception as e:
            db.session.rollback()
            logger.error(f"❌ Erro ao registrar exibição do aviso {announcement_id}: {e}")
            return False

    def exhibition_stats(self, locality_id=None, days=7) -> List[dict]:
        """Exibições por aviso no período (total e duração média)"""
        since = self.now() - timedelta(days=days)

        query = (
            db.session.query(
                Announcement.id,
                Announcement.title,
                Announcement.type,
                func.count(AnnouncementExhibition.id).label('total_exhibitions'),
                func.avg(AnnouncementExhibition.duration_ms).label('average_duration_ms')
            )
            .join(AnnouncementExhibition, AnnouncementExhibition.announcement_id == Announcement.id)
            .filter(AnnouncementExhibition.exhibited_at >= since)
        )
        if locality_id is not None:
            query = query.filter(AnnouncementExhibition.locality_id == locality_id)

        rows = (
            query.group_by(Announcement.id, Announcement.title, Announcement.type)
            .order_by(func.count(AnnouncementExhibition.id).desc())
            .all()
        )
        return [
            {
                'announcement_id': row.id,
                'title': row.title,
                'type': row.type,
                'total_exhibitions': row.total_exhibitions,
                'average_duration_ms': round(float(row.average_duration_ms), 1) if row.average_duration_ms is not None else None
            }
            for row in rows
        ]
