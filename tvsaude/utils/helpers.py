"""
Funções utilitárias
Helpers reutilizáveis em toda a aplicação
"""

from flask import request
from datetime import datetime, date, time


def get_client_ip():
    """
    Retorna o IP da TV que fez a requisição

    Prioridade: ?clientIp= > X-Forwarded-For (primeiro) > X-Real-IP > remote_addr
    """
    explicit = request.args.get('clientIp')
    if explicit:
        return explicit.strip()

    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()

    real_ip = request.headers.get('X-Real-IP')
    if real_ip:
        return real_ip.strip()

    return request.remote_addr


def get_int_arg(name, default=None):
    """Lê um query param inteiro; valores inválidos viram default"""
    value = request.args.get(name)
    if value in (None, '', 'null'):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_date_bound(value, end=False):
    """
    Converte o limite de um período

    Datas puras ('2024-05-10') cobrem o dia inteiro: como início viram
    00:00, como fim viram 23:59:59.999999. Datas com hora são mantidas.

    Args:
        value: str ISO, date, datetime ou None
        end: True se for o limite final do período

    Returns:
        datetime ou None

    Raises:
        ValueError: formato inválido
    """
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.max if end else time.min)

    text = str(value).strip()
    if len(text) == 10:
        day = datetime.strptime(text, '%Y-%m-%d').date()
        return datetime.combine(day, time.max if end else time.min)

    parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
    # Horários são comparados no fuso local do servidor
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def parse_time_of_day(value):
    """
    Converte 'HH:MM' (ou 'HH:MM:SS') em time

    Raises:
        ValueError: formato inválido
    """
    if value in (None, ''):
        return None
    if isinstance(value, time):
        return value
    text = str(value).strip()
    fmt = '%H:%M:%S' if text.count(':') == 2 else '%H:%M'
    return datetime.strptime(text, fmt).time()


def parse_weekdays(value):
    """
    Converte dias da semana em conjunto de inteiros 0-6 (0 = domingo)

    Aceita lista [1, 2] ou string "1,2". Vazio significa todos os dias.

    Raises:
        ValueError: dia fora de 0-6
    """
    if value in (None, '', []):
        return set()
    if isinstance(value, str):
        items = [v for v in value.split(',') if v.strip()]
    else:
        items = list(value)

    days = {int(v) for v in items}
    if any(d < 0 or d > 6 for d in days):
        raise ValueError('Dias da semana devem estar entre 0 (domingo) e 6 (sábado)')
    return days


def format_clock(moment=None):
    """Hora e data por extenso (pt-BR) para a tela da TV"""
    moment = moment or datetime.now()
    weekdays = ['segunda-feira', 'terça-feira', 'quarta-feira', 'quinta-feira',
                'sexta-feira', 'sábado', 'domingo']
    months = ['janeiro', 'fevereiro', 'março', 'abril', 'maio', 'junho', 'julho',
              'agosto', 'setembro', 'outubro', 'novembro', 'dezembro']
    return {
        'time': moment.strftime('%H:%M'),
        'date': f"{weekdays[moment.weekday()]}, {moment.day} de {months[moment.month - 1]} de {moment.year}"
    }
