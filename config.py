"""
Configuração TV Saúde Backend
=============================

Variáveis de ambiente suportadas:
---------------------------------
FLASK_ENV                    : development | production | testing (padrão: development)
SECRET_KEY                   : Chave secreta Flask (OBRIGATÓRIA em produção)
DATABASE_URL                 : URL do banco (OBRIGATÓRIA em produção)
                               Ex: sqlite:////var/lib/tv-saude/tv_saude.db

CORS_ORIGINS                 : Origens autorizadas, separadas por vírgula
CORS_ALLOW_ALL               : "true" para liberar todas as origens (somente dev!)

UPLOAD_FOLDER                : Pasta dos vídeos/imagens enviados (padrão: uploads)
LOG_LEVEL                    : Nível de log (DEBUG, INFO, WARNING, ERROR)

START_BACKGROUND_SERVICES    : "false" para não iniciar agendador e sincronizador
SYNC_API_BASE_URL            : API principal lida pelo sincronizador
SYNC_CACHE_DIR               : Pasta do cache de avisos (padrão: cache-avisos)
SYNC_INTERVAL_SECONDS        : Intervalo da sincronização completa (padrão: 30)
SYNC_URGENT_INTERVAL_SECONDS : Intervalo da sincronização de urgentes (padrão: 5)
SYNC_REQUEST_TIMEOUT         : Timeout HTTP do sincronizador em segundos (padrão: 10)
URGENT_PRIORITY_THRESHOLD    : Prioridade a partir da qual um aviso é urgente (padrão: 4)

Variáveis da TV (run_display.py):
---------------------------------
TV_API_BASE_URL, TV_UPLOADS_BASE_URL, TV_CLIENT_IP, TV_SAFETY_TIMEOUT_SECONDS,
TV_MAX_VIDEO_ERRORS, TV_CONTENT_REFRESH_SECONDS, TV_COMMAND_POLL_SECONDS,
TV_ANNOUNCEMENT_ROTATION_SECONDS, TV_ANNOUNCEMENT_AUTO_HIDE, TV_CACHE_FILE ...
"""

import os
from datetime import timedelta


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ('1', 'true', 'yes', 'on')


def get_cors_origins():
    """Lê as origens CORS das variáveis de ambiente"""
    if os.environ.get('CORS_ALLOW_ALL', '').lower() == 'true':
        return '*'

    origins = os.environ.get('CORS_ORIGINS', '')
    if origins:
        return [o.strip() for o in origins.split(',') if o.strip()]

    # Padrão: painel admin e frontend da TV na rede local
    return [
        'http://localhost:3000',
        'http://localhost:3002',
        'http://localhost:3003',
        'http://127.0.0.1:3000',
        'http://127.0.0.1:3003',
    ]


# Avisos diários recriados a cada inicialização (não persistem entre restarts)
DEFAULT_SCHEDULED_ANNOUNCEMENTS = [
    {
        'title': 'Bom Dia!',
        'message': 'A UBS está aberta. Tenha um ótimo dia de atendimento!',
        'type': 'informativo',
        'locality_id': None,
        'time_of_day': '07:00',
    },
    {
        'title': 'Lembrete do Almoço',
        'message': 'Horário de almoço: 12h às 13h. Atendimento retorna às 13h.',
        'type': 'horario',
        'locality_id': None,
        'time_of_day': '11:45',
    },
    {
        'title': 'Encerrando Atividades',
        'message': 'A UBS encerra o atendimento em 30 minutos. Organize-se!',
        'type': 'informativo',
        'locality_id': None,
        'time_of_day': '16:30',
    },
]


class Config:
    """Configuração base"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Banco de dados
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
    }

    # CORS
    CORS_ORIGINS = get_cors_origins()
    CORS_ALLOW_HEADERS = ['Content-Type', 'Authorization', 'X-Forwarded-For']

    # Upload
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', 'uploads')

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Serviços em segundo plano (agendador de avisos + sincronizador)
    START_BACKGROUND_SERVICES = _env_bool('START_BACKGROUND_SERVICES', True)

    # Sincronizador de avisos
    SYNC_API_BASE_URL = os.environ.get('SYNC_API_BASE_URL', 'http://localhost:5000/api')
    SYNC_CACHE_DIR = os.environ.get('SYNC_CACHE_DIR', 'cache-avisos')
    SYNC_INTERVAL_SECONDS = float(os.environ.get('SYNC_INTERVAL_SECONDS', 30))
    SYNC_URGENT_INTERVAL_SECONDS = float(os.environ.get('SYNC_URGENT_INTERVAL_SECONDS', 5))
    SYNC_REQUEST_TIMEOUT = float(os.environ.get('SYNC_REQUEST_TIMEOUT', 10))
    URGENT_PRIORITY_THRESHOLD = int(os.environ.get('URGENT_PRIORITY_THRESHOLD', 4))

    # Avisos recorrentes
    SCHEDULED_ANNOUNCEMENTS = DEFAULT_SCHEDULED_ANNOUNCEMENTS
    SCHEDULED_ANNOUNCEMENT_TTL = timedelta(hours=int(os.environ.get('SCHEDULED_ANNOUNCEMENT_TTL_HOURS', 24)))

    # Controle remoto
    COMMAND_HISTORY_LIMIT = 50


class DevelopmentConfig(Config):
    """Configuração desenvolvimento"""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///tv_saude.db'


class ProductionConfig(Config):
    """Configuração produção"""
    DEBUG = False

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')

    @classmethod
    def init_app(cls, app):
        """Verificações na inicialização em produção"""
        errors = []

        if not os.environ.get('DATABASE_URL'):
            errors.append('DATABASE_URL must be set in production')

        secret_key = os.environ.get('SECRET_KEY', '')
        if not secret_key or secret_key == 'dev-secret-key-change-in-production':
            errors.append('SECRET_KEY must be set to a secure value in production')

        if secret_key and len(secret_key) < 32:
            errors.append('SECRET_KEY should be at least 32 characters')

        if os.environ.get('CORS_ALLOW_ALL', '').lower() == 'true':
            errors.append('CORS_ALLOW_ALL must not be true in production')

        if errors:
            raise ValueError('Production configuration errors:\n- ' + '\n- '.join(errors))


class TestingConfig(Config):
    """Configuração testes"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    START_BACKGROUND_SERVICES = False
    SCHEDULED_ANNOUNCEMENTS = []
    SYNC_API_BASE_URL = 'http://tv-saude.test/api'


class DisplayConfig:
    """
    Configuração do cliente da TV (run_display.py)

    Todos os intervalos são configuráveis; os padrões seguem a variante
    mais defensiva do player (3 erros, 5 minutos de timeout de segurança).
    """
    API_BASE_URL = os.environ.get('TV_API_BASE_URL', 'http://localhost:5000/api')
    UPLOADS_BASE_URL = os.environ.get('TV_UPLOADS_BASE_URL', 'http://localhost:5000/uploads')
    CLIENT_IP = os.environ.get('TV_CLIENT_IP') or None
    REQUEST_TIMEOUT = float(os.environ.get('TV_REQUEST_TIMEOUT', 5))

    # Rotação de vídeos
    SAFETY_TIMEOUT_SECONDS = float(os.environ.get('TV_SAFETY_TIMEOUT_SECONDS', 300))
    MAX_VIDEO_ERRORS = int(os.environ.get('TV_MAX_VIDEO_ERRORS', 3))
    ERROR_ADVANCE_DELAY_SECONDS = float(os.environ.get('TV_ERROR_ADVANCE_DELAY_SECONDS', 2))
    END_ADVANCE_DELAY_SECONDS = float(os.environ.get('TV_END_ADVANCE_DELAY_SECONDS', 0.5))

    # Atualizações periódicas
    CONTENT_REFRESH_SECONDS = float(os.environ.get('TV_CONTENT_REFRESH_SECONDS', 10))
    COMMAND_POLL_SECONDS = float(os.environ.get('TV_COMMAND_POLL_SECONDS', 2))
    ANNOUNCEMENT_REFRESH_SECONDS = float(os.environ.get('TV_ANNOUNCEMENT_REFRESH_SECONDS', 30))
    MESSAGE_REFRESH_SECONDS = float(os.environ.get('TV_MESSAGE_REFRESH_SECONDS', 30))
    IMAGE_REFRESH_SECONDS = float(os.environ.get('TV_IMAGE_REFRESH_SECONDS', 30))

    # Carrosséis
    ANNOUNCEMENT_ROTATION_SECONDS = float(os.environ.get('TV_ANNOUNCEMENT_ROTATION_SECONDS', 8))
    ANNOUNCEMENT_AUTO_HIDE = _env_bool('TV_ANNOUNCEMENT_AUTO_HIDE', True)
    MESSAGE_ROTATION_SECONDS = float(os.environ.get('TV_MESSAGE_ROTATION_SECONDS', 5))
    DEFAULT_IMAGE_DURATION_MS = int(os.environ.get('TV_DEFAULT_IMAGE_DURATION_MS', 5000))

    # Cache gerado pelo sincronizador (opcional)
    CACHE_FILE = os.environ.get('TV_CACHE_FILE') or None

    # Localidade fixa para os avisos (opcional; padrão: detectada pelo IP)
    LOCALITY_ID = int(os.environ['TV_LOCALITY_ID']) if os.environ.get('TV_LOCALITY_ID') else None


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
