"""
Aplicação Flask - TV Saúde Backend
API REST de conteúdo, avisos e controle remoto das TVs das UBS
"""

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from config import config
import logging
import os

db = SQLAlchemy()
migrate = Migrate()

# Configuração de logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(config_name='default'):
    """
    Factory function para criar a aplicação Flask

    Args:
        config_name: Nome da configuração (development, production, testing)

    Returns:
        Flask app configurada, com os serviços em app.extensions
        (ainda parados; ver start_background_services)
    """
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # Verificações de segurança em produção
    if config_name == 'production':
        config[config_name].init_app(app)

    logging.getLogger('tvsaude').setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Inicialização das extensões
    db.init_app(app)
    migrate.init_app(app, db)

    cors_origins = app.config.get('CORS_ORIGINS', ['http://localhost:3000'])
    CORS(app, resources={
        r"/api/*": {
            "origins": cors_origins,
            "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": app.config.get('CORS_ALLOW_HEADERS', ["Content-Type"]),
        }
    })

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        return response

    # ==================== SERVIÇOS ====================

    _init_services(app)

    # ==================== BLUEPRINTS ====================

    # Conteúdo por IP (resolvedor de localidade)
    from tvsaude.routes.content import content_bp
    app.register_blueprint(content_bp, url_prefix='/api/content')

    # Avisos
    from tvsaude.routes.announcements import announcements_bp
    app.register_blueprint(announcements_bp, url_prefix='/api/announcements')

    # Controle remoto
    from tvsaude.routes.commands import commands_bp
    app.register_blueprint(commands_bp, url_prefix='/api/commands')

    # Imagens, mensagens e playlist ativa
    from tvsaude.routes.media import media_bp
    app.register_blueprint(media_bp, url_prefix='/api')

    # Sincronizador de avisos
    from tvsaude.routes.sync import sync_bp
    app.register_blueprint(sync_bp, url_prefix='/api/sync')

    # ==================== ERROR HANDLERS ====================

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({'error': 'Requisição inválida', 'code': 'BAD_REQUEST'}), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Recurso não encontrado', 'code': 'NOT_FOUND'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Método não permitido', 'code': 'METHOD_NOT_ALLOWED'}), 405

    @app.errorhandler(422)
    def unprocessable_entity(error):
        return jsonify({'error': 'Dados não processáveis', 'code': 'UNPROCESSABLE_ENTITY'}), 422

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Erro interno: {str(error)}")
        return jsonify({'error': 'Erro interno do servidor', 'code': 'INTERNAL_ERROR'}), 500

    @app.errorhandler(503)
    def service_unavailable(error):
        return jsonify({'error': 'Serviço temporariamente indisponível', 'code': 'SERVICE_UNAVAILABLE'}), 503

    # ==================== HEALTH CHECK ====================

    @app.route('/api/health')
    def health_check():
        """Endpoint de verificação de saúde"""
        return {'status': 'healthy', 'version': '1.0.0'}

    # Criar as tabelas do banco (somente dev)
    if os.environ.get('AUTO_CREATE_DB', 'false').lower() == 'true':
        with app.app_context():
            db.create_all()

    logger.info(f"Aplicação iniciada em modo {config_name}")

    return app


def _init_services(app):
    """Instancia os serviços com dependências explícitas (sem singletons de módulo)"""
    from tvsaude.services.announcement_scheduler import AnnouncementScheduler
    from tvsaude.services.sync_bridge import AnnouncementSyncBridge

    app.extensions['announcement_scheduler'] = AnnouncementScheduler(app)
    app.extensions['sync_bridge'] = AnnouncementSyncBridge(
        base_url=app.config['SYNC_API_BASE_URL'],
        cache_dir=app.config['SYNC_CACHE_DIR'],
        interval=app.config['SYNC_INTERVAL_SECONDS'],
        urgent_interval=app.config['SYNC_URGENT_INTERVAL_SECONDS'],
        urgent_priority_threshold=app.config['URGENT_PRIORITY_THRESHOLD'],
        request_timeout=app.config['SYNC_REQUEST_TIMEOUT'],
    )


def start_background_services(app):
    """Inicia o agendador de avisos e o sincronizador, se habilitados"""
    if not app.config.get('START_BACKGROUND_SERVICES'):
        logger.info("Serviços em segundo plano desabilitados pela configuração")
        return

    app.extensions['announcement_scheduler'].start()
    app.extensions['sync_bridge'].start()


def stop_background_services(app):
    """Para o agendador e o sincronizador (idempotente)"""
    app.extensions['announcement_scheduler'].stop()
    app.extensions['sync_bridge'].stop()
