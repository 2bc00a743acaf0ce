from functools import wraps
from flask import request, jsonify
from sqlalchemy.exc import SQLAlchemyError
from tvsaude import db
import logging

logger = logging.getLogger(__name__)


def handle_db_errors(fn):
    """
    Decorador de fronteira para rotas que acessam o banco

    Em caso de SQLAlchemyError: rollback da sessão, log e resposta 500 JSON.
    A falha nunca sobe para o laço de renderização de quem chamou.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Erro de banco em {request.method} {request.path}: {e}")
            return jsonify({'error': 'Erro ao acessar o banco de dados', 'code': 'DATABASE_ERROR'}), 500
    return wrapper


def json_body_required(fn):
    """Exige corpo JSON (objeto) na requisição"""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'error': 'Corpo JSON obrigatório', 'code': 'BAD_REQUEST'}), 400
        return fn(*args, **kwargs)
    return wrapper
