from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from datetime import timedelta
from typing import Optional, Dict, Any
import os

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()

DOCS_HTML = (
    "<!DOCTYPE html><html><head><title>Procurement API Docs</title>"
    "<link rel=\"stylesheet\" href=\"https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.css\" />"
    "</head><body><redoc spec-url='/openapi.json'></redoc>"
    "<script src='https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.js'></script>"
    "</body></html>"
)


def error_body(status: int, title: str, detail: str, code: str):
    return {'error': {'status': status, 'title': title, 'detail': detail, 'code': code}}


def _load_config(app: Flask, overrides: Optional[Dict[str, Any]]):
    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///procurement.db')
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(hours=int(os.getenv('JWT_ACCESS_TOKEN_HOURS', '12')))
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')
    if overrides:
        app.config.update(overrides)
    app.logger.setLevel(app.config['LOG_LEVEL'])


def _make_engine(url: str):
    if url.endswith(':memory:'):
        # one connection shared by every session, otherwise each sees an empty database
        return create_engine(
            url,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, future=True)


def _register_jwt_callbacks():
    from .services.users import is_token_revoked

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):  # type: ignore
        return is_token_revoked(jwt_payload['jti'])

    @jwt.unauthorized_loader
    def missing_token(reason):  # type: ignore
        return error_body(401, 'Unauthorized', reason, 'AUTH'), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):  # type: ignore
        return error_body(401, 'Unauthorized', reason, 'AUTH'), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):  # type: ignore
        return error_body(401, 'Unauthorized', 'Token has expired', 'AUTH'), 401

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):  # type: ignore
        return error_body(401, 'Unauthorized', 'Token has been revoked', 'AUTH'), 401


def _register_error_handler(app: Flask):
    from .errors import DomainError, PersistenceError

    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, SQLAlchemyError):
            # storage failures that escaped the services: nothing half-written survives
            SessionLocal.rollback()
            app.logger.exception('Persistence failure')
            e = PersistenceError(description='Storage unavailable, try again')
        if isinstance(e, HTTPException):
            code = e.code_name if isinstance(e, DomainError) else 'HTTP'
            if e.code >= 500:
                app.logger.error('%s %s', code, e.description)
            return error_body(e.code, e.name, e.description, code), e.code
        app.logger.exception('Unhandled exception')
        return error_body(500, 'Internal Server Error', 'Unexpected error', 'INTERNAL'), 500


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)
    _load_config(app, config)

    db_engine = _make_engine(app.config['DATABASE_URL'])
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)
    _register_jwt_callbacks()

    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.orders import orders_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(users_bp, url_prefix='/users')
    app.register_blueprint(orders_bp, url_prefix='/orders')

    @app.teardown_appcontext
    def remove_session(exc=None):  # type: ignore
        SessionLocal.remove()

    _register_error_handler(app)

    from .openapi import build_openapi_spec

    @app.get('/healthz')
    def health():
        return {'status': 'ok'}

    @app.get('/openapi.json')
    def openapi_spec():
        return build_openapi_spec()

    @app.get('/docs')
    def docs_index():
        return DOCS_HTML

    app.logger.info('Procurement API ready (database %s)', db_engine.url.render_as_string(hide_password=True))
    return app


def get_db():
    return SessionLocal()
