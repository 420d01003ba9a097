"""
Reading Club backend

create_app() builds a configured Flask app. Models, the clock and the
blueprints are attached per app, so tests can build one with
create_app('testing') and swap app.extensions['clock'].
"""
import os

from flask import Flask

from .config import get_config
from .extensions import db, limiter, migrate

PROJECT_ROOT = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))


def _resolve_sqlite_path(app):
    """Point 'sqlite:///instance/<name>' at <project>/instance/<name>"""
    uri = app.config['SQLALCHEMY_DATABASE_URI']
    if not uri.startswith('sqlite:///instance/'):
        return
    instance_dir = os.path.join(PROJECT_ROOT, 'instance')
    os.makedirs(instance_dir, exist_ok=True)
    db_name = uri.rsplit('/', 1)[-1]
    app.config['SQLALCHEMY_DATABASE_URI'] = f'sqlite:///{os.path.join(instance_dir, db_name)}'


def _enable_sqlite_foreign_keys(app):
    """SQLite ignores FOREIGN KEY clauses unless each connection opts in"""
    from sqlalchemy import event

    with app.app_context():
        engine = db.engine
        if engine.dialect.name != 'sqlite':
            return

        @event.listens_for(engine, 'connect')
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute('PRAGMA foreign_keys=ON')
            cursor.close()


def create_app(config_name=None):
    """
    Application factory

    Args:
        config_name: 'development', 'testing' or 'production'; FLASK_ENV
            decides when omitted

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    # Behind Nginx: trust one proxy hop for client address and scheme.
    # The rate limiter keys on the client address.
    from werkzeug.middleware.proxy_fix import ProxyFix
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    config_class = get_config(config_name)
    app.config.from_object(config_class)
    _resolve_sqlite_path(app)

    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    _enable_sqlite_foreign_keys(app)

    from reading_club.error_handlers import register_error_handlers, setup_logging
    setup_logging(app)
    register_error_handlers(app)

    from reading_club.models import init_models, model_registry
    model_registry.init_app(app)
    model_registry.register(init_models(db))

    # Decides "today" for deadlines and windows; tests install a FixedClock
    from reading_club.utils.clock import clock_from_config
    app.extensions['clock'] = clock_from_config(app.config)

    register_blueprints(app)

    app.logger.info(f"Reading Club backend created with {config_class.__name__}")
    return app


def register_blueprints(app):
    from reading_club.routes import events_bp, health_bp, leader_assignments_bp

    app.register_blueprint(leader_assignments_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(health_bp)

    # Probes must not be throttled
    limiter.exempt(health_bp)


def init_db(app):
    """Create missing tables (fresh development databases; production uses migrations)"""
    with app.app_context():
        db.create_all()
