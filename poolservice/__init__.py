import os
import logging
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from dotenv import load_dotenv

from .config import DevConfig, ProdConfig, TestConfig

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()

CONFIGS = {
    'development': DevConfig,
    'production': ProdConfig,
    'testing': TestConfig,
}


def create_app(config_name: str | None = None) -> Flask:
    """Application factory with environment based configuration."""
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)
    os.makedirs(app.instance_path, exist_ok=True)

    # Pick configuration
    env = config_name or os.getenv('ENV') or os.getenv('FLASK_ENV') or 'production'
    app.config.from_object(CONFIGS.get(env, ProdConfig))

    # Initialise logging
    level = app.config.get('LOG_LEVEL') or ('DEBUG' if app.debug else 'INFO')
    logging.basicConfig(level=level)

    db.init_app(app)
    migrate.init_app(app, db)

    # Ensure models loaded so tables can be created
    from poolservice import models  # noqa
    with app.app_context():
        db.create_all()

    from poolservice.errors import register_error_handlers
    register_error_handlers(app)

    from poolservice import formatters
    formatters.register_filters(app)

    @app.route('/')
    def index():
        return jsonify(service='poolservice', status='ok')

    from poolservice.customers.routes import bp as customers_bp
    from poolservice.properties.routes import bp as properties_bp
    from poolservice.pools.routes import bp as pools_bp
    from poolservice.estimates.routes import bp as estimates_bp
    from poolservice.notes.routes import bp as notes_bp
    from poolservice.communications.routes import bp as communications_bp
    from poolservice.calendar.routes import bp as calendar_bp
    from poolservice.tags.routes import bp as tags_bp
    from poolservice.cli import estimates_cli

    app.register_blueprint(customers_bp, url_prefix='/customers')
    app.register_blueprint(properties_bp, url_prefix='/properties')
    app.register_blueprint(pools_bp, url_prefix='/pools')
    app.register_blueprint(estimates_bp, url_prefix='/estimates')
    app.register_blueprint(notes_bp, url_prefix='/notes')
    app.register_blueprint(communications_bp, url_prefix='/communications')
    app.register_blueprint(tags_bp, url_prefix='/tags')
    app.register_blueprint(calendar_bp, url_prefix='/calendar')
    app.cli.add_command(estimates_cli)

    return app
