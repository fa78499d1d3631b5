import logging
import os
from logging.handlers import RotatingFileHandler

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_bcrypt import Bcrypt
from asset_catalog.config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()


def setup_logging(app):
    log_dir = app.config.get('LOG_DIR')
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))
    if not log_dir:
        return
    os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(os.path.join(log_dir, app.config['LOG_FILE']),
                                  maxBytes=5_000_000, backupCount=5)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    handler.setLevel(logging.INFO)
    if not any(isinstance(h, RotatingFileHandler) for h in app.logger.handlers):
        app.logger.addHandler(handler)
    # core modules log under the package name
    package_logger = logging.getLogger('asset_catalog')
    package_logger.setLevel(logging.INFO)
    if not any(isinstance(h, RotatingFileHandler) for h in package_logger.handlers):
        package_logger.addHandler(handler)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    setup_logging(app)

    db.init_app(app)
    bcrypt.init_app(app)
    login_manager.init_app(app)

    from asset_catalog.models.user import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required'}), 401

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({'error': 'Uploaded file is too large'}), 413

    @app.teardown_request
    def log_unhandled_exception(exc):
        if exc is not None:
            app.logger.exception("Unhandled exception", exc_info=exc)

    with app.app_context():
        # Import blueprints inside context
        from asset_catalog.routes import assets_bp, asset_types_bp, admins_bp, notifications_bp
        from asset_catalog.routes.users import users_bp

        # Register blueprints
        app.register_blueprint(users_bp)
        app.register_blueprint(admins_bp)
        app.register_blueprint(asset_types_bp)
        app.register_blueprint(assets_bp)
        app.register_blueprint(notifications_bp)

        # Create all database tables
        db.create_all()

    return app
