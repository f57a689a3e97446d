import os
import logging
from datetime import datetime
from urllib.parse import quote_plus
from flask import Flask, jsonify, send_from_directory
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_compress import Compress
from sqlalchemy.orm import DeclarativeBase
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

logger = logging.getLogger(__name__)

class Base(DeclarativeBase):
    pass

db = SQLAlchemy(model_class=Base)
compress = Compress()


def build_database_url():
    """Resolve the SQLAlchemy URL from DATABASE_URL or the DB_* variables"""
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        # Ensure the PyMySQL driver is specified
        if database_url.startswith("mysql://"):
            database_url = database_url.replace("mysql://", "mysql+pymysql://", 1)
        return database_url

    db_host = os.environ.get("DB_HOST")
    db_name = os.environ.get("DB_NAME")
    if db_host and db_name:
        user = quote_plus(os.environ.get("DB_USER", ""))
        password = quote_plus(os.environ.get("DB_PASSWORD", ""))
        port = os.environ.get("DB_PORT", "3306")
        return f"mysql+pymysql://{user}:{password}@{db_host}:{port}/{db_name}?charset=utf8mb4"

    # Fallback to SQLite for local development
    return "sqlite:///rideshare.db"


def create_app(test_config=None):
    app = Flask(__name__)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    database_url = build_database_url()
    app.config["SQLALCHEMY_DATABASE_URI"] = database_url
    if database_url.startswith("mysql"):
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {
            "pool_size": 10,
            "pool_recycle": 280,  # Below MySQL's default wait_timeout on managed hosts
            "pool_pre_ping": True,
            "max_overflow": 15,
            "pool_timeout": 20,
        }
    else:
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {"pool_pre_ping": True}

    app.config["APP_TIMEZONE"] = os.environ.get("APP_TIMEZONE", "Asia/Kolkata")
    app.config["UPLOAD_FOLDER"] = os.environ.get("UPLOAD_FOLDER", "uploads")
    app.config["MAX_CONTENT_LENGTH"] = 10 * 1024 * 1024  # profile pictures only

    # Expo push gateway
    app.config["EXPO_PUSH_URL"] = os.environ.get(
        "EXPO_PUSH_URL", "https://exp.host/--/api/v2/push/send")
    app.config["EXPO_ACCESS_TOKEN"] = os.environ.get("EXPO_ACCESS_TOKEN")
    app.config["PUSH_NOTIFICATIONS_ENABLED"] = (
        os.environ.get("PUSH_NOTIFICATIONS_ENABLED", "true").lower() == "true")
    app.config["PUSH_TIMEOUT"] = float(os.environ.get("PUSH_TIMEOUT", "10"))

    app.config["COMPRESS_MIMETYPES"] = ["application/json", "text/plain"]
    app.config["COMPRESS_MIN_SIZE"] = 500

    if test_config:
        app.config.update(test_config)

    # The mobile client talks to the API from arbitrary device addresses
    production_origins = os.environ.get("ALLOWED_ORIGINS", "").split(",")
    allowed_origins = [origin.strip() for origin in production_origins if origin.strip()]
    CORS(app, origins=allowed_origins or "*",
         allow_headers=["Content-Type", "Authorization"],
         methods=["GET", "POST", "PUT", "OPTIONS"])

    if not app.config.get("TESTING"):
        from utils.logging_config import setup_logging
        setup_logging(app)

    from utils.logging_config import log_request_start, log_request_end
    app.before_request(log_request_start)
    app.after_request(log_request_end)

    db.init_app(app)
    compress.init_app(app)

    from api_routes import api_bp
    app.register_blueprint(api_bp)

    register_error_handlers(app)

    from utils.config_validator import get_config_status, require_valid_config
    require_valid_config()
    logger.info(f"Configuration: {get_config_status()}")

    with app.app_context():
        import models  # noqa: F401
        db.create_all()

    # Health check endpoint for deployment
    @app.route('/health')
    def health():
        return {'status': 'ok', 'timestamp': datetime.utcnow().isoformat()}, 200

    @app.route('/uploads/<path:filename>')
    def uploaded_file(filename):
        """Serve stored profile pictures"""
        upload_folder = os.path.abspath(app.config['UPLOAD_FOLDER'])
        return send_from_directory(upload_folder, filename)

    return app


def register_error_handlers(app):
    from services.errors import ServiceError

    @app.errorhandler(ServiceError)
    def handle_service_error(error):
        return jsonify({'error': error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception(f"Unhandled error: {str(error)}")
        db.session.rollback()
        return jsonify({'error': 'Internal server error'}), 500
