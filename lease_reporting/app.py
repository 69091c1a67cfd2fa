"""
Lease Reporting Application
JSON API over the lease store and the AASB16 reporting engine
"""

from flask import Flask, jsonify
from flask_cors import CORS
import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Import configuration
from lease_reporting.config import Config, config

# Import blueprints
from lease_reporting.api import api_bp
from lease_reporting.calculate_backend import calc_bp

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_dir: Path, to_file: bool = True,
                  max_bytes: int = Config.LOG_MAX_BYTES, backup_count: int = Config.LOG_BACKUP_COUNT):
    """Setup application logging"""
    log_formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Handlers are installed once per process; later app instances reuse them
    if getattr(root_logger, '_lease_reporting_handlers', False):
        return root_logger

    if to_file:
        log_dir.mkdir(parents=True, exist_ok=True)
        # File handler with rotation
        file_handler = RotatingFileHandler(
            log_dir / 'lease_reporting.log',
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        file_handler.setFormatter(log_formatter)
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_formatter)
    console_handler.setLevel(logging.INFO)
    root_logger.addHandler(console_handler)

    root_logger._lease_reporting_handlers = True
    return root_logger


def create_app(config_name=None):
    """Application factory pattern"""
    app = Flask(__name__)

    # Load configuration
    config_name = config_name or os.environ.get('FLASK_ENV', 'default')
    app.config.from_object(config[config_name])

    # Setup logging
    logger = setup_logging(
        Path(app.config['LOG_DIR']),
        to_file=app.config['LOG_TO_FILE'],
        max_bytes=app.config['LOG_MAX_BYTES'],
        backup_count=app.config['LOG_BACKUP_COUNT'],
    )
    logger.info("🚀 Initializing Lease Reporting Application...")

    # Initialize CORS
    cors_origins = app.config.get('CORS_ORIGINS', ['*'])
    if isinstance(cors_origins, str):
        cors_origins = cors_origins.split(',')

    CORS(app,
         resources={r"/api/*": {"origins": cors_origins, "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"], "allow_headers": ["Content-Type"]}})

    # Register blueprints
    app.register_blueprint(api_bp)
    app.register_blueprint(calc_bp)
    logger.info("✅ Blueprints registered")

    @app.route('/api/health')
    def health():
        return jsonify({'status': 'ok'})

    logger.info("✅ Application created successfully")
    return app


if __name__ == '__main__':
    app = create_app()
    logger = logging.getLogger(__name__)

    logger.info("══════════════════════════════════════════════════════════════")
    logger.info("   📊 Lease Reporting - Starting Server")
    logger.info("══════════════════════════════════════════════════════════════")
    logger.info(f"📍 API Endpoint: http://{app.config['API_HOST']}:{app.config['API_PORT']}/api/")
    logger.info("   - /api/leases - Lease and opening balance records")
    logger.info("   - /api/payment_schedule - Lease payment schedule")
    logger.info("   - /api/pv_calculation - PV calculation tables and journal")
    logger.info("   - /api/reports - Summary / Detail reports")
    logger.info(f"📁 Data: {app.config['LEASE_DATA_PATH']}")
    logger.info("══════════════════════════════════════════════════════════════")

    app.run(
        debug=app.config['DEBUG'],
        host=app.config['API_HOST'],
        port=app.config['API_PORT']
    )
