import os
import logging
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

import requests
from flask import Flask, request, g
from flask_cors import CORS

from config import Config
from trackradar.domain.catalog import CachingTokenProvider, CatalogProxy, TokenProvider
from trackradar.errors import ConfigurationError
from trackradar.interfaces.http.routes import health_bp, page_bp, spotify_bp, token_bp
from trackradar.observability import configure_structured_logging, init_tracing, metrics_blueprint
from trackradar.settings import load_app_settings, load_credentials
from trackradar.utils.cache import TokenCache

logger = logging.getLogger(__name__)

PACKAGE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'trackradar')


def configure_logging(log_dir: str) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when ENABLE_CONSOLE_LOGS is set
      - Werkzeug/Flask loggers routed to root

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_path = os.path.join(log_dir, f"log-{timestamp}")

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Keep structured handlers; drop earlier file handlers so reconfiguring never duplicates
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if Config.ENABLE_CONSOLE_LOGS:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    for name in ("werkzeug", "flask.app"):
        _l = logging.getLogger(name)
        _l.setLevel(logging.INFO)
        _l.handlers = []
        _l.propagate = True

    return log_path


def build_catalog_services(settings, session=None):
    """Wire token provider and catalog proxy from validated settings.

    Raises ConfigurationError when the client credentials are missing.
    """
    credentials = load_credentials(settings)
    session = session or requests.Session()

    token_provider = TokenProvider(
        credentials,
        token_url=settings.token_url,
        session=session,
        timeout=settings.http_timeout,
    )
    if settings.token_cache_enabled:
        token_provider = CachingTokenProvider(token_provider, TokenCache(margin=settings.token_expiry_margin))

    catalog_proxy = CatalogProxy(
        token_provider,
        api_base_url=settings.api_base_url,
        session=session,
        timeout=settings.http_timeout,
        search_limit=settings.search_limit,
    )
    return token_provider, catalog_proxy


def create_app(config_overrides=None, http_session=None):
    app = Flask(
        __name__,
        template_folder=os.path.join(PACKAGE_DIR, 'templates'),
        static_folder=os.path.join(PACKAGE_DIR, 'static'),
        static_url_path='/static',
    )
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    settings = load_app_settings(app.config)
    try:
        token_provider, catalog_proxy = build_catalog_services(settings, session=http_session)
    except ConfigurationError:
        logger.critical("Spotify client ID or client secret not found; refusing to start.")
        logger.critical("Set SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET in the environment or .env file.")
        raise

    configure_structured_logging(app)
    init_tracing(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    allowed_origins = sorted({
        origin.strip()
        for origin in app.config.get('CORS_ALLOWED_ORIGINS', [])
        if origin and origin.strip() and origin.strip() != "*"
    })
    CORS(app, resources={r"/api/*": {"origins": allowed_origins}})

    app.extensions['app_settings'] = settings
    app.extensions['token_provider'] = token_provider
    app.extensions['catalog_proxy'] = catalog_proxy
    app.logger.info(
        "Catalog proxy ready: api=%s, search_limit=%s, token_cache=%s",
        settings.api_base_url, settings.search_limit, settings.token_cache_enabled,
    )

    # --- Register Blueprints ---
    app.register_blueprint(spotify_bp)
    app.register_blueprint(token_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_blueprint)
    app.register_blueprint(page_bp)

    return app


if __name__ == '__main__':
    # In debug with reloader: only configure file logging in the child process
    debug_mode = bool(Config.DEBUG)
    log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'log')
    if not debug_mode or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(log_dir)
        logger.info("File logging initialized at %s", log_file_path)

    app = create_app()
    # Route app.logger through root handlers, keep levels consistent
    app.logger.handlers = []
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = True
    logger.info("Starting Flask application...")
    app.run(debug=Config.DEBUG, host='0.0.0.0', port=int(os.getenv('PORT', '5000')), threaded=True)
