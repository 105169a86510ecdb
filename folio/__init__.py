from flask import Flask, current_app, jsonify
from flask_login import LoginManager
import logging
from logging.handlers import SMTPHandler, RotatingFileHandler
import os

# Initialize extensions
login = LoginManager()


def create_app(config_name='development', test_config=None):
    """Application factory function"""
    app = Flask(__name__)

    # Load configuration
    from config import config
    app.config.from_object(config[config_name])
    if test_config:
        app.config.update(test_config)

    # Initialize extensions
    login.init_app(app)
    register_login_handlers(app)

    # Configure logging
    configure_logging(app)

    # Content store and render cache are built once per process
    init_storage(app)

    # Register middleware
    register_middleware(app)

    # Register blueprints/routes
    register_routes(app)

    return app


def configure_logging(app):
    """Configure logging for the application"""
    logs_dir = os.path.join(app.instance_path, 'logs')
    os.makedirs(logs_dir, exist_ok=True)

    # Always log to file (even in debug mode). app.logger is the 'folio'
    # logger, so module loggers such as 'folio.storage.s3' end up here too.
    app_log_path = os.path.join(logs_dir, 'app.log')
    already_attached = any(
        isinstance(h, RotatingFileHandler) and h.baseFilename == os.path.abspath(app_log_path)
        for h in app.logger.handlers
    )
    if not already_attached:
        file_handler = RotatingFileHandler(app_log_path, maxBytes=10240, backupCount=10)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

    # Set appropriate log level
    if app.debug:
        app.logger.setLevel(logging.DEBUG)
    else:
        app.logger.setLevel(logging.INFO)

    # Email notifications for production errors only
    if not app.debug and not app.testing and app.config.get('MAIL_SERVER'):
        auth = None
        if app.config['MAIL_USERNAME'] or app.config['MAIL_PASSWORD']:
            auth = (app.config['MAIL_USERNAME'], app.config['MAIL_PASSWORD'])
        secure = None
        if app.config['MAIL_USE_TLS']:
            secure = ()
        mail_handler = SMTPHandler(
            mailhost=(app.config['MAIL_SERVER'], app.config['MAIL_PORT']),
            fromaddr='no-reply@' + app.config['MAIL_SERVER'],
            toaddrs=app.config['ADMINS'], subject='Folio Failure',
            credentials=auth, secure=secure)
        mail_handler.setLevel(logging.ERROR)
        app.logger.addHandler(mail_handler)

    app.logger.info('Folio application startup')


def register_login_handlers(app):
    """Answer unauthenticated admin requests with JSON instead of a redirect"""

    @login.unauthorized_handler
    def unauthorized():
        from folio.audit import audit_log_security_event
        from flask import request
        audit_log_security_event('ACCESS_DENIED', f'Unauthenticated {request.method} {request.path}')
        return jsonify({'error': 'Unauthorized'}), 401


def init_storage(app):
    """Build the configured content store and the public render cache"""
    from folio.storage import create_store
    from folio.cache import RenderCache

    store = create_store(app.config)
    app.extensions['content_store'] = store
    app.extensions['render_cache'] = RenderCache()
    app.logger.info(f'Using {store.name} content store')


def get_store():
    return current_app.extensions['content_store']


def get_repository():
    from folio.posts.repository import PostRepository
    return PostRepository(get_store(), prefix=current_app.config.get('POSTS_PREFIX', 'posts/'))


def get_render_cache():
    return current_app.extensions['render_cache']


def get_autosaver(slug=None):
    """Draft autosaver for one post using the configured quiet period"""
    from folio.posts.autosave import DraftAutosaver
    return DraftAutosaver(get_repository(), slug=slug, delay=current_app.config['AUTOSAVE_DELAY_SECONDS'])


def register_middleware(app):
    """Register middleware functions"""

    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses"""
        # Content Security Policy; uploaded images may live on an object store host
        response.headers['Content-Security-Policy'] = (
            "default-src 'self'; "
            "img-src 'self' data: https:; "
            "style-src 'self' 'unsafe-inline'; "
            "frame-ancestors 'none';"
        )

        # HTTP Strict Transport Security
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        # X-Content-Type-Options
        response.headers['X-Content-Type-Options'] = 'nosniff'

        # X-Frame-Options
        response.headers['X-Frame-Options'] = 'DENY'

        # Referrer Policy
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        # Permissions Policy
        response.headers['Permissions-Policy'] = 'geolocation=(), microphone=(), camera=()'

        return response


def register_routes(app):
    """Register application routes via blueprints"""
    from folio.main import bp as main_bp
    from folio.auth import bp as auth_bp
    from folio.posts import bp as posts_bp
    from folio.uploads import bp as uploads_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(posts_bp, url_prefix='/posts')
    app.register_blueprint(uploads_bp)

    # Register error handlers
    from folio.errors import register_error_handlers
    register_error_handlers(app)

    # Import models so the user loader is registered
    from folio import models
