import os


def _env_flag(name, default='false'):
    return os.environ.get(name, default).lower() in ['true', 'on', '1', 'yes']


def resolve_storage_backend(environ=None):
    """
    Decide which content store backend the process uses.

    An explicit STORAGE_BACKEND wins. Otherwise object-store credentials select
    's3', a blob-store token selects 'blob', and anything else falls back to the
    local filesystem.
    """
    environ = os.environ if environ is None else environ
    explicit = (environ.get('STORAGE_BACKEND') or '').strip().lower()
    if explicit:
        return explicit
    if all(environ.get(k) for k in ('S3_BUCKET', 'S3_ACCESS_KEY_ID', 'S3_SECRET_ACCESS_KEY')):
        return 's3'
    if environ.get('BLOB_READ_WRITE_TOKEN'):
        return 'blob'
    return 'filesystem'


class Config:
    """Base configuration"""
    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        raise RuntimeError(
            "SECRET_KEY environment variable is required. "
            "Please set it in your .flaskenv file or environment. "
            "Generate a secure key with: python -c \"import secrets; print(secrets.token_hex(32))\""
        )

    # Single administrator credentials
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')

    # Content storage
    STORAGE_BACKEND = resolve_storage_backend()
    CONTENT_ROOT = os.environ.get('CONTENT_ROOT') or \
        os.path.join(os.path.dirname(os.path.abspath(__file__)), 'content')
    POSTS_PREFIX = 'posts/'
    UPLOADS_PREFIX = 'uploads/'

    # S3 compatible object store (AWS, Cloudflare R2, MinIO...)
    S3_BUCKET = os.environ.get('S3_BUCKET')
    S3_ACCESS_KEY_ID = os.environ.get('S3_ACCESS_KEY_ID')
    S3_SECRET_ACCESS_KEY = os.environ.get('S3_SECRET_ACCESS_KEY')
    S3_ENDPOINT_URL = os.environ.get('S3_ENDPOINT_URL')
    S3_REGION = os.environ.get('S3_REGION') or 'auto'
    S3_PUBLIC_BASE = os.environ.get('S3_PUBLIC_BASE')

    # Managed blob store
    BLOB_READ_WRITE_TOKEN = os.environ.get('BLOB_READ_WRITE_TOKEN')
    BLOB_API_URL = os.environ.get('BLOB_API_URL') or 'https://blob.vercel-storage.com'
    BLOB_REQUEST_TIMEOUT = 15

    # Uploads
    MAX_CONTENT_LENGTH = int(os.environ.get('UPLOAD_MAX_MB') or 10) * 1024 * 1024
    UPLOAD_ALLOWED_TYPES = [
        'image/png',
        'image/jpeg',
        'image/webp',
        'image/gif',
        'image/svg+xml',
    ]

    # Editor autosave quiet period in seconds
    AUTOSAVE_DELAY_SECONDS = 1.5

    # Email configuration (error reports)
    MAIL_SERVER = os.environ.get('MAIL_SERVER')
    MAIL_PORT = int(os.environ.get('MAIL_PORT') or 587)
    MAIL_USE_TLS = _env_flag('MAIL_USE_TLS', 'true')
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    ADMINS = [os.environ.get('ADMIN_EMAIL') or 'your-email@example.com']

    # Session cookie security configuration
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'True').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 60 * 60 * 24 * 7  # one week in seconds
    SESSION_COOKIE_NAME = 'folio_session'

    # Forms are posted as JSON by the editor; CSRF is covered by SameSite cookies
    WTF_CSRF_ENABLED = False


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    SESSION_COOKIE_SECURE = False  # Allow HTTP in development


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    STORAGE_BACKEND = 'filesystem'
    SESSION_COOKIE_SECURE = False  # Allow HTTP in testing
    AUTOSAVE_DELAY_SECONDS = 0.01


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    SESSION_COOKIE_SECURE = True  # Force HTTPS in production


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
