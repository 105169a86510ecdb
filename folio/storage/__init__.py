"""
Pluggable content storage.

The backend is chosen once at startup from configuration and the resulting
store is shared by every request for the life of the process.
"""
from folio.storage.base import (
    BlobNotFoundError, ConfigurationError, ContentStore, StorageError
)
from folio.storage.blob import BlobStore
from folio.storage.filesystem import FilesystemStore
from folio.storage.s3 import S3Store, make_s3_client

BACKENDS = ('filesystem', 's3', 'blob')


def _require(config, *keys):
    missing = [k for k in keys if not config.get(k)]
    if missing:
        raise ConfigurationError(
            f"Storage backend {config.get('STORAGE_BACKEND')!r} requires: {', '.join(missing)}"
        )


def create_store(config):
    """
    Build the content store described by a Flask config mapping.

    Args:
        config: Mapping with STORAGE_BACKEND and the backend specific keys.

    Returns:
        ContentStore: The configured backend.

    Raises:
        ConfigurationError: Unknown backend or missing backend settings.
    """
    backend = (config.get('STORAGE_BACKEND') or 'filesystem').lower()

    if backend == 'filesystem':
        _require(config, 'CONTENT_ROOT')
        return FilesystemStore(config['CONTENT_ROOT'])

    if backend == 's3':
        _require(config, 'S3_BUCKET', 'S3_ACCESS_KEY_ID', 'S3_SECRET_ACCESS_KEY')
        client = make_s3_client(
            config['S3_ACCESS_KEY_ID'],
            config['S3_SECRET_ACCESS_KEY'],
            endpoint_url=config.get('S3_ENDPOINT_URL'),
            region=config.get('S3_REGION') or 'auto',
        )
        return S3Store(config['S3_BUCKET'], client, public_base=config.get('S3_PUBLIC_BASE'))

    if backend == 'blob':
        _require(config, 'BLOB_READ_WRITE_TOKEN')
        return BlobStore(
            config['BLOB_READ_WRITE_TOKEN'],
            api_url=config.get('BLOB_API_URL') or 'https://blob.vercel-storage.com',
            timeout=config.get('BLOB_REQUEST_TIMEOUT') or 15,
        )

    raise ConfigurationError(f'Unknown storage backend {backend!r}; expected one of {BACKENDS}')


__all__ = [
    'BACKENDS', 'BlobNotFoundError', 'BlobStore', 'ConfigurationError', 'ContentStore',
    'FilesystemStore', 'S3Store', 'StorageError', 'create_store',
]
