# Local filesystem backend for the content store
import logging
import os

from folio.storage.base import BlobNotFoundError, ContentStore, StorageError

logger = logging.getLogger(__name__)


def validate_secure_path(key, base_path):
    """
    Validate that a key is safe and resolves inside the storage root.

    Args:
        key (str): Slash separated blob key (e.g. 'posts/hello.md').
        base_path (str): The directory every key must stay within.

    Returns:
        str: The validated full path if safe, None if unsafe.
    """
    if not key or key.startswith('/') or '\\' in key:
        return None

    parts = key.split('/')
    if any(part in ('', '.', '..') for part in parts):
        return None

    full_path = os.path.normpath(os.path.join(base_path, *parts))
    root = os.path.normpath(base_path)

    # Ensure the normalized path is still within the base directory
    if os.path.commonpath([full_path, root]) != root:
        return None

    return full_path


class FilesystemStore(ContentStore):
    """Stores blobs as plain files below a root directory."""

    name = 'filesystem'

    def __init__(self, root, public_url_prefix='/uploads'):
        self.root = os.path.abspath(root)
        self.public_url_prefix = public_url_prefix.rstrip('/')
        os.makedirs(self.root, exist_ok=True)

    def _path(self, key):
        path = validate_secure_path(key, self.root)
        if path is None:
            raise StorageError(f'Invalid storage key: {key!r}')
        return path

    def list(self, prefix='posts/', suffix=None):
        directory = os.path.dirname(self._path(prefix + '_')) if prefix else self.root
        if not os.path.isdir(directory):
            return []

        keys = []
        for dirpath, _dirnames, filenames in os.walk(directory):
            for filename in filenames:
                full = os.path.join(dirpath, filename)
                keys.append(os.path.relpath(full, self.root).replace(os.sep, '/'))
        return self._filter(keys, prefix, suffix)

    def read(self, key):
        path = self._path(key)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            raise BlobNotFoundError(key)
        except UnicodeDecodeError as e:
            raise StorageError(f'{key} is not valid UTF-8: {e}') from e
        except OSError as e:
            raise StorageError(f'Could not read {key}: {e}') from e

    def write(self, key, text):
        path = self._path(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                f.write(text)
        except OSError as e:
            raise StorageError(f'Could not write {key}: {e}') from e
        logger.debug(f'Wrote {len(text)} characters to {path}')

    def delete(self, key):
        path = self._path(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            raise BlobNotFoundError(key)
        except OSError as e:
            raise StorageError(f'Could not delete {key}: {e}') from e

    def exists(self, key):
        return os.path.isfile(self._path(key))

    def put_asset(self, key, data, content_type):
        path = self._path(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'wb') as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f'Could not store asset {key}: {e}') from e

        # 'uploads/123-cat.png' is served as '/uploads/123-cat.png'
        name = key.split('/', 1)[1] if '/' in key else key
        return f'{self.public_url_prefix}/{name}'
