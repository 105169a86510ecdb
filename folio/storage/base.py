"""
Common interface shared by every content store backend.

A store holds whole-file text blobs addressed by a slash separated key such
as ``posts/hello-world.md``. Binary image assets go through ``put_asset``
and come back as a public URL.
"""
from typing import List, Optional


class StorageError(Exception):
    """A backend read, write or delete failed."""


class BlobNotFoundError(StorageError):
    """The requested key does not exist in the store."""

    def __init__(self, key):
        super().__init__(f'Blob not found: {key}')
        self.key = key


class ConfigurationError(Exception):
    """Required settings for the selected backend are missing."""


class ContentStore:
    """Abstract content store. Subclasses implement every method."""

    name = 'abstract'

    def list(self, prefix: str = 'posts/', suffix: Optional[str] = None) -> List[str]:
        raise NotImplementedError

    def read(self, key: str) -> str:
        raise NotImplementedError

    def write(self, key: str, text: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        try:
            self.read(key)
        except BlobNotFoundError:
            return False
        return True

    def put_asset(self, key: str, data: bytes, content_type: str) -> str:
        raise NotImplementedError

    @staticmethod
    def _filter(keys, prefix, suffix):
        return sorted(
            k for k in keys
            if k.startswith(prefix) and (suffix is None or k.endswith(suffix))
        )

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.name}>'
