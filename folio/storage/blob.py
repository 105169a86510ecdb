"""
Managed blob store backend.

Talks to the blob service REST API with a read/write bearer token:

- ``GET  {api}?prefix=...&cursor=...`` lists blobs as ``{pathname, url}``
- ``PUT  {api}/{pathname}`` uploads a blob and returns its public ``url``
- ``POST {api}/delete`` removes blobs by URL

Blob contents are read back from the public URL the service hands out.
"""
import logging
from urllib.parse import quote

import requests

from folio.storage.base import BlobNotFoundError, ContentStore, StorageError

logger = logging.getLogger(__name__)

API_VERSION = '7'


class BlobStore(ContentStore):
    """Stores blobs in a managed blob service addressed by pathname."""

    name = 'blob'

    def __init__(self, token, api_url='https://blob.vercel-storage.com', session=None, timeout=15):
        self.token = token
        self.api_url = api_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self, **extra):
        headers = {
            'Authorization': f'Bearer {self.token}',
            'x-api-version': API_VERSION,
        }
        headers.update(extra)
        return headers

    def _request(self, method, url, **kwargs):
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.RequestException as e:
            raise StorageError(f'Blob store {method} {url} failed: {e}') from e
        return response

    def _json(self, method, url, **kwargs):
        response = self._request(method, url, **kwargs)
        try:
            payload = response.json()
        except ValueError as e:
            raise StorageError(f'Blob store {method} {url} returned invalid JSON: {e}') from e
        if not isinstance(payload, dict):
            raise StorageError(f'Blob store {method} {url} returned an unexpected payload')
        return payload

    def _list_blobs(self, prefix):
        blobs = []
        cursor = None
        while True:
            params = {'prefix': prefix, 'limit': 1000}
            if cursor:
                params['cursor'] = cursor
            payload = self._json('GET', self.api_url, params=params, headers=self._headers())
            blobs.extend(b for b in payload.get('blobs') or [] if isinstance(b, dict))
            cursor = payload.get('cursor')
            if not payload.get('hasMore') or not cursor:
                return blobs

    def _find(self, key):
        for blob in self._list_blobs(key):
            if blob.get('pathname') == key:
                if not blob.get('url'):
                    raise StorageError(f'Blob store listing has no URL for {key}')
                return blob
        raise BlobNotFoundError(key)

    def list(self, prefix='posts/', suffix=None):
        return self._filter((b.get('pathname', '') for b in self._list_blobs(prefix)), prefix, suffix)

    def read(self, key):
        blob = self._find(key)
        response = self._request('GET', blob['url'])
        try:
            return response.content.decode('utf-8')
        except UnicodeDecodeError as e:
            raise StorageError(f'{key} is not valid UTF-8: {e}') from e

    def _put(self, key, data, content_type):
        headers = self._headers(**{
            'x-content-type': content_type,
            'x-add-random-suffix': '0',
            'x-allow-overwrite': '1',
            'x-cache-control-max-age': '0',
        })
        url = f'{self.api_url}/{quote(key)}'
        return self._json('PUT', url, data=data, headers=headers)

    def write(self, key, text):
        self._put(key, text.encode('utf-8'), 'text/markdown; charset=utf-8')

    def delete(self, key):
        blob = self._find(key)
        self._request(
            'POST',
            f'{self.api_url}/delete',
            json={'urls': [blob['url']]},
            headers=self._headers(),
        )

    def exists(self, key):
        try:
            self._find(key)
        except BlobNotFoundError:
            return False
        return True

    def put_asset(self, key, data, content_type):
        payload = self._put(key, data, content_type)
        url = payload.get('url')
        if not url:
            raise StorageError(f'Blob store did not return a URL for {key}')
        return url
