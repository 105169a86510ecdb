import logging
import threading

logger = logging.getLogger(__name__)

BLOG_INDEX_PATH = '/blog'


def blog_post_path(slug):
    return f'{BLOG_INDEX_PATH}/{slug}'


class RenderCache:
    """In-process cache of public render payloads keyed by request path."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries = {}

    def get(self, path):
        with self._lock:
            return self._entries.get(path)

    def set(self, path, payload):
        with self._lock:
            self._entries[path] = payload

    def __contains__(self, path):
        with self._lock:
            return path in self._entries

    def invalidate(self, paths):
        removed = []
        with self._lock:
            for path in paths:
                if self._entries.pop(path, None) is not None:
                    removed.append(path)
        if removed:
            logger.debug(f'Invalidated cached renders: {removed}')
        return removed

    def clear(self):
        with self._lock:
            self._entries.clear()
