"""
Debounced autosave for the post editor.

Every change re-arms a timer; only the state that survives a quiet period
is written. Autosave failures are logged and otherwise ignored so they never
interrupt editing; explicit saves go through the HTTP API instead.
"""
import logging
import threading

from folio.models import DRAFT
from folio.posts.converter import html_to_markdown

logger = logging.getLogger(__name__)

AUTOSAVE_DELAY = 1.5


class Debouncer:
    """
    Run only the most recently scheduled task, ``delay`` seconds after the
    last call to ``schedule``. Scheduling again before the delay elapses
    cancels the earlier task.
    """

    def __init__(self, delay=AUTOSAVE_DELAY, timer_factory=threading.Timer):
        self.delay = delay
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer = None
        self._call = None

    @property
    def pending(self):
        with self._lock:
            return self._call is not None

    def schedule(self, task, *args, **kwargs):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            call = (task, args, kwargs)
            self._call = call
            self._timer = self._timer_factory(self.delay, self._fire, args=(call,))
            self._timer.daemon = True
            self._timer.start()

    def cancel(self):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._call = None

    def flush(self):
        """Run the pending task immediately, if there is one."""
        with self._lock:
            call = self._call
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._call = None
        if call is not None:
            task, args, kwargs = call
            task(*args, **kwargs)

    def _fire(self, call):
        with self._lock:
            # a newer schedule() or a flush() already replaced this call
            if self._call is not call:
                return
            self._timer = None
            self._call = None
        task, args, kwargs = call
        task(*args, **kwargs)


class DraftAutosaver:
    """
    Persist the settled editor state of one post.

    The first save creates the post as a draft; later saves update it in place
    and keep whatever status it already has, following renames.
    """

    def __init__(self, repository, slug=None, delay=AUTOSAVE_DELAY, debouncer=None):
        self.repository = repository
        self.slug = slug
        self.debouncer = debouncer or Debouncer(delay)
        self.last_error = None
        self.saves = 0

    def changed(self, title, html, slug=None):
        self.debouncer.schedule(self._save, title, html, slug)

    def save_now(self):
        self.debouncer.flush()

    def cancel(self):
        self.debouncer.cancel()

    def _save(self, title, html, slug=None):
        if not title or not html:
            logger.debug('Autosave skipped: title or content empty')
            return
        try:
            markdown = html_to_markdown(html)
            if self.slug is None:
                self.slug = self.repository.create(title, markdown, slug=slug, status=DRAFT)
            else:
                self.slug = self.repository.update(self.slug, title, markdown, slug=slug)
        except Exception as e:
            self.last_error = e
            logger.warning(f'Autosave failed for {self.slug or title!r}: {e}')
            return
        self.last_error = None
        self.saves += 1
