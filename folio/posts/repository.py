"""
Post persistence on top of a content store.

Each post is one blob ``posts/<slug>.md`` holding a YAML front matter block
(title, slug, date, status) followed by the Markdown body. The front matter is
the only source of truth for metadata and nothing is cached: every call reads
the store again. Concurrent writers are not coordinated, the last write wins.
"""
import logging

from folio.models import DRAFT, PUBLISHED, STATUSES, Post, PostMeta
from folio.posts.converter import markdown_to_html
from folio.posts.frontmatter import FrontmatterError, dump_frontmatter, parse_frontmatter
from folio.storage import BlobNotFoundError, StorageError
from folio.utils import iso_now, normalize_date, slugify

logger = logging.getLogger(__name__)

POST_SUFFIX = '.md'


def _check_status(status):
    if status not in STATUSES:
        raise ValueError(f'Invalid status {status!r}')


def _final_slug(slug, fallback):
    final = slugify(slug) if slug else fallback
    if not final:
        raise ValueError('Could not derive a slug from the title')
    return final


def meta_from_frontmatter(metadata, slug):
    """
    Build PostMeta from raw front matter.

    Posts written before the status field existed have no status and stay
    public; any unknown status is treated as a draft.
    """
    status = metadata.get('status')
    if status is None:
        status = PUBLISHED
    elif status not in STATUSES:
        status = DRAFT

    title = metadata.get('title')
    return PostMeta(
        title=str(title) if title not in (None, '') else slug,
        slug=slug,
        date=normalize_date(metadata.get('date')),
        status=status,
    )


class PostRepository:

    def __init__(self, store, prefix='posts/'):
        self.store = store
        self.prefix = prefix

    def key_for(self, slug):
        return f'{self.prefix}{slug}{POST_SUFFIX}'

    def slug_for(self, key):
        return key[len(self.prefix):-len(POST_SUFFIX)]

    def _read(self, slug):
        """
        Return (front matter, body), or None when the post does not exist.

        Raises:
            StorageError: The backend failed.
            FrontmatterError: The stored preamble is malformed.
        """
        try:
            raw = self.store.read(self.key_for(slug))
        except BlobNotFoundError:
            return None
        return parse_frontmatter(raw)

    def _load(self, slug):
        """Like _read, but unreadable or malformed posts also count as missing."""
        try:
            return self._read(slug)
        except StorageError as e:
            logger.warning(f'Could not read post {slug}: {e}')
        except FrontmatterError as e:
            logger.warning(f'Skipping malformed post {slug}: {e}')
        return None

    def _store(self, slug, metadata, markdown):
        self.store.write(self.key_for(slug), dump_frontmatter(metadata, markdown))

    def list_meta(self, include_drafts=False):
        metas = []
        for key in self.store.list(self.prefix, suffix=POST_SUFFIX):
            slug = self.slug_for(key)
            loaded = self._load(slug)
            if loaded is None:
                continue
            meta = meta_from_frontmatter(loaded[0], slug)
            if include_drafts or meta.is_published:
                metas.append(meta)

        # posts without a date compare as '' and sink to the end
        metas.sort(key=lambda m: m.date or '', reverse=True)
        return metas

    def get_by_slug(self, slug):
        loaded = self._load(slug)
        if loaded is None:
            return None
        metadata, body = loaded
        return Post(
            meta=meta_from_frontmatter(metadata, slug),
            html=markdown_to_html(body),
            markdown=body,
        )

    def get_raw(self, slug):
        """Metadata and unrendered Markdown, for loading a post into the editor."""
        loaded = self._load(slug)
        if loaded is None:
            return None
        metadata, body = loaded
        return meta_from_frontmatter(metadata, slug), body

    def create(self, title, markdown, slug=None, status=DRAFT):
        _check_status(status)
        final = _final_slug(slug, slugify(title))
        metadata = {
            'title': title,
            'slug': final,
            'date': iso_now(),
            'status': status,
        }
        self._store(final, metadata, markdown)
        logger.info(f'Created post {final} ({status})')
        return final

    def update(self, prev_slug, title, markdown, slug=None, status=None):
        """
        Merge new content into the stored post and return its final slug.

        Only a post that does not exist is created afresh. Backend failures
        and malformed stored front matter raise, so existing metadata is
        never replaced by defaults.
        """
        if status is not None:
            _check_status(status)
        final = _final_slug(slug, prev_slug)

        loaded = self._read(prev_slug)
        if loaded is None:
            # nothing to merge with: behaves like a create
            metadata = {'date': iso_now(), 'status': status or DRAFT}
        else:
            metadata = dict(loaded[0])
            metadata['date'] = normalize_date(metadata.get('date'))

        metadata['title'] = title
        metadata['slug'] = final
        if status is not None:
            metadata['status'] = status
        if metadata.get('status') == PUBLISHED and not metadata.get('date'):
            metadata['date'] = iso_now()

        self._store(final, metadata, markdown)

        if final != prev_slug:
            self._delete_quietly(prev_slug)
            logger.info(f'Renamed post {prev_slug} -> {final}')
        return final

    def set_status(self, slug, status):
        """Returns False when the post does not exist; read failures raise."""
        _check_status(status)
        loaded = self._read(slug)
        if loaded is None:
            return False

        metadata, body = loaded
        metadata = dict(metadata)
        metadata['status'] = status
        metadata['date'] = normalize_date(metadata.get('date'))
        if status == PUBLISHED and not metadata['date']:
            metadata['date'] = iso_now()

        self._store(slug, metadata, body)
        logger.info(f'Post {slug} is now {status}')
        return True

    def delete(self, slug):
        return self._delete_quietly(slug)

    def _delete_quietly(self, slug):
        try:
            self.store.delete(self.key_for(slug))
        except BlobNotFoundError:
            return False
        except StorageError as e:
            logger.warning(f'Could not delete post {slug}: {e}')
            return False
        return True
