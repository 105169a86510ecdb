"""
Unit tests for the post repository over a filesystem store.
"""
import os
from datetime import datetime

import pytest

from folio.models import DRAFT, PUBLISHED
from folio.posts.frontmatter import parse_frontmatter
from folio.storage import StorageError
from tests.fixtures.factories import seed_post

FIXED_NOW = '2024-06-01T09:30:00.000Z'


@pytest.fixture
def frozen_now(monkeypatch):
    monkeypatch.setattr('folio.posts.repository.iso_now', lambda: FIXED_NOW)
    return FIXED_NOW


def _stored(store, slug):
    return parse_frontmatter(store.read(f'posts/{slug}.md'))


@pytest.mark.unit
class TestCreate:

    def test_create_derives_slug_and_stamps_date(self, fs_repository, fs_store, frozen_now):
        slug = fs_repository.create('Hello, World!', 'Hi there')

        assert slug == 'hello-world'
        metadata, body = _stored(fs_store, slug)
        assert metadata == {
            'title': 'Hello, World!',
            'slug': 'hello-world',
            'date': frozen_now,
            'status': DRAFT,
        }
        assert body == 'Hi there'

    def test_explicit_slug_is_slugified(self, fs_repository):
        assert fs_repository.create('Title', 'Body', slug='My Custom Slug') == 'my-custom-slug'

    def test_create_published(self, fs_repository):
        slug = fs_repository.create('Live', 'Body', status=PUBLISHED)
        assert fs_repository.get_by_slug(slug).meta.status == PUBLISHED

    def test_title_without_slug_characters_is_rejected(self, fs_repository, fs_store):
        with pytest.raises(ValueError):
            fs_repository.create('!!!', 'Body')
        assert fs_store.list('posts/') == []

    def test_invalid_status_is_rejected(self, fs_repository):
        with pytest.raises(ValueError):
            fs_repository.create('Title', 'Body', status='archived')


@pytest.mark.unit
class TestRead:

    def test_get_by_slug_renders_html(self, fs_repository):
        slug = fs_repository.create('Rendered', '# Heading\n\nSome *text*')
        post = fs_repository.get_by_slug(slug)

        assert post.meta.title == 'Rendered'
        assert '<h1>Heading</h1>' in post.html
        assert post.markdown == '# Heading\n\nSome *text*'

    def test_missing_post(self, fs_repository):
        assert fs_repository.get_by_slug('nope') is None
        assert fs_repository.get_raw('nope') is None

    def test_get_raw_returns_markdown(self, fs_repository):
        slug = fs_repository.create('Raw', 'Plain **markdown**')
        meta, markdown = fs_repository.get_raw(slug)
        assert meta.slug == slug
        assert markdown == 'Plain **markdown**'

    def test_legacy_post_without_status_is_published(self, fs_repository, fs_store):
        seed_post(fs_store, 'old-post', title='Old Post', date='2020-01-01T00:00:00.000Z')
        post = fs_repository.get_by_slug('old-post')
        assert post.meta.status == PUBLISHED
        assert post.meta.is_published

    def test_unknown_status_is_treated_as_draft(self, fs_repository, fs_store):
        seed_post(fs_store, 'odd', title='Odd', status='archived')
        assert fs_repository.get_by_slug('odd').meta.status == DRAFT

    def test_missing_title_falls_back_to_slug(self, fs_repository, fs_store):
        seed_post(fs_store, 'untitled', status='published')
        assert fs_repository.get_by_slug('untitled').meta.title == 'untitled'

    def test_yaml_timestamp_is_normalised(self, fs_repository, fs_store):
        seed_post(fs_store, 'stamped', title='Stamped', status='published', date=datetime(2023, 3, 4, 5, 6, 7))
        assert fs_repository.get_by_slug('stamped').meta.date == '2023-03-04T05:06:07.000Z'

    def test_unparseable_date_becomes_none(self, fs_repository, fs_store):
        seed_post(fs_store, 'fuzzy', title='Fuzzy', status='published', date='sometime last spring')
        assert fs_repository.get_by_slug('fuzzy').meta.date is None

    def test_malformed_front_matter_is_missing(self, fs_repository, fs_store):
        fs_store.write('posts/broken.md', '---\ntitle: [unclosed\n---\n\nBody\n')
        assert fs_repository.get_by_slug('broken') is None


@pytest.mark.unit
class TestListing:

    def _seed(self, store):
        seed_post(store, 'older', title='Older', status='published', date='2024-01-01T00:00:00.000Z')
        seed_post(store, 'newer', title='Newer', status='published', date='2024-05-01T00:00:00.000Z')
        seed_post(store, 'draft', title='Draft', status='draft', date='2024-06-01T00:00:00.000Z')
        seed_post(store, 'undated', title='Undated', status='published')

    def test_published_only_newest_first(self, fs_repository, fs_store):
        self._seed(fs_store)
        slugs = [m.slug for m in fs_repository.list_meta()]
        assert slugs == ['newer', 'older', 'undated']

    def test_include_drafts(self, fs_repository, fs_store):
        self._seed(fs_store)
        slugs = [m.slug for m in fs_repository.list_meta(include_drafts=True)]
        assert slugs == ['draft', 'newer', 'older', 'undated']

    def test_skips_malformed_and_foreign_files(self, fs_repository, fs_store):
        self._seed(fs_store)
        fs_store.write('posts/broken.md', '---\n- not\n- a mapping\n---\n\nBody\n')
        fs_store.write('posts/notes.txt', 'not a post')
        fs_store.write('uploads/readme.md', 'not a post either')

        slugs = {m.slug for m in fs_repository.list_meta(include_drafts=True)}
        assert slugs == {'draft', 'newer', 'older', 'undated'}

    def test_empty_store(self, fs_repository):
        assert fs_repository.list_meta(include_drafts=True) == []


@pytest.mark.unit
class TestUpdate:

    def test_update_keeps_date_and_status(self, fs_repository, fs_store, monkeypatch):
        monkeypatch.setattr('folio.posts.repository.iso_now', lambda: '2024-01-01T00:00:00.000Z')
        slug = fs_repository.create('Title', 'One', status=PUBLISHED)

        monkeypatch.setattr('folio.posts.repository.iso_now', lambda: '2025-01-01T00:00:00.000Z')
        assert fs_repository.update(slug, 'New Title', 'Two') == slug

        metadata, body = _stored(fs_store, slug)
        assert metadata['title'] == 'New Title'
        assert metadata['date'] == '2024-01-01T00:00:00.000Z'
        assert metadata['status'] == PUBLISHED
        assert body == 'Two'

    def test_title_change_does_not_rename(self, fs_repository):
        slug = fs_repository.create('First Title', 'Body')
        assert fs_repository.update(slug, 'Completely Different', 'Body') == 'first-title'

    def test_rename_moves_the_blob(self, fs_repository, fs_store):
        slug = fs_repository.create('Original', 'Body')
        new_slug = fs_repository.update(slug, 'Original', 'Body', slug='Renamed Post')

        assert new_slug == 'renamed-post'
        assert not fs_store.exists('posts/original.md')
        assert fs_store.exists('posts/renamed-post.md')
        assert _stored(fs_store, new_slug)[0]['slug'] == 'renamed-post'

    def test_publishing_undated_post_stamps_date(self, fs_repository, fs_store, frozen_now):
        seed_post(fs_store, 'nodate', title='No Date', status='draft')
        fs_repository.update('nodate', 'No Date', 'Body', status=PUBLISHED)
        assert _stored(fs_store, 'nodate')[0]['date'] == frozen_now

    def test_update_of_missing_post_creates_draft(self, fs_repository, frozen_now):
        slug = fs_repository.update('ghost', 'Ghost', 'Boo')
        post = fs_repository.get_by_slug(slug)
        assert slug == 'ghost'
        assert post.meta.status == DRAFT
        assert post.meta.date == frozen_now

    def test_extra_front_matter_is_preserved(self, fs_repository, fs_store):
        seed_post(fs_store, 'extra', title='Extra', status='draft', tags=['a', 'b'])
        fs_repository.update('extra', 'Extra', 'Body')
        assert _stored(fs_store, 'extra')[0]['tags'] == ['a', 'b']

    def test_invalid_status(self, fs_repository):
        slug = fs_repository.create('Title', 'Body')
        with pytest.raises(ValueError):
            fs_repository.update(slug, 'Title', 'Body', status='hidden')


@pytest.mark.unit
class TestStatusAndDelete:

    def test_set_status_stamps_missing_date(self, fs_repository, fs_store, frozen_now):
        seed_post(fs_store, 'pending', title='Pending', status='draft')
        assert fs_repository.set_status('pending', PUBLISHED) is True

        metadata, body = _stored(fs_store, 'pending')
        assert metadata['status'] == PUBLISHED
        assert metadata['date'] == frozen_now
        assert body == 'Body text'

    def test_set_status_keeps_existing_date(self, fs_repository, fs_store, frozen_now):
        seed_post(fs_store, 'dated', title='Dated', status='published', date='2022-02-02T00:00:00.000Z')
        fs_repository.set_status('dated', DRAFT)
        assert _stored(fs_store, 'dated')[0]['date'] == '2022-02-02T00:00:00.000Z'

    def test_set_status_missing_post(self, fs_repository):
        assert fs_repository.set_status('missing', PUBLISHED) is False

    def test_delete(self, fs_repository, fs_store):
        slug = fs_repository.create('Doomed', 'Body')
        assert fs_repository.delete(slug) is True
        assert not fs_store.exists(f'posts/{slug}.md')
        assert fs_repository.delete(slug) is False

    def test_delete_failure_reports_false(self, fs_repository, fs_store, monkeypatch):
        slug = fs_repository.create('Stuck', 'Body')

        def broken_delete(key):
            raise StorageError('backend unavailable')

        monkeypatch.setattr(fs_store, 'delete', broken_delete)
        assert fs_repository.delete(slug) is False

    def test_rename_survives_failed_cleanup(self, fs_repository, fs_store, monkeypatch):
        slug = fs_repository.create('Sticky', 'Body')

        def broken_delete(key):
            raise StorageError('backend unavailable')

        monkeypatch.setattr(fs_store, 'delete', broken_delete)
        assert fs_repository.update(slug, 'Sticky', 'Body', slug='moved') == 'moved'
        assert fs_store.exists('posts/moved.md')
        assert fs_store.exists('posts/sticky.md')


def _write_non_utf8(store, slug):
    path = os.path.join(store.root, 'posts', f'{slug}.md')
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'wb') as f:
        f.write(b'---\ntitle: \xff\xfe bad\nstatus: published\n---\n\nBody\n')


@pytest.mark.unit
class TestUnreadablePosts:

    def test_update_does_not_overwrite_on_read_failure(self, fs_repository, fs_store, monkeypatch):
        seed_post(fs_store, 'live', 'Original', title='Live', status='published',
                  date='2024-01-01T00:00:00.000Z')
        before = fs_store.read('posts/live.md')

        def broken_read(key):
            raise StorageError('transient')

        monkeypatch.setattr(fs_store, 'read', broken_read)
        with pytest.raises(StorageError):
            fs_repository.update('live', 'Live', 'edited')
        monkeypatch.undo()

        assert fs_store.read('posts/live.md') == before
        meta = fs_repository.get_by_slug('live').meta
        assert meta.status == PUBLISHED
        assert meta.date == '2024-01-01T00:00:00.000Z'

    def test_update_of_malformed_post_raises(self, fs_repository, fs_store):
        fs_store.write('posts/broken.md', '---\ntitle: [unclosed\n---\n\nBody\n')
        with pytest.raises(ValueError):
            fs_repository.update('broken', 'Broken', 'Body')
        assert fs_store.read('posts/broken.md').startswith('---\ntitle: [unclosed')

    def test_set_status_propagates_read_failure(self, fs_repository, fs_store, monkeypatch):
        seed_post(fs_store, 'live', title='Live', status='published')

        def broken_read(key):
            raise StorageError('transient')

        monkeypatch.setattr(fs_store, 'read', broken_read)
        with pytest.raises(StorageError):
            fs_repository.set_status('live', DRAFT)

    def test_non_utf8_post_is_missing(self, fs_repository, fs_store):
        _write_non_utf8(fs_store, 'bad')
        assert fs_repository.get_by_slug('bad') is None
        assert fs_repository.get_raw('bad') is None

    def test_non_utf8_post_is_skipped_in_listing(self, fs_repository, fs_store):
        seed_post(fs_store, 'good', title='Good', status='published')
        _write_non_utf8(fs_store, 'bad')

        assert [m.slug for m in fs_repository.list_meta(include_drafts=True)] == ['good']
