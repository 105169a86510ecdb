"""
Factory classes for creating test payloads using Factory Boy.
"""
import factory
import yaml

ADMIN_USERNAME = 'admin'
ADMIN_PASSWORD = 'correct horse battery staple'


class PostPayloadFactory(factory.DictFactory):
    """JSON body the editor sends to create or update a post."""

    title = factory.Sequence(lambda n: f'Test Post {n}')
    html = factory.LazyAttribute(lambda obj: f'<p>Body of {obj.title}</p>')
    status = 'draft'


class PublishedPostPayloadFactory(PostPayloadFactory):
    status = 'published'


def post_blob(body='Body text', **metadata):
    """
    Raw stored document with arbitrary front matter, for seeding a store
    with legacy or hand-written posts.
    """
    preamble = yaml.safe_dump(metadata, sort_keys=False) if metadata else ''
    return f'---\n{preamble}---\n\n{body}\n'


def seed_post(store, slug, body='Body text', **metadata):
    store.write(f'posts/{slug}.md', post_blob(body, **metadata))
