"""
Test configuration and fixtures for the Folio application.
"""
import os

import pytest

# Set environment variables for testing
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'

from folio import create_app  # noqa: E402
from folio.posts.repository import PostRepository  # noqa: E402
from folio.storage import FilesystemStore  # noqa: E402
from tests.fixtures.factories import ADMIN_PASSWORD, ADMIN_USERNAME  # noqa: E402


@pytest.fixture
def app(tmp_path):
    """Create an application whose content lives in a per-test directory."""
    app = create_app('testing', {
        'CONTENT_ROOT': str(tmp_path / 'content'),
        'ADMIN_USERNAME': ADMIN_USERNAME,
        'ADMIN_PASSWORD': ADMIN_PASSWORD,
    })
    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def anonymous_client(app):
    """A second client that never logs in."""
    return app.test_client()


@pytest.fixture
def admin_client(client):
    """Create an authenticated admin client session."""
    with client.session_transaction() as sess:
        sess['_user_id'] = ADMIN_USERNAME
        sess['_fresh'] = True
    return client


@pytest.fixture
def store(app):
    """The content store the app was built with."""
    return app.extensions['content_store']


@pytest.fixture
def repository(store):
    """A repository over the app's store, usable outside a request."""
    return PostRepository(store)


@pytest.fixture
def fs_store(tmp_path):
    """A standalone filesystem store for unit tests."""
    return FilesystemStore(str(tmp_path / 'store'))


@pytest.fixture
def fs_repository(fs_store):
    return PostRepository(fs_store)
