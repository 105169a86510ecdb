# Standard library imports
from dataclasses import asdict, dataclass
from typing import Optional

# Third-party imports
from flask import current_app
from flask_login import UserMixin

# Local application imports
from folio import login

DRAFT = 'draft'
PUBLISHED = 'published'
STATUSES = (DRAFT, PUBLISHED)


class Admin(UserMixin):
    """The single site administrator. Identity is the configured username."""

    def __init__(self, username):
        self.username = username

    def get_id(self):
        return self.username

    def __repr__(self):
        return '<Admin {}>'.format(self.username)


@login.user_loader
def load_user(id):
    expected = current_app.config.get('ADMIN_USERNAME')
    if expected and id == expected:
        return Admin(id)
    return None


@dataclass
class PostMeta:
    title: str
    slug: str
    date: Optional[str] = None
    status: str = DRAFT

    @property
    def is_published(self):
        return self.status == PUBLISHED

    def to_dict(self):
        return asdict(self)


@dataclass
class Post:
    meta: PostMeta
    html: str
    markdown: str

    def to_dict(self):
        return {'meta': self.meta.to_dict(), 'html': self.html}
