# Utility functions shared across blueprints
import re
from datetime import date, datetime, timezone


def slugify(text):
    """
    Derive a URL and filename safe slug from a title.

    Lowercases, drops anything outside ``[a-z0-9\\s-]``, trims, turns runs of
    whitespace into a single hyphen and collapses repeated hyphens.

    >>> slugify('Hello, World!')
    'hello-world'
    """
    if text is None:
        return ''
    text = str(text).lower()
    text = re.sub(r'[^a-z0-9\s-]', '', text)
    text = text.strip()
    text = re.sub(r'\s+', '-', text)
    return re.sub(r'-+', '-', text)


def utc_now():
    return datetime.now(timezone.utc)


def isoformat_utc(value):
    """Format an aware or naive (assumed UTC) datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def iso_now():
    return isoformat_utc(utc_now())


def parse_datetime(value):
    """
    Parse a stored date value into an aware datetime.

    Accepts datetime/date objects (PyYAML turns unquoted timestamps into these)
    and ISO-8601 strings, including a trailing 'Z'. Returns None for anything
    that cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def normalize_date(value):
    """Return the ISO string for a parseable date value, otherwise None."""
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    if isinstance(value, str):
        # keep the stored spelling so string ordering stays stable
        return value.strip()
    return isoformat_utc(parsed)


def format_date(value):
    """Human readable date for listings, e.g. 'May 1, 2024'. Empty for bad input."""
    parsed = parse_datetime(value)
    if parsed is None:
        return ''
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def safe_upload_name(filename):
    """Replace characters outside ``[A-Za-z0-9_.-]`` with underscores."""
    return re.sub(r'[^a-zA-Z0-9_.-]', '_', filename or 'upload') or 'upload'


def is_truthy_flag(value):
    """Query string flags: present-but-empty, 1, true, yes and on count as set."""
    if value is None:
        return False
    return value.strip().lower() in ('', '1', 'true', 'yes', 'on')


def json_object_body():
    """
    The request's JSON body if it is an object, an empty dict for an empty body,
    and None for anything else (invalid JSON, arrays, scalars).
    """
    from flask import request

    if not request.get_data(cache=True):
        return {}
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else None


def json_formdata(body):
    """
    Wrap a decoded JSON object as form data for WTForms.

    Nulls count as missing, nested lists/objects are ignored and other
    scalars are passed on as strings.
    """
    from werkzeug.datastructures import MultiDict

    return MultiDict({
        key: value if isinstance(value, str) else str(value) for key, value in (body or {}).items()
        if value is not None and not isinstance(value, (list, dict))
    })
