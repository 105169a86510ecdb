# Standard library imports
import re

# Third-party imports
import yaml

FRONTMATTER_RE = re.compile(r'\A---[ \t]*\r?\n(?:(.*?)\r?\n)??---[ \t]*(?:\r?\n|\Z)', re.DOTALL)
FIELD_ORDER = ('title', 'slug', 'date', 'status')


class FrontmatterError(ValueError):
    """The YAML preamble of a stored post could not be parsed."""


def parse_frontmatter(content):
    """
    Parses metadata and content from a Markdown document with YAML front matter.

    Args:
        content (str): The stored document.

    Returns:
        tuple: A dictionary containing the metadata and a string containing the Markdown body.

    Raises:
        FrontmatterError: The preamble is not valid YAML or not a mapping.
    """
    match = FRONTMATTER_RE.match(content or '')
    if not match:
        return {}, (content or '').strip()

    try:
        metadata = yaml.safe_load(match.group(1) or '')
    except yaml.YAMLError as e:
        raise FrontmatterError(f'Invalid front matter: {e}') from e

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise FrontmatterError('Front matter must be a mapping')

    return metadata, content[match.end():].strip()


def dump_frontmatter(metadata, body):
    """
    Serialise metadata and a Markdown body into a single document.

    Known fields come first in a fixed order; None values are left out.
    """
    ordered = {k: metadata[k] for k in FIELD_ORDER if metadata.get(k) is not None}
    for key, value in metadata.items():
        if key not in ordered and value is not None:
            ordered[key] = value

    preamble = yaml.safe_dump(ordered, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return f'---\n{preamble}---\n\n{(body or "").strip()}\n'
