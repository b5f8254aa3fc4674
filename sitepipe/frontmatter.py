"""Split content files into a YAML front matter mapping and a body."""

import re

import yaml

from .errors import FrontMatterError

FRONT_MATTER_RE = re.compile(
    r'\A\ufeff?---[ \t]*\r?\n(?P<block>.*?)^(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)',
    re.DOTALL | re.MULTILINE,
)


def has_front_matter(text):
    """Return True when the first line of text opens a front matter block."""
    first_line = text.lstrip('\ufeff').split('\n', 1)[0]
    return first_line.rstrip() == '---'


def extract(text, path=None):
    """
    Return (metadata, body) for a content file.

    Files without a leading ``---`` line have no metadata and the whole
    text as body. The body of a file with front matter is everything after
    the closing marker line, unchanged.
    """
    if not has_front_matter(text):
        return {}, text

    match = FRONT_MATTER_RE.match(text)
    if match is None:
        raise FrontMatterError("front matter block is never closed", path)

    try:
        metadata = yaml.safe_load(match.group('block'))
    except yaml.YAMLError as e:
        raise FrontMatterError(f"invalid YAML front matter: {e}", path) from e

    if metadata is None:
        metadata = {}
    elif not isinstance(metadata, dict):
        raise FrontMatterError(
            f"front matter must be a mapping, got {type(metadata).__name__}", path)

    return metadata, text[match.end():]
