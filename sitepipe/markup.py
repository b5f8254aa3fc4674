"""Markdown rendering and output minification."""

import logging
import re

import csscompressor
import htmlmin
import mistune
import rjsmin

from .errors import MarkupError

logger = logging.getLogger(__name__)

MARKDOWN_RE = re.compile(r'\.(md|markdown)$', re.IGNORECASE)


def is_markdown(path):
    return MARKDOWN_RE.search(path) is not None


class MarkdownRenderer:
    """Convert markdown bodies to HTML with Mistune."""

    def __init__(self, options=None):
        options = options or {}
        self.markdown_parser = mistune.create_markdown(
            escape=options.get('escape', False),
            hard_wrap=options.get('hard_wrap', False),
            renderer='html',
            plugins=list(options.get('plugins') or []),
        )

    def render(self, text, path=None):
        try:
            return self.markdown_parser(text)
        except Exception as e:
            raise MarkupError(f"markdown rendering failed: {e}", path) from e


class HtmlMinifier:
    """
    Minify rendered HTML.

    Whitespace is collapsed and comments dropped. Self-closing slashes and
    attribute quotes are kept as written.
    """

    def __init__(self, remove_comments=True, remove_empty_space=True, keep_pre=True):
        self.options = {
            'remove_comments': remove_comments,
            'remove_empty_space': remove_empty_space,
            'remove_optional_attribute_quotes': False,
            'keep_pre': keep_pre,
        }

    def minify(self, html, path=None):
        try:
            return htmlmin.minify(html, **self.options)
        except Exception as e:
            raise MarkupError(f"HTML minification failed: {e}", path) from e


def minify_css(css):
    return csscompressor.compress(css)


def minify_js(js):
    return rjsmin.jsmin(js)
