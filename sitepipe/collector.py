"""
Cross-file aggregation of post metadata.

Every post passes through :meth:`ContentCollector.collect` before any page
is rendered, so templates can read the complete ``site.posts``,
``site.tags`` and ``site.categories`` of the build.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, date, timezone

from .url_validator import url_join

logger = logging.getLogger(__name__)

DATE_FORMATS = ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%d %H:%M:%S', '%Y-%m-%d', '%b %d, %Y']


def parse_date(value):
    """Parse a front matter date into a naive datetime, or None."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        parsed = None
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(value.strip(), fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            logger.warning(f"Unrecognised date {value!r}")
            return None
    else:
        return None

    # Compare aware and naive dates on the same clock
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(item) for item in value]
    return [str(value)]


@dataclass
class PageMetadata:
    """The part of a file's front matter that feeds site-wide aggregates."""

    title: str = 'Untitled'
    layout: str = None
    tags: list = field(default_factory=list)
    category: str = None
    date: datetime = None
    url: str = ''
    metadata: dict = field(default_factory=dict)

    @property
    def sort_key(self):
        return self.date or datetime.min


@dataclass
class SiteContext:
    posts: list = field(default_factory=list)
    tags: list = field(default_factory=list)
    categories: list = field(default_factory=list)

    def as_template_data(self, site_options=None):
        """Merge the aggregates into the configured ``site`` options."""
        data = dict(site_options or {})
        data.update(posts=self.posts, tags=self.tags, categories=self.categories)
        return data


class ContentCollector:
    """Accumulate posts, tags and categories across one pipeline run."""

    def __init__(self, url_prefix='/posts', default_category='uncategorized'):
        self.url_prefix = url_prefix
        self.default_category = default_category
        self._lock = threading.Lock()
        self.site = SiteContext()

    def reset(self):
        with self._lock:
            self.site = SiteContext()

    def page_metadata(self, metadata, relative_path, url_prefix=None):
        """Build the PageMetadata for a file relative to its collection root."""
        if url_prefix is None:
            url_prefix = self.url_prefix
        title = metadata.get('title')
        return PageMetadata(
            title=title if isinstance(title, str) else 'Untitled',
            layout=metadata.get('layout'),
            tags=list(dict.fromkeys(_as_list(metadata.get('tags')))),
            category=str(metadata.get('category') or self.default_category),
            date=parse_date(metadata.get('date')),
            url=url_join(url_prefix, relative_path),
            metadata=metadata,
        )

    def collect(self, page):
        """Add one post to the site aggregates."""
        with self._lock:
            for tag in page.tags:
                if tag not in self.site.tags:
                    self.site.tags.append(tag)
            if page.category not in self.site.categories:
                self.site.categories.append(page.category)
            self.site.posts.append(page)
        logger.debug(f"Collected post {page.url}")

    def finalize(self):
        """Sort posts newest first and return the SiteContext."""
        with self._lock:
            # sorted() is stable with reverse=True, ties keep collection order
            self.site.posts = sorted(self.site.posts, key=lambda p: p.sort_key, reverse=True)
            return self.site
