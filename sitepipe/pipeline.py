"""
The page pipeline: content files in, rendered pages out.

A run has two phases. The prepare phase reads each file, extracts its
front matter, renders markdown and derives its page metadata; posts are
then collected into the SiteContext in path order. Only when every file of
the batch has been collected does the render phase start, wrapping each
file in its layout, minifying it and writing it under the target root.

Each phase is an ordered list of ``(predicate, transform)`` stages applied
to a :class:`ContentFile`. An error in one file is logged and recorded in
the :class:`BuildResult`; the rest of the batch carries on.
"""

import logging
import os
import shutil
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

from . import frontmatter
from .collector import ContentCollector, PageMetadata, SiteContext
from .errors import FileError
from .markup import HtmlMinifier, MarkdownRenderer, is_markdown
from .templates import output_extension

logger = logging.getLogger(__name__)


@dataclass
class ContentFile:
    path: str
    relative: str
    raw: bytes = b''
    metadata: dict = field(default_factory=dict)
    body: str = ''
    target: str = ''
    page: PageMetadata = None
    is_post: bool = False
    binary: bool = False

    @property
    def extension(self):
        return os.path.splitext(self.target)[1].lower()

    def replace_extension(self, ext):
        self.target = os.path.splitext(self.target)[0] + ext


@dataclass
class BuildResult:
    written: list = field(default_factory=list)
    copied: list = field(default_factory=list)
    failed: dict = field(default_factory=dict)
    site: SiteContext = None

    @property
    def ok(self):
        return not self.failed


def _always(content_file):
    return True


class PagePipeline:
    def __init__(self, content_dir, target_dir, renderer, markdown=None, minifier=None,
                 collector=None, posts_dir='posts', site_options=None, debug=True,
                 minify_html=True, max_workers=None):
        self.content_dir = content_dir
        self.target_dir = target_dir
        self.renderer = renderer
        self.markdown = markdown or MarkdownRenderer()
        self.minifier = minifier or HtmlMinifier()
        self.collector = collector or ContentCollector()
        self.posts_dir = (posts_dir or '').strip('/')
        self.site_options = site_options or {}
        self.debug = debug
        self.minify_html = minify_html
        self.max_workers = max_workers

        self.prepare_stages = [
            (_always, self.extract_front_matter),
            (lambda cf: is_markdown(cf.path), self.render_markdown),
            (_always, self.describe),
        ]
        self.render_stages = [
            (self.has_template, self.apply_template),
            (self.should_minify, self.minify),
        ]

    # --- Discovery ---

    def discover(self):
        """All files under the content root, in sorted order."""
        files = []
        for root, dirs, names in os.walk(self.content_dir):
            dirs.sort()
            for name in sorted(names):
                files.append(os.path.join(root, name))
        return files

    def is_post(self, relative):
        if not self.posts_dir:
            return True
        return relative.startswith(self.posts_dir + '/')

    # --- Prepare stages ---

    def extract_front_matter(self, cf):
        cf.metadata, cf.body = frontmatter.extract(cf.raw.decode('utf-8'), cf.relative)

    def render_markdown(self, cf):
        cf.body = self.markdown.render(cf.body, cf.relative)
        cf.replace_extension('.html')

    def describe(self, cf):
        cf.is_post = self.is_post(cf.relative)
        if cf.is_post and self.posts_dir:
            relative = cf.relative[len(self.posts_dir) + 1:]
        else:
            relative = cf.relative
        prefix = None if cf.is_post else ''
        cf.page = self.collector.page_metadata(cf.metadata, relative, url_prefix=prefix)

    # --- Render stages ---

    def has_template(self, cf):
        return self.renderer.resolve(cf.metadata, cf.relative) is not None

    def apply_template(self, cf, site_data):
        template_name = self.renderer.resolve(cf.metadata, cf.relative)
        context = {
            'content': cf.body,
            'page': self.page_data(cf),
            'site': site_data,
            'env': {'debug': self.debug, 'production': not self.debug},
        }
        cf.body = self.renderer.render(template_name, context, cf.relative)
        cf.replace_extension(output_extension(cf.metadata, template_name, cf.extension))

    def should_minify(self, cf):
        return not self.debug and self.minify_html and cf.extension == '.html'

    def minify(self, cf, site_data):
        cf.body = self.minifier.minify(cf.body, cf.relative)

    @staticmethod
    def page_data(cf):
        data = dict(cf.metadata)
        data.update(url=cf.page.url, category=cf.page.category, tags=cf.page.tags)
        return data

    # --- Orchestration ---

    def load(self, path):
        relative = os.path.relpath(path, self.content_dir).replace(os.sep, '/')
        with open(path, 'rb') as f:
            raw = f.read()
        cf = ContentFile(path=path, relative=relative, raw=raw, target=relative)
        try:
            raw.decode('utf-8')
        except UnicodeDecodeError:
            cf.binary = True
        return cf

    def prepare(self, path):
        cf = self.load(path)
        if cf.binary:
            return cf
        for predicate, transform in self.prepare_stages:
            if predicate(cf):
                transform(cf)
        return cf

    def render(self, cf, site_data):
        if not cf.binary:
            for predicate, transform in self.render_stages:
                if predicate(cf):
                    transform(cf, site_data)
        return self.write(cf)

    def write(self, cf):
        output_path = os.path.join(self.target_dir, *cf.target.split('/'))
        os.makedirs(os.path.dirname(output_path), exist_ok=True)
        if cf.binary:
            shutil.copy2(cf.path, output_path)
        else:
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(cf.body)
        logger.debug(f"Wrote {output_path}")
        return output_path

    def run(self, paths=None):
        """Build every content file (or the given paths) and return a BuildResult."""
        paths = self.discover() if paths is None else sorted(paths)
        result = BuildResult()
        self.collector.reset()

        if not paths:
            logger.warning("No content files found to process.")
            result.site = self.collector.finalize()
            return result

        logger.info(f"Building {len(paths)} content files")

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            # Phase 1: read, extract and convert every file
            futures = [(path, executor.submit(self.prepare, path)) for path in paths]
            prepared = []
            for path, future in futures:
                try:
                    prepared.append(future.result())
                except (FileError, OSError, UnicodeError) as e:
                    self._fail(result, path, e)
                except Exception as e:
                    self._fail(result, path, e, unexpected=True)

            # Phase 2: collect in path order, then freeze the aggregates
            for cf in prepared:
                if cf.is_post:
                    self.collector.collect(cf.page)
            result.site = self.collector.finalize()
            site_data = result.site.as_template_data(self.site_options)

            # Phase 3: render and write
            render_futures = {executor.submit(self.render, cf, site_data): cf for cf in prepared}
            for future in as_completed(render_futures):
                cf = render_futures[future]
                try:
                    output_path = future.result()
                except (FileError, OSError) as e:
                    self._fail(result, cf.path, e)
                    continue
                except Exception as e:
                    self._fail(result, cf.path, e, unexpected=True)
                    continue
                if cf.binary:
                    result.copied.append(output_path)
                else:
                    result.written.append(output_path)

        result.written.sort()
        result.copied.sort()
        logger.info(f"Pages written: {len(result.written)}, copied: {len(result.copied)}, failed: {len(result.failed)}")
        return result

    def _fail(self, result, path, error, unexpected=False):
        if unexpected:
            error = f"{type(error).__name__}: {error}"
            logger.error(f"Unexpected error building {path}: {error}")
        else:
            logger.error(f"Failed to build {path}: {error}")
        result.failed[path] = str(error)
