"""
The sitepipe project object.

A :class:`Site` resolves the configured source and target paths, builds the
template renderer, collector and page pipeline once, and registers the
named tasks the CLI runs: lint, clean, build and its sub-tasks, watch,
serve and report.
"""

import logging
import os

from . import assets, lint
from .collector import ContentCollector
from .markup import HtmlMinifier, MarkdownRenderer
from .pipeline import PagePipeline
from .report import ReportRunner
from .tasks import TaskGraph
from .templates import TemplateRenderer
from .watch import WatchOrchestrator, serve

BUILD_TASKS = [
    'build-styles',
    'build-scripts',
    'build-images',
    'build-pages',
    'build-uploads',
    'build-fonts',
]


class Site:
    """A sitepipe project: resolved settings, pipeline collaborators and named tasks."""

    def __init__(self, settings, resolve=None):
        self.settings = settings
        self.resolve = resolve or os.path.abspath
        self.logger = logging.getLogger('sitepipe.site')
        self.debug = settings['debug']

        source = settings['source']
        self.assets_dir = self.resolve(source['assets'])
        self.vendor_dir = self.resolve(source['vendor']) if source.get('vendor') else None
        self.templates_dir = self.resolve(source['templates'])
        self.content_dir = self.resolve(source['content'])
        self.uploads_dir = self.resolve(source['uploads'])
        self.target_dir = self.resolve(settings['target'])
        self.minify = settings['minify']

        self.renderer = TemplateRenderer(
            self.templates_dir,
            default_template=settings.get('default_template'),
            debug=self.debug,
        )
        self.collector = ContentCollector(
            url_prefix=settings['url_prefix'],
            default_category=settings['default_category'],
        )
        self.pipeline = PagePipeline(
            self.content_dir,
            self.target_dir,
            self.renderer,
            markdown=MarkdownRenderer(settings.get('markdown')),
            minifier=HtmlMinifier(),
            collector=self.collector,
            posts_dir=settings['posts_dir'],
            site_options=settings.get('site'),
            debug=self.debug,
            minify_html=self.minify.get('html', True),
        )

        self.graph = TaskGraph()
        self.register_tasks()

    def register_tasks(self):
        task = self.graph.task
        task('lint', group=['lint-templates', 'lint-content', 'lint-scripts'], help="Runs all linting tasks.")
        task('lint-templates', self.lint_templates)
        task('lint-content', self.lint_content)
        task('lint-scripts', self.lint_scripts)

        task('clean', self.clean, help="Removes everything in the target path.")
        task('build', self.announce_build, deps=['clean'], group=BUILD_TASKS,
             help="Runs a full build of the project.")
        task('build-styles', self.build_styles)
        task('build-scripts', self.build_scripts, deps=['lint-scripts'])
        task('build-images', self.build_images)
        task('build-fonts', self.build_fonts)
        task('build-uploads', self.build_uploads)
        task('build-pages', self.build_pages, deps=['lint-templates'])

        task('watch', self.watch, deps=['build'], help="Runs a full build and keeps watching the sources.")
        self.graph.alias('develop', 'watch')
        task('serve', self.serve, help="Serves the target path over HTTP.")
        task('report', self.report, help="Generates page-quality reports for the configured URLs.")
        self.graph.validate()

    def run(self, name):
        return self.graph.run(name)

    # --- Lint ---

    def lint_templates(self):
        return lint.lint_templates(self.renderer)

    def lint_content(self):
        return lint.lint_content(self.content_dir)

    def lint_scripts(self):
        return lint.lint_scripts(self.assets_dir, self.vendor_dir)

    # --- Build ---

    def clean(self):
        removed = assets.clean(self.target_dir)
        self.logger.info(f"Removed {removed} items from {os.path.relpath(self.target_dir)}")

    def announce_build(self):
        if not self.debug:
            self.logger.info("This is a production run.")

    def build_styles(self):
        return assets.build_styles(self.assets_dir, self.target_dir,
                                   minify=not self.debug and self.minify.get('styles', True))

    def build_scripts(self):
        return assets.build_scripts(self.assets_dir, self.target_dir,
                                    bundles=self.settings.get('scripts'),
                                    debug=self.debug,
                                    minify=self.minify.get('scripts', True))

    def build_images(self):
        return assets.build_images(self.assets_dir, self.target_dir)

    def build_fonts(self):
        return assets.build_fonts(self.assets_dir, self.target_dir)

    def build_uploads(self):
        return assets.build_uploads(self.uploads_dir, self.target_dir)

    def build_pages(self):
        return self.pipeline.run()

    # --- Development ---

    def watch_rules(self):
        orchestrator = WatchOrchestrator(self.graph.run_sequence)
        orchestrator.add(self.assets_dir, ['*.css'], ['build-styles'])
        orchestrator.add(self.assets_dir, ['*.js'], ['build-scripts'])
        orchestrator.add(self.assets_dir, ['*.{png,jpg,gif,svg,webp}'], ['build-images'])
        orchestrator.add(self.assets_dir, ['*.{ttf,otf,eot,woff,woff2}'], ['build-fonts'])
        orchestrator.add(self.uploads_dir, ['*'], ['build-uploads'])
        orchestrator.add(self.content_dir, ['*'], ['build-pages'])
        orchestrator.add(self.templates_dir, ['*'], ['build-pages'])
        return orchestrator

    def watch(self):
        if not self.debug:
            self.logger.warning("Don't use 'watch' in production mode. Always do a clean build ahead of deployment.")

        orchestrator = self.watch_rules()
        orchestrator.start()
        server = self.settings['server']
        try:
            serve(self.target_dir, server['host'], server['port'])
        finally:
            orchestrator.stop()

    def serve(self):
        server = self.settings['server']
        serve(self.target_dir, server['host'], server['port'])

    # --- Reports ---

    def report(self):
        options = self.settings['report']
        runner = ReportRunner(
            options.get('urls'),
            self.resolve(options.get('dir') or 'reports'),
            output=options.get('output', 'html'),
            flags=options.get('flags'),
        )
        return runner.run()
