"""
sitepipe - static site build tasks.

sitepipe renders a directory of Markdown and HTML content with YAML front
matter through Jinja2 layouts, collects posts, tags and categories for use
in every template, and wraps that page pipeline in a handful of named
tasks: lint, build, clean, watch, serve and report.
"""

__version__ = "1.0.0"

from .collector import ContentCollector, PageMetadata, SiteContext
from .core import Site
from .pipeline import BuildResult, ContentFile, PagePipeline

__all__ = [
    'BuildResult',
    'ContentCollector',
    'ContentFile',
    'PageMetadata',
    'PagePipeline',
    'Site',
    'SiteContext',
]
