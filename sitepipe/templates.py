"""Jinja2 adapter used to wrap content in layouts."""

import logging
import os

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, TemplateSyntaxError
from jinja2 import TemplateError as JinjaTemplateError

from .errors import ConfigError, TemplateError

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """
    Render named templates from a template root.

    In debug mode nothing is cached and every render re-reads the template
    source, so edited layouts show up on the next rebuild. Production builds
    keep Jinja2's compiled template cache.
    """

    def __init__(self, templates_dir, default_template=None, debug=True):
        if not os.path.isdir(templates_dir):
            raise ConfigError(f"Templates directory not found: {templates_dir}")
        self.templates_dir = templates_dir
        self.default_template = default_template
        self.debug = debug

        env_options = {
            'loader': FileSystemLoader(templates_dir),
            'autoescape': True,
            'trim_blocks': False,
            'lstrip_blocks': False,
        }
        if debug:
            env_options.update(cache_size=0, auto_reload=True)
        self.env = Environment(**env_options)

    def resolve(self, metadata, path=None):
        """Template name for a file: its layout, else the default template."""
        layout = metadata.get('layout')
        if layout is not None and not isinstance(layout, str):
            raise TemplateError(f"layout must be a template name, got {type(layout).__name__}", path)
        return layout or self.default_template

    def render(self, template_name, context, path=None):
        """Render template_name with context, raising TemplateError on failure."""
        try:
            template = self.env.get_template(template_name)
            return template.render(**context)
        except TemplateNotFound as e:
            raise TemplateError(f"template not found: {e.name}", path) from e
        except TemplateSyntaxError as e:
            raise TemplateError(f"template syntax error in {e.name} line {e.lineno}: {e.message}", path) from e
        except JinjaTemplateError as e:
            raise TemplateError(f"template {template_name} failed: {e}", path) from e
        except Exception as e:
            # errors raised by expressions and filters inside the template
            raise TemplateError(f"template {template_name} failed: {type(e).__name__}: {e}", path) from e

    def list_templates(self):
        return self.env.list_templates()

    def parse(self, template_name):
        """Compile a template without rendering it."""
        source, filename, _ = self.env.loader.get_source(self.env, template_name)
        self.env.parse(source, template_name, filename)


def output_extension(metadata, template_name, current):
    """
    Extension of a rendered file.

    An explicit ``filetype`` in the metadata wins, then the template's own
    extension, then the current extension.
    """
    filetype = metadata.get('filetype')
    if filetype:
        filetype = str(filetype)
        return filetype if filetype.startswith('.') else f".{filetype}"
    if template_name:
        ext = os.path.splitext(template_name)[1]
        if ext:
            return ext
    return current
