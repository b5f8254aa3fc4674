"""Lint tasks for templates, content front matter and scripts."""

import logging
import os
import shutil
import subprocess

from jinja2 import TemplateError as JinjaTemplateError

from . import frontmatter
from .assets import find_files
from .errors import FrontMatterError

logger = logging.getLogger(__name__)


def lint_templates(renderer):
    """Compile every template under the template root; return {name: error}."""
    problems = {}
    for name in renderer.list_templates():
        try:
            renderer.parse(name)
        except JinjaTemplateError as e:
            problems[name] = str(e)
            logger.error(f"Template {name}: {e}")
    logger.info(f"Linted {len(renderer.list_templates())} templates, {len(problems)} with errors")
    return problems


def lint_content(content_dir):
    """Check the front matter of every text file under content_dir."""
    problems = {}
    for path in find_files(content_dir):
        try:
            with open(path, 'r', encoding='utf-8') as f:
                text = f.read()
        except UnicodeDecodeError:
            continue
        try:
            frontmatter.extract(text, os.path.relpath(path, content_dir))
        except FrontMatterError as e:
            problems[path] = str(e)
            logger.error(str(e))
    return problems


def lint_scripts(assets_dir, vendor_dir=None, config_file='.jshintrc'):
    """
    Run jshint over the project's scripts, skipping vendored code.

    Returns {path: report}. jshint is optional; without it the task logs a
    warning and reports nothing.
    """
    jshint = shutil.which('jshint')
    if jshint is None:
        logger.warning("jshint not found on PATH, skipping script lint")
        return {}

    problems = {}
    for path in find_files(assets_dir, ('.js',), exclude=vendor_dir):
        args = [jshint]
        if os.path.exists(config_file):
            args += ['--config', config_file]
        completed = subprocess.run(args + [path], capture_output=True, text=True, check=False)
        if completed.returncode != 0:
            problems[path] = completed.stdout.strip() or completed.stderr.strip()
            logger.error(f"jshint {path}:\n{problems[path]}")
    return problems
