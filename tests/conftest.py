"""Test configuration and fixtures for sitepipe tests."""

import pytest
import tempfile
import shutil
from pathlib import Path

from sitepipe.settings import SiteSettings
from sitepipe.templates import TemplateRenderer
from sitepipe.collector import ContentCollector
from sitepipe.pipeline import PagePipeline


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def templates_dir(temp_dir):
    """Create a templates directory with a base layout, a partial and page layouts."""
    templates_dir = Path(temp_dir) / 'templates'
    (templates_dir / 'partials').mkdir(parents=True)

    (templates_dir / 'base.html').write_text("""<!DOCTYPE html>
<html>
<head>
    <title>{{ page.title }} | {{ site.title }}</title>
</head>
<body>
    <!-- layout: base -->
    {% block content %}{% endblock %}
    {% include "partials/footer.html" %}
</body>
</html>""")

    (templates_dir / 'partials' / 'footer.html').write_text(
        "<footer>{{ site.title }}</footer>")

    (templates_dir / 'page.html').write_text("""{% extends "base.html" %}
{% block content %}
<main class="page">
    {{ content|safe }}
</main>
{% endblock %}""")

    (templates_dir / 'post.html').write_text("""{% extends "base.html" %}
{% block content %}
<article data-category="{{ page.category }}">
    <h1>{{ page.title }}</h1>
    {{ content|safe }}
</article>
{% endblock %}""")

    (templates_dir / 'index.html').write_text("""{% extends "base.html" %}
{% block content %}
<ul id="posts">{% for post in site.posts %}<li><a href="{{ post.url }}">{{ post.title }}</a></li>{% endfor %}</ul>
<ul id="tags">{% for tag in site.tags %}<li>{{ tag }}</li>{% endfor %}</ul>
<ul id="categories">{% for category in site.categories %}<li>{{ category }}</li>{% endfor %}</ul>
{% endblock %}""")

    (templates_dir / 'feed.xml').write_text(
        "<feed>{% for post in site.posts %}<entry>{{ post.title }}</entry>{% endfor %}</feed>")

    return str(templates_dir)


@pytest.fixture
def content_dir(temp_dir):
    """Create a content directory with pages and posts."""
    content_dir = Path(temp_dir) / 'content'
    posts_dir = content_dir / 'posts'
    posts_dir.mkdir(parents=True)

    (content_dir / 'hello.md').write_text("""---
title: Hi
layout: page.html
date: 2020-01-01
---
# Hello
""")

    (content_dir / 'index.html').write_text("""---
title: Home
layout: index.html
---
""")

    (posts_dir / 'first.md').write_text("""---
title: First
layout: post.html
date: 2021-01-01
tags: [a, b]
category: news
---
First post.
""")

    (posts_dir / 'second.md').write_text("""---
title: Second
layout: post.html
date: 2021-03-01
tags: [b, c]
---
Second post.
""")

    (posts_dir / 'third.md').write_text("""---
title: Third
layout: post.html
date: 2021-02-01
category: news
---
Third post.
""")

    return str(content_dir)


@pytest.fixture
def target_dir(temp_dir):
    target_dir = Path(temp_dir) / 'build'
    target_dir.mkdir()
    return str(target_dir)


@pytest.fixture
def make_pipeline(templates_dir, content_dir, target_dir):
    """Factory for pipelines over the fixture project."""
    def factory(debug=True, default_template=None, **kwargs):
        renderer = TemplateRenderer(templates_dir, default_template=default_template, debug=debug)
        collector = ContentCollector(url_prefix='/posts', default_category='uncategorized')
        kwargs.setdefault('site_options', {'title': 'Test Site'})
        return PagePipeline(content_dir, target_dir, renderer, collector=collector,
                            debug=debug, **kwargs)
    return factory


@pytest.fixture
def project_dir(temp_dir, templates_dir, content_dir):
    """A complete project with assets, uploads and a configuration file."""
    root = Path(temp_dir)
    assets = root / 'assets'
    (assets / 'css').mkdir(parents=True)
    (assets / 'images').mkdir()
    (assets / 'fonts').mkdir()
    (assets / 'vendor').mkdir()
    (assets / 'css' / 'main.css').write_text("body {\n    color: red;\n}\n")
    (assets / 'main.js').write_text("function hello() {\n    return 1;\n}\n")
    (assets / 'vendor' / 'lib.js').write_text("var lib = 1;\n")
    (assets / 'images' / 'logo.png').write_bytes(b'\x89PNG\r\n\x1a\n')
    (assets / 'fonts' / 'body.ttf').write_bytes(b'\x00\x01\x00\x00')
    uploads = root / 'uploads'
    uploads.mkdir()
    (uploads / 'report.pdf').write_bytes(b'%PDF-1.4')

    (root / 'sitepipe.yml').write_text("""target: build
site:
  title: Test Site
log_dir: null
""")
    return str(root)


@pytest.fixture
def settings_for(project_dir):
    """Load merged settings for the fixture project."""
    def factory(production=False):
        loader = SiteSettings(config_dir=project_dir)
        loader.load_settings()
        return loader.merge_with_args({'production': production}), loader.resolve
    return factory
