"""Tests for configuration loading."""

import json
import os
import pytest
from pathlib import Path

from sitepipe.errors import ConfigError
from sitepipe.settings import SiteSettings, deep_merge


class TestSiteSettings:
    """Test cases for SiteSettings."""

    def test_defaults_without_config_file(self, temp_dir):
        loader = SiteSettings(config_dir=temp_dir)
        settings = loader.load_settings()
        assert loader.config_file_path is None
        assert settings['target'] == 'build'
        assert settings['source']['templates'] == 'templates'
        assert settings['default_category'] == 'uncategorized'
        assert settings['debug'] is True

    def test_yaml_config_is_deep_merged(self, temp_dir):
        Path(temp_dir, 'sitepipe.yml').write_text("source:\n  content: pages\nminify:\n  html: false\n")
        settings = SiteSettings(config_dir=temp_dir).load_settings()
        assert settings['source']['content'] == 'pages'
        assert settings['source']['templates'] == 'templates'
        assert settings['minify'] == {'scripts': True, 'styles': True, 'html': False}

    def test_json_config(self, temp_dir):
        Path(temp_dir, 'config.json').write_text(json.dumps({'target': 'public', 'default_category': 'misc'}))
        loader = SiteSettings(config_dir=temp_dir)
        settings = loader.load_settings()
        assert loader.config_file_path.endswith('config.json')
        assert settings['target'] == 'public'
        assert settings['default_category'] == 'misc'

    def test_yml_preferred_over_json(self, temp_dir):
        Path(temp_dir, 'sitepipe.yml').write_text("target: from-yml\n")
        Path(temp_dir, 'config.json').write_text('{"target": "from-json"}')
        assert SiteSettings(config_dir=temp_dir).load_settings()['target'] == 'from-yml'

    def test_explicit_config_file(self, temp_dir):
        path = Path(temp_dir, 'custom.yaml')
        path.write_text("target: out\n")
        loader = SiteSettings(config_file=str(path))
        assert loader.load_settings()['target'] == 'out'
        assert loader.config_dir == temp_dir

    def test_invalid_yaml_is_fatal(self, temp_dir):
        Path(temp_dir, 'sitepipe.yml').write_text("target: [broken\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            SiteSettings(config_dir=temp_dir).load_settings()

    def test_invalid_json_is_fatal(self, temp_dir):
        Path(temp_dir, 'sitepipe.json').write_text("{nope")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            SiteSettings(config_dir=temp_dir).load_settings()

    def test_non_mapping_config_is_fatal(self, temp_dir):
        Path(temp_dir, 'sitepipe.yml').write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            SiteSettings(config_dir=temp_dir).load_settings()

    def test_missing_explicit_file(self, temp_dir):
        with pytest.raises(ConfigError, match="not found"):
            SiteSettings(config_file=os.path.join(temp_dir, 'missing.yml')).load_settings()

    def test_unsupported_extension(self, temp_dir):
        path = Path(temp_dir, 'site.toml')
        path.write_text("")
        with pytest.raises(ConfigError, match="Unsupported config file format"):
            SiteSettings(config_file=str(path)).load_settings()


class TestMergeWithArgs:
    """Test cases for merging command-line arguments."""

    def test_debug_mode_rewrites_site_url(self, temp_dir):
        Path(temp_dir, 'sitepipe.yml').write_text("site:\n  url: https://example.com\nserver:\n  port: 4000\n")
        loader = SiteSettings(config_dir=temp_dir)
        loader.load_settings()
        settings = loader.merge_with_args({})
        assert settings['debug'] is True
        assert settings['site']['url'] == 'http://localhost:4000'

    def test_production_keeps_site_url(self, temp_dir):
        Path(temp_dir, 'sitepipe.yml').write_text("site:\n  url: https://example.com\n")
        loader = SiteSettings(config_dir=temp_dir)
        loader.load_settings()
        settings = loader.merge_with_args({'production': True})
        assert settings['debug'] is False
        assert settings['site']['url'] == 'https://example.com'

    def test_target_override(self, temp_dir):
        loader = SiteSettings(config_dir=temp_dir)
        loader.load_settings()
        assert loader.merge_with_args({'target': 'dist'})['target'] == 'dist'

    def test_report_urls_must_be_a_list(self, temp_dir):
        Path(temp_dir, 'sitepipe.yml').write_text("report:\n  urls: https://example.com\n")
        loader = SiteSettings(config_dir=temp_dir)
        loader.load_settings()
        with pytest.raises(ConfigError, match="must be a list"):
            loader.merge_with_args({})

    def test_report_urls_must_be_http(self, temp_dir):
        Path(temp_dir, 'sitepipe.yml').write_text("report:\n  urls:\n    - https://example.com/\n    - ftp://example.com/\n")
        loader = SiteSettings(config_dir=temp_dir)
        loader.load_settings()
        with pytest.raises(ConfigError, match="ftp://example.com/"):
            loader.merge_with_args({})

    def test_report_output_format(self, temp_dir):
        Path(temp_dir, 'sitepipe.yml').write_text("report:\n  output: pdf\n")
        loader = SiteSettings(config_dir=temp_dir)
        loader.load_settings()
        with pytest.raises(ConfigError, match="report.output"):
            loader.merge_with_args({})

    def test_resolve_relative_to_config_dir(self, temp_dir):
        loader = SiteSettings(config_dir=temp_dir)
        assert loader.resolve('content') == os.path.join(temp_dir, 'content')
        assert loader.resolve('/abs/path') == '/abs/path'


class TestDeepMerge:
    """Test cases for deep_merge."""

    def test_nested(self):
        base = {'a': {'b': 1, 'c': 2}, 'd': [1]}
        merged = deep_merge(base, {'a': {'c': 3}, 'd': [2]})
        assert merged == {'a': {'b': 1, 'c': 3}, 'd': [2]}
        assert base == {'a': {'b': 1, 'c': 2}, 'd': [1]}
