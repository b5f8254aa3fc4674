#!/usr/bin/env python3
"""
Settings loader for sitepipe.
Supports configuration from sitepipe.yml, sitepipe.yaml, sitepipe.json or config.json files.
"""

import copy
import json
import os
from typing import Dict, Any, Optional

import yaml

from .errors import ConfigError
from .url_validator import URLValidator


class SiteSettings:
    """Load and manage sitepipe configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'source': {
            'assets': 'assets',
            'vendor': 'assets/vendor',
            'templates': 'templates',
            'content': 'content',
            'uploads': 'uploads',
        },
        'target': 'build',
        'posts_dir': 'posts',
        'url_prefix': '/posts',
        'default_category': 'uncategorized',
        'default_template': None,
        'site': {
            'title': None,
            'url': None,
        },
        'markdown': {
            'escape': False,
            'hard_wrap': False,
            'plugins': ['table', 'strikethrough', 'task_lists'],
        },
        'scripts': {},
        'minify': {
            'scripts': True,
            'styles': True,
            'html': True,
        },
        'server': {
            'host': 'localhost',
            'port': 3000,
        },
        'report': {
            'urls': [],
            'flags': [],
            'output': 'html',
            'dir': 'reports',
        },
        'log_dir': 'logs',
        'debug': True,
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['sitepipe.yml', 'sitepipe.yaml', 'sitepipe.json', 'config.json']

    REPORT_FORMATS = ('html', 'json', 'csv')

    def __init__(self, config_dir: str = None, config_file: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
            config_file: Explicit configuration file, overrides the lookup.
        """
        if config_file and not config_dir:
            config_dir = os.path.dirname(os.path.abspath(config_file))
        self.config_dir = config_dir or os.getcwd()
        self.config_file = config_file
        self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        self.config_file_path = None

    def load_settings(self) -> Dict[str, Any]:
        """
        Load settings from the configuration file if one exists.

        Returns:
            Dictionary of configuration settings
        """
        config_file = self.config_file or self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            loaded_settings = self._load_config_file(config_file)
            if not isinstance(loaded_settings, dict):
                raise ConfigError(f"Configuration file {config_file} must contain a mapping")
            self.settings = deep_merge(self.settings, loaded_settings)

        return copy.deepcopy(self.settings)

    def _find_config_file(self) -> Optional[str]:
        """Find the first available configuration file."""
        for filename in self.CONFIG_FILES:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """Load configuration from a YAML or JSON file."""
        file_ext = os.path.splitext(config_path)[1].lower()
        if file_ext not in ('.yml', '.yaml', '.json'):
            raise ConfigError(f"Unsupported config file format: {file_ext}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext == '.json':
                    return json.load(f) or {}
                return yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise ConfigError(f"Configuration file not found: {config_path}")
        except PermissionError:
            raise ConfigError(f"Permission denied reading configuration file: {config_path}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {config_path}: {e}")
        except OSError as e:
            raise ConfigError(f"Error reading configuration file {config_path}: {e}")

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.

        Args:
            args_dict: Dictionary of command-line arguments

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(self.settings)

        for key, value in args_dict.items():
            if value is None:
                continue
            if key == 'production':
                merged['debug'] = not value
            elif key == 'target':
                merged['target'] = value

        if merged['debug']:
            server = merged['server']
            merged['site']['url'] = f"http://{server['host']}:{server['port']}"

        self.validate(merged)
        return merged

    def validate(self, settings: Dict[str, Any]) -> None:
        """Raise ConfigError for settings that cannot work."""
        if not isinstance(settings.get('source'), dict):
            raise ConfigError("'source' must be a mapping of source roots")
        if not settings.get('target'):
            raise ConfigError("'target' must name the output directory")

        report = settings.get('report') or {}
        urls = report.get('urls') or []
        if not isinstance(urls, list):
            raise ConfigError("'report.urls' must be a list of URLs")
        validator = URLValidator()
        for url in urls:
            is_valid, error_msg = validator.validate_url(url)
            if not is_valid:
                raise ConfigError(f"Invalid report URL {url!r}: {error_msg}")
        if report.get('output', 'html') not in self.REPORT_FORMATS:
            raise ConfigError(f"'report.output' must be one of {', '.join(self.REPORT_FORMATS)}")

        scripts = settings.get('scripts') or {}
        if not isinstance(scripts, dict):
            raise ConfigError("'scripts' must map bundle names to per-environment file lists")

    def resolve(self, path: str) -> str:
        """Resolve a configured path against the configuration directory."""
        path = os.path.expanduser(path)
        if os.path.isabs(path):
            return path
        return os.path.normpath(os.path.join(self.config_dir, path))


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of base with override merged in, recursing into mappings."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged
