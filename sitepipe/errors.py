"""
Exception types raised by sitepipe.

Configuration problems are fatal at startup. Front matter, template and
markup problems belong to a single content file and are reported per file
by the page pipeline.
"""


class SitepipeError(Exception):
    """Base class for all sitepipe errors."""


class ConfigError(SitepipeError):
    """Invalid or unusable configuration."""


class TaskError(SitepipeError):
    """Unknown task name or a dependency cycle in the task graph."""


class FileError(SitepipeError):
    """An error tied to one source file."""

    def __init__(self, message, path=None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class FrontMatterError(FileError):
    """Malformed front matter block."""


class TemplateError(FileError):
    """Template could not be found, parsed or rendered."""


class MarkupError(FileError):
    """Markdown rendering or HTML minification failed."""
