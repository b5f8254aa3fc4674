"""
URL validation and joining helpers for sitepipe.

Report URLs are checked before any auditor is launched, and page URLs are
derived by joining content-relative paths to a configured prefix.
"""

import posixpath
import re
from urllib.parse import urlparse
from typing import Set, Tuple


class URLValidator:
    """
    Validate URLs handed to external tools.
    """

    # Allowed URL schemes
    ALLOWED_SCHEMES: Set[str] = {'http', 'https'}

    def validate_url(self, url: str) -> Tuple[bool, str]:
        """
        Validate a URL.

        Args:
            url: The URL to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not isinstance(url, str):
            return False, f"Expected a string, got {type(url).__name__}"

        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            return False, "Invalid URL format"

        if parsed.scheme.lower() not in self.ALLOWED_SCHEMES:
            return False, f"Unsupported URL scheme: {parsed.scheme}"

        if not parsed.hostname:
            return False, "Invalid hostname in URL"

        if not self._check_url_patterns(url):
            return False, "URL contains suspicious patterns"

        return True, "URL is valid"

    def _check_url_patterns(self, url: str) -> bool:
        """Reject whitespace and control characters that would break a command line."""
        return re.search(r'[\s\x00-\x1f]', url) is None


def url_join(prefix: str, relative_path: str) -> str:
    """
    Join a content-relative path to a URL prefix.

    The extension is stripped and OS separators become forward slashes.
    """
    stem = posixpath.splitext(relative_path.replace('\\', '/'))[0]
    prefix = (prefix or '').rstrip('/')
    return f"{prefix}/{stem.lstrip('/')}"
