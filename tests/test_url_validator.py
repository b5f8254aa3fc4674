"""Tests for URL validation and joining."""

from sitepipe.url_validator import URLValidator, url_join


class TestURLValidator:
    """Test cases for URLValidator."""

    def test_accepts_http_and_https(self):
        validator = URLValidator()
        assert validator.validate_url('https://example.com/') == (True, "URL is valid")
        assert validator.validate_url('http://localhost:3000/about')[0]

    def test_rejects_other_schemes(self):
        is_valid, message = URLValidator().validate_url('file:///etc/passwd')
        assert not is_valid

    def test_rejects_non_strings_and_garbage(self):
        validator = URLValidator()
        assert not validator.validate_url(42)[0]
        assert not validator.validate_url('example.com')[0]
        assert not validator.validate_url('https://example.com/a b')[0]


class TestUrlJoin:
    """Test cases for url_join."""

    def test_join(self):
        assert url_join('/posts', 'hello.md') == '/posts/hello'
        assert url_join('/posts/', 'a/b.md') == '/posts/a/b'
        assert url_join('', 'about.html') == '/about'
        assert url_join('https://example.com/blog', 'x.md') == 'https://example.com/blog/x'
