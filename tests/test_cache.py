"""
Тесты для предиката кэшируемости.
"""

import pytest

from webchain.http.messages import Request, Response
from webchain.services.cache import (
    DEFAULT_CACHEABLE_STATUSES,
    CacheabilityGate,
    is_cacheable,
    parse_cache_control,
)


def make_pair(method="GET", status_code=200, headers=None):
    return Request.build("https://example.com/", method=method), Response.build(status_code, headers)


class TestParseCacheControl:
    """Тесты разбора Cache-Control."""

    def test_directives(self):
        assert parse_cache_control(["public, max-age=600"]) == {"public", "max-age"}

    def test_multiple_header_values(self):
        assert parse_cache_control(["no-cache", "No-Store"]) == {"no-cache", "no-store"}

    def test_qualified_private(self):
        assert "private" in parse_cache_control(['private="Set-Cookie", max-age=60'])

    def test_empty(self):
        assert parse_cache_control([]) == frozenset()
        assert parse_cache_control([" , "]) == frozenset()


class TestCacheabilityGate:
    """Тесты CacheabilityGate."""

    @pytest.mark.parametrize("method", ["GET", "HEAD", "get"])
    def test_safe_methods(self, method):
        assert is_cacheable(*make_pair(method=method)) is True

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "PATCH", "OPTIONS"])
    def test_unsafe_methods(self, method):
        assert is_cacheable(*make_pair(method=method)) is False

    @pytest.mark.parametrize("status_code", [200, 203, 300, 301, 302, 404, 410])
    def test_cacheable_statuses(self, status_code):
        assert is_cacheable(*make_pair(status_code=status_code)) is True

    @pytest.mark.parametrize("status_code", [201, 303, 307, 400, 403, 500, 503])
    def test_non_cacheable_statuses(self, status_code):
        assert is_cacheable(*make_pair(status_code=status_code)) is False

    @pytest.mark.parametrize(
        "cache_control",
        ["no-store", "private", "max-age=0, no-store", "PRIVATE", 'private="Authorization"'],
    )
    def test_forbidden_directives(self, cache_control):
        assert is_cacheable(*make_pair(headers={"Cache-Control": cache_control})) is False

    def test_forbidden_directive_in_second_header(self):
        headers = [("Cache-Control", "public"), ("Cache-Control", "no-store")]
        assert is_cacheable(*make_pair(headers=headers)) is False

    @pytest.mark.parametrize("cache_control", ["public, max-age=3600", "no-cache", "s-maxage=60"])
    def test_allowed_directives(self, cache_control):
        assert is_cacheable(*make_pair(headers={"Cache-Control": cache_control})) is True

    def test_custom_statuses(self):
        gate = CacheabilityGate(statuses=[201])
        assert gate.is_cacheable(*make_pair(status_code=201)) is True
        assert gate.is_cacheable(*make_pair(status_code=200)) is False

    def test_default_statuses(self):
        assert CacheabilityGate().statuses == DEFAULT_CACHEABLE_STATUSES

    def test_callable(self):
        gate = CacheabilityGate()
        assert gate(*make_pair()) is True
