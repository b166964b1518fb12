"""Tests for address normalization and favicon derivation."""
import pytest

from navpage.bookmarks.urls import favicon_url, is_http_url, normalize_url


# ── normalize_url ───────────────────────────────────────────────


class TestNormalizeUrl:
    def test_bare_domain_gets_https(self):
        assert normalize_url("github.com") == "https://github.com/"

    def test_http_url_unchanged(self):
        assert normalize_url("http://x.com") == "http://x.com"

    def test_https_url_with_path_unchanged(self):
        url = "https://example.com/a/b?q=1#top"
        assert normalize_url(url) == url

    def test_surrounding_whitespace_trimmed(self):
        assert normalize_url("  https://example.com  ") == "https://example.com"

    def test_ftp_rejected(self):
        assert normalize_url("ftp://x.com") is None

    def test_blank_rejected(self):
        assert normalize_url("   ") is None

    def test_empty_and_none_rejected(self):
        assert normalize_url("") is None
        assert normalize_url(None) is None

    def test_bare_domain_with_path(self):
        assert normalize_url("example.com/docs?x=1") == "https://example.com/docs?x=1"

    def test_host_lowercased_on_retry(self):
        assert normalize_url("Example.COM") == "https://example.com/"

    def test_host_with_port(self):
        assert normalize_url("localhost:3000") == "https://localhost:3000/"

    def test_internal_space_in_host_rejected(self):
        assert normalize_url("exa mple.com") is None

    def test_scheme_without_host_rejected(self):
        assert normalize_url("https://") is None

    def test_javascript_scheme_rejected(self):
        assert normalize_url("javascript://alert(1)") is None

    def test_bad_port_rejected(self):
        assert normalize_url("example.com:99999") is None

    def test_ipv6_host(self):
        assert normalize_url("http://[::1]:8080/") == "http://[::1]:8080/"

    @pytest.mark.parametrize("raw", ["github.com", "http://x.com", "https://a.b/c"])
    def test_result_is_absolute_http(self, raw):
        assert is_http_url(normalize_url(raw))


class TestIsHttpUrl:
    def test_accepts_https(self):
        assert is_http_url("https://cdn.example.com/icon.png")

    def test_rejects_relative(self):
        assert not is_http_url("/icon.png")

    def test_rejects_data_uri(self):
        assert not is_http_url("data:image/png;base64,AAAA")

    def test_rejects_empty(self):
        assert not is_http_url("")
        assert not is_http_url(None)


# ── favicon_url ─────────────────────────────────────────────────


class TestFaviconUrl:
    def test_explicit_icon_wins(self):
        assert favicon_url("https://github.com/", "https://i.test/x.png") == "https://i.test/x.png"

    def test_derived_from_hostname(self):
        assert favicon_url("https://github.com/openai") == (
            "https://www.google.com/s2/favicons?domain=github.com&sz=32"
        )

    def test_no_host_returns_none(self):
        assert favicon_url("not a url") is None
