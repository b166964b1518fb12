"""Address normalization and favicon derivation."""
import re
from typing import Optional
from urllib.parse import SplitResult, urlsplit, urlunsplit

ALLOWED_SCHEMES = ("http", "https")
DEFAULT_SCHEME = "https"
FAVICON_SERVICE = "https://www.google.com/s2/favicons?domain={host}&sz=32"

_REG_NAME_RE = re.compile(r"^[A-Za-z0-9\-._~!$&'()*+,;=%]+$")
_IPV6_RE = re.compile(r"^\[[0-9A-Fa-f:.]+\]$")


def _split_host(netloc: str) -> tuple[str, str]:
    """Split a netloc into (userinfo-with-@, host-and-port)."""
    userinfo, sep, hostport = netloc.rpartition("@")
    return (userinfo + sep, hostport)


def _valid_hostport(hostport: str) -> bool:
    if hostport.startswith("["):
        host, _, rest = hostport.partition("]")
        host += "]"
        if rest and not rest.startswith(":"):
            return False
        return bool(_IPV6_RE.match(host))
    host = hostport.split(":", 1)[0]
    if not host or host.startswith(".") or ".." in host:
        return False
    return bool(_REG_NAME_RE.match(host))


def _parse_absolute(text: str) -> Optional[SplitResult]:
    """Parse ``text`` as an absolute http(s) URL, or return None."""
    try:
        parts = urlsplit(text)
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return None
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return None
    if not parts.netloc or any(ch.isspace() for ch in parts.netloc):
        return None
    _, hostport = _split_host(parts.netloc)
    if not _valid_hostport(hostport):
        return None
    return parts


def _serialize(parts: SplitResult) -> str:
    userinfo, hostport = _split_host(parts.netloc)
    return urlunsplit((
        parts.scheme.lower(),
        userinfo + hostport.lower(),
        parts.path or "/",
        parts.query,
        parts.fragment,
    ))


def normalize_url(raw: Optional[str]) -> Optional[str]:
    """Turn free-form address text into an absolute http(s) URL.

    Input that already is an absolute http/https URL is returned as typed
    (minus surrounding whitespace). Anything without a scheme separator is
    retried with ``https://`` prepended and returned in canonical form, so
    ``github.com`` becomes ``https://github.com/``. Returns None when the
    text is not a usable address.
    """
    text = (raw or "").strip()
    if not text:
        return None

    if _parse_absolute(text) is not None:
        return text

    if "://" in text:
        return None

    parts = _parse_absolute(f"{DEFAULT_SCHEME}://{text}")
    if parts is None:
        return None
    return _serialize(parts)


def is_http_url(value: Optional[str]) -> bool:
    """True when ``value`` is already an absolute http(s) URL."""
    return bool(value) and _parse_absolute(value.strip()) is not None


def favicon_url(url: str, icon: Optional[str] = None) -> Optional[str]:
    """Icon to render for a bookmark: the explicit icon, else a favicon lookup."""
    if icon:
        return icon
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    return FAVICON_SERVICE.format(host=host)
