import posixpath
import re
from urllib.parse import urljoin, urlsplit

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_CONTROL = re.compile(r"[\x00-\x1f\x7f]")
_PORT = re.compile(r"^(:[0-9]*)?$")
# ASCII characters allowed in a host name; non-ASCII is left to IDNA
_HOST_CHARS = set(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
    "-_.~!$&'()*+,;=:[]<>\"%"
)


def _valid_authority(netloc: str) -> bool:
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        end = host.find("]")
        if end < 0:
            return False
        port = host[end + 1:]
    else:
        colon = host.rfind(":")
        port = host[colon:] if colon >= 0 else ""
    if not _PORT.match(port):
        return False
    return all(c in _HOST_CHARS for c in host if ord(c) < 0x80)


def is_valid_url(candidate: str) -> bool:
    """Check that ``candidate`` is a usable request URI.

    Accepts absolute URIs (``scheme:...``) and absolute paths (``/...``).
    Bare relative references such as ``news/1`` are rejected, as are hosts
    with characters like spaces and non-numeric ports. Any run of digits is
    accepted as a port. Never raises.
    """
    if not isinstance(candidate, str) or not candidate:
        return False
    if _CONTROL.search(candidate):
        return False
    has_scheme = bool(_SCHEME.match(candidate))
    if not candidate.startswith("/") and not has_scheme:
        return False
    if _BAD_ESCAPE.search(candidate.split("?", 1)[0]):
        return False
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return False
    if has_scheme and parts.netloc and not _valid_authority(parts.netloc):
        return False
    return True


def resolve_link(href: str, link_selector: str, page_url: str, against_page: bool = False) -> str | None:
    """Turn an ``href`` found on a listing page into a URL worth fetching.

    By default a valid ``href`` is used untouched and anything else is
    joined as a path onto the link selector, which is how gnawer has always
    resolved links. With ``against_page`` the ``href`` is resolved against
    the listing page URL instead. Returns None when no valid URL results.
    """
    if against_page:
        try:
            resolved = urljoin(page_url, href)
        except ValueError:
            return None
        return resolved if is_valid_url(resolved) else None

    if is_valid_url(href):
        return href
    joined = posixpath.normpath(posixpath.join(link_selector, href))
    return joined if is_valid_url(joined) else None
