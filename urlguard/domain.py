from __future__ import annotations

import re
from urllib.parse import unquote, urlparse

from .reference import GENERIC_SECOND_LEVEL


_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_ACE_PREFIX = "xn--"

# DNS limits; anything longer cannot be a real hostname.
_MAX_HOSTNAME_LEN = 253
_MAX_LABEL_LEN = 63


def _decode_label(label: str) -> str:
    if not label.startswith(_ACE_PREFIX):
        return label
    try:
        return label[len(_ACE_PREFIX):].encode("ascii").decode("punycode")
    except UnicodeError:
        return label


def extract_domain(url: str | None) -> str | None:
    """Return the lowercase hostname of ``url``, or None when it has none.

    Inputs without an http(s) scheme are parsed as if ``https://`` had been
    typed in front of them, so ``paypal.com/login`` works the same as the
    full URL. Percent-escapes in the host are decoded and ``xn--`` labels are
    turned back into Unicode, so ``g%30%30gle.com`` reads as ``g00gle.com``
    and a punycode host compares the same as its Unicode spelling.
    """
    if not url:
        return None
    value = str(url).strip()
    if not value:
        return None
    if not _SCHEME_RE.match(value):
        value = "https://" + value

    try:
        hostname = urlparse(value).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    hostname = unquote(hostname).lower()

    if hostname.endswith("."):
        hostname = hostname[:-1]
    if not hostname or len(hostname) > _MAX_HOSTNAME_LEN:
        return None
    if any(ch.isspace() for ch in hostname):
        return None
    labels = hostname.split(".")
    # empty labels (paypal.com..evil.com) are kept, as browsers do
    if any(len(label) > _MAX_LABEL_LEN for label in labels):
        return None
    return ".".join(_decode_label(label) for label in labels).lower()


def get_base_domain(hostname: str) -> str:
    """Registrable label of a hostname: ``example`` for ``www.example.co.uk``."""
    parts = hostname.split(".")
    if len(parts) >= 2:
        second_last = parts[-2]
        if second_last in GENERIC_SECOND_LEVEL and len(parts) >= 3:
            return parts[-3]
        return second_last
    return parts[0]


def get_tld(hostname: str) -> str:
    # Only the last label: "co.uk" yields "uk" even though get_base_domain skips "co".
    return hostname.split(".")[-1]
