from __future__ import annotations

import html as htmllib
import re
from urllib.parse import urljoin, urlparse

from .models import Highlight, PageScan
from .service import UrlGuardService, highlight_level

_ANCHOR_RE = re.compile(
    r"<a\b[^>]*?\bhref\s*=\s*([\"']?)([^\"'\s>]+)\1[^>]*>(.*?)</a\s*>",
    re.IGNORECASE | re.DOTALL,
)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")

MAX_LINKS_PER_PAGE = 500


def _anchor_text(inner_html: str) -> str:
    text = htmllib.unescape(_TAG_RE.sub(" ", inner_html or ""))
    return _WS_RE.sub(" ", text).strip()[:200]


def extract_links(html: str, page_url: str, limit: int = MAX_LINKS_PER_PAGE) -> dict[str, list[str]]:
    """Outbound http(s) links on a page, mapped to the text of every anchor pointing there.

    Links back to the page's own host are left out; they are the site's own
    navigation and not what a phishing check is about. Keys keep first-seen
    order.
    """
    if not html:
        return {}

    try:
        page_host = (urlparse(page_url).hostname or "").lower()
    except ValueError:
        page_host = ""

    links: dict[str, list[str]] = {}
    for m in _ANCHOR_RE.finditer(html):
        href = htmllib.unescape(m.group(2) or "").strip()
        if not href:
            continue

        abs_url = urljoin(page_url, href)
        try:
            p = urlparse(abs_url)
            host = (p.hostname or "").lower()
        except ValueError:
            continue

        if p.scheme not in ("http", "https") or not host:
            continue
        if host == page_host:
            continue

        if abs_url not in links:
            if len(links) >= limit:
                break
            links[abs_url] = []
        text = _anchor_text(m.group(3))
        if text:
            links[abs_url].append(text)

    return links


def scan_page(html: str, page_url: str, service: UrlGuardService) -> PageScan:
    settings = service.store.get_settings()
    if not settings.malware_scan_enabled and not settings.typosquat_check_enabled:
        return PageScan(page_url=page_url, links_found=0)

    links = extract_links(html, page_url)
    if not links:
        return PageScan(page_url=page_url, links_found=0)

    highlights: list[Highlight] = []
    for result in service.analyze_urls(list(links)):
        if not result.is_suspicious:
            continue
        highlights.append(
            Highlight(
                url=result.url,
                level=highlight_level(result.risk_score),
                risk_score=result.risk_score,
                tooltip="; ".join(result.reasons),
                anchors=links.get(result.url, []),
            )
        )

    return PageScan(page_url=page_url, links_found=len(links), highlights=highlights)
