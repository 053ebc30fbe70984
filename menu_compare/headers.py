"""Browser-like request header construction"""

from typing import Dict, Optional
from urllib.parse import urlsplit

from .config import (
    ACCEPT,
    ACCEPT_LANGUAGE,
    SEC_CH_UA,
    SEC_CH_UA_PLATFORM,
    USER_AGENT,
)

HEADER_ORDER = [
    "User-Agent",
    "Accept",
    "Accept-Language",
    "Cache-Control",
    "Pragma",
    "Upgrade-Insecure-Requests",
    "Priority",
    "Referer",
    "Sec-Fetch-Dest",
    "Sec-Fetch-Mode",
    "Sec-Fetch-Site",
    "Sec-Fetch-User",
    "Sec-CH-UA",
    "Sec-CH-UA-Mobile",
    "Sec-CH-UA-Platform",
]


def registrable_domain(hostname: str) -> str:
    """Last two dot-separated labels of ``hostname`` (not PSL-exact)"""
    return ".".join(hostname.lower().rstrip(".").split(".")[-2:])


def _hostname(url: str) -> Optional[str]:
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    return host or None


def compute_sec_fetch_site(target_url: str, referer_url: Optional[str]) -> str:
    """
    ``Sec-Fetch-Site`` for a navigation from ``referer_url`` to ``target_url``.

    Returns ``none`` without a usable referer, ``same-site`` when both share a
    registrable domain and ``cross-site`` otherwise.
    """
    if not referer_url:
        return "none"
    target_host = _hostname(target_url)
    referer_host = _hostname(referer_url)
    if not target_host or not referer_host:
        return "none"
    if registrable_domain(target_host) == registrable_domain(referer_host):
        return "same-site"
    return "cross-site"


def build_headers(target_url: str, referer_url: Optional[str] = None) -> Dict[str, str]:
    """Emulate a Chromium top-level navigation request"""
    values = {
        "User-Agent": USER_AGENT,
        "Accept": ACCEPT,
        "Accept-Language": ACCEPT_LANGUAGE,
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Upgrade-Insecure-Requests": "1",
        "Priority": "u=0, i",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": compute_sec_fetch_site(target_url, referer_url),
        "Sec-Fetch-User": "?1",
        "Sec-CH-UA": SEC_CH_UA,
        "Sec-CH-UA-Mobile": "?0",
        "Sec-CH-UA-Platform": SEC_CH_UA_PLATFORM,
    }
    if referer_url:
        values["Referer"] = referer_url

    return {name: values[name] for name in HEADER_ORDER if name in values}


def refresh_for_hop(headers: Dict[str, str], previous_url: str, next_url: str) -> None:
    """Rebuild ``headers`` in place for the next hop, referred by the hop being left"""
    refreshed = build_headers(next_url, previous_url)
    headers.clear()
    headers.update(refreshed)


def origin_of(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def build_login_headers(
    base_headers: Dict[str, str],
    login_page_url: str,
    body_length: int,
) -> Dict[str, str]:
    """Headers mirroring a same-origin form submission from the login page"""
    headers = dict(base_headers)
    headers.update(
        {
            "Content-Type": "application/x-www-form-urlencoded",
            "Content-Length": str(body_length),
            "Origin": origin_of(login_page_url),
            "Referer": login_page_url,
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-Site": "same-origin",
            "Sec-Fetch-User": "?1",
        }
    )
    return headers
