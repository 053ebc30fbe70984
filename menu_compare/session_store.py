"""Per-side cookie sessions backed by http.cookiejar"""

from http.cookiejar import CookieJar
from typing import Dict, List, Optional, Union

import httpx
from loguru import logger

from .models import Side


def split_cookie_text(cookie_text: str) -> List[str]:
    """Split a ``name=value; name2=value2`` string into well-formed crumbs"""
    crumbs = []
    for part in (cookie_text or "").split(";"):
        crumb = part.strip()
        if not crumb:
            continue
        name, sep, _ = crumb.partition("=")
        if not sep or not name.strip():
            logger.debug(f"Skipping malformed cookie crumb: {crumb!r}")
            continue
        crumbs.append(crumb)
    return crumbs


class SessionHandle:
    """
    Mutable cookie store for one side of the comparison.

    Wraps a standard ``CookieJar`` so httpx clients can share it directly,
    and remembers the URL it was seeded against for later persistence.
    """

    def __init__(self, name: str, jar: Optional[CookieJar] = None):
        self.name = name
        self.jar = jar if jar is not None else CookieJar()
        self.seed_url: str = ""

    def __repr__(self) -> str:
        return f"SessionHandle({self.name!r}, cookies={len(self.jar)})"

    @classmethod
    def ephemeral(cls, cookie_text: str, url: str) -> "SessionHandle":
        """One-shot jar seeded from a raw cookie string"""
        handle = cls("ephemeral")
        if cookie_text:
            handle.seed(cookie_text, url)
        return handle

    def seed(self, cookie_text: str, first_url: str) -> int:
        """
        Register every crumb of ``cookie_text`` against ``first_url``.

        Each crumb becomes a host-only cookie with the RFC 6265 default path
        of ``first_url``. Malformed crumbs are skipped.

        Returns:
            Number of crumbs stored
        """
        self.seed_url = first_url
        crumbs = split_cookie_text(cookie_text)
        if not crumbs:
            return 0

        request = httpx.Request("GET", first_url)
        response = httpx.Response(
            200,
            headers=[("set-cookie", crumb) for crumb in crumbs],
            request=request,
        )
        before = len(self.jar)
        httpx.Cookies(self.jar).extract_cookies(response)
        stored = len(self.jar) - before
        logger.debug(f"Session {self.name}: seeded {stored} cookies for {first_url}")
        return stored

    def cookie_header(self, url: str) -> str:
        """``Cookie`` header value currently valid for ``url``"""
        request = httpx.Request("GET", url)
        httpx.Cookies(self.jar).set_cookie_header(request)
        return request.headers.get("Cookie", "")

    def absorb(self, response: httpx.Response) -> None:
        """Apply any ``Set-Cookie`` headers from ``response``"""
        if not response.headers.get_list("set-cookie"):
            return
        httpx.Cookies(self.jar).extract_cookies(response)

    def serialize(self, url: Optional[str] = None) -> str:
        """Cookie text for persistence, at the seed URL by default"""
        target = url or self.seed_url
        if not target:
            return ""
        return self.cookie_header(target)


class SessionStore:
    """Owns one independent ``SessionHandle`` per side; jars are never shared"""

    def __init__(self):
        self._sessions: Dict[Side, SessionHandle] = {
            side: SessionHandle(side.value) for side in Side
        }

    def handle(self, side: Union[Side, str]) -> SessionHandle:
        return self._sessions[Side(side)]

    def seed(self, side: Union[Side, str], initial_cookie_text: str, first_url: str) -> int:
        return self.handle(side).seed(initial_cookie_text, first_url)

    def cookie_string_for(self, side: Union[Side, str], url: str) -> str:
        return self.handle(side).cookie_header(url)

    def absorb(self, side: Union[Side, str], response: httpx.Response) -> None:
        self.handle(side).absorb(response)

    def serialize(self, side: Union[Side, str], url: Optional[str] = None) -> str:
        return self.handle(side).serialize(url)
