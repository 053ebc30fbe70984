"""Fetch facade: one entry point, one result shape"""

from typing import Dict, Optional

import httpx
from loguru import logger

from .config import HTML_CONTENT_TYPES, MAX_REDIRECTS
from .headers import build_headers
from .models import FetchError, FetchOptions, FlowFlags, NormalizedResponse
from .orchestrator import AuthFlowOrchestrator
from .retry import send_with_retry
from .session_store import SessionHandle


def is_html_content_type(content_type: str) -> bool:
    content_type = (content_type or "").lower()
    return any(kind in content_type for kind in HTML_CONTENT_TYPES)


class PageFetcher:
    """
    HTML page fetcher with browser-like headers and cookie sessions.

    - Simple mode: httpx follows redirects natively, cookies live in the
      session jar attached to the client
    - Auth-flow mode: redirects and login forms are driven by
      ``AuthFlowOrchestrator``
    - Fresh HTTP client per fetch
    - Transport failures come back as a failed ``NormalizedResponse``
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            transport: Optional httpx transport, mainly for tests
        """
        self.transport = transport

    def _client(
        self,
        options: FetchOptions,
        follow_redirects: bool,
        session: Optional[SessionHandle] = None,
    ) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=options.timeout,
            verify=not options.insecure,
            follow_redirects=follow_redirects,
            max_redirects=MAX_REDIRECTS,
            cookies=session.jar if session is not None else None,
            http2=True,
            transport=self.transport,
        )

    async def fetch(self, url: str, options: Optional[FetchOptions] = None) -> NormalizedResponse:
        """
        Fetch ``url`` and normalize the outcome. Never raises for network or
        HTTP failures.
        """
        options = options or FetchOptions()
        session = options.session or SessionHandle.ephemeral(options.cookie, url)

        headers = build_headers(url, options.referer or None)
        cookie = session.cookie_header(url)
        request_headers_used: Dict[str, str] = dict(headers)
        if cookie:
            request_headers_used["Cookie"] = cookie

        flags = FlowFlags()
        try:
            if options.enable_auth_flow:
                async with self._client(options, follow_redirects=False) as client:
                    orchestrator = AuthFlowOrchestrator(
                        client,
                        session,
                        max_retries=options.max_retries,
                        username=options.username,
                        password=options.password,
                        login_detector=options.login_detector,
                    )
                    outcome = await orchestrator.run(url, headers, flags)
                response = outcome.response
                if response is None:
                    return NormalizedResponse(
                        ok=False,
                        status_code=0,
                        request_headers_used=request_headers_used,
                        auth_flow_occurred=flags.auth_flow_occurred,
                        login_occurred=flags.login_occurred,
                        error=FetchError(
                            code="TooManyRedirects",
                            message=f"Exceeded maximum of {MAX_REDIRECTS} redirects",
                        ),
                        url=outcome.final_url,
                    )
            else:
                async with self._client(options, follow_redirects=True, session=session) as client:
                    response = await send_with_retry(
                        client, "GET", url, headers, max_retries=options.max_retries
                    )

        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Transport failure for {url}: {e!r}")
            return NormalizedResponse(
                ok=False,
                status_code=0,
                request_headers_used=request_headers_used,
                auth_flow_occurred=flags.auth_flow_occurred,
                login_occurred=flags.login_occurred,
                error=FetchError(code=type(e).__name__, message=str(e) or repr(e)),
                url=url,
            )

        return self._normalize(response, request_headers_used, flags)

    def _normalize(
        self,
        response: httpx.Response,
        request_headers_used: Dict[str, str],
        flags: FlowFlags,
    ) -> NormalizedResponse:
        is_html = is_html_content_type(response.headers.get("content-type", ""))
        ok = 200 <= response.status_code < 300 and is_html

        logger.debug(
            f"← {response.status_code} {response.url} "
            f"({response.headers.get('content-type', 'unknown')})"
        )
        return NormalizedResponse(
            ok=ok,
            status_code=response.status_code,
            headers=response.headers,
            body=response.text if ok else "",
            request_headers_used=request_headers_used,
            auth_flow_occurred=flags.auth_flow_occurred,
            login_occurred=flags.login_occurred,
            url=str(response.url),
        )


async def fetch_html(
    url: str,
    options: Optional[FetchOptions] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> NormalizedResponse:
    """Convenience wrapper around ``PageFetcher.fetch``"""
    return await PageFetcher(transport=transport).fetch(url, options)
