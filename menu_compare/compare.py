"""Anchor list diffing and per-pair comparison"""

import asyncio
import difflib
from dataclasses import replace
from typing import Dict, Optional, Tuple

from loguru import logger

from .config import DEFAULT_CONTAINER_SELECTOR, DIFF_CONTEXT_LINES
from .extract import extract_anchor_texts, extract_container
from .fetcher import PageFetcher
from .models import ContainerExtract, FetchOptions, NormalizedResponse, PairResult, Side


def compare_strings(a: str, b: str) -> Tuple[bool, str]:
    """
    Compare two newline-joined anchor lists.

    Returns:
        Tuple of (equal, unified diff); the diff is empty when equal
    """
    if a == b:
        return True, ""
    diff = difflib.unified_diff(
        a.splitlines(),
        b.splitlines(),
        fromfile="menu-old",
        tofile="menu-new",
        n=DIFF_CONTEXT_LINES,
        lineterm="",
    )
    return False, "\n".join(diff)


class PairComparator:
    """
    Fetches both sides of a URL pair and compares their menus.

    When the container is missing on a side that has credentials, that side
    is fetched once more with the auth flow forced. This can mistake a
    genuinely broken page for a login problem.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        side_options: Dict[Side, FetchOptions],
        selector: str = DEFAULT_CONTAINER_SELECTOR,
    ):
        self.fetcher = fetcher
        self.side_options = side_options
        self.selector = selector

    async def fetch_pair(self, url_a: str, url_b: str) -> Tuple[NormalizedResponse, NormalizedResponse]:
        """Fetch both sides concurrently; neither fetch can cancel the other"""
        response_a, response_b = await asyncio.gather(
            self.fetcher.fetch(url_a, self.side_options[Side.A]),
            self.fetcher.fetch(url_b, self.side_options[Side.B]),
        )
        return response_a, response_b

    async def run_pair(self, index: int, url_a: str, url_b: str) -> PairResult:
        response_a, response_b = await self.fetch_pair(url_a, url_b)
        return await self.compare_pair(index, url_a, url_b, response_a, response_b)

    async def _retry_side(self, side: Side, url: str) -> Optional[NormalizedResponse]:
        options = self.side_options[side]
        if not options.has_credentials:
            return None
        logger.info(f"🔁 Container missing in {side.value}, retrying with login flow...")
        return await self.fetcher.fetch(url, replace(options, enable_auth_flow=True))

    async def compare_pair(
        self,
        index: int,
        url_a: str,
        url_b: str,
        response_a: NormalizedResponse,
        response_b: NormalizedResponse,
    ) -> PairResult:
        """Compare two fetched pages, retrying a side at most once"""
        responses = {Side.A: response_a, Side.B: response_b}
        urls = {Side.A: url_a, Side.B: url_b}
        retried = []
        auth_flow = any(r.auth_flow_occurred or r.login_occurred for r in responses.values())

        def fail(reason: str, diff: str = "") -> PairResult:
            return PairResult(
                index=index,
                url_a=url_a,
                url_b=url_b,
                passed=False,
                reason=reason,
                diff=diff,
                retried_sides=retried,
                auth_flow_occurred=auth_flow,
            )

        for side in Side:
            if not responses[side].ok:
                return fail(f"{side.value} HTTP {responses[side].failure_detail()}")

        extracts: Dict[Side, ContainerExtract] = {
            side: extract_container(responses[side].body, self.selector) for side in Side
        }

        for side in Side:
            if not extracts[side].missing:
                continue
            retry = await self._retry_side(side, urls[side])
            if retry is None:
                continue
            retried.append(side.value)
            auth_flow = auth_flow or retry.auth_flow_occurred or retry.login_occurred
            if not retry.ok:
                return fail(f"{side.value} HTTP {retry.failure_detail()}")
            responses[side] = retry
            extracts[side] = extract_container(retry.body, self.selector)

        for side in Side:
            if extracts[side].missing:
                return fail(f"container missing in {side.value}")

        texts_a = extract_anchor_texts(extracts[Side.A].inner_html)
        texts_b = extract_anchor_texts(extracts[Side.B].inner_html)
        equal, diff = compare_strings("\n".join(texts_a), "\n".join(texts_b))

        if equal:
            return PairResult(
                index=index,
                url_a=url_a,
                url_b=url_b,
                passed=True,
                reason="Identical anchors",
                retried_sides=retried,
                auth_flow_occurred=auth_flow,
            )
        return fail(f"Anchor counts: A={len(texts_a)}, B={len(texts_b)}", diff)
