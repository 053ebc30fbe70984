"""Command-line interface for the menu comparator"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from . import __version__
from .compare import PairComparator
from .config import (
    DEFAULT_CONTAINER_SELECTOR,
    DEFAULT_COOKIES_FILE,
    DEFAULT_LOG_FILE,
    DEFAULT_PAIR_DELAY_MS,
    DEFAULT_REPORTS_DIR,
    DEFAULT_RETRIES,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_URLS_FILE,
)
from .exceptions import MenuCompareError
from .fetcher import PageFetcher
from .inputs import load_cookies, load_credentials, load_url_pairs
from .logging_config import setup_logging
from .login import LoginPageDetector
from .models import FetchOptions, PairResult, RunSummary, Side
from .report import (
    generate_html_report,
    print_failure_diff,
    print_summary,
    print_table,
    request_target,
)
from .session_store import SessionStore
from .storage import ReportStorage, save_cookie_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="menu-compare",
        description="Compare the navigation menu served on pairs of HTTPS URLs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    input_group = parser.add_argument_group("Inputs")
    input_group.add_argument(
        "--urls", type=str, default=str(DEFAULT_URLS_FILE), help="Path to the URLs file"
    )
    input_group.add_argument(
        "--cookies", type=str, default=str(DEFAULT_COOKIES_FILE), help="Path to the cookies file"
    )
    input_group.add_argument(
        "--credentials",
        type=str,
        help="Path to a credentials file ('username password' per side)",
    )

    request_group = parser.add_argument_group("Requests")
    request_group.add_argument(
        "--delay", type=float, default=DEFAULT_PAIR_DELAY_MS, help="Delay in ms between URL pairs"
    )
    request_group.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT_MS, help="Per-request timeout in ms"
    )
    request_group.add_argument(
        "--retries",
        type=int,
        default=DEFAULT_RETRIES,
        help="Number of automatic retries per request",
    )
    request_group.add_argument(
        "--insecure", action="store_true", help="Allow insecure TLS (skip certificate checks)"
    )
    request_group.add_argument("--referer", type=str, help="Referer to send with A and B requests")
    request_group.add_argument(
        "--referer-a", type=str, help="Referer to send with A requests (overrides --referer)"
    )
    request_group.add_argument(
        "--referer-b", type=str, help="Referer to send with B requests (overrides --referer)"
    )
    request_group.add_argument(
        "--auth-flow",
        action="store_true",
        help="Follow redirects and login forms manually on every fetch",
    )
    request_group.add_argument(
        "--login-phrase",
        action="append",
        help="Phrase identifying a login page (repeatable)",
    )
    request_group.add_argument(
        "--selector",
        type=str,
        default=DEFAULT_CONTAINER_SELECTOR,
        help=f"CSS selector of the menu container (default: {DEFAULT_CONTAINER_SELECTOR})",
    )

    output_group = parser.add_argument_group("Output")
    output_group.add_argument(
        "--full-diff", action="store_true", help="Print full diff for failures"
    )
    output_group.add_argument(
        "--html-report",
        action="store_true",
        help=f"Write an HTML report into {DEFAULT_REPORTS_DIR}",
    )
    output_group.add_argument("--json-report", type=str, help="Write results as JSON to this path")

    debug_group = parser.add_argument_group("Debug")
    debug_group.add_argument(
        "--debug", action="store_true", help="Fetch URL A of one pair and print its raw HTML"
    )
    debug_group.add_argument(
        "--debug-index", type=int, default=1, help="1-based index of the pair to debug"
    )
    debug_group.add_argument("--verbose", action="store_true", help="Debug logging")
    debug_group.add_argument("--log-file", type=str, help="Log file path")

    return parser


def build_side_options(
    args: argparse.Namespace,
    sessions: SessionStore,
    credentials: Dict[Side, Optional[Tuple[str, str]]],
) -> Dict[Side, FetchOptions]:
    """Fetch options per side, each bound to that side's own session"""
    detector = LoginPageDetector(args.login_phrase)
    referers = {
        Side.A: args.referer_a or args.referer or "",
        Side.B: args.referer_b or args.referer or "",
    }
    options = {}
    for side in Side:
        username, password = credentials.get(side) or ("", "")
        options[side] = FetchOptions(
            session=sessions.handle(side),
            timeout=args.timeout / 1000.0,
            max_retries=args.retries,
            insecure=args.insecure,
            referer=referers[side],
            enable_auth_flow=args.auth_flow,
            username=username,
            password=password,
            login_detector=detector,
        )
    return options


async def compare_pairs(
    pairs: List[Tuple[str, str]],
    comparator: PairComparator,
    delay_ms: float = DEFAULT_PAIR_DELAY_MS,
) -> List[PairResult]:
    """Compare pairs strictly one after another, pausing between them"""
    results = []
    total = len(pairs)

    for i, (url_a, url_b) in enumerate(pairs, start=1):
        label = f"{request_target(url_a)}  vs  {request_target(url_b)}"
        logger.info(f"🔍 [{i}/{total}] Fetching {label}")

        try:
            result = await comparator.run_pair(i, url_a, url_b)
        except Exception as e:
            logger.exception(f"❌ [{i}/{total}] Unexpected error: {e}")
            result = PairResult(index=i, url_a=url_a, url_b=url_b, passed=False, reason=str(e))

        if result.passed:
            logger.success(f"✅ [{i}/{total}] PASS")
        else:
            logger.error(f"❌ [{i}/{total}] FAIL: {result.reason}")
        results.append(result)

        if i < total and delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000.0)

    return results


async def run_debug(
    pairs: List[Tuple[str, str]],
    index: int,
    options: FetchOptions,
    fetcher: PageFetcher,
) -> int:
    """Fetch URL A of one pair and dump what was sent and received"""
    index = min(max(1, index), len(pairs))
    url_a = pairs[index - 1][0]
    logger.info(f"🐞 Debug: fetching URL A (#{index}) {request_target(url_a)}")

    response = await fetcher.fetch(url_a, options)

    used_cookie = response.request_headers_used.get("Cookie", "")
    logger.info(f"Cookie header used: {used_cookie or '(none)'}")
    set_cookies = response.headers.get_list("set-cookie")
    if set_cookies:
        logger.info("Set-Cookie from server:")
        for value in set_cookies:
            logger.info(f"   {value}")

    if not response.ok:
        logger.error(f"Request failed (HTTP {response.failure_detail()})")
        return 1

    sys.stdout.write(response.body)
    sys.stdout.flush()
    return 0


async def run_comparison(args: argparse.Namespace) -> int:
    """
    Load inputs, compare every pair and report.

    Returns:
        Process exit code: 1 if any pair failed, else 0

    Raises:
        MenuCompareError: On input errors, before any network activity
    """
    urls_path = Path(args.urls)
    cookies_path = Path(args.cookies)

    pairs = load_url_pairs(urls_path)
    cookies = load_cookies(cookies_path)
    credentials = load_credentials(Path(args.credentials)) if args.credentials else {}
    logger.info(f"Loaded {len(pairs)} URL pairs from {urls_path}")

    sessions = SessionStore()
    if pairs:
        sessions.seed(Side.A, cookies[Side.A], pairs[0][0])
        sessions.seed(Side.B, cookies[Side.B], pairs[0][1])

    side_options = build_side_options(args, sessions, credentials)
    fetcher = PageFetcher()

    if args.debug:
        if not pairs:
            logger.error("No URL pairs to debug")
            return 1
        return await run_debug(pairs, args.debug_index, side_options[Side.A], fetcher)

    comparator = PairComparator(fetcher, side_options, selector=args.selector)
    results = await compare_pairs(pairs, comparator, delay_ms=args.delay)
    summary = RunSummary.from_results(results)

    print_table(results)
    for result in results:
        if not result.passed and result.diff:
            print_failure_diff(result, full=args.full_diff)
    print_summary(summary)

    storage = ReportStorage(DEFAULT_REPORTS_DIR)
    if args.html_report:
        content, filename = generate_html_report(
            results,
            summary,
            metadata={"urls": urls_path.stem, "cookies": cookies_path.stem},
            full_diff=args.full_diff,
        )
        await storage.save_html_report(content, filename)
    if args.json_report:
        await storage.save_json_results(Path(args.json_report), results, summary)

    if any(r.auth_flow_occurred for r in results):
        await save_cookie_file(
            cookies_path,
            {Side.A: sessions.serialize(Side.A), Side.B: sessions.serialize(Side.B)},
        )

    return 1 if summary.failed else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.retries < 0:
        parser.error("--retries must be >= 0")
    if args.timeout <= 0:
        parser.error("--timeout must be positive")

    log_file = Path(args.log_file) if args.log_file else DEFAULT_LOG_FILE
    setup_logging(verbose=args.verbose, log_file=log_file)

    logger.debug(f"Menu comparator v{__version__}")

    try:
        return asyncio.run(run_comparison(args))
    except MenuCompareError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
