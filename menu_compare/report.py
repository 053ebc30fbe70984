"""Terminal and HTML rendering of comparison results"""

import io
from datetime import datetime
from html import escape
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlsplit

from loguru import logger
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .config import DIFF_TRUNCATE_LINES
from .models import PairResult, RunSummary

URL_COLUMN_WIDTH = 60
CONSOLE_WIDTH = 200


def request_target(url: str) -> str:
    """Path, query and fragment of ``url``; the input itself if unparsable"""
    if not url:
        return ""
    try:
        parts = urlsplit(str(url))
    except ValueError:
        return str(url)
    if not parts.scheme or not parts.netloc:
        return str(url)
    target = parts.path or "/"
    if parts.query:
        target += f"?{parts.query}"
    if parts.fragment:
        target += f"#{parts.fragment}"
    return target


def build_table(results: List[PairResult]) -> Table:
    """Results table; long request targets wrap instead of being cut"""
    table = Table(box=box.ASCII)
    table.add_column("#", min_width=4)
    table.add_column("URL A", max_width=URL_COLUMN_WIDTH, overflow="fold")
    table.add_column("URL B", max_width=URL_COLUMN_WIDTH, overflow="fold")
    table.add_column("Status")
    for r in results:
        table.add_row(
            str(r.index),
            Text(request_target(r.url_a)),
            Text(request_target(r.url_b)),
            "PASS" if r.passed else "FAIL",
        )
    return table


def render_table(results: List[PairResult]) -> str:
    """Plain-text rendering of ``build_table``"""
    console = Console(
        file=io.StringIO(),
        width=CONSOLE_WIDTH,
        color_system=None,
        highlight=False,
        emoji=False,
    )
    console.print(build_table(results))
    return console.file.getvalue().rstrip("\n")


def diff_lines(diff: str, full: bool = False) -> Tuple[List[str], int]:
    """
    Lines of ``diff`` to display and how many were cut off.

    Without ``full`` only the first ``DIFF_TRUNCATE_LINES`` are kept.
    """
    lines = diff.splitlines()
    if full or len(lines) <= DIFF_TRUNCATE_LINES:
        return lines, 0
    return lines[:DIFF_TRUNCATE_LINES], len(lines) - DIFF_TRUNCATE_LINES


def _line_kind(line: str) -> str:
    if line.startswith("+"):
        return "add"
    if line.startswith("-"):
        return "remove"
    if line.startswith("@@"):
        return "hunk"
    return "context"


def summary_line(summary: RunSummary) -> str:
    return f"Summary: {summary.passed} passed, {summary.failed} failed (total {summary.total})"


def print_table(results: List[PairResult]) -> None:
    logger.info("")
    for line in render_table(results).splitlines():
        if line.endswith("| PASS   |"):
            logger.opt(colors=True).info("<green>{}</green>", line)
        elif line.endswith("| FAIL   |"):
            logger.opt(colors=True).info("<red>{}</red>", line)
        else:
            logger.info("{}", line)
    logger.info("")


def print_failure_diff(result: PairResult, full: bool = False) -> None:
    logger.info("")
    logger.opt(colors=True).info(
        "<bg red><white> FAIL </white></bg red> <bold>Difference for pair #{}</bold>",
        result.index,
    )
    logger.info("{}  vs  {}", request_target(result.url_a), request_target(result.url_b))

    colors = {"add": "green", "remove": "red", "hunk": "cyan"}
    lines, hidden = diff_lines(result.diff, full)
    for line in lines:
        color = colors.get(_line_kind(line))
        if color:
            logger.opt(colors=True).info(f"<{color}>{{}}</{color}>", line)
        else:
            logger.info("{}", line)
    if hidden:
        logger.info(f"... ({hidden} more lines, re-run with --full-diff to see all)")


def print_summary(summary: RunSummary) -> None:
    if summary.failed == 0:
        logger.opt(colors=True).success("<bg green><black> ALL PASS </black></bg green> {}", summary_line(summary))
    else:
        logger.opt(colors=True).error("<bg red><white> SOME FAIL </white></bg red> {}", summary_line(summary))


_CSS = """
body { font-family: Monaco, Menlo, 'Ubuntu Mono', monospace; background: #1a1a1a; color: #e0e0e0; padding: 20px; }
.container { max-width: 1400px; margin: 0 auto; }
h1 { border-bottom: 2px solid #333; padding-bottom: 10px; }
.metadata { background: #2a2a2a; padding: 15px; border-left: 4px solid #4a9eff; margin-bottom: 20px; }
.bg-red { background: #dc3545; color: white; padding: 2px 6px; border-radius: 3px; }
.bg-green { background: #28a745; color: white; padding: 2px 6px; border-radius: 3px; }
.text-gray { color: #6c757d; }
.text-cyan { color: #17a2b8; }
.results-table { width: 100%; border-collapse: collapse; background: #2a2a2a; margin-bottom: 30px; }
.results-table th, .results-table td { padding: 10px 12px; border-bottom: 1px solid #444; text-align: left; vertical-align: top; }
.url-cell { word-break: break-all; font-size: 12px; }
.failure-section { margin: 30px 0; background: #2a2a2a; padding: 20px; border-left: 4px solid #dc3545; }
.diff-content { background: #1a1a1a; padding: 15px; font-size: 12px; white-space: pre-wrap; }
.diff-line-add { color: #28a745; }
.diff-line-remove { color: #dc3545; }
.diff-line-hunk { color: #17a2b8; }
.truncated-notice { color: #6c757d; font-style: italic; }
.no-failures { text-align: center; color: #28a745; font-size: 18px; margin: 40px 0; }
"""


def _status_badge(passed: bool) -> str:
    if passed:
        return '<span class="bg-green"> PASS </span>'
    return '<span class="bg-red"> FAIL </span>'


def _table_html(results: List[PairResult]) -> str:
    if not results:
        return '<p class="text-gray">No results to display.</p>'
    rows = []
    for r in results:
        rows.append(
            "<tr>"
            f"<td>{r.index}</td>"
            f'<td class="url-cell"><span class="text-cyan">{escape(request_target(r.url_a))}</span></td>'
            f'<td class="url-cell"><span class="text-cyan">{escape(request_target(r.url_b))}</span></td>'
            f"<td>{_status_badge(r.passed)}</td>"
            "</tr>"
        )
    return (
        '<table class="results-table"><thead><tr>'
        "<th>#</th><th>URL A</th><th>URL B</th><th>Status</th>"
        "</tr></thead><tbody>" + "".join(rows) + "</tbody></table>"
    )


def _failures_html(results: List[PairResult], full: bool) -> str:
    failures = [r for r in results if not r.passed]
    if not failures:
        return '<div class="no-failures">No failures to report - all comparisons passed!</div>'

    sections = []
    for r in failures:
        if r.diff:
            lines, hidden = diff_lines(r.diff, full)
            body = "".join(
                f'<div class="diff-line-{_line_kind(line)}">{escape(line)}</div>' for line in lines
            )
            if hidden:
                body += (
                    f'<div class="truncated-notice">... ({hidden} more lines, '
                    "use --full-diff to see all)</div>"
                )
        else:
            body = f'<div class="text-gray">Reason: {escape(r.reason)}</div>'
        sections.append(
            '<div class="failure-section">'
            f"<div>{_status_badge(False)} <strong>Difference for pair #{r.index}</strong><br>"
            f'<span class="text-gray">{escape(request_target(r.url_a))}  vs  '
            f"{escape(request_target(r.url_b))}</span></div>"
            f'<div class="diff-content">{body}</div>'
            "</div>"
        )
    return "".join(sections)


def generate_html_report(
    results: List[PairResult],
    summary: RunSummary,
    metadata: Optional[Dict[str, str]] = None,
    full_diff: bool = False,
    now: Optional[datetime] = None,
) -> Tuple[str, str]:
    """
    Render a standalone HTML report.

    Returns:
        Tuple of (html content, file name)
    """
    metadata = metadata or {}
    now = now or datetime.now()
    urls_name = metadata.get("urls", "urls")
    cookies_name = metadata.get("cookies", "cookies")
    report_name = f"{urls_name}-{cookies_name}-{now.strftime('%Y-%m-%dT%H-%M-%S')}"

    if summary.failed == 0:
        status = '<span class="bg-green"> ALL PASS </span>'
    else:
        status = '<span class="bg-red"> SOME FAIL </span>'
    content = f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>Menu Comparison Report - {escape(report_name)}</title>
<style>{_CSS}</style>
</head>
<body>
<div class="container">
<h1>Menu Comparison Report</h1>
<div class="metadata">
<p><strong>Report Name:</strong> {escape(report_name)}</p>
<p><strong>Generated:</strong> {now.isoformat(timespec="seconds")}</p>
<p><strong>URLs File:</strong> {escape(urls_name)}</p>
<p><strong>Cookies File:</strong> {escape(cookies_name)}</p>
<p><strong>Total Comparisons:</strong> {len(results)}</p>
</div>
<div class="summary">{status} <strong>{escape(summary_line(summary))}</strong></div>
<h2>Results Overview</h2>
{_table_html(results)}
<h2>Failure Details</h2>
{_failures_html(results, full_diff)}
</div>
</body>
</html>
"""
    return content, f"{report_name}.html"
