from datetime import datetime

from menu_compare.config import DIFF_TRUNCATE_LINES
from menu_compare.models import PairResult, RunSummary
from menu_compare.report import (
    diff_lines,
    generate_html_report,
    render_table,
    request_target,
    summary_line,
)


def _result(index, passed=True, reason="Identical anchors", diff=""):
    return PairResult(
        index=index,
        url_a=f"https://old.test/page/{index}?tab=1",
        url_b=f"https://new.test/page/{index}?tab=1",
        passed=passed,
        reason=reason,
        diff=diff,
    )


def test_request_target():
    assert request_target("https://old.test/a/b?x=1#top") == "/a/b?x=1#top"
    assert request_target("https://old.test") == "/"
    assert request_target("not a url") == "not a url"
    assert request_target("") == ""


def test_render_table_rows_and_wrapping():
    long_url = "https://old.test/" + "x" * 100
    results = [
        _result(1),
        PairResult(index=2, url_a=long_url, url_b="https://new.test/", passed=False, reason="r"),
    ]
    text = render_table(results)
    lines = text.splitlines()

    assert lines[0].startswith("+") and lines[-1].startswith("+")
    assert lines[1].startswith("| #    | URL A")
    assert any(line.startswith("| 1    | /page/1?tab=1") and line.endswith("| PASS   |") for line in lines)
    assert any(line.endswith("| FAIL   |") for line in lines)
    assert len({len(line) for line in lines}) == 1

    # long targets fold onto continuation lines, nothing is dropped
    assert "..." not in text
    assert ("/" + "x" * 59) in text
    assert text.count("x") == 100


def test_render_table_does_not_interpret_markup_in_targets():
    result = PairResult(
        index=1,
        url_a="https://old.test/a?tag=[bold]x[/bold]",
        url_b="https://new.test/a",
        passed=True,
        reason="",
    )
    assert "/a?tag=[bold]x[/bold]" in render_table([result])


def test_diff_lines_truncates_unless_full():
    diff = "\n".join(f"+line {i}" for i in range(DIFF_TRUNCATE_LINES + 25))

    lines, hidden = diff_lines(diff)
    assert len(lines) == DIFF_TRUNCATE_LINES
    assert hidden == 25

    lines, hidden = diff_lines(diff, full=True)
    assert len(lines) == DIFF_TRUNCATE_LINES + 25
    assert hidden == 0


def test_summary_line():
    summary = RunSummary(total=3, passed=2, failed=1)
    assert summary_line(summary) == "Summary: 2 passed, 1 failed (total 3)"


def test_run_summary_from_results():
    summary = RunSummary.from_results([_result(1), _result(2, passed=False), _result(3)])
    assert (summary.total, summary.passed, summary.failed) == (3, 2, 1)


def test_html_report_name_and_escaping():
    results = [
        _result(1),
        _result(2, passed=False, reason="Anchor counts: A=1, B=1", diff="--- menu-old\n+++ menu-new\n-<b>Old</b>\n+New & Co"),
        _result(3, passed=False, reason="A HTTP 500"),
    ]
    summary = RunSummary.from_results(results)
    content, filename = generate_html_report(
        results,
        summary,
        metadata={"urls": "urls", "cookies": "cookies"},
        now=datetime(2025, 1, 2, 3, 4, 5),
    )

    assert filename == "urls-cookies-2025-01-02T03-04-05.html"
    assert "<b>Old</b>" not in content
    assert '<div class="diff-line-remove">-&lt;b&gt;Old&lt;/b&gt;</div>' in content
    assert '<div class="diff-line-add">+New &amp; Co</div>' in content
    assert "Reason: A HTTP 500" in content
    assert "SOME FAIL" in content
    assert "/page/1?tab=1" in content


def test_html_report_all_pass():
    results = [_result(1)]
    content, _ = generate_html_report(results, RunSummary.from_results(results))
    assert "ALL PASS" in content
    assert "all comparisons passed" in content
