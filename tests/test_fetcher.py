import httpx
import pytest

import menu_compare.retry as retry
from menu_compare.fetcher import PageFetcher, fetch_html, is_html_content_type
from menu_compare.models import FetchOptions
from menu_compare.session_store import SessionHandle

MENU_HTML = '<ul id="dropmenu"><li><a href="/">Home</a></li></ul>'


def _html(body, status=200, headers=()):
    return httpx.Response(
        status, headers=[("content-type", "text/html; charset=utf-8"), *headers], text=body
    )


def _fetcher(handler):
    return PageFetcher(transport=httpx.MockTransport(handler))


@pytest.fixture
def no_sleep(monkeypatch):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr(retry.asyncio, "sleep", fake_sleep)
    return delays


def test_is_html_content_type():
    assert is_html_content_type("text/html; charset=utf-8")
    assert is_html_content_type("application/xhtml+xml")
    assert not is_html_content_type("application/json")
    assert not is_html_content_type("")


def test_invalid_options_fail_loudly():
    with pytest.raises(ValueError):
        FetchOptions(max_retries=-1)
    with pytest.raises(ValueError):
        FetchOptions(timeout=0)
    with pytest.raises(ValueError):
        FetchOptions(username="alice")


@pytest.mark.asyncio
async def test_html_page_is_ok_and_raw_cookie_is_sent():
    seen = {}

    def handler(request):
        seen["cookie"] = request.headers.get("cookie")
        seen["sec-fetch-site"] = request.headers.get("sec-fetch-site")
        seen["referer"] = request.headers.get("referer")
        return _html(MENU_HTML)

    response = await _fetcher(handler).fetch(
        "https://old.test/page",
        FetchOptions(cookie="a=1; b=2", referer="https://www.old.test/"),
    )

    assert response.ok is True
    assert response.status_code == 200
    assert response.body == MENU_HTML
    assert sorted(seen["cookie"].split("; ")) == ["a=1", "b=2"]
    assert seen["sec-fetch-site"] == "same-site"
    assert seen["referer"] == "https://www.old.test/"
    assert sorted(response.request_headers_used["Cookie"].split("; ")) == ["a=1", "b=2"]
    assert response.error is None


@pytest.mark.asyncio
async def test_no_cookie_header_without_cookie_source():
    def handler(request):
        assert "cookie" not in request.headers
        return _html(MENU_HTML)

    response = await _fetcher(handler).fetch("https://old.test/page")
    assert response.ok
    assert "Cookie" not in response.request_headers_used


@pytest.mark.asyncio
async def test_non_html_success_is_not_ok_and_body_dropped():
    def handler(request):
        return httpx.Response(200, json={"menu": []})

    response = await _fetcher(handler).fetch("https://old.test/api")
    assert response.ok is False
    assert response.status_code == 200
    assert response.body == ""
    assert response.headers["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_transport_error_is_normalized():
    def handler(request):
        raise httpx.ConnectError("Name or service not known", request=request)

    response = await _fetcher(handler).fetch("https://nowhere.test/", FetchOptions(cookie="a=1"))
    assert response.ok is False
    assert response.status_code == 0
    assert response.error.code == "ConnectError"
    assert "Name or service not known" in response.error.message
    assert response.request_headers_used["Cookie"] == "a=1"
    assert response.failure_detail() == "0 ConnectError Name or service not known"


@pytest.mark.asyncio
async def test_simple_mode_follows_redirects_into_session_jar():
    session = SessionHandle("A")
    session.seed("seed=1", "https://old.test/page")

    def handler(request):
        if request.url.path == "/page":
            return httpx.Response(
                302, headers=[("location", "/menu"), ("set-cookie", "hop=1; Path=/")]
            )
        assert "hop=1" in request.headers["cookie"]
        return _html(MENU_HTML)

    response = await _fetcher(handler).fetch("https://old.test/page", FetchOptions(session=session))
    assert response.ok
    assert response.url == "https://old.test/menu"
    assert response.auth_flow_occurred is False
    assert "hop=1" in session.cookie_header("https://old.test/page")


@pytest.mark.asyncio
async def test_auth_flow_mode_flags_redirects_and_persists_cookies():
    session = SessionHandle("B")

    def handler(request):
        if request.url.path == "/page":
            return httpx.Response(302, headers=[("location", "https://sso.vendor.test/authorize")])
        if request.url.host == "sso.vendor.test":
            return httpx.Response(
                302,
                headers=[("location", "https://old.test/menu"), ("set-cookie", "sso=1; Path=/")],
            )
        return _html(MENU_HTML, headers=[("set-cookie", "sid=2; Path=/")])

    response = await _fetcher(handler).fetch(
        "https://old.test/page", FetchOptions(session=session, enable_auth_flow=True)
    )
    assert response.ok
    assert response.auth_flow_occurred is True
    assert response.login_occurred is False
    assert session.cookie_header("https://old.test/") == "sid=2"
    assert session.cookie_header("https://sso.vendor.test/") == "sso=1"


@pytest.mark.asyncio
async def test_auth_flow_redirect_loop_gives_synthetic_failure():
    def handler(request):
        return httpx.Response(302, headers=[("location", "/again")])

    response = await _fetcher(handler).fetch(
        "https://old.test/again", FetchOptions(enable_auth_flow=True)
    )
    assert response.ok is False
    assert response.status_code == 0
    assert response.body == ""
    assert response.auth_flow_occurred is True
    assert response.error.code == "TooManyRedirects"


@pytest.mark.asyncio
async def test_server_error_without_retries_is_returned(no_sleep):
    calls = []

    def handler(request):
        calls.append(1)
        return _html("down", status=500)

    response = await _fetcher(handler).fetch("https://old.test/")
    assert response.status_code == 500
    assert response.ok is False
    assert response.body == ""
    assert len(calls) == 1
    assert no_sleep == []


@pytest.mark.asyncio
async def test_retryable_status_is_retried_with_capped_backoff(no_sleep):
    statuses = iter([503, 502, 200])

    def handler(request):
        status = next(statuses)
        if status == 200:
            return _html(MENU_HTML)
        return _html("busy", status=status)

    response = await _fetcher(handler).fetch("https://old.test/", FetchOptions(max_retries=2))
    assert response.ok
    assert len(no_sleep) == 2
    assert all(0 < delay <= 8.0 for delay in no_sleep)


@pytest.mark.asyncio
async def test_non_retryable_status_is_not_retried(no_sleep):
    calls = []

    def handler(request):
        calls.append(1)
        return _html("missing", status=404)

    response = await _fetcher(handler).fetch("https://old.test/", FetchOptions(max_retries=3))
    assert response.status_code == 404
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_fetch_html_wrapper():
    def handler(request):
        return _html(MENU_HTML)

    response = await fetch_html("https://old.test/", transport=httpx.MockTransport(handler))
    assert response.ok


@pytest.mark.asyncio
async def test_transport_error_after_redirect_keeps_flow_flags():
    def handler(request):
        if request.url.path == "/page":
            return httpx.Response(302, headers=[("location", "/menu")])
        raise httpx.ConnectError("reset", request=request)

    response = await _fetcher(handler).fetch(
        "https://old.test/page", FetchOptions(enable_auth_flow=True)
    )
    assert response.ok is False
    assert response.status_code == 0
    assert response.error.code == "ConnectError"
    assert response.auth_flow_occurred is True
    assert response.failure_detail() == "0 ConnectError reset"


@pytest.mark.asyncio
async def test_login_that_redirects_back_to_login_stops_at_ceiling():
    login_page = (
        "<html><body><h1>Log in to Market Observer</h1>"
        '<form method="POST" action="/u/login" data-form-primary="true">'
        '<input type="text" name="username"><input type="password" name="password">'
        "</form></body></html>"
    )
    calls = []

    def handler(request):
        calls.append(request.method)
        if request.method == "POST":
            return httpx.Response(302, headers=[("location", "/u/login")])
        return _html(login_page)

    response = await _fetcher(handler).fetch(
        "https://auth.old.test/u/login",
        FetchOptions(enable_auth_flow=True, username="alice", password="wrong"),
    )
    assert response.ok is False
    assert response.status_code == 0
    assert response.error.code == "TooManyRedirects"
    assert response.login_occurred is True
    assert response.auth_flow_occurred is True
    assert calls == ["GET", "POST"] * 10
