import pytest

from menu_compare.exceptions import CredentialsError, InputFileError, InvalidUrlPairError
from menu_compare.inputs import (
    clean_cookie_string,
    load_cookies,
    load_url_pairs,
    parse_cookies_text,
    parse_credentials_text,
    parse_url_pairs,
)
from menu_compare.models import Side


def test_parse_url_pairs_skips_blank_and_comment_lines():
    text = """
# production vs staging
https://old.test/a, https://new.test/a

  https://old.test/b ,https://new.test/b
"""
    assert parse_url_pairs(text) == [
        ("https://old.test/a", "https://new.test/a"),
        ("https://old.test/b", "https://new.test/b"),
    ]


def test_parse_url_pairs_splits_on_first_comma_only():
    pairs = parse_url_pairs("https://old.test/a, https://new.test/search?q=a,b")
    assert pairs == [("https://old.test/a", "https://new.test/search?q=a,b")]


def test_parse_url_pairs_rejects_line_without_comma():
    with pytest.raises(InvalidUrlPairError) as exc_info:
        parse_url_pairs("https://old.test/a https://new.test/a")
    assert exc_info.value.line == "https://old.test/a https://new.test/a"


@pytest.mark.parametrize(
    "line",
    [
        "http://old.test/a, https://new.test/a",
        "https://old.test/a, http://new.test/a",
        "https://old.test/a, ",
    ],
)
def test_parse_url_pairs_rejects_non_https(line):
    with pytest.raises(InvalidUrlPairError, match="Only HTTPS URLs are supported"):
        parse_url_pairs(line)


def test_clean_cookie_string_strips_wrapping_quotes():
    assert clean_cookie_string('  "sid=1; theme=dark"  ') == "sid=1; theme=dark"
    assert clean_cookie_string("'sid=1'") == "sid=1"
    assert clean_cookie_string('"sid=1') == '"sid=1'
    assert clean_cookie_string("") == ""


def test_parse_cookies_text_two_lines():
    cookies = parse_cookies_text("sid=a\nsid=b\n")
    assert cookies == {Side.A: "sid=a", Side.B: "sid=b"}


def test_parse_cookies_text_b_falls_back_to_a():
    assert parse_cookies_text("sid=a\n") == {Side.A: "sid=a", Side.B: "sid=a"}
    assert parse_cookies_text("sid=a\n   \n") == {Side.A: "sid=a", Side.B: "sid=a"}


def test_parse_cookies_text_empty_file():
    assert parse_cookies_text("") == {Side.A: "", Side.B: ""}


def test_parse_credentials_text():
    creds = parse_credentials_text("alice s3cret pass\nbob hunter2\n")
    assert creds[Side.A] == ("alice", "s3cret pass")
    assert creds[Side.B] == ("bob", "hunter2")


def test_parse_credentials_text_b_falls_back_to_a():
    creds = parse_credentials_text("alice pw\n")
    assert creds[Side.B] == ("alice", "pw")


def test_parse_credentials_text_rejects_missing_password():
    with pytest.raises(CredentialsError):
        parse_credentials_text("alice\n")


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(InputFileError, match="Missing urls file"):
        load_url_pairs(tmp_path / "nope.txt")


def test_load_cookies_from_file(tmp_path):
    path = tmp_path / "cookies.txt"
    path.write_text('"sid=a"\nsid=b\n', encoding="utf-8")
    assert load_cookies(path) == {Side.A: "sid=a", Side.B: "sid=b"}
