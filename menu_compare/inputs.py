"""Parsing of the URL pair, cookie and credentials input files"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .exceptions import CredentialsError, InputFileError, InvalidUrlPairError
from .models import Side

_HTTPS = re.compile(r"^https://", re.IGNORECASE)


def read_text_file(path: Path, label: str) -> str:
    """Read an input file, turning OS errors into ``InputFileError``"""
    if not path.exists():
        raise InputFileError(f"Missing {label} file: {path}")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputFileError(f"Cannot read {label} file {path}: {e}") from e


def parse_url_pairs(text: str) -> List[Tuple[str, str]]:
    """
    Parse ``urlA, urlB`` lines. Blank lines and ``#`` comments are skipped;
    anything after the first comma belongs to URL B.

    Raises:
        InvalidUrlPairError: On a line without a comma or a non-HTTPS URL
    """
    pairs = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        url_a, sep, rest = line.partition(",")
        if not sep:
            raise InvalidUrlPairError(f'Invalid line (expected "urlA, urlB"): {line}', line)
        url_a, url_b = url_a.strip(), rest.strip()
        if not _HTTPS.match(url_a) or not _HTTPS.match(url_b):
            raise InvalidUrlPairError(f"Only HTTPS URLs are supported. Offending line: {line}", line)
        pairs.append((url_a, url_b))
    return pairs


def clean_cookie_string(value: str) -> str:
    """Trim and drop quotes wrapping the whole cookie string"""
    s = (value or "").strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        s = s[1:-1]
    return s.strip()


def parse_cookies_text(text: str) -> Dict[Side, str]:
    """Line 1 is side A, line 2 side B (falling back to A when blank)"""
    lines = [line.strip() for line in text.splitlines()]
    cookie_a = clean_cookie_string(lines[0] if lines else "")
    cookie_b = clean_cookie_string(lines[1] if len(lines) > 1 else "")
    return {Side.A: cookie_a, Side.B: cookie_b or cookie_a}


def _parse_credentials_line(line: str, number: int) -> Optional[Tuple[str, str]]:
    line = line.strip()
    if not line:
        return None
    parts = line.split(None, 1)
    if len(parts) != 2:
        raise CredentialsError(f"Credentials line {number} must be 'username password'")
    return parts[0], parts[1].strip()


def parse_credentials_text(text: str) -> Dict[Side, Optional[Tuple[str, str]]]:
    """Line 1 is side A, line 2 side B (falling back to A when blank)"""
    lines = text.splitlines()
    creds_a = _parse_credentials_line(lines[0], 1) if lines else None
    creds_b = _parse_credentials_line(lines[1], 2) if len(lines) > 1 else None
    return {Side.A: creds_a, Side.B: creds_b or creds_a}


def load_url_pairs(path: Path) -> List[Tuple[str, str]]:
    return parse_url_pairs(read_text_file(path, "urls"))


def load_cookies(path: Path) -> Dict[Side, str]:
    return parse_cookies_text(read_text_file(path, "cookies"))


def load_credentials(path: Path) -> Dict[Side, Optional[Tuple[str, str]]]:
    return parse_credentials_text(read_text_file(path, "credentials"))
