"""Data models and enums for the menu comparator"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional

import httpx

if TYPE_CHECKING:
    from .login import LoginPageDetector
    from .session_store import SessionHandle


class Side(Enum):
    """Which half of a URL pair a fetch belongs to"""

    A = "A"  # Reference
    B = "B"  # Candidate


class FlowState(Enum):
    """States of the redirect/login orchestration loop"""

    REQUESTING = "requesting"
    REDIRECT = "redirect"
    LOGIN_DETECTED = "login_detected"
    TERMINAL_SUCCESS = "terminal_success"
    TERMINAL_ERROR = "terminal_error"


class ErrorType(Enum):
    """Error categories for transport retry handling"""

    TRANSIENT = "transient"  # Retry with backoff
    PERMANENT = "permanent"  # Don't retry


@dataclass
class FetchOptions:
    """Per-request options for the fetch facade.

    ``session`` takes precedence over the raw ``cookie`` string. Without a
    session the auth flow still runs, against a throwaway jar.
    """

    cookie: str = ""
    session: Optional["SessionHandle"] = None
    timeout: float = 15.0
    max_retries: int = 0
    insecure: bool = False
    referer: str = ""
    enable_auth_flow: bool = False
    username: str = ""
    password: str = ""
    login_detector: Optional["LoginPageDetector"] = None

    def __post_init__(self):
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if bool(self.username) != bool(self.password):
            raise ValueError("username and password must be given together")

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)


@dataclass
class FetchError:
    """Machine code and message of a transport failure"""

    code: str
    message: str


@dataclass
class FlowFlags:
    """Monotonic flags collected during one orchestration call"""

    auth_flow_occurred: bool = False
    login_occurred: bool = False

    def mark_redirect(self) -> None:
        self.auth_flow_occurred = True

    def mark_login(self) -> None:
        self.login_occurred = True


@dataclass
class NormalizedResponse:
    """Single result shape for every fetch outcome"""

    ok: bool
    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: str = ""
    request_headers_used: Dict[str, str] = field(default_factory=dict)
    auth_flow_occurred: bool = False
    login_occurred: bool = False
    error: Optional[FetchError] = None
    url: str = ""

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    def failure_detail(self) -> str:
        """Status plus error code/message, as shown in FAIL reasons"""
        detail = str(self.status_code)
        if self.status_code == 0 and self.error:
            extra = f"{self.error.code} {self.error.message}".strip()
            if extra:
                detail = f"{detail} {extra}"
        return detail


@dataclass
class LoginForm:
    """Login form fields scraped from a login page"""

    submit_url: str
    hidden_fields: Dict[str, str] = field(default_factory=dict)
    username_field: str = "username"
    password_field: str = "password"


@dataclass
class ContainerExtract:
    """Inner markup of the menu container, or a missing marker"""

    missing: bool
    inner_html: str = ""


@dataclass
class PairResult:
    """Outcome of comparing one URL pair"""

    index: int
    url_a: str
    url_b: str
    passed: bool
    reason: str
    diff: str = ""
    retried_sides: List[str] = field(default_factory=list)
    auth_flow_occurred: bool = False


@dataclass
class RunSummary:
    """Aggregate counts for a run"""

    total: int
    passed: int
    failed: int

    @classmethod
    def from_results(cls, results: List[PairResult]) -> "RunSummary":
        passed = sum(1 for r in results if r.passed)
        return cls(total=len(results), passed=passed, failed=len(results) - passed)
