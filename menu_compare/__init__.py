"""Navigation menu comparator
Fetches paired URLs with browser-like sessions and diffs their menus
"""

__version__ = "0.3.0"

from .compare import PairComparator, compare_strings
from .exceptions import (
    CredentialsError,
    InputFileError,
    InvalidUrlPairError,
    LoginFormNotFoundError,
    MenuCompareError,
)
from .extract import extract_anchor_texts, extract_container
from .fetcher import PageFetcher, fetch_html
from .headers import build_headers, compute_sec_fetch_site
from .login import LoginPageDetector
from .models import FetchOptions, FlowState, NormalizedResponse, PairResult, Side
from .orchestrator import AuthFlowOrchestrator
from .session_store import SessionHandle, SessionStore

__all__ = [
    "__version__",
    "AuthFlowOrchestrator",
    "CredentialsError",
    "FetchOptions",
    "FlowState",
    "InputFileError",
    "InvalidUrlPairError",
    "LoginFormNotFoundError",
    "LoginPageDetector",
    "MenuCompareError",
    "NormalizedResponse",
    "PageFetcher",
    "PairComparator",
    "PairResult",
    "SessionHandle",
    "SessionStore",
    "Side",
    "build_headers",
    "compare_strings",
    "compute_sec_fetch_site",
    "extract_anchor_texts",
    "extract_container",
    "fetch_html",
]
