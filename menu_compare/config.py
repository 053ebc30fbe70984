"""Configuration constants for the menu comparator"""

from pathlib import Path

# Input files
DEFAULT_URLS_FILE = Path("urls.txt")
DEFAULT_COOKIES_FILE = Path("cookies.txt")
DEFAULT_LOG_FILE = Path("./logs/menu_compare.log")
DEFAULT_REPORTS_DIR = Path("./reports")

# Pacing and timeouts
DEFAULT_PAIR_DELAY_MS = 1500  # Delay between URL pairs
DEFAULT_TIMEOUT_MS = 15000  # Per-request timeout
DEFAULT_RETRIES = 0

# Transport retry policy
RETRY_METHODS = frozenset({"GET", "HEAD"})
RETRY_STATUS_CODES = frozenset({408, 413, 429, 500, 502, 503, 504})
INITIAL_BACKOFF = 2.0
MAX_BACKOFF = 8.0
BACKOFF_MULTIPLIER = 2.0
JITTER_RANGE = (0.8, 1.2)

# Redirect / login orchestration
MAX_REDIRECTS = 10
DEFAULT_LOGIN_PATH = "/u/login"
LOGIN_FORM_SELECTOR = 'form[data-form-primary="true"]'
LOGIN_PAGE_PHRASES = ("Log in to Market Observer",)

# Content extraction
DEFAULT_CONTAINER_SELECTOR = "#dropmenu"
DISABLED_SELECTOR = ".disabled"
DISABLED_PREFIX = "[DISABLED]"
HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")

# Reporting
DIFF_CONTEXT_LINES = 2
DIFF_TRUNCATE_LINES = 200

# Browser emulation (Chromium 141 on Windows)
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/141.0.0.0 Safari/537.36"
)
ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,"
    "image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
)
ACCEPT_LANGUAGE = "en-US,en;q=0.9,ja;q=0.8,ak;q=0.7,ru;q=0.6"
SEC_CH_UA = '"Google Chrome";v="141", "Not?A_Brand";v="8", "Chromium";v="141"'
SEC_CH_UA_PLATFORM = '"Windows"'
