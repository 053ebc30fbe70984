"""Custom exception classes for the menu comparator"""


class MenuCompareError(Exception):
    """Base exception for comparator errors"""

    pass


class InputFileError(MenuCompareError):
    """Raised when a required input file is missing or unreadable"""

    pass


class InvalidUrlPairError(MenuCompareError):
    """Raised for a malformed or non-HTTPS line in the URLs file"""

    def __init__(self, message: str, line: str = ""):
        self.line = line
        super().__init__(message)


class CredentialsError(MenuCompareError):
    """Raised when a credentials line is not 'username password'"""

    pass


class LoginFormNotFoundError(MenuCompareError):
    """Raised when a login page carries no primary login form"""

    pass


class RetryableStatusError(MenuCompareError):
    """Raised by the transport layer when a response status is worth retrying

    Carries the response so the caller can still use it once retries run out.
    """

    def __init__(self, response):
        self.response = response
        super().__init__(f"Retryable HTTP status {response.status_code}")
