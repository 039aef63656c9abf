"""GitHub API exceptions."""

from typing import Optional


class GitHubAPIError(Exception):
    """Base exception for GitHub API errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[dict] = None,
    ):
        """Initialize GitHub API error.

        Args:
            message: Error message
            status_code: HTTP status code
            response_data: Response data from API
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class GitHubAuthenticationError(GitHubAPIError):
    """Authentication error with GitHub API."""

    pass


class GitHubPermissionError(GitHubAPIError):
    """Permission denied error."""

    pass


class GitHubNotFoundError(GitHubAPIError):
    """Resource not found error."""

    pass


class GitHubTransientError(GitHubAPIError):
    """Network failure or server error worth retrying later."""

    pass


class GitHubRateLimitError(GitHubTransientError):
    """Rate limit exceeded error."""

    def __init__(self, message: str, retry_after: int = 60, **kwargs):
        """Initialize rate limit error.

        Args:
            message: Error message
            retry_after: Seconds to wait before retry
            **kwargs: Additional arguments for base class
        """
        super().__init__(message, **kwargs)
        self.retry_after = retry_after
