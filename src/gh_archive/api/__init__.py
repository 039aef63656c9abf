"""GitHub REST API access."""

from .client import APIResponse, GitHubClient, GitHubClientFactory
from .exceptions import (
    GitHubAPIError,
    GitHubAuthenticationError,
    GitHubNotFoundError,
    GitHubPermissionError,
    GitHubRateLimitError,
    GitHubTransientError,
)

__all__ = [
    'APIResponse',
    'GitHubClient',
    'GitHubClientFactory',
    'GitHubAPIError',
    'GitHubAuthenticationError',
    'GitHubNotFoundError',
    'GitHubPermissionError',
    'GitHubRateLimitError',
    'GitHubTransientError',
]
