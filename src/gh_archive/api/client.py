"""GitHub API client implementation."""

import asyncio
import json
import time
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urljoin

import aiohttp
import requests
from loguru import logger
from pydantic import BaseModel

from ..config.config import GitHubConfig
from ..models.repository import RepositoryRef
from .exceptions import (
    GitHubAPIError,
    GitHubAuthenticationError,
    GitHubNotFoundError,
    GitHubPermissionError,
    GitHubRateLimitError,
    GitHubTransientError,
)

API_VERSION = '2022-11-28'
USER_AGENT = 'gh-archive/0.1.0'


class APIResponse(BaseModel):
    """Standard API response wrapper."""

    status_code: int
    data: Any
    headers: Dict[str, str]
    success: bool


def _error_message(data: Any, status: int) -> str:
    if isinstance(data, dict) and data.get('message'):
        return data['message']
    if isinstance(data, str) and data:
        return f'HTTP {status}: {data}'
    return f'HTTP {status}'


def _normalize_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Lowercase header names; HTTP header names are case-insensitive."""
    return {key.lower(): value for key, value in headers.items()}


def _retry_after(headers: Mapping[str, str]) -> int:
    """Seconds until the rate limit resets, from Retry-After or X-RateLimit-Reset."""
    retry_after = headers.get('retry-after')
    if retry_after and retry_after.isdigit():
        return int(retry_after)
    reset = headers.get('x-ratelimit-reset')
    if reset and reset.isdigit():
        return max(int(reset) - int(time.time()), 0)
    return 60


def raise_for_status(status: int, headers: Mapping[str, str], data: Any) -> None:
    """Translate an HTTP error status into a GitHub API exception.

    Args:
        status: HTTP status code
        headers: Response headers
        data: Decoded response body

    Raises:
        GitHubAPIError: For any status >= 400
    """
    if status < 400:
        return

    headers = _normalize_headers(headers)
    message = _error_message(data, status)
    response_data = data if isinstance(data, dict) else None

    # GitHub reports exhausted primary rate limits as 403
    rate_limited = status == 429 or (
        status == 403 and headers.get('x-ratelimit-remaining') == '0'
    )
    if rate_limited:
        retry_after = _retry_after(headers)
        raise GitHubRateLimitError(
            f'Rate limit exceeded. Retry after {retry_after} seconds',
            retry_after=retry_after,
            status_code=status,
            response_data=response_data,
        )

    if status == 401:
        raise GitHubAuthenticationError(
            f'Authentication failed: {message}',
            status_code=status,
            response_data=response_data,
        )

    if status == 403:
        raise GitHubPermissionError(
            f'Permission denied: {message}',
            status_code=status,
            response_data=response_data,
        )

    if status == 404:
        raise GitHubNotFoundError(
            'Resource not found', status_code=status, response_data=response_data
        )

    if status >= 500:
        raise GitHubTransientError(
            f'GitHub server error: {message}',
            status_code=status,
            response_data=response_data,
        )

    raise GitHubAPIError(
        f'API request failed: {message}',
        status_code=status,
        response_data=response_data,
    )


class GitHubClient:
    """GitHub API client with token authentication."""

    def __init__(self, config: GitHubConfig):
        """Initialize GitHub client.

        Args:
            config: GitHub API configuration, including the token
        """
        if config.token is None or not config.token.get_secret_value():
            raise GitHubAuthenticationError('No authentication token provided')

        self.config = config
        self.base_url = config.api_url.rstrip('/')
        self.session = requests.Session()
        self.session.headers.update(self._default_headers())

        logger.bind(component='GitHubClient').debug(
            f'Initialized GitHub client for {config.api_url}'
        )

    @property
    def token(self) -> str:
        return self.config.token.get_secret_value()

    def _default_headers(self) -> Dict[str, str]:
        return {
            'Accept': 'application/vnd.github+json',
            'Authorization': f'Bearer {self.token}',
            'User-Agent': USER_AGENT,
            'X-GitHub-Api-Version': API_VERSION,
        }

    def _build_url(self, endpoint: str) -> str:
        """Build full API URL from endpoint.

        Args:
            endpoint: API endpoint path

        Returns:
            Full API URL
        """
        return urljoin(self.base_url + '/', endpoint.lstrip('/'))

    def _handle_response(self, response: requests.Response) -> APIResponse:
        """Handle API response and convert to standard format.

        Args:
            response: Raw HTTP response

        Returns:
            Standardized API response

        Raises:
            GitHubAPIError: For various API errors
        """
        headers = _normalize_headers(response.headers)

        try:
            data = response.json() if response.content else None
        except ValueError:
            data = response.text

        raise_for_status(response.status_code, headers, data)

        return APIResponse(
            status_code=response.status_code,
            data=data,
            headers=headers,
            success=200 <= response.status_code < 300,
        )

    async def _make_request_async(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> APIResponse:
        """Make asynchronous API request.

        Args:
            method: HTTP method
            endpoint: API endpoint
            params: Query parameters
            data: Request body data

        Returns:
            API response
        """
        url = self._build_url(endpoint)
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)

        async with aiohttp.ClientSession(
            headers=self._default_headers(), timeout=timeout
        ) as session:
            try:
                async with session.request(
                    method=method, url=url, params=params, json=data
                ) as response:
                    response_headers = _normalize_headers(response.headers)

                    response_text = await response.text()
                    try:
                        response_data = (
                            json.loads(response_text) if response_text else None
                        )
                    except ValueError:
                        response_data = response_text

                    raise_for_status(response.status, response_headers, response_data)

                    return APIResponse(
                        status_code=response.status,
                        data=response_data,
                        headers=response_headers,
                        success=200 <= response.status < 300,
                    )

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.bind(component='GitHubClient').error(
                    f'Network error during {method} {endpoint}: {e}'
                )
                raise GitHubTransientError(f'Network error: {e}')

    def get(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> APIResponse:
        """Make GET request.

        Args:
            endpoint: API endpoint
            params: Query parameters

        Returns:
            API response
        """
        url = self._build_url(endpoint)

        try:
            response = self.session.get(
                url, params=params, timeout=self.config.timeout
            )
        except requests.RequestException as e:
            logger.bind(component='GitHubClient').error(
                f'Network error during GET request: {e}'
            )
            raise GitHubTransientError(f'Network error: {e}')
        return self._handle_response(response)

    def get_paginated(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        per_page: int = 100,
        max_pages: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Get all pages of a paginated endpoint.

        Args:
            endpoint: API endpoint
            params: Query parameters
            per_page: Items per page
            max_pages: Stop after this many pages

        Returns:
            List of all items from all pages
        """
        all_items = []
        page = 1
        params = dict(params or {})
        params['per_page'] = per_page

        while True:
            params['page'] = page
            response = self.get(endpoint, params=params)

            items = response.data
            if not items:
                break

            all_items.extend(items)

            if 'rel="next"' not in response.headers.get('link', ''):
                break
            if len(items) < per_page:
                break
            if max_pages is not None and page >= max_pages:
                break

            page += 1

        logger.bind(component='GitHubClient').debug(
            f'Retrieved {len(all_items)} items from {endpoint}'
        )
        return all_items

    async def get_repository(self, ref: RepositoryRef) -> Dict[str, Any]:
        """Get repository details.

        Raises:
            GitHubNotFoundError: If the repository does not exist or is hidden
        """
        response = await self._make_request_async('GET', f'/repos/{ref.full_name}')
        return response.data

    async def repository_exists(self, ref: RepositoryRef) -> bool:
        """Check that the repository exists and is visible to the token."""
        try:
            await self.get_repository(ref)
        except GitHubNotFoundError:
            return False
        return True

    async def is_archived(self, ref: RepositoryRef) -> bool:
        """Check whether the repository is archived."""
        repository = await self.get_repository(ref)
        return bool(repository.get('archived', False))

    async def set_archived(self, ref: RepositoryRef, archived: bool = True) -> None:
        """Set or clear the repository's archived flag."""
        logger.bind(component='GitHubClient').info(
            f'Setting archived={archived} on {ref.full_name}'
        )
        await self._make_request_async(
            'PATCH', f'/repos/{ref.full_name}', data={'archived': archived}
        )

    async def delete_repository(self, ref: RepositoryRef) -> None:
        """Delete the repository. Requires the delete_repo scope."""
        logger.bind(component='GitHubClient').warning(
            f'Deleting repository {ref.full_name}'
        )
        await self._make_request_async('DELETE', f'/repos/{ref.full_name}')

    def get_authenticated_user(self) -> Dict[str, Any]:
        """Get the user the token belongs to."""
        return self.get('/user').data

    def list_repositories(self, max_pages: Optional[int] = None) -> List[Dict[str, Any]]:
        """List repositories the authenticated user can administer or push to.

        Covers owned repositories and those of organizations the user belongs
        to, most recently updated first.
        """
        return self.get_paginated(
            '/user/repos',
            params={
                'affiliation': 'owner,organization_member',
                'sort': 'updated',
                'direction': 'desc',
            },
            max_pages=max_pages,
        )

    def test_connection(self) -> bool:
        """Test that the token is accepted by GitHub.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            user = self.get_authenticated_user()
        except GitHubAPIError as e:
            logger.bind(component='GitHubClient').error(
                f'Connection test failed: {e}'
            )
            return False

        logger.bind(component='GitHubClient').debug(
            f'Authenticated as {(user or {}).get("login", "unknown")}'
        )
        return True

    def close(self):
        """Close the client session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


class GitHubClientFactory:
    """Factory for creating GitHub API clients."""

    @staticmethod
    def create_client(config: GitHubConfig) -> GitHubClient:
        """Create GitHub client from configuration.

        Args:
            config: GitHub API configuration

        Returns:
            Configured GitHub client

        Raises:
            GitHubAuthenticationError: If no token is configured
        """
        if config.token is None or not config.token.get_secret_value():
            raise GitHubAuthenticationError('A GitHub token must be provided')

        return GitHubClient(config)
