"""Repository reference model and identifier parsing."""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InvalidIdentifierError(ValueError):
    """Raised when a repository identifier cannot be parsed."""

    def __init__(self, identifier: str, message: Optional[str] = None):
        super().__init__(
            message
            or f'Invalid repository identifier "{identifier}". '
            'Use "owner/repo" or GitHub URL format.'
        )
        self.identifier = identifier


class RepositoryRef(BaseModel):
    """Reference to a repository hosted on GitHub."""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., description='Repository owner (user or organization)')
    name: str = Field(..., description='Repository name without .git suffix')

    @field_validator('owner', 'name')
    @classmethod
    def validate_segment(cls, v: str) -> str:
        """Validate a single path segment."""
        if not v or not v.strip():
            raise ValueError('must not be empty')
        if '/' in v:
            raise ValueError('must not contain "/"')
        return v

    @field_validator('name')
    @classmethod
    def strip_git_suffix(cls, v: str) -> str:
        """Drop a trailing .git suffix."""
        name = _strip_git_suffix(v)
        if not name:
            raise ValueError('must not be empty')
        return name

    @property
    def full_name(self) -> str:
        return f'{self.owner}/{self.name}'

    def clone_url(self, host: str = 'github.com') -> str:
        """Get the HTTPS clone URL for this repository on the given host."""
        return f'https://{host}/{self.owner}/{self.name}.git'

    def __str__(self) -> str:
        return self.full_name


# Characters GitHub allows in owner and repository names
_SEGMENT = re.compile(r'^[\w.-]+$')


def _strip_git_suffix(name: str) -> str:
    return name[: -len('.git')] if name.endswith('.git') else name


def _url_pattern(host: str) -> 're.Pattern[str]':
    # Matches https://host/owner/name[...], host/owner/name and git@host:owner/name
    return re.compile(rf'(?:^|[/@]){re.escape(host)}[/:]([^/\s]+)/([^/\s?#]+)')


def parse_repository_identifier(
    identifier: str, host: str = 'github.com'
) -> RepositoryRef:
    """Parse a repository URL or "owner/name" shorthand.

    Args:
        identifier: User supplied identifier
        host: Hosting service domain recognized in URLs

    Returns:
        Parsed repository reference

    Raises:
        InvalidIdentifierError: If the identifier matches neither format
    """
    value = (identifier or '').strip()

    match = _url_pattern(host).search(value)
    if match:
        owner, name = match.group(1), _strip_git_suffix(match.group(2))
        if owner and name:
            return RepositoryRef(owner=owner, name=name)
        raise InvalidIdentifierError(identifier)

    parts = [part.strip() for part in value.split('/')]
    if len(parts) == 2 and all(_SEGMENT.match(part) for part in parts):
        owner, name = parts
        if _strip_git_suffix(name):
            return RepositoryRef(owner=owner, name=name)

    raise InvalidIdentifierError(identifier)


def validate_destination_url(url: str) -> str:
    """Validate a destination git remote URL.

    Accepts URLs with a scheme (https://, ssh://, file://) and scp-like
    SSH remotes (git@host:path).

    Raises:
        ValueError: If the URL is empty or not a recognizable git remote
    """
    value = (url or '').strip()
    if not value:
        raise ValueError('Destination URL is required')
    if '://' not in value and '@' not in value:
        raise ValueError('Invalid git URL format')
    return value
