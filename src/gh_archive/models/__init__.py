"""Data models for repositories and pipeline runs."""

from .repository import (
    InvalidIdentifierError,
    RepositoryRef,
    parse_repository_identifier,
    validate_destination_url,
)
from .migration import (
    Cancelled,
    Completed,
    ErrorKind,
    Failed,
    MigrationRequest,
    PipelineOutcome,
    State,
)

__all__ = [
    'InvalidIdentifierError',
    'RepositoryRef',
    'parse_repository_identifier',
    'validate_destination_url',
    'Cancelled',
    'Completed',
    'ErrorKind',
    'Failed',
    'MigrationRequest',
    'PipelineOutcome',
    'State',
]
