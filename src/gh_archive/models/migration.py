"""Pipeline request and outcome models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .repository import RepositoryRef, validate_destination_url


class State(str, Enum):
    """Pipeline states, also used as step names in outcomes."""

    START = 'Start'
    IDENTIFIER_RESOLVED = 'IdentifierResolved'
    ACCESS_VERIFIED = 'AccessVerified'
    ALREADY_ARCHIVED = 'AlreadyArchived'
    CONFIRMED_INTENT = 'ConfirmedIntent'
    STAGED = 'Staged'
    CLONED = 'Cloned'
    PUSHED = 'Pushed'
    DELETE_CONFIRMED = 'DeleteConfirmed'
    DELETED = 'Deleted'
    ARCHIVED = 'Archived'
    DONE = 'Done'
    CANCELLED = 'Cancelled'
    FAILED = 'Failed'

    @property
    def is_terminal(self) -> bool:
        return self in (State.DONE, State.CANCELLED, State.FAILED)


class ErrorKind(str, Enum):
    """Classification of pipeline failures."""

    INVALID_IDENTIFIER = 'InvalidIdentifier'
    UNAUTHORIZED = 'Unauthorized'
    NOT_FOUND = 'NotFound'
    TRANSIENT = 'TransientError'
    API_ERROR = 'ApiError'
    CLONE_FAILED = 'CloneFailed'
    PUSH_FAILED = 'PushFailed'
    STAGING_UNAVAILABLE = 'StagingUnavailable'


class MigrationRequest(BaseModel):
    """Confirmed intent for one migration run."""

    model_config = ConfigDict(frozen=True)

    source: RepositoryRef = Field(..., description='Repository to migrate')
    destination_url: str = Field(..., description='Destination git remote URL')
    delete_source_after: bool = Field(
        default=False, description='Delete the source after a successful push'
    )

    @field_validator('destination_url')
    @classmethod
    def validate_destination(cls, v: str) -> str:
        return validate_destination_url(v)


@dataclass(frozen=True)
class Completed:
    """The pipeline ran to the end."""

    deleted: bool = False

    @property
    def exit_code(self) -> int:
        return 0


@dataclass(frozen=True)
class Cancelled:
    """The user declined a confirmation; `at_step` is the last state reached."""

    at_step: State

    @property
    def exit_code(self) -> int:
        return 0


@dataclass(frozen=True)
class Failed:
    """A step failed; `step` is the state that step would have produced."""

    step: State
    cause: ErrorKind
    message: Optional[str] = None

    @property
    def exit_code(self) -> int:
        return 1


PipelineOutcome = Union[Completed, Cancelled, Failed]
