"""Git operations module for repository migration."""

from .exceptions import (
    CloneFailedError,
    GitTransferError,
    PushFailedError,
    StagingUnavailableError,
)
from .staging import StagingArea, StagingHandle
from .transfer import GitTransfer

__all__ = [
    'CloneFailedError',
    'GitTransferError',
    'PushFailedError',
    'StagingUnavailableError',
    'StagingArea',
    'StagingHandle',
    'GitTransfer',
]
