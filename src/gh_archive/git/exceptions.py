"""Git staging and transfer exceptions."""

from typing import Optional


class GitTransferError(Exception):
    """Base exception for git transfer failures."""

    def __init__(
        self,
        message: str,
        cause: Optional[str] = None,
        returncode: Optional[int] = None,
    ):
        """Initialize transfer error.

        Args:
            message: Error message
            cause: Underlying failure (git stderr, timeout, missing executable)
            returncode: Git exit status, if the process ran
        """
        super().__init__(f'{message}: {cause}' if cause else message)
        self.cause = cause
        self.returncode = returncode


class CloneFailedError(GitTransferError):
    """Mirror clone of the source failed."""

    pass


class PushFailedError(GitTransferError):
    """Mirror push to the destination failed."""

    pass


class StagingUnavailableError(Exception):
    """The local staging directory could not be created."""

    pass
