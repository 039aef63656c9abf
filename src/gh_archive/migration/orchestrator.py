"""Drives the archive and migrate pipelines."""

from typing import Optional

from loguru import logger
from rich.console import Console
from rich.markup import escape

from ..api.client import GitHubClient
from ..api.exceptions import (
    GitHubAPIError,
    GitHubAuthenticationError,
    GitHubNotFoundError,
    GitHubPermissionError,
    GitHubRateLimitError,
    GitHubTransientError,
)
from ..git.exceptions import (
    CloneFailedError,
    GitTransferError,
    PushFailedError,
    StagingUnavailableError,
)
from ..git.staging import StagingArea
from ..git.transfer import GitTransfer, mask_credentials
from ..models.migration import (
    Cancelled,
    Completed,
    ErrorKind,
    Failed,
    MigrationRequest,
    PipelineOutcome,
    State,
)
from ..models.repository import (
    InvalidIdentifierError,
    RepositoryRef,
    parse_repository_identifier,
    validate_destination_url,
)
from .gate import ConfirmationGate
from .state import Event, Flow, transition

PIPELINE_ERRORS = (
    GitHubAPIError,
    GitTransferError,
    StagingUnavailableError,
    InvalidIdentifierError,
)


def classify_error(error: Exception) -> ErrorKind:
    """Map a pipeline exception to its error kind."""
    if isinstance(error, InvalidIdentifierError):
        return ErrorKind.INVALID_IDENTIFIER
    if isinstance(error, (GitHubAuthenticationError, GitHubPermissionError)):
        return ErrorKind.UNAUTHORIZED
    if isinstance(error, GitHubNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(error, GitHubTransientError):
        return ErrorKind.TRANSIENT
    if isinstance(error, CloneFailedError):
        return ErrorKind.CLONE_FAILED
    if isinstance(error, PushFailedError):
        return ErrorKind.PUSH_FAILED
    if isinstance(error, StagingUnavailableError):
        return ErrorKind.STAGING_UNAVAILABLE
    if isinstance(error, GitHubAPIError):
        return ErrorKind.API_ERROR
    raise TypeError(f'Not a pipeline error: {error!r}')


class PipelineRun:
    """Current state of one pipeline run."""

    def __init__(self, flow: Flow):
        self.flow = flow
        self.state = State.START
        # State the step in progress will produce; named in failures
        self.attempting = State.IDENTIFIER_RESOLVED

    def advance(self, event: Event) -> State:
        self.state = transition(self.flow, self.state, event)
        logger.bind(component='PipelineRun').debug(
            f'{self.flow.value}: {event.value} -> {self.state.value}'
        )
        return self.state

    def cancel(self) -> Cancelled:
        at_step = self.state
        self.advance(Event.DECLINED)
        return Cancelled(at_step=at_step)

    def fail(
        self, cause: ErrorKind, message: str, step: Optional[State] = None
    ) -> Failed:
        step = step or self.attempting
        self.advance(Event.FAILED)
        return Failed(step=step, cause=cause, message=message)


class MigrationOrchestrator:
    """Sequences access checks, confirmations, transfer and deletion."""

    def __init__(
        self,
        client: GitHubClient,
        transfer: GitTransfer,
        staging: StagingArea,
        gate: ConfirmationGate,
        console: Optional[Console] = None,
        host: str = 'github.com',
    ):
        """Initialize migration orchestrator.

        Args:
            client: GitHub API client
            transfer: Git mirror transfer engine
            staging: Staging directory manager
            gate: Confirmation prompts
            console: Console for progress output
            host: Git host used to build source clone URLs
        """
        self.client = client
        self.transfer = transfer
        self.staging = staging
        self.gate = gate
        self.console = console or Console()
        self.host = host
        self.logger = logger.bind(component='MigrationOrchestrator')

    async def run_archive(self, identifier: str) -> PipelineOutcome:
        """Mark a repository archived after confirmation.

        Args:
            identifier: Repository URL or owner/name

        Returns:
            Outcome of the run
        """
        run = PipelineRun(Flow.ARCHIVE)

        try:
            ref = self._resolve(run, identifier)

            access_failure = await self._verify_access(run, ref)
            if access_failure:
                return access_failure

            if await self.client.is_archived(ref):
                run.advance(Event.ALREADY_ARCHIVED)
                if not self.gate.confirm_already_archived(ref):
                    return run.cancel()

            if not self.gate.confirm_archive(ref):
                return run.cancel()
            run.advance(Event.CONFIRMED)

            run.attempting = State.ARCHIVED
            self.console.print('\n📦 Archiving repository...')
            await self.client.set_archived(ref, True)
            run.advance(Event.ARCHIVED)

        except PIPELINE_ERRORS as e:
            return self._failed(run, e)

        run.advance(Event.FINISHED)
        self.logger.info(f'Archived {ref.full_name}')
        return Completed(deleted=False)

    async def run_migrate(
        self,
        identifier: str,
        destination_url: str,
        delete_source_after: bool = False,
    ) -> PipelineOutcome:
        """Mirror a repository to another remote, optionally deleting the source.

        Args:
            identifier: Repository URL or owner/name
            destination_url: Destination git remote
            delete_source_after: Delete the GitHub repository after a
                successful push

        Returns:
            Outcome of the run

        Raises:
            ValueError: If the destination URL is malformed
        """
        destination_url = validate_destination_url(destination_url)
        run = PipelineRun(
            Flow.MIGRATE_AND_DELETE if delete_source_after else Flow.MIGRATE
        )

        try:
            ref = self._resolve(run, identifier)

            access_failure = await self._verify_access(run, ref)
            if access_failure:
                return access_failure

            if not self.gate.confirm_migration(
                ref, destination_url, delete_source_after
            ):
                return run.cancel()
            run.advance(Event.CONFIRMED)

            request = MigrationRequest(
                source=ref,
                destination_url=destination_url,
                delete_source_after=delete_source_after,
            )
            deleted = await self._transfer(run, request)

        except PIPELINE_ERRORS as e:
            return self._failed(run, e)

        run.advance(Event.FINISHED)
        return Completed(deleted=deleted)

    def _resolve(self, run: PipelineRun, identifier: str) -> RepositoryRef:
        ref = parse_repository_identifier(identifier, host=self.host)
        run.advance(Event.RESOLVED)
        self.console.print(f'\n📦 Repository: [bold]{ref.full_name}[/bold]')
        return ref

    async def _verify_access(
        self, run: PipelineRun, ref: RepositoryRef
    ) -> Optional[Failed]:
        """Stop the run unless the repository is reachable with the token."""
        run.attempting = State.ACCESS_VERIFIED
        self.console.print('🔍 Verifying repository access...')

        if not await self.client.repository_exists(ref):
            self.logger.error(f'Repository {ref.full_name} is not accessible')
            return run.fail(
                ErrorKind.NOT_FOUND,
                f'Unable to access repository {ref.full_name}. Please check that '
                'the repository exists and you have the necessary permissions.',
            )

        run.advance(Event.ACCESS_GRANTED)
        return None

    async def _transfer(self, run: PipelineRun, request: MigrationRequest) -> bool:
        """Clone, push and optionally delete inside one staging directory.

        Returns:
            Whether the source repository was deleted
        """
        ref = request.source
        destination = escape(mask_credentials(request.destination_url))

        run.attempting = State.STAGED
        self.console.print('\n📥 Creating temporary workspace...')
        with self.staging.session() as handle:
            run.advance(Event.STAGED)
            self.console.print(f'   Temporary directory: {handle.path}')

            run.attempting = State.CLONED
            self.console.print('\n📥 Cloning repository from GitHub...')
            await self.transfer.mirror_clone(ref.clone_url(self.host), handle)
            run.advance(Event.CLONED)
            self.console.print('   [green]✓[/green] Repository cloned')

            run.attempting = State.PUSHED
            self.console.print(f'\n📤 Pushing to {destination}...')
            await self.transfer.mirror_push(handle, request.destination_url)
            run.advance(Event.PUSHED)
            self.console.print('   [green]✓[/green] Successfully pushed to destination')

            if not request.delete_source_after:
                return False

            self.gate.confirm_deletion(ref, request.destination_url)
            run.advance(Event.DELETE_CONFIRMED)

            run.attempting = State.DELETED
            self.console.print('\n🗑  Deleting repository from GitHub...')
            await self.client.delete_repository(ref)
            run.advance(Event.DELETED)
            self.console.print('   [green]✓[/green] Repository deleted from GitHub')
            return True

    def _failed(self, run: PipelineRun, error: Exception) -> Failed:
        cause = classify_error(error)
        message = str(error)
        if isinstance(error, GitHubRateLimitError):
            message = f'{message}. Try again later.'
        if run.state is State.PUSHED or run.state is State.DELETE_CONFIRMED:
            message = (
                f'{message}. The mirror push to the destination succeeded; '
                'the source repository was not deleted.'
            )

        self.logger.error(
            f'{run.flow.value} failed at {run.attempting.value} ({cause.value}): {message}'
        )
        return run.fail(cause, message)
