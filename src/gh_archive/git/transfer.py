"""Mirror clone and mirror push through the git executable."""

import asyncio
import os
import re
from pathlib import Path
from typing import List, Optional, Tuple, Type

from loguru import logger

from ..config.config import GitConfig
from .exceptions import CloneFailedError, GitTransferError, PushFailedError
from .staging import StagingHandle

_CREDENTIALS = re.compile(r'(://)[^/@\s]+@')


def mask_credentials(text: str) -> str:
    """Replace user info in URLs with ***."""
    return _CREDENTIALS.sub(r'\1***@', text)


def authenticated_url(url: str, token: str) -> str:
    """Embed a token into an HTTPS URL.

    https://github.com/owner/repo.git becomes
    https://x-access-token:<token>@github.com/owner/repo.git. Other URL forms
    are returned unchanged.
    """
    if url.startswith('https://') and '@' not in url.split('/', 3)[2]:
        return url.replace('https://', f'https://x-access-token:{token}@', 1)
    return url


class GitTransfer:
    """Runs mirror clone and mirror push with the git executable.

    Each operation is attempted once; any failure is fatal for the run.
    """

    def __init__(self, config: Optional[GitConfig] = None, token: Optional[str] = None):
        """Initialize git transfer.

        Args:
            config: Git configuration
            token: GitHub token embedded in source URLs when
                `config.authenticated_clone` is set
        """
        self.config = config or GitConfig()
        self._token = token
        self.logger = logger.bind(component='GitTransfer')

    async def mirror_clone(self, source_url: str, handle: StagingHandle) -> None:
        """Clone all refs of the source into the staging directory.

        Args:
            source_url: Source repository URL
            handle: Staging directory to clone into

        Raises:
            CloneFailedError: If git fails, times out or is missing
        """
        clone_url = source_url
        if self.config.authenticated_clone and self._token:
            clone_url = authenticated_url(source_url, self._token)

        self.logger.info(
            f'Mirror cloning {mask_credentials(source_url)} into {handle.mirror_path}'
        )
        await self._execute(
            ['clone', '--mirror', clone_url, str(handle.mirror_path)],
            cwd=handle.path,
            error_cls=CloneFailedError,
            action='Git clone',
        )
        self.logger.info('Mirror clone completed')

    async def mirror_push(self, handle: StagingHandle, destination_url: str) -> None:
        """Push every ref of the staged mirror to the destination.

        Args:
            handle: Staging directory holding a completed mirror clone
            destination_url: Destination repository URL

        Raises:
            PushFailedError: If nothing is staged, or git fails, times out or
                is missing
        """
        if not handle.mirror_path.is_dir():
            raise PushFailedError(
                'Git push failed', cause=f'no mirror at {handle.mirror_path}'
            )

        self.logger.info(f'Mirror pushing to {mask_credentials(destination_url)}')
        await self._execute(
            ['push', '--mirror', destination_url],
            cwd=handle.mirror_path,
            error_cls=PushFailedError,
            action='Git push',
        )
        self.logger.info('Mirror push completed')

    async def _execute(
        self,
        args: List[str],
        cwd: Path,
        error_cls: Type[GitTransferError],
        action: str,
    ) -> None:
        try:
            returncode, stdout, stderr = await self._run_git(args, cwd)
        except asyncio.TimeoutError:
            self.logger.error(f'{action} timed out after {self.config.timeout} seconds')
            raise error_cls(
                f'{action} failed',
                cause=f'timed out after {self.config.timeout} seconds',
            )
        except OSError as e:
            self.logger.error(f'{action} could not start: {e}')
            raise error_cls(
                f'{action} failed',
                cause=f'cannot run {self.config.executable}: {e}',
            )

        if returncode != 0:
            cause = mask_credentials(stderr.strip()) or 'Unknown error'
            self.logger.error(f'{action} failed with return code {returncode}: {cause}')
            raise error_cls(f'{action} failed', cause=cause, returncode=returncode)

        if stdout:
            self.logger.debug(f'Git stdout: {mask_credentials(stdout)}')

    async def _run_git(self, args: List[str], cwd: Path) -> Tuple[int, str, str]:
        """Run git and collect its output.

        Returns:
            Return code, stdout and stderr

        Raises:
            asyncio.TimeoutError: If git runs longer than the configured timeout
            OSError: If the executable cannot be started
        """
        cmd = [self.config.executable, *args]
        self.logger.debug(f'Executing git command: {mask_credentials(" ".join(cmd))}')

        # git must never block on a credential prompt
        env = dict(os.environ, GIT_TERMINAL_PROMPT='0')

        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd),
            env=env,
        )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.config.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise

        self.logger.debug(f'Git command return code: {process.returncode}')
        return (
            process.returncode,
            stdout.decode(errors='replace') if stdout else '',
            stderr.decode(errors='replace') if stderr else '',
        )
