"""Temporary staging directories for mirror clones."""

import os
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from loguru import logger

from .exceptions import StagingUnavailableError


@dataclass
class StagingHandle:
    """Ownership token for one staging directory."""

    path: Path
    released: bool = False

    @property
    def mirror_path(self) -> Path:
        """Location of the bare mirror inside the staging directory."""
        return self.path / 'mirror.git'


class StagingArea:
    """Creates and removes process-private staging directories."""

    def __init__(self, base_dir: Optional[str] = None, prefix: str = 'gh_archive_'):
        """Initialize staging area.

        Args:
            base_dir: Parent directory for staging directories; defaults to
                the platform temp root
            prefix: Directory name prefix
        """
        self.base_dir = base_dir
        self.prefix = prefix
        self.logger = logger.bind(component='StagingArea')

    def acquire(self) -> StagingHandle:
        """Create a fresh, uniquely named staging directory.

        Raises:
            StagingUnavailableError: If the directory cannot be created
        """
        try:
            if self.base_dir:
                base_dir = Path(self.base_dir)
                base_dir.mkdir(parents=True, exist_ok=True)
                temp_dir = tempfile.mkdtemp(prefix=self.prefix, dir=base_dir)
            else:
                temp_dir = tempfile.mkdtemp(prefix=self.prefix)
        except OSError as e:
            raise StagingUnavailableError(
                f'Cannot create staging directory: {e}'
            ) from e

        self.logger.info(f'Created staging directory: {temp_dir}')
        return StagingHandle(path=Path(temp_dir))

    def release(self, handle: StagingHandle) -> None:
        """Remove the staging directory. Never raises."""
        if handle.released:
            self.logger.debug(f'Staging directory already released: {handle.path}')
            return
        handle.released = True

        try:
            if os.path.exists(handle.path):
                shutil.rmtree(handle.path)
            self.logger.info(f'Cleaned up staging directory: {handle.path}')
        except OSError as e:
            self.logger.warning(
                f'Failed to cleanup staging directory {handle.path}: {e}'
            )

    @contextmanager
    def session(self) -> Iterator[StagingHandle]:
        """Acquire a staging directory and release it on every exit path."""
        handle = self.acquire()
        try:
            yield handle
        finally:
            self.release(handle)
