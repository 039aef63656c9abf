"""Shared test fixtures."""

import io
from typing import List, Optional

import pytest
from loguru import logger
from rich.console import Console

from gh_archive.ui.prompts import Prompter


class ScriptedPrompter(Prompter):
    """Prompter answering from predefined lists instead of the terminal."""

    def __init__(
        self,
        confirms: Optional[List[bool]] = None,
        answers: Optional[List[str]] = None,
        console: Optional[Console] = None,
    ):
        super().__init__(console or Console(file=io.StringIO()))
        self.confirms = list(confirms or [])
        self.answers = list(answers or [])
        self.asked: List[str] = []

    def confirm(self, message: str, default: bool = False) -> bool:
        self.asked.append(message)
        if not self.confirms:
            raise AssertionError(f'Unexpected confirmation: {message}')
        return self.confirms.pop(0)

    def ask(self, message: str, password: bool = False) -> str:
        self.asked.append(message)
        if not self.answers:
            # Simulates the user aborting the program
            raise KeyboardInterrupt
        return self.answers.pop(0)


@pytest.fixture
def console():
    """Console writing into a buffer."""
    return Console(file=io.StringIO(), width=120)


@pytest.fixture
def output(console):
    """Text written to the console fixture so far."""
    return lambda: console.file.getvalue()


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop log handlers bound to streams that only live for one test."""
    yield
    logger.remove()
