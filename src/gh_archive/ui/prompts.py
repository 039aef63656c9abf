"""Interactive prompts."""

from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt


class Prompter:
    """Asks the user yes/no and free-text questions on the console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def confirm(self, message: str, default: bool = False) -> bool:
        return Confirm.ask(message, default=default, console=self.console)

    def ask(self, message: str, password: bool = False) -> str:
        return Prompt.ask(message, password=password, console=self.console)

    def ask_valid(
        self,
        message: str,
        validate: Callable[[str], Optional[str]],
        password: bool = False,
    ) -> str:
        """Ask until `validate` returns no error message for the answer."""
        while True:
            answer = self.ask(message, password=password)
            error = validate(answer)
            if error is None:
                return answer
            self.console.print(f'[red]{escape(error)}[/red]')
