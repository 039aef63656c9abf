"""Confirmations required before destructive steps."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..git.transfer import mask_credentials
from ..models.repository import RepositoryRef
from ..ui.prompts import Prompter


class ConfirmationGate:
    """Asks the mandatory confirmations, in order.

    Every yes/no question defaults to No. The typed deletion confirmation
    cannot be declined, only answered correctly or aborted with Ctrl-C.
    """

    def __init__(self, prompter: Prompter, console: Console):
        self.prompter = prompter
        self.console = console

    def confirm_already_archived(self, ref: RepositoryRef) -> bool:
        self.console.print(
            f'\n[yellow]⚠[/yellow]  {ref.full_name} is already archived.'
        )
        return self.prompter.confirm('Do you want to continue anyway?', default=False)

    def confirm_archive(self, ref: RepositoryRef) -> bool:
        return self.prompter.confirm(
            f'Are you sure you want to archive {ref.full_name}?', default=False
        )

    def confirm_migration(
        self, ref: RepositoryRef, destination_url: str, delete_source: bool
    ) -> bool:
        """Show the migration summary and ask to proceed."""
        table = Table(title='Migration Summary')
        table.add_column('Setting', style='cyan')
        table.add_column('Value', style='green')
        table.add_row('Source', f'{ref.full_name} (GitHub)')
        table.add_row('Destination', escape(mask_credentials(destination_url)))
        table.add_row(
            'Delete from GitHub',
            '[bold red]Yes ⚠[/bold red]' if delete_source else 'No',
        )
        self.console.print(table)

        return self.prompter.confirm('Proceed with migration?', default=False)

    def confirm_deletion(self, ref: RepositoryRef, destination_url: str) -> None:
        """Require the exact repository name before deletion.

        Re-prompts on every mismatch.
        """
        self.console.print(
            f'\n[green]✓[/green] Mirror push to {escape(mask_credentials(destination_url))} '
            'succeeded. The source repository can now be deleted.'
        )
        self.console.print(
            f'[bold red]Deleting {ref.full_name} from GitHub cannot be undone.[/bold red]'
        )

        while True:
            answer = self.prompter.ask(
                f'Type the repository name "{ref.name}" to confirm deletion'
            )
            if answer == ref.name:
                return
            self.console.print(f'[red]You must type "{ref.name}" to confirm[/red]')
