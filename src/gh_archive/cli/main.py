"""Main CLI entry point for gh-archive."""

import sys
import asyncio
from typing import List, Optional
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..api.client import GitHubClient, GitHubClientFactory
from ..api.exceptions import GitHubAuthenticationError
from ..config.config import Config
from ..git.staging import StagingArea
from ..git.transfer import GitTransfer
from ..migration.gate import ConfirmationGate
from ..migration.orchestrator import MigrationOrchestrator
from ..models.migration import Cancelled, Completed, Failed, PipelineOutcome
from ..models.repository import (
    InvalidIdentifierError,
    parse_repository_identifier,
    validate_destination_url,
)
from ..ui.prompts import Prompter
from ..utils.logging import setup_logging

console = Console()

DEFAULT_CONFIG_PATHS = ['gh-archive.yaml', '.gh-archive.yaml']
PICKER_MAX_PAGES = 3


@click.group()
@click.version_option(version='0.1.0', prog_name='gh-archive')
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=True),
    help='Path to configuration file',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose logging',
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """gh-archive - Archive GitHub repositories or move them to another git server."""
    ctx.ensure_object(dict)

    if config:
        ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    # Basic logging until the configuration is loaded
    setup_logging('DEBUG' if verbose else 'WARNING')


@cli.command()
@click.option(
    '--output',
    '-o',
    default='gh-archive.yaml',
    help='Output configuration file path',
)
def init(output: str) -> None:
    """Initialize a new configuration file."""
    try:
        Config.create_template(output)
        console.print(f'[green]✓[/green] Configuration template created at: {output}')
        console.print(
            '[yellow]Tokens are never stored in the file; '
            'export GITHUB_TOKEN or enter one when asked[/yellow]'
        )
    except OSError as e:
        console.print(f'[red]✗[/red] Failed to create configuration: {e}')
        sys.exit(1)


@cli.command()
@click.argument('repository', required=False)
@click.pass_context
def archive(ctx: click.Context, repository: Optional[str]) -> None:
    """Mark a GitHub repository as archived.

    REPOSITORY is owner/name or a GitHub URL; asked for when omitted.
    """
    console.print(
        Panel.fit(
            '[bold blue]🗄  Archive Mode[/bold blue]\n'
            'Mark GitHub repository as archived',
            border_style='blue',
        )
    )

    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)
        prompter = Prompter(console)

        with _authenticate(config, prompter) as client:
            identifier = _prompt_repository(
                client, prompter, repository, config.github.host
            )
            orchestrator = _build_orchestrator(config, client, prompter)
            outcome = asyncio.run(orchestrator.run_archive(identifier))

    except Exception as e:
        console.print(f'[red]✗[/red] Archive failed: {escape(str(e))}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)

    _report_outcome(outcome, 'archive')


@cli.command()
@click.argument('repository', required=False)
@click.option(
    '--destination',
    '-d',
    help='Destination git repository URL',
)
@click.option(
    '--delete-source/--keep-source',
    default=None,
    help='Delete the GitHub repository after a successful migration',
)
@click.pass_context
def migrate(
    ctx: click.Context,
    repository: Optional[str],
    destination: Optional[str],
    delete_source: Optional[bool],
) -> None:
    """Move a repository to another git server and optionally delete it from GitHub.

    REPOSITORY is owner/name or a GitHub URL; asked for when omitted.
    """
    console.print(
        Panel.fit(
            '[bold magenta]🚚 Migrate Mode[/bold magenta]\n'
            'Move repository to another git server and optionally delete from GitHub',
            border_style='magenta',
        )
    )

    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)
        prompter = Prompter(console)

        with _authenticate(config, prompter) as client:
            identifier = _prompt_repository(
                client, prompter, repository, config.github.host
            )
            destination_url = _prompt_destination(prompter, destination)
            if delete_source is None:
                delete_source = prompter.confirm(
                    'Delete repository from GitHub after successful migration? '
                    '(WARNING: This cannot be undone)',
                    default=False,
                )

            orchestrator = _build_orchestrator(config, client, prompter)
            outcome = asyncio.run(
                orchestrator.run_migrate(identifier, destination_url, delete_source)
            )

    except Exception as e:
        console.print(f'[red]✗[/red] Migration failed: {escape(str(e))}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)

    _report_outcome(outcome, 'migrate')


def _load_config(ctx: click.Context) -> Config:
    """Load configuration from file or environment."""
    config_path = ctx.obj.get('config_path')

    if config_path:
        if not Path(config_path).exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')
        return Config.from_file(config_path)

    for path in DEFAULT_CONFIG_PATHS:
        if Path(path).exists():
            return Config.from_file(path)

    return Config.from_env()


def _setup_logging_with_config(ctx: click.Context, config: Config) -> None:
    """Setup logging with configuration from config file."""
    verbose = ctx.obj.get('verbose', False)
    log_level = 'DEBUG' if verbose else config.logging.level
    setup_logging(
        level=log_level, log_file=config.logging.file, log_format=config.logging.format
    )


def _resolve_token(config: Config, prompter: Prompter) -> str:
    """Use the pre-supplied token if the user agrees, otherwise ask for one."""
    if config.github.token is not None:
        token = config.github.token.get_secret_value()
        if token and prompter.confirm(
            'Found a GitHub token in your configuration or environment. Use it?',
            default=True,
        ):
            return token

    return prompter.ask_valid(
        'Enter your GitHub personal access token',
        validate=lambda answer: None if answer.strip() else 'Token is required',
        password=True,
    ).strip()


def _authenticate(config: Config, prompter: Prompter) -> GitHubClient:
    """Create a GitHub client and check that GitHub accepts its token."""
    token = _resolve_token(config, prompter)

    console.print('🔐 Authenticating with GitHub...')
    client = GitHubClientFactory.create_client(config.github.with_token(token))
    if not client.test_connection():
        client.close()
        raise GitHubAuthenticationError('GitHub rejected the token')
    return client


def _prompt_repository(
    client: GitHubClient,
    prompter: Prompter,
    provided: Optional[str],
    host: str,
) -> str:
    """Return a parseable repository identifier, asking until there is one."""
    if provided:
        try:
            parse_repository_identifier(provided, host=host)
            return provided
        except InvalidIdentifierError as e:
            console.print(f'[red]{escape(str(e))}[/red]')

    if prompter.confirm('Pick from your list of repositories?', default=False):
        picked = _pick_repository(client, prompter)
        if picked:
            return picked

    def validate(answer: str) -> Optional[str]:
        try:
            parse_repository_identifier(answer, host=host)
        except InvalidIdentifierError:
            return 'Invalid format. Use "owner/repo" or GitHub URL'
        return None

    return prompter.ask_valid(
        'Enter GitHub repository (owner/repo or URL)', validate=validate
    ).strip()


def _pick_repository(client: GitHubClient, prompter: Prompter) -> Optional[str]:
    """Let the user choose one of their repositories by number."""
    console.print('📚 Fetching your repositories...')
    repositories: List[dict] = client.list_repositories(max_pages=PICKER_MAX_PAGES)

    if not repositories:
        console.print('[yellow]No repositories found for this token[/yellow]')
        return None

    table = Table(title='Your Repositories')
    table.add_column('#', style='cyan', justify='right')
    table.add_column('Repository', style='green')
    table.add_column('Visibility')
    table.add_column('Archived')
    for index, repo in enumerate(repositories, start=1):
        table.add_row(
            str(index),
            repo['full_name'],
            'private' if repo.get('private') else 'public',
            '✓' if repo.get('archived') else '',
        )
    console.print(table)

    def validate(answer: str) -> Optional[str]:
        if answer.strip().isdigit() and 1 <= int(answer) <= len(repositories):
            return None
        return f'Enter a number between 1 and {len(repositories)}'

    choice = prompter.ask_valid('Select a repository', validate=validate)
    return repositories[int(choice) - 1]['full_name']


def _prompt_destination(prompter: Prompter, provided: Optional[str]) -> str:
    """Return a valid destination URL, asking until there is one."""
    if provided:
        try:
            return validate_destination_url(provided)
        except ValueError as e:
            console.print(f'[red]{escape(str(e))}[/red]')

    def validate(answer: str) -> Optional[str]:
        try:
            validate_destination_url(answer)
        except ValueError as e:
            return str(e)
        return None

    return prompter.ask_valid(
        'Enter destination git repository URL', validate=validate
    ).strip()


def _build_orchestrator(
    config: Config, client: GitHubClient, prompter: Prompter
) -> MigrationOrchestrator:
    """Wire the pipeline components from configuration."""
    return MigrationOrchestrator(
        client=client,
        transfer=GitTransfer(config.git, token=client.token),
        staging=StagingArea(base_dir=config.git.temp_dir),
        gate=ConfirmationGate(prompter, console),
        console=console,
        host=config.github.host,
    )


def _report_outcome(outcome: PipelineOutcome, mode: str) -> None:
    """Print the final message and exit non-zero on failure."""
    if isinstance(outcome, Cancelled):
        console.print('\n👋 Cancelled.')
    elif isinstance(outcome, Failed):
        console.print(
            f'\n[red]✗[/red] Failed at {outcome.step.value} '
            f'({outcome.cause.value}): {escape(outcome.message or "")}'
        )
        sys.exit(outcome.exit_code)
    elif isinstance(outcome, Completed) and mode == 'archive':
        console.print('\n[green]✓[/green] Successfully archived!')
        console.print(
            '\nNote: Archived repositories are read-only. '
            'Users can still view and fork the repository.'
        )
    else:
        console.print('\n[green]✓[/green] Migration completed successfully!')
        if outcome.deleted:
            console.print('   The repository was deleted from GitHub.')
        console.print('\n📋 Next steps:')
        console.print('   1. Verify the repository at the destination')
        console.print('   2. Update any CI/CD pipelines or webhooks')
        console.print('   3. Update documentation with the new repository location')


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except Exception as e:
        console.print(f'[red]Error: {escape(str(e))}[/red]')
        sys.exit(1)


if __name__ == '__main__':
    main()
