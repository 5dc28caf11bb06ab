"""
Command-line interface for ghlink.
"""

import click
import json
import sys
import traceback
from typing import Optional, Dict, Any, List
from pathlib import Path

import yaml

from . import __version__
from .config import AppConfig, ConfigManager
from .error_handling import user_message
from .error_handling.error_handler import (
    AUTH_FAILED_MESSAGE, REPO_NOT_FOUND_MESSAGE, NO_PERMISSION_MESSAGE
)
from .logging import LoggerConfig, setup_logging, verbosity_to_level
from .models import ConnectionState, ConnectionStatus, LinkType, RegistryEntry, ShortLink
from .shortener import ShortenerService, format_file_size


@click.group()
@click.version_option(version=__version__)
@click.option(
    '--config', '-c',
    type=click.Path(dir_okay=False, path_type=Path),
    help='Path to the settings file (default: $GHLINK_CONFIG or ~/.config/ghlink/config.yaml)'
)
@click.option(
    '--verbose', '-v',
    count=True,
    help='Increase verbosity (use -v or -vv)'
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: int) -> None:
    """
    ghlink - short URLs stored in your own GitHub repository.

    Links are either redirects to any URL or PDFs uploaded to the
    repository. The repository is typically published with GitHub Pages.
    """
    ctx.ensure_object(dict)

    setup_logging(LoggerConfig(level=verbosity_to_level(verbose)))

    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose


def load_app_config(ctx: click.Context) -> AppConfig:
    """Load configuration and apply its logging section."""
    manager = ConfigManager(ctx.obj.get('config_file'))
    ctx.obj['config_manager'] = manager
    config = manager.get_config()

    verbose = ctx.obj.get('verbose', 0)
    level = verbosity_to_level(verbose, default=config.logging.level)
    setup_logging(LoggerConfig.from_app_config(config.logging, level=level))
    return config


def make_service(ctx: click.Context, config: AppConfig) -> ShortenerService:
    return ShortenerService(config, session=ctx.obj.get('session'))


def fail(ctx: click.Context, error: Exception) -> None:
    """Report an error and exit with status 1."""
    click.echo(f"Error: {user_message(error)}", err=True)
    if ctx.obj.get('verbose', 0) > 1:
        traceback.print_exc()
    sys.exit(1)


@cli.group()
def settings() -> None:
    """Show or change the GitHub settings."""


@settings.command('show')
@click.option(
    '--format', '-f', 'output_format',
    type=click.Choice(['table', 'json', 'yaml'], case_sensitive=False),
    default='table',
    help='Output format'
)
@click.option('--show-token', is_flag=True, help='Print the token instead of masking it')
@click.pass_context
def settings_show(ctx: click.Context, output_format: str, show_token: bool) -> None:
    """
    Display the effective configuration.

    Includes defaults, settings file values and environment overrides.
    """
    try:
        config = load_app_config(ctx)
        config_dict = config.to_dict()
        if config_dict['github'].get('token') and not show_token:
            config_dict['github']['token'] = '*' * 8

        output_format = output_format.lower()
        if output_format == 'json':
            click.echo(json.dumps(config_dict, indent=2, default=str))
        elif output_format == 'yaml':
            click.echo(yaml.safe_dump(config_dict, default_flow_style=False), nl=False)
        else:
            display_config_table(config_dict, ctx.obj['config_manager'].config_file)
    except Exception as e:
        fail(ctx, e)


@settings.command('set')
@click.option('--token', help='GitHub personal access token (needs the repo scope)')
@click.option('--username', help='GitHub user or organization owning the repository')
@click.option('--repo', help='Repository the links are stored in')
@click.option('--custom-domain', help='Custom domain of the GitHub Pages site ("" to clear)')
@click.option(
    '--backend',
    type=click.Choice(['json', 'folder'], case_sensitive=False),
    help='Registry layout: database.json, or one folder per slug'
)
@click.pass_context
def settings_set(
    ctx: click.Context,
    token: Optional[str],
    username: Optional[str],
    repo: Optional[str],
    custom_domain: Optional[str],
    backend: Optional[str]
) -> None:
    """
    Save GitHub settings to the settings file.

    Only the options given are changed. Pass an empty string to clear a value.
    """
    updates = {
        'github.token': token,
        'github.username': username,
        'github.repo': repo,
        'github.custom_domain': custom_domain,
        'registry.backend': backend.lower() if backend else backend,
    }
    updates = {name: value for name, value in updates.items() if value is not None}
    if not updates:
        raise click.UsageError("Nothing to save; pass at least one option.")

    try:
        manager = ConfigManager(ctx.obj.get('config_file'))
        path = manager.save_settings(updates)
        config = manager.reload_config()

        if config.github.has_credentials:
            click.echo("GitHub settings saved ✅")
        else:
            click.echo(f"Settings saved to {path}")
    except Exception as e:
        fail(ctx, e)


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """
    Check the connection to the configured repository.

    Verifies that the token is valid, the repository exists and the token
    can push to it.
    """
    try:
        config = load_app_config(ctx)
        service = make_service(ctx, config)
        status = service.check_connection()
    except Exception as e:
        fail(ctx, e)
        return

    display_connection_status(status, service)
    if not status.ok:
        sys.exit(1)


@cli.command()
@click.argument('url')
@click.option('--slug', '-s', help='Custom ID (random if omitted)')
@click.pass_context
def shorten(ctx: click.Context, url: str, slug: Optional[str]) -> None:
    """
    Create a short URL redirecting to URL.

    Without a token the entry cannot be saved automatically; a fragment to
    add to database.json by hand is printed instead.

    Examples:

        ghlink shorten https://example.com/some/long/path

        ghlink shorten https://example.com --slug launch
    """
    try:
        config = load_app_config(ctx)
        service = make_service(ctx, config)

        if not service.has_credentials and config.registry.backend == 'json':
            new_slug, fragment = service.manual_entry(url, slug)
            click.echo("No token is configured, so the link cannot be saved automatically.")
            click.echo(f"Add the following to {config.registry.database_path} by hand:\n")
            click.echo(fragment)
            click.echo(f"\nShort URL once added: {service.base_url}/{new_slug}")
            return

        link = service.shorten_url(url, slug)
        display_link(link)
    except Exception as e:
        fail(ctx, e)


@cli.command()
@click.argument('file', type=click.Path(dir_okay=False, path_type=Path))
@click.option('--slug', '-s', help='Custom ID (random if omitted)')
@click.pass_context
def upload(ctx: click.Context, file: Path, slug: Optional[str]) -> None:
    """
    Upload a PDF to the repository and create a short URL for it.
    """
    try:
        config = load_app_config(ctx)
        service = make_service(ctx, config)
        link = service.upload_pdf(file, slug)
        click.echo(f"Uploaded {file.name} ({format_file_size(file.stat().st_size)})")
        display_link(link)
    except Exception as e:
        fail(ctx, e)


@cli.command(name='list')
@click.option(
    '--format', '-f', 'output_format',
    type=click.Choice(['table', 'json'], case_sensitive=False),
    default='table',
    help='Output format'
)
@click.pass_context
def list_links(ctx: click.Context, output_format: str) -> None:
    """
    List created short URLs, newest first.
    """
    try:
        config = load_app_config(ctx)
        service = make_service(ctx, config)
        entries = service.list_links()

        if output_format.lower() == 'json':
            rows = [entry_to_row(entry, service.short_url(entry.slug)) for entry in entries]
            click.echo(json.dumps(rows, indent=2, ensure_ascii=False))
        else:
            display_history(entries, service)
    except Exception as e:
        fail(ctx, e)


@cli.command()
@click.argument('slug')
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation')
@click.option('--purge', is_flag=True, help='Also delete the uploaded PDF')
@click.pass_context
def delete(ctx: click.Context, slug: str, yes: bool, purge: bool) -> None:
    """
    Delete the short URL SLUG.
    """
    try:
        config = load_app_config(ctx)
        service = make_service(ctx, config)
    except Exception as e:
        fail(ctx, e)
        return

    if not yes:
        prompt = f'Delete "{slug}"?'
        if config.registry.backend == 'json' and not purge:
            prompt += " (uploaded PDFs are kept; use --purge to remove them)"
        click.confirm(prompt, abort=True)

    try:
        entry = service.delete_link(slug, purge=purge)
        click.echo(f'Deleted "{entry.slug}"')
    except Exception as e:
        fail(ctx, e)


def entry_to_row(entry: RegistryEntry, short_url: str) -> Dict[str, Any]:
    row = {'slug': entry.slug}
    row.update(entry.to_dict())
    row['short_url'] = short_url
    return row


def format_entry_date(entry: RegistryEntry) -> str:
    """Local date as YYYY/MM/DD, or '-' when the entry has no timestamp."""
    created_at = entry.created_at
    if created_at is None:
        return "-"
    return created_at.astimezone().strftime("%Y/%m/%d")


def display_link(link: ShortLink) -> None:
    """Display a newly created link."""
    click.echo("Short URL created successfully!")
    click.echo(f"  {link.short_url}")
    click.echo(f"  -> {link.target}")


def display_history(entries: List[RegistryEntry], service: ShortenerService) -> None:
    """Display the link history as a table."""
    if not entries:
        click.echo("No short URLs have been created yet")
        return

    slug_width = max(len(entry.slug) for entry in entries)
    for entry in entries:
        badge = "PDF" if entry.type is LinkType.PDF else "URL"
        click.echo(
            f"[{badge}] {entry.slug.ljust(slug_width)}  {format_entry_date(entry)}  "
            f"{service.short_url(entry.slug)}"
        )


def display_connection_status(status: ConnectionStatus, service: ShortenerService) -> None:
    """Display a connection check result."""
    click.echo(f"Status: {status.label}")

    details = {
        ConnectionState.NOT_CONFIGURED: "Set a token, username and repository with 'ghlink settings set'.",
        ConnectionState.NO_PERMISSION: NO_PERMISSION_MESSAGE,
        ConnectionState.REPO_NOT_FOUND: REPO_NOT_FOUND_MESSAGE,
        ConnectionState.AUTH_FAILED: AUTH_FAILED_MESSAGE,
    }
    detail = details.get(status.state) or status.message
    if detail:
        click.echo(detail, err=not status.ok)

    if status.ok:
        click.echo(f"Links will be created under {service.slug_prefix}")


def display_config_table(config_dict: Dict[str, Any], config_file: Path) -> None:
    """Display configuration in table format."""
    click.echo(f"Settings file: {config_file}")
    click.echo("-" * 50)

    for section_name, section in config_dict.items():
        click.echo(f"\n[{section_name}]")
        for key, value in section.items():
            click.echo(f"  {key}: {'' if value is None else value}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
