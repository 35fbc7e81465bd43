"""Main CLI entry point for caskfetch.

Provides commands to fetch artifacts with a download strategy, install or
reinstall definitions, and inspect the cache layout.
"""

import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from caskfetch.cache.config import CacheConfig, get_global_config, set_global_config
from caskfetch.cache.store import CacheStore
from caskfetch.git import repository_info
from caskfetch.models import ArtifactIdentity
from caskfetch.strategies.base import FetchStrategy
from caskfetch.strategies.registry import get_selector
from caskfetch.tasks.source_patch import schedule_source_patch
from caskfetch.utils import url_extension

# Global console for Rich output
console = Console()


def configure_logging(verbose: bool) -> None:
    """Route library logging through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Cache directory (default: ~/.caskfetch_cache or CASKFETCH_CACHE_DIR)",
)
@click.option(
    "--prefix",
    type=click.Path(file_okay=False, path_type=Path),
    help="Install prefix holding the Caskroom (default: ~/.caskfetch or CASKFETCH_PREFIX)",
)
@click.option("--category", help="Cache root category (default: Cask)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
@click.pass_context
def cli(ctx, cache_dir, prefix, category, verbose):
    """caskfetch CLI - Fetch artifacts into a shared cache.

    Configuration comes from ~/.caskfetch_cache/config.json or CASKFETCH_*
    environment variables; options here override both.
    """
    configure_logging(verbose)

    config = get_global_config()
    overrides = {}
    if cache_dir is not None:
        overrides["cache_dir"] = cache_dir
        if config.symlink_dir == config.cache_dir / "links":
            overrides["symlink_dir"] = None
    if prefix is not None:
        overrides["prefix"] = prefix
    if category:
        overrides["category"] = category
    if verbose:
        overrides["verbose"] = True
    if overrides:
        config = replace(config, **overrides)
        set_global_config(config)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


FETCH_OPTIONS = [
    click.option("--url", "-u", required=True, help="Download URL"),
    click.option("--version", "artifact_version", required=True, help="Artifact version"),
    click.option(
        "--strategy",
        "-s",
        "strategy_tag",
        default="curl",
        show_default=True,
        help="Download strategy tag",
    ),
    click.option("--sha256", help="Expected archive checksum"),
    click.option("--password", help="Archive password"),
    click.option("--archive-name", help="Archive basename (without .zip)"),
    click.option("--timeout", type=float, help="Download timeout in seconds"),
]


def fetch_options(func):
    """Options shared by fetch, install and reinstall."""
    for option in reversed(FETCH_OPTIONS):
        func = option(func)
    return func


def run_fetch(
    config: CacheConfig,
    url: str,
    name: str,
    version: str,
    strategy_tag: str,
    sha256: Optional[str] = None,
    password: Optional[str] = None,
    archive_name: Optional[str] = None,
    timeout: Optional[float] = None,
) -> FetchStrategy:
    """Resolve a strategy for ``strategy_tag`` and run its fetch."""
    meta = {
        key: value
        for key, value in (
            ("sha256", sha256),
            ("password", password),
            ("name", archive_name),
            ("url", url),
        )
        if value
    }
    strategy_cls = get_selector().resolve(strategy_tag)
    strategy = strategy_cls(url, name, version, meta=meta, config=config)
    strategy.fetch(timeout=timeout)
    return strategy


def print_result(strategy: FetchStrategy) -> None:
    location = strategy.location
    console.print(
        f"[green]✓[/green] Fetched '{strategy.identity.slug}' "
        f"with {type(strategy).__name__}"
    )
    console.print(f"  Cached: {location.cached_path}", soft_wrap=True)
    if location.symlink_path.is_symlink():
        console.print(f"  Link: {location.symlink_path}", soft_wrap=True)


def fail(error: Exception) -> None:
    console.print(f"[red]✗[/red] Error: {error}", style="red")
    sys.exit(1)


@cli.command("fetch")
@click.argument("name")
@fetch_options
@click.pass_context
def fetch(ctx, name, url, artifact_version, strategy_tag, sha256, password, archive_name, timeout):
    """Fetch an artifact into the cache.

    Example:
        caskfetch fetch firefox -u https://host/firefox.zip --version 120.0
        caskfetch fetch tool -s password_unzip --sha256 ... --password p --archive-name tool ...
    """
    try:
        strategy = run_fetch(
            ctx.obj["config"],
            url,
            name,
            artifact_version,
            strategy_tag,
            sha256=sha256,
            password=password,
            archive_name=archive_name,
            timeout=timeout,
        )
        print_result(strategy)
    except Exception as e:
        fail(e)


def _install(ctx, definition, support, url, artifact_version, strategy_tag, sha256, password, archive_name, timeout):
    config = ctx.obj["config"]
    try:
        strategy = run_fetch(
            config,
            url,
            definition.stem,
            artifact_version,
            strategy_tag,
            sha256=sha256,
            password=password,
            archive_name=archive_name,
            timeout=timeout,
        )
        print_result(strategy)
        if schedule_source_patch(
            ctx.info_name, definition, support_path=support, config=config
        ):
            console.print(
                f"  Scheduled source patch of '{definition.stem}' "
                f"in {config.patch_delay}s"
            )
    except Exception as e:
        fail(e)


definition_argument = click.argument(
    "definition", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
support_option = click.option(
    "--support",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Library the definition requires (default: its first require_relative)",
)


@cli.command("install")
@definition_argument
@support_option
@fetch_options
@click.pass_context
def install(ctx, definition, support, **kwargs):
    """Fetch the artifact of a definition file and patch its stored copy.

    Example:
        caskfetch install Casks/tool.rb -u https://host/tool.zip --version 1.0
    """
    _install(ctx, definition, support, **kwargs)


@cli.command("reinstall")
@definition_argument
@support_option
@fetch_options
@click.pass_context
def reinstall(ctx, definition, support, **kwargs):
    """Fetch again and patch the stored copy of a definition file."""
    _install(ctx, definition, support, **kwargs)


@cli.command("strategies")
def strategies():
    """List strategy tags and the classes they resolve to."""
    table = Table(title="Download strategies")
    table.add_column("Tag", style="cyan", no_wrap=True)
    table.add_column("Strategy", style="green")

    for tag, strategy_cls in sorted(get_selector().tags().items()):
        table.add_row(tag, strategy_cls.__name__)

    console.print(table)


@cli.command("locate")
@click.argument("name")
@click.option("--version", "artifact_version", required=True, help="Artifact version")
@click.option("--url", "-u", default="", help="Download URL (determines the extension)")
@click.pass_context
def locate(ctx, name, artifact_version, url):
    """Print the cached path and symlink of an artifact."""
    try:
        store = CacheStore(ctx.obj["config"])
        identity = ArtifactIdentity(name, artifact_version)
        location = store.resolve(identity, url_extension(url))
    except Exception as e:
        fail(e)
        return

    console.print(f"Cached: {location.cached_path}", soft_wrap=True)
    console.print(f"Link: {location.symlink_path}", soft_wrap=True)
    console.print(f"Staging: {store.staging_dir(identity, create=False)}", soft_wrap=True)


@cli.command("repo")
@click.argument(
    "path",
    required=False,
    type=click.Path(exists=True, path_type=Path),
)
def repo(path):
    """Show git metadata of the repository containing PATH (default: cwd)."""
    info = repository_info(path)
    if info is None:
        console.print("[yellow]Not inside a git repository[/yellow]")
        sys.exit(1)

    table = Table(title=f"Repository {info.repo}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Root", str(info.root))
    table.add_row("Branch", info.branch or "")
    table.add_row("Remote", info.remote or "")
    table.add_row("GitHub repository", info.github_repository or "")
    table.add_row("Author", info.author() or "")
    console.print(table)


if __name__ == "__main__":
    cli()
