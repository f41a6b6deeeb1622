"""Main entry point for project cleanup."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from .cleanup import ProjectCleanup
from .config import CleanupConfig
from .errors import ProjectCleanupError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments.

    """
    parser = argparse.ArgumentParser(
        prog="project-cleanup",
        description="Remove dependency and build directories from projects that have not been touched in a while",
    )

    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Directories to search (default: current working directory)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--all",
        "-a",
        action="store_true",
        default=None,
        help="Clean all projects, regardless of when they were last modified",
    )
    parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        default=None,
        help="Delete without asking for confirmation",
    )
    parser.add_argument(
        "--ignore",
        "-i",
        default=None,
        metavar="REGEX",
        help="Skip paths matching this regular expression",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Show what would be deleted without deleting anything",
    )
    parser.add_argument(
        "--follow-symlinks",
        action="store_true",
        default=None,
        help="Traverse symlinked directories",
    )
    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Show the effective configuration and exit",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write the effective configuration to the config file and exit",
    )

    return parser.parse_args(argv)


def apply_args(config: CleanupConfig, args: argparse.Namespace) -> CleanupConfig:
    """Override configuration values with command line flags."""
    if args.paths:
        config.paths = list(args.paths)
    if args.all is not None:
        config.all = args.all
    if args.force is not None:
        config.force = args.force
    if args.dry_run is not None:
        config.dry_run = args.dry_run
    if args.follow_symlinks is not None:
        config.follow_symlinks = args.follow_symlinks
    if args.ignore is not None:
        config.ignore = args.ignore
    if args.debug:
        config.log_level = "DEBUG"
    return config


def format_time_ago(seconds: int) -> str:
    """Format an age in seconds as a short human-readable string.

    Example:
        ``format_time_ago(75)`` returns ``"1m 15s ago"``.

    """
    days, remainder = divmod(seconds, 86_400)
    if days > 365:
        return "More than a year ago"
    if days > 31:
        return "More than a month ago"
    if days >= 1:
        return f"{days}d ago"

    hours, remainder = divmod(remainder, 3_600)
    minutes, seconds = divmod(remainder, 60)
    if hours >= 1:
        return f"{hours}h {minutes}m ago"
    return f"{minutes}m {seconds}s ago"


def _project_age(path: Path, ages: dict[Path, int]) -> int | None:
    """Find the age of the project owning a dependency directory."""
    owners = [root for root in ages if root in path.parents]
    if not owners:
        return None
    return ages[max(owners, key=lambda root: len(root.parts))]


def cmd_show_config(config: CleanupConfig) -> int:
    """Print the effective configuration.

    Returns:
        Exit code.

    """
    console = Console()

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Paths", "\n".join(str(p) for p in config.paths))
    table.add_row("Clean all projects", str(config.all))
    table.add_row("Stale after", f"{config.stale_after_days} days")
    table.add_row("Ignore pattern", config.ignore or "-")
    table.add_row("Follow symlinks", str(config.follow_symlinks))
    table.add_row("Dry run", str(config.dry_run))
    table.add_row("Log file", str(config.log_file) if config.log_file else "-")
    table.add_row("Log level", config.log_level)

    console.print(table)
    return 0


def cmd_init_config(config: CleanupConfig, config_path: Path | None = None) -> int:
    """Create a configuration file from the effective configuration.

    Returns:
        Exit code.

    """
    console = Console()

    if config_path is None:
        config_path = CleanupConfig.get_config_path()
    if config_path.exists():
        console.print(f"[yellow]Config already exists: {config_path}[/yellow]")
        return 1

    config.save(config_path)
    console.print(f"[green]Created config: {config_path}[/green]")
    return 0


def cmd_cleanup(config: CleanupConfig) -> int:
    """Find stale dependency directories and remove them after confirmation.

    Returns:
        Exit code.

    """
    console = Console()
    cleanup = ProjectCleanup(config)

    dirs = cleanup.find_cleanable_dirs()

    if not dirs:
        if cleanup.stats.projects_found == 0:
            console.print("[yellow]No cleanable projects found[/yellow]")
            console.print("  Check your paths and try again. See [bold]--help[/bold] for more options")
        else:
            console.print("[yellow]No cleanable directories found[/yellow]")
            console.print("  This is likely because your projects were recently modified")
            console.print("  Run with [bold]--all[/bold] to disregard file age")
        return 0

    table = Table(title=f"Found {len(dirs)} cleanable directories")
    table.add_column("Directory", style="red")
    table.add_column("Last modified", style="dim")

    for path in dirs:
        age = _project_age(path, cleanup.stats.ages)
        table.add_row(str(path), format_time_ago(age) if age is not None else "-")

    console.print(table)

    if not config.force and not config.dry_run:
        noun = "this directory" if len(dirs) == 1 else f"these {len(dirs)} directories"
        if not Confirm.ask(f"Permanently delete {noun}?", console=console, default=False):
            return 0

    results = cleanup.remove(dirs)
    removed = sum(1 for r in results if r.action == "deleted")

    if config.dry_run:
        console.print(f"[green]Dry run: {len(results)} directories would be deleted[/green]")
    else:
        console.print(f"[green]Removed {removed} of {len(results)} directories[/green]")

    return 1 if cleanup.stats.errors else 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code.

    """
    args = parse_args(argv)
    console = Console(stderr=True)

    try:
        config = apply_args(CleanupConfig.load(args.config), args)

        if args.show_config:
            return cmd_show_config(config)
        if args.init_config:
            return cmd_init_config(config, args.config)

        return cmd_cleanup(config)
    except (ProjectCleanupError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
