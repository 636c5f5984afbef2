"""Command-line interface for smart_pub.

Provides subcommands for searching the registry, editing a project's
pubspec.yaml, and reporting outdated dependencies and conflicts.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from smart_pub.cache import TTLCache
from smart_pub.config import SearchMode, Settings, load_settings
from smart_pub.filters import (
    SORT_KEYS,
    filter_dependencies,
    package_category,
    sort_dependencies,
)
from smart_pub.models import Package, WorkspaceProject
from smart_pub.notifications import Level, Notification, Notifier
from smart_pub.reporters import MarkdownReporter
from smart_pub.services import Services, open_services
from smart_pub.storage import StateStore

app = typer.Typer(
    name="smart-pub",
    help="Search pub.dev and manage pubspec.yaml dependencies.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("smart_pub")


class ConsoleNotifier(Notifier):
    """Notifier that prints each notification as it is emitted."""

    STYLES = {
        Level.INFO: "green",
        Level.WARNING: "yellow",
        Level.ERROR: "red",
    }

    def _emit(self, notification: Notification) -> None:
        super()._emit(notification)
        style = self.STYLES[notification.level]
        target = err_console if notification.level is Level.ERROR else console
        target.print(f"[{style}]{escape(notification.message)}[/{style}]")


ProjectOption = Annotated[
    Path,
    typer.Option(
        "--project",
        "-p",
        help="Project directory (or workspace root) containing pubspec.yaml",
        exists=True,
        file_okay=False,
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose output"),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        envvar="SMART_PUB_CONFIG",
        help="Settings file (TOML)",
    ),
]
StateOption = Annotated[
    Optional[Path],
    typer.Option(
        "--state-db",
        envvar="SMART_PUB_STATE_DB",
        help="SQLite file holding the persistent cache",
    ),
]
PubGetOption = Annotated[
    bool,
    typer.Option(
        "--pub-get/--no-pub-get",
        help="Run 'flutter pub get' after editing the manifest",
    ),
]
DevOption = Annotated[
    bool,
    typer.Option("--dev", "-d", help="Use dev_dependencies instead of dependencies"),
]


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logger.setLevel(level)


def _load_settings(config: Optional[Path]) -> Settings:
    try:
        return load_settings(config)
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)


def _open(
    settings: Settings,
    state_db: Optional[Path],
    pub_get: bool = True,
):
    return open_services(
        settings=settings,
        state_path=state_db,
        notifier=ConsoleNotifier(),
        run_pub_get=pub_get,
    )


async def _scan(services: Services, project: Path) -> list[WorkspaceProject]:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("Scanning projects and checking pub.dev...", total=None)
        projects = await services.workspace.scan([project])

    if not projects:
        err_console.print(f"[yellow]No Flutter/Dart projects found in {project}[/yellow]")
    return projects


def _print_packages(packages: list[Package], mode: SearchMode) -> None:
    if mode is SearchMode.TEXT:
        for package in packages:
            console.print(
                f"[bold]{package.name}[/bold] {package.version} - "
                f"{escape(package.description)}"
            )
        return

    table = Table(title="Search results")
    table.add_column("Package", style="bold")
    table.add_column("Version")
    table.add_column("Likes", justify="right")
    table.add_column("Points", justify="right")
    table.add_column("Popularity", justify="right")
    table.add_column("Platforms")
    table.add_column("Description")

    for package in packages:
        platforms = [
            label
            for label, flag in (
                ("flutter", package.is_flutter_package),
                ("dart", package.is_dart_package),
            )
            if flag
        ]
        table.add_row(
            package.name,
            package.version,
            str(package.likes),
            str(package.points),
            f"{package.popularity}%",
            ", ".join(platforms),
            escape(package.description),
        )

    console.print(table)


async def _run_search(
    query: str, page: int, settings: Settings, state_db: Optional[Path]
) -> int:
    async with _open(settings, state_db) as services:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Searching pub.dev for '{escape(query)}'...", total=None)
            packages = await services.client.search_packages(query, page)
        failed = bool(services.notifier.of_level(Level.ERROR))

    if failed:
        return 1
    if not packages:
        console.print(f"[yellow]No packages found for '{escape(query)}'[/yellow]")
        return 0

    _print_packages(packages, settings.default_search_mode)
    return 0


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Search query")],
    page: Annotated[int, typer.Option("--page", min=1, help="Result page")] = 1,
    config: ConfigOption = None,
    state_db: StateOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Search the pub.dev registry."""
    _setup_logging(verbose)
    settings = _load_settings(config)
    exit_code = asyncio.run(_run_search(query, page, settings, state_db))
    raise typer.Exit(code=exit_code)


async def _run_add(
    name: str,
    version: Optional[str],
    dev: bool,
    project: Path,
    settings: Settings,
    state_db: Optional[Path],
    pub_get: bool,
) -> int:
    async with _open(settings, state_db, pub_get) as services:
        if version is None:
            version = await services.client.get_latest_version(name)
            if version is None:
                err_console.print(
                    f"[red]Error:[/red] Could not determine the latest version of {escape(name)}"
                )
                return 1

        added = await services.accessor.add_dependency(project, name, version, dev)
    return 0 if added else 1


@app.command()
def add(
    name: Annotated[str, typer.Argument(help="Package name")],
    version: Annotated[
        Optional[str],
        typer.Option(
            "--version",
            help="Version to add (defaults to the latest release). "
            "Always written as a caret constraint.",
        ),
    ] = None,
    dev: DevOption = False,
    project: ProjectOption = Path("."),
    pub_get: PubGetOption = True,
    config: ConfigOption = None,
    state_db: StateOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Add a dependency to pubspec.yaml."""
    _setup_logging(verbose)
    settings = _load_settings(config)
    exit_code = asyncio.run(
        _run_add(name, version, dev, project, settings, state_db, pub_get)
    )
    raise typer.Exit(code=exit_code)


@app.command()
def update(
    name: Annotated[str, typer.Argument(help="Package name")],
    version: Annotated[str, typer.Argument(help="New version")],
    dev: DevOption = False,
    project: ProjectOption = Path("."),
    pub_get: PubGetOption = True,
    config: ConfigOption = None,
    state_db: StateOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Change the version constraint of a dependency."""
    _setup_logging(verbose)
    settings = _load_settings(config)

    async def run_update() -> bool:
        async with _open(settings, state_db, pub_get) as services:
            return await services.accessor.update_dependency(project, name, version, dev)

    raise typer.Exit(code=0 if asyncio.run(run_update()) else 1)


@app.command()
def remove(
    name: Annotated[str, typer.Argument(help="Package name")],
    dev: DevOption = False,
    project: ProjectOption = Path("."),
    pub_get: PubGetOption = True,
    config: ConfigOption = None,
    state_db: StateOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Remove a dependency from pubspec.yaml."""
    _setup_logging(verbose)
    settings = _load_settings(config)

    async def run_remove() -> bool:
        async with _open(settings, state_db, pub_get) as services:
            return await services.accessor.remove_dependency(project, name, dev)

    raise typer.Exit(code=0 if asyncio.run(run_remove()) else 1)


async def _run_deps(
    project: Path,
    query: Optional[str],
    filters: list[str],
    sort_by: str,
    settings: Settings,
    state_db: Optional[Path],
) -> int:
    async with _open(settings, state_db) as services:
        projects = await _scan(services, project)

    for workspace_project in projects:
        dependencies = sort_dependencies(
            filter_dependencies(workspace_project.dependencies, query, filters),
            sort_by,
        )
        total = len(workspace_project.dependencies)
        outdated = len(workspace_project.outdated)

        table = Table(
            title=f"{workspace_project.name} ({len(dependencies)}/{total} deps, {outdated} outdated)"
        )
        table.add_column("Package", style="bold")
        table.add_column("Section")
        table.add_column("Declared")
        table.add_column("Latest")
        table.add_column("Category")
        table.add_column("Status")

        for dep in dependencies:
            table.add_row(
                dep.name,
                dep.section,
                escape(dep.version),
                dep.latest_version or "-",
                package_category(dep.name),
                "[yellow]outdated[/yellow]" if dep.is_outdated else "[green]up to date[/green]",
            )
        console.print(table)

    return 0


@app.command()
def deps(
    project: ProjectOption = Path("."),
    query: Annotated[
        Optional[str],
        typer.Option("--search", "-s", help="Match name or description"),
    ] = None,
    filters: Annotated[
        Optional[list[str]],
        typer.Option(
            "--filter",
            "-f",
            help="all, outdated, production, dev or a category (repeatable)",
        ),
    ] = None,
    sort_by: Annotated[
        str,
        typer.Option("--sort", help=f"Sort order: {', '.join(SORT_KEYS)}"),
    ] = "name",
    config: ConfigOption = None,
    state_db: StateOption = None,
    verbose: VerboseOption = False,
) -> None:
    """List the dependencies of the projects under a directory."""
    _setup_logging(verbose)
    if sort_by not in SORT_KEYS:
        err_console.print(f"[red]Error:[/red] Unknown sort order '{escape(sort_by)}'")
        raise typer.Exit(code=1)

    settings = _load_settings(config)
    exit_code = asyncio.run(
        _run_deps(project, query, filters or [], sort_by, settings, state_db)
    )
    raise typer.Exit(code=exit_code)


async def _run_outdated(
    project: Path, settings: Settings, state_db: Optional[Path]
) -> int:
    async with _open(settings, state_db) as services:
        projects = await _scan(services, project)
        updates = {
            p.name: await services.workspace.check_for_updates(Path(p.path))
            for p in projects
        }

    for project_name, project_updates in updates.items():
        if not project_updates:
            console.print(f"[green]{project_name}: all dependencies are up to date[/green]")
            continue

        console.print(
            f"\n[yellow]{project_name}: {len(project_updates)} outdated[/yellow]"
        )
        for package_name, latest in sorted(project_updates.items()):
            console.print(f"  - {package_name} → {latest}")

    return 0


@app.command()
def outdated(
    project: ProjectOption = Path("."),
    config: ConfigOption = None,
    state_db: StateOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show dependencies with a newer release on the registry."""
    _setup_logging(verbose)
    settings = _load_settings(config)
    exit_code = asyncio.run(_run_outdated(project, settings, state_db))
    raise typer.Exit(code=exit_code)


async def _run_conflicts(
    project: Path,
    apply: bool,
    settings: Settings,
    state_db: Optional[Path],
    pub_get: bool,
) -> int:
    async with _open(settings, state_db, pub_get) as services:
        await _scan(services, project)
        conflicts = await services.advisor.detect_conflicts(project)

        if not conflicts:
            console.print("[green]No dependency conflicts detected![/green]")
            return 0

        console.print(f"[yellow]Conflicts ({len(conflicts)}):[/yellow]")
        for conflict in conflicts:
            console.print(
                f"  - {conflict.package_name}: "
                f"{' vs '.join(escape(v) for v in conflict.conflicting_versions)} "
                f"→ {escape(conflict.suggested_resolution)}"
            )
            console.print(f"    [dim]{escape(conflict.reason)}[/dim]")

        if not apply:
            return 0

        applied = await services.advisor.resolve_conflicts(project)
    return 0 if applied == len(conflicts) else 1


@app.command()
def conflicts(
    project: ProjectOption = Path("."),
    apply: Annotated[
        bool,
        typer.Option("--apply", help="Write the suggested resolutions"),
    ] = False,
    pub_get: PubGetOption = True,
    config: ConfigOption = None,
    state_db: StateOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show dependency conflicts and optionally apply suggested fixes."""
    _setup_logging(verbose)
    settings = _load_settings(config)
    exit_code = asyncio.run(_run_conflicts(project, apply, settings, state_db, pub_get))
    raise typer.Exit(code=exit_code)


@app.command()
def report(
    project: ProjectOption = Path("."),
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output file path"),
    ] = Path("dependencies.md"),
    template: Annotated[
        Optional[Path],
        typer.Option(
            "--template",
            "-t",
            help="Custom Jinja2 template file",
            exists=True,
            readable=True,
        ),
    ] = None,
    config: ConfigOption = None,
    state_db: StateOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Generate a Markdown dependency status report."""
    _setup_logging(verbose)
    settings = _load_settings(config)

    async def run_scan() -> list[WorkspaceProject]:
        async with _open(settings, state_db) as services:
            return await _scan(services, project)

    projects = asyncio.run(run_scan())
    if not projects:
        raise typer.Exit(code=1)

    reporter = MarkdownReporter(template_path=template)
    try:
        reporter.write(projects, output)
    except OSError as e:
        err_console.print(f"[red]Error writing output:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    console.print(f"[green]Generated:[/green] {output}")


@app.command()
def cache(
    action: Annotated[
        str,
        typer.Argument(help="Cache action: 'show' or 'clear'"),
    ],
    config: ConfigOption = None,
    state_db: StateOption = None,
) -> None:
    """Manage the registry response cache.

    Actions:
        show  - Display cache location and entry count
        clear - Remove all cached entries
    """
    settings = _load_settings(config)
    cache_instance = TTLCache(StateStore(state_db), settings)

    if action == "show":
        info = cache_instance.info()
        console.print(f"[bold]Cache Location:[/bold] {info['path']}")
        console.print(f"[bold]Entries:[/bold] {info['count']}")
        console.print(f"[bold]Enabled:[/bold] {'yes' if cache_instance.enabled else 'no'}")

    elif action == "clear":
        cache_instance.clear()
        console.print("[green]Cache cleared[/green]")

    else:
        err_console.print(f"[red]Unknown action:[/red] {escape(action)}")
        err_console.print("Valid actions: show, clear")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
