"""Command-line interface for nuget_license_collector.

Provides the entry point for scanning a .NET solution or project and
writing a license report, and a subcommand for managing the license text
cache.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from nuget_license_collector.cache import LicenseTextCache
from nuget_license_collector.errors import ScannerError
from nuget_license_collector.models import PackageLicenseRecord
from nuget_license_collector.reporters import BaseReporter, JsonReporter, TextReporter
from nuget_license_collector.resolvers import (
    ContentFetcher,
    NuGetRegistryClient,
    PackageLicenseResolver,
)
from nuget_license_collector.scanners import discover_packages

app = typer.Typer(
    name="nuget-license-collector",
    help="Collect the licenses of the NuGet packages used by a .NET solution or project.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("nuget_license_collector")

SUPPORTED_EXTENSIONS = (".sln", ".slnx", ".csproj", ".vbproj", ".fsproj")
DEFAULT_OUTPUT = Path("nuget-licenses.txt")

CacheDirOption = Annotated[
    Optional[Path],
    typer.Option(
        "--cache-dir",
        envvar="NUGET_LICENSE_CACHE_DIR",
        help="Directory for cached license texts",
    ),
]


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("nuget_license_collector").setLevel(level)


def resolve_output_path(output: Path, use_json: bool) -> Path:
    """Return the report path, switching to a .json suffix for JSON output.

    Args:
        output: Requested output path.
        use_json: Whether a JSON report is written.

    Returns:
        ``output`` unchanged for text reports or paths already ending in
        ``.json`` (any case); otherwise ``output`` with its suffix replaced.
    """
    if use_json and output.suffix.lower() != ".json":
        return output.with_suffix(".json")
    return output


async def _collect(
    identifiers: list[str],
    cache: LicenseTextCache,
    concurrency: int,
) -> list[PackageLicenseRecord]:
    async with NuGetRegistryClient() as registry, ContentFetcher() as fetcher:
        resolver = PackageLicenseResolver(
            registry=registry,
            cache=cache,
            fetcher=fetcher,
            concurrency=concurrency,
        )
        return await resolver.resolve(identifiers)


def _run_scan(
    input_path: Path,
    output: Path,
    use_json: bool,
    force_refresh: bool,
    concurrency: int,
    cache_dir: Optional[Path],
    verbose: bool,
) -> int:
    """Implementation of the scan command, returning the exit code."""
    _setup_logging(verbose)

    if input_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        err_console.print(
            f"[red]Error:[/red] Unsupported file type '{input_path.suffix}'. "
            f"Supported types: {', '.join(SUPPORTED_EXTENSIONS)}"
        )
        return 1

    output = resolve_output_path(output, use_json)

    console.print(f"Analyzing file: {input_path}")
    try:
        identifiers = discover_packages(input_path)
    except ScannerError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        return 1

    console.print(f"Found [bold]{len(identifiers)}[/bold] unique packages")

    try:
        cache = LicenseTextCache(cache_dir=cache_dir)
    except OSError as e:
        err_console.print(f"[red]Error creating cache directory:[/red] {e}")
        return 1

    if force_refresh:
        deleted = cache.clear()
        if verbose:
            console.print(f"[dim]Cleared {deleted} cached license texts[/dim]")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Resolving licenses...", total=None)
        records = asyncio.run(_collect(identifiers, cache, concurrency))
        progress.update(task, completed=True)

    console.print(
        f"Retrieved license information for [bold]{len(records)}[/bold] packages"
    )

    reporter: BaseReporter = JsonReporter() if use_json else TextReporter()
    try:
        reporter.write(records, output)
    except OSError as e:
        err_console.print(f"[red]Error writing output:[/red] {e}")
        return 1

    console.print(f"[green]Generated:[/green] {output}")
    return 0


@app.command()
def scan(
    input_path: Annotated[
        Path,
        typer.Argument(
            metavar="INPUT",
            help="Solution (.sln, .slnx) or project (.csproj, .vbproj, .fsproj) file",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output file path",
        ),
    ] = DEFAULT_OUTPUT,
    use_json: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Write the report as JSON",
        ),
    ] = False,
    force_refresh: Annotated[
        bool,
        typer.Option(
            "--force-refresh",
            "-f",
            help="Clear the license cache and download fresh license texts",
        ),
    ] = False,
    concurrency: Annotated[
        int,
        typer.Option(
            "--concurrency",
            "-c",
            min=1,
            help="Number of packages resolved in parallel",
        ),
    ] = 1,
    cache_dir: CacheDirOption = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output",
        ),
    ] = False,
) -> None:
    """Collect package licenses and write a report.

    Finds every NuGet package referenced by the solution or project,
    resolves its license on nuget.org and writes the license texts to a
    text or JSON report.
    """
    exit_code = _run_scan(
        input_path=input_path,
        output=output,
        use_json=use_json,
        force_refresh=force_refresh,
        concurrency=concurrency,
        cache_dir=cache_dir,
        verbose=verbose,
    )
    raise typer.Exit(code=exit_code)


@app.command()
def cache(
    action: Annotated[
        str,
        typer.Argument(help="Cache action: 'show' or 'clear'"),
    ],
    license_id: Annotated[
        Optional[str],
        typer.Argument(help="Specific license identifier to clear (optional)"),
    ] = None,
    cache_dir: CacheDirOption = None,
) -> None:
    """Manage the license text cache.

    Actions:
        show  - Display cache location, entry count, and size
        clear - Clear all cached license texts (or a specific one)
    """
    try:
        cache_instance = LicenseTextCache(cache_dir=cache_dir)
    except OSError as e:
        err_console.print(f"[red]Error creating cache directory:[/red] {e}")
        raise typer.Exit(code=1)

    if action == "show":
        info = cache_instance.info()
        console.print(f"[bold]Cache Location:[/bold] {info['path']}")
        console.print(f"[bold]Entries:[/bold] {info['count']}")
        console.print(f"[bold]Size:[/bold] {info['size_bytes'] / 1024:.1f} KB")

    elif action == "clear":
        if license_id:
            cache_instance.clear(license_id)
            console.print(f"[green]Cleared cache for:[/green] {license_id}")
        else:
            deleted = cache_instance.clear()
            console.print(f"[green]Cache cleared[/green] ({deleted} files)")

    else:
        err_console.print(f"[red]Unknown action:[/red] {action}")
        err_console.print("Valid actions: show, clear")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
