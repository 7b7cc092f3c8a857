"""colo-scout CLI - Main entry point."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from colo_scout import __version__
from colo_scout.core.config import Settings
from colo_scout.core.exceptions import LocationTableError, TargetParseError

app = typer.Typer(
    name="colo-scout",
    help="📡 colo-scout - Find the fastest edge endpoints and where they route",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        console.print(f"colo-scout v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """colo-scout - Concurrent edge endpoint prober."""
    pass


def apply_overrides(
    settings: Settings,
    port: Optional[int] = None,
    locations: Optional[Path] = None,
    max_parallel: Optional[int] = None,
    max_accepted: Optional[int] = None,
    mode: Optional[str] = None,
    tls: Optional[bool] = None,
    upgrade: Optional[bool] = None,
    colos: Optional[List[str]] = None,
    host: Optional[str] = None,
    verbose: bool = False,
    output: Optional[Path] = None,
    limit: Optional[int] = None,
    log_file: Optional[Path] = None,
) -> Settings:
    """Layer command-line values over file/env settings.

    Values left at ``None`` keep whatever the configuration file set.
    The merged data is re-validated so bounds such as ``max_parallel >= 1``
    hold for command-line input too.
    """
    data = settings.model_dump()

    if port is not None:
        data["port"] = port
    if locations is not None:
        data["locations_file"] = locations
    if max_parallel is not None:
        data["scheduler"]["max_parallel"] = max_parallel
    if max_accepted is not None:
        data["scheduler"]["max_accepted"] = max_accepted
    if colos:
        data["scheduler"]["allowed_colos"] = colos
    if mode is not None:
        data["prober"]["mode"] = mode.lower()
    if tls is not None:
        data["prober"]["use_tls"] = tls
    if upgrade is not None:
        data["prober"]["validate_upgrade"] = upgrade
    if host is not None:
        data["prober"]["trace_host"] = host
    if verbose:
        data["output"]["verbose"] = True
    if output is not None:
        data["output"]["csv_path"] = output
    if limit is not None:
        data["output"]["display_limit"] = limit
    if log_file is not None:
        data["output"]["log_file"] = log_file

    return Settings(**data)


@app.command()
def scan(
    targets: Optional[List[str]] = typer.Argument(None, help="IPs, ip:port pairs or CIDR ranges"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="File with one target per line"),
    port: Optional[int] = typer.Option(None, help="Port for targets that do not name one"),
    locations: Optional[Path] = typer.Option(None, help="locations.json mapping colo codes to places"),
    config: Optional[Path] = typer.Option(None, help="Path to configuration file"),
    max_parallel: Optional[int] = typer.Option(None, "--max-parallel", "-n", help="Concurrent probes"),
    max_accepted: Optional[int] = typer.Option(None, "--max-accepted", "-k", help="Stop after this many accepted (0 = all)"),
    mode: Optional[str] = typer.Option(None, help="Probe mode: trace or tcp"),
    tls: Optional[bool] = typer.Option(None, "--tls/--no-tls", help="Use TLS for the trace fetch"),
    upgrade: Optional[bool] = typer.Option(None, "--upgrade/--no-upgrade", help="Require a WebSocket upgrade"),
    colo: Optional[List[str]] = typer.Option(None, "--colo", "-c", help="Accept only these colo codes (repeatable)"),
    host: Optional[str] = typer.Option(None, help="Host header / SNI sent to endpoints"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every probe error"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write accepted endpoints to CSV"),
    limit: Optional[int] = typer.Option(None, help="Rows to display (0 = all)"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file"),
    dry_run: bool = typer.Option(False, "--dry-run/--no-dry-run", help="Show what would be probed without executing"),
) -> None:
    """
    🎯 Probe endpoints for latency and data-center location.

    Each endpoint is connected to, optionally asked for its trace page
    and upgrade support, and the qualifying ones are listed fastest first.
    """
    import asyncio

    from pydantic import ValidationError

    from colo_scout.core.locations import load_locations
    from colo_scout.core.logging import configure_logging
    from colo_scout.core.scheduler import ProbeScheduler
    from colo_scout.core.targets import expand_targets, load_targets
    from colo_scout.prober import EndpointProber
    from colo_scout.reports import export_csv, render_table, sort_outcomes

    if config is not None and not config.exists():
        console.print(f"[red]Error: config file not found: {escape(str(config))}[/red]")
        raise typer.Exit(1)

    try:
        settings = apply_overrides(
            Settings.from_file_or_default(config),
            port=port,
            locations=locations,
            max_parallel=max_parallel,
            max_accepted=max_accepted,
            mode=mode,
            tls=tls,
            upgrade=upgrade,
            colos=colo,
            host=host,
            verbose=verbose,
            output=output,
            limit=limit,
            log_file=log_file,
        )
    except ValidationError as e:
        console.print(f"[red]Error: invalid configuration\n{escape(str(e))}[/red]")
        raise typer.Exit(1)

    try:
        endpoints = expand_targets(targets or [], port=settings.port)
        if file:
            endpoints.extend(load_targets(file, port=settings.port))
    except TargetParseError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not endpoints:
        console.print("[red]Error: no targets given (pass addresses or --file)[/red]")
        raise typer.Exit(1)

    location_table = {}
    if settings.locations_file:
        try:
            location_table = load_locations(settings.locations_file)
        except LocationTableError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(1)

    colos = ", ".join(settings.scheduler.allowed_colos or []) or "any"
    console.print(Panel.fit(
        f"[bold cyan]Endpoints:[/bold cyan] {len(endpoints)}\n"
        f"[bold cyan]Mode:[/bold cyan] {settings.prober.mode}"
        f"{' + TLS' if settings.prober.use_tls and settings.prober.mode == 'trace' else ''}\n"
        f"[bold cyan]Upgrade check:[/bold cyan] {settings.prober.validate_upgrade}\n"
        f"[bold cyan]Concurrency:[/bold cyan] {settings.scheduler.max_parallel}\n"
        f"[bold cyan]Max accepted:[/bold cyan] {settings.scheduler.max_accepted or 'unbounded'}\n"
        f"[bold cyan]Colos:[/bold cyan] {colos}\n"
        f"[bold cyan]Locations:[/bold cyan] {len(location_table)} known",
        title="🎯 Scan Configuration",
    ))

    if dry_run:
        console.print("[yellow]DRY RUN - Endpoints that would be probed:[/yellow]")
        for ep in endpoints[:10]:
            console.print(f"  • {escape(str(ep))}")
        if len(endpoints) > 10:
            console.print(f"  ... and {len(endpoints) - 10} more")
        return

    configure_logging(
        level="DEBUG" if settings.output.verbose else "INFO",
        json_format=settings.output.json_logs,
        log_file=str(settings.output.log_file) if settings.output.log_file else None,
    )

    scheduler = ProbeScheduler(
        settings,
        EndpointProber(settings, location_table),
        console=Console(stderr=True),
    )

    try:
        results = asyncio.run(scheduler.collect(endpoints))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        raise typer.Exit(130)

    results = sort_outcomes(results)
    state = scheduler.state

    console.print(f"\n[green]✓ Probed {state.attempted}/{state.total} endpoints[/green]")
    console.print(f"  • Accepted: {state.accepted}")
    if state.attempted < state.total:
        console.print(f"  • Skipped after reaching max accepted: {state.total - state.attempted}")

    if results:
        render_table(results, console, limit=settings.output.display_limit)

    if settings.output.csv_path:
        written = export_csv(results, settings.output.csv_path)
        console.print(f"[green]✓ {written} results written to {settings.output.csv_path}[/green]")


if __name__ == "__main__":
    app()
