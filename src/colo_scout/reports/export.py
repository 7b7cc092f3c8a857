"""Sorting, table rendering and CSV export of accepted outcomes."""

from __future__ import annotations

import csv
from collections.abc import Iterable
from pathlib import Path

from rich.console import Console
from rich.table import Table

from colo_scout.core.models import ProbeOutcome

CSV_FIELDS = [
    "ip",
    "port",
    "data_center",
    "region",
    "country_code",
    "city",
    "latency_ms",
]


def sort_outcomes(outcomes: Iterable[ProbeOutcome]) -> list[ProbeOutcome]:
    """Order by latency, fastest first; ties broken by address."""
    return sorted(
        outcomes,
        key=lambda o: (o.latency_ms, str(o.endpoint.address), o.endpoint.port),
    )


def outcome_row(outcome: ProbeOutcome) -> dict[str, str]:
    """Flatten an outcome into string columns."""
    return {
        "ip": str(outcome.endpoint.address),
        "port": str(outcome.endpoint.port),
        "data_center": outcome.data_center or "",
        "region": outcome.region or "",
        "country_code": outcome.country_code or "",
        "city": outcome.city or "",
        "latency_ms": f"{outcome.latency_ms:.0f}",
    }


def render_table(
    outcomes: list[ProbeOutcome],
    console: Console,
    limit: int = 10,
) -> None:
    """Print the fastest *limit* outcomes (all when *limit* is 0)."""
    shown = outcomes[:limit] if limit else outcomes

    table = Table(title=f"Accepted Endpoints ({len(shown)} of {len(outcomes)})")
    table.add_column("IP", style="cyan")
    table.add_column("Port", justify="right")
    table.add_column("Colo", style="bold")
    table.add_column("Region")
    table.add_column("Country")
    table.add_column("City")
    table.add_column("Latency (ms)", justify="right", style="green")

    for outcome in shown:
        row = outcome_row(outcome)
        table.add_row(
            row["ip"],
            row["port"],
            row["data_center"] or "-",
            row["region"] or "-",
            row["country_code"] or "-",
            row["city"] or "-",
            row["latency_ms"],
        )

    console.print(table)


def export_csv(outcomes: Iterable[ProbeOutcome], path: Path) -> int:
    """Write outcomes to *path* as CSV and return the row count."""
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for outcome in outcomes:
            writer.writerow(outcome_row(outcome))
            count += 1
    return count
