"""Loading of the data-center code to location table."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from colo_scout.core.exceptions import LocationTableError
from colo_scout.core.models import LocationInfo


def parse_locations(entries: list[dict]) -> dict[str, LocationInfo]:
    """Build the lookup from a list of ``{iata, region, cca2, city}`` objects."""
    table: dict[str, LocationInfo] = {}
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise LocationTableError(f"Entry {index} is not an object")

        code = entry.get("iata")
        if not code or not isinstance(code, str):
            raise LocationTableError(f"Entry {index} has no iata code")

        try:
            table[code.strip().upper()] = LocationInfo.model_validate(entry)
        except ValidationError as e:
            raise LocationTableError(f"Entry {index} ({code}) is invalid: {e}") from e

    return table


def load_locations(path: Path) -> dict[str, LocationInfo]:
    """Load a ``locations.json`` file.

    Raises:
        LocationTableError: If the file cannot be read or parsed
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise LocationTableError(f"Cannot read location table {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise LocationTableError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, list):
        raise LocationTableError(
            f"Expected a JSON list in {path}, got {type(data).__name__}"
        )

    return parse_locations(data)
