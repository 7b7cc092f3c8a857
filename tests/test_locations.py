"""Tests for the location table loader."""

import json
from pathlib import Path

import pytest

from colo_scout.core.exceptions import LocationTableError
from colo_scout.core.locations import load_locations, parse_locations


class TestLoadLocations:
    """Tests for reading locations.json."""

    def test_load_file(self, locations_file: Path):
        """Entries are keyed by upper-cased code."""
        table = load_locations(locations_file)

        assert set(table) == {"LAX", "FRA"}
        assert table["LAX"].city == "Los Angeles"
        assert table["LAX"].country_code == "US"
        assert table["FRA"].region == "Europe"

    def test_missing_file(self, temp_dir: Path):
        """A missing file raises LocationTableError."""
        with pytest.raises(LocationTableError):
            load_locations(temp_dir / "nope.json")

    def test_invalid_json(self, temp_dir: Path):
        """Broken JSON raises LocationTableError."""
        path = temp_dir / "bad.json"
        path.write_text("{not json")

        with pytest.raises(LocationTableError, match="Invalid JSON"):
            load_locations(path)

    def test_top_level_must_be_list(self, temp_dir: Path):
        """The document must be a list of entries."""
        path = temp_dir / "obj.json"
        path.write_text(json.dumps({"LAX": {}}))

        with pytest.raises(LocationTableError, match="Expected a JSON list"):
            load_locations(path)


class TestParseLocations:
    """Tests for entry validation."""

    def test_entry_without_code(self):
        """Every entry needs an iata code."""
        with pytest.raises(LocationTableError, match="no iata"):
            parse_locations([{"region": "Europe"}])

    def test_entry_not_an_object(self):
        """Entries must be objects."""
        with pytest.raises(LocationTableError):
            parse_locations(["LAX"])

    def test_missing_fields_default_empty(self):
        """Absent location fields default to empty strings."""
        table = parse_locations([{"iata": "SJC"}])

        assert table["SJC"].city == ""
        assert table["SJC"].country_code == ""
