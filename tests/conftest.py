"""Test configuration and fixtures for colo-scout."""

import asyncio
import io
import json
import tempfile
from pathlib import Path

import httpx
import pytest
from rich.console import Console

from colo_scout.core.config import Settings
from colo_scout.core.exceptions import ConnectError
from colo_scout.core.models import Endpoint, LocationInfo, ProbeOutcome


def trace_body(colo: str = "LAX", user_agent: str = "Mozilla/5.0 (X11; Linux x86_64)") -> str:
    """Build a trace page like the one served by the edge."""
    return (
        "fl=29f123\n"
        "h=speed.cloudflare.com\n"
        "ip=203.0.113.7\n"
        "ts=1718000000.123\n"
        "visit_scheme=https\n"
        f"uag={user_agent}\n"
        f"colo={colo}\n"
        "sliver=none\n"
        "http=http/1.1\n"
        "loc=US\n"
        "tls=TLSv1.3\n"
    )


class FakeProber:
    """
    script: address string -> data-center code, or an exception class to raise.
    Addresses missing from the script fail with ConnectError.
    """

    def __init__(self, script=None, delay: float = 0.0, latency_ms: float = 10.0):
        self.script = script or {}
        self.delay = delay
        self.latency_ms = latency_ms
        self.calls: list[Endpoint] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def probe(self, endpoint: Endpoint) -> ProbeOutcome:
        self.calls.append(endpoint)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            result = self.script.get(str(endpoint.address))
            if result is None:
                raise ConnectError("Connection refused", endpoint)
            if isinstance(result, type) and issubclass(result, Exception):
                raise result(f"scripted failure for {endpoint}", endpoint)
            return ProbeOutcome(
                endpoint=endpoint,
                data_center=result,
                latency_ms=self.latency_ms,
            )
        finally:
            self.in_flight -= 1


@pytest.fixture
def settings() -> Settings:
    """Default settings for testing."""
    s = Settings()
    s.scheduler.progress_interval = 0.01
    return s


@pytest.fixture
def quiet_console() -> Console:
    """Console writing into a buffer instead of the terminal."""
    return Console(file=io.StringIO(), width=200, force_terminal=False)


@pytest.fixture
def temp_dir() -> Path:
    """Temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture
def locations() -> dict[str, LocationInfo]:
    """Small location table."""
    return {
        "LAX": LocationInfo(region="North America", country_code="US", city="Los Angeles"),
        "SJC": LocationInfo(region="North America", country_code="US", city="San Jose"),
        "ORD": LocationInfo(region="North America", country_code="US", city="Chicago"),
    }


@pytest.fixture
def locations_file(temp_dir: Path) -> Path:
    """A locations.json in the Cloudflare shape."""
    data = [
        {"iata": "LAX", "lat": 33.94, "lon": -118.4, "cca2": "US", "region": "North America", "city": "Los Angeles"},
        {"iata": "fra", "lat": 50.03, "lon": 8.56, "cca2": "DE", "region": "Europe", "city": "Frankfurt"},
    ]
    path = temp_dir / "locations.json"
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def edge_transport() -> httpx.MockTransport:
    """Mock edge: 1.1.1.1 serves LAX, 8.8.8.8 times out, 9.9.9.9 is not the edge.

    The upgrade path answers 101 everywhere except 1.0.0.1.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host == "8.8.8.8":
            raise httpx.ConnectTimeout("timed out", request=request)
        if request.url.path == "/ws":
            if host == "1.0.0.1":
                return httpx.Response(403, text="forbidden")
            return httpx.Response(101, headers={"Upgrade": "websocket", "Connection": "Upgrade"})
        if host == "9.9.9.9":
            return httpx.Response(200, text="<html>hello</html>")
        if host == "1.0.0.2":
            return httpx.Response(200, text=trace_body(colo="ZZZ"))
        return httpx.Response(200, text=trace_body(colo="LAX"))

    return httpx.MockTransport(handler)
