"""Per-endpoint probe: TCP connect, trace fetch and upgrade validation."""

from __future__ import annotations

import asyncio
import base64
import contextlib
import secrets
import time
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from colo_scout.core.config import Settings
from colo_scout.core.exceptions import (
    ConnectError,
    NoMatchError,
    ProbeTimeoutError,
    UpgradeFailedError,
)
from colo_scout.core.logging import get_logger
from colo_scout.core.models import Endpoint, LocationInfo, ProbeOutcome
from colo_scout.prober.trace import parse_trace

logger = get_logger(__name__)


class ConnectTimer:
    """httpx trace hook recording when the connection was established.

    httpx reports the TCP connect and TLS handshake as separate events;
    the latency is taken from the start of the TCP connect to the end of
    the last handshake step that happened.
    """

    def __init__(self) -> None:
        self.started: Optional[float] = None
        self.established: Optional[float] = None

    async def __call__(self, event_name: str, info: dict[str, Any]) -> None:
        if event_name == "connection.connect_tcp.started":
            self.started = time.monotonic()
        elif event_name in (
            "connection.connect_tcp.complete",
            "connection.start_tls.complete",
        ):
            self.established = time.monotonic()

    @property
    def elapsed_ms(self) -> Optional[float]:
        if self.started is None or self.established is None:
            return None
        return (self.established - self.started) * 1000


def handshake_key() -> str:
    """Random base64 nonce for the Sec-WebSocket-Key header."""
    return base64.b64encode(secrets.token_bytes(16)).decode("ascii")


class EndpointProber:
    """
    Runs the full probe sequence against one endpoint.

    Two strategies, chosen by ``settings.prober.mode``:
    - ``tcp``: measure the time to open a TCP connection
    - ``trace``: fetch the trace page, require the expected markers,
      extract the data-center code and optionally validate a protocol
      upgrade on a second, independent connection

    Every failure is raised as a ``ProbeError`` subclass.
    """

    def __init__(
        self,
        settings: Settings,
        locations: Optional[Mapping[str, LocationInfo]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.config = settings.prober
        self.locations: Mapping[str, LocationInfo] = locations or {}
        self.transport = transport

    async def probe(self, endpoint: Endpoint) -> ProbeOutcome:
        """Probe *endpoint* with the configured strategy."""
        if self.config.mode == "tcp":
            return await self.probe_tcp(endpoint)
        return await self.probe_trace(endpoint)

    async def probe_tcp(self, endpoint: Endpoint) -> ProbeOutcome:
        """Measure the time to establish a raw TCP connection."""
        start = time.monotonic()
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(str(endpoint.address), endpoint.port),
                timeout=self.config.connect_timeout,
            )
        except asyncio.TimeoutError as e:
            raise ProbeTimeoutError(
                f"Connect timeout after {self.config.connect_timeout}s", endpoint
            ) from e
        except OSError as e:
            raise ConnectError(f"Connection error: {e}", endpoint) from e

        latency_ms = (time.monotonic() - start) * 1000

        writer.close()
        with contextlib.suppress(OSError):
            await writer.wait_closed()

        return ProbeOutcome(endpoint=endpoint, latency_ms=latency_ms)

    async def probe_trace(self, endpoint: Endpoint) -> ProbeOutcome:
        """Fetch the trace page and classify the endpoint from its body."""
        timer = ConnectTimer()
        start = time.monotonic()

        async with self._client() as client:
            response = await self._bounded(
                client.get(
                    self._url(endpoint, self.config.trace_path),
                    headers={"Host": self.config.trace_host},
                    extensions={
                        "trace": timer,
                        "sni_hostname": self.config.trace_host,
                    },
                ),
                endpoint,
            )

        # Mocked transports never open a socket, so fall back to the
        # whole request time when no connect events were seen.
        latency_ms = timer.elapsed_ms
        if latency_ms is None:
            latency_ms = (time.monotonic() - start) * 1000

        info = parse_trace(response.text)
        if not info.matched:
            reason = "has no colo= code" if info.has_marker else "lacks the user-agent echo"
            raise NoMatchError(f"Trace response {reason}", endpoint)

        if self.config.validate_upgrade:
            ok, detail = await self.check_upgrade(endpoint)
            if not ok:
                raise UpgradeFailedError(f"Upgrade probe failed: {detail}", endpoint)

        code = info.data_center
        location = self.locations.get(code)
        if location is None:
            return ProbeOutcome(endpoint=endpoint, data_center=code, latency_ms=latency_ms)

        return ProbeOutcome(
            endpoint=endpoint,
            data_center=code,
            region=location.region,
            country_code=location.country_code,
            city=location.city,
            latency_ms=latency_ms,
        )

    async def check_upgrade(self, endpoint: Endpoint) -> tuple[bool, Optional[str]]:
        """Attempt a WebSocket upgrade on a dedicated connection.

        The trace connection cannot be reused once its request/response
        cycle has completed, so a new client is opened here.

        Returns:
            ``(True, None)`` on a 101 response, otherwise ``(False, detail)``
            where *detail* names the status or transport error.
        """
        headers = {
            "Host": self.config.trace_host,
            "Upgrade": "websocket",
            "Connection": "Upgrade",
            "Sec-WebSocket-Version": "13",
            "Sec-WebSocket-Key": handshake_key(),
        }

        try:
            async with self._client() as client:
                status = await asyncio.wait_for(
                    self._upgrade_status(client, self._url(endpoint, self.config.upgrade_path), headers),
                    timeout=self.config.max_duration,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return False, "timeout"
        except httpx.HTTPError as e:
            return False, f"{type(e).__name__}: {e}"

        if status != 101:
            logger.debug("upgrade_rejected", endpoint=str(endpoint), status=status)
            return False, f"status {status}"
        return True, None

    async def _upgrade_status(
        self,
        client: httpx.AsyncClient,
        url: str,
        headers: dict[str, str],
    ) -> int:
        # Streamed so an upgraded connection's body is never read.
        async with client.stream(
            "GET",
            url,
            headers=headers,
            extensions={"sni_hostname": self.config.trace_host},
        ) as response:
            return response.status_code

    async def _bounded(self, request: Any, endpoint: Endpoint) -> httpx.Response:
        """Await *request* within ``max_duration``, translating transport errors."""
        try:
            return await asyncio.wait_for(request, timeout=self.config.max_duration)
        except asyncio.TimeoutError as e:
            raise ProbeTimeoutError(
                f"Request exceeded {self.config.max_duration}s", endpoint
            ) from e
        except httpx.TimeoutException as e:
            raise ProbeTimeoutError(f"Request timeout: {e}", endpoint) from e
        except httpx.HTTPError as e:
            raise ConnectError(f"Connection error: {e}", endpoint) from e

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self.transport,
            timeout=httpx.Timeout(
                self.config.max_duration,
                connect=self.config.connect_timeout,
            ),
            verify=False,
            follow_redirects=False,
            trust_env=False,
            headers={"User-Agent": self.config.user_agent},
        )

    def _url(self, endpoint: Endpoint, path: str) -> str:
        scheme = "https" if self.config.use_tls else "http"
        return f"{scheme}://{endpoint.host}:{endpoint.port}{path}"
