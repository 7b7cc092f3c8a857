"""Expansion of IP, ip:port and CIDR targets into endpoints."""

from __future__ import annotations

import ipaddress
from collections.abc import Iterable
from pathlib import Path

from colo_scout.core.exceptions import TargetParseError
from colo_scout.core.models import Endpoint

DEFAULT_MAX_HOSTS = 65536


def _split_port(spec: str, default_port: int) -> tuple[str, int]:
    """Separate an optional port suffix from *spec*.

    Accepts ``1.2.3.4``, ``1.2.3.4:8443``, ``2001:db8::1``, ``[2001:db8::1]:8443``
    and CIDR forms of the address-only variants.
    """
    if spec.startswith("["):
        host, sep, rest = spec[1:].partition("]")
        if not sep:
            raise TargetParseError(f"Unclosed bracket in target: {spec!r}")
        if not rest:
            return host, default_port
        if not rest.startswith(":"):
            raise TargetParseError(f"Unexpected text after address: {spec!r}")
        return host, _parse_port(rest[1:], spec)

    # More than one colon means a bare IPv6 address, never host:port.
    if spec.count(":") == 1:
        host, _, port = spec.partition(":")
        return host, _parse_port(port, spec)

    return spec, default_port


def _parse_port(value: str, spec: str) -> int:
    try:
        port = int(value)
    except ValueError as e:
        raise TargetParseError(f"Invalid port in target: {spec!r}") from e
    if not 1 <= port <= 65535:
        raise TargetParseError(f"Port out of range in target: {spec!r}")
    return port


def expand_target(
    spec: str,
    port: int = 443,
    max_hosts: int = DEFAULT_MAX_HOSTS,
) -> list[Endpoint]:
    """Expand a single target spec into endpoints.

    Args:
        spec: IP address, ``ip:port``, or CIDR range
        port: Port used when the spec does not name one
        max_hosts: Largest range accepted

    Raises:
        TargetParseError: If the spec is malformed or the range too large
    """
    spec = spec.strip()
    if not spec:
        raise TargetParseError("Empty target")

    host, target_port = _split_port(spec, port)

    if "/" not in host:
        try:
            address = ipaddress.ip_address(host)
        except ValueError as e:
            raise TargetParseError(f"Invalid IP address: {spec!r}") from e
        return [Endpoint(address=address, port=target_port)]

    try:
        network = ipaddress.ip_network(host, strict=False)
    except ValueError as e:
        raise TargetParseError(f"Invalid IP range: {spec!r}") from e

    if network.num_addresses > max_hosts:
        raise TargetParseError(
            f"Range {network} has {network.num_addresses} addresses, "
            f"more than the limit of {max_hosts}"
        )

    if network.num_addresses == 1:
        return [Endpoint(address=network.network_address, port=target_port)]

    return [Endpoint(address=address, port=target_port) for address in network.hosts()]


def expand_targets(
    specs: Iterable[str],
    port: int = 443,
    max_hosts: int = DEFAULT_MAX_HOSTS,
) -> list[Endpoint]:
    """Expand target specs in order; duplicates are kept."""
    endpoints: list[Endpoint] = []
    for spec in specs:
        endpoints.extend(expand_target(spec, port=port, max_hosts=max_hosts))
    return endpoints


def load_targets(
    path: Path,
    port: int = 443,
    max_hosts: int = DEFAULT_MAX_HOSTS,
) -> list[Endpoint]:
    """Read one target spec per line, skipping blanks and ``#`` comments."""
    try:
        text = path.read_text()
    except OSError as e:
        raise TargetParseError(f"Cannot read target file {path}: {e}") from e

    specs = [
        line.strip()
        for line in text.splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]
    return expand_targets(specs, port=port, max_hosts=max_hosts)
