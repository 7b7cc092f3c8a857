"""Data models for colo-scout."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress


class Endpoint(BaseModel):
    """An (address, port) pair to probe."""

    model_config = ConfigDict(frozen=True)

    address: IPvAnyAddress = Field(..., description="IPv4 or IPv6 address")
    port: int = Field(..., ge=1, le=65535, description="TCP port")

    @property
    def host(self) -> str:
        """Address formatted for use in a URL authority."""
        if self.address.version == 6:
            return f"[{self.address}]"
        return str(self.address)

    def __str__(self) -> str:
        """Format as address:port."""
        return f"{self.host}:{self.port}"


class LocationInfo(BaseModel):
    """Human-readable location of a data center."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    region: str = ""
    country_code: str = Field(default="", alias="cca2")
    city: str = ""


class ProbeOutcome(BaseModel):
    """Classified result of a probe that reached a successful connection."""

    endpoint: Endpoint
    data_center: str | None = Field(
        default=None,
        description="Data-center code extracted from the trace response"
    )
    region: str | None = None
    country_code: str | None = None
    city: str | None = None
    latency_ms: float = Field(..., ge=0.0, description="Connection latency in milliseconds")

    @property
    def location(self) -> str:
        """Best available location label."""
        return self.city or self.data_center or ""
