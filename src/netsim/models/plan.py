"""Models for capacity planning."""

from netsim.models.base import SandboxModel
from pydantic import Field, field_validator


class PlannerRequest(SandboxModel):
    """Aggregate device counts, keyed by hardware model within each group."""

    pos: dict[str, int] = Field(default_factory=dict, description='POS terminals per model')
    printers: dict[str, int] = Field(default_factory=dict, description='Printers per model')
    kds: dict[str, int] = Field(default_factory=dict, description='Kitchen displays per model')
    wireless: dict[str, int] = Field(
        default_factory=dict,
        description='Wireless handhelds per model',
    )

    @field_validator('pos', 'printers', 'kds', 'wireless')
    @classmethod
    def _non_negative(cls, counts: dict[str, int]) -> dict[str, int]:
        for model, count in counts.items():
            if count < 0:
                raise ValueError(f'count for {model} must not be negative')
        return counts

    @property
    def total_pos(self) -> int:
        return sum(self.pos.values())

    @property
    def total_printers(self) -> int:
        return sum(self.printers.values())

    @property
    def total_kds(self) -> int:
        return sum(self.kds.values())

    @property
    def total_wireless(self) -> int:
        return sum(self.wireless.values())

    @property
    def wired_end_devices(self) -> int:
        """POS, printers and kitchen displays (all cabled)."""
        return self.total_pos + self.total_printers + self.total_kds


class InfrastructurePlan(SandboxModel):
    """Infrastructure needed to serve a set of end devices."""

    routers: int = Field(default=1, description='Routers (always one)')
    isp_modems: int = Field(default=1, description='ISP modems (always one)')
    switches: int = Field(default=0, description='Switches for extra LAN ports')
    outlets: int = Field(default=0, description='Four-socket power outlets')
    access_points: int = Field(default=0, description='Access points')
    poe_injectors: int = Field(default=0, description='PoE injectors feeding the APs')
