"""Port model for device ports."""

from netsim.models.base import SandboxModel
from pydantic import Field
from typing import Literal


PortRole = Literal[
    'wan',
    'uplink',
    'lan',
    'poe_source',
    'poe_client',
    'power_input',
    'power_source',
]
LinkStatus = Literal['up', 'negotiating', 'down']

POWER_ROLES: frozenset[str] = frozenset({'power_input', 'power_source'})


class Port(SandboxModel):
    """A physical port. Role and count are fixed by the device type."""

    id: str = Field(description='Port identifier, unique across the sandbox')
    name: str = Field(default='', description='Port label (e.g., "LAN 1")')
    role: PortRole = Field(description='What the port is wired for')
    connected_to: str | None = Field(
        default=None,
        description='Identifier of the peer port, if cabled',
    )
    link_status: LinkStatus = Field(default='down', description='Link light state')

    @property
    def is_connected(self) -> bool:
        """Check if a cable is plugged into this port."""
        return self.connected_to is not None

    @property
    def is_power(self) -> bool:
        """Check if this is a power (not data) port."""
        return self.role in POWER_ROLES

    @property
    def carries_data(self) -> bool:
        """Check if this is a data port with a live link."""
        return not self.is_power and self.is_connected and self.link_status == 'up'

    @property
    def display_label(self) -> str:
        """Get display label for port."""
        return self.name if self.name else self.id

    def to_wire(self) -> dict:
        """Dump the port, keeping an explicit ``connectedTo: null``."""
        data = super().to_wire()
        data.setdefault('connectedTo', None)
        return data
