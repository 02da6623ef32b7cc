"""Wireless client and hosted network models."""

from netsim.models.base import SandboxModel
from pydantic import Field
from typing import ClassVar, Literal


AuthState = Literal['idle', 'associating', 'auth_failed', 'associated']


class WirelessClient(SandboxModel):
    """Client-side Wi-Fi credentials and the last association outcome."""

    wire_omit_none: ClassVar[frozenset[str]] = frozenset({'associated_host_id'})

    ssid: str = Field(default='', description='Network the device tries to join')
    password: str = Field(default='', description='Pre-shared key (plain comparison)')
    associated_host_id: str | None = Field(
        default=None,
        description='Device currently serving this client',
    )
    auth_state: AuthState = Field(default='idle', description='Association outcome')

    @property
    def is_attempting(self) -> bool:
        """An empty SSID means the client is not trying to join anything."""
        return bool(self.ssid)


class WifiNetwork(SandboxModel):
    """A single SSID broadcast by a host."""

    ssid: str = Field(description='Broadcast network name')
    password: str = Field(default='', description='Pre-shared key')
    hidden: bool = Field(default=False, description='SSID not advertised in beacons')
    security: Literal['WPA2-PSK', 'Open'] = Field(default='WPA2-PSK', description='Security mode')

    def accepts(self, password: str) -> bool:
        """Check a client password against this network."""
        if self.security == 'Open':
            return True
        return self.password == password


class WifiHosting(SandboxModel):
    """Wi-Fi networks hosted by a router, modem or access point."""

    enabled: bool = Field(default=True, description='Radio enabled')
    configs: list[WifiNetwork] = Field(default_factory=list, description='Hosted SSIDs')

    def find(self, ssid: str) -> WifiNetwork | None:
        """Return the hosted network with this SSID, if broadcasting."""
        if not self.enabled:
            return None
        for network in self.configs:
            if network.ssid == ssid:
                return network
        return None
