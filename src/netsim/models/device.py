"""Device model for simulated store network hardware."""

from netsim.models.base import SandboxModel
from netsim.models.port import Port, PortRole
from netsim.models.wireless import WifiHosting, WirelessClient
from pydantic import Field, model_validator
from typing import ClassVar, Literal


DeviceType = Literal[
    'isp-modem',
    'zyxel-router',
    'cradlepoint-router',
    'managed-switch',
    'unmanaged-switch',
    'access-point',
    'datto-ap440',
    'datto-ap62',
    'poe-injector',
    'power-outlet',
    'pos',
    'datavan-pos',
    'poindus-pos',
    'v3-pos',
    'v4-pos',
    'printer',
    'epson-thermal',
    'epson-impact',
    'kds',
    'elo-kds',
    'orderpad',
    'cakepop',
    'unknown',
]
DeviceStatus = Literal['offline', 'booting', 'online', 'error']
ConnectionState = Literal[
    'online',
    'associated_no_internet',
    'associated_no_ip',
    'auth_failed',
    'associating_wifi',
    'disconnected',
]


class Device(SandboxModel):
    """A device in the sandbox.

    ``admin_status`` is what the user last asked for through a power action;
    ``status`` is what the device actually ends up in once power propagation
    has run. The two only differ when the device has lost its power source.
    """

    wire_omit_none: ClassVar[frozenset[str]] = frozenset({'connection_state'})

    id: str = Field(description='Device identifier')
    type: DeviceType = Field(description='Hardware model')
    name: str = Field(default='', description='Display name')
    position: tuple[float, float, float] = Field(
        default=(0.0, 0.0, 0.0),
        description='Placement in the 3D scene (passthrough)',
    )
    room_id: str | None = Field(default=None, description='Room the device sits in')
    ports: list[Port] = Field(default_factory=list, description='Ports, in catalog order')
    status: DeviceStatus = Field(default='offline', description='Effective status')
    admin_status: DeviceStatus | None = Field(
        default=None,
        description='Status requested by the last power action',
    )
    ip: str | None = Field(default=None, description='Address label (passthrough)')
    notes: str | None = Field(default=None, description='Free text (passthrough)')

    wireless: WirelessClient | None = Field(default=None, description='Wi-Fi client settings')
    wifi_hosting: WifiHosting | None = Field(default=None, description='Hosted Wi-Fi networks')
    connection_state: ConnectionState | None = Field(
        default=None,
        description='Reachability summary (wireless-capable types only)',
    )

    @model_validator(mode='after')
    def _default_admin_status(self) -> 'Device':
        if self.admin_status is None:
            self.admin_status = self.status
        return self

    @property
    def is_online(self) -> bool:
        """Check if the device is up and running."""
        return self.status == 'online'

    @property
    def display_name(self) -> str:
        """Get display name, falling back to the identifier."""
        return self.name if self.name else self.id

    def port(self, port_id: str) -> Port | None:
        """Look up one of this device's ports by identifier."""
        for port in self.ports:
            if port.id == port_id:
                return port
        return None

    def ports_with_role(self, role: PortRole) -> list[Port]:
        """All ports of the given role, in declaration order."""
        return [port for port in self.ports if port.role == role]

    def first_port(self, role: PortRole) -> Port | None:
        """First port of the given role, if any."""
        for port in self.ports:
            if port.role == role:
                return port
        return None
