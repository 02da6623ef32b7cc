"""Mutation messages accepted by the sandbox dispatcher."""

from netsim.models.base import SandboxModel
from netsim.models.device import DeviceStatus, DeviceType
from netsim.models.wireless import WifiNetwork
from pydantic import Field
from typing import Annotated, Literal


PowerActionType = Literal['power_on', 'power_off', 'power_cycle', 'reboot']


class AddDevice(SandboxModel):
    """Add a single device, unwired."""

    kind: Literal['add_device'] = 'add_device'
    device_type: DeviceType
    name: str | None = None
    device_id: str | None = None
    room_id: str | None = None
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)


class RemoveDevice(SandboxModel):
    """Remove a device and unplug everything attached to it."""

    kind: Literal['remove_device'] = 'remove_device'
    device_id: str


class ConnectPorts(SandboxModel):
    """Cable two ports together, replacing any existing cable on either."""

    kind: Literal['connect_ports'] = 'connect_ports'
    port_a: str
    port_b: str


class DisconnectPort(SandboxModel):
    """Unplug the cable on a port."""

    kind: Literal['disconnect_port'] = 'disconnect_port'
    port_id: str


class PowerAction(SandboxModel):
    """Power button press; applied synchronously to its terminal state."""

    kind: Literal['power_action'] = 'power_action'
    device_id: str
    action: PowerActionType


class SetStatus(SandboxModel):
    """Set the requested status directly (used by the UI for boot animations)."""

    kind: Literal['set_status'] = 'set_status'
    device_id: str
    status: DeviceStatus


class SetWirelessCredentials(SandboxModel):
    """Commit client Wi-Fi credentials."""

    kind: Literal['set_wireless_credentials'] = 'set_wireless_credentials'
    device_id: str
    ssid: str = ''
    password: str = ''


class SetHostedNetworks(SandboxModel):
    """Replace the networks a host broadcasts."""

    kind: Literal['set_hosted_networks'] = 'set_hosted_networks'
    device_id: str
    configs: list[WifiNetwork] = Field(default_factory=list)
    enabled: bool = True


Mutation = Annotated[
    AddDevice
    | RemoveDevice
    | ConnectPorts
    | DisconnectPort
    | PowerAction
    | SetStatus
    | SetWirelessCredentials
    | SetHostedNetworks,
    Field(discriminator='kind'),
]


class MutationRejected(SandboxModel):
    """A mutation that could not be applied; the snapshot is unchanged."""

    kind: str = Field(description='Kind of the rejected mutation')
    message: str = Field(description='Why it was rejected')
    error_code: str = Field(description='Structured error code')
