"""Models for topology synthesis requests and results."""

from netsim.models.base import SandboxModel
from netsim.models.device import Device, DeviceType
from netsim.models.room import Room, RoomType
from pydantic import Field
from typing import Literal


BuildRole = Literal['switch', 'pos', 'printer', 'ap', 'kds', 'router']


class BuildDevice(SandboxModel):
    """Role-tagged device entry; ports are chosen by the synthesizer."""

    id: str = Field(description='Request-local identifier')
    role: BuildRole = Field(description='Role of the device in the topology')
    type: DeviceType = Field(description='Concrete hardware model')
    name: str = Field(default='', description='Display name (generated when blank)')
    room: RoomType = Field(default='office', description='Room assignment')
    connect_to: str | None = Field(
        default=None,
        description='Request id of the switch or router to bind to',
    )


class BuildRequest(SandboxModel):
    """Abstract sandbox description. The modem and WAN link are implicit."""

    router_type: DeviceType = Field(default='zyxel-router', description='Router model')
    devices: list[BuildDevice] = Field(default_factory=list, description='Requested devices')


class BuildResult(SandboxModel):
    """Fully wired and simulated sandbox."""

    kind: Literal['success'] = 'success'
    devices: list[Device] = Field(default_factory=list, description='Simulated devices')
    rooms: list[Room] = Field(default_factory=list, description='Rooms (passthrough)')
    connections: list[tuple[str, str]] = Field(
        default_factory=list,
        description='Port id pairs that were cabled',
    )
    advisories: list[str] = Field(default_factory=list, description='Non-fatal notes')


class BuildError(SandboxModel):
    """Build request rejected; no device graph is produced."""

    kind: Literal['error'] = 'error'
    message: str = Field(description='What went wrong')
    error_code: str = Field(description='Structured error code')
    device_name: str | None = Field(default=None, description='Device the error concerns')
    port_name: str | None = Field(default=None, description='Port the error concerns')


BuildOutcome = BuildResult | BuildError


def is_build_error(outcome: BuildOutcome) -> bool:
    """Check if a synthesis outcome is an error."""
    return outcome.kind == 'error'
