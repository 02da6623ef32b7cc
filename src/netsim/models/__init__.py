"""Pydantic models for the network sandbox."""

from netsim.models.advisory import Advisory
from netsim.models.build import (
    BuildDevice,
    BuildError,
    BuildOutcome,
    BuildRequest,
    BuildResult,
    is_build_error,
)
from netsim.models.device import ConnectionState, Device, DeviceStatus, DeviceType
from netsim.models.document import ProjectInfo, Revision, SandboxDocument, Settings
from netsim.models.mutation import (
    AddDevice,
    ConnectPorts,
    DisconnectPort,
    Mutation,
    MutationRejected,
    PowerAction,
    RemoveDevice,
    SetHostedNetworks,
    SetStatus,
    SetWirelessCredentials,
)
from netsim.models.plan import InfrastructurePlan, PlannerRequest
from netsim.models.port import LinkStatus, Port, PortRole
from netsim.models.room import Room
from netsim.models.wireless import WifiHosting, WifiNetwork, WirelessClient

__all__ = [
    'AddDevice',
    'Advisory',
    'BuildDevice',
    'BuildError',
    'BuildOutcome',
    'BuildRequest',
    'BuildResult',
    'ConnectPorts',
    'ConnectionState',
    'Device',
    'DeviceStatus',
    'DeviceType',
    'DisconnectPort',
    'InfrastructurePlan',
    'LinkStatus',
    'Mutation',
    'MutationRejected',
    'PlannerRequest',
    'Port',
    'PortRole',
    'PowerAction',
    'ProjectInfo',
    'RemoveDevice',
    'Revision',
    'Room',
    'SandboxDocument',
    'SetHostedNetworks',
    'SetStatus',
    'SetWirelessCredentials',
    'Settings',
    'WifiHosting',
    'WifiNetwork',
    'WirelessClient',
    'is_build_error',
]
