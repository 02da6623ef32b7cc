"""
Mutation dispatch.

The UI never edits devices in place: it sends a mutation message, the
dispatcher applies it to the current snapshot and runs the full simulation
pipeline, and the UI receives a new snapshot. Requests that cannot be
applied (unknown ids, editing the ISP modem) come back as MutationRejected
values alongside the unchanged snapshot.
"""

import uuid
from collections.abc import Iterable
from loguru import logger
from netsim.advisories import validate_network
from netsim.catalog import get_device_definition, is_wifi_client
from netsim.graph import (
    add_device,
    clone,
    connect_ports,
    create_device,
    disconnect_port,
    find_device,
    next_device_id,
    remove_device,
)
from netsim.models.advisory import Advisory
from netsim.models.build import BuildResult
from netsim.models.device import Device, DeviceStatus
from netsim.models.document import SandboxDocument
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
from netsim.models.room import Room
from netsim.models.wireless import WifiHosting, WirelessClient
from netsim.simulation import run_pipeline
from netsim.utils.errors import ErrorCodes, GraphError
from netsim.utils.logging import (
    log_mutation_applied,
    log_mutation_rejected,
    log_mutation_requested,
)
from pydantic import TypeAdapter
from typing import Any


POWER_ACTION_STATUS: dict[str, DeviceStatus] = {
    'power_on': 'online',
    'power_off': 'offline',
    'power_cycle': 'online',
    'reboot': 'online',
}

_MUTATION_ADAPTER: TypeAdapter[Mutation] = TypeAdapter(Mutation)


class _Rejected(Exception):
    def __init__(self, message: str, error_code: str):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


def parse_mutation(data: dict[str, Any]) -> Mutation:
    """Validate a mutation message received as a plain dict (``kind`` selects the type)."""
    return _MUTATION_ADAPTER.validate_python(data)


def _require_device(devices: list[Device], device_id: str) -> Device:
    device = find_device(devices, device_id)
    if device is None:
        raise _Rejected(f'Device {device_id} does not exist', ErrorCodes.DEVICE_NOT_FOUND)
    return device


def _require_user_controlled(device: Device) -> None:
    if get_device_definition(device.type).is_modem:
        logger.warning(f'Ignoring power request for ISP modem {device.id}')
        raise _Rejected(
            f'{device.display_name} is managed by the ISP and cannot be controlled',
            ErrorCodes.NOT_USER_CONTROLLED,
        )


def _set_admin_status(devices: list[Device], device_id: str, status: DeviceStatus) -> list[Device]:
    updated = clone(devices)
    device = _require_device(updated, device_id)
    _require_user_controlled(device)
    device.admin_status = status
    device.status = status
    return updated


def apply_mutation(devices: Iterable[Device], mutation: Mutation) -> list[Device]:
    """
    Apply one mutation without running the pipeline.

    Raises:
        GraphError: for unknown ports, self connections and duplicate ids
        _Rejected: for requests the sandbox refuses
    """
    devices = list(devices)

    if isinstance(mutation, AddDevice):
        device = create_device(
            mutation.device_type,
            device_id=mutation.device_id or next_device_id(devices, mutation.device_type),
            name=mutation.name,
            room_id=mutation.room_id,
            position=mutation.position,
        )
        return add_device(devices, device)

    if isinstance(mutation, RemoveDevice):
        return remove_device(devices, mutation.device_id)

    if isinstance(mutation, ConnectPorts):
        return connect_ports(devices, mutation.port_a, mutation.port_b)

    if isinstance(mutation, DisconnectPort):
        return disconnect_port(devices, mutation.port_id)

    if isinstance(mutation, PowerAction):
        return _set_admin_status(devices, mutation.device_id, POWER_ACTION_STATUS[mutation.action])

    if isinstance(mutation, SetStatus):
        return _set_admin_status(devices, mutation.device_id, mutation.status)

    if isinstance(mutation, SetWirelessCredentials):
        updated = clone(devices)
        device = _require_device(updated, mutation.device_id)
        if not is_wifi_client(device.type):
            raise _Rejected(
                f'{device.display_name} cannot join a wireless network',
                ErrorCodes.NOT_WIRELESS_CAPABLE,
            )
        client = device.wireless or WirelessClient()
        device.wireless = client.model_copy(
            update={'ssid': mutation.ssid, 'password': mutation.password}
        )
        return updated

    if isinstance(mutation, SetHostedNetworks):
        updated = clone(devices)
        device = _require_device(updated, mutation.device_id)
        if not get_device_definition(device.type).hosts_wifi:
            raise _Rejected(
                f'{device.display_name} cannot host wireless networks',
                ErrorCodes.NOT_WIRELESS_CAPABLE,
            )
        device.wifi_hosting = WifiHosting(
            enabled=mutation.enabled,
            configs=[network.model_copy() for network in mutation.configs],
        )
        return updated

    raise TypeError(f'Unsupported mutation: {type(mutation).__name__}')


_TARGET_FIELDS = ('device_id', 'port_a', 'port_b', 'port_id')


def mutation_targets(mutation: Mutation) -> list[str]:
    """Device and port ids a mutation refers to, in field order."""
    return [
        value
        for value in (getattr(mutation, name, None) for name in _TARGET_FIELDS)
        if value is not None
    ]


def dispatch(
    devices: Iterable[Device],
    mutation: Mutation,
    session_id: str = '',
) -> tuple[list[Device], MutationRejected | None]:
    """
    Apply a mutation and recompute the whole sandbox.

    Args:
        devices: Current snapshot (not modified)
        mutation: Mutation message
        session_id: Sandbox session the log records are tagged with

    Returns:
        (new snapshot, None) when applied, or (recomputed current snapshot,
        MutationRejected) when the request was refused

    Raises:
        TopologyInvariantError: if the snapshot's connections are inconsistent
    """
    devices = list(devices)
    log_mutation_requested(
        mutation.kind,
        mutation_targets(mutation),
        mutation.model_dump(exclude={'kind'}),
        session_id,
    )

    try:
        updated = apply_mutation(devices, mutation)
    except (GraphError, _Rejected) as e:
        rejection = MutationRejected(kind=mutation.kind, message=e.message, error_code=e.error_code)
        log_mutation_rejected(mutation.kind, rejection.error_code, rejection.message, session_id)
        return run_pipeline(devices), rejection

    simulated = run_pipeline(updated)
    log_mutation_applied(mutation.kind, simulated, session_id)
    return simulated, None


class Sandbox:
    """Holds the current snapshot and feeds mutations through dispatch."""

    def __init__(self, devices: Iterable[Device] = (), rooms: Iterable[Room] = ()):
        self._devices = run_pipeline(devices)
        self._rooms = list(rooms)
        self.last_rejection: MutationRejected | None = None
        self.session_id = uuid.uuid4().hex[:8]

    @classmethod
    def from_document(cls, document: SandboxDocument) -> 'Sandbox':
        return cls(document.devices, document.rooms)

    @classmethod
    def from_build(cls, result: BuildResult) -> 'Sandbox':
        return cls(result.devices, result.rooms)

    @property
    def devices(self) -> list[Device]:
        """Current simulated snapshot."""
        return self._devices

    @property
    def rooms(self) -> list[Room]:
        return self._rooms

    @property
    def advisories(self) -> list[Advisory]:
        """Wiring advisories for the current snapshot."""
        return validate_network(self._devices)

    def device(self, device_id: str) -> Device | None:
        return find_device(self._devices, device_id)

    def dispatch(self, mutation: Mutation | dict[str, Any]) -> MutationRejected | None:
        """
        Apply a mutation to the sandbox.

        Args:
            mutation: Mutation message, or a dict with a ``kind`` key

        Returns:
            None when applied, MutationRejected otherwise (also kept in
            ``last_rejection``)
        """
        if isinstance(mutation, dict):
            mutation = parse_mutation(mutation)
        self._devices, self.last_rejection = dispatch(self._devices, mutation, self.session_id)
        return self.last_rejection

    def to_document(self, base: SandboxDocument | None = None) -> SandboxDocument:
        """Current state as a document, keeping metadata from ``base`` when given."""
        base = base or SandboxDocument()
        return base.model_copy(update={'devices': clone(self._devices), 'rooms': list(self._rooms)})
