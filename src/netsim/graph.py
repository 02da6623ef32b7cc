"""
Device graph helpers and mutators.

A connection is not stored on its own: it is the pair of ports whose
``connected_to`` fields point at each other. Every mutator here is pure (it
returns a new device list and leaves its input untouched) and keeps that
pairing symmetric.
"""

from collections.abc import Iterable, Iterator
from loguru import logger
from netsim.catalog import get_device_definition, is_wifi_client
from netsim.models.device import Device, DeviceStatus
from netsim.models.port import Port
from netsim.models.wireless import WifiHosting, WifiNetwork, WirelessClient
from netsim.utils.errors import ErrorCodes, GraphError, TopologyInvariantError


PortIndex = dict[str, tuple[Device, Port]]


def clone(devices: Iterable[Device]) -> list[Device]:
    """Deep copy a device list so it can be modified freely."""
    return [device.model_copy(deep=True) for device in devices]


def build_port_index(devices: Iterable[Device]) -> PortIndex:
    """Map every port id to its owning device and the port itself."""
    index: PortIndex = {}
    for device in devices:
        for port in device.ports:
            index[port.id] = (device, port)
    return index


def find_device(devices: Iterable[Device], device_id: str) -> Device | None:
    """Look up a device by identifier."""
    for device in devices:
        if device.id == device_id:
            return device
    return None


def find_port(devices: Iterable[Device], port_id: str) -> tuple[Device, Port] | None:
    """Look up a port and its owner by port identifier."""
    for device in devices:
        port = device.port(port_id)
        if port is not None:
            return device, port
    return None


def owner_of(devices: Iterable[Device], port_id: str) -> Device | None:
    """Device that owns the given port."""
    found = find_port(devices, port_id)
    return found[0] if found else None


def iter_connections(devices: Iterable[Device]) -> Iterator[tuple[Port, Port]]:
    """Yield each cabled port pair once, in device/port declaration order."""
    index = build_port_index(devices)
    seen: set[str] = set()
    for device, port in index.values():
        if port.connected_to is None or port.id in seen:
            continue
        peer = index.get(port.connected_to)
        if peer is None:
            continue
        seen.add(port.id)
        seen.add(peer[1].id)
        yield port, peer[1]


def assert_symmetric(devices: Iterable[Device]) -> None:
    """Check the connection invariants of a device list.

    Raises:
        TopologyInvariantError: duplicate ids, a reference to a missing
            port, a self reference, or a one-sided connection
    """
    devices = list(devices)
    device_ids: set[str] = set()
    for device in devices:
        if device.id in device_ids:
            raise TopologyInvariantError(f'duplicate device id {device.id!r}')
        device_ids.add(device.id)

    index: PortIndex = {}
    for device in devices:
        for port in device.ports:
            if port.id in index:
                raise TopologyInvariantError(f'duplicate port id {port.id!r}')
            index[port.id] = (device, port)

    for device, port in index.values():
        if port.connected_to is None:
            continue
        if port.connected_to == port.id:
            raise TopologyInvariantError(f'port {port.id!r} is connected to itself')
        peer = index.get(port.connected_to)
        if peer is None:
            raise TopologyInvariantError(
                f'port {port.id!r} on {device.id!r} references missing port {port.connected_to!r}'
            )
        if peer[1].connected_to != port.id:
            raise TopologyInvariantError(
                f'asymmetric connection: {port.id!r} -> {peer[1].id!r} '
                f'but {peer[1].id!r} -> {peer[1].connected_to!r}'
            )


def _require_port(index: PortIndex, port_id: str) -> Port:
    entry = index.get(port_id)
    if entry is None:
        raise GraphError(
            message=f'Port {port_id} does not exist',
            error_code=ErrorCodes.PORT_NOT_FOUND,
        )
    return entry[1]


def _unplug(index: PortIndex, port: Port) -> None:
    """Clear a port and its peer in place (index must be over a working copy)."""
    if port.connected_to is not None:
        peer = index.get(port.connected_to)
        if peer is not None and peer[1].connected_to == port.id:
            peer[1].connected_to = None
            peer[1].link_status = 'down'
    port.connected_to = None
    port.link_status = 'down'


def connect_ports(devices: Iterable[Device], port_a: str, port_b: str) -> list[Device]:
    """
    Cable two ports together.

    An existing cable on either port is unplugged first. Roles are not
    checked: connecting incompatible ports is allowed and only shows up as a
    degraded simulation result.

    Args:
        devices: Current device list
        port_a: First port id
        port_b: Second port id

    Returns:
        New device list with the connection applied

    Raises:
        GraphError: if the ports are the same or either does not exist
    """
    if port_a == port_b:
        raise GraphError(
            message=f'Cannot connect port {port_a} to itself',
            error_code=ErrorCodes.SELF_CONNECTION,
        )

    updated = clone(devices)
    index = build_port_index(updated)
    first = _require_port(index, port_a)
    second = _require_port(index, port_b)

    _unplug(index, first)
    _unplug(index, second)
    first.connected_to = second.id
    second.connected_to = first.id

    logger.debug(f'Connected {port_a} <-> {port_b}')
    return updated


def disconnect_port(devices: Iterable[Device], port_id: str) -> list[Device]:
    """
    Unplug the cable on a port (both ends).

    Args:
        devices: Current device list
        port_id: Port to unplug; unplugging a free port is a no-op

    Returns:
        New device list

    Raises:
        GraphError: if the port does not exist
    """
    updated = clone(devices)
    index = build_port_index(updated)
    port = _require_port(index, port_id)
    _unplug(index, port)
    logger.debug(f'Disconnected {port_id}')
    return updated


def next_device_id(devices: Iterable[Device], device_type: str) -> str:
    """Smallest free ``<type>-<n>`` identifier."""
    taken = {device.id for device in devices}
    counter = 1
    while f'{device_type}-{counter}' in taken:
        counter += 1
    return f'{device_type}-{counter}'


def create_device(
    device_type: str,
    device_id: str,
    name: str | None = None,
    status: DeviceStatus | None = None,
    room_id: str | None = None,
    position: tuple[float, float, float] = (0.0, 0.0, 0.0),
    hosted_network: WifiNetwork | None = None,
) -> Device:
    """
    Create a device with the ports and wireless defaults of its type.

    Args:
        device_type: Catalog device type
        device_id: Identifier for the new device (port ids derive from it)
        name: Display name (defaults to the catalog display name)
        status: Requested status; the modem and outlets default to online,
            everything else to offline
        room_id: Room assignment (passthrough)
        position: Scene placement (passthrough)
        hosted_network: SSID to broadcast, for Wi-Fi hosting types

    Returns:
        New, unwired Device
    """
    definition = get_device_definition(device_type)
    if status is None:
        status = 'online' if (definition.is_modem or definition.is_outlet) else 'offline'

    device = Device(
        id=device_id,
        type=device_type,
        name=name or definition.display_name,
        position=position,
        ports=definition.build_ports(device_id),
        status=status,
        admin_status=status,
    )
    if room_id is not None:
        device.room_id = room_id
    if definition.hosts_wifi:
        configs = [hosted_network] if hosted_network is not None else []
        device.wifi_hosting = WifiHosting(enabled=True, configs=configs)
    if is_wifi_client(device_type):
        device.wireless = WirelessClient()
        device.connection_state = 'disconnected'
    return device


def add_device(devices: Iterable[Device], device: Device) -> list[Device]:
    """
    Append a device to the list.

    Raises:
        GraphError: if the device or one of its port ids is already in use
    """
    updated = clone(devices)
    if find_device(updated, device.id) is not None:
        raise GraphError(
            message=f'Device {device.id} already exists',
            error_code=ErrorCodes.DUPLICATE_ID,
        )
    index = build_port_index(updated)
    for port in device.ports:
        if port.id in index:
            raise GraphError(
                message=f'Port {port.id} already exists',
                error_code=ErrorCodes.DUPLICATE_ID,
            )
    updated.append(device.model_copy(deep=True))
    return updated


def remove_device(devices: Iterable[Device], device_id: str) -> list[Device]:
    """
    Remove a device and clear the peers of its cabled ports.

    Raises:
        GraphError: if the device does not exist
    """
    updated = clone(devices)
    target = find_device(updated, device_id)
    if target is None:
        raise GraphError(
            message=f'Device {device_id} does not exist',
            error_code=ErrorCodes.DEVICE_NOT_FOUND,
        )

    index = build_port_index(updated)
    for port in target.ports:
        _unplug(index, port)

    logger.debug(f'Removed device {device_id}')
    return [device for device in updated if device.id != device_id]
