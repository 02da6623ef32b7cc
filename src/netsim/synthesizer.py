"""
Topology synthesizer.

Builds a fully wired sandbox from a role-tagged device list: the ISP modem
and router are implicit, switches are added when the endpoints do not fit,
every access point gets its own PoE injector and every wall-powered device
gets an outlet in its room. All cables are in place before the simulation
pipeline runs, and it runs exactly once.
"""

import math
from collections.abc import Iterable
from loguru import logger
from netsim.catalog import get_device_definition
from netsim.graph import create_device, next_device_id
from netsim.models.build import BuildDevice, BuildError, BuildOutcome, BuildRequest, BuildResult
from netsim.models.device import Device
from netsim.models.port import Port
from netsim.models.room import ROOM_COLORS, Room
from netsim.models.wireless import WifiNetwork
from netsim.simulation import run_pipeline
from netsim.utils.errors import ErrorCodes


DEFAULT_SWITCH_TYPE = 'unmanaged-switch'
DEFAULT_ROUTER_SSID = 'cake-store'
DEFAULT_SSID_PASSWORD = 'cake10000'

SOCKETS_PER_OUTLET = 4
MAX_AUTO_SWITCHES = 50
ENDPOINT_ROLES = ('pos', 'printer', 'kds')

ROOM_WIDTH = 16.0
ROOM_HEIGHT = 14.0
ROOM_SPACING = 2.0
ROOM_PADDING = 2.5


class _BuildAborted(Exception):
    """Internal signal carrying the error result back to build_topology."""

    def __init__(self, error: BuildError):
        super().__init__(error.message)
        self.error = error


class PortAllocator:
    """Hands out free ports and records the cables laid during a build."""

    def __init__(self) -> None:
        self.connections: list[tuple[str, str]] = []

    @staticmethod
    def next_free(device: Device, role: str = 'lan') -> Port | None:
        """First unconnected port of the role, in declaration order."""
        for port in device.ports_with_role(role):
            if port.connected_to is None:
                return port
        return None

    @staticmethod
    def free_count(device: Device, role: str = 'lan') -> int:
        """Number of unconnected ports of the role."""
        return sum(1 for port in device.ports_with_role(role) if port.connected_to is None)

    def cable(self, a: Device, port_a: Port, b: Device, port_b: Port) -> None:
        """
        Connect two ports.

        Raises:
            _BuildAborted: if either port is already in use
        """
        for device, port in ((a, port_a), (b, port_b)):
            if port.connected_to is not None:
                raise _BuildAborted(
                    BuildError(
                        message=f'{port.display_label} on {device.display_name} is already in use',
                        error_code=ErrorCodes.PORT_OCCUPIED,
                        device_name=device.display_name,
                        port_name=port.display_label,
                    )
                )
        port_a.connected_to = port_b.id
        port_b.connected_to = port_a.id
        self.connections.append((port_a.id, port_b.id))

    def bind(self, source: Device, source_port: Port, target: Device) -> None:
        """
        Cable a device port into the next free LAN port of the target.

        Raises:
            _BuildAborted: if the target has no free LAN port
        """
        target_port = self.next_free(target)
        if target_port is None:
            raise _BuildAborted(
                BuildError(
                    message=f'{target.display_name} has no free LAN port for {source.display_name}',
                    error_code=ErrorCodes.INSUFFICIENT_CAPACITY,
                    device_name=target.display_name,
                )
            )
        self.cable(source, source_port, target, target_port)


def switch_capacity(switch_count: int, router_lan_ports: int, switch_ports: int = 8) -> int:
    """
    Endpoint ports available with the given number of switches.

    The first ``router_lan_ports`` switches uplink to the router. The rest
    form a daisy chain hanging off the last of those, each switch plugged
    into the one before it, so no switch ever gives up more than one port
    to a downstream switch. Every uplink uses one port on the switch and
    one on whatever it plugs into.

    Args:
        switch_count: Number of switches
        router_lan_ports: LAN ports on the router
        switch_ports: LAN ports per switch

    Returns:
        Free ports left for endpoints
    """
    direct = min(switch_count, router_lan_ports)
    chained = switch_count - direct
    return switch_count * (switch_ports - 1) - chained + (router_lan_ports - direct)


def layout_rooms(room_types: Iterable[str]) -> list[Room]:
    """Place one room per type on a square-ish grid."""
    types = list(room_types)
    cols = math.ceil(math.sqrt(len(types))) if types else 1
    rooms = []
    for index, room_type in enumerate(types):
        col = index % cols
        row = index // cols
        rooms.append(
            Room(
                id=f'room-{index + 1}',
                type=room_type,
                name=room_type.capitalize(),
                x=col * (ROOM_WIDTH + ROOM_SPACING),
                y=row * (ROOM_HEIGHT + ROOM_SPACING),
                width=ROOM_WIDTH,
                height=ROOM_HEIGHT,
                color=ROOM_COLORS[room_type],
            )
        )
    return rooms


def _row(devices: list[Device], center_x: float, z: float, left: float, right: float) -> None:
    spacing = min(3.0, (right - left) / max(len(devices), 1))
    for i, device in enumerate(devices):
        x = center_x + (i - (len(devices) - 1) / 2) * spacing
        device.position = (max(left, min(right, x)), 0.0, z)


def layout_devices(devices: list[Device], rooms: list[Room]) -> None:
    """Arrange devices inside their rooms: infrastructure on top, endpoints in the middle, outlets bottom right."""
    by_id = {room.id: room for room in rooms}
    for room_id in dict.fromkeys(device.room_id for device in devices):
        members = [device for device in devices if device.room_id == room_id]
        room = by_id.get(room_id)
        if room is None:
            for i, device in enumerate(members):
                device.position = (-15.0 + i * 2, 0.0, 0.0)
            continue

        left = room.x - room.width / 2 + ROOM_PADDING
        right = room.x + room.width / 2 - ROOM_PADDING
        top = room.y - room.height / 2 + ROOM_PADDING
        bottom = room.y + room.height / 2 - ROOM_PADDING

        definitions = {device.id: get_device_definition(device.type) for device in members}
        outlets = [d for d in members if definitions[d.id].is_outlet]
        endpoints = [d for d in members if definitions[d.id].is_endpoint]
        infra = [
            d for d in members if not (definitions[d.id].is_outlet or definitions[d.id].is_endpoint)
        ]

        _row(infra, room.x, top + 1, left, right)
        _row(endpoints, room.x, (top + bottom) / 2, left, right)
        for i, outlet in enumerate(outlets):
            outlet.position = (max(left, right - 1 - i * 2), 0.0, bottom - 1)


def _data_port(device: Device) -> Port | None:
    for role in ('uplink', 'lan', 'poe_client'):
        port = device.first_port(role)
        if port is not None:
            return port
    return None


def _validate(request: BuildRequest) -> BuildError | None:
    if not request.devices:
        return BuildError(
            message='No devices to build. Add at least one device.',
            error_code=ErrorCodes.EMPTY_BUILD,
        )
    if not get_device_definition(request.router_type).is_router:
        return BuildError(
            message=f'{request.router_type} is not a router model',
            error_code=ErrorCodes.INVALID_ROUTER,
        )

    seen: set[str] = set()
    for entry in request.devices:
        if entry.id in seen:
            return BuildError(
                message=f'Device id {entry.id} is used more than once',
                error_code=ErrorCodes.DUPLICATE_ID,
                device_name=entry.name or entry.id,
            )
        seen.add(entry.id)

        definition = get_device_definition(entry.type)
        if entry.role == 'switch' and not definition.is_switch:
            return BuildError(
                message=f'{entry.type} cannot be used as a switch',
                error_code=ErrorCodes.UNKNOWN_DEVICE_TYPE,
                device_name=entry.name or entry.id,
            )
        if entry.role == 'ap' and not definition.is_access_point:
            return BuildError(
                message=f'{entry.type} is not an access point',
                error_code=ErrorCodes.UNKNOWN_DEVICE_TYPE,
                device_name=entry.name or entry.id,
            )
        if entry.role in ENDPOINT_ROLES and not definition.is_endpoint:
            return BuildError(
                message=f'{entry.type} cannot be used as a {entry.role} endpoint',
                error_code=ErrorCodes.UNKNOWN_DEVICE_TYPE,
                device_name=entry.name or entry.id,
            )

    targets = {entry.id for entry in request.devices if entry.role in ('switch', 'router')}
    for entry in request.devices:
        if entry.connect_to is not None and entry.connect_to not in targets:
            return BuildError(
                message=f'{entry.name or entry.id} connects to {entry.connect_to}, '
                'which is not a switch or router in this build',
                error_code=ErrorCodes.UNKNOWN_TARGET,
                device_name=entry.name or entry.id,
            )
    return None


class _TopologyBuilder:
    """Single-use builder; holds the working device list while cabling."""

    def __init__(self, request: BuildRequest, ssid_password: str):
        self.request = request
        self.ssid_password = ssid_password
        self.devices: list[Device] = []
        self.allocator = PortAllocator()
        self.advisories: list[str] = []
        self.targets: dict[str, Device] = {}
        self.hosted_count = 0

        room_types = ['office'] + [entry.room for entry in request.devices]
        self.rooms = layout_rooms(dict.fromkeys(room_types))
        self.room_ids = {room.type: room.id for room in self.rooms}

    def _add(self, device_type: str, name: str | None, room: str = 'office', **kwargs) -> Device:
        device = create_device(
            device_type,
            device_id=next_device_id(self.devices, device_type),
            name=name,
            status='online',
            room_id=self.room_ids.get(room, self.room_ids['office']),
            **kwargs,
        )
        self.devices.append(device)
        return device

    def _hosted_network(self) -> WifiNetwork:
        self.hosted_count += 1
        return WifiNetwork(
            ssid=f'c0090-{11540000 + self.hosted_count}',
            password=f'cake{10000 + self.hosted_count}',
            hidden=True,
        )

    def build(self) -> BuildResult:
        entries = self.request.devices
        modem = self._add('isp-modem', None)
        router = self._add(
            self.request.router_type,
            None,
            hosted_network=WifiNetwork(ssid=DEFAULT_ROUTER_SSID, password=self.ssid_password),
        )
        self.allocator.cable(router, router.first_port('wan'), modem, modem.first_port('lan'))

        for entry in entries:
            if entry.role == 'router':
                self.targets[entry.id] = router
                if entry.type != self.request.router_type:
                    self.advisories.append(
                        f'{entry.name or entry.id} uses the build router '
                        f'({self.request.router_type}) instead of {entry.type}'
                    )

        switches = self._build_switches(router, [e for e in entries if e.role == 'switch'])
        endpoints = [e for e in entries if e.role not in ('switch', 'router')]
        created = [(entry, self._create_endpoint(entry)) for entry in endpoints]

        # Explicit targets first so automatic placement cannot take their ports
        for entry, device in created:
            if entry.connect_to is not None:
                self._bind(device, self.targets[entry.connect_to])
        for entry, device in created:
            if entry.connect_to is None:
                self._bind(device, self._automatic_target(switches, router))

        self._add_outlets()
        layout_devices(self.devices, self.rooms)

        simulated = run_pipeline(self.devices)
        return BuildResult(
            devices=simulated,
            rooms=self.rooms,
            connections=self.allocator.connections,
            advisories=self.advisories,
        )

    def _needs_port(self, entry: BuildDevice) -> bool:
        definition = get_device_definition(entry.type)
        return definition.is_access_point or any(
            template.role in ('uplink', 'lan') for template in definition.ports
        )

    def _build_switches(self, router: Device, declared: list[BuildDevice]) -> list[Device]:
        router_lan = len(router.ports_with_role('lan'))
        demand = sum(
            1
            for entry in self.request.devices
            if entry.role not in ('switch', 'router') and self._needs_port(entry)
        )

        total = len(declared)
        if total or demand > router_lan:
            while switch_capacity(total, router_lan) < demand and total < MAX_AUTO_SWITCHES:
                total += 1
        spawned = total - len(declared)

        if spawned and not declared:
            self.advisories.append(
                f'No switch declared but {demand} endpoints need a port '
                f'(the router has {router_lan}); added {spawned} unmanaged switch(es)'
            )
        elif spawned:
            self.advisories.append(
                f'Declared switches cannot fit {demand} endpoints; '
                f'added {spawned} unmanaged switch(es)'
            )

        switches = []
        for entry in declared:
            device = self._add(entry.type, entry.name or None, entry.room)
            self.targets[entry.id] = device
            switches.append(device)
        for _ in range(spawned):
            switches.append(self._add(DEFAULT_SWITCH_TYPE, f'Switch {len(switches) + 1}'))

        for position, switch in enumerate(switches):
            upstream = router if position < router_lan else switches[position - 1]
            self.allocator.bind(switch, self.allocator.next_free(switch), upstream)

        if spawned:
            logger.debug(f'Added {spawned} switch(es) for {demand} endpoints')
        return switches

    def _create_endpoint(self, entry: BuildDevice) -> Device:
        definition = get_device_definition(entry.type)
        name = entry.name or None
        if not definition.is_access_point:
            return self._add(entry.type, name, entry.room)

        ap = self._add(entry.type, name, entry.room, hosted_network=self._hosted_network())
        injector = self._add('poe-injector', f'PoE for {ap.display_name}', entry.room)
        self.allocator.cable(
            ap, ap.first_port('poe_client'), injector, injector.first_port('poe_source')
        )
        # The injector's LAN IN is what gets bound to the network
        return injector

    def _bind(self, device: Device, target: Device) -> None:
        port = _data_port(device)
        if port is None:
            return
        self.allocator.bind(device, port, target)

    def _automatic_target(self, switches: list[Device], router: Device) -> Device:
        for switch in switches:
            if self.allocator.free_count(switch):
                return switch
        return router

    def _add_outlets(self) -> None:
        by_room: dict[str | None, list[Device]] = {}
        for device in self.devices:
            if get_device_definition(device.type).power_source == 'outlet':
                by_room.setdefault(device.room_id, []).append(device)

        for room_id, powered in by_room.items():
            room_type = next((room.type for room in self.rooms if room.id == room_id), 'office')
            for start in range(0, len(powered), SOCKETS_PER_OUTLET):
                outlet = self._add('power-outlet', None, room_type)
                sockets = outlet.ports_with_role('power_source')
                for device, socket in zip(powered[start:start + SOCKETS_PER_OUTLET], sockets):
                    cord = device.first_port('power_input')
                    if cord is not None:
                        self.allocator.cable(device, cord, outlet, socket)


def build_topology(
    request: BuildRequest,
    ssid_password: str = DEFAULT_SSID_PASSWORD,
) -> BuildOutcome:
    """
    Build a wired, simulated sandbox from a role-tagged device list.

    Endpoints with ``connect_to`` are bound to that switch or router. All
    others go to the first switch with a free LAN port, then to the router.
    Binding always takes the next free LAN port in declaration order and
    never replaces an existing cable.

    Args:
        request: Router model and role-tagged devices
        ssid_password: Password of the router's default network

    Returns:
        BuildResult on success, BuildError for invalid or unbuildable requests
    """
    error = _validate(request)
    if error is None:
        try:
            result = _TopologyBuilder(request, ssid_password).build()
        except _BuildAborted as aborted:
            error = aborted.error
        else:
            logger.info(
                f'Built topology: {len(result.devices)} devices, '
                f'{len(result.connections)} cables, {len(result.advisories)} advisories'
            )
            return result

    logger.warning(f'Build rejected: [{error.error_code}] {error.message}')
    return error
