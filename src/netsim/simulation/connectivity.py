"""Connection-state derivation stage.

Runs a breadth-first search from every Wi-Fi capable device over live data
links and successful associations, and summarises how far it gets.
"""

from collections import deque
from collections.abc import Iterable
from netsim.catalog import get_device_definition, is_wifi_client
from netsim.graph import build_port_index, clone
from netsim.models.device import ConnectionState, Device


class DataPlane:
    """Undirected adjacency over ``up`` data links and Wi-Fi associations."""

    def __init__(self, devices: list[Device]):
        self._devices = {device.id: device for device in devices}
        self._adjacency: dict[str, set[str]] = {device.id: set() for device in devices}

        index = build_port_index(devices)
        for device in devices:
            for port in device.ports:
                if not port.carries_data:
                    continue
                peer = index.get(port.connected_to)
                if peer is not None:
                    self._link(device.id, peer[0].id)

            client = device.wireless
            if client is not None and client.associated_host_id in self._devices:
                self._link(device.id, client.associated_host_id)

    def _link(self, a: str, b: str) -> None:
        self._adjacency[a].add(b)
        self._adjacency[b].add(a)

    def reachable_from(self, device_id: str) -> list[Device]:
        """Devices reachable from the given one, excluding itself."""
        seen = {device_id}
        queue = deque([device_id])
        reached: list[Device] = []
        while queue:
            current = queue.popleft()
            for neighbor in sorted(self._adjacency[current]):
                if neighbor in seen:
                    continue
                seen.add(neighbor)
                reached.append(self._devices[neighbor])
                queue.append(neighbor)
        return reached


def derive_connection_state(device: Device, plane: DataPlane) -> ConnectionState:
    """
    Summarise reachability for one Wi-Fi capable device.

    A wired link is preferred over the radio. With neither a live link nor
    an association the short-circuited Wi-Fi outcome is returned as is.
    """
    if not device.is_online:
        return 'disconnected'

    wired = any(port.carries_data for port in device.ports)
    client = device.wireless
    associated = client is not None and client.auth_state == 'associated'

    if not wired and not associated:
        if client is not None and client.auth_state == 'auth_failed':
            return 'auth_failed'
        return 'disconnected'

    reached = plane.reachable_from(device.id)
    definitions = [get_device_definition(other.type) for other in reached]
    if any(definition.is_modem for definition in definitions):
        return 'online'
    if not wired:
        # Joined an online host that has no way out
        return 'associated_no_internet'
    if any(definition.is_router for definition in definitions):
        return 'associated_no_internet'
    return 'associated_no_ip'


def update_connection_states(devices: Iterable[Device]) -> list[Device]:
    """Set ``connection_state`` on Wi-Fi capable devices, clear it elsewhere."""
    updated = clone(devices)
    plane = DataPlane(updated)

    for device in updated:
        if is_wifi_client(device.type):
            device.connection_state = derive_connection_state(device, plane)
        else:
            device.connection_state = None

    return updated
