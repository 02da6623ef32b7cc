"""Link status stage: port link lights from the status of both ends."""

from collections.abc import Iterable
from netsim.graph import build_port_index, clone
from netsim.models.device import Device, DeviceStatus
from netsim.models.port import LinkStatus
from netsim.utils.errors import TopologyInvariantError


def link_status_between(a: DeviceStatus, b: DeviceStatus) -> LinkStatus:
    """Link state of a cable whose two ends are in the given statuses."""
    if a == 'online' and b == 'online':
        return 'up'
    if 'offline' in (a, b):
        return 'down'
    if 'booting' in (a, b):
        return 'negotiating'
    return 'down'


def update_link_statuses(devices: Iterable[Device]) -> list[Device]:
    """
    Recompute ``link_status`` on every port.

    Unconnected ports are down. Both ends of a cable always get the same
    value because it is computed from the same pair of statuses.
    """
    updated = clone(devices)
    index = build_port_index(updated)

    for device in updated:
        for port in device.ports:
            if port.connected_to is None:
                port.link_status = 'down'
                continue
            peer = index.get(port.connected_to)
            if peer is None:
                raise TopologyInvariantError(
                    f'port {port.id!r} references missing port {port.connected_to!r}'
                )
            port.link_status = link_status_between(device.status, peer[0].status)

    return updated
