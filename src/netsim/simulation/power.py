"""Power propagation stage.

The ISP modem is always up. Outlets and battery devices have no power
dependency, so their status is whatever the last power action set. Every
other device is powered through exactly one input (a ``power_input`` cord
or a ``poe_client`` port) and is forced offline when the source at the
other end of that input is not online itself.
"""

from collections.abc import Iterable
from loguru import logger
from netsim.catalog import DeviceDefinition, get_device_definition, supplies_poe
from netsim.graph import PortIndex, build_port_index, clone
from netsim.models.device import Device, DeviceStatus
from netsim.utils.errors import TopologyInvariantError


class _PowerResolver:
    """Memoised walk from each device back to its power root."""

    def __init__(self, devices: list[Device]):
        self._index: PortIndex = build_port_index(devices)
        self._resolved: dict[str, DeviceStatus] = {}
        self._visiting: set[str] = set()

    def status_of(self, device: Device) -> DeviceStatus:
        if device.id in self._resolved:
            return self._resolved[device.id]
        if device.id in self._visiting:
            raise TopologyInvariantError(f'power dependency cycle through {device.id!r}')

        self._visiting.add(device.id)
        definition = get_device_definition(device.type)
        if definition.is_modem:
            status: DeviceStatus = 'online'
        elif not definition.requires_power or self._is_powered(device, definition):
            status = device.admin_status or device.status
        else:
            status = 'offline'
        self._visiting.discard(device.id)

        self._resolved[device.id] = status
        return status

    def _is_powered(self, device: Device, definition: DeviceDefinition) -> bool:
        input_role = 'poe_client' if definition.power_source == 'poe' else 'power_input'
        power_input = device.first_port(input_role)
        if power_input is None or power_input.connected_to is None:
            return False

        peer = self._index.get(power_input.connected_to)
        if peer is None:
            raise TopologyInvariantError(
                f'port {power_input.id!r} references missing port {power_input.connected_to!r}'
            )
        source, source_port = peer

        if input_role == 'power_input':
            if source_port.role != 'power_source':
                return False
        elif not supplies_poe(source.type, source_port.role):
            return False

        return self.status_of(source) == 'online'


def propagate_power(devices: Iterable[Device]) -> list[Device]:
    """
    Derive each device's effective status from the power graph.

    Args:
        devices: Device snapshot (connections must be symmetric)

    Returns:
        New device list with ``status`` updated
    """
    updated = clone(devices)
    resolver = _PowerResolver(updated)

    forced_offline = 0
    for device in updated:
        status = resolver.status_of(device)
        if status == 'offline' and device.admin_status not in (None, 'offline'):
            forced_offline += 1
        device.status = status

    if forced_offline:
        logger.debug(f'Power stage: {forced_offline} device(s) without a live power source')
    return updated
