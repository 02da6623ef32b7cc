"""The four-stage simulation pipeline."""

import json
from collections.abc import Callable, Iterable
from loguru import logger
from netsim.graph import assert_symmetric
from netsim.models.device import Device
from netsim.simulation.connectivity import update_connection_states
from netsim.simulation.links import update_link_statuses
from netsim.simulation.power import propagate_power
from netsim.simulation.wireless import update_wireless_association


Stage = Callable[[Iterable[Device]], list[Device]]

STAGES: tuple[Stage, ...] = (
    propagate_power,
    update_link_statuses,
    update_wireless_association,
    update_connection_states,
)


def run_pipeline(devices: Iterable[Device]) -> list[Device]:
    """
    Recompute power, link, association and connection state for every device.

    The whole list is recomputed from configuration on every call, so
    running it twice without a mutation in between changes nothing.

    Args:
        devices: Device snapshot

    Returns:
        New, fully simulated device list

    Raises:
        TopologyInvariantError: if the connection references are inconsistent
    """
    current = list(devices)
    assert_symmetric(current)
    for stage in STAGES:
        current = stage(current)

    online = sum(1 for device in current if device.is_online)
    logger.debug(f'Simulated {len(current)} devices, {online} online')
    return current


def snapshot_json(devices: Iterable[Device]) -> str:
    """Serialise a device list in wire format (used to compare snapshots)."""
    return json.dumps([device.to_wire() for device in devices], indent=2)
