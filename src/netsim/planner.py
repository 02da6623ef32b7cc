"""
Capacity planner for new sandboxes.

Turns aggregate end-device counts into the infrastructure needed to serve
them: switches for extra LAN ports, outlets for everything on wall power,
and the wireless kit for handhelds.
"""

import math
from loguru import logger
from netsim.catalog import DEVICE_DEFINITIONS, get_device_definition
from netsim.graph import create_device, next_device_id
from netsim.models.device import Device
from netsim.models.plan import InfrastructurePlan, PlannerRequest
from netsim.models.wireless import WifiNetwork
from netsim.simulation import run_pipeline


ROUTER_LAN_CAPACITY = 4
SWITCH_PORTS = 8
DEVICES_PER_OUTLET = 4
MAX_SWITCH_ITERATIONS = 50

DEFAULT_ROUTER_TYPE = 'zyxel-router'
DEFAULT_SWITCH_TYPE = 'unmanaged-switch'
DEFAULT_ACCESS_POINT_TYPE = 'datto-ap440'


def required_switches(wired_demand: int) -> int:
    """
    Number of switches needed to give every wired device a LAN port.

    The router offers four LAN ports. Each switch adds eight ports but uses
    one of them (and one upstream port) for its uplink, so it adds seven
    net ports.

    Args:
        wired_demand: Cabled devices that need a LAN port

    Returns:
        Switch count
    """
    switches = 0
    capacity = ROUTER_LAN_CAPACITY
    iterations = 0
    while capacity < wired_demand and iterations < MAX_SWITCH_ITERATIONS:
        switches += 1
        capacity += SWITCH_PORTS - 1
        iterations += 1
    return switches


def required_outlets(powered_devices: int) -> int:
    """Four-socket outlets needed for the given number of wall-powered devices."""
    return math.ceil(powered_devices / DEVICES_PER_OUTLET)


def plan_infrastructure(request: PlannerRequest) -> InfrastructurePlan:
    """
    Size the infrastructure for a set of end devices.

    Any number of handhelds gets exactly one access point and one PoE
    injector. Access points (PoE) and handhelds (battery) are not counted
    towards outlets.

    Args:
        request: End-device counts

    Returns:
        InfrastructurePlan
    """
    wireless_kit = 1 if request.total_wireless > 0 else 0
    access_points = wireless_kit
    poe_injectors = wireless_kit

    wired_demand = request.wired_end_devices + poe_injectors
    switches = required_switches(wired_demand)

    routers = 1
    isp_modems = 1
    powered = request.wired_end_devices + switches + poe_injectors + routers + isp_modems
    outlets = required_outlets(powered)

    plan = InfrastructurePlan(
        routers=routers,
        isp_modems=isp_modems,
        switches=switches,
        outlets=outlets,
        access_points=access_points,
        poe_injectors=poe_injectors,
    )
    logger.debug(f'Planned infrastructure for {wired_demand} wired ports: {plan.model_dump()}')
    return plan


def to_device_counts(
    request: PlannerRequest,
    plan: InfrastructurePlan,
    router_type: str = DEFAULT_ROUTER_TYPE,
) -> dict[str, int]:
    """
    Merge requested end devices and planned infrastructure into per-type counts.

    Args:
        request: End-device counts (model names must be catalog types)
        plan: Output of plan_infrastructure
        router_type: Router model to use

    Returns:
        Count per catalog device type, in catalog order
    """
    counts = {device_type: 0 for device_type in DEVICE_DEFINITIONS}
    counts['isp-modem'] = plan.isp_modems
    counts[router_type] = plan.routers
    counts[DEFAULT_SWITCH_TYPE] = plan.switches
    counts[DEFAULT_ACCESS_POINT_TYPE] = plan.access_points
    counts['poe-injector'] = plan.poe_injectors
    counts['power-outlet'] = plan.outlets

    for group in (request.pos, request.printers, request.kds, request.wireless):
        for device_type, count in group.items():
            if device_type not in counts:
                raise ValueError(f'Unknown device type in request: {device_type}')
            counts[device_type] += count
    return counts


def generate_sandbox(device_counts: dict[str, int], spacing: float = 2.5) -> list[Device]:
    """
    Create an unwired sandbox from per-type counts.

    The modem and outlets start online, everything else offline. Wi-Fi hosts
    broadcast one hidden network each; handhelds start with empty
    credentials. The result has been through the simulation pipeline once.

    Args:
        device_counts: Count per catalog device type
        spacing: Grid spacing for initial placement

    Returns:
        Simulated device list
    """
    devices: list[Device] = []
    ssid_counter = 1
    x, z = -5.0, -5.0

    for device_type, count in device_counts.items():
        definition = get_device_definition(device_type)
        for i in range(count):
            hosted = None
            if definition.hosts_wifi:
                hosted = WifiNetwork(
                    ssid=f'c0090-{11540000 + ssid_counter}',
                    password=f'cake{10000 + i}',
                    hidden=True,
                )
                ssid_counter += 1

            devices.append(
                create_device(
                    device_type,
                    device_id=next_device_id(devices, device_type),
                    name=f'{definition.display_name} {i + 1}',
                    position=(x, 0.0, z),
                    hosted_network=hosted,
                )
            )
            x += spacing
            if x > 5:
                x = -5.0
                z += spacing

    logger.info(f'Generated sandbox with {len(devices)} devices')
    return run_pipeline(devices)
