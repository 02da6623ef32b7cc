"""
Network advisories for a simulated sandbox.

Checks a device list for wiring mistakes a store technician typically
makes:
- LAN loops between switches, routers and access points
- Router WAN left unplugged or plugged into the wrong thing
- Devices sitting on the modem segment instead of behind the router
- Endpoints with no path to the router
- Access points wired around their PoE injector
- Injectors without power

Advisories are data for the UI; nothing here raises or blocks a mutation.
"""

from collections.abc import Iterable
from netsim.catalog import DeviceDefinition, get_device_definition
from netsim.graph import PortIndex, build_port_index
from netsim.models.advisory import Advisory
from netsim.models.device import Device
from netsim.models.port import Port
from netsim.simulation.connectivity import DataPlane


REACHABLE_STATES = ('online', 'associated_no_internet')


class NetworkValidator:
    """Runs every advisory rule over one device snapshot."""

    def __init__(self, devices: Iterable[Device]):
        self.devices = list(devices)
        self.index: PortIndex = build_port_index(self.devices)
        self.definitions: dict[str, DeviceDefinition] = {
            device.id: get_device_definition(device.type) for device in self.devices
        }
        self.plane = DataPlane(self.devices)
        self.advisories: list[Advisory] = []

    def peer(self, port: Port) -> tuple[Device, Port] | None:
        """Device and port at the other end of a cable."""
        if port.connected_to is None:
            return None
        return self.index.get(port.connected_to)

    def of_kind(self, flag: str) -> list[Device]:
        """Devices whose catalog definition has the capability flag set."""
        return [device for device in self.devices if getattr(self.definitions[device.id], flag)]

    def neighbors(self, device: Device) -> set[str]:
        """Ids of devices cabled to this one, over any port."""
        ids = set()
        for port in device.ports:
            found = self.peer(port)
            if found is not None:
                ids.add(found[0].id)
        return ids

    def reaches_router(self, device: Device) -> bool:
        """Whether live data links lead from the device to any router."""
        return any(
            self.definitions[other.id].is_router for other in self.plane.reachable_from(device.id)
        )

    def add(self, advisory_id: str, message: str, severity: str, *devices: Device) -> None:
        self.advisories.append(
            Advisory(
                id=advisory_id,
                message=message,
                severity=severity,
                device_ids=[device.id for device in devices],
            )
        )

    def run(self) -> list[Advisory]:
        self._check_loops()
        self._check_router_wan()
        self._check_modem_segment()
        self._check_isolated_endpoints()
        self._check_routers()
        self._check_unknown_devices()
        self._check_access_point_wiring()
        self._check_injectors()
        self._check_access_point_paths()
        return self.advisories

    def _check_loops(self) -> None:
        parent = {device.id: device.id for device in self.devices}

        def find(node: str) -> str:
            while parent[node] != node:
                parent[node] = parent[parent[node]]
                node = parent[node]
            return node

        for device in self.devices:
            for port in device.ports:
                found = self.peer(port)
                if found is None or port.id > found[1].id:
                    continue
                other, other_port = found
                if port.is_power or other_port.is_power or 'wan' in (port.role, other_port.role):
                    continue
                a, b = find(device.id), find(other.id)
                if a == b:
                    self.add(
                        'network-loop',
                        'Network loop detected! Loops cause broadcast storms and take the network down.',
                        'error',
                    )
                    return
                parent[a] = b

    def _check_router_wan(self) -> None:
        for router in self.of_kind('is_router'):
            wan = router.first_port('wan')
            if wan is None:
                continue
            found = self.peer(wan)
            if found is None:
                self.add(
                    f'router-wan-not-connected-{router.id}',
                    f"{router.display_name} WAN port is not connected. Connect it to the ISP modem's LAN port.",
                    'error',
                    router,
                )
                continue

            target, target_port = found
            if self.definitions[target.id].is_modem:
                if target_port.role != 'lan':
                    self.add(
                        f'router-wan-wrong-modem-port-{router.id}',
                        f"{router.display_name} WAN is connected to the modem's "
                        f'{target_port.display_label} port. It must use the LAN port.',
                        'error',
                        router,
                        target,
                    )
            elif target.type != 'unknown':
                self.add(
                    f'wan-misuse-{router.id}',
                    f'{router.display_name} WAN is plugged into {target.display_name} '
                    f"({target.type}). WAN must connect directly to the ISP modem's LAN port.",
                    'error',
                    router,
                    target,
                )

    def _check_modem_segment(self) -> None:
        segment: set[str] = set()
        for modem in self.of_kind('is_modem'):
            queue = [modem]
            seen = {modem.id}
            while queue:
                current = queue.pop(0)
                for port in current.ports:
                    found = self.peer(port)
                    if found is None:
                        continue
                    target, target_port = found
                    # A router's WAN port separates the segments
                    if self.definitions[target.id].is_router and target_port.role == 'wan':
                        continue
                    if target.id not in seen:
                        seen.add(target.id)
                        segment.add(target.id)
                        queue.append(target)

            lan = modem.first_port('lan')
            found = self.peer(lan) if lan is not None else None
            if found is not None and self.definitions[found[0].id].is_switch:
                switch = found[0]
                if any(self.definitions[other].is_router for other in self.neighbors(switch)):
                    self.add(
                        f'modem-switch-conflict-{modem.id}',
                        'ISP modem and router both provide LAN on the same switch. '
                        'This causes duplicate DHCP and random drops.',
                        'error',
                        modem,
                        switch,
                    )

        for device in self.devices:
            definition = self.definitions[device.id]
            if device.id in segment and (definition.is_endpoint or definition.is_access_point):
                self.add(
                    f'bypass-router-{device.id}',
                    f'{device.display_name} is connected to the ISP modem segment; '
                    'it should be behind the router.',
                    'error',
                    device,
                )

    def _check_isolated_endpoints(self) -> None:
        for device in self.of_kind('is_endpoint'):
            if device.connection_state is not None:
                isolated = device.connection_state not in REACHABLE_STATES
            else:
                isolated = not self.reaches_router(device)
            if isolated:
                self.add(
                    f'isolated-{device.id}',
                    f'{device.display_name} is not connected to the router; it cannot reach '
                    'the POS servers or the internet.',
                    'warning',
                    device,
                )

    def _check_routers(self) -> None:
        routers = self.of_kind('is_router')
        for router in routers:
            wan_connected = any(port.is_connected for port in router.ports_with_role('wan'))
            lan_connected = any(port.is_connected for port in router.ports_with_role('lan'))
            if lan_connected and not wan_connected:
                self.add(
                    f'misidentified-router-{router.id}',
                    f'{router.display_name} is labeled as a router but has no WAN connection. '
                    'Confirm it is actually a router and not a switch or AP.',
                    'warning',
                    router,
                )

        for i, first in enumerate(routers):
            for second in routers[i + 1:]:
                if second.id in self.neighbors(first):
                    self.add(
                        f'multi-router-{first.id}-{second.id}',
                        'Multiple routers are connected directly. This often causes IP conflicts.',
                        'warning',
                        first,
                        second,
                    )

    def _check_unknown_devices(self) -> None:
        for device in self.devices:
            if device.type == 'unknown' and any(port.is_connected for port in device.ports):
                self.add(
                    f'unknown-device-{device.id}',
                    f'{device.display_name} is unidentified. Please verify its type.',
                    'warning',
                    device,
                )

    def _check_access_point_wiring(self) -> None:
        for ap in self.of_kind('is_access_point'):
            port = ap.first_port('poe_client')
            found = self.peer(port) if port is not None else None
            if found is None:
                continue
            target, target_port = found
            definition = self.definitions[target.id]
            if definition.is_router or definition.is_switch:
                self.add(
                    f'ap-no-poe-{ap.id}',
                    f'{ap.display_name} is plugged directly into {target.display_name}. '
                    "Connect it to the PoE injector's PoE port so it gets power and data.",
                    'error',
                    ap,
                    target,
                )
            elif definition.is_poe_injector and target_port.role != 'poe_source':
                self.add(
                    f'ap-wrong-injector-port-{ap.id}',
                    f"{ap.display_name} is connected to the injector's LAN port instead of the "
                    'PoE port.',
                    'error',
                    ap,
                    target,
                )

    def _check_injectors(self) -> None:
        for injector in self.of_kind('is_poe_injector'):
            lan_in = injector.first_port('uplink')
            found = self.peer(lan_in) if lan_in is not None else None
            if found is not None:
                target, target_port = found
                if self.definitions[target.id].is_modem or target_port.role == 'wan':
                    self.add(
                        f'injector-wrong-connection-{injector.id}',
                        "PoE injector LAN is not connected to the router's LAN. Connect it to a "
                        'router LAN port or a switch uplinked to the router.',
                        'error',
                        injector,
                        target,
                    )
                elif self.definitions[target.id].is_switch and not self.reaches_router(target):
                    self.add(
                        f'injector-isolated-switch-{injector.id}',
                        "PoE injector is connected to an isolated switch. Connect the switch to the router's LAN.",
                        'error',
                        injector,
                        target,
                    )

            cord = injector.first_port('power_input')
            if cord is not None and not cord.is_connected:
                poe_out = injector.first_port('poe_source')
                fed = self.peer(poe_out) if poe_out is not None else None
                ap_name = fed[0].display_name if fed is not None else 'AP'
                self.add(
                    f'injector-no-power-{injector.id}',
                    f'PoE injector for {ap_name} has no power source. Plug it into a wall outlet.',
                    'error',
                    injector,
                )

    def _wiring_looks_correct(self, ap: Device) -> bool:
        port = ap.first_port('poe_client')
        found = self.peer(port) if port is not None else None
        if found is None:
            return False
        injector, injector_port = found
        if not self.definitions[injector.id].is_poe_injector or injector_port.role != 'poe_source':
            return False
        cord = injector.first_port('power_input')
        lan_in = injector.first_port('uplink')
        return bool(cord and cord.is_connected and lan_in and lan_in.is_connected)

    def _check_access_point_paths(self) -> None:
        for ap in self.of_kind('is_access_point'):
            if ap.status == 'offline' and self._wiring_looks_correct(ap):
                self.add(
                    f'ap-offline-health-{ap.id}',
                    f'{ap.display_name} is offline even though cabling looks correct. Check the '
                    'AP lights, reboot it, or verify its configuration.',
                    'warning',
                    ap,
                )
                continue

            port = ap.first_port('poe_client')
            found = self.peer(port) if port is not None else None
            if found is None:
                self.add(
                    f'ap-not-connected-{ap.id}',
                    f'{ap.display_name} is not connected to the network. Connect it to a PoE injector.',
                    'warning',
                    ap,
                )
            elif self.definitions[found[0].id].is_poe_injector and not self.reaches_router(ap):
                self.add(
                    f'ap-no-router-path-{ap.id}',
                    f'{ap.display_name} is not connected to the router, so handhelds on its '
                    'network cannot reach the POS servers or the internet.',
                    'warning',
                    ap,
                )


def validate_network(devices: Iterable[Device]) -> list[Advisory]:
    """
    Collect wiring advisories for a simulated device list.

    Args:
        devices: Device snapshot, normally straight out of the pipeline

    Returns:
        Advisories in rule order; empty for a clean network
    """
    return NetworkValidator(devices).run()
