"""
Device catalog for the network sandbox.
Maps each device type to its ports, power model and simulation capabilities.

Adding a device type means adding one entry to DEVICE_DEFINITIONS; the
simulation stages only ever consult the capability flags.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Literal, Tuple

from netsim.models.device import DeviceType
from netsim.models.port import Port, PortRole

PowerSource = Literal['outlet', 'poe', 'internal']
Category = Literal['pos', 'printer', 'wireless', 'infra', 'power']


@dataclass(frozen=True)
class PortTemplate:
    """Port created for every device of a type."""
    suffix: str
    label: str
    role: PortRole


@dataclass(frozen=True)
class DeviceDefinition:
    """Simulation-relevant description of one device type."""
    type: str
    display_name: str
    category: Category
    ports: Tuple[PortTemplate, ...]
    power_source: PowerSource = 'internal'
    is_modem: bool = False
    is_router: bool = False
    is_switch: bool = False
    is_access_point: bool = False
    is_poe_injector: bool = False
    is_outlet: bool = False
    is_endpoint: bool = False
    is_mobile: bool = False
    hosts_wifi: bool = False
    wifi_client: bool = False
    # Roles (besides poe_source) whose ports deliver PoE
    supplies_poe_on: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def requires_power(self) -> bool:
        """Whether the device depends on an outlet or a PoE source."""
        return self.power_source != 'internal'

    def port_count(self, role: str) -> int:
        """Number of ports of the given role."""
        return sum(1 for template in self.ports if template.role == role)

    def build_ports(self, device_id: str) -> List[Port]:
        """Create the device's ports, unconnected and link down."""
        return [
            Port(
                id=f"{device_id}-{template.suffix}",
                name=template.label,
                role=template.role,
            )
            for template in self.ports
        ]


def _numbered(count: int, suffix: str, label: str, role: PortRole) -> Tuple[PortTemplate, ...]:
    return tuple(
        PortTemplate(suffix=f"{suffix}{i}", label=f"{label} {i}", role=role)
        for i in range(1, count + 1)
    )


_WIRED_ENDPOINT_PORTS = (
    PortTemplate('eth', 'ETH', 'uplink'),
    PortTemplate('pwr', 'Power', 'power_input'),
)

_ROUTER_PORTS = (
    (PortTemplate('wan', 'WAN', 'wan'),)
    + _numbered(4, 'lan', 'LAN', 'lan')
    + (PortTemplate('pwr', 'Power', 'power_input'),)
)

_SWITCH_PORTS = _numbered(8, 'p', 'Port', 'lan') + (PortTemplate('pwr', 'Power', 'power_input'),)


def _endpoint(type_: str, display_name: str, category: Category, wifi_client: bool = False) -> DeviceDefinition:
    return DeviceDefinition(
        type=type_,
        display_name=display_name,
        category=category,
        ports=_WIRED_ENDPOINT_PORTS,
        power_source='outlet',
        is_endpoint=True,
        wifi_client=wifi_client,
    )


def _access_point(type_: str, display_name: str, suffix: str, label: str) -> DeviceDefinition:
    return DeviceDefinition(
        type=type_,
        display_name=display_name,
        category='wireless',
        ports=(PortTemplate(suffix, label, 'poe_client'),),
        power_source='poe',
        is_access_point=True,
        hosts_wifi=True,
    )


def _handheld(type_: str, display_name: str) -> DeviceDefinition:
    # Battery powered, wireless only
    return DeviceDefinition(
        type=type_,
        display_name=display_name,
        category='pos',
        ports=(),
        is_endpoint=True,
        is_mobile=True,
        wifi_client=True,
    )


# Device definitions registry
DEVICE_DEFINITIONS: Dict[str, DeviceDefinition] = {
    'isp-modem': DeviceDefinition(
        type='isp-modem',
        display_name='ISP Modem',
        category='infra',
        ports=(PortTemplate('wan', 'ISP/Coax', 'wan'), PortTemplate('lan', 'LAN', 'lan')),
        is_modem=True,
        hosts_wifi=True,
    ),
    'zyxel-router': DeviceDefinition(
        type='zyxel-router',
        display_name='Zyxel Router',
        category='infra',
        ports=_ROUTER_PORTS,
        power_source='outlet',
        is_router=True,
        hosts_wifi=True,
    ),
    'cradlepoint-router': DeviceDefinition(
        type='cradlepoint-router',
        display_name='Cradlepoint Router',
        category='infra',
        ports=_ROUTER_PORTS,
        power_source='outlet',
        is_router=True,
        hosts_wifi=True,
    ),
    'managed-switch': DeviceDefinition(
        type='managed-switch',
        display_name='Managed Switch',
        category='infra',
        ports=_SWITCH_PORTS,
        power_source='outlet',
        is_switch=True,
        supplies_poe_on=frozenset({'lan'}),
    ),
    'unmanaged-switch': DeviceDefinition(
        type='unmanaged-switch',
        display_name='Unmanaged Switch',
        category='infra',
        ports=_SWITCH_PORTS,
        power_source='outlet',
        is_switch=True,
    ),
    'access-point': _access_point('access-point', 'Access Point', 'eth', 'ETH'),
    'datto-ap440': _access_point('datto-ap440', 'Datto AP440', 'eth_poe', 'ETH/PoE'),
    'datto-ap62': _access_point('datto-ap62', 'Datto AP62', 'eth', 'ETH'),
    'poe-injector': DeviceDefinition(
        type='poe-injector',
        display_name='PoE Injector',
        category='power',
        ports=(
            PortTemplate('poe_out', 'PoE OUT', 'poe_source'),
            PortTemplate('lan_in', 'LAN IN', 'uplink'),
            PortTemplate('power', 'POWER', 'power_input'),
        ),
        power_source='outlet',
        is_poe_injector=True,
    ),
    'power-outlet': DeviceDefinition(
        type='power-outlet',
        display_name='Power Outlet',
        category='power',
        ports=_numbered(4, 'outlet', 'Outlet', 'power_source'),
        is_outlet=True,
    ),
    'pos': _endpoint('pos', 'POS Terminal', 'pos'),
    'datavan-pos': _endpoint('datavan-pos', 'Datavan POS', 'pos'),
    'poindus-pos': _endpoint('poindus-pos', 'Poindus POS', 'pos'),
    'v3-pos': _endpoint('v3-pos', 'V3 POS', 'pos'),
    'v4-pos': _endpoint('v4-pos', 'V4 POS', 'pos'),
    'printer': _endpoint('printer', 'Printer', 'printer'),
    'epson-thermal': _endpoint('epson-thermal', 'Epson Thermal', 'printer'),
    'epson-impact': _endpoint('epson-impact', 'Epson Kitchen', 'printer'),
    'kds': _endpoint('kds', 'KDS', 'pos', wifi_client=True),
    'elo-kds': _endpoint('elo-kds', 'Elo KDS', 'pos', wifi_client=True),
    'orderpad': _handheld('orderpad', 'OrderPad'),
    'cakepop': _handheld('cakepop', 'CakePop'),
    'unknown': DeviceDefinition(
        type='unknown',
        display_name='Unknown Device',
        category='infra',
        ports=_numbered(2, 'p', 'Port', 'lan'),
    ),
}

ROUTER_TYPES: Tuple[str, ...] = tuple(
    name for name, definition in DEVICE_DEFINITIONS.items() if definition.is_router
)


def get_device_definition(device_type: DeviceType | str) -> DeviceDefinition:
    """
    Get the definition for a device type.

    Args:
        device_type: Catalog device type

    Returns:
        DeviceDefinition, or the 'unknown' definition for unlisted types
    """
    return DEVICE_DEFINITIONS.get(device_type, DEVICE_DEFINITIONS['unknown'])


def is_wifi_client(device_type: str) -> bool:
    """Whether the device type can join a Wi-Fi network (and so has a connection state)."""
    return get_device_definition(device_type).wifi_client


def has_power_dependency(device_type: str) -> bool:
    """Whether the device type needs an outlet or PoE source to run."""
    return get_device_definition(device_type).requires_power


def supplies_poe(device_type: str, role: str) -> bool:
    """Whether a port of this role on this device type delivers PoE."""
    if role == 'poe_source':
        return True
    return role in get_device_definition(device_type).supplies_poe_on
