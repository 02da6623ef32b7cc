"""Unit tests for the topology synthesizer."""

import pytest
from netsim.graph import assert_symmetric, find_port
from netsim.models import BuildDevice, BuildRequest, is_build_error
from netsim.synthesizer import build_topology, layout_rooms, switch_capacity
from netsim.utils.errors import ErrorCodes


def _request(*devices, router_type='zyxel-router'):
    return BuildRequest(router_type=router_type, devices=list(devices))


def _pos(index, **kwargs):
    return BuildDevice(id=f'pos{index}', role='pos', type='v3-pos', name=f'POS {index}', **kwargs)


@pytest.fixture
def small_store():
    """Switch, POS, printer and AP across three rooms."""
    return _request(
        BuildDevice(id='sw1', role='switch', type='unmanaged-switch', name='Main Switch'),
        BuildDevice(id='pos1', role='pos', type='v3-pos', name='POS 1', room='dining'),
        BuildDevice(id='prn1', role='printer', type='epson-impact', name='Kitchen Printer', room='kitchen'),
        BuildDevice(id='ap1', role='ap', type='datto-ap440', name='Dining AP', room='dining'),
    )


class TestBuildErrors:
    """Test rejected build requests."""

    def test_empty_request(self):
        """Test zero devices returns an error and no graph."""
        outcome = build_topology(_request())
        assert is_build_error(outcome)
        assert outcome.error_code == ErrorCodes.EMPTY_BUILD
        assert not hasattr(outcome, 'devices')

    def test_invalid_router(self):
        """Test the router model must be a router."""
        outcome = build_topology(_request(_pos(1), router_type='v3-pos'))
        assert outcome.error_code == ErrorCodes.INVALID_ROUTER

    def test_unknown_connect_to(self):
        """Test binding to an id that is not in the request."""
        outcome = build_topology(_request(_pos(1, connect_to='ghost')))
        assert is_build_error(outcome)
        assert outcome.error_code == ErrorCodes.UNKNOWN_TARGET
        assert outcome.device_name == 'POS 1'

    def test_connect_to_endpoint(self):
        """Test binding to another endpoint is refused."""
        outcome = build_topology(_request(_pos(1), _pos(2, connect_to='pos1')))
        assert outcome.error_code == ErrorCodes.UNKNOWN_TARGET

    def test_switch_role_needs_switch_type(self):
        """Test role and hardware must agree."""
        outcome = build_topology(_request(BuildDevice(id='s', role='switch', type='v3-pos')))
        assert outcome.error_code == ErrorCodes.UNKNOWN_DEVICE_TYPE

    @pytest.mark.parametrize('role, device_type', [('pos', 'zyxel-router'), ('kds', 'isp-modem'), ('printer', 'unmanaged-switch')])
    def test_endpoint_role_needs_endpoint_type(self, role, device_type):
        """Test infrastructure hardware cannot be declared as an endpoint."""
        outcome = build_topology(_request(BuildDevice(id='e', role=role, type=device_type, name='Till')))
        assert is_build_error(outcome)
        assert outcome.error_code == ErrorCodes.UNKNOWN_DEVICE_TYPE
        assert outcome.device_name == 'Till'

    def test_duplicate_request_ids(self):
        """Test request ids must be unique."""
        outcome = build_topology(_request(_pos(1), _pos(1)))
        assert outcome.error_code == ErrorCodes.DUPLICATE_ID

    def test_explicit_target_full(self):
        """Test binding fails instead of overwriting an occupied port."""
        switches = [
            BuildDevice(id=f'sw{i}', role='switch', type='unmanaged-switch') for i in range(1, 5)
        ]
        outcome = build_topology(
            _request(
                BuildDevice(id='rtr', role='router', type='zyxel-router'),
                *switches,
                _pos(1, connect_to='rtr'),
            )
        )
        assert is_build_error(outcome)
        assert outcome.error_code == ErrorCodes.INSUFFICIENT_CAPACITY
        assert outcome.device_name == 'Zyxel Router'


class TestBuildResult:
    """Test successful builds."""

    def test_devices_created(self, small_store):
        """Test infrastructure, endpoints, injector and outlets are created."""
        result = build_topology(small_store)
        assert not is_build_error(result)
        types = sorted(device.type for device in result.devices)
        assert types == sorted(
            [
                'isp-modem',
                'zyxel-router',
                'unmanaged-switch',
                'v3-pos',
                'epson-impact',
                'datto-ap440',
                'poe-injector',
                'power-outlet',
                'power-outlet',
                'power-outlet',
            ]
        )

    def test_everything_online(self, small_store):
        """Test the fully wired build simulates without offline devices."""
        result = build_topology(small_store)
        assert all(device.status == 'online' for device in result.devices)
        assert_symmetric(result.devices)

    def test_wan_to_modem(self, small_store):
        """Test the router WAN is cabled to the modem LAN."""
        result = build_topology(small_store)
        _, wan = find_port(result.devices, 'zyxel-router-1-wan')
        assert wan.connected_to == 'isp-modem-1-lan'
        assert wan.link_status == 'up'

    def test_binding_order(self, small_store):
        """Test the switch uplinks first and endpoints take the next free ports."""
        result = build_topology(small_store)
        ports = {
            port.id: port.connected_to
            for device in result.devices
            if device.type == 'unmanaged-switch'
            for port in device.ports
        }
        assert ports['unmanaged-switch-1-p1'] == 'zyxel-router-1-lan1'
        assert ports['unmanaged-switch-1-p2'] == 'v3-pos-1-eth'
        assert ports['unmanaged-switch-1-p3'] == 'epson-impact-1-eth'
        assert ports['unmanaged-switch-1-p4'] == 'poe-injector-1-lan_in'
        assert ports['unmanaged-switch-1-p5'] is None

    def test_ap_behind_injector(self, small_store):
        """Test the AP is powered from the injector's PoE port."""
        result = build_topology(small_store)
        _, ap_port = find_port(result.devices, 'datto-ap440-1-eth_poe')
        assert ap_port.connected_to == 'poe-injector-1-poe_out'
        ap = next(d for d in result.devices if d.type == 'datto-ap440')
        assert ap.wifi_hosting.configs[0].hidden is True

    def test_connections_listed(self, small_store):
        """Test every cable laid is reported."""
        result = build_topology(small_store)
        assert len(result.connections) == 11
        assert ('zyxel-router-1-wan', 'isp-modem-1-lan') in result.connections

    def test_rooms(self, small_store):
        """Test office is always present, then each requested room once."""
        result = build_topology(small_store)
        assert [room.type for room in result.rooms] == ['office', 'dining', 'kitchen']
        room_of = {room.id: room.type for room in result.rooms}
        pos = next(d for d in result.devices if d.type == 'v3-pos')
        assert room_of[pos.room_id] == 'dining'

    def test_outlets_per_room(self, small_store):
        """Test outlets are added in the room of the devices they feed."""
        result = build_topology(small_store)
        room_of = {room.id: room.type for room in result.rooms}
        outlet_rooms = sorted(room_of[d.room_id] for d in result.devices if d.type == 'power-outlet')
        assert outlet_rooms == ['dining', 'kitchen', 'office']

    def test_router_default_network(self, small_store):
        """Test the router hosts a default network with the given password."""
        result = build_topology(small_store, ssid_password='s3cret')
        router = next(d for d in result.devices if d.type == 'zyxel-router')
        assert router.wifi_hosting.configs[0].password == 's3cret'

    def test_no_advisories_when_it_fits(self, small_store):
        """Test a build that fits gets no advisories."""
        assert build_topology(small_store).advisories == []


class TestBinding:
    """Test switch sizing and automatic binding."""

    def test_few_endpoints_on_router(self):
        """Test endpoints bind to the router when no switch is declared."""
        result = build_topology(_request(_pos(1), _pos(2)))
        assert find_port(result.devices, 'v3-pos-1-eth')[1].connected_to == 'zyxel-router-1-lan1'
        assert find_port(result.devices, 'v3-pos-2-eth')[1].connected_to == 'zyxel-router-1-lan2'
        assert not any(d.type == 'unmanaged-switch' for d in result.devices)

    def test_switch_added_when_router_full(self):
        """Test more than four endpoints without a switch adds one, with an advisory."""
        result = build_topology(_request(*[_pos(i) for i in range(1, 7)]))
        switches = [d for d in result.devices if d.type == 'unmanaged-switch']
        assert len(switches) == 1
        assert any('No switch declared' in note for note in result.advisories)
        for i in range(1, 7):
            assert find_port(result.devices, f'v3-pos-{i}-eth')[1].connected_to is not None

    def test_many_endpoints(self):
        """Test switches keep being added until every endpoint fits."""
        result = build_topology(_request(*[_pos(i) for i in range(1, 21)]))
        assert not is_build_error(result)
        assert len([d for d in result.devices if d.type == 'unmanaged-switch']) == 3
        assert all(
            find_port(result.devices, f'v3-pos-{i}-eth')[1].connected_to is not None
            for i in range(1, 21)
        )
        assert_symmetric(result.devices)

    def test_daisy_chain(self):
        """Test switches beyond the router's LAN ports chain off the last direct one."""
        switches = [
            BuildDevice(id=f'sw{i}', role='switch', type='unmanaged-switch') for i in range(1, 6)
        ]
        result = build_topology(_request(*switches, _pos(1)))
        uplink = find_port(result.devices, 'unmanaged-switch-5-p1')[1].connected_to
        assert uplink.startswith('unmanaged-switch-4-')

    def test_long_daisy_chain(self):
        """Test each chained switch hangs off the one before it."""
        switches = [
            BuildDevice(id=f'sw{i}', role='switch', type='unmanaged-switch') for i in range(1, 8)
        ]
        result = build_topology(_request(*switches, _pos(1)))
        assert not is_build_error(result)
        for upper, lower in ((4, 5), (5, 6), (6, 7)):
            uplink = find_port(result.devices, f'unmanaged-switch-{lower}-p1')[1].connected_to
            assert uplink == f'unmanaged-switch-{upper}-p2'

    @pytest.mark.parametrize('count, switches', [(71, 12), (80, 13), (100, 16)])
    def test_large_store_fits(self, count, switches):
        """Test every switch the build sizes can actually be cabled."""
        result = build_topology(_request(*[_pos(i) for i in range(1, count + 1)]))
        assert not is_build_error(result)
        assert len([d for d in result.devices if d.type == 'unmanaged-switch']) == switches
        assert all(
            find_port(result.devices, f'v3-pos-{i}-eth')[1].connected_to is not None
            for i in range(1, count + 1)
        )
        assert_symmetric(result.devices)

    def test_explicit_target(self):
        """Test connect_to wins over the default switch."""
        result = build_topology(
            _request(
                BuildDevice(id='sw1', role='switch', type='unmanaged-switch'),
                BuildDevice(id='sw2', role='switch', type='managed-switch'),
                _pos(1, connect_to='sw2'),
                _pos(2),
            )
        )
        assert find_port(result.devices, 'v3-pos-1-eth')[1].connected_to.startswith('managed-switch-1-')
        assert find_port(result.devices, 'v3-pos-2-eth')[1].connected_to.startswith('unmanaged-switch-1-')

    def test_router_entry_is_a_target(self):
        """Test a router entry maps onto the build's router."""
        result = build_topology(
            _request(
                BuildDevice(id='rtr', role='router', type='zyxel-router'),
                BuildDevice(id='sw1', role='switch', type='unmanaged-switch'),
                _pos(1, connect_to='rtr'),
            )
        )
        assert len([d for d in result.devices if d.type == 'zyxel-router']) == 1
        assert find_port(result.devices, 'v3-pos-1-eth')[1].connected_to == 'zyxel-router-1-lan2'

    def test_handheld_needs_no_port(self):
        """Test battery handhelds are created without cabling."""
        result = build_topology(
            _request(BuildDevice(id='pad', role='pos', type='orderpad', name='Pad 1'))
        )
        pad = next(d for d in result.devices if d.type == 'orderpad')
        assert pad.ports == []
        assert pad.status == 'online'


class TestHelpers:
    """Test layout and capacity helpers."""

    @pytest.mark.parametrize('switches, capacity', [(0, 4), (1, 10), (2, 16), (4, 28), (5, 34)])
    def test_switch_capacity(self, switches, capacity):
        """Test free endpoint ports for a number of switches."""
        assert switch_capacity(switches, 4) == capacity

    def test_layout_rooms_grid(self):
        """Test rooms are laid out on a square grid."""
        rooms = layout_rooms(['office', 'kitchen', 'dining', 'bar'])
        assert [(room.x, room.y) for room in rooms] == [(0, 0), (18, 0), (0, 16), (18, 16)]
        assert rooms[0].name == 'Office'
