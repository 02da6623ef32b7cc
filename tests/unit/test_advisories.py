"""Unit tests for wiring advisories."""

import pytest
from netsim.advisories import NetworkValidator, validate_network
from netsim.graph import add_device, connect_ports, create_device, disconnect_port
from netsim.models import WirelessClient
from netsim.simulation import run_pipeline


@pytest.fixture
def clean_store(store_devices, lookup):
    """Store with the orderpad joined to the AP network."""
    lookup(store_devices, 'orderpad').wireless = WirelessClient(ssid='StoreAP', password='apkey')
    return run_pipeline(store_devices)


def _ids(devices):
    return [advisory.id for advisory in validate_network(devices)]


def _rewire(devices, unplug=(), plug=()):
    for port_id in unplug:
        devices = disconnect_port(devices, port_id)
    for a, b in plug:
        devices = connect_ports(devices, a, b)
    return run_pipeline(devices)


class TestCleanNetwork:
    """Test networks without problems."""

    def test_no_advisories(self, clean_store):
        """Test a correctly wired store produces nothing."""
        assert validate_network(clean_store) == []

    def test_empty_sandbox(self):
        """Test an empty device list is clean."""
        assert validate_network([]) == []

    def test_unjoined_handheld_isolated(self, store_devices):
        """Test a handheld without Wi-Fi credentials is flagged as isolated."""
        advisories = validate_network(store_devices)
        assert [a.id for a in advisories] == ['isolated-orderpad']
        assert advisories[0].severity == 'warning'
        assert advisories[0].device_ids == ['orderpad']


class TestWiringMistakes:
    """Test each advisory rule on a broken store."""

    def test_loop(self, clean_store):
        """Test a second cable between switch and router is a loop."""
        devices = _rewire(clean_store, plug=[('switch-p4', 'router-lan2')])
        advisories = validate_network(devices)
        assert advisories[0].id == 'network-loop'
        assert advisories[0].severity == 'error'

    def test_power_cords_are_not_loops(self, clean_store):
        """Test sharing an outlet does not count as a loop."""
        assert 'network-loop' not in _ids(clean_store)

    def test_wan_not_connected(self, clean_store):
        """Test an unplugged WAN is reported along with the router looking like a switch."""
        ids = _ids(_rewire(clean_store, unplug=['router-wan']))
        assert 'router-wan-not-connected-router' in ids
        assert 'misidentified-router-router' in ids

    def test_wan_into_switch(self, clean_store):
        """Test WAN must go straight to the modem."""
        devices = _rewire(
            clean_store, unplug=['router-wan'], plug=[('router-wan', 'switch-p4')]
        )
        assert 'wan-misuse-router' in _ids(devices)

    def test_modem_switch_conflict(self, clean_store):
        """Test modem and router feeding the same switch."""
        devices = _rewire(
            clean_store, unplug=['router-wan'], plug=[('modem-lan', 'switch-p4')]
        )
        ids = _ids(devices)
        assert 'modem-switch-conflict-modem' in ids
        assert 'bypass-router-pos' in ids

    def test_injector_without_power(self, clean_store):
        """Test an unplugged injector cord."""
        ids = _ids(_rewire(clean_store, unplug=['injector-power']))
        assert 'injector-no-power-injector' in ids

    def test_ap_into_switch(self, clean_store):
        """Test an AP plugged into a switch gets no PoE."""
        devices = _rewire(
            clean_store, unplug=['ap-eth_poe'], plug=[('ap-eth_poe', 'switch-p4')]
        )
        assert 'ap-no-poe-ap' in _ids(devices)

    def test_ap_on_injector_lan_port(self, clean_store):
        """Test an AP on the injector's LAN side."""
        devices = _rewire(
            clean_store,
            unplug=['ap-eth_poe', 'injector-lan_in'],
            plug=[('ap-eth_poe', 'injector-lan_in')],
        )
        assert 'ap-wrong-injector-port-ap' in _ids(devices)

    def test_ap_not_connected(self, clean_store):
        """Test an AP with nothing plugged in."""
        assert 'ap-not-connected-ap' in _ids(_rewire(clean_store, unplug=['ap-eth_poe']))

    def test_ap_without_router_path(self, clean_store):
        """Test an injector left off the switch strands the AP."""
        ids = _ids(_rewire(clean_store, unplug=['injector-lan_in']))
        assert 'ap-no-router-path-ap' in ids

    def test_ap_offline_with_good_wiring(self, clean_store, lookup):
        """Test an AP switched off despite correct cabling."""
        ap = lookup(clean_store, 'ap')
        ap.admin_status = 'offline'
        ap.status = 'offline'
        assert 'ap-offline-health-ap' in _ids(run_pipeline(clean_store))

    def test_unknown_device(self, clean_store):
        """Test unidentified hardware that is cabled in."""
        devices = add_device(clean_store, create_device('unknown', 'mystery'))
        devices = _rewire(devices, plug=[('mystery-p1', 'switch-p4')])
        assert 'unknown-device-mystery' in _ids(devices)

    def test_routers_cabled_together(self, clean_store):
        """Test two routers linked directly."""
        devices = add_device(clean_store, create_device('zyxel-router', 'router2'))
        devices = _rewire(devices, plug=[('router2-lan1', 'router-lan2')])
        ids = _ids(devices)
        assert 'multi-router-router-router2' in ids
        assert 'router-wan-not-connected-router2' in ids

    def test_unplugged_pos_isolated(self, clean_store):
        """Test a wired endpoint with no path to the router."""
        assert 'isolated-pos' in _ids(_rewire(clean_store, unplug=['pos-eth']))


class TestValidatorHelpers:
    """Test graph helpers used by the rules."""

    def test_neighbors(self, clean_store, lookup):
        """Test neighbours include power and data peers."""
        validator = NetworkValidator(clean_store)
        assert validator.neighbors(lookup(clean_store, 'injector')) == {'switch', 'outlet', 'ap'}

    def test_reaches_router(self, clean_store, lookup):
        """Test reachability follows live data links only."""
        validator = NetworkValidator(clean_store)
        assert validator.reaches_router(lookup(clean_store, 'pos')) is True
        assert validator.reaches_router(lookup(clean_store, 'outlet')) is False
