"""Shared pytest fixtures for the sandbox engine tests."""

import pytest
from loguru import logger
from netsim.graph import connect_ports, create_device
from netsim.models import Device, WifiNetwork
from netsim.simulation import run_pipeline


STORE_CABLES = [
    ('router-wan', 'modem-lan'),
    ('router-pwr', 'outlet-outlet1'),
    ('switch-pwr', 'outlet-outlet2'),
    ('pos-pwr', 'outlet-outlet3'),
    ('injector-power', 'outlet-outlet4'),
    ('router-lan1', 'switch-p1'),
    ('pos-eth', 'switch-p2'),
    ('injector-lan_in', 'switch-p3'),
    ('ap-eth_poe', 'injector-poe_out'),
]


def _store_devices() -> list[Device]:
    return [
        create_device('isp-modem', 'modem'),
        create_device('power-outlet', 'outlet'),
        create_device(
            'zyxel-router',
            'router',
            status='online',
            hosted_network=WifiNetwork(ssid='CakeGuest', password='1234'),
        ),
        create_device('unmanaged-switch', 'switch', status='online'),
        create_device('pos', 'pos', status='online'),
        create_device('poe-injector', 'injector', status='online'),
        create_device(
            'datto-ap440',
            'ap',
            status='online',
            hosted_network=WifiNetwork(ssid='StoreAP', password='apkey', hidden=True),
        ),
        create_device('orderpad', 'orderpad', status='online'),
    ]


@pytest.fixture
def unwired_store() -> list[Device]:
    """Store devices with the requested statuses set but no cables."""
    return _store_devices()


@pytest.fixture
def store_devices() -> list[Device]:
    """Fully cabled and simulated store: modem, router, switch, POS, AP behind an injector, orderpad."""
    devices = _store_devices()
    for a, b in STORE_CABLES:
        devices = connect_ports(devices, a, b)
    return run_pipeline(devices)


@pytest.fixture
def lookup():
    """Find a device by id in a device list."""

    def _lookup(devices: list[Device], device_id: str) -> Device:
        for device in devices:
            if device.id == device_id:
                return device
        raise KeyError(device_id)

    return _lookup


@pytest.fixture
def log_sink():
    """Collect loguru messages emitted during the test."""
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record['message']), level='DEBUG')
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def log_records():
    """Collect full loguru records, extras included, emitted during the test."""
    records: list[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level='DEBUG')
    yield records
    logger.remove(handler_id)


# Pytest markers for test organization
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line('markers', 'slow: marks tests that take longer than 5 seconds')
    config.addinivalue_line('markers', 'integration: marks tests that exercise several modules together')
