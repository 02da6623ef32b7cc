"""Wireless association stage.

Matches each Wi-Fi client against the networks broadcast by online hosts.
The outcome is stored on the client's ``wireless`` block; reachability is
left to the connection-state stage. Nothing transient is kept between runs.
"""

from collections.abc import Iterable
from netsim.catalog import is_wifi_client
from netsim.graph import clone
from netsim.models.device import Device
from netsim.models.wireless import WifiNetwork


def find_broadcasts(ssid: str, devices: Iterable[Device]) -> list[tuple[Device, WifiNetwork]]:
    """Online hosts currently broadcasting the SSID, in declaration order."""
    found = []
    for host in devices:
        if not host.is_online or host.wifi_hosting is None:
            continue
        network = host.wifi_hosting.find(ssid)
        if network is not None:
            found.append((host, network))
    return found


def update_wireless_association(devices: Iterable[Device]) -> list[Device]:
    """
    Resolve every client's association.

    ``auth_state`` ends up as:

    - ``idle``: not attempting (empty SSID), client not online, or no online
      host broadcasts the SSID
    - ``auth_failed``: the SSID is on the air but no host accepts the password
    - ``associated``: joined the first host that accepts the password
    """
    updated = clone(devices)

    for device in updated:
        client = device.wireless
        if client is None:
            continue
        client.associated_host_id = None

        if not is_wifi_client(device.type) or not client.is_attempting or not device.is_online:
            client.auth_state = 'idle'
            continue

        broadcasts = [
            (host, network)
            for host, network in find_broadcasts(client.ssid, updated)
            if host.id != device.id
        ]
        if not broadcasts:
            client.auth_state = 'idle'
            continue

        for host, network in broadcasts:
            if network.accepts(client.password):
                client.auth_state = 'associated'
                client.associated_host_id = host.id
                break
        else:
            client.auth_state = 'auth_failed'

    return updated
