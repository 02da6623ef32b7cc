"""Simulation pipeline: power, link status, wireless association, connection state."""

from netsim.simulation.connectivity import update_connection_states
from netsim.simulation.links import link_status_between, update_link_statuses
from netsim.simulation.pipeline import STAGES, run_pipeline, snapshot_json
from netsim.simulation.power import propagate_power
from netsim.simulation.wireless import update_wireless_association

__all__ = [
    'STAGES',
    'link_status_between',
    'propagate_power',
    'run_pipeline',
    'snapshot_json',
    'update_connection_states',
    'update_link_statuses',
    'update_wireless_association',
]
