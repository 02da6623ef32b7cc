"""
Store network sandbox engine.
Simulates power, cabling and Wi-Fi for restaurant networks built in the sandbox UI.
"""

__version__ = '1.0.0'

from netsim.advisories import validate_network
from netsim.catalog import DEVICE_DEFINITIONS, DeviceDefinition, get_device_definition
from netsim.planner import generate_sandbox, plan_infrastructure, to_device_counts
from netsim.session import Sandbox, dispatch
from netsim.simulation import run_pipeline
from netsim.synthesizer import build_topology

__all__ = [
    'DEVICE_DEFINITIONS',
    'DeviceDefinition',
    'Sandbox',
    'build_topology',
    'dispatch',
    'generate_sandbox',
    'get_device_definition',
    'plan_infrastructure',
    'run_pipeline',
    'to_device_counts',
    'validate_network',
]
