"""Network advisory model."""

from netsim.models.base import SandboxModel
from pydantic import Field
from typing import Literal


class Advisory(SandboxModel):
    """A wiring problem worth showing to the user. Never blocks anything."""

    id: str = Field(description='Stable identifier (rule plus device ids)')
    message: str = Field(description='Human-readable explanation')
    severity: Literal['error', 'warning'] = Field(description='How serious it is')
    device_ids: list[str] = Field(default_factory=list, description='Devices involved')
