"""Room model (opaque floor-plan data carried through the engine)."""

from netsim.models.base import SandboxModel
from pydantic import Field
from typing import Literal


RoomType = Literal['kitchen', 'dining', 'office', 'bar', 'storage']

ROOM_COLORS: dict[str, str] = {
    'office': '#ef4444',
    'kitchen': '#3b82f6',
    'dining': '#22c55e',
    'bar': '#f97316',
    'storage': '#6b7280',
}


class Room(SandboxModel):
    """Rectangular room on the floor plan. Not interpreted by the simulation."""

    id: str = Field(description='Room identifier')
    type: RoomType = Field(description='Room type')
    name: str = Field(default='', description='Display name')
    x: float = Field(default=0.0, description='Center X')
    y: float = Field(default=0.0, description='Center Y')
    width: float = Field(default=10.0, description='Width')
    height: float = Field(default=10.0, description='Height')
    color: str = Field(default='#6b7280', description='Fill color')
