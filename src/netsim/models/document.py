"""Sandbox document exchanged with the surrounding application."""

from netsim.models.base import SandboxModel
from netsim.models.device import Device
from netsim.models.room import Room
from pydantic import Field


class ProjectInfo(SandboxModel):
    """Project metadata."""

    name: str = Field(default='New Project', description='Project name')
    created_at: str | None = Field(default=None, description='ISO creation time')
    updated_at: str | None = Field(default=None, description='ISO last-save time')


class Settings(SandboxModel):
    """UI settings stored with the document (not interpreted by the engine)."""

    show_warnings: bool = True
    compact_warnings: bool = False
    dark_mode: bool = False
    show_device_names: bool | None = None
    show_room_names: bool | None = None
    user_name: str | None = None
    has_seen_intro: bool | None = None


class RevisionStats(SandboxModel):
    """Counts captured with a revision."""

    device_count: int = 0
    room_count: int = 0
    cable_count: int = 0


class Revision(SandboxModel):
    """History entry written by the surrounding application."""

    id: str
    timestamp: int
    author: str = ''
    summary: str = ''
    manual_note: str | None = None
    stats: RevisionStats = Field(default_factory=RevisionStats)


class SandboxDocument(SandboxModel):
    """Saved sandbox: devices, rooms and application metadata."""

    version: int = Field(default=2, description='Legacy version field')
    schema_version: int | None = Field(default=None, description='Document schema version')
    timestamp: int = Field(default=0, description='Save time (epoch milliseconds)')
    project_info: ProjectInfo = Field(default_factory=ProjectInfo)
    settings: Settings = Field(default_factory=Settings)
    device_counts: dict[str, int] = Field(default_factory=dict)
    devices: list[Device] = Field(default_factory=list)
    rooms: list[Room] = Field(default_factory=list)
    revisions: list[Revision] = Field(default_factory=list)
