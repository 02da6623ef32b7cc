"""
Loading and saving sandbox documents.

Documents are JSON written by the surrounding application. Older saves are
migrated to the current schema, broken cable references are cleared and the
simulation is re-run, so saved status fields are never trusted as is.
"""

import copy
import json
import time
from datetime import datetime
from loguru import logger
from netsim.graph import build_port_index, clone
from netsim.models.device import Device
from netsim.models.document import SandboxDocument
from netsim.simulation import run_pipeline
from netsim.utils.errors import DocumentError, ErrorCodes
from pathlib import Path
from pydantic import ValidationError
from typing import Any


CURRENT_SCHEMA_VERSION = 2

# Device types that gained a power cord in schema 2
_POWERED_TYPES = frozenset(
    {
        'zyxel-router',
        'cradlepoint-router',
        'managed-switch',
        'unmanaged-switch',
        'pos',
        'datavan-pos',
        'poindus-pos',
        'v3-pos',
        'v4-pos',
        'printer',
        'epson-thermal',
        'epson-impact',
        'kds',
        'elo-kds',
        'poe-injector',
    }
)

_LEGACY_ROLES = {'generic': 'lan', 'access': 'uplink'}
_LEGACY_ROOT_KEYS = ('activeScenario', 'scenarioObjectives')


def _migrate_v1_to_v2(data: dict[str, Any]) -> dict[str, Any]:
    logger.info('Migrating sandbox document from schema 1 to 2')

    settings = data.get('settings')
    if isinstance(settings, dict):
        settings.pop('daisyChainDetection', None)
    for key in _LEGACY_ROOT_KEYS:
        data.pop(key, None)

    for device in data.get('devices') or []:
        ports = device.setdefault('ports', [])
        has_power_port = any(port.get('role') in ('power_input', 'power_source') for port in ports)

        if device.get('type') == 'power-outlet':
            for port in ports:
                if port.get('role') == 'generic':
                    port['role'] = 'power_source'
        elif not has_power_port and device.get('type') in _POWERED_TYPES:
            ports.append(
                {
                    'id': f"{device.get('id', '')}-pwr",
                    'name': 'Power',
                    'role': 'power_input',
                    'connectedTo': None,
                    'linkStatus': 'down',
                }
            )

    data['schemaVersion'] = 2
    return data


def migrate_document(data: dict[str, Any]) -> dict[str, Any]:
    """
    Bring a raw document up to the current schema.

    Saves without ``schemaVersion`` take it from the legacy ``version``
    field (or 1). Legacy port roles are renamed on every load.

    Args:
        data: Parsed JSON document (not modified)

    Returns:
        Migrated copy of the document

    Raises:
        DocumentError: if the document is newer than this engine understands
    """
    migrated = copy.deepcopy(data)
    if not migrated.get('schemaVersion'):
        migrated['schemaVersion'] = migrated.get('version') or 1

    version = migrated['schemaVersion']
    if not isinstance(version, int) or version > CURRENT_SCHEMA_VERSION:
        raise DocumentError(
            message=f'Unsupported schema version {version!r}',
            error_code=ErrorCodes.UNSUPPORTED_SCHEMA,
            suggestion=f'Expected a schema version up to {CURRENT_SCHEMA_VERSION}',
        )

    if version < 2:
        migrated = _migrate_v1_to_v2(migrated)

    for device in migrated.get('devices') or []:
        for port in device.get('ports') or []:
            role = port.get('role')
            if role in _LEGACY_ROLES:
                port['role'] = _LEGACY_ROLES[role]

    return migrated


def _check_unique_ids(devices: list[Device]) -> None:
    device_ids: set[str] = set()
    port_ids: set[str] = set()
    for device in devices:
        if device.id in device_ids:
            raise DocumentError(
                message=f'Duplicate device id: {device.id}',
                error_code=ErrorCodes.DUPLICATE_ID,
            )
        device_ids.add(device.id)
        for port in device.ports:
            if port.id in port_ids:
                raise DocumentError(
                    message=f'Duplicate port id: {port.id}',
                    error_code=ErrorCodes.DUPLICATE_ID,
                )
            port_ids.add(port.id)


def _clear_broken_links(devices: list[Device]) -> int:
    index = build_port_index(devices)
    cleared = 0
    for device in devices:
        for port in device.ports:
            if port.connected_to is None:
                continue
            peer = index.get(port.connected_to)
            if peer is None or peer[1].connected_to != port.id or peer[1].id == port.id:
                logger.warning(
                    f'Broken link: port {port.id} points to {port.connected_to}; clearing connection'
                )
                port.connected_to = None
                port.link_status = 'down'
                cleared += 1
    return cleared


def sanitize_document(document: SandboxDocument) -> SandboxDocument:
    """
    Check ids, repair cable references and recompute simulated state.

    References to missing ports and one-sided references are cleared
    rather than rejected.

    Args:
        document: Migrated, parsed document

    Returns:
        New document with freshly simulated devices

    Raises:
        DocumentError: on duplicate device or port ids
    """
    devices = clone(document.devices)
    _check_unique_ids(devices)
    cleared = _clear_broken_links(devices)
    if cleared:
        logger.warning(f'Cleared {cleared} broken link(s) while loading document')

    return document.model_copy(update={'devices': run_pipeline(devices)})


def parse_document(data: Any) -> SandboxDocument:
    """
    Turn a decoded JSON value into a sanitized, simulated document.

    Raises:
        DocumentError: if the value is not a usable sandbox document
    """
    if not isinstance(data, dict):
        raise DocumentError(
            message='Invalid document structure: expected a JSON object',
            error_code=ErrorCodes.INVALID_DOCUMENT,
        )
    if not isinstance(data.get('devices'), list):
        raise DocumentError(
            message='Invalid document structure: missing devices array',
            error_code=ErrorCodes.INVALID_DOCUMENT,
        )

    migrated = migrate_document(data)
    try:
        document = SandboxDocument.model_validate(migrated)
    except ValidationError as e:
        raise DocumentError(
            message=f'Invalid document: {e.error_count()} validation error(s)',
            error_code=ErrorCodes.INVALID_DOCUMENT,
            suggestion=str(e),
        ) from e

    return sanitize_document(document)


def load_document(path: str | Path) -> SandboxDocument:
    """
    Read a sandbox document from disk.

    Args:
        path: JSON file written by save_document or the sandbox UI

    Returns:
        Sanitized, simulated document

    Raises:
        DocumentError: if the file is missing, not JSON, or not a valid document
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except FileNotFoundError as e:
        raise DocumentError(
            message=f'Document not found: {path}',
            error_code=ErrorCodes.INVALID_DOCUMENT,
        ) from e
    except json.JSONDecodeError as e:
        raise DocumentError(
            message=f'Document is not valid JSON: {e.msg} (line {e.lineno})',
            error_code=ErrorCodes.INVALID_DOCUMENT,
        ) from e

    document = parse_document(data)
    logger.debug(f'Loaded {path} with {len(document.devices)} devices')
    return document


def save_document(document: SandboxDocument, path: str | Path) -> SandboxDocument:
    """
    Write a sandbox document as JSON, stamping schema version and save time.

    Args:
        document: Document to save (not modified)
        path: Destination file

    Returns:
        The document as written
    """
    now = datetime.now()
    project_info = document.project_info.model_copy(update={'updated_at': now.isoformat()})
    stamped = document.model_copy(
        update={
            'schema_version': CURRENT_SCHEMA_VERSION,
            'timestamp': int(time.time() * 1000),
            'project_info': project_info,
        }
    )

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(stamped.to_wire(), indent=2), encoding='utf-8')
    logger.info(f'Saved {len(stamped.devices)} devices to {path}')
    return stamped
