"""Loguru sinks and the structured records written around sandbox mutations.

Every record carries a ``session_id`` extra so the lines produced by one
Sandbox can be pulled out of the JSON log.
"""

import sys
from collections.abc import Iterable
from loguru import logger
from netsim.models.device import Device
from pathlib import Path
from typing import Any


DEFAULT_LOG_FILE = Path.home() / '.netsim' / 'logs' / 'netsim.log'

FILE_FORMAT = '{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[session_id]} | {message}'
CONSOLE_FORMAT = (
    '<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | '
    '<magenta>{extra[session_id]}</magenta> | <level>{message}</level>'
)

# Never written to the log, at any nesting depth
SECRET_FIELDS = frozenset({'password'})


def configure_logging(
    log_file: str | Path | None = None,
    log_level: str = 'INFO',
    include_console: bool = False,
) -> Path:
    """Route engine logs to a JSON file and optionally to stderr.

    Args:
        log_file: Log path (defaults to ~/.netsim/logs/netsim.log)
        log_level: Minimum level for every sink
        include_console: Also print colourised records to stderr

    Returns:
        Path of the JSON log file
    """
    logger.remove()
    logger.configure(extra={'session_id': ''})

    path = Path(log_file) if log_file else DEFAULT_LOG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        path,
        format=FILE_FORMAT,
        serialize=True,
        rotation='10 MB',
        retention='7 days',
        compression='gz',
        level=log_level,
        diagnose=False,
    )
    if include_console:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=log_level, colorize=True)

    return path


def session_logger(session_id: str = ''):
    """Logger bound to a sandbox session."""
    return logger.bind(session_id=session_id)


def redact(value: Any) -> Any:
    """Copy of a dumped mutation with every secret field removed."""
    if isinstance(value, dict):
        return {key: redact(item) for key, item in value.items() if key not in SECRET_FIELDS}
    if isinstance(value, list):
        return [redact(item) for item in value]
    return value


def snapshot_summary(devices: Iterable[Device]) -> dict[str, int]:
    """Headline numbers for a simulated snapshot."""
    devices = list(devices)
    return {
        'devices': len(devices),
        'online': sum(1 for device in devices if device.is_online),
        'links_up': sum(
            1 for device in devices for port in device.ports if port.link_status == 'up'
        ) // 2,
    }


def log_mutation_requested(
    kind: str,
    targets: list[str],
    params: dict[str, Any],
    session_id: str = '',
) -> None:
    """Record an incoming mutation before it is applied.

    Args:
        kind: Mutation kind (e.g. 'connect_ports')
        targets: Device or port ids the mutation touches
        params: Dumped mutation; secrets are stripped here
        session_id: Sandbox session
    """
    session_logger(session_id).info(
        f'{kind} requested on {", ".join(targets) or "sandbox"}',
        mutation=kind,
        targets=targets,
        params=redact(params),
    )


def log_mutation_applied(kind: str, devices: Iterable[Device], session_id: str = '') -> None:
    """Record a mutation that went through, with the recomputed snapshot's summary."""
    summary = snapshot_summary(devices)
    session_logger(session_id).info(
        f'{kind} applied: {summary["online"]}/{summary["devices"]} devices online, '
        f'{summary["links_up"]} links up',
        mutation=kind,
        **summary,
    )


def log_mutation_rejected(kind: str, error_code: str, message: str, session_id: str = '') -> None:
    """Record a refused mutation."""
    session_logger(session_id).warning(
        f'{kind} rejected [{error_code}]: {message}',
        mutation=kind,
        error_code=error_code,
    )
