"""
Typer-based CLI for the store network sandbox.
"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from netsim.advisories import validate_network
from netsim.config import NetsimConfig
from netsim.models import (
    Advisory,
    BuildRequest,
    Device,
    PlannerRequest,
    SandboxDocument,
    is_build_error,
)
from netsim.persistence import load_document, save_document
from netsim.planner import generate_sandbox, plan_infrastructure, to_device_counts
from netsim.session import Sandbox, parse_mutation
from netsim.synthesizer import build_topology
from netsim.utils.errors import NetsimError
from netsim.utils.logging import configure_logging

console = Console()


class State:
    """Global CLI state."""
    config: Optional[NetsimConfig] = None
    debug: bool = False


state = State()


app = typer.Typer(
    name='netsim',
    help='🏪 Store network sandbox: plan, build and simulate restaurant networks',
    rich_markup_mode='rich',
    no_args_is_help=True,
)


@app.callback()
def main(
    env_file: Annotated[
        Path,
        typer.Option('--env-file', '-e', help='📁 Path to .env configuration file'),
    ] = Path('.env'),
    debug: Annotated[
        bool,
        typer.Option('--debug', help='🐛 Enable debug logging'),
    ] = False,
):
    """🏪 Store network sandbox.

    Global options apply to all commands.
    """
    try:
        config = NetsimConfig.from_env(str(env_file))
    except ValueError as e:
        console.print(f'❌ [bold red]Invalid configuration: {e}[/bold red]')
        raise typer.Exit(1)

    if debug:
        config.debug = True
        config.log_level = 'DEBUG'

    state.config = config
    state.debug = config.debug
    configure_logging(config.log_file, config.log_level, include_console=config.debug)


def _config() -> NetsimConfig:
    return state.config or NetsimConfig()


def _read_json(path: Path):
    try:
        return json.loads(path.read_text(encoding='utf-8'))
    except FileNotFoundError:
        console.print(f'❌ [bold red]File not found: {path}[/bold red]')
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        console.print(f'❌ [bold red]{path} is not valid JSON: {e.msg}[/bold red]')
        raise typer.Exit(1)


def _fail(e: Exception) -> None:
    console.print(f'❌ [bold red]Error: {escape(str(e))}[/bold red]')
    if state.debug:
        console.print_exception(show_locals=False)
    raise typer.Exit(1)


def _status_table(devices: list[Device]) -> Table:
    table = Table(title='Devices')
    table.add_column('Device', style='cyan')
    table.add_column('Type')
    table.add_column('Status')
    table.add_column('Connection')
    table.add_column('Links up', justify='right')

    colors = {'online': 'green', 'booting': 'yellow', 'offline': 'red', 'error': 'red'}
    for device in devices:
        up = sum(1 for port in device.ports if port.link_status == 'up')
        color = colors.get(device.status, 'white')
        table.add_row(
            device.display_name,
            device.type,
            f'[{color}]{device.status}[/{color}]',
            device.connection_state or '-',
            f'{up}/{len(device.ports)}',
        )
    return table


def _advisory_table(advisories: list[Advisory]) -> Table:
    table = Table(title='Advisories')
    table.add_column('Severity')
    table.add_column('Message')
    for advisory in advisories:
        style = 'red' if advisory.severity == 'error' else 'yellow'
        table.add_row(f'[{style}]{advisory.severity}[/{style}]', advisory.message)
    return table


@app.command()
def plan(
    request_file: Annotated[
        Optional[Path],
        typer.Argument(help='📄 Planner request JSON (per-model counts)'),
    ] = None,
    pos: Annotated[int, typer.Option('--pos', help='🖥️ POS terminals', min=0)] = 0,
    printers: Annotated[int, typer.Option('--printers', help='🖨️ Printers', min=0)] = 0,
    kds: Annotated[int, typer.Option('--kds', help='📺 Kitchen displays', min=0)] = 0,
    wireless: Annotated[int, typer.Option('--wireless', help='📱 Wireless handhelds', min=0)] = 0,
    generate: Annotated[
        Optional[Path],
        typer.Option('--generate', '-g', help='💾 Write an unwired sandbox document here'),
    ] = None,
):
    """📐 Size switches, outlets and wireless kit for a set of end devices."""
    try:
        if request_file is not None:
            request = PlannerRequest.model_validate(_read_json(request_file))
        else:
            request = PlannerRequest(
                pos={'pos': pos} if pos else {},
                printers={'printer': printers} if printers else {},
                kds={'kds': kds} if kds else {},
                wireless={'orderpad': wireless} if wireless else {},
            )
        infrastructure = plan_infrastructure(request)
    except (ValidationError, NetsimError) as e:
        _fail(e)

    table = Table(title='Infrastructure plan')
    table.add_column('Item', style='cyan')
    table.add_column('Count', justify='right')
    for key, value in infrastructure.to_wire().items():
        table.add_row(key, str(value))
    console.print(table)

    if generate is not None:
        try:
            counts = to_device_counts(request, infrastructure, router_type=_config().router_type)
            devices = generate_sandbox(counts)
        except ValueError as e:
            _fail(e)
        document = SandboxDocument(
            device_counts={k: v for k, v in counts.items() if v},
            devices=devices,
        )
        save_document(document, generate)
        console.print(f'💾 Sandbox with [cyan]{len(devices)}[/cyan] devices written to [cyan]{generate}[/cyan]')


@app.command()
def build(
    request_file: Annotated[Path, typer.Argument(help='📄 Build request JSON')],
    output: Annotated[
        Path,
        typer.Option('--output', '-o', help='💾 Output path for the sandbox document'),
    ] = Path('sandbox.json'),
):
    """🔧 Build a wired sandbox from a role-tagged device list."""
    config = _config()
    data = _read_json(request_file)
    if isinstance(data, dict):
        data.setdefault('routerType', config.router_type)

    try:
        request = BuildRequest.model_validate(data)
    except ValidationError as e:
        _fail(e)

    outcome = build_topology(request, ssid_password=config.default_ssid_password)
    if is_build_error(outcome):
        console.print(f'❌ [bold red]Build failed [{outcome.error_code}]: {escape(outcome.message)}[/bold red]')
        raise typer.Exit(1)

    document = SandboxDocument(devices=outcome.devices, rooms=outcome.rooms)
    save_document(document, output)

    console.print('✅ [bold green]Build completed[/bold green]')
    console.print(
        f'📊 Devices: [cyan]{len(outcome.devices)}[/cyan], '
        f'Cables: [cyan]{len(outcome.connections)}[/cyan], Rooms: [cyan]{len(outcome.rooms)}[/cyan]'
    )
    for advisory in outcome.advisories:
        console.print(f'💡 {advisory}')
    console.print(f'💾 Written to [cyan]{output}[/cyan]')


@app.command()
def simulate(
    document_file: Annotated[Path, typer.Argument(help='📄 Sandbox document JSON')],
    mutations: Annotated[
        Optional[Path],
        typer.Option('--mutations', '-m', help='📝 JSON list of mutations to apply in order'),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option('--output', '-o', help='💾 Write the refreshed document here'),
    ] = None,
):
    """⚡ Re-run the simulation on a document, optionally applying mutations."""
    try:
        document = load_document(document_file)
        sandbox = Sandbox.from_document(document)

        if mutations is not None:
            messages = _read_json(mutations)
            if not isinstance(messages, list):
                console.print('❌ [bold red]Mutations file must contain a JSON list[/bold red]')
                raise typer.Exit(1)
            for message in messages:
                rejection = sandbox.dispatch(parse_mutation(message))
                if rejection is not None:
                    console.print(
                        f'⚠️ [yellow]{rejection.kind} rejected [{rejection.error_code}]: '
                        f'{rejection.message}[/yellow]'
                    )
    except (ValidationError, NetsimError) as e:
        _fail(e)

    console.print(_status_table(sandbox.devices))

    if output is not None:
        save_document(sandbox.to_document(document), output)
        console.print(f'💾 Written to [cyan]{output}[/cyan]')


@app.command()
def validate(
    document_file: Annotated[Path, typer.Argument(help='📄 Sandbox document JSON')],
):
    """🩺 List wiring advisories for a sandbox document."""
    try:
        document = load_document(document_file)
    except NetsimError as e:
        _fail(e)

    advisories = validate_network(document.devices)
    if not advisories:
        console.print('✅ [bold green]No wiring problems found[/bold green]')
        return

    console.print(_advisory_table(advisories))
    if any(advisory.severity == 'error' for advisory in advisories):
        raise typer.Exit(1)


if __name__ == '__main__':
    app()
