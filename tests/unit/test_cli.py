"""Unit tests for the Typer CLI."""

import json
import pytest
from netsim.cli import app
from netsim.graph import disconnect_port
from netsim.models import SandboxDocument
from netsim.persistence import load_document, save_document
from typer.testing import CliRunner


runner = CliRunner()


@pytest.fixture
def invoke(tmp_path, monkeypatch):
    """Run the CLI with logging sent to a temporary file and no .env file."""
    monkeypatch.setenv('NETSIM_LOG_FILE', str(tmp_path / 'netsim.log'))
    env_file = tmp_path / 'none.env'

    def _invoke(*args):
        return runner.invoke(app, ['--env-file', str(env_file), *[str(arg) for arg in args]])

    return _invoke


@pytest.fixture
def store_file(store_devices, tmp_path):
    """The cabled store saved as a document."""
    path = tmp_path / 'store.json'
    save_document(SandboxDocument(devices=store_devices), path)
    return path


def _write_json(path, data):
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


class TestPlanCommand:
    """Test the plan command."""

    def test_plan_from_options(self, invoke):
        """Test a plan from command-line counts."""
        result = invoke('plan', '--pos', 3, '--printers', 2, '--wireless', 2)
        assert result.exit_code == 0
        assert 'Infrastructure plan' in result.stdout
        assert 'accessPoints' in result.stdout

    def test_plan_from_file(self, invoke, tmp_path):
        """Test a plan from a request file."""
        request = _write_json(tmp_path / 'request.json', {'pos': {'v3-pos': 6}, 'kds': {'elo-kds': 2}})
        result = invoke('plan', request)
        assert result.exit_code == 0
        assert 'switches' in result.stdout

    def test_plan_generate(self, invoke, tmp_path):
        """Test generating an unwired sandbox document."""
        output = tmp_path / 'generated.json'
        result = invoke('plan', '--pos', 2, '--generate', output)
        assert result.exit_code == 0
        document = load_document(output)
        assert any(device.type == 'zyxel-router' for device in document.devices)
        assert document.device_counts['isp-modem'] == 1

    def test_plan_bad_request(self, invoke, tmp_path):
        """Test negative counts are reported."""
        request = _write_json(tmp_path / 'request.json', {'pos': {'v3-pos': -1}})
        result = invoke('plan', request)
        assert result.exit_code == 1


class TestBuildCommand:
    """Test the build command."""

    def test_build(self, invoke, tmp_path):
        """Test building and saving a sandbox."""
        request = _write_json(
            tmp_path / 'build.json',
            {
                'devices': [
                    {'id': 'sw', 'role': 'switch', 'type': 'unmanaged-switch'},
                    {'id': 'p1', 'role': 'pos', 'type': 'v3-pos', 'room': 'dining'},
                ]
            },
        )
        output = tmp_path / 'sandbox.json'
        result = invoke('build', request, '--output', output)
        assert result.exit_code == 0
        assert 'Build completed' in result.stdout
        document = load_document(output)
        assert all(device.status == 'online' for device in document.devices)

    def test_build_error(self, invoke, tmp_path):
        """Test a rejected build exits non-zero with its code."""
        request = _write_json(tmp_path / 'build.json', {'devices': []})
        result = invoke('build', request, '--output', tmp_path / 'out.json')
        assert result.exit_code == 1
        assert 'EMPTY_BUILD' in result.stdout
        assert not (tmp_path / 'out.json').exists()

    def test_missing_request(self, invoke, tmp_path):
        """Test a missing request file."""
        result = invoke('build', tmp_path / 'absent.json')
        assert result.exit_code == 1
        assert 'File not found' in result.stdout


class TestSimulateCommand:
    """Test the simulate command."""

    def test_simulate(self, invoke, store_file):
        """Test a document is re-simulated and listed."""
        result = invoke('simulate', store_file)
        assert result.exit_code == 0
        assert 'Devices' in result.stdout

    def test_simulate_mutations(self, invoke, store_file, tmp_path):
        """Test mutations are applied in order and rejections reported."""
        mutations = _write_json(
            tmp_path / 'mutations.json',
            [
                {'kind': 'power_action', 'deviceId': 'router', 'action': 'power_off'},
                {'kind': 'power_action', 'deviceId': 'modem', 'action': 'power_off'},
            ],
        )
        output = tmp_path / 'after.json'
        result = invoke('simulate', store_file, '--mutations', mutations, '--output', output)
        assert result.exit_code == 0
        assert 'NOT_USER_CONTROLLED' in result.stdout
        devices = {device.id: device for device in load_document(output).devices}
        assert devices['router'].status == 'offline'
        assert devices['modem'].status == 'online'

    def test_mutations_must_be_list(self, invoke, store_file, tmp_path):
        """Test the mutations file holds a list."""
        mutations = _write_json(tmp_path / 'mutations.json', {'kind': 'power_action'})
        result = invoke('simulate', store_file, '--mutations', mutations)
        assert result.exit_code == 1


class TestValidateCommand:
    """Test the validate command."""

    def test_warnings_only(self, invoke, store_file):
        """Test warnings are listed without failing."""
        result = invoke('validate', store_file)
        assert result.exit_code == 0
        assert 'Advisories' in result.stdout

    def test_errors_fail(self, invoke, store_devices, tmp_path):
        """Test error advisories exit non-zero."""
        path = tmp_path / 'broken.json'
        save_document(SandboxDocument(devices=disconnect_port(store_devices, 'router-wan')), path)
        result = invoke('validate', path)
        assert result.exit_code == 1

    def test_clean(self, invoke, tmp_path):
        """Test an empty sandbox has nothing to report."""
        path = tmp_path / 'empty.json'
        save_document(SandboxDocument(), path)
        result = invoke('validate', path)
        assert result.exit_code == 0
        assert 'No wiring problems found' in result.stdout

    def test_invalid_document(self, invoke, tmp_path):
        """Test unreadable documents exit non-zero."""
        path = tmp_path / 'bad.json'
        path.write_text('[]', encoding='utf-8')
        result = invoke('validate', path)
        assert result.exit_code == 1
