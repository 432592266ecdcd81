"""Tests for the JSON stdin/stdout entrypoint."""

import io
import json
import logging

import pytest

from ro_calc import calculate_cli


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def run_cli(monkeypatch, capsys, stdin_text):
    monkeypatch.setattr('sys.stdin', io.StringIO(stdin_text))
    code = calculate_cli.main()
    out = capsys.readouterr().out
    return code, json.loads(out)


SYSTEM_PAYLOAD = {
    "operation": "system",
    "config": {
        "feed_flow": 100,
        "flow_unit": "gpm",
        "recovery": 50,
        "feed_ions": {"Ca2+": 120, "Na+": 300, "Cl-": 450, "HCO3-": 150},
        "vessels": 6,
        "elements_per_vessel": 7,
    },
}


class TestCalculateCli:

    @pytest.mark.unit
    def test_system_operation(self, monkeypatch, capsys):
        code, response = run_cli(monkeypatch, capsys, json.dumps(SYSTEM_PAYLOAD))

        assert code == 0
        assert response["status"] == "success"
        assert response["results"]["system_results"]["permeate_flow"] == 50.0

    @pytest.mark.unit
    def test_flat_payload_defaults_to_system(self, monkeypatch, capsys):
        code, response = run_cli(monkeypatch, capsys, json.dumps(SYSTEM_PAYLOAD["config"]))

        assert code == 0
        assert response["results"]["system_results"]["feed_flow"] == 100.0

    @pytest.mark.unit
    def test_ion_passage_operation(self, monkeypatch, capsys):
        payload = {
            "operation": "ion_passage",
            "feed_ions": {"Na+": 300, "Cl-": 450},
            "system_parameters": {"recovery": 75, "flux_lmh": 18},
        }
        code, response = run_cli(monkeypatch, capsys, json.dumps(payload))

        assert code == 0
        assert set(response["results"]["permeate_ions"]) == {"na", "cl"}

    @pytest.mark.unit
    def test_hydraulic_balance_operation(self, monkeypatch, capsys):
        payload = dict(SYSTEM_PAYLOAD, operation="hydraulic_balance", membrane_spec={"id": "m", "area_ft2": 400})
        code, response = run_cli(monkeypatch, capsys, json.dumps(payload))

        assert code == 0
        assert response["results"]["total_elements"] == 42

    @pytest.mark.unit
    def test_invalid_json(self, monkeypatch, capsys):
        code, response = run_cli(monkeypatch, capsys, "{not json")

        assert code == 1
        assert response["status"] == "error"
        assert "Invalid JSON input" in response["message"]

    @pytest.mark.unit
    def test_non_object_payload(self, monkeypatch, capsys):
        code, response = run_cli(monkeypatch, capsys, "[1, 2]")
        assert code == 1

    @pytest.mark.unit
    def test_unknown_operation(self, monkeypatch, capsys):
        code, response = run_cli(monkeypatch, capsys, json.dumps({"operation": "optimize"}))

        assert code == 2
        assert response["status"] == "error"
        assert response["error"]["type"] == "ValueError"

    @pytest.mark.unit
    def test_empty_input(self, monkeypatch, capsys):
        code, response = run_cli(monkeypatch, capsys, "")

        assert code == 0
        assert response["results"]["system_results"]["feed_flow"] == 0.0
