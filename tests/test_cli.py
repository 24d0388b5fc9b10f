import json
import logging

from click.testing import CliRunner

from fleetops.cli import main
from fleetops.config import Config
from fleetops.utils.logging import get_logger, log_to_stderr, set_level


def test_run_command():
	runner = CliRunner()
	result = runner.invoke(main, ["run", "--ticks", "5", "--add", "2"])
	assert result.exit_code == 0, result.output
	data = json.loads(result.stdout)
	assert data["ticks"] == 5
	assert data["stats"]["total"] == len(Config().initial_phases) + 2
	assert len(data["dispatch_order"]) == data["stats"]["total"]
	assert set(data["airports"]) == {a["code"] for a in Config().airports}


def test_emergency_command():
	runner = CliRunner()
	result = runner.invoke(main, ["emergency", "--ticks", "3"])
	assert result.exit_code == 0, result.output
	data = json.loads(result.stdout)
	assert data["status"] == "dispatched"
	assert data["emergency"]["severity"] == "high"
	assert data["dispatch_order"][0].endswith(":emergency")
	assert any(a["type"] == "emergency.triggered" for a in data["alerts"])


def test_log_level_option():
	runner = CliRunner()
	result = runner.invoke(main, ["--log-level", "debug", "run", "--ticks", "1"])
	assert result.exit_code == 0, result.output
	assert logging.getLogger("fleetops.orchestrator.pipeline").level == logging.DEBUG
	set_level("INFO")
	assert logging.getLogger("fleetops.orchestrator.sim").level == logging.INFO


def test_info_logs_stay_out_of_json():
	runner = CliRunner()
	result = runner.invoke(main, ["--log-level", "info", "run", "--ticks", "2", "--add", "1"])
	assert result.exit_code == 0, result.output
	data = json.loads(result.stdout)
	assert data["ticks"] == 2
	assert "| INFO |" not in result.stdout
	set_level("INFO")


def test_log_to_stderr(capsys):
	logger = get_logger("fleetops.tests.stderr")
	log_to_stderr()
	logger.info("routed")
	captured = capsys.readouterr()
	assert "routed" in captured.err
	assert "routed" not in captured.out
