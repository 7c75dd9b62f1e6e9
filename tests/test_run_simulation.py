"""
Test Run Simulation Script
==========================
Tests cho command-line entry point.
"""

import logging

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import run_simulation
from lbsim.logging_config import disable_logging


@pytest.fixture(autouse=True)
def clean_logger(monkeypatch):
    for var in ("LBSIM_LOGGING", "LBSIM_LOG_FILE", "LBSIM_LOG_JSON"):
        monkeypatch.delenv(var, raising=False)
    yield
    disable_logging()
    logging.getLogger("lbsim").setLevel(logging.NOTSET)


class TestRunSimulation:
    """Test cases cho run_simulation.main()."""

    def test_prints_final_figures(self, capsys):
        exit_code = run_simulation.main(["--servers", "5", "--cycles", "300", "--seed", "1"])
        out = capsys.readouterr().out

        assert exit_code == 0
        assert "Initial queue of 500 requests created." in out
        assert "Final Queue Size:" in out
        assert "Total Requests Processed:" in out
        assert "Number of Servers:" in out
        assert "Total Requests Rejected:" in out

    def test_prompts_when_arguments_missing(self, monkeypatch, capsys):
        answers = iter(["abc", "3", "100"])
        monkeypatch.setattr("builtins.input", lambda message: next(answers))

        exit_code = run_simulation.main(["--seed", "2"])
        out = capsys.readouterr().out

        assert exit_code == 0
        assert "Please enter a whole number." in out
        assert "Starting simulation for 100 cycles" in out

    def test_invalid_configuration(self, capsys):
        exit_code = run_simulation.main(["--servers", "5", "--cycles", "0"])

        assert exit_code == 2
        assert "Invalid configuration" in capsys.readouterr().out

    def test_log_file(self, tmp_path, capsys):
        log_path = tmp_path / "simulation.log"
        run_simulation.main(["--servers", "5", "--cycles", "50", "--seed", "3",
                             "--log-file", str(log_path)])

        assert "Cycle: 0 | Queue Size:" in log_path.read_text()

    def test_env_logging_is_not_duplicated(self, monkeypatch, capsys):
        """LBSIM_LOGGING được giữ nguyên: một handler, đúng level."""
        monkeypatch.setenv("LBSIM_LOGGING", "WARNING")
        observed = {}

        def record_handlers():
            logger = logging.getLogger("lbsim")
            observed['handlers'] = [h for h in logger.handlers
                                    if not isinstance(h, logging.NullHandler)]
            observed['level'] = logger.level
            disable_logging()

        monkeypatch.setattr(run_simulation, "disable_logging", record_handlers)

        exit_code = run_simulation.main(["--servers", "5", "--cycles", "10", "--seed", "1"])

        assert exit_code == 0
        assert len(observed['handlers']) == 1
        assert observed['level'] == logging.WARNING

    def test_verbose_raises_env_level(self, monkeypatch, capsys):
        monkeypatch.setenv("LBSIM_LOGGING", "WARNING")
        observed = {}

        def record_handlers():
            logger = logging.getLogger("lbsim")
            observed['handlers'] = [h for h in logger.handlers
                                    if not isinstance(h, logging.NullHandler)]
            observed['level'] = logger.level
            disable_logging()

        monkeypatch.setattr(run_simulation, "disable_logging", record_handlers)

        run_simulation.main(["--servers", "5", "--cycles", "10", "--seed", "1", "--verbose"])

        assert len(observed['handlers']) == 1
        assert observed['level'] == logging.DEBUG
        assert observed['handlers'][0].level == logging.DEBUG

    def test_handlers_closed_after_run(self, tmp_path, capsys):
        log_path = tmp_path / "simulation.log"
        run_simulation.main(["--servers", "5", "--cycles", "20", "--seed", "4",
                             "--log-file", str(log_path)])

        handlers = [h for h in logging.getLogger("lbsim").handlers
                    if not isinstance(h, logging.NullHandler)]
        assert handlers == []

    def test_closed_stdin(self, monkeypatch, capsys):
        def closed_input(message):
            raise EOFError

        monkeypatch.setattr("builtins.input", closed_input)

        exit_code = run_simulation.main(["--seed", "5"])

        assert exit_code == 2
        assert "--servers and --cycles" in capsys.readouterr().out

    def test_scaling_thresholds_options(self, capsys):
        exit_code = run_simulation.main(["--servers", "5", "--cycles", "50", "--seed", "6",
                                         "--scale-out", "300", "--scale-in", "50"])
        assert exit_code == 0

    def test_invalid_scaling_thresholds(self, capsys):
        exit_code = run_simulation.main(["--servers", "5", "--cycles", "50",
                                         "--scale-out", "100", "--scale-in", "200"])

        assert exit_code == 2
        assert "scale_in_queue_length" in capsys.readouterr().out
