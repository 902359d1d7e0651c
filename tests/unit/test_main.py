"""Unit tests for the command line entry point."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import yaml

from log_agent import __main__ as cli
from log_agent.agent import TickResult


@pytest.fixture(autouse=True)
def no_signal_handlers(monkeypatch):
    """Keep the test process's own signal handlers."""
    monkeypatch.setattr(cli.signal, "signal", lambda *args: None)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "agent.yaml"
    with open(path, "w") as f:
        yaml.dump(
            {
                "root_dir": str(tmp_path / "rasp"),
                "backend_url": "http://backend.test",
                "app_id": "T1",
                "rasp_id": "A1",
            },
            f,
        )
    return path


class TestMain:
    def test_missing_config_file(self, tmp_path: Path, capsys):
        assert cli.main(["--config", str(tmp_path / "missing.yaml")]) == 1
        assert "Error loading configuration" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path: Path, monkeypatch):
        """Test that validation errors exit with status 1."""
        monkeypatch.delenv("LOG_AGENT_BACKEND_URL", raising=False)
        path = tmp_path / "agent.yaml"
        path.write_text("root_dir: /opt/rasp\n")

        assert cli.main(["--config", str(path)]) == 1

    def test_once_runs_single_tick(self, config_file: Path):
        agent = MagicMock()
        agent.tick.return_value = [TickResult(stream="alarm", posted_lines=3)]

        with patch.object(cli, "LogAgent", return_value=agent):
            assert cli.main(["--config", str(config_file), "--once", "--log-level", "DEBUG"]) == 0

        agent.tick.assert_called_once()
        agent.run.assert_not_called()
        agent.close.assert_called_once()

    def test_once_reports_failures(self, config_file: Path):
        agent = MagicMock()
        agent.tick.return_value = [TickResult(stream="alarm", error="POST failed")]

        with patch.object(cli, "LogAgent", return_value=agent):
            assert cli.main(["--config", str(config_file), "--once"]) == 1

    def test_loop_mode(self, config_file: Path):
        agent = MagicMock()

        with patch.object(cli, "LogAgent", return_value=agent):
            assert cli.main(["--config", str(config_file)]) == 0

        agent.run.assert_called_once()
        agent.close.assert_called_once()

    def test_parser_defaults(self):
        args = cli.build_parser().parse_args([])
        assert args.config is None
        assert args.once is False
        assert args.log_level is None
