"""Tests for the Typer CLI commands that need no credentials."""

from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from truth_sentinel.cli.main import app

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "Truth Sentinel" in result.output
    assert "Version: 0.1.0" in result.output


def test_classify_keyword_message() -> None:
    result = runner.invoke(app, ["classify", "Is exam postponed?"])
    assert result.exit_code == 0
    assert "should_process=True" in result.output
    assert "keyword match" in result.output


def test_classify_casual_message() -> None:
    result = runner.invoke(app, ["classify", "ok thanks"])
    assert result.exit_code == 0
    assert "should_process=False" in result.output
    assert "casual" in result.output


def test_query_and_reload(tmp_path: Path) -> None:
    (tmp_path / "notice.txt").write_text(
        "Circular: the semester examinations are postponed to December by the university."
    )

    reloaded = runner.invoke(app, ["reload", "--data-dir", str(tmp_path)])
    assert reloaded.exit_code == 0
    assert "Indexed 1 chunks" in reloaded.output

    queried = runner.invoke(app, ["query", "exam postponed", "--data-dir", str(tmp_path)])
    assert queried.exit_code == 0
    assert "has_relevant_results=True" in queried.output


def test_query_empty_corpus(tmp_path: Path) -> None:
    result = runner.invoke(app, ["query", "exam", "--data-dir", str(tmp_path / "empty")])
    assert result.exit_code == 0
    assert "No documents indexed" in result.output


def test_search_unknown_source() -> None:
    result = runner.invoke(app, ["search", "exam postponed", "--source", "twitter"])
    assert result.exit_code == 1
    assert "Unknown source" in result.output


def test_log_level_option_reconfigures_both_loggers() -> None:
    with patch("truth_sentinel.cli.main.configure_logging") as loguru_config, patch(
        "truth_sentinel.cli.main.configure_structured_logging"
    ) as structlog_config:
        result = runner.invoke(app, ["--log-level", "DEBUG", "version"])

    assert result.exit_code == 0
    loguru_config.assert_called_once_with("DEBUG")
    structlog_config.assert_called_once_with(level="DEBUG")


def test_no_log_level_keeps_configuration() -> None:
    with patch("truth_sentinel.cli.main.configure_logging") as loguru_config:
        result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    loguru_config.assert_not_called()
