"""Tests for the CLI module."""

from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from social_engine.cli import app
from social_engine.models.dtos import HealthReport, SocialStats

runner = CliRunner()


def report(*statuses):
    return HealthReport.model_validate({
        "results": [
            {"status": status, "table": f"table_{i}", "issue": None if status == "healthy" else "Broken",
             "recommendation": None if status == "healthy" else "Fix it"}
            for i, status in enumerate(statuses)
        ]
    })


@patch("social_engine.cli.setup_logging")
@patch("social_engine.cli.collect_health_report", new_callable=AsyncMock)
def test_health_check_healthy(mock_collect, mock_logging):
    mock_collect.return_value = report("healthy", "warning")

    result = runner.invoke(app, ["health-check"])

    assert result.exit_code == 0
    assert "table_0: healthy" in result.output
    assert "Fix: Fix it" in result.output
    assert "1 healthy, 1 warning, 0 error" in result.output


@patch("social_engine.cli.setup_logging")
@patch("social_engine.cli.collect_health_report", new_callable=AsyncMock)
def test_health_check_error_exit_code_and_migration(mock_collect, mock_logging):
    mock_collect.return_value = report("error")

    result = runner.invoke(app, ["health-check", "--migration"])

    assert result.exit_code == 1
    assert "Auto-generated migration script" in result.output


@patch("social_engine.cli.setup_logging")
@patch("social_engine.cli.fetch_stats", new_callable=AsyncMock)
def test_stats(mock_fetch, mock_logging):
    mock_fetch.return_value = SocialStats(likes=1500, comments=3, user_liked=True)

    result = runner.invoke(app, ["stats", "w1", "--actor", "u1"])

    assert result.exit_code == 0
    assert "likes:     1.5k (liked)" in result.output
    assert "comments:  3" in result.output
    mock_fetch.assert_awaited_once_with("w1", "u1")


@patch("social_engine.cli.setup_logging")
@patch("social_engine.cli.fetch_stats", new_callable=AsyncMock)
def test_stats_unavailable(mock_fetch, mock_logging):
    mock_fetch.return_value = None

    result = runner.invoke(app, ["stats", "w1"])

    assert result.exit_code == 1
