from social_engine.utils import logging as logging_utils
from social_engine.utils.logging import setup_logging


def test_debug_mode_logs_to_stderr_only(mocker, settings):
    mock_logger = mocker.patch.object(logging_utils, "logger")

    setup_logging(settings=settings)

    mock_logger.remove.assert_called_once()
    assert mock_logger.add.call_count == 1
    assert mock_logger.add.call_args.kwargs["level"] == "INFO"


def test_production_adds_rotating_json_file_sink(mocker, settings):
    mock_logger = mocker.patch.object(logging_utils, "logger")
    production = settings.model_copy(update={"debug_mode": False, "log_format": "json"})

    setup_logging("debug", settings=production)

    assert mock_logger.add.call_count == 2
    file_sink = mock_logger.add.call_args_list[1]
    assert file_sink.args[0] == production.log_file
    assert file_sink.kwargs["serialize"] is True
    assert file_sink.kwargs["rotation"] == "1 day"
    assert file_sink.kwargs["level"] == "DEBUG"

