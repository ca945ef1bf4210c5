import io
import json

import structlog

from appsec_gym.logging_setup import configure_logging


def test_json_events_with_level_filter() -> None:
    stream = io.StringIO()
    configure_logging(level="info", debug=False, stream=stream)
    try:
        logger = structlog.get_logger()
        logger.debug("hidden_event")
        logger.info("challenge_started", challenge_id="xss-stored")
    finally:
        configure_logging()

    lines = stream.getvalue().strip().splitlines()
    assert len(lines) == 1
    event = json.loads(lines[0])
    assert event["event"] == "challenge_started"
    assert event["challenge_id"] == "xss-stored"
    assert event["level"] == "info"


def test_unknown_level_defaults_to_warning() -> None:
    stream = io.StringIO()
    configure_logging(level="chatty", debug=False, stream=stream)
    try:
        logger = structlog.get_logger()
        logger.info("not_shown")
        logger.warning("shown")
    finally:
        configure_logging()

    assert "not_shown" not in stream.getvalue()
    assert "shown" in stream.getvalue()
