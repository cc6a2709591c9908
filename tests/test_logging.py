from __future__ import annotations

import json
import logging

import pytest

from spacetime_engine.logging import LogEvent, create_logger


def test_records_are_json_documents(caplog: pytest.LogCaptureFixture) -> None:
    logger = create_logger("logging-test")

    with caplog.at_level(logging.INFO, logger="spacetime_engine.logging-test"):
        logger.info(LogEvent.AGGREGATION_COMPLETED, "Aggregated 2 buckets", {'bucket_count': 2})

    (record,) = caplog.records
    payload = json.loads(record.getMessage())
    assert payload['level'] == "INFO"
    assert payload['component'] == "logging-test"
    assert payload['event'] == "aggregation.completed"
    assert payload['metadata'] == {'bucket_count': 2}


def test_records_below_level_are_dropped(caplog: pytest.LogCaptureFixture) -> None:
    logger = create_logger("logging-level-test", level=logging.WARNING)

    with caplog.at_level(logging.WARNING, logger="spacetime_engine.logging-level-test"):
        logger.debug(LogEvent.DOMAIN_CYCLE_RESET, "cycle reset")
        logger.info(LogEvent.DOMAIN_UPDATED, "domain updated")
        logger.warning(LogEvent.FILTER_WINDOW_REJECTED, "too narrow")

    assert [json.loads(r.getMessage())['event'] for r in caplog.records] == ["filter.window.rejected"]


def test_error_carries_exception(caplog: pytest.LogCaptureFixture) -> None:
    logger = create_logger("logging-error-test")

    with caplog.at_level(logging.ERROR, logger="spacetime_engine.logging-error-test"):
        logger.error(LogEvent.OVERLAY_BUILD_ERROR, "chart failed", exc_info=ValueError("bad series"))

    payload = json.loads(caplog.records[0].getMessage())
    assert payload['exception'] == {'type': "ValueError", 'message': "bad series"}
