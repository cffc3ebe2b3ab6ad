import logging

from prometheus_client import REGISTRY

from lyric_pic.utils import logging_config
from lyric_pic.utils.logging_config import LOG_LEVEL_ENV, configure_logging
from lyric_pic.utils.observability import create_counter, create_histogram, get_logger, start_span


def test_structured_logger_renders_bound_context(caplog):
    caplog.set_level(logging.INFO, logger="lyric_pic.tests")
    logger = get_logger("lyric_pic.tests").bind(component="reconciler")

    logger.info("Song reconciled", context={"song_id": 7})

    assert caplog.records[-1].message == 'Song reconciled | {"component": "reconciler", "song_id": 7}'


def test_create_counter_reuses_registered_collector():
    first = create_counter("lyric_test_events_total", "Test events.")
    second = create_counter("lyric_test_events_total", "Test events.")
    first.inc()
    second.inc(2)
    assert REGISTRY.get_sample_value("lyric_test_events_total") == 3.0


def test_labelled_counter_and_histogram():
    counter = create_counter("lyric_test_outcomes_total", "Test outcomes.", label_names=("outcome",))
    counter.labels(outcome="correct").inc()
    assert REGISTRY.get_sample_value("lyric_test_outcomes_total", {"outcome": "correct"}) == 1.0

    histogram = create_histogram("lyric_test_duration_seconds", "Test durations.")
    with histogram.time():
        pass
    assert REGISTRY.get_sample_value("lyric_test_duration_seconds_count") == 1.0


def test_start_span_yields_span():
    with start_span("lyrics.test", {"song.id": 1, "skipped": None}) as span:
        assert span is not None


def test_configure_logging_reads_environment(monkeypatch):
    calls = []
    monkeypatch.setattr(logging_config, "_CONFIGURED", False)
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
    try:
        assert configure_logging() == logging.DEBUG
        assert calls[0]["level"] == logging.DEBUG
        assert logging.getLogger("lyric_pic").level == logging.DEBUG

        configure_logging()
        assert len(calls) == 1

        assert configure_logging("WARNING", force=True) == logging.WARNING
        assert calls[1]["force"] is True
        assert logging.getLogger("gameplay").level == logging.WARNING
    finally:
        logging.getLogger("lyric_pic").setLevel(logging.NOTSET)
        logging.getLogger("gameplay").setLevel(logging.NOTSET)
