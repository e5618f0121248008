#!/usr/bin/env python3
"""Tests for background scheduling and logging setup"""

import logging
from datetime import timedelta

import pytest

import epex_monitor
from epex_monitor import configure_logging, start_scheduler
from epex_monitor.tasks import run_poll_cycle


class FakeScheduler:
    def __init__(self):
        self.jobs = []
        self.started = False
        self.stopped = False

    def add_job(self, **kwargs):
        self.jobs.append(kwargs)

    def start(self):
        self.started = True

    def shutdown(self):
        self.stopped = True


@pytest.fixture
def cleanups(monkeypatch):
    registered = []
    monkeypatch.setattr(epex_monitor.atexit, 'register', registered.append)
    yield registered
    for cleanup in registered:
        cleanup()


@pytest.fixture
def scheduled_app(app, tmp_path, monkeypatch):
    monkeypatch.setattr(epex_monitor, 'BackgroundScheduler', FakeScheduler)
    app.instance_path = str(tmp_path)
    app.config['REFRESH_INTERVAL_MINUTES'] = 7
    return app


def test_scheduler_polls_on_configured_interval(scheduled_app, cleanups):
    scheduler = start_scheduler(scheduled_app)

    assert scheduler.started is True
    assert len(scheduler.jobs) == 1
    job = scheduler.jobs[0]
    assert job['func'] is run_poll_cycle
    assert job['args'] == [scheduled_app]
    assert job['trigger'].interval == timedelta(minutes=7)
    assert job['next_run_time'] is not None
    assert job['max_instances'] == 1


def test_second_worker_does_not_schedule(scheduled_app, cleanups):
    first = start_scheduler(scheduled_app)

    assert first is not None
    assert start_scheduler(scheduled_app) is None


def test_cleanup_shuts_scheduler_down(scheduled_app, cleanups):
    scheduler = start_scheduler(scheduled_app)

    cleanup = cleanups.pop()
    cleanup()

    assert scheduler.stopped is True
    # Lock is released, so another scheduler can start
    assert start_scheduler(scheduled_app) is not None


def test_configure_logging_opens_log_file_once(tmp_path, monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, 'handlers', [])
    monkeypatch.setattr(root, 'level', root.level)
    config = {'LOG_LEVEL': 'INFO', 'LOG_FILE': str(tmp_path / 'epex.log')}

    try:
        configure_logging(config)
        configure_logging(config)

        file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert len(root.handlers) == 2
    finally:
        for handler in root.handlers:
            handler.close()
