"""Logging setup tests."""

import logging
import pytest
from kit.utils import log


@pytest.fixture
def configure():
    """
    Run default_logging_config against a root logger without handlers.

    basicConfig does nothing when the root logger already has handlers,
    and pytest installs its own while a test runs.
    """
    root = logging.getLogger()
    saved_level = root.level
    added = []

    def _configure(**kwargs):
        previous = root.handlers[:]
        root.handlers = []
        log.default_logging_config(**kwargs)
        added.extend(root.handlers)
        root.handlers = previous + root.handlers
        return root

    yield _configure

    for handler in added:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(saved_level)
    log._KIT_LOGGER.addHandler(log._NULL_HANDLER)


@pytest.mark.parametrize('value, expected', [
    ('', None),
    ('0', None),
    ('false', None),
    ('1', 2),
    ('true', 2),
    ('relative/path', None),
])
def test_trace_target(monkeypatch, value, expected):
    monkeypatch.setenv('KIT_TRACE', value)
    assert log._get_trace_target() == expected


def test_trace_target_absolute_path(monkeypatch, tmp_path):
    target = str(tmp_path / 'trace.log')
    monkeypatch.setenv('KIT_TRACE', target)
    assert log._get_trace_target() == target


def test_default_level_is_warning(configure):
    root = configure()
    assert root.level == logging.WARNING
    assert log._NULL_HANDLER not in log._KIT_LOGGER.handlers


def test_verbose_enables_debug(configure):
    root = configure(verbose=True)
    assert root.level == logging.DEBUG


def test_trace_to_file(configure, monkeypatch, tmp_path):
    target = tmp_path / 'trace.log'
    monkeypatch.setenv('KIT_TRACE', str(target))

    root = configure()
    log.getLogger('kit.test').debug('traced message')
    for handler in root.handlers:
        handler.flush()

    assert root.level == logging.DEBUG
    assert 'traced message' in target.read_text()
