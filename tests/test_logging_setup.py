import logging

import pytest

from detection_studio.logging_setup import _level_from_value, setup_logging


@pytest.fixture
def restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


def test_level_from_value():
    assert _level_from_value('debug') == logging.DEBUG
    assert _level_from_value(logging.ERROR) == logging.ERROR
    assert _level_from_value('nonsense') == logging.INFO
    assert _level_from_value(None, fallback=logging.WARNING) == logging.WARNING


def test_setup_logging_sets_level_without_duplicating_handlers(restore_root_level):
    root = setup_logging('ERROR')
    handlers = list(root.handlers)

    setup_logging('DEBUG')

    assert root.level == logging.DEBUG
    assert root.handlers == handlers
