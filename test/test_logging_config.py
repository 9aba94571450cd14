import logging

from tabground.logging_config import create_logger


def test_create_logger(capsys):
    log = create_logger("tabground.test", logging.DEBUG)
    assert log.level == logging.DEBUG
    assert not log.propagate
    assert len(log.handlers) == 1

    log.info("Loaded %d records", 99)
    out = capsys.readouterr().out
    assert "[tabground.test]" in out
    assert "Loaded 99 records" in out


def test_create_logger_replaces_handlers():
    create_logger("tabground.test")
    log = create_logger("tabground.test", logging.WARNING)
    assert len(log.handlers) == 1
    assert log.handlers[0].level == logging.WARNING


def test_children_log_through_handler(capsys):
    create_logger("tabground.test.parent")
    logging.getLogger("tabground.test.parent.child").warning("careful")
    assert "[WARNING]" in capsys.readouterr().out
