import logging

from sundaystore.logging_config import setup_logging


def test_setup_logging_levels():
    setup_logging("debug")

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("sundaystore").level == logging.DEBUG
    assert logging.getLogger("sundaystore").propagate is False
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    setup_logging("INFO")
    assert logging.getLogger("sundaystore").level == logging.INFO


def test_only_own_loggers_configured():
    setup_logging("INFO")

    configured = {
        name
        for name, logger in logging.Logger.manager.loggerDict.items()
        if isinstance(logger, logging.Logger) and logger.handlers
    }

    assert "sundaystore" in configured
    assert not any(name.startswith("uvicorn") for name in configured)
