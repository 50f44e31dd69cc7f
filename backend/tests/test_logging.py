import logging

import structlog

from epg_inventory.logging import setup_logging


def test_setup_logging_is_idempotent() -> None:
    setup_logging()
    handlers = list(logging.getLogger().handlers)

    setup_logging()

    assert logging.getLogger().handlers == handlers
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    assert any(isinstance(h.formatter, structlog.stdlib.ProcessorFormatter) for h in handlers)
