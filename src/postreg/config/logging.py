"""Log routing for the ``postreg`` logger tree.

Library modules log through ``logging.getLogger(__name__)``; structlog
formats those records on stderr so stdout stays clean for results.
Only the ``postreg`` tree is configured. The root logger, and with it
any host application's handlers, is left alone.
"""

from __future__ import annotations

import logging
import sys

import structlog

_HANDLER_NAME = "postreg-stderr"

# Applied to structlog events and to stdlib records alike.
_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _renderers(log_json: bool) -> list[structlog.types.Processor]:
    if log_json:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Send ``postreg.*`` records to stderr.

    ``-v`` lowers the threshold from WARNING (skipped posts, collisions)
    to DEBUG (file counts, span timings). Safe to call more than once;
    the previous handler is replaced.
    """
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_renderers(log_json),
            ],
        )
    )

    logger = logging.getLogger("postreg")
    logger.handlers = [h for h in logger.handlers if h.get_name() != _HANDLER_NAME]
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
