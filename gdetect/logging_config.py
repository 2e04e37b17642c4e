from __future__ import annotations

import logging

import structlog


def setup_logging(verbose: bool = False) -> None:
    timestamper = structlog.processors.TimeStamper(fmt="iso")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            timestamper,
            structlog.processors.add_log_level,
            structlog.processors.EventRenamer("message"),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(message)s")


# Routed through stdlib logging so an unconfigured host application stays quiet.
logger = structlog.wrap_logger(logging.getLogger("gdetect"), wrapper_class=structlog.stdlib.BoundLogger)
