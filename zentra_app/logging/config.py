"""
structlog setup for the analytics engine.

Scorers and analyzers log through structlog. The engine facade calls
configure_logging once with the ``logging`` section of the settings;
library users embedding the scorers directly may call it themselves or
leave structlog on its defaults.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger, Processor

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_BASE_PROCESSORS: tuple[Processor, ...] = (
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
)


def _build_processors(
    format_json: bool,
    include_timestamp: bool,
    include_caller: bool,
    extra_processors: Optional[list[Processor]],
) -> list[Processor]:
    chain = list(_BASE_PROCESSORS)
    if include_timestamp:
        chain.append(structlog.processors.TimeStamper(fmt="iso"))
    if include_caller:
        chain.append(structlog.processors.CallsiteParameterAdder(parameters=[
            structlog.processors.CallsiteParameter.FILENAME,
            structlog.processors.CallsiteParameter.LINENO,
        ]))
    chain.extend(extra_processors or ())

    # Renderer must come last
    if format_json:
        chain.append(structlog.processors.JSONRenderer())
    else:
        chain.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return chain


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list[Processor]] = None
) -> None:
    """
    Route structlog through the stdlib root logger on stdout.

    Args:
        level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL (case-insensitive)
        format_json: Render JSON lines instead of the console format
        include_timestamp: Add an ISO ``timestamp`` key
        include_caller: Add ``filename`` and ``lineno`` keys
        extra_processors: Processors inserted before the renderer

    Raises:
        ValueError: If the level name is unknown
    """
    level_name = level.upper()
    if level_name not in _LEVELS:
        raise ValueError(f"Unknown log level {level!r}, expected one of {', '.join(_LEVELS)}")

    logging.basicConfig(level=getattr(logging, level_name), stream=sys.stdout, format="%(message)s")

    structlog.configure(
        processors=_build_processors(format_json, include_timestamp, include_caller, extra_processors),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Structlog logger for ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)


def get_scoring_logger(name: str) -> FilteringBoundLogger:
    """Logger tagged with ``subsystem="scoring"`` so scorer output can be filtered."""
    return get_logger(name).bind(subsystem="scoring")


def log_score_result(
    logger: FilteringBoundLogger,
    scorer: str,
    score: Optional[float],
    label: Optional[str],
    trades_analyzed: int,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Emit one ``Score computed`` event for a finished scorer run.

    ``score`` and ``label`` may be None for multi-valued results such as
    the radar or the heatmap; those pass their figures in ``context``.
    """
    bound_logger = logger.bind(
        scorer=scorer,
        score=score,
        label=label,
        trades_analyzed=trades_analyzed,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Score computed")
