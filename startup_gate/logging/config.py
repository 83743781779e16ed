"""
structlog setup for the startup gate.

``configure_logging`` is called once per process (``LifecycleAdapter.create``
does it from ``Settings.logging``). State transitions and gate outcomes go
through the two ``log_*`` helpers so the audit trail keeps one shape.
"""
import logging
import sys
from typing import Any, Optional, TextIO

import structlog
from structlog.types import FilteringBoundLogger, Processor

from ..config.defaults import LoggingParams


def _build_processors(include_caller: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.MODULE,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    return processors


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_caller: bool = False,
    stream: Optional[TextIO] = None
) -> None:
    """
    Route structlog through stdlib logging.

    Args:
        level: Stdlib level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: One JSON object per line instead of the console renderer
        include_caller: Add module and line number to every event
        stream: Output stream, stdout by default
    """
    stream = stream or sys.stdout
    log_level = getattr(logging, level.upper())

    logging.basicConfig(stream=stream, format="%(message)s")
    logging.getLogger().setLevel(log_level)

    processors = _build_processors(include_caller)
    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from_params(params: LoggingParams) -> None:
    """Apply the ``logging`` section of the settings."""
    configure_logging(
        level=params.level,
        format_json=params.format_json,
        include_caller=params.include_caller
    )


def get_logger(name: str) -> FilteringBoundLogger:
    return structlog.get_logger(name)


def get_gating_logger(name: str) -> FilteringBoundLogger:
    """Logger for the kill-switch check and the permission prompt."""
    return get_logger(name).bind(subsystem="gating", audit_trail=True)


def get_state_logger(name: str) -> FilteringBoundLogger:
    """Logger for boot phase transitions."""
    return get_logger(name).bind(subsystem="state_machine", audit_trail=True)


def log_gate_decision(
    logger: FilteringBoundLogger,
    gate_name: str,
    passed: bool,
    reason: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Record a gate outcome: INFO when it passed, WARNING when it did not.

    Args:
        logger: Usually from ``get_gating_logger``
        gate_name: ``checkpoint``, ``permission_prompt`` or ``notification_permission``
        passed: Gate outcome
        reason: Short human-readable cause
        context: Extra fields nested under ``context``
    """
    fields: dict[str, Any] = {
        "gate_name": gate_name,
        "gate_result": "PASS" if passed else "FAIL",
        "reason": reason,
    }
    if context:
        fields["context"] = context

    bound_logger = logger.bind(**fields)
    if passed:
        bound_logger.info("Gate passed")
    else:
        bound_logger.warning("Gate failed")


def log_state_transition(
    logger: FilteringBoundLogger,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """Record one accepted phase transition."""
    fields: dict[str, Any] = {"from_state": from_state, "to_state": to_state, "trigger": trigger}
    if context:
        fields["context"] = context

    logger.bind(**fields).info("State transition")
