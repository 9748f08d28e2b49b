"""
utils.py

Small helpers shared across the package. The diagnostic channel used by the
correction pipeline lives here so that every correction reports degenerate input
the same way.

Public helpers:
- `format_context(**ctx)` : compact `key=value | ...` rendering for log lines
- `emit_diagnostic(msg, **ctx)` : log + `DegenerateGeometryWarning`
- `identity(x)` : default transform for `flatten`
"""

from typing import Any
import logging
import warnings

from geotraverse.errors import DegenerateGeometryWarning

logger = logging.getLogger(__name__)


def format_context(**ctx: Any) -> str:
    return ' | '.join(f'{k}={v!r}' for k, v in ctx.items())


def emit_diagnostic(msg: str, **ctx: Any) -> None:
    """Report a non-fatal problem with a geometry.

    The message goes to the package logger at WARNING and is issued as a
    `DegenerateGeometryWarning`, so callers can filter, record or escalate it
    with the standard `warnings` machinery.
    """
    text = f'{msg} | {format_context(**ctx)}' if ctx else msg
    logger.warning('%s', text)
    warnings.warn(text, DegenerateGeometryWarning, stacklevel=3)


def identity(x):
    return x
