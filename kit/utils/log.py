"""Logging utilities for Kit.

Kit is usable as a library, so the ``kit`` logger carries a null handler
and stays silent unless the application configures logging. The command
line calls ``default_logging_config`` which honours ``--verbose`` and the
``KIT_TRACE`` environment variable.
"""

import logging
import os
import sys
from typing import Optional, Union

getLogger = logging.getLogger

TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"


class _NullHandler(logging.Handler):
    """No-op logging handler to avoid unexpected logging warnings."""

    def emit(self, record: logging.LogRecord) -> None:
        pass


_NULL_HANDLER = _NullHandler()
_KIT_LOGGER = getLogger("kit")
_KIT_LOGGER.addHandler(_NULL_HANDLER)


def _get_trace_target() -> Optional[Union[str, int]]:
    """Get the trace target from KIT_TRACE.

    Returns:
        - None if tracing is disabled
        - 2 for stderr output (values "1", "2", "true")
        - str for an absolute file path
    """
    trace_value = os.environ.get("KIT_TRACE", "")
    if not trace_value or trace_value.lower() in ("0", "false"):
        return None

    if trace_value.lower() in ("1", "2", "true"):
        return 2

    if os.path.isabs(trace_value):
        return trace_value

    return None


def default_logging_config(verbose: bool = False) -> None:
    """Set up logging for the command line.

    Warnings always go to stderr. ``verbose`` or KIT_TRACE lowers the
    level to DEBUG; a KIT_TRACE path sends records to that file instead.
    """
    trace_target = _get_trace_target()
    level = logging.DEBUG if (verbose or trace_target is not None) else logging.WARNING

    _KIT_LOGGER.removeHandler(_NULL_HANDLER)
    if isinstance(trace_target, str):
        logging.basicConfig(
            level=level, filename=trace_target, filemode="a", format=TRACE_FORMAT
        )
    else:
        logging.basicConfig(level=level, stream=sys.stderr, format=TRACE_FORMAT)
