"""Timing utilities for profiling the timeline pipeline.

Enabled via the AGENTRACE_TIMELINE_DEBUG_TIMING environment variable
("1", "true" or "yes"). Phase timings are emitted on the module logger at
INFO level so they follow the caller's logging configuration.
"""

import logging
import os
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Union

logger = logging.getLogger(__name__)


def is_timing_enabled() -> bool:
    return os.getenv("AGENTRACE_TIMELINE_DEBUG_TIMING", "").lower() in (
        "1",
        "true",
        "yes",
    )


@contextmanager
def log_timing(
    phase: Union[str, Callable[[], str]],
    t_start: Optional[float] = None,
) -> Iterator[None]:
    """Context manager for logging phase timing.

    Args:
        phase: Phase name, or a callable returning it (evaluated at the end so
            it can mention results of the phase)
        t_start: Optional pipeline start time for reporting total elapsed time

    Example:
        with log_timing(lambda: f"Expand events ({len(blocks)} blocks)", t_start):
            blocks = expand_events(events)
    """
    if not is_timing_enabled():
        yield
        return

    t_phase_start = time.perf_counter()
    try:
        yield
    finally:
        t_now = time.perf_counter()
        phase_name = phase() if callable(phase) else phase
        if t_start is not None:
            logger.info(
                "[TIMING] %-40s %8.3fs (total: %8.3fs)",
                phase_name,
                t_now - t_phase_start,
                t_now - t_start,
            )
        else:
            logger.info("[TIMING] %-40s %8.3fs", phase_name, t_now - t_phase_start)
