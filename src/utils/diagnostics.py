"""Diagnostics collaborator for the geometry routines.

Degenerate input (collinear clothoid poses, collapsed vertex runs,
unsplittable index cells, refinement hitting its depth ceiling) is
recovered locally and never raised.  Routines that recover report the
event to a :class:`Diagnostics` instance handed in by the caller, so
tests and tools can see what happened without any process-wide
verbosity switch.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .logging import get_logger


@dataclass
class Diagnostics:
    """Collect named geometry events.

    Examples
    --------
    >>> diag = Diagnostics()
    >>> diag.record("kink", index=3)
    >>> diag.count("kink")
    1
    """

    verbose: bool = False
    """Forward every event to ``logger`` at DEBUG level."""

    logger: Optional[logging.Logger] = None
    """Logger used when ``verbose`` is set; defaults to this module's."""

    counts: Counter = field(default_factory=Counter)
    """Number of times each event was recorded."""

    details: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    """Keyword details of the most recent occurrence of each event."""

    def record(self, event: str, **details: Any) -> None:
        """Record one occurrence of ``event``."""
        self.counts[event] += 1
        self.details[event] = details
        if self.verbose:
            logger = self.logger or get_logger(__name__, level=logging.DEBUG)
            logger.debug("%s %s", event, details)

    def count(self, event: str) -> int:
        """Return how often ``event`` was recorded."""
        return self.counts[event]

    def __contains__(self, event: str) -> bool:
        return self.counts[event] > 0

    def reset(self) -> None:
        """Forget all recorded events."""
        self.counts.clear()
        self.details.clear()


class NullDiagnostics(Diagnostics):
    """Diagnostics sink that ignores everything."""

    def record(self, event: str, **details: Any) -> None:
        return None


NULL_DIAGNOSTICS = NullDiagnostics()
