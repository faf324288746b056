#!/usr/bin/env python3
"""
AUGCURO REPORTER - Outcome & Diagnostic Sink
--------------------------------------------
Receives exactly one outcome per invocation, tagged with two class
identities, plus the raw augtool output as a diagnostic line. Sub-steps
(file copies, deletions) report through the same sink and can be muted
for the duration of a `suppressed()` block.

Author: AugCuro Team
Date: 2026-10-17
"""

import re
import time
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional

from augcuro.core.models import ActionRequest, Outcome

logger = logging.getLogger("augcuro.reporter")

IDENTITY_PREFIX = "augeas_set_"
_NON_CLASS_CHARS = re.compile(r'[^A-Za-z0-9_]')


def canonify(text: str) -> str:
    """Replaces every character that cannot appear in a class name with '_'."""
    return _NON_CLASS_CHARS.sub('_', text)


def class_identity(request: ActionRequest) -> str:
    """Stable key over the full request tuple."""
    return canonify(
        f"{IDENTITY_PREFIX}{request.path}_{request.value}_{request.lens}_{request.file}"
    )


def legacy_identity(request: ActionRequest) -> str:
    """Path-only key kept for older report consumers."""
    return canonify(f"{IDENTITY_PREFIX}{request.path}")


@dataclass
class ReportEvent:
    kind: str               # 'outcome', 'diagnostic' or 'step'
    message: str
    classes: List[str] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)


class Reporter:
    """
    Collects report events in order. An optional sink callback receives each
    event as it is accepted.
    """

    def __init__(self, sink: Optional[Callable[[ReportEvent], None]] = None):
        self.events: List[ReportEvent] = []
        self.sink = sink
        self._suppress_depth = 0

    @property
    def is_suppressed(self) -> bool:
        return self._suppress_depth > 0

    @contextmanager
    def suppressed(self) -> Iterator["Reporter"]:
        """Mutes step reports until the block exits, however it exits."""
        self._suppress_depth += 1
        try:
            yield self
        finally:
            self._suppress_depth -= 1

    def _accept(self, event: ReportEvent):
        self.events.append(event)
        if self.sink:
            self.sink(event)

    def step(self, message: str):
        """Reports an internal sub-step. Dropped while suppressed."""
        if self.is_suppressed:
            logger.debug(f"Suppressed step report: {message}")
            return
        logger.info(message)
        self._accept(ReportEvent(kind="step", message=message))

    def diagnostic(self, raw_output: str):
        """Raw tool output, reported whatever the outcome."""
        logger.info(f"augtool output: {raw_output!r}")
        self._accept(ReportEvent(kind="diagnostic", message=raw_output))

    def outcome(self, outcome: Outcome):
        classes = [
            f"{outcome.legacy_identity}_{outcome.kind.value}",
            f"{outcome.class_identity}_{outcome.kind.value}",
        ]
        log = logger.error if outcome.kind.value == "failure" else logger.info
        log(outcome.message)
        self._accept(ReportEvent(kind="outcome", message=outcome.message, classes=classes))

    def outcomes(self) -> List[ReportEvent]:
        return [e for e in self.events if e.kind == "outcome"]
