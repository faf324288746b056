#!/usr/bin/env python3
"""
AUGCURO CONVERGENCE RECORD
--------------------------
The facts gathered by the pipeline for one request, handed to the
Decision Engine once every phase before it has finished.

Author: AugCuro Team
Date: 2026-10-17
"""

from dataclasses import dataclass, field
from augcuro.core.models import ExecutionContext, Classification, BackupRecord


@dataclass(frozen=True)
class ConvergenceRecord:
    """
    Snapshot of one invocation after Phase 2.
    A record for a missing tool carries an empty classification and no backup.
    """
    context: ExecutionContext                                            # Phase 1 facts
    classification: Classification = field(default_factory=Classification)  # Phase 2 facts
    backup: BackupRecord = field(default_factory=BackupRecord)           # Phase 2 side effects
