#!/usr/bin/env python3
"""
AUGCURO CORE MODELS
-------------------
Defines the fundamental data structures used across the AugCuro engine.
Every record is frozen: each phase hands the next one a fresh snapshot
instead of mutating shared state.

Author: AugCuro Team
Date: 2026-10-17
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any


@dataclass(frozen=True)
class ActionRequest:
    """
    A single 'set this value at this tree path' request.

    Empty string is the sentinel for "not provided" on lens and file.
    Both are expected to be given together; that pairing is left to the caller.
    """
    path: str               # Augeas tree path, e.g. /files/etc/hosts/1/ipaddr
    value: str              # Value to converge the node to
    lens: str = ""          # Lens name (without the .lns suffix)
    file: str = ""          # Backing file the lens is loaded against

    def __post_init__(self):
        if not self.path:
            raise ValueError("ActionRequest.path must be a non-empty tree path")

    @property
    def file_scoped(self) -> bool:
        return self.file != ""


@dataclass(frozen=True)
class ExecutionContext:
    """Facts established by Phase 1 (Detect + Execute)."""
    request: ActionRequest
    tool_path: str
    tool_available: bool
    command: str
    raw_output: str = ""    # Only populated once the tool actually ran

    @property
    def file_scoped(self) -> bool:
        return self.request.file_scoped


@dataclass(frozen=True)
class Classification:
    """
    Independent boolean facts derived from raw tool output.
    Not mutually exclusive; the engine treats 'error' as dominant.
    """
    kept: bool = False
    repaired: bool = False
    error: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.kept or self.repaired or self.error)


@dataclass(frozen=True)
class BackupRecord:
    attempted: bool = False
    succeeded: bool = False
    artifact_path: str = ""


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    REPAIRED = "repaired"
    FAILURE = "failure"


@dataclass(frozen=True)
class Outcome:
    """
    The single convergence result reported per invocation.
    """
    kind: OutcomeKind
    message: str
    class_identity: str           # Canonical key over the full request tuple
    legacy_identity: str          # Canonical key over the path only
    context: Optional[ExecutionContext] = None
    classification: Classification = field(default_factory=Classification)
    backup: BackupRecord = field(default_factory=BackupRecord)

    def to_dict(self) -> Dict[str, Any]:
        request = self.context.request if self.context else None
        return {
            "outcome": self.kind.value,
            "message": self.message,
            "class_identity": self.class_identity,
            "legacy_identity": self.legacy_identity,
            "request": {
                "path": request.path,
                "value": request.value,
                "lens": request.lens,
                "file": request.file,
            } if request else None,
            "tool_available": self.context.tool_available if self.context else False,
            "kept": self.classification.kept,
            "repaired": self.classification.repaired,
            "error": self.classification.error,
            "backup_attempted": self.backup.attempted,
            "backup_succeeded": self.backup.succeeded,
            "backup_path": self.backup.artifact_path or None,
            "raw_output": self.context.raw_output if self.context else "",
        }
