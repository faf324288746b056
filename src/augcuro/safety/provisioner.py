#!/usr/bin/env python3
"""
AUGCURO FILE PROVISIONER
------------------------
Generic file operations used by the backup step: copy with a pre-overwrite
snapshot, and unconditional delete-if-exists. Each operation reports its own
success; callers never re-derive it.

Author: AugCuro Team
Date: 2026-10-17
"""

import os
import shutil
import logging
from pathlib import Path
from typing import Optional, Union

from augcuro.reporting.reporter import Reporter

logger = logging.getLogger("augcuro.provisioner")

PathLike = Union[str, Path]


class FileProvisioner:

    def __init__(self, reporter: Optional[Reporter] = None):
        self.reporter = reporter or Reporter()

    def copy(self, source: PathLike, dest: PathLike, backup_suffix: str) -> bool:
        """
        Copies source over dest. If dest already exists it is first
        snapshotted to dest + backup_suffix. Returns False on any failure,
        including a missing source.
        """
        source, dest = Path(source), Path(dest)

        if not source.is_file():
            logger.warning(f"Copy source missing: {source}")
            self.reporter.step(f"Copy of {source} to {dest} failed: source missing")
            return False

        try:
            if dest.exists():
                backup_path = dest.with_name(dest.name + backup_suffix)
                shutil.copy2(dest, backup_path)
                self.reporter.step(f"Saved pre-edit copy of {dest} as {backup_path}")
            self._atomic_copy(source, dest)
        except OSError as e:
            logger.error(f"Copy of {source} to {dest} failed: {str(e)}")
            self.reporter.step(f"Copy of {source} to {dest} failed: {str(e)}")
            return False

        self.reporter.step(f"Copied {source} to {dest}")
        return True

    def delete_if_exists(self, target: PathLike) -> bool:
        """Removes target when present. Returns True when nothing is left behind."""
        target = Path(target)
        if not target.exists():
            return True
        try:
            target.unlink()
        except OSError as e:
            logger.error(f"Unable to delete {target}: {str(e)}")
            return False
        self.reporter.step(f"Deleted {target}")
        return True

    def _atomic_copy(self, source: Path, dest: Path):
        if not os.access(dest.parent, os.W_OK):
            raise PermissionError(f"No write access to {dest.parent}")
        temp_file = dest.with_name(dest.name + '.augcuro.tmp')
        try:
            shutil.copy2(source, temp_file)
            os.replace(temp_file, dest)
        except OSError:
            if temp_file.exists():
                temp_file.unlink()
            raise
