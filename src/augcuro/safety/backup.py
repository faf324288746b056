#!/usr/bin/env python3
"""
AUGCURO BACKUP MANAGER - The Safety Net
---------------------------------------
After a file-scoped repair, augtool has written its result next to the
original (<file>.augnew). This step promotes that artifact over the
original through the provisioner, which snapshots the pre-edit content to
<file><backup_suffix> first, then removes the augnew artifact whatever
happened. Sub-step reports are muted so only the final outcome is visible.

Author: AugCuro Team
Date: 2026-10-17
"""

import logging
from pathlib import Path

from augcuro.core.config import AugcuroConfig
from augcuro.core.models import BackupRecord, Classification, ExecutionContext
from augcuro.reporting.reporter import Reporter
from augcuro.safety.provisioner import FileProvisioner

logger = logging.getLogger("augcuro.backup")


class BackupManager:

    def __init__(self, config: AugcuroConfig, provisioner: FileProvisioner, reporter: Reporter):
        self.config = config
        self.provisioner = provisioner
        self.reporter = reporter

    def should_engage(self, context: ExecutionContext, classification: Classification) -> bool:
        return context.file_scoped and classification.repaired

    def artifact_path(self, file: str) -> str:
        return file + self.config.backup_suffix

    def new_file_path(self, file: str) -> str:
        return file + self.config.new_file_suffix

    def run(self, context: ExecutionContext, classification: Classification) -> BackupRecord:
        if not self.should_engage(context, classification):
            return BackupRecord()

        target = context.request.file
        staged = self.new_file_path(target)
        # No original means nothing to snapshot
        had_original = Path(target).exists()

        with self.reporter.suppressed():
            try:
                succeeded = self.provisioner.copy(staged, target, self.config.backup_suffix)
            finally:
                self.provisioner.delete_if_exists(staged)

        if not succeeded:
            logger.warning(f"Safety-net copy failed for {target}")

        return BackupRecord(
            attempted=True,
            succeeded=succeeded,
            artifact_path=self.artifact_path(target) if succeeded and had_original else "",
        )
