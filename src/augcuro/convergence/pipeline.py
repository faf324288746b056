#!/usr/bin/env python3
"""
AUGCURO CONVERGENCE PIPELINE
----------------------------
Runs the forward-only phases for one ActionRequest:

    Detect -> Execute -> Classify -> (Backup)

Each phase reads only facts the previous phase has fixed and returns a new
frozen snapshot. The decision itself is left to the engine.

Author: AugCuro Team
Date: 2026-10-17
"""

import logging
from dataclasses import replace
from typing import Optional

from augcuro.core.config import AugcuroConfig
from augcuro.core.models import ActionRequest, ExecutionContext
from augcuro.convergence.command import CommandBuilder
from augcuro.convergence.context import ConvergenceRecord
from augcuro.convergence.invoker import ToolInvoker
from augcuro.rules.classifier import OutcomeClassifier
from augcuro.reporting.reporter import Reporter
from augcuro.safety.backup import BackupManager
from augcuro.safety.provisioner import FileProvisioner

logger = logging.getLogger("augcuro.pipeline")


class PhaseError(RuntimeError):
    """
    Raised when a phase after Execute fails. Carries the context gathered so
    far so the raw tool output is not lost.
    """

    def __init__(self, message: str, context: ExecutionContext):
        super().__init__(message)
        self.context = context


class ConvergencePipeline:
    """
    The Orchestrator: ensures command construction, execution, classification
    and backup happen in a strictly defined order.
    """

    def __init__(self, config: AugcuroConfig, reporter: Reporter,
                 invoker: Optional[ToolInvoker] = None,
                 provisioner: Optional[FileProvisioner] = None):
        self.config = config
        self.builder = CommandBuilder(config)
        self.invoker = invoker or ToolInvoker()
        self.classifier = OutcomeClassifier()
        self.backup = BackupManager(config, provisioner or FileProvisioner(reporter), reporter)

    def run(self, request: ActionRequest) -> ConvergenceRecord:

        # --- PHASE 1a: DETECT ---
        tool_path = self.config.resolve_path("augtool")
        context = ExecutionContext(
            request=request,
            tool_path=tool_path,
            tool_available=self.invoker.tool_exists(tool_path),
            command=self.builder.build(request, tool_path),
        )

        if not context.tool_available:
            logger.warning(f"augtool not found at {tool_path}; skipping execution")
            return ConvergenceRecord(context=context)

        # --- PHASE 1b: EXECUTE ---
        logger.debug(f"Running augtool script:\n{self.builder.script(request)}")
        context = replace(context, raw_output=self.invoker.run(context.command))

        try:
            # --- PHASE 2a: CLASSIFY ---
            classification = self.classifier.classify(context.raw_output, context.file_scoped)

            # --- PHASE 2b: BACKUP (file-scoped repairs only) ---
            backup = self.backup.run(context, classification)
        except Exception as e:
            raise PhaseError(str(e), context) from e

        return ConvergenceRecord(context=context, classification=classification, backup=backup)
