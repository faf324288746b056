#!/usr/bin/env python3
"""
AUGCURO ENGINE - The Decision Engine
------------------------------------
The ConvergenceEngine drives one 'augeas set' action through the pipeline
and turns the gathered facts into exactly one outcome:

    success   the node already held the value
    repaired  augtool changed the file and the change is safely preserved
    failure   anything else, including an edit whose safety net failed

Nothing is retried and nothing is raised across `converge()`.

Author: AugCuro Team
Date: 2026-10-17
"""

import time
import logging
from typing import Dict, Any, List, Optional, Callable

from augcuro.core.config import AugcuroConfig
from augcuro.core.models import ActionRequest, ExecutionContext, Outcome, OutcomeKind
from augcuro.convergence.context import ConvergenceRecord
from augcuro.convergence.invoker import ToolInvoker
from augcuro.convergence.pipeline import ConvergencePipeline, PhaseError
from augcuro.reporting.reporter import Reporter, class_identity, legacy_identity
from augcuro.safety.provisioner import FileProvisioner

logger = logging.getLogger("augcuro.engine")


class ConvergenceEngine:
    """
    Principal orchestrator. Owns the reporter so that every invocation ends
    with one outcome event, plus the raw diagnostic when the tool ran.
    """

    def __init__(self, config: Optional[AugcuroConfig] = None, reporter: Optional[Reporter] = None,
                 invoker: Optional[ToolInvoker] = None, provisioner: Optional[FileProvisioner] = None):
        self.config = config or AugcuroConfig()
        self.reporter = reporter or Reporter()
        self.pipeline = ConvergencePipeline(
            self.config, self.reporter, invoker=invoker, provisioner=provisioner
        )

    def converge(self, request: ActionRequest) -> Outcome:
        """
        Runs the full Init -> Detect -> Execute -> Classify -> (Backup)
        -> Decide -> Report sequence for a single request.
        """
        try:
            record = self.pipeline.run(request)
            outcome = self.decide(record)
        except PhaseError as e:
            logger.error(f"Error converging {request.path}: {str(e)}")
            outcome = self._engine_error(request, e, e.context)
        except Exception as e:
            logger.error(f"Error converging {request.path}: {str(e)}")
            outcome = self._engine_error(request, e)

        if outcome.context and outcome.context.tool_available:
            self.reporter.diagnostic(outcome.context.raw_output)
        self.reporter.outcome(outcome)
        return outcome

    def decide(self, record: ConvergenceRecord) -> Outcome:
        context = record.context
        facts = record.classification
        request = context.request
        described = self._describe(request)

        def build(kind: OutcomeKind, message: str) -> Outcome:
            return Outcome(
                kind=kind,
                message=message,
                class_identity=class_identity(request),
                legacy_identity=legacy_identity(request),
                context=context,
                classification=facts,
                backup=record.backup,
            )

        if not context.tool_available:
            return build(OutcomeKind.FAILURE,
                         f"augtool does not exist at {context.tool_path}; could not {described}")

        if facts.error:
            return build(OutcomeKind.FAILURE, f"augtool reported an error while trying to {described}")

        if facts.repaired:
            if context.file_scoped and not record.backup.succeeded:
                return build(OutcomeKind.FAILURE,
                             f"Edit applied while trying to {described}, but the safety-net copy "
                             f"for {request.file} failed")
            return build(OutcomeKind.REPAIRED, f"Repaired: {described}")

        if facts.kept:
            return build(OutcomeKind.SUCCESS, f"Already converged: {described}")

        return build(OutcomeKind.FAILURE, f"Unclassified augtool output while trying to {described}")

    def converge_all(self, requests: List[ActionRequest],
                     progress_callback: Optional[Callable[[int, int], None]] = None) -> List[Outcome]:
        """Sequential batch run. Requests touching the same file are not locked."""
        outcomes = []
        total = len(requests)
        for processed, request in enumerate(requests, 1):
            outcomes.append(self.converge(request))
            if progress_callback:
                progress_callback(processed, total)
        return outcomes

    def generate_summary(self, outcomes: List[Outcome]) -> Dict[str, Any]:
        """Counts per outcome kind for a batch run."""
        total = len(outcomes)
        counts = {kind.value: sum(1 for o in outcomes if o.kind is kind) for kind in OutcomeKind}
        return {
            "total_actions": total,
            "successful": counts["success"],
            "repaired": counts["repaired"],
            "failed": counts["failure"],
            "success_rate": ((counts["success"] + counts["repaired"]) / total) if total > 0 else 0,
            "backups_created": sum(1 for o in outcomes if o.backup.succeeded),
            "tool_missing": sum(1 for o in outcomes if o.context and not o.context.tool_available),
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        }

    def _describe(self, request: ActionRequest) -> str:
        if request.file_scoped:
            return (f"set '{request.path}' to '{request.value}' "
                    f"in {request.file} with lens {request.lens}")
        return f"set '{request.path}' to '{request.value}'"

    def _engine_error(self, request: ActionRequest, error: Exception,
                      context: Optional[ExecutionContext] = None) -> Outcome:
        return Outcome(
            kind=OutcomeKind.FAILURE,
            message=f"Engine error while trying to {self._describe(request)}: {str(error)}",
            class_identity=class_identity(request),
            legacy_identity=legacy_identity(request),
            context=context,
        )
