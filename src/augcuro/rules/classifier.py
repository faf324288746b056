#!/usr/bin/env python3
"""
AUGCURO OUTCOME CLASSIFIER - Ordered Pattern Rules
--------------------------------------------------
Maps raw augtool output onto the {kept, repaired, error} fact set.
The classifier is pure: no subprocess, no filesystem, so it can be tested
against recorded output fixtures.

Rules run in a fixed order and each one only sets its own fact. The last
rule is the failsafe: output that neither confirms a save nor proves that
nothing went wrong is an error. Unknown is unsafe.

Author: AugCuro Team
Date: 2026-10-17
"""

import re
import logging
from typing import Dict, List, Tuple, Union

from augcuro.core.models import Classification

logger = logging.getLogger("augcuro.classifier")

SAVED_PATTERN = re.compile(r'^Saved.*$', re.MULTILINE)
NO_ERRORS_PATTERN = re.compile(r'^\s*\(no errors\)\s*$', re.MULTILINE)
ERROR_PATTERN = re.compile(r'^error:.*$', re.MULTILINE)


class OutcomeClassifier:
    """
    Registry of ordered classification rules.
    Each rule receives the decoded output and the facts established so far,
    and returns the name of the fact it owns plus whether it matched.
    """

    def __init__(self):
        self.active_rules = [
            self._rule_saved,
            self._rule_nothing_wrong,
            self._rule_error_line,
            self._rule_failsafe,
        ]

    def _evaluate(self, raw_output: Union[str, bytes], file_scoped: bool) -> Tuple[Dict[str, bool], List[str]]:
        text = _decode(raw_output)
        facts: Dict[str, bool] = {"kept": False, "repaired": False, "error": False}
        fired = []

        for rule in self.active_rules:
            name, matched = rule(text, file_scoped, facts)
            if matched:
                facts[name] = True
                fired.append(rule.__name__.replace("_rule_", ""))
                logger.debug(f"Rule {rule.__name__} set '{name}'")

        return facts, fired

    def classify(self, raw_output: Union[str, bytes], file_scoped: bool) -> Classification:
        facts, _ = self._evaluate(raw_output, file_scoped)
        return Classification(**facts)

    def matched_rules(self, raw_output: Union[str, bytes], file_scoped: bool) -> List[str]:
        """Names of the rules that fired, in evaluation order (CLI trace output)."""
        _, fired = self._evaluate(raw_output, file_scoped)
        return fired

    def _rule_saved(self, text: str, file_scoped: bool, facts: Dict[str, bool]) -> Tuple[str, bool]:
        return "repaired", bool(SAVED_PATTERN.search(text))

    def _rule_nothing_wrong(self, text: str, file_scoped: bool, facts: Dict[str, bool]) -> Tuple[str, bool]:
        # The explicit marker only exists when the script asked for `errors`;
        # path-only runs have no listing, so silence is the only clean signal.
        if file_scoped:
            return "kept", bool(NO_ERRORS_PATTERN.search(text))
        return "kept", text.strip() == ""

    def _rule_error_line(self, text: str, file_scoped: bool, facts: Dict[str, bool]) -> Tuple[str, bool]:
        return "error", bool(ERROR_PATTERN.search(text))

    def _rule_failsafe(self, text: str, file_scoped: bool, facts: Dict[str, bool]) -> Tuple[str, bool]:
        return "error", not facts["kept"] and not facts["repaired"]


def _decode(raw_output: Union[str, bytes, None]) -> str:
    if raw_output is None:
        return ""
    if isinstance(raw_output, bytes):
        return raw_output.decode("utf-8", errors="replace")
    return raw_output


_default_classifier = OutcomeClassifier()


def classify(raw_output: Union[str, bytes], file_scoped: bool) -> Classification:
    """Module-level entry point used by the pipeline."""
    return _default_classifier.classify(raw_output, file_scoped)
