#!/usr/bin/env python3
"""
AUGCURO TOOL INVOKER
--------------------
Checks that augtool exists and runs the generated command through a shell,
capturing stdout and stderr as one text stream.

Author: AugCuro Team
Date: 2026-10-17
"""

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger("augcuro.invoker")


class ToolInvoker:
    """
    Thin blocking wrapper around subprocess. Exit codes are logged, never
    interpreted: the classifier decides from the text alone.
    """

    def tool_exists(self, tool_path: str) -> bool:
        return bool(tool_path) and Path(tool_path).exists()

    def run(self, command: str) -> str:
        try:
            result = subprocess.run(
                command,
                shell=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as e:
            logger.error(f"Unable to start shell for augtool: {str(e)}")
            return f"error: unable to start augtool: {str(e)}\n"

        logger.debug(f"augtool exited with status {result.returncode}")
        return result.stdout or ""
