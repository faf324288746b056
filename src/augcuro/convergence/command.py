#!/usr/bin/env python3
"""
AUGCURO COMMAND BUILDER
-----------------------
Turns an ActionRequest into the exact shell command that drives augtool.

Trust boundary: path, value, lens and file are interpolated literally into
the augtool script. They are caller-trusted. The script travels through a
quoted heredoc so the shell itself never expands it; quoting inside the
Augeas script is only applied when `quote_arguments` is switched on.

Author: AugCuro Team
Date: 2026-10-17
"""

from typing import List

from augcuro.core.config import AugcuroConfig
from augcuro.core.models import ActionRequest

HEREDOC_MARKER = "AUGCURO_EOF"


class CommandBuilder:
    """
    Builds either a file-scoped script (single lens, single file, explicit
    error listing) or a path-only script (autoload everything, no listing).
    """

    def __init__(self, config: AugcuroConfig):
        self.config = config

    def _quote(self, text: str) -> str:
        if not self.config.quote_arguments:
            return text
        escaped = text.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped}"'

    def script_lines(self, request: ActionRequest) -> List[str]:
        path = self._quote(request.path)
        value = self._quote(request.value)

        if request.file_scoped:
            lens = request.lens
            return [
                f"set /augeas/load/{lens}/lens {lens}.lns",
                f"set /augeas/load/{lens}/incl {request.file}",
                "load",
                f"set {path} {value}",
                "save",
                "errors",
            ]

        return [
            f"set {path} {value}",
            "save",
        ]

    def script(self, request: ActionRequest) -> str:
        return "\n".join(self.script_lines(request)) + "\n"

    def build(self, request: ActionRequest, tool_path: str) -> str:
        """
        Returns the complete shell command. File-scoped runs use --noautoload
        so only the named lens is read, and --new so augtool writes
        <file><new_file_suffix> instead of touching the original.
        """
        invocation = tool_path
        if request.file_scoped:
            invocation = f"{tool_path} --noautoload --new"

        return f"{invocation} <<'{HEREDOC_MARKER}'\n{self.script(request)}{HEREDOC_MARKER}\n"
