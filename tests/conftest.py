import os
import sys
import stat
from pathlib import Path
from typing import Optional

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from augcuro.core.config import AugcuroConfig, TOOL_ENV_OVERRIDE


class FakeAugtool:
    """
    A shell script standing in for augtool. It records its stdin script and
    arguments, optionally drops a staged <file>.augnew, then prints canned output.
    """

    def __init__(self, root: Path):
        self.root = root
        self.path = root / "augtool"
        self.output_file = root / "augtool.out"
        self.stdin_file = root / "augtool.stdin"
        self.args_file = root / "augtool.args"
        self.staged_content = root / "augnew.content"

    def program(self, output: str, stage_file: Optional[Path] = None, staged: str = ""):
        self.output_file.write_text(output)
        lines = [
            "#!/bin/sh",
            f'cat > "{self.stdin_file}"',
            f'echo "$@" > "{self.args_file}"',
        ]
        if stage_file is not None:
            self.staged_content.write_text(staged)
            lines.append(f'cp "{self.staged_content}" "{stage_file}.augnew"')
        lines.append(f'cat "{self.output_file}"')
        self.path.write_text("\n".join(lines) + "\n")
        self.path.chmod(self.path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return self

    @property
    def script(self) -> str:
        return self.stdin_file.read_text()

    @property
    def args(self) -> str:
        return self.args_file.read_text().strip()


@pytest.fixture(autouse=True)
def no_tool_override(monkeypatch):
    monkeypatch.delenv(TOOL_ENV_OVERRIDE, raising=False)


@pytest.fixture
def fake_augtool(tmp_path) -> FakeAugtool:
    tool_dir = tmp_path / "bin"
    tool_dir.mkdir()
    return FakeAugtool(tool_dir)


@pytest.fixture
def config(fake_augtool) -> AugcuroConfig:
    return AugcuroConfig(paths={"augtool": str(fake_augtool.path)})


@pytest.fixture
def hosts_file(tmp_path) -> Path:
    target = tmp_path / "hosts"
    target.write_text("127.0.0.1 localhost\n192.168.1.4 web\n")
    return target
