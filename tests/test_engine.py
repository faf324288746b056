#!/usr/bin/env python3
"""
AUGCURO ENGINE SUITE
--------------------
End-to-end convergence runs against a fake augtool, plus the decision table
checked directly on hand-built records.

Author: AugCuro Team
Date: 2026-10-17
"""

import itertools

import pytest

from augcuro.convergence import invoker as invoker_module
from augcuro.convergence.context import ConvergenceRecord
from augcuro.convergence.invoker import ToolInvoker
from augcuro.core.config import AugcuroConfig
from augcuro.core.engine import ConvergenceEngine
from augcuro.core.models import (
    ActionRequest, BackupRecord, Classification, ExecutionContext, OutcomeKind
)
from augcuro.reporting.reporter import Reporter
from augcuro.safety.provisioner import FileProvisioner

PATH = "/etc/hosts/1/ipaddr"
VALUE = "192.168.1.5"


def test_path_only_whitespace_output_is_success(config, fake_augtool):
    """SCENARIO 1: nothing printed by a path-only run means nothing to do."""
    fake_augtool.program(" ")
    engine = ConvergenceEngine(config)

    outcome = engine.converge(ActionRequest(PATH, VALUE))

    assert outcome.kind is OutcomeKind.SUCCESS
    assert outcome.backup.attempted is False
    assert fake_augtool.script == f"set {PATH} {VALUE}\nsave\n"
    assert fake_augtool.args == ""


def test_file_scoped_save_with_backup_is_repaired(config, fake_augtool, hosts_file):
    """SCENARIO 2: augtool saved, the staged file is promoted and the original kept aside."""
    original = hosts_file.read_text()
    edited = "127.0.0.1 localhost\n192.168.1.5 web\n"
    fake_augtool.program(f"Saved '{hosts_file}'\n", stage_file=hosts_file, staged=edited)
    engine = ConvergenceEngine(config)

    outcome = engine.converge(ActionRequest(PATH, VALUE, lens="Hosts", file=str(hosts_file)))

    assert outcome.kind is OutcomeKind.REPAIRED
    assert outcome.backup.attempted is True
    assert outcome.backup.succeeded is True
    assert hosts_file.read_text() == edited
    backup = hosts_file.with_name(hosts_file.name + config.backup_suffix)
    assert outcome.backup.artifact_path == str(backup)
    assert backup.read_text() == original
    assert not hosts_file.with_name(hosts_file.name + ".augnew").exists()
    assert fake_augtool.args == "--noautoload --new"
    assert f"set /augeas/load/Hosts/incl {hosts_file}" in fake_augtool.script


def test_failed_backup_turns_repair_into_failure(config, fake_augtool, hosts_file):
    """SCENARIO 3: augtool claims a save but left nothing to promote."""
    original = hosts_file.read_text()
    fake_augtool.program(f"Saved '{hosts_file}'\n")
    engine = ConvergenceEngine(config)

    outcome = engine.converge(ActionRequest(PATH, VALUE, lens="Hosts", file=str(hosts_file)))

    assert outcome.kind is OutcomeKind.FAILURE
    assert outcome.classification.repaired is True
    assert outcome.backup.attempted is True
    assert outcome.backup.succeeded is False
    assert "Edit applied" in outcome.message
    assert "safety-net copy" in outcome.message
    assert hosts_file.read_text() == original


@pytest.mark.parametrize("scoped", [True, False])
def test_error_output_is_failure(config, fake_augtool, hosts_file, scoped):
    """SCENARIO 4"""
    fake_augtool.program("error: invalid path\n")
    request = ActionRequest(PATH, VALUE, lens="Hosts", file=str(hosts_file)) if scoped \
        else ActionRequest(PATH, VALUE)

    outcome = ConvergenceEngine(config).converge(request)

    assert outcome.kind is OutcomeKind.FAILURE
    assert outcome.classification.error is True


def test_garbage_output_is_failure(config, fake_augtool, hosts_file):
    """SCENARIO 5: failsafe rule."""
    fake_augtool.program("garbage unrecognized text")

    outcome = ConvergenceEngine(config).converge(
        ActionRequest(PATH, VALUE, lens="Hosts", file=str(hosts_file))
    )

    facts = outcome.classification
    assert (facts.kept, facts.repaired, facts.error) == (False, False, True)
    assert outcome.kind is OutcomeKind.FAILURE


def test_missing_tool_runs_nothing(tmp_path, monkeypatch, hosts_file):
    """SCENARIO 6: no subprocess, no backup, distinct message."""
    calls = []
    monkeypatch.setattr(invoker_module.subprocess, "run", lambda *a, **kw: calls.append((a, kw)))
    config = AugcuroConfig(paths={"augtool": str(tmp_path / "missing" / "augtool")})
    reporter = Reporter()

    outcome = ConvergenceEngine(config, reporter=reporter).converge(
        ActionRequest(PATH, VALUE, lens="Hosts", file=str(hosts_file))
    )

    assert outcome.kind is OutcomeKind.FAILURE
    assert "does not exist" in outcome.message
    assert calls == []
    assert outcome.backup.attempted is False
    assert [e.kind for e in reporter.events] == ["outcome"]
    assert not hosts_file.with_name(hosts_file.name + ".augcuro-before-edit").exists()


def test_backup_steps_do_not_leak_report_lines(config, fake_augtool, hosts_file):
    """Only the raw diagnostic and one outcome reach the reporter."""
    fake_augtool.program(f"Saved '{hosts_file}'\n", stage_file=hosts_file, staged="edited\n")
    reporter = Reporter()

    ConvergenceEngine(config, reporter=reporter).converge(
        ActionRequest(PATH, VALUE, lens="Hosts", file=str(hosts_file))
    )

    assert [e.kind for e in reporter.events] == ["diagnostic", "outcome"]
    assert reporter.events[0].message == f"Saved '{hosts_file}'\n"
    assert reporter.is_suppressed is False


def test_outcome_carries_both_identities(config, fake_augtool):
    fake_augtool.program("")
    reporter = Reporter()

    outcome = ConvergenceEngine(config, reporter=reporter).converge(ActionRequest(PATH, VALUE))

    assert outcome.class_identity == "augeas_set__etc_hosts_1_ipaddr_192_168_1_5__"
    assert outcome.legacy_identity == "augeas_set__etc_hosts_1_ipaddr"
    assert reporter.outcomes()[0].classes == [
        "augeas_set__etc_hosts_1_ipaddr_success",
        "augeas_set__etc_hosts_1_ipaddr_192_168_1_5___success",
    ]


def test_engine_absorbs_unexpected_exceptions(config, fake_augtool):
    class ExplodingInvoker(ToolInvoker):
        def run(self, command):
            raise ValueError("boom")

    fake_augtool.program("")
    reporter = Reporter()
    engine = ConvergenceEngine(config, reporter=reporter, invoker=ExplodingInvoker())

    outcome = engine.converge(ActionRequest(PATH, VALUE))

    assert outcome.kind is OutcomeKind.FAILURE
    assert "boom" in outcome.message
    assert len(reporter.outcomes()) == 1


def _record(tool_available=True, scoped=True, kept=False, repaired=False, error=False, backup_ok=False):
    request = ActionRequest(PATH, VALUE, lens="Hosts", file="/etc/hosts") if scoped \
        else ActionRequest(PATH, VALUE)
    context = ExecutionContext(request=request, tool_path="/usr/bin/augtool",
                               tool_available=tool_available, command="")
    attempted = scoped and repaired
    return ConvergenceRecord(
        context=context,
        classification=Classification(kept=kept, repaired=repaired, error=error),
        backup=BackupRecord(attempted=attempted, succeeded=attempted and backup_ok,
                            artifact_path="/etc/hosts.augcuro-before-edit" if attempted else ""),
    )


FACT_GRID = list(itertools.product([True, False], repeat=5))


@pytest.mark.parametrize("tool_available,scoped,kept,repaired,backup_ok", FACT_GRID)
def test_error_always_dominates(tool_available, scoped, kept, repaired, backup_ok):
    """ERROR DOMINANCE: error=True never yields anything but failure."""
    engine = ConvergenceEngine(AugcuroConfig())
    record = _record(tool_available, scoped, kept, repaired, True, backup_ok)
    assert engine.decide(record).kind is OutcomeKind.FAILURE


@pytest.mark.parametrize("tool_available,scoped,kept,repaired,backup_ok", FACT_GRID)
def test_decision_invariants(tool_available, scoped, kept, repaired, backup_ok):
    engine = ConvergenceEngine(AugcuroConfig())
    record = _record(tool_available, scoped, kept, repaired, False, backup_ok)
    kind = engine.decide(record).kind

    if not tool_available:
        assert kind is OutcomeKind.FAILURE
    elif kind is OutcomeKind.REPAIRED:
        assert repaired and (not scoped or backup_ok)
    elif kind is OutcomeKind.SUCCESS:
        assert kept and not repaired

    if tool_available and scoped and repaired and not backup_ok:
        assert kind is OutcomeKind.FAILURE


def test_batch_run_and_summary(config, fake_augtool):
    fake_augtool.program(" ")
    engine = ConvergenceEngine(config)
    requests = [ActionRequest(PATH, VALUE), ActionRequest("/etc/hosts/2/ipaddr", "10.0.0.1")]
    progress = []

    outcomes = engine.converge_all(requests, progress_callback=lambda done, total: progress.append((done, total)))
    summary = engine.generate_summary(outcomes)

    assert [o.kind for o in outcomes] == [OutcomeKind.SUCCESS, OutcomeKind.SUCCESS]
    assert progress == [(1, 2), (2, 2)]
    assert summary["total_actions"] == 2
    assert summary["successful"] == 2
    assert summary["failed"] == 0
    assert summary["success_rate"] == 1
    assert summary["tool_missing"] == 0


def test_empty_summary():
    summary = ConvergenceEngine(AugcuroConfig()).generate_summary([])
    assert summary["total_actions"] == 0
    assert summary["success_rate"] == 0


def test_raw_output_survives_a_failing_backup_step(config, fake_augtool, hosts_file):
    """A phase that blows up after augtool ran still reports its output."""
    class ExplodingProvisioner(FileProvisioner):
        def copy(self, source, dest, backup_suffix):
            raise RuntimeError("disk on fire")

    fake_augtool.program(f"Saved '{hosts_file}'\n", stage_file=hosts_file, staged="edited\n")
    reporter = Reporter()
    engine = ConvergenceEngine(config, reporter=reporter, provisioner=ExplodingProvisioner(reporter))

    outcome = engine.converge(ActionRequest(PATH, VALUE, lens="Hosts", file=str(hosts_file)))

    assert outcome.kind is OutcomeKind.FAILURE
    assert "disk on fire" in outcome.message
    assert outcome.context.raw_output == f"Saved '{hosts_file}'\n"
    assert [e.kind for e in reporter.events] == ["diagnostic", "outcome"]
    assert reporter.events[0].message == f"Saved '{hosts_file}'\n"
    assert reporter.is_suppressed is False
