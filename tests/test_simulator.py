import pytest

from geev_core import __main__ as cli
from geev_core.simulator import (
    InvariantViolation,
    build_world,
    check_invariants,
    format_report,
    outstanding_obligations,
    simulate,
)


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_simulation_keeps_invariants(seed):
    report = simulate(seed=seed, steps=400)

    assert sum(report.attempted.values()) == 400
    assert sum(report.succeeded.values()) + sum(report.rejections.values()) == 400
    assert report.giveaways > 0
    assert report.help_requests > 0
    assert set(report.custody) == {"XLM", "USDC"}


def test_simulation_is_reproducible():
    first = simulate(seed=11, steps=200)
    second = simulate(seed=11, steps=200)
    assert first.succeeded == second.succeeded
    assert first.rejections == second.rejections
    assert first.custody == second.custody


def test_check_invariants_detects_missing_custody():
    world = build_world(seed=5)
    world.contract.create_giveaway("user-00", "XLM", 300, "Prize", 60)
    check_invariants(world)
    assert outstanding_obligations(world) == {"XLM": 300, "USDC": 0}

    world.ledger.transfer("XLM", world.contract.address, "user-01", 100)
    with pytest.raises(InvariantViolation):
        check_invariants(world)


def test_build_world_needs_two_participants():
    with pytest.raises(ValueError):
        build_world(seed=0, participants=1)


def test_format_report_lists_operations():
    text = format_report(simulate(seed=4, steps=50))
    assert text.startswith("Seed 4: 50 steps")
    assert "Custody balances:" in text
    assert "XLM" in text


def test_cli_prints_report(capsys, monkeypatch):
    monkeypatch.delenv("GEEV_STORE_BACKEND", raising=False)
    exit_code = cli.main(
        ["--seed", "3", "--steps", "40", "--token", "EURC", "--log-level", "warning"]
    )
    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Seed 3: 40 steps" in out
    assert "EURC" in out


def test_cli_reports_invariant_violation(monkeypatch):
    def broken(**_kwargs):
        raise InvariantViolation("custody mismatch")

    monkeypatch.delenv("GEEV_STORE_BACKEND", raising=False)
    monkeypatch.setattr(cli, "simulate", broken)
    assert cli.main(["--steps", "1"]) == 1
