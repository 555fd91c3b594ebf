"""Tests for the command-line entry point."""

import logging
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from delve.__main__ import EXIT_CONFIG_ERROR, EXIT_REPLAY_MISMATCH, main
from delve.utils.replay import parse_replay


@pytest.fixture(autouse=True)
def _restore_logging(monkeypatch):
    for name in ("DELVE_SEED", "DELVE_CLASS", "DELVE_CHALLENGES"):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _run(tmp_path, *extra) -> str:
    path = tmp_path / "replay.txt"
    code = main(["run", "--seed", "7", "--turns", "12", "--replay", str(path), "--log-level", "WARNING", *extra])
    assert code == 0
    return str(path)


class TestRun:

    def test_writes_replay(self, tmp_path):
        path = _run(tmp_path)
        parsed = parse_replay(open(path, encoding="utf-8").read())
        assert parsed.seed == 7
        assert 1 <= len(parsed.records) <= 12
        assert [r.turn_index for r in parsed.records] == list(range(1, len(parsed.records) + 1))

    def test_scripted_actions_cycle(self, tmp_path):
        path = _run(tmp_path, "--actions", "MOVE_E,WAIT,REST")
        parsed = parse_replay(open(path, encoding="utf-8").read())
        names = [r.action.name for r in parsed.records[:6]]
        assert names == ["MOVE_E", "WAIT", "REST", "MOVE_E", "WAIT", "REST"][:len(names)]

    def test_seed_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DELVE_SEED", "4242")
        monkeypatch.setenv("DELVE_CLASS", "mage")
        path = tmp_path / "env.txt"
        assert main(["run", "--turns", "3", "--replay", str(path), "--log-level", "WARNING"]) == 0
        parsed = parse_replay(path.read_text(encoding="utf-8"))
        assert parsed.seed == 4242
        assert parsed.hero_class.name == "MAGE"

    def test_bad_environment_ignored_when_flags_given(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DELVE_SEED", "not-a-number")
        monkeypatch.setenv("DELVE_CLASS", "PALADIN")
        path = tmp_path / "flags.txt"
        code = main([
            "run", "--seed", "5", "--hero-class", "ROGUE", "--challenges", "0",
            "--turns", "2", "--replay", str(path), "--log-level", "WARNING",
        ])
        assert code == 0
        assert parse_replay(path.read_text(encoding="utf-8")).seed == 5

    def test_bad_environment_used_for_missing_flag(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DELVE_SEED", "not-a-number")
        code = main(["run", "--turns", "1", "--replay", str(tmp_path / "x.txt"), "--log-level", "WARNING"])
        assert code == EXIT_CONFIG_ERROR

    @pytest.mark.parametrize("extra", [
        ["--hero-class", "PALADIN"],
        ["--seed", "abc"],
        ["--challenges", "32"],
        ["--actions", "DANCE"],
    ])
    def test_bad_parameters(self, tmp_path, extra, capsys):
        code = main(["run", "--turns", "1", "--replay", str(tmp_path / "x.txt"), "--log-level", "WARNING", *extra])
        assert code == EXIT_CONFIG_ERROR
        assert "error:" in capsys.readouterr().err


class TestVerify:

    def test_recorded_run_verifies(self, tmp_path, capsys):
        path = _run(tmp_path)
        assert main(["verify", path, "--log-level", "WARNING"]) == 0
        assert capsys.readouterr().out.startswith("OK:")

    def test_tampered_run_fails(self, tmp_path, capsys):
        path = _run(tmp_path, "--actions", "MOVE_E,MOVE_S")
        with open(path, encoding="utf-8") as f:
            lines = f.read().splitlines()
        fields = lines[8].split(",")
        fields[2] = "0"
        lines[8] = ",".join(fields)
        with open(path, "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")
        assert main(["verify", path, "--log-level", "WARNING"]) == EXIT_REPLAY_MISMATCH
        assert "MISMATCH at turn 1" in capsys.readouterr().out

    def test_garbage_file(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("not a replay\n", encoding="utf-8")
        assert main(["verify", str(path), "--log-level", "WARNING"]) == EXIT_CONFIG_ERROR
