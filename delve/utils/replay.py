"""Replay log: records every step for deterministic playback and integrity checks.

Text format::

    # Delve Headless Replay Log
    # Format: turn,action,stateHash,heroX,heroY,heroHP,heroMaxHP,depth,gold,alive
    # Build ID: 0.1.0
    # Seed: 12345
    # Hero Class: WARRIOR
    # Challenges: 0
    # Generated: 2024-01-01 12:00:00 UTC

    1,MOVE_E,1234567890,5,4,20,20,1,0,true
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from delve.core.enums import CanonicalAction, Challenge, HeroClass
from delve.core.errors import ConfigurationError, ReplayFormatError

if TYPE_CHECKING:
    from delve.config import RunConfig, SimulationConfig
    from delve.engine.episode import StepResult

logger = logging.getLogger(__name__)

TITLE = "# Delve Headless Replay Log"
FIELDS = ("turn", "action", "stateHash", "heroX", "heroY", "heroHP", "heroMaxHP", "depth", "gold", "alive")
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ReplayEntry:
    turn_index: int
    action: CanonicalAction
    result: StepResult

    def to_line(self) -> str:
        obs = self.result.observation
        action = getattr(self.action, "name", str(self.action))
        return ",".join((
            str(self.turn_index),
            action,
            str(self.result.state_hash),
            str(obs.hero_x),
            str(obs.hero_y),
            str(obs.hero_hp),
            str(obs.hero_max_hp),
            str(obs.depth),
            str(obs.gold),
            "true" if obs.alive else "false",
        ))


class ReplayLogger:
    """Append-only log of (turn, action, result), one entry per step."""

    __slots__ = ("_run_config", "_build_id", "_clock", "_entries")

    def __init__(
        self,
        run_config: RunConfig,
        build_id: str | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if build_id is None:
            from delve import __version__
            build_id = __version__
        self._run_config = run_config
        self._build_id = build_id
        self._clock = clock
        self._entries: list[ReplayEntry] = []

    @property
    def entries(self) -> tuple[ReplayEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, turn_index: int, action: CanonicalAction, result: StepResult) -> ReplayEntry:
        entry = ReplayEntry(turn_index, action, result)
        self._entries.append(entry)
        return entry

    def render(self) -> str:
        cfg = self._run_config
        lines = [
            TITLE,
            "# Format: " + ",".join(FIELDS),
            f"# Build ID: {self._build_id}",
            f"# Seed: {cfg.seed}",
            f"# Hero Class: {cfg.hero_class.name}",
            f"# Challenges: {int(cfg.challenges)}",
            f"# Generated: {self._clock().strftime(TIMESTAMP_FORMAT)} UTC",
            "",
        ]
        lines.extend(entry.to_line() for entry in self._entries)
        return "\n".join(lines) + "\n"

    def flush(self, path: str | Path) -> Path:
        """Write the rendered log to disk."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(), encoding="utf-8")
        logger.info("Replay saved to %s (%d turns)", path, len(self._entries))
        return path


# ---------------------------------------------------------------------------
# Parsing & verification
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ReplayRecord:
    turn_index: int
    action: CanonicalAction
    state_hash: int
    hero_x: int
    hero_y: int
    hero_hp: int
    hero_max_hp: int
    depth: int
    gold: int
    alive: bool


@dataclass(slots=True)
class ParsedReplay:
    seed: int
    hero_class: HeroClass
    challenges: Challenge
    build_id: str = ""
    generated: str = ""
    records: list[ReplayRecord] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class VerifyReport:
    total: int
    matched: int
    mismatch_turn: int | None = None
    expected_hash: int | None = None
    actual_hash: int | None = None

    @property
    def ok(self) -> bool:
        return self.mismatch_turn is None


def _parse_record(line: str, lineno: int) -> ReplayRecord:
    parts = line.split(",")
    if len(parts) != len(FIELDS):
        raise ReplayFormatError(f"Line {lineno}: expected {len(FIELDS)} fields, got {len(parts)}")
    if parts[9] not in ("true", "false"):
        raise ReplayFormatError(f"Line {lineno}: alive must be 'true' or 'false', got {parts[9]!r}")
    try:
        action = CanonicalAction.parse(parts[1])
        nums = [int(p) for p in (parts[0], *parts[2:9])]
    except (ConfigurationError, ValueError) as exc:
        raise ReplayFormatError(f"Line {lineno}: {exc}") from None
    turn, state_hash, x, y, hp, max_hp, depth, gold = nums
    return ReplayRecord(turn, action, state_hash, x, y, hp, max_hp, depth, gold, parts[9] == "true")


def parse_replay(text: str) -> ParsedReplay:
    """Parse replay text back into its header and records."""
    header: dict[str, str] = {}
    records: list[ReplayRecord] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        if line.startswith("#"):
            key, sep, value = line[1:].partition(":")
            if sep:
                header[key.strip().lower()] = value.strip()
            continue
        records.append(_parse_record(line, lineno))

    if "seed" not in header or "hero class" not in header:
        raise ReplayFormatError("Replay header is missing the seed or hero class")
    try:
        seed = int(header["seed"])
        hero_class = HeroClass.parse(header["hero class"])
        challenges = Challenge(int(header.get("challenges", "0")))
    except (ConfigurationError, ValueError) as exc:
        raise ReplayFormatError(f"Bad replay header: {exc}") from None

    return ParsedReplay(
        seed=seed,
        hero_class=hero_class,
        challenges=challenges,
        build_id=header.get("build id", ""),
        generated=header.get("generated", ""),
        records=records,
    )


def verify_replay(text: str, sim_config: SimulationConfig | None = None) -> VerifyReport:
    """Re-run the recorded actions on a fresh episode and compare state hashes.

    Stops at the first turn whose hash differs from the recorded one.
    """
    from delve.engine.episode import new_episode

    replay = parse_replay(text)
    runner = new_episode(replay.seed, replay.hero_class, replay.challenges, sim_config)
    matched = 0
    for record in replay.records:
        result = runner.step(record.action)
        if result.state_hash != record.state_hash:
            logger.warning(
                "Replay diverged at turn %d: expected %d, got %d",
                record.turn_index, record.state_hash, result.state_hash,
            )
            return VerifyReport(
                total=len(replay.records),
                matched=matched,
                mismatch_turn=record.turn_index,
                expected_hash=record.state_hash,
                actual_hash=result.state_hash,
            )
        matched += 1
    logger.info("Replay verified: %d/%d turns match", matched, len(replay.records))
    return VerifyReport(total=len(replay.records), matched=matched)
