"""Entry point: ``python -m delve``.

Supports three modes:
  - ``python -m delve``           → Launch the FastAPI episode server
  - ``python -m delve run``       → Play one headless episode and write a replay
  - ``python -m delve verify F``  → Re-run replay file F and check every state hash

Seed, hero class and challenges default to the ``DELVE_SEED``,
``DELVE_CLASS`` and ``DELVE_CHALLENGES`` environment variables.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 2
EXIT_REPLAY_MISMATCH = 1

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING"]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Deterministic turn-based dungeon simulation")
    sub = parser.add_subparsers(dest="command")

    # --- Server mode (default) ---
    srv = sub.add_parser("serve", help="Start the FastAPI episode server (default)")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--log-level", type=str, default="INFO", choices=_LOG_LEVELS)

    # --- Headless episode ---
    run = sub.add_parser("run", help="Play one headless episode")
    run.add_argument("--seed", type=str, default=None)
    run.add_argument("--hero-class", type=str, default=None)
    run.add_argument("--challenges", type=str, default=None)
    run.add_argument("--turns", type=int, default=200)
    run.add_argument(
        "--actions", type=str, default=None,
        help="Comma-separated action names to play in a loop (default: seeded random policy)",
    )
    run.add_argument("--replay", type=str, default="replay.txt")
    run.add_argument("--log-level", type=str, default="INFO", choices=_LOG_LEVELS)

    # --- Replay verification ---
    ver = sub.add_parser("verify", help="Re-run a replay file and compare state hashes")
    ver.add_argument("replay", type=str)
    ver.add_argument("--log-level", type=str, default="INFO", choices=_LOG_LEVELS)

    return parser


def _run_server(args: argparse.Namespace) -> int:
    import uvicorn

    from delve.api.app import create_app
    from delve.config import SimulationConfig

    app = create_app(SimulationConfig(log_level=args.log_level))
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


def _random_policy(seed: int):
    """Seeded uniform policy over the action space, independent of the world's own RNG."""
    from delve.core.enums import CanonicalAction, Domain
    from delve.systems.rng import DeterministicRNG

    rng = DeterministicRNG(seed)
    actions = list(CanonicalAction)

    def policy(turn: int) -> CanonicalAction:
        return actions[rng.next_int(Domain.AI_DECISION, -1, turn, 0, len(actions) - 1)]

    return policy


def _scripted_policy(names: str):
    from delve.core.enums import CanonicalAction

    actions = [CanonicalAction.parse(name) for name in names.split(",") if name.strip()]
    if not actions:
        from delve.core.errors import ConfigurationError
        raise ConfigurationError("--actions needs at least one action name")

    def policy(turn: int) -> CanonicalAction:
        return actions[(turn - 1) % len(actions)]

    return policy


def _run_episode(args: argparse.Namespace) -> int:
    from delve.config import RunConfig, SimulationConfig
    from delve.engine.episode import new_episode
    from delve.utils.logging import setup_logging

    config = SimulationConfig(log_level=args.log_level, replay_file=args.replay)
    setup_logging(config.log_level)

    run_config = RunConfig.from_env(
        seed=args.seed, hero_class=args.hero_class, challenges=args.challenges,
    )
    policy = _scripted_policy(args.actions) if args.actions else _random_policy(run_config.seed)

    runner = new_episode(run_config.seed, run_config.hero_class, run_config.challenges, config)
    total_reward = 0.0
    result = None
    for turn in range(1, args.turns + 1):
        result = runner.step(policy(turn))
        total_reward += result.reward
        if result.done:
            break

    path = runner.replay.flush(config.replay_file)
    if result is not None:
        logger.info(
            "Finished after %d turns: depth=%d gold=%d hp=%d/%d reward=%.1f hash=%d",
            result.turn_index, result.observation.depth, result.observation.gold,
            result.observation.hero_hp, result.observation.hero_max_hp,
            total_reward, result.state_hash,
        )
    logger.info("Done. Replay written to %s", path)
    return 0


def _verify(args: argparse.Namespace) -> int:
    from delve.utils.logging import setup_logging
    from delve.utils.replay import verify_replay

    setup_logging(args.log_level)
    report = verify_replay(Path(args.replay).read_text(encoding="utf-8"))
    if report.ok:
        print(f"OK: {report.matched}/{report.total} turns match")
        return 0
    print(
        f"MISMATCH at turn {report.mismatch_turn}: "
        f"expected {report.expected_hash}, got {report.actual_hash}"
    )
    return EXIT_REPLAY_MISMATCH


def main(argv: list[str] | None = None) -> int:
    from delve.core.errors import ConfigurationError, ReplayFormatError

    parser = _build_parser()
    args = parser.parse_args(argv)

    # Default to serve mode if no subcommand given
    if args.command is None:
        args = parser.parse_args(["serve"])

    try:
        if args.command == "serve":
            return _run_server(args)
        if args.command == "run":
            return _run_episode(args)
        return _verify(args)
    except (ConfigurationError, ReplayFormatError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR


if __name__ == "__main__":
    sys.exit(main())
