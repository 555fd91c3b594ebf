"""Engine layer: scheduler and the episode step protocol."""

from delve.engine.episode import EpisodeRunner, StepInfo, StepResult, compute_reward, new_episode
from delve.engine.scheduler import Scheduler

__all__ = ["EpisodeRunner", "Scheduler", "StepInfo", "StepResult", "compute_reward", "new_episode"]
