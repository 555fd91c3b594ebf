"""GET /api/v1/config: expose engine configuration."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from delve.api.dependencies import get_registry
from delve.api.registry import EpisodeRegistry
from delve.api.schemas import SimulationConfigResponse
from delve.core.enums import Challenge, HeroClass

router = APIRouter()


@router.get("/config", response_model=SimulationConfigResponse)
def get_config(
    registry: EpisodeRegistry = Depends(get_registry),
) -> SimulationConfigResponse:
    cfg = registry.config
    return SimulationConfigResponse(
        level_width=cfg.level_width,
        level_height=cfg.level_height,
        safety_limit=cfg.safety_limit,
        hash_log_interval=cfg.hash_log_interval,
        mob_cap=cfg.mob_cap,
        respawn_interval=cfg.respawn_interval,
        regen_interval=cfg.regen_interval,
        reward_depth=cfg.reward_depth,
        reward_gold=cfg.reward_gold,
        reward_survival=cfg.reward_survival,
        penalty_hp_lost=cfg.penalty_hp_lost,
        penalty_death=cfg.penalty_death,
        hero_classes=[c.name for c in HeroClass],
        challenges={c.name: int(c) for c in (Challenge.NO_REGEN, Challenge.SWARM, Challenge.CHAMPIONS)},
    )
