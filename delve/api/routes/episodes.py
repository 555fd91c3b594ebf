"""Episode lifecycle and stepping: /api/v1/episodes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from delve.api.dependencies import get_registry
from delve.api.registry import EpisodeNotFoundError, EpisodeRegistry
from delve.api.schemas import (
    CreateEpisodeRequest, EpisodeResponse, StepRequest, StepResultSchema,
)
from delve.core.enums import CanonicalAction
from delve.core.observation import compute_state_hash, extract_observation
from delve.engine.episode import EpisodeRunner

router = APIRouter()


def _episode_response(episode_id: str, runner: EpisodeRunner) -> EpisodeResponse:
    cfg = runner.run_config
    last = runner.last_result
    return EpisodeResponse(
        episode_id=episode_id,
        seed=cfg.seed,
        hero_class=cfg.hero_class.name,
        challenges=int(cfg.challenges),
        turn_index=runner.turn_index,
        done=runner.done,
        state_hash=compute_state_hash(runner.world),
        observation=extract_observation(runner.world).to_dict(),
        safety_limit_hits=runner.scheduler.safety_limit_hits,
        presentation_failures=runner.scheduler.presentation_failures,
        last_result=last.to_dict() if last is not None else None,
    )


def _not_found(episode_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Episode {episode_id} not found")


@router.post("/episodes", response_model=EpisodeResponse, status_code=201)
def create_episode(
    body: CreateEpisodeRequest,
    registry: EpisodeRegistry = Depends(get_registry),
) -> EpisodeResponse:
    episode_id, _ = registry.create(body.seed, body.hero_class, body.challenges)
    return registry.snapshot(episode_id, lambda runner: _episode_response(episode_id, runner))


@router.get("/episodes/{episode_id}", response_model=EpisodeResponse)
def get_episode(
    episode_id: str,
    registry: EpisodeRegistry = Depends(get_registry),
) -> EpisodeResponse:
    try:
        return registry.snapshot(episode_id, lambda runner: _episode_response(episode_id, runner))
    except EpisodeNotFoundError:
        raise _not_found(episode_id) from None


@router.post("/episodes/{episode_id}/step", response_model=StepResultSchema)
def step_episode(
    episode_id: str,
    body: StepRequest,
    registry: EpisodeRegistry = Depends(get_registry),
) -> StepResultSchema:
    action = CanonicalAction.parse(body.action)
    try:
        result = registry.step(episode_id, action)
    except EpisodeNotFoundError:
        raise _not_found(episode_id) from None
    return StepResultSchema(**result.to_dict())


@router.get("/episodes/{episode_id}/replay")
def get_replay(
    episode_id: str,
    registry: EpisodeRegistry = Depends(get_registry),
) -> Response:
    try:
        text = registry.render_replay(episode_id)
    except EpisodeNotFoundError:
        raise _not_found(episode_id) from None
    return Response(content=text, media_type="text/plain")


@router.delete("/episodes/{episode_id}", status_code=204)
def delete_episode(
    episode_id: str,
    registry: EpisodeRegistry = Depends(get_registry),
) -> Response:
    try:
        registry.delete(episode_id)
    except EpisodeNotFoundError:
        raise _not_found(episode_id) from None
    return Response(status_code=204)
