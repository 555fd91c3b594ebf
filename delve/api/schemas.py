"""Pydantic request and response models for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field


# --- Requests ---

class CreateEpisodeRequest(BaseModel):
    seed: int = 12345
    hero_class: str = "WARRIOR"
    challenges: int = 0


class StepRequest(BaseModel):
    action: str = Field(..., description="Canonical action name, e.g. MOVE_E or WAIT")


# --- Step results ---

class ObservationSchema(BaseModel):
    hero_x: int
    hero_y: int
    hero_hp: int
    hero_max_hp: int
    depth: int
    gold: int
    width: int = 0
    height: int = 0
    passable: list[int] = []
    alive: bool


class StepInfoSchema(BaseModel):
    turn: int
    done: bool
    done_reason: str | None = None
    hero_alive: bool
    depth: int
    hero_hp: int
    hero_max_hp: int
    safety_limit_hits: int = 0


class StepResultSchema(BaseModel):
    observation: ObservationSchema
    reward: float
    done: bool
    done_reason: str | None = None
    state_hash: int
    turn_index: int
    info: StepInfoSchema


# --- Episodes ---

class EpisodeResponse(BaseModel):
    episode_id: str
    seed: int
    hero_class: str
    challenges: int
    turn_index: int
    done: bool
    state_hash: int
    observation: ObservationSchema
    safety_limit_hits: int = 0
    presentation_failures: int = 0
    last_result: StepResultSchema | None = None


# --- Action space ---

class ActionSchema(BaseModel):
    name: str
    dx: int
    dy: int
    is_movement: bool
    description: str


class ActionSpaceResponse(BaseModel):
    count: int
    actions: list[ActionSchema]


# --- Config ---

class SimulationConfigResponse(BaseModel):
    level_width: int
    level_height: int
    safety_limit: int
    hash_log_interval: int
    mob_cap: int
    respawn_interval: float
    regen_interval: float
    reward_depth: float
    reward_gold: float
    reward_survival: float
    penalty_hp_lost: float
    penalty_death: float
    hero_classes: list[str]
    challenges: dict[str, int]
