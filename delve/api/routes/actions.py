"""GET /api/v1/actions: the canonical action space."""

from __future__ import annotations

from fastapi import APIRouter

from delve.api.schemas import ActionSchema, ActionSpaceResponse
from delve.core.enums import CanonicalAction

router = APIRouter()


@router.get("/actions", response_model=ActionSpaceResponse)
def get_actions() -> ActionSpaceResponse:
    return ActionSpaceResponse(
        count=CanonicalAction.count(),
        actions=[
            ActionSchema(
                name=a.name, dx=a.dx, dy=a.dy,
                is_movement=a.is_movement, description=a.description,
            )
            for a in CanonicalAction
        ],
    )
