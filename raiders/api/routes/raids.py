import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from raiders import crud
from raiders.api.deps import ClockDep, RngDep, SessionDep
from raiders.api.routes.players import get_player_or_404, rejection_to_http
from raiders.game.raid import RaidResolver
from raiders.schemas import (
    RaidOutcome,
    RaidPreview,
    RaidRecordsPublicList,
    RaidRequest,
    Rejection,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/players/{player_id}/raids", tags=["raids"])


def _check_not_self(player_id: int, defender_id: int) -> None:
    if player_id == defender_id:
        raise HTTPException(status_code=400, detail="You cannot raid yourself")


@router.get("", response_model=RaidRecordsPublicList)
def get_raid_history(
    *, session: SessionDep, player_id: int, skip: int = 0, limit: int = 100
) -> Any:
    """
    Get the raids the player attacked or defended in, newest first
    """
    get_player_or_404(session=session, player_id=player_id)
    records, count = crud.RaidRecord.list_for_player(
        session=session, player_id=player_id, skip=skip, limit=limit
    )
    return RaidRecordsPublicList(data=records, count=count)


@router.get("/preview", response_model=RaidPreview)
def preview_raid(
    *,
    session: SessionDep,
    clock: ClockDep,
    player_id: int,
    defender_id: int,
) -> Any:
    """
    Estimate the chance and loot of a raid without performing it
    """
    _check_not_self(player_id, defender_id)
    attacker = get_player_or_404(session=session, player_id=player_id)
    defender = get_player_or_404(session=session, player_id=defender_id)

    resolver = RaidResolver(clock=clock)
    return resolver.preview(
        crud.Player.load_state(attacker),
        crud.Player.load_state(defender),
        crud.Player.load_roster(attacker),
    )


@router.post("", response_model=RaidOutcome)
def raid(
    *,
    session: SessionDep,
    clock: ClockDep,
    rng: RngDep,
    player_id: int,
    raid_request: RaidRequest,
) -> Any:
    """
    Raid another player.
    Both players are locked for the duration of the raid.
    """
    _check_not_self(player_id, raid_request.defender_id)
    attacker = get_player_or_404(session=session, player_id=player_id, for_update=True)
    defender = get_player_or_404(
        session=session, player_id=raid_request.defender_id, for_update=True
    )

    resolver = RaidResolver(clock=clock, rng=rng)
    result = resolver.resolve(
        crud.Player.load_state(attacker),
        crud.Player.load_state(defender),
        crud.Player.load_roster(attacker),
    )
    if isinstance(result, Rejection):
        raise rejection_to_http(result)

    crud.Player.save_state(
        session=session, player=attacker, state=result.updated_attacker
    )
    crud.Player.save_state(
        session=session, player=defender, state=result.updated_defender
    )
    crud.RaidRecord.create(
        session=session,
        attacker_id=attacker.id,
        defender_id=defender.id,
        outcome=result,
    )
    session.commit()
    logger.info(
        "Player %s raided player %s: %s",
        attacker.id,
        defender.id,
        "success" if result.success else "failure",
    )
    return result
