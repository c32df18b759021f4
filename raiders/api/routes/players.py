import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from raiders import crud
from raiders.api.deps import ClockDep, SessionDep
from raiders.game.barracks import Barracks
from raiders.game.raid import refill_stamina, skip_cooldown, upgrade_defense
from raiders.game.stamina import regenerate_state
from raiders.models import Player
from raiders.schemas import (
    PlayerCombatState,
    PlayerCreate,
    PlayerOutPrivate,
    PlayersOutPublicList,
    Rejection,
    TroopTrainingRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/players", tags=["players"])


def get_player_or_404(
    *,
    session: SessionDep,
    player_id: int,
    for_update: bool = False,
) -> Player:
    """
    Common function to load a player.

    Args:
        session: Database session
        player_id: ID of the player to load
        for_update: Whether to get the player for update (using select for update)

    Raises:
        HTTPException: 404 if player not found
    """
    if for_update:
        player = crud.Player.get_for_update(session=session, player_id=player_id)
    else:
        player = crud.Player.get(session=session, player_id=player_id)

    if not player:
        raise HTTPException(status_code=404, detail="Player not found")

    return player


def rejection_to_http(rejection: Rejection) -> HTTPException:
    return HTTPException(status_code=409, detail=rejection.model_dump(mode="json"))


def _store_state(
    *, session: SessionDep, player: Player, state: PlayerCombatState
) -> Player:
    crud.Player.save_state(session=session, player=player, state=state)
    session.commit()
    session.refresh(player)
    return player


@router.post("", response_model=PlayerOutPrivate)
def create_player(*, session: SessionDep, player_in: PlayerCreate) -> Any:
    """
    Create a new player
    """
    if crud.Player.get_by_username(session=session, username=player_in.username):
        raise HTTPException(
            status_code=400, detail="A player with this username already exists"
        )
    player = crud.Player.create(
        session=session, username=player_in.username, unit_type=player_in.unit_type
    )
    logger.info("Player %s created", player.username)
    return player


@router.get("", response_model=PlayersOutPublicList)
def get_leaderboard(*, session: SessionDep, skip: int = 0, limit: int = 100) -> Any:
    """
    Get players ordered by number of wins
    """
    players, count = crud.Player.list_leaderboard(
        session=session, skip=skip, limit=limit
    )
    return PlayersOutPublicList(data=players, count=count)


@router.get("/{player_id}", response_model=PlayerOutPrivate)
def get_player(*, session: SessionDep, clock: ClockDep, player_id: int) -> Any:
    """
    Get player information.
    It also brings the player's stamina up to date.
    """
    player = get_player_or_404(session=session, player_id=player_id, for_update=True)

    state = crud.Player.load_state(player)
    regenerated = regenerate_state(state, clock())
    if regenerated is not state:
        return _store_state(session=session, player=player, state=regenerated)

    return player


@router.post("/{player_id}/troops", response_model=PlayerOutPrivate)
def train_troop(
    *,
    session: SessionDep,
    player_id: int,
    training_request: TroopTrainingRequest,
) -> Any:
    """
    Train one troop for the player
    """
    player = get_player_or_404(session=session, player_id=player_id, for_update=True)

    roster = crud.Player.load_roster(player)
    result = Barracks().can_train(roster, training_request.troop)
    if isinstance(result, Rejection):
        raise rejection_to_http(result)

    crud.Player.save_roster(session=session, player=player, roster=result.roster)
    session.commit()
    session.refresh(player)
    return player


@router.post("/{player_id}/cooldown/skip", response_model=PlayerOutPrivate)
def skip_player_cooldown(*, session: SessionDep, player_id: int) -> Any:
    """
    End the fatigue cooldown and reset the win streak
    """
    player = get_player_or_404(session=session, player_id=player_id, for_update=True)

    state = skip_cooldown(crud.Player.load_state(player))
    logger.info("Player %s skipped cooldown", player.id)
    return _store_state(session=session, player=player, state=state)


@router.post("/{player_id}/stamina/refill", response_model=PlayerOutPrivate)
def refill_player_stamina(
    *, session: SessionDep, clock: ClockDep, player_id: int
) -> Any:
    """
    Fill the player's stamina to the maximum
    """
    player = get_player_or_404(session=session, player_id=player_id, for_update=True)

    state = refill_stamina(crud.Player.load_state(player), clock())
    logger.info("Player %s refilled stamina", player.id)
    return _store_state(session=session, player=player, state=state)


@router.post("/{player_id}/defense/upgrade", response_model=PlayerOutPrivate)
def upgrade_player_defense(*, session: SessionDep, player_id: int) -> Any:
    """
    Raise the player's defense power by the configured upgrade amount
    """
    player = get_player_or_404(session=session, player_id=player_id, for_update=True)

    state = upgrade_defense(crud.Player.load_state(player))
    logger.info("Player %s upgraded defense to %s", player.id, state.defense_power)
    return _store_state(session=session, player=player, state=state)
