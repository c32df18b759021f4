from datetime import datetime

from sqlmodel import Session, func, or_, select

from raiders import models
from raiders.core.config import settings
from raiders.game.stamina import as_utc
from raiders.game.units import UnitType
from raiders.schemas import PlayerCombatState, RaidOutcome, TroopRoster


def _optional_utc(value: datetime | None) -> datetime | None:
    return as_utc(value) if value is not None else None


class Player:
    @staticmethod
    def create(
        *,
        session: Session,
        username: str,
        unit_type: UnitType | None = UnitType.INFANTRY,
        **fields,
    ) -> models.Player:
        values = {
            "balance": settings.STARTING_BALANCE,
            "defense_power": settings.STARTING_DEFENSE,
            "stamina": settings.MAX_STAMINA,
            "max_stamina": settings.MAX_STAMINA,
        }
        values.update(fields)
        db_obj = models.Player(
            username=username,
            unit_type=UnitType(unit_type) if unit_type is not None else None,
            **values,
        )
        session.add(db_obj)
        session.commit()
        session.refresh(db_obj)
        return db_obj

    @staticmethod
    def get(*, session: Session, player_id: int) -> models.Player | None:
        """Get player without lock"""
        return session.exec(
            select(models.Player).where(models.Player.id == player_id)
        ).first()

    @staticmethod
    def get_for_update(*, session: Session, player_id: int) -> models.Player | None:
        """Get player with FOR UPDATE lock"""
        statement = (
            select(models.Player).where(models.Player.id == player_id).with_for_update()
        )
        return session.exec(statement).first()

    @staticmethod
    def get_by_username(*, session: Session, username: str) -> models.Player | None:
        statement = select(models.Player).where(models.Player.username == username)
        return session.exec(statement).first()

    @staticmethod
    def list_leaderboard(
        *, session: Session, skip: int = 0, limit: int = 100
    ) -> tuple[list[models.Player], int]:
        """Players ordered by wins, most first"""
        statement = (
            select(models.Player)
            .order_by(models.Player.win_count.desc(), models.Player.id)
            .offset(skip)
            .limit(limit)
        )
        players = list(session.exec(statement).all())
        count = session.exec(select(func.count(models.Player.id))).one()
        return players, count

    @staticmethod
    def load_state(player: models.Player) -> PlayerCombatState:
        return PlayerCombatState(
            win_count=player.win_count,
            defense_power=player.defense_power,
            unit_type=player.unit_type,
            stamina=player.stamina,
            max_stamina=player.max_stamina,
            stamina_updated_at=as_utc(player.stamina_updated_at),
            balance=player.balance,
            streak=player.streak,
            cooldown_until=_optional_utc(player.cooldown_until),
            last_raid_time=_optional_utc(player.last_raid_time),
        )

    @staticmethod
    def load_roster(player: models.Player) -> TroopRoster:
        return TroopRoster(
            archers=player.archers,
            infantry=player.infantry,
            giants=player.giants,
        )

    @staticmethod
    def save_state(
        *, session: Session, player: models.Player, state: PlayerCombatState
    ) -> models.Player:
        """Copy a combat state back onto the player row (not committed)"""
        player.sqlmodel_update(state.model_dump())
        session.add(player)
        return player

    @staticmethod
    def save_roster(
        *, session: Session, player: models.Player, roster: TroopRoster
    ) -> models.Player:
        """Copy a roster back onto the player row (not committed)"""
        player.sqlmodel_update(roster.model_dump())
        session.add(player)
        return player


class RaidRecord:
    @staticmethod
    def create(
        *,
        session: Session,
        attacker_id: int,
        defender_id: int,
        outcome: RaidOutcome,
    ) -> models.RaidRecord:
        """Add a history entry for a resolved raid (not committed)"""
        db_obj = models.RaidRecord(
            attacker_id=attacker_id,
            defender_id=defender_id,
            created_at=outcome.resolved_at,
            success=outcome.success,
            loot_amount=outcome.loot_amount,
            destruction_percent=outcome.destruction_percent,
        )
        session.add(db_obj)
        return db_obj

    @staticmethod
    def list_for_player(
        *, session: Session, player_id: int, skip: int = 0, limit: int = 100
    ) -> tuple[list[models.RaidRecord], int]:
        """Raids the player attacked or defended in, newest first"""
        involved = or_(
            models.RaidRecord.attacker_id == player_id,
            models.RaidRecord.defender_id == player_id,
        )
        statement = (
            select(models.RaidRecord)
            .where(involved)
            .order_by(models.RaidRecord.created_at.desc(), models.RaidRecord.id.desc())
            .offset(skip)
            .limit(limit)
        )
        records = list(session.exec(statement).all())
        count = session.exec(
            select(func.count(models.RaidRecord.id)).where(involved)
        ).one()
        return records, count
