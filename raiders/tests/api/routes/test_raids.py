from collections.abc import Callable
from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from raiders import models
from raiders.api.deps import get_clock, get_rng
from raiders.core.config import settings
from raiders.main import app
from raiders.tests.utils.player import create_random_player

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture()
def fixed_clock(client: TestClient) -> None:
    app.dependency_overrides[get_clock] = lambda: (lambda: NOW)


@pytest.fixture()
def set_roll(client: TestClient) -> Callable[[float], None]:
    def _set(roll: float) -> None:
        app.dependency_overrides[get_rng] = lambda: (lambda: roll)

    _set(0.0)
    return _set


def raid_url(player_id: int) -> str:
    return f"{settings.API_V1_STR}/players/{player_id}/raids"


def test_successful_raid(
    client: TestClient,
    session: Session,
    fixed_clock: None,
    set_roll: Callable[[float], None],
    attacker_player: models.Player,
    defender_player: models.Player,
) -> None:
    """Test that a won raid moves loot and is stored for both players"""
    response = client.post(
        raid_url(attacker_player.id), json={"defender_id": defender_player.id}
    )
    assert response.status_code == 200

    data = response.json()
    assert data["success"] is True
    assert data["unit_advantage_applied"] is True
    assert data["loot_amount"] == 19
    assert data["destruction_percent"] == 70.6
    assert data["updated_attacker"]["balance"] == 1019
    assert data["updated_defender"]["balance"] == 981

    session.refresh(attacker_player)
    session.refresh(defender_player)
    assert attacker_player.balance == 1019
    assert attacker_player.win_count == 1
    assert attacker_player.streak == 1
    assert attacker_player.stamina == 90
    assert defender_player.balance == 981
    assert defender_player.defense_power == 40
    assert defender_player.last_raid_time is not None


def test_failed_raid(
    client: TestClient,
    session: Session,
    fixed_clock: None,
    set_roll: Callable[[float], None],
    attacker_player: models.Player,
    defender_player: models.Player,
) -> None:
    """Test that a lost raid only costs the attacker stamina"""
    set_roll(0.99999)

    response = client.post(
        raid_url(attacker_player.id), json={"defender_id": defender_player.id}
    )
    assert response.status_code == 200
    assert response.json()["success"] is False

    session.refresh(attacker_player)
    session.refresh(defender_player)
    assert attacker_player.stamina == 80
    assert attacker_player.balance == 1000
    assert attacker_player.win_count == 0
    assert defender_player.balance == 1000
    assert defender_player.defense_power == 50


def test_raid_insufficient_stamina(
    client: TestClient,
    session: Session,
    fixed_clock: None,
    set_roll: Callable[[float], None],
    defender_player: models.Player,
) -> None:
    attacker = create_random_player(session, stamina=5, stamina_updated_at=NOW)

    response = client.post(
        raid_url(attacker.id), json={"defender_id": defender_player.id}
    )
    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "InsufficientStamina"

    session.refresh(attacker)
    assert attacker.stamina == 5


def test_raid_fatigue_cooldown(
    client: TestClient,
    session: Session,
    fixed_clock: None,
    set_roll: Callable[[float], None],
    attacker_player: models.Player,
    defender_player: models.Player,
) -> None:
    """Test that the army rests after a streak of wins"""
    for _ in range(settings.FATIGUE_STREAK):
        response = client.post(
            raid_url(attacker_player.id), json={"defender_id": defender_player.id}
        )
        assert response.status_code == 200
        assert response.json()["success"] is True

    assert response.json()["cooldown_triggered"] is True

    response = client.post(
        raid_url(attacker_player.id), json={"defender_id": defender_player.id}
    )
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["reason"] == "OnCooldown"
    assert detail["retry_at"] is not None

    session.refresh(attacker_player)
    assert attacker_player.win_count == settings.FATIGUE_STREAK
    assert attacker_player.streak == 0


def test_raid_yourself(client: TestClient, attacker_player: models.Player) -> None:
    response = client.post(
        raid_url(attacker_player.id), json={"defender_id": attacker_player.id}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot raid yourself"


def test_raid_unknown_defender(
    client: TestClient, attacker_player: models.Player
) -> None:
    response = client.post(raid_url(attacker_player.id), json={"defender_id": 999})
    assert response.status_code == 404


def test_raid_unknown_attacker(
    client: TestClient, defender_player: models.Player
) -> None:
    response = client.post(raid_url(999), json={"defender_id": defender_player.id})
    assert response.status_code == 404


def test_preview_raid(
    client: TestClient,
    session: Session,
    fixed_clock: None,
    attacker_player: models.Player,
    defender_player: models.Player,
) -> None:
    """Test that a preview reports the odds and changes nothing"""
    response = client.get(
        f"{raid_url(attacker_player.id)}/preview",
        params={"defender_id": defender_player.id},
    )
    assert response.status_code == 200

    data = response.json()
    assert data["attack_power"] == pytest.approx(120.0)
    assert data["defense_power"] == 50
    assert data["unit_advantage_applied"] is True
    assert data["estimated_loot"] == 19
    assert 0.99 < data["win_probability"] < 1

    session.refresh(attacker_player)
    assert attacker_player.stamina == 100
    assert attacker_player.win_count == 0


def test_preview_raid_yourself(
    client: TestClient, attacker_player: models.Player
) -> None:
    response = client.get(
        f"{raid_url(attacker_player.id)}/preview",
        params={"defender_id": attacker_player.id},
    )
    assert response.status_code == 400


def test_raid_history(
    client: TestClient,
    fixed_clock: None,
    set_roll: Callable[[float], None],
    attacker_player: models.Player,
    defender_player: models.Player,
) -> None:
    """Test that every resolved raid is logged for both players"""
    for roll in (0.0, 0.99999):
        set_roll(roll)
        response = client.post(
            raid_url(attacker_player.id), json={"defender_id": defender_player.id}
        )
        assert response.status_code == 200

    response = client.get(raid_url(defender_player.id))
    assert response.status_code == 200

    data = response.json()
    assert data["count"] == 2
    # Newest first
    assert [record["success"] for record in data["data"]] == [False, True]
    won = data["data"][1]
    assert won["attacker_id"] == attacker_player.id
    assert won["defender_id"] == defender_player.id
    assert won["loot_amount"] == 19
    assert won["destruction_percent"] == 70.6


def test_rejected_raid_is_not_logged(
    client: TestClient,
    session: Session,
    fixed_clock: None,
    set_roll: Callable[[float], None],
    defender_player: models.Player,
) -> None:
    attacker = create_random_player(session, stamina=5, stamina_updated_at=NOW)

    response = client.post(
        raid_url(attacker.id), json={"defender_id": defender_player.id}
    )
    assert response.status_code == 409

    response = client.get(raid_url(attacker.id))
    assert response.status_code == 200
    assert response.json() == {"data": [], "count": 0}


def test_raid_history_player_not_found(client: TestClient) -> None:
    response = client.get(raid_url(999))
    assert response.status_code == 404
