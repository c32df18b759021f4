import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from raiders import crud, models  # noqa: E402
from raiders.api.deps import get_db  # noqa: E402
from raiders.core.config import settings  # noqa: E402
from raiders.core.db import engine, init_db  # noqa: E402
from raiders.game.units import UnitType  # noqa: E402
from raiders.main import app  # noqa: E402

assert settings.ENVIRONMENT == "test"
assert str(engine.url) == "sqlite://"


@pytest.fixture(autouse=True)
def session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        SQLModel.metadata.drop_all(engine)
        init_db(session)
        yield session
        session.commit()


@pytest.fixture()
def client(session: Session) -> Generator[TestClient, None, None]:
    def get_session_override():
        return session

    app.dependency_overrides[get_db] = get_session_override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def attacker_player(session: Session) -> models.Player:
    return crud.Player.create(
        session=session, username="attacker", unit_type=UnitType.INFANTRY
    )


@pytest.fixture()
def defender_player(session: Session) -> models.Player:
    return crud.Player.create(
        session=session, username="defender", unit_type=UnitType.ARCHER
    )
