import random
from collections.abc import Callable, Generator
from datetime import datetime
from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from raiders.core.db import engine
from raiders.game.raid import utc_now


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


def get_clock() -> Callable[[], datetime]:
    return utc_now


def get_rng() -> Callable[[], float]:
    return random.random


SessionDep = Annotated[Session, Depends(get_db)]
ClockDep = Annotated[Callable[[], datetime], Depends(get_clock)]
RngDep = Annotated[Callable[[], float], Depends(get_rng)]
