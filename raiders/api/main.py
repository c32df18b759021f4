from fastapi import APIRouter

from raiders.api.routes import players, raids

api_router = APIRouter()

# Game API
api_router.include_router(players.router)
api_router.include_router(raids.router)
