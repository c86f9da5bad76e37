from fastapi import APIRouter

from app.api.routes import actions, ceremony, game, npcs

api_router = APIRouter()
api_router.include_router(game.router)
api_router.include_router(actions.router)
api_router.include_router(ceremony.router)
api_router.include_router(npcs.router)
