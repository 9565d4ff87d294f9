from fastapi import APIRouter

from agent_chat.app.api.routes import chat, threads

api_router = APIRouter()
api_router.include_router(chat.router)
api_router.include_router(threads.router)
