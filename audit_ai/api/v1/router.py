from fastapi import APIRouter

from audit_ai.api.v1.endpoints import analysis, chat

api_router = APIRouter()

api_router.include_router(analysis.router, prefix="/analysis", tags=["Analysis"])
api_router.include_router(chat.router, prefix="/chat", tags=["Chat"])

__all__ = ["api_router"]
