"""Health check endpoints."""

from typing import Any, Dict

from fastapi import APIRouter

from cookstep.config import settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {"status": "healthy"}


@router.get("/ready")
async def readiness_check() -> Dict[str, Any]:
    """Readiness check; reports whether the LLM tier is configured."""
    return {
        "status": "ready",
        "llm_configured": bool(settings.gemini_api_key),
    }
