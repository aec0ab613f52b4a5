"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def health_check(request: Request) -> dict[str, Any]:
    """Return application status and the number of registered NPCs."""
    registry = getattr(request.app.state, "npc_registry", None)
    return {"status": "ok", "npcs": len(registry) if registry is not None else 0}
