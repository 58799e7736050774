"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and delivery fee storage status."""
    from ...db.supabase import get_supabase_client
    from ...persistence.fee_configs import list_fee_configs

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set OPS_SUPABASE_URL and OPS_SUPABASE_KEY environment variables.",
            "fee_configs_count": 0,
        }

    configs = list_fee_configs(supabase)
    if configs is None:
        return {
            "configured": True,
            "connected": False,
            "message": "Database configured but delivery fee configs could not be read.",
        }
    return {
        "configured": True,
        "connected": True,
        "fee_configs_count": len(configs),
        "message": f"Database connected. Found {len(configs)} delivery fee configs.",
    }
