"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check the Supabase connection and the users table."""
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Supabase not configured. Set TERRITORY_SUPABASE_URL and TERRITORY_SUPABASE_KEY environment variables.",
        )

    try:
        response = supabase.table(settings.users_table).select("id", count="exact").limit(1).execute()
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }

    users_count = response.count or 0
    return {
        "configured": True,
        "connected": True,
        "users_table": settings.users_table,
        "users_count": users_count,
        "message": f"Database connected. Found {users_count} rows in {settings.users_table}.",
    }
