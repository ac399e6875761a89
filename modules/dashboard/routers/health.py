"""
Health Check Endpoint
"""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Health check endpoint"""
    dashboard = getattr(request.app.state, "dashboard", None)
    if dashboard is None:
        return {"status": "starting", "feeds": {}}

    feeds = dashboard.feed_states()
    return {
        "status": "healthy" if "error" not in feeds.values() else "degraded",
        "store": type(dashboard.store).__name__,
        "mail": "configured" if getattr(dashboard.mailer, "is_configured", True) else "unconfigured",
        "feeds": feeds,
    }
