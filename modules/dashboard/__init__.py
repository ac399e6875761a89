"""
Dashboard Module
================
FastAPI service exposing the submission projections to staff.

Usage:
    from modules.dashboard import create_app

    app = create_app()
"""

from .app import create_app
from .config import DashboardConfig, get_config, load_config
from .service import Dashboard

__all__ = ["create_app", "Dashboard", "DashboardConfig", "get_config", "load_config"]
