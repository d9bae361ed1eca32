"""HTTP service mode for the project intelligence engine."""

from .app import create_app, run_service

__all__ = ["create_app", "run_service"]
