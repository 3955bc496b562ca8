"""Web adapter — health and status endpoints."""

from tokayah.adapters.web.server import ServiceState, create_app

__all__ = ["ServiceState", "create_app"]
