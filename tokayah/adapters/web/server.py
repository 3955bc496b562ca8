"""FastAPI health and status endpoints."""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from tokayah.config import __version__
from tokayah.domain.router import Router
from tokayah.infrastructure.usage import UsageTracker


class ServiceState:
    """Mutable readiness flag shared between the launcher and the web app."""

    def __init__(self):
        self.ready = False
        self.router: Optional[Router] = None
        self.usage_tracker: Optional[UsageTracker] = None

    def mark_ready(self, router: Router, usage_tracker: Optional[UsageTracker] = None):
        self.router = router
        self.usage_tracker = usage_tracker
        self.ready = True

    def mark_stopping(self):
        self.ready = False


class HealthResponse(BaseModel):
    status: str


class StatusResponse(BaseModel):
    version: str
    ready: bool
    mode: Optional[str] = None
    broadQuestions: bool = False
    responders: List[str] = []
    groupIds: List[str] = []
    usage: Optional[Dict[str, Any]] = None


def create_app(state: ServiceState) -> FastAPI:
    app = FastAPI(title="Tok Ayah")

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """200 once the bot identity is resolved and polling runs, 503 otherwise."""
        if not state.ready:
            return JSONResponse(status_code=503, content={"status": "starting"})
        return HealthResponse(status="ok")

    @app.get("/status", response_model=StatusResponse)
    async def status():
        router = state.router
        if router is None:
            return StatusResponse(version=__version__, ready=state.ready)
        return StatusResponse(
            version=__version__,
            ready=state.ready,
            mode=router.mode,
            broadQuestions=router.broad_questions,
            responders=list(router.responders()),
            groupIds=sorted(router.allowed_channels),
            usage=state.usage_tracker.get_status() if state.usage_tracker else None,
        )

    return app
