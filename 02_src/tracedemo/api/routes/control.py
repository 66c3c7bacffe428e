"""Control API routes."""

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException

from loadgen import TrafficGenerator


class StatusResponse(BaseModel):
    """Response model for status."""

    status: str


class GeneratorStatusResponse(BaseModel):
    """Response model for generator state."""

    running: bool
    target: str
    interval_seconds: float
    ticks: int
    failures: int


def create_control_router(generator: TrafficGenerator | None) -> APIRouter:
    """Create control router."""
    router = APIRouter(prefix="/api/control", tags=["control"])

    def _require_generator() -> TrafficGenerator:
        if generator is None:
            raise HTTPException(status_code=404, detail="generator not configured")
        return generator

    @router.get("/generator", response_model=GeneratorStatusResponse)
    async def generator_status() -> dict:
        """Report generator state."""
        gen = _require_generator()
        return {
            "running": gen.running,
            "target": gen.target_url,
            "interval_seconds": gen.interval,
            "ticks": gen.ticks,
            "failures": gen.failures,
        }

    @router.post("/generator/start", response_model=StatusResponse)
    async def start_generator() -> dict:
        """Start the periodic request generator."""
        gen = _require_generator()
        try:
            await gen.start()
            return {"status": "ok"}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.post("/generator/stop", response_model=StatusResponse)
    async def stop_generator() -> dict:
        """Stop the periodic request generator."""
        gen = _require_generator()
        try:
            await gen.stop()
            return {"status": "ok"}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    return router
