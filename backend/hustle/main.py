"""Main FastAPI application for the Hustle planner backend."""
from fastapi import FastAPI, Request

from hustle.api.routes.goals import router as goals_router
from hustle.api.routes.plan_preview import router as plan_preview_router
from hustle.core.config import settings
from hustle.core.logging import configure_logging
from hustle.core.middleware import RequestIDMiddleware
from hustle.observability.client import init_opik
from hustle.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(plan_preview_router)
app.include_router(goals_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
