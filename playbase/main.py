from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from . import __version__
from .core.events import startup_event, shutdown_event
from .routes import health, leaderboard, score, season

@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup_event()
    yield
    await shutdown_event()

app = FastAPI(
    default_response_class=ORJSONResponse,
    title="Playbase Leaderboard Service",
    description="Reaction-time leaderboards stored as versioned JSON documents in a GitHub repository",
    version=__version__,
    lifespan=lifespan
)

app.include_router(score.router)
app.include_router(leaderboard.router)
app.include_router(season.router)
app.include_router(health.router)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "playbase.main:app",
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
