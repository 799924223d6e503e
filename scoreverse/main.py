import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from scoreverse.api.endpoints import ai as ai_endpoints
from scoreverse.api.endpoints import auth as auth_endpoints
from scoreverse.api.endpoints import games as game_endpoints
from scoreverse.api.endpoints import leaderboards as leaderboard_endpoints
from scoreverse.api.endpoints import matches as match_endpoints
from scoreverse.api.endpoints import players as player_endpoints
from scoreverse.api.endpoints import share as share_endpoints
from scoreverse.api.endpoints import spaces as space_endpoints
from scoreverse.api.endpoints import stats as stats_endpoints
from scoreverse.api.endpoints import tournaments as tournament_endpoints
from scoreverse.api.endpoints import users as user_endpoints
from scoreverse.core.exceptions import StoreWriteError
from scoreverse.core.logging import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="ScoreVerse API")

# Include routers
app.include_router(auth_endpoints.router, prefix="/auth", tags=["Authentication"])
app.include_router(user_endpoints.router, prefix="/users", tags=["Users"])
app.include_router(player_endpoints.router, prefix="/players", tags=["Players"])
app.include_router(game_endpoints.router, prefix="/games", tags=["Games"])
app.include_router(match_endpoints.router, prefix="/matches", tags=["Matches"])
app.include_router(space_endpoints.router, prefix="/spaces", tags=["Spaces"])
app.include_router(tournament_endpoints.router, prefix="/tournaments", tags=["Tournaments"])
app.include_router(leaderboard_endpoints.router, prefix="/leaderboards", tags=["Leaderboards"])
app.include_router(stats_endpoints.router, prefix="/stats", tags=["Stats"])
app.include_router(ai_endpoints.router, prefix="/ai", tags=["AI"])
app.include_router(share_endpoints.router, prefix="/share", tags=["Share"])


@app.exception_handler(StoreWriteError)
async def store_write_error_handler(request: Request, exc: StoreWriteError):
    logger.error("Write failed while handling %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Could not save your changes. Please try again."})


@app.get("/")
async def root():
    return {"message": "ScoreVerse API"}


if __name__ == "__main__":
    uvicorn.run("scoreverse.main:app", host="0.0.0.0", port=8000, reload=True)
