import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from arena.config import settings
from arena.routers import battles, bot_teams, runs, snapshots, teams

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Roguelike Arena",
    description="Asynchronous PvP matchmaking: team validation, opponent resolution and battle records",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(teams.router)
app.include_router(runs.router)
app.include_router(battles.router)
app.include_router(snapshots.router)
app.include_router(bot_teams.router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
